"""Application configuration loaded from environment variables."""

from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # In-process SQLite memory database unless a server database is configured
    DATABASE_URL: str = "sqlite://"

    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_HOURS: int = 24

    BCRYPT_ROUNDS: int = 12

    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:5000",
    ]

    API_PREFIX: str = "/api"

    # Calendar used for operation ids and the performance trend
    SITE_TIMEZONE: str = "UTC"

    SEED_DEMO_DATA: bool = True
    BOOTSTRAP_ADMIN_USERNAME: str = "admin"
    BOOTSTRAP_ADMIN_PASSWORD: str = "admin123"
    BOOTSTRAP_ADMIN_NAME: str = "Administrator"

    METRICS_ENABLED: bool = True
    ENVIRONMENT: str = "development"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
