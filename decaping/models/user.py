from sqlalchemy import Column, Integer, String

from decaping.database.base import Base, UTCDateTime


class User(Base):
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, nullable=False, unique=True, index=True)
    password = Column(String, nullable=False)  # bcrypt hash
    name = Column(String, nullable=False)
    role = Column(String, nullable=False, default="supervisor")  # admin, supervisor
    last_login = Column(UTCDateTime, nullable=True)
