import threading
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from decaping.database.base import Base


def _normalise_url(url: str) -> str:
    if url.startswith("postgresql+asyncpg://"):
        return url.replace("postgresql+asyncpg://", "postgresql+psycopg2://")
    if url.startswith("postgresql://") and "psycopg2" not in url:
        return url.replace("postgresql://", "postgresql+psycopg2://")
    return url


class Database:
    """Engine and session factory for one application instance.

    Built once at startup and handed to request handlers through
    ``app.state``. The default ``sqlite://`` URL keeps everything in memory
    for the lifetime of the process on a single shared connection, so units
    of work on that backend are serialised.
    """

    def __init__(self, url: str):
        url = _normalise_url(url)
        self.url = url

        if url.startswith("sqlite"):
            kwargs = {"connect_args": {"check_same_thread": False}}
            if url in ("sqlite://", "sqlite:///:memory:"):
                kwargs["poolclass"] = StaticPool
            self._lock = threading.Lock()
        else:
            kwargs = {
                "pool_pre_ping": True,
                "pool_timeout": 30,
                "pool_recycle": 3600,
            }
            self._lock = None

        self.engine = create_engine(url, **kwargs)
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine,
        )

    def create_all(self) -> None:
        """Create all tables (there is no migration tooling; schema follows the models)."""
        import decaping.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """One unit of work. Anything not committed is rolled back on exit."""
        if self._lock is not None:
            self._lock.acquire()
        db = self.SessionLocal()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
            if self._lock is not None:
                self._lock.release()

    def dispose(self) -> None:
        self.engine.dispose()
