from typing import Iterator

from fastapi import Request
from sqlalchemy.orm import Session

from decaping.database.engine import Database


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_db(request: Request) -> Iterator[Session]:
    """Provides a request-scoped database session."""
    with get_database(request).session() as db:
        yield db
