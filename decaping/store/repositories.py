"""Keyed collections for every entity kind.

Lookups on a missing id return ``None``; callers decide how to signal it.
Updates are shallow, last-write-wins merges of the fields given.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from decaping.core import clock
from decaping.core.errors import InvariantViolation
from decaping.models import (
    Activity,
    ConnectionLog,
    Document,
    Machine,
    Operation,
    SafetyIncident,
    User,
)
from decaping.models.enums import UserRole
from decaping.store.operation_ids import OperationIdAllocator

# Largest value an INTEGER primary key can hold
MAX_ID = 2**63 - 1


class Repository:
    model: Any = None

    def __init__(self, db: Session):
        self.db = db

    def list(self) -> List[Any]:
        return self.db.query(self.model).order_by(self.model.id).all()

    def get(self, entity_id: int) -> Optional[Any]:
        if not 1 <= entity_id <= MAX_ID:
            return None
        return self.db.get(self.model, entity_id)

    def create(self, fields: Dict[str, Any]) -> Any:
        obj = self.model(**fields)
        self.db.add(obj)
        self.db.flush()
        return obj

    def update(self, entity_id: int, fields: Dict[str, Any]) -> Optional[Any]:
        obj = self.get(entity_id)
        if obj is None:
            return None
        for key, value in fields.items():
            setattr(obj, key, value)
        self.db.flush()
        return obj

    def count(self) -> int:
        return self.db.query(func.count(self.model.id)).scalar()


class UserRepository(Repository):
    model = User

    def get_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def count_admins(self) -> int:
        return self.db.query(func.count(User.id)).filter(User.role == UserRole.ADMIN.value).scalar()

    def update(self, entity_id: int, fields: Dict[str, Any]) -> Optional[User]:
        user = self.get(entity_id)
        if user is None:
            return None
        new_role = fields.get("role", user.role)
        if user.role == UserRole.ADMIN.value and new_role != UserRole.ADMIN.value:
            self._guard_last_admin()
        return super().update(entity_id, fields)

    def delete(self, entity_id: int) -> bool:
        user = self.get(entity_id)
        if user is None:
            return False
        if user.role == UserRole.ADMIN.value:
            self._guard_last_admin()
        self.db.delete(user)
        self.db.flush()
        return True

    def _guard_last_admin(self) -> None:
        if self.count_admins() <= 1:
            raise InvariantViolation("At least one admin must remain")


class MachineRepository(Repository):
    model = Machine

    def list_by_method(self, method: str) -> List[Machine]:
        return (
            self.db.query(Machine)
            .filter(Machine.decaping_method == method)
            .order_by(Machine.id)
            .all()
        )


class OperationRepository(Repository):
    model = Operation

    def __init__(self, db: Session, allocator: OperationIdAllocator, site_timezone: str = "UTC"):
        super().__init__(db)
        self.allocator = allocator
        self.site_timezone = site_timezone

    def create(self, fields: Dict[str, Any], day: Optional[date] = None) -> Operation:
        """Persist a new operation, assigning ``operation_id`` and ``created_at``."""
        created_at = clock.now()
        fields = dict(fields)
        day = day or clock.site_date(self.site_timezone, created_at)
        fields["operation_id"] = self.allocator.allocate(day)
        fields["created_at"] = created_at
        return super().create(fields)

    def list_by_method(self, method: str) -> List[Operation]:
        return (
            self.db.query(Operation)
            .filter(Operation.decaping_method == method)
            .order_by(Operation.id)
            .all()
        )

    def find_by_operation_id(self, operation_id: str) -> Optional[Operation]:
        return self.db.query(Operation).filter(Operation.operation_id == operation_id).first()

    def list_between(self, start: datetime, end: datetime) -> List[Operation]:
        return (
            self.db.query(Operation)
            .filter(Operation.date >= start, Operation.date < end)
            .all()
        )


class SafetyIncidentRepository(Repository):
    model = SafetyIncident

    def create(self, fields: Dict[str, Any]) -> SafetyIncident:
        return super().create({**fields, "created_at": clock.now()})

    def count_since(self, since: datetime) -> int:
        return (
            self.db.query(func.count(SafetyIncident.id))
            .filter(SafetyIncident.date >= since)
            .scalar()
        )


class DocumentRepository(Repository):
    model = Document


class _AppendOnlyLog(Repository):
    """Newest first; rows without a timestamp sort as oldest."""

    def _newest_first(self, query, limit: Optional[int]):
        query = query.order_by(
            self.model.timestamp.is_(None),
            self.model.timestamp.desc(),
            self.model.id.desc(),
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def list(self, limit: Optional[int] = None) -> List[Any]:
        return self._newest_first(self.db.query(self.model), limit)

    def list_by_user(self, user_id: int, limit: Optional[int] = None) -> List[Any]:
        return self._newest_first(
            self.db.query(self.model).filter(self.model.user_id == user_id), limit
        )

    def create(self, fields: Dict[str, Any]) -> Any:
        return super().create({**fields, "timestamp": clock.now()})


class ActivityRepository(_AppendOnlyLog):
    model = Activity

    def update(self, entity_id, fields):
        raise InvariantViolation("Activities are append-only")


class ConnectionLogRepository(_AppendOnlyLog):
    model = ConnectionLog

    def latest_open(self, user_id: int) -> Optional[ConnectionLog]:
        return (
            self.db.query(ConnectionLog)
            .filter(ConnectionLog.user_id == user_id, ConnectionLog.logout_time.is_(None))
            .order_by(
                ConnectionLog.timestamp.is_(None),
                ConnectionLog.timestamp.desc(),
                ConnectionLog.id.desc(),
            )
            .first()
        )

    def update(self, entity_id, fields):
        raise InvariantViolation("Connection logs only change through close()")

    def close(self, log: ConnectionLog, logout_time: datetime, duration: int) -> ConnectionLog:
        log.logout_time = logout_time
        log.session_duration = duration
        self.db.flush()
        return log
