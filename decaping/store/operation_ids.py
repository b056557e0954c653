"""Date-scoped, human-readable identifiers for operations: OP-YYYYMMDD-NNN.

Sequence numbers come from a persisted per-day counter that is incremented
atomically inside the creating transaction, so two creations on the same
day can never observe the same count.
"""

from datetime import date

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from decaping.models.operation import OperationDayCounter

PREFIX = "OP"


def format_operation_id(day: date, seq: int) -> str:
    # Past 999 the suffix simply widens.
    return f"{PREFIX}-{day.strftime('%Y%m%d')}-{seq:03d}"


class OperationIdAllocator:
    def __init__(self, db: Session):
        self.db = db

    def allocate(self, day: date) -> str:
        key = day.strftime("%Y%m%d")
        self._ensure_counter(key)
        self.db.execute(
            update(OperationDayCounter)
            .where(OperationDayCounter.day == key)
            .values(last_seq=OperationDayCounter.last_seq + 1)
            .execution_options(synchronize_session=False)
        )
        seq = self.db.execute(
            select(OperationDayCounter.last_seq).where(OperationDayCounter.day == key)
        ).scalar_one()
        return format_operation_id(day, seq)

    def _ensure_counter(self, key: str) -> None:
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            if self.db.get(OperationDayCounter, key) is None:
                self.db.add(OperationDayCounter(day=key, last_seq=0))
                self.db.flush()
            return

        self.db.execute(
            insert(OperationDayCounter)
            .values(day=key, last_seq=0)
            .on_conflict_do_nothing(index_elements=["day"])
        )
