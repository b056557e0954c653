from sqlalchemy.orm import Session

from decaping.store.operation_ids import OperationIdAllocator
from decaping.store.repositories import (
    ActivityRepository,
    ConnectionLogRepository,
    DocumentRepository,
    MachineRepository,
    OperationRepository,
    SafetyIncidentRepository,
    UserRepository,
)


class EntityStore:
    """All entity collections over one unit of work.

    Nothing is visible to other requests until ``commit()``; a unit of work
    that is never committed leaves no trace.
    """

    def __init__(self, db: Session, site_timezone: str = "UTC"):
        self.db = db
        self.site_timezone = site_timezone
        self.operation_ids = OperationIdAllocator(db)

        self.users = UserRepository(db)
        self.machines = MachineRepository(db)
        self.operations = OperationRepository(db, self.operation_ids, site_timezone)
        self.safety_incidents = SafetyIncidentRepository(db)
        self.documents = DocumentRepository(db)
        self.activities = ActivityRepository(db)
        self.connection_logs = ConnectionLogRepository(db)

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
