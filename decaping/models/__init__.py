"""SQLAlchemy models for the decaping operations tracker."""

from .user import User
from .machine import Machine
from .operation import Operation, OperationDayCounter
from .safety_incident import SafetyIncident
from .document import Document
from .activity import Activity
from .connection_log import ConnectionLog

__all__ = [
    "User",
    "Machine",
    "Operation",
    "OperationDayCounter",
    "SafetyIncident",
    "Document",
    "Activity",
    "ConnectionLog",
]
