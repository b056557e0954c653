"""
Role-based access policy for mutating routes.

- Admin: everything.
- Supervisor: may record operations and safety incidents, and edit the
  operations they created. Machines and users are admin-only.
- Read-only routes are open to every authenticated caller.

Checks run before any mutation, so a denial never leaves a partial write.
"""

import enum
import logging
from typing import Optional

from decaping.core.errors import AuthorizationError
from decaping.core.security import AuthUser

logger = logging.getLogger(__name__)


class Action(str, enum.Enum):
    CREATE_MACHINE = "create_machine"
    UPDATE_MACHINE = "update_machine"
    CREATE_OPERATION = "create_operation"
    UPDATE_OPERATION = "update_operation"
    CREATE_SAFETY_INCIDENT = "create_safety_incident"
    MANAGE_USERS = "manage_users"
    VIEW_AUDIT = "view_audit"
    READ = "read"


ADMIN_ONLY = {
    Action.CREATE_MACHINE,
    Action.UPDATE_MACHINE,
    Action.MANAGE_USERS,
    Action.VIEW_AUDIT,
}


def is_allowed(user: AuthUser, action: Action, owner_id: Optional[int] = None) -> bool:
    if user.is_admin:
        return True
    if action in ADMIN_ONLY:
        return False
    if action == Action.UPDATE_OPERATION:
        return owner_id is not None and owner_id == user.id
    return True


def authorize(user: AuthUser, action: Action, owner_id: Optional[int] = None) -> None:
    """Raise AuthorizationError unless ``user`` may perform ``action``."""
    if not is_allowed(user, action, owner_id):
        logger.warning(
            "Access denied for user %s (%s) on %s", user.username, user.role, action.value
        )
        raise AuthorizationError("Permission denied")
