"""Audit trail: who did what, and when.

Activities are appended for every mutating action and connection logs for
every login/logout. Both are written through the caller's unit of work, so
they are committed together with the change they describe and disappear
with it if the request fails.
"""

import logging
import math
from typing import List, Optional

from decaping.core import clock
from decaping.models import Activity, ConnectionLog
from decaping.store.entity_store import EntityStore

logger = logging.getLogger(__name__)


class AuditService:
    def __init__(self, store: EntityStore):
        self.store = store

    def record_activity(
        self,
        type: str,
        description: str,
        user_id: int,
        related_entity_id: Optional[int] = None,
        related_entity_type: Optional[str] = None,
        ip_address: Optional[str] = None,
        action_status: str = "success",
    ) -> Activity:
        activity = self.store.activities.create(
            {
                "type": type,
                "description": description,
                "user_id": user_id,
                "related_entity_id": related_entity_id,
                "related_entity_type": related_entity_type,
                "ip_address": ip_address,
                "action_status": action_status,
            }
        )
        logger.info("Activity %s by user %s: %s", type, user_id, description)
        return activity

    def record_login(
        self,
        user_id: int,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        status: str = "success",
    ) -> ConnectionLog:
        log = self.store.connection_logs.create(
            {
                "user_id": user_id,
                "ip_address": ip_address,
                "user_agent": user_agent,
                "status": status,
            }
        )
        self.store.users.update(user_id, {"last_login": log.timestamp})
        logger.info("User %s logged in (session %s)", user_id, log.id)
        return log

    def record_logout(self, user_id: int, session_id: Optional[int] = None) -> Optional[ConnectionLog]:
        """Close an open session of ``user_id``.

        With ``session_id`` only that session is closed; without it the most
        recent open session is. Returns None when there is nothing to close.
        """
        if session_id is not None:
            log = self.store.connection_logs.get(session_id)
            if log is None or log.user_id != user_id or log.logout_time is not None:
                return None
        else:
            log = self.store.connection_logs.latest_open(user_id)
            if log is None:
                return None

        logout_time = clock.now()
        duration = math.floor((logout_time - log.timestamp).total_seconds())
        self.store.connection_logs.close(log, logout_time, duration)
        logger.info("User %s logged out (session %s, %ss)", user_id, log.id, duration)
        return log

    def list_activities(self, limit: Optional[int] = None) -> List[Activity]:
        return self.store.activities.list(limit)

    def list_activities_by_user(self, user_id: int, limit: Optional[int] = None) -> List[Activity]:
        return self.store.activities.list_by_user(user_id, limit)

    def list_connection_logs(self, limit: Optional[int] = None) -> List[ConnectionLog]:
        return self.store.connection_logs.list(limit)

    def list_connection_logs_by_user(self, user_id: int, limit: Optional[int] = None) -> List[ConnectionLog]:
        return self.store.connection_logs.list_by_user(user_id, limit)
