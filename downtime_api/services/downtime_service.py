import logging
from datetime import datetime
from typing import Any, Mapping, Optional

from ..config import settings
from ..errors import ValidationError
from ..repositories.downtime_store import DowntimeStore
from ..schemas.downtime import DowntimeChanges, DowntimeOut, DowntimePage
from .audit_logger import AuditLogger

logger = logging.getLogger(__name__)

DOWNTIME_TABLE = "tbl_downtime_logs"


class DowntimeService:
    """Validates requests and drives DowntimeStore. Keeps no state between calls.

    When an AuditLogger is attached, committed changes are handed to it
    afterwards; whatever happens to the audit write does not affect the result.
    """

    def __init__(self, store: DowntimeStore, audit_logger: Optional[AuditLogger] = None,
                 default_actor: str = settings.DEFAULT_ACTOR):
        self.store = store
        self.audit_logger = audit_logger
        self.default_actor = default_actor

    def create(self, system_id: Optional[int], from_time: Optional[datetime],
               to_time: Optional[datetime], reason: Optional[str] = None,
               actor: Optional[str] = None) -> int:
        if not system_id:
            raise ValidationError("System ID is required")
        if not from_time:
            raise ValidationError("Start time is required")
        if not to_time:
            raise ValidationError("End time is required")

        actor = actor or self.default_actor
        reason = reason or ""
        window_id = self.store.create(system_id, from_time, to_time, reason, actor)

        self._audit(
            f"CREATE by {actor}",
            "system_id,from_time,to_time,reason",
            {"id": "New record. No previous value"},
            {
                "id": window_id,
                "system_id": system_id,
                "from_time": from_time.isoformat(),
                "to_time": to_time.isoformat(),
                "reason": reason,
            },
        )
        return window_id

    def list(self, page: int = 1, limit: int = 50) -> DowntimePage:
        return self.store.list(page, limit)

    def get(self, window_id: int) -> DowntimeOut:
        return self.store.get_by_id(window_id)

    def update(self, window_id: int, payload: Mapping[str, Any], actor: Optional[str] = None) -> bool:
        """Update the finished/archived flags from a raw request payload.

        Keys other than the two flags, and flag values other than 0/1, are
        ignored; if nothing is left the store rejects the update.
        """
        actor = actor or self.default_actor
        changes = DowntimeChanges.from_payload(payload)
        diff = self.store.update(window_id, changes, actor)

        for column, (old, new) in diff.items():
            if old == new:
                continue
            self._audit(f"UPDATE by {actor}", column, {column: old}, {column: new})
        return True

    def _audit(self, action_taken: str, column_name: str, from_value, to_value):
        if self.audit_logger is None:
            return
        self.audit_logger.record(action_taken, DOWNTIME_TABLE, column_name, from_value, to_value)
