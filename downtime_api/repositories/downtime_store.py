"""
Repository for downtime windows.

DowntimeStore is the only code that touches tbl_downtime_logs. Each public
method opens its own session; mutations commit as a whole or roll back as a
whole, so callers never observe a half-written window.
"""
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from ..database import utcnow, to_utc_naive
from ..errors import DowntimeError, InternalError, NotFoundError, ValidationError
from ..models.downtime_window import DowntimeWindow
from ..models.system import System
from ..schemas.downtime import DowntimeChanges, DowntimeOut, DowntimePage

logger = logging.getLogger(__name__)

SWEEP_ACTOR = "SYSTEM"
MAX_PAGE_SIZE = 100
NO_VALID_FIELDS = "No valid fields to update. Only 'finished' and 'archived' can be updated."


class DowntimeStore:
    def __init__(self, session_factory, clock: Callable[[], datetime] = utcnow):
        self._session_factory = session_factory
        self._clock = clock

    @contextmanager
    def _session(self, action: str):
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except DowntimeError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"❌ Failed to {action}: {e}")
            raise InternalError(f"Failed to {action}") from e
        finally:
            db.close()

    def create(self, system_id: int, from_time: datetime, to_time: datetime,
               reason: Optional[str], actor: str) -> int:
        """Insert a new window for an existing system and return its id.

        The system lookup runs inside the same transaction as the insert, so a
        missing system leaves the table untouched.
        """
        with self._session("create downtime") as db:
            if db.get(System, system_id) is None:
                raise NotFoundError("Invalid System Selected")

            now = self._clock()
            window = DowntimeWindow(
                system_id=system_id,
                from_time=to_utc_naive(from_time),
                to_time=to_utc_naive(to_time),
                reason=reason or "",
                finished=0,
                archived=0,
                created_at=now,
                created_by=actor,
                updated_at=now,
                updated_by=actor,
            )
            db.add(window)
            db.flush()
            window_id = window.id

        logger.info(f"✅ Downtime {window_id} scheduled for system {system_id} by {actor}")
        return window_id

    def list(self, page: int = 1, page_size: int = 50) -> DowntimePage:
        """Most recent windows first, each with its system's display name."""
        if page < 1:
            raise ValidationError("Page number must be at least 1")
        if page_size < 1 or page_size > MAX_PAGE_SIZE:
            raise ValidationError(f"Limit must be between 1 and {MAX_PAGE_SIZE}")

        offset = (page - 1) * page_size
        with self._session("fetch downtimes") as db:
            total = db.query(func.count(DowntimeWindow.id)).scalar() or 0
            rows = (
                db.query(DowntimeWindow, System.name)
                .outerjoin(System, System.id == DowntimeWindow.system_id)
                .order_by(DowntimeWindow.id.desc())
                .offset(offset)
                .limit(page_size)
                .all()
            )
            return DowntimePage(
                rows=[_to_out(window, system_name=name) for window, name in rows],
                total_count=total,
            )

    def get_by_id(self, window_id: int) -> DowntimeOut:
        with self._session("fetch downtime") as db:
            row = (
                db.query(DowntimeWindow, System.name, System.url)
                .outerjoin(System, System.id == DowntimeWindow.system_id)
                .filter(DowntimeWindow.id == window_id)
                .first()
            )
            if row is None:
                raise NotFoundError("Downtime log not found")
            window, name, url = row
            return _to_out(window, system_name=name, system_url=url)

    def update(self, window_id: int, changes: DowntimeChanges, actor: str) -> dict:
        """Apply a flag change and return {column: (old, new)} for what was written."""
        with self._session("update downtime") as db:
            window = (
                db.query(DowntimeWindow)
                .filter(DowntimeWindow.id == window_id)
                .with_for_update()
                .first()
            )
            if window is None:
                raise NotFoundError("Downtime log not found")

            if changes.is_empty:
                raise ValidationError(NO_VALID_FIELDS)

            columns = changes.columns()

            diff = {key: (getattr(window, key), value) for key, value in columns.items()}
            for key, value in columns.items():
                setattr(window, key, value)
            window.updated_at = self._clock()
            window.updated_by = actor

        logger.info(f"✅ Downtime {window_id} updated by {actor}: {columns}")
        return diff

    def finish_expired(self, now: Optional[datetime] = None) -> int:
        """Mark every open, unarchived window whose end time has passed as finished.

        Single conditional UPDATE: rows that are already finished or archived
        no longer match, so running it again changes nothing.
        """
        now = now or self._clock()
        with self._session("auto-update completed downtimes") as db:
            updated = (
                db.query(DowntimeWindow)
                .filter(
                    DowntimeWindow.finished == 0,
                    DowntimeWindow.archived == 0,
                    DowntimeWindow.to_time < now,
                )
                .update(
                    {
                        DowntimeWindow.finished: 1,
                        DowntimeWindow.updated_at: now,
                        DowntimeWindow.updated_by: SWEEP_ACTOR,
                    },
                    synchronize_session=False,
                )
            )
        return updated


def _to_out(window: DowntimeWindow, system_name=None, system_url=None) -> DowntimeOut:
    out = DowntimeOut.model_validate(window)
    return out.model_copy(update={"system_name": system_name, "system_url": system_url})
