import logging
from datetime import datetime
from typing import Callable

from ..database import utcnow
from ..repositories.downtime_store import DowntimeStore

logger = logging.getLogger(__name__)


class ReconciliationSweeper:
    """Moves expired downtime windows to finished.

    Has no state of its own; the store's conditional bulk update does the
    work, so it is safe to trigger from the scheduler, cron and the API at
    the same time.
    """

    def __init__(self, store: DowntimeStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.clock = clock

    def sweep(self) -> int:
        now = self.clock()
        updated_count = self.store.finish_expired(now)
        if updated_count:
            logger.info(f"🧹 Sweep at {now.isoformat()} finished {updated_count} expired downtime(s)")
        else:
            logger.debug(f"Sweep at {now.isoformat()} found nothing to finish")
        return updated_count
