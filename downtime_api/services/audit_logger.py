"""
Background writer for the append-only audit log (tbl_logs).

Producers call AuditLogger.record(), which copies the event onto a bounded
queue and returns immediately with a Future. A single long-lived thread
drains the queue, writes one row per event, and resolves the Future with a
terminal status. Audit failures are logged and never raised to producers.
"""
import copy
import logging
import queue
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..database import utcnow
from ..models.audit_log import AuditLogEntry

logger = logging.getLogger(__name__)

AUDIT_SUCCESS = "success"
AUDIT_SKIPPED = "skipped"
AUDIT_FAILED = "failed"


@dataclass
class AuditEvent:
    action_taken: Optional[str]
    table_name: Optional[str]
    column_name: Optional[str]
    from_value: Any
    to_value: Any
    reply: Future = field(default_factory=Future, repr=False)

    def is_complete(self) -> bool:
        return not any(
            _is_blank(value)
            for value in (self.action_taken, self.table_name, self.column_name,
                          self.from_value, self.to_value)
        )


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (dict, list, tuple, set)):
        return len(value) == 0
    return False


_STOP = object()


class AuditLogger:
    """Events recorded before start() wait in the queue and are written once
    the writer runs. After stop() the logger is closed: record() answers
    "failed" at once until start() is called again.
    """

    # How long the writer waits on an empty queue before re-checking for stop
    poll_interval = 0.5

    def __init__(self, session_factory, max_queue_size: int = 1000,
                 clock: Callable[[], datetime] = utcnow):
        self._session_factory = session_factory
        self._clock = clock
        self._queue: queue.Queue = queue.Queue(maxsize=max_queue_size)
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._closed = False

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        with self._lock:
            self._closed = False
        if self.running:
            return
        self._thread = threading.Thread(target=self._run, name="audit-log-writer", daemon=True)
        self._thread.start()
        logger.info("Audit log writer started")

    def stop(self, timeout: float = 5.0):
        """Close the logger, let the writer finish what is queued, then end the thread."""
        with self._lock:
            self._closed = True

        if self.running:
            try:
                self._queue.put(_STOP, timeout=timeout)
            except queue.Full:
                # The writer exits on its own once the queue is drained
                logger.warning(f"⚠️ Audit queue still full after {timeout:.1f}s, writer will stop when drained")
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning(f"⚠️ Audit log writer did not stop within {timeout:.1f}s")
                return
            logger.info("Audit log writer stopped")
        self._thread = None
        self._fail_leftovers()

    def flush(self):
        """Block until every event queued so far has been handled.

        No-op while the writer is not running.
        """
        if self.running:
            self._queue.join()

    def record(self, action_taken, table_name, column_name, from_value, to_value) -> Future:
        """Queue one change for writing. Never blocks and never raises.

        The returned Future resolves to "success", "skipped" (a field was
        missing or empty, nothing written) or "failed".
        """
        event = AuditEvent(
            action_taken=action_taken,
            table_name=table_name,
            column_name=column_name,
            from_value=copy.deepcopy(from_value),
            to_value=copy.deepcopy(to_value),
        )
        with self._lock:
            if self._closed:
                logger.warning(f"⚠️ Audit log writer is stopped, dropping '{action_taken}' on {table_name}.{column_name}")
                event.reply.set_result(AUDIT_FAILED)
                return event.reply
            try:
                self._queue.put_nowait(event)
            except queue.Full:
                logger.warning(f"⚠️ Audit queue full, dropping '{action_taken}' on {table_name}.{column_name}")
                event.reply.set_result(AUDIT_FAILED)
        return event.reply

    def _run(self):
        while True:
            try:
                event = self._queue.get(timeout=self.poll_interval)
            except queue.Empty:
                if self._closed:
                    return
                continue
            try:
                if event is _STOP:
                    return
                # False when the producer cancelled its reply
                if not event.reply.set_running_or_notify_cancel():
                    logger.debug(f"Audit event cancelled before writing: {event}")
                    continue
                event.reply.set_result(self._write(event))
            except Exception as e:
                logger.exception(f"❌ Audit log writer failed handling an event: {e}")
                if isinstance(event, AuditEvent) and not event.reply.done():
                    event.reply.set_result(AUDIT_FAILED)
            finally:
                self._queue.task_done()

    def _fail_leftovers(self):
        """Answer events that no writer will pick up any more."""
        while True:
            try:
                event = self._queue.get_nowait()
            except queue.Empty:
                return
            if event is not _STOP and event.reply.set_running_or_notify_cancel():
                event.reply.set_result(AUDIT_FAILED)
            self._queue.task_done()

    def _write(self, event: AuditEvent) -> str:
        if not event.is_complete():
            logger.debug(f"Skipping incomplete audit event: {event}")
            return AUDIT_SKIPPED

        db = self._session_factory()
        try:
            db.add(AuditLogEntry(
                action_taken=event.action_taken,
                table_name=event.table_name,
                column_name=event.column_name,
                from_value=event.from_value,
                to_value=event.to_value,
                time_stamp=self._clock(),
            ))
            db.commit()
            return AUDIT_SUCCESS
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"❌ Failed writing audit log for {event.table_name}.{event.column_name}: {e}", exc_info=True)
            return AUDIT_FAILED
        except Exception as e:
            # Serialization problems in the payload (e.g. non-JSON values)
            db.rollback()
            logger.exception(f"❌ Unexpected error writing audit log: {e}")
            return AUDIT_FAILED
        finally:
            db.close()
