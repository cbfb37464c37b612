from .system import System
from .downtime_window import DowntimeWindow
from .audit_log import AuditLogEntry

__all__ = ["System", "DowntimeWindow", "AuditLogEntry"]
