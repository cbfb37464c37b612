"""Shared fixtures: a throwaway SQLite database with two registered systems."""

from datetime import datetime

import pytest

from downtime_api.database import Base, create_db_engine, create_session_factory
from downtime_api.models import AuditLogEntry, DowntimeWindow, System
from downtime_api.repositories.downtime_store import DowntimeStore
from downtime_api.services.audit_logger import AuditLogger
from downtime_api.services.downtime_service import DowntimeService
from downtime_api.services.sweep_service import ReconciliationSweeper


class FakeClock:
    """Callable clock whose time the test sets explicitly."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def engine(tmp_path):
    # File-backed so the audit writer thread gets its own connection
    engine = create_db_engine(f"sqlite:///{tmp_path / 'downtime.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture(autouse=True)
def systems(session_factory):
    db = session_factory()
    db.add_all([
        System(id=5, name="Payroll", code="PAY", url="https://payroll.local"),
        System(id=7, name="Warehouse", code="WMS", url="https://wms.local"),
    ])
    db.commit()
    db.close()


@pytest.fixture
def clock():
    return FakeClock(datetime(2023, 12, 31, 23, 0))


@pytest.fixture
def store(session_factory, clock):
    return DowntimeStore(session_factory, clock=clock)


@pytest.fixture
def audit_logger(session_factory, clock):
    audit_logger = AuditLogger(session_factory, max_queue_size=100, clock=clock)
    audit_logger.start()
    yield audit_logger
    audit_logger.stop()


@pytest.fixture
def service(store, audit_logger):
    return DowntimeService(store, audit_logger, default_actor="System")


@pytest.fixture
def sweeper(store, clock):
    return ReconciliationSweeper(store, clock=clock)


@pytest.fixture
def fetch_window(session_factory):
    """Read a raw window row straight from the table."""
    def fetch(window_id):
        db = session_factory()
        try:
            return db.get(DowntimeWindow, window_id)
        finally:
            db.close()
    return fetch


@pytest.fixture
def count_rows(session_factory):
    def count(model):
        db = session_factory()
        try:
            return db.query(model).count()
        finally:
            db.close()
    return count


@pytest.fixture
def audit_entries(session_factory):
    def entries():
        db = session_factory()
        try:
            return db.query(AuditLogEntry).order_by(AuditLogEntry.id).all()
        finally:
            db.close()
    return entries
