from sqlalchemy import Column, BigInteger, Integer, String, DateTime, JSON
from ..database import Base


class AuditLogEntry(Base):
    """Append-only record of a field-level change. Never updated or deleted."""

    __tablename__ = "tbl_logs"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    action_taken = Column(String(255), nullable=False)
    table_name = Column(String(100), nullable=False)
    column_name = Column(String(255), nullable=False)
    from_value = Column(JSON, nullable=False)
    to_value = Column(JSON, nullable=False)
    time_stamp = Column(DateTime, nullable=False)
