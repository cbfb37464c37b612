from sqlalchemy import Column, BigInteger, Integer, String, DateTime, ForeignKey, CheckConstraint
from ..database import Base


class DowntimeWindow(Base):
    __tablename__ = "tbl_downtime_logs"
    __table_args__ = (
        CheckConstraint("finished IN (0, 1)", name="ck_downtime_finished_flag"),
        CheckConstraint("archived IN (0, 1)", name="ck_downtime_archived_flag"),
    )

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    system_id = Column(BigInteger, ForeignKey("tbl_systems.id", ondelete="CASCADE"), nullable=False)
    from_time = Column(DateTime, nullable=False)
    to_time = Column(DateTime, nullable=False, index=True)
    reason = Column(String(256), nullable=True, default="")
    finished = Column(Integer, nullable=False, default=0)
    archived = Column(Integer, nullable=False, default=0)  # 1 == soft-deleted

    created_at = Column(DateTime, nullable=False)
    created_by = Column(String(100), nullable=False)
    updated_at = Column(DateTime, nullable=False)
    updated_by = Column(String(100), nullable=False)
