from sqlalchemy import Column, BigInteger, Integer, String
from ..database import Base


class System(Base):
    """Registered system. The registry owns this table; it is only read here."""

    __tablename__ = "tbl_systems"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    code = Column(String(50), nullable=False)
    url = Column(String(50), nullable=False)
    archived = Column(Integer, default=0)
