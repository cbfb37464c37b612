from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, StrictBool

UPDATABLE_FLAGS = ("finished", "archived")


class DowntimeCreate(BaseModel):
    # Everything is optional here so the service can answer with its own
    # "... is required" messages instead of a generic 422.
    system_id: Optional[int] = None
    from_time: Optional[datetime] = None
    to_time: Optional[datetime] = None
    reason: Optional[str] = None
    created_by: Optional[str] = None


class DowntimeChanges(BaseModel):
    """Partial update of a downtime window. Only the two flags may change."""

    model_config = ConfigDict(frozen=True)

    finished: Optional[StrictBool] = None
    archived: Optional[StrictBool] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "DowntimeChanges":
        """Keep the whitelisted flags whose value is exactly 0 or 1; drop everything else."""
        accepted = {}
        for key in UPDATABLE_FLAGS:
            if key not in payload:
                continue
            value = payload[key]
            if type(value) in (int, bool) and value in (0, 1):
                accepted[key] = bool(value)
        return cls(**accepted)

    def columns(self) -> dict:
        """Column values to write, as the 0/1 integers the table stores."""
        return {
            key: int(value)
            for key, value in self.model_dump(exclude_none=True).items()
        }

    @property
    def is_empty(self) -> bool:
        return not self.columns()


class DowntimeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    system_id: int
    from_time: datetime
    to_time: datetime
    reason: Optional[str] = ""
    finished: int
    archived: int
    created_at: datetime
    created_by: str
    updated_at: datetime
    updated_by: str

    system_name: Optional[str] = None
    system_url: Optional[str] = None


class DowntimePage(BaseModel):
    rows: list[DowntimeOut]
    total_count: int
