"""
Entry - a dated record against a routine

Entries are owned by storage; the domain only reads them.
"""
import datetime as dt
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Entry(BaseModel):
    """A completion (or attempted value) for a routine on a date"""
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    routine_id: UUID
    date: dt.date
    completed: bool = True
    value: Optional[int] = None
    notes: Optional[str] = None
    created_at: dt.datetime = Field(default_factory=lambda: dt.datetime.now(dt.timezone.utc))

    @field_validator("notes")
    @classmethod
    def normalize_notes(cls, v: Optional[str]) -> Optional[str]:
        """Trim notes; blank notes become None"""
        if v is None:
            return None
        v = v.strip()
        return v or None

    @classmethod
    def boolean(cls, routine_id: UUID, day: dt.date, notes: Optional[str] = None) -> "Entry":
        return cls(routine_id=routine_id, date=day, completed=True, notes=notes)

    @classmethod
    def numeric(cls, routine_id: UUID, day: dt.date, value: int, notes: Optional[str] = None) -> "Entry":
        return cls(routine_id=routine_id, date=day, completed=True, value=value, notes=notes)

    @property
    def is_numeric(self) -> bool:
        return self.value is not None
