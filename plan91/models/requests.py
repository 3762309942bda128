"""
Pydantic models for API request bodies
"""
import datetime as dt
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from plan91.models.recurrence import RecurrenceKind


class StartRoutineRequest(BaseModel):
    """Request model for starting a new routine"""
    recurrence: Dict[str, Any] = Field(
        ...,
        description="Recurrence rule, e.g. {'kind': 'SPECIFIC_DAYS', 'specific_days': ['MONDAY']}",
    )
    start_date: Optional[dt.date] = Field(None, description="First day of the cycle, defaults to today")
    target_completions: Optional[int] = Field(None, ge=1, description="Completions needed, defaults to the configured target")
    habit_id: Optional[str] = Field(None, description="Habit this routine tracks")
    practitioner_id: Optional[str] = Field(None, description="Owner of the routine")

    @field_validator("recurrence")
    @classmethod
    def validate_kind(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        """Reject unknown recurrence kinds early"""
        kind = v.get("kind")
        if kind not in {k.value for k in RecurrenceKind}:
            raise ValueError(f"Unknown recurrence kind '{kind}'")
        return v


class CompleteEntryRequest(BaseModel):
    """Request model for recording a completion"""
    date: Optional[dt.date] = Field(None, description="Completion date, defaults to today")
    value: Optional[int] = Field(None, description="Measured value for numeric habits")
    notes: Optional[str] = Field(None, max_length=1000, description="Optional notes")


class RecordMissRequest(BaseModel):
    """Request model for recording a missed day"""
    date: dt.date = Field(..., description="The day that was missed")
