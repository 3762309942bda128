"""
Read-model reports produced by the progress calculator
"""
import datetime as dt
from typing import List, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel


class ProgressMetrics(BaseModel):
    completed: int
    target: int
    percentage: float
    remaining: int
    days_elapsed: int


class StreakMetrics(BaseModel):
    current: int
    longest: int
    total_completions: int
    strike_used: bool
    strike_date: Optional[dt.date] = None


class RoutineAnalytics(BaseModel):
    routine_id: UUID
    as_of: dt.date
    status: str
    schedule: str
    progress: ProgressMetrics
    streaks: StreakMetrics
    compliance_rate: float
    weekly_average: float
    consistency_grade: str
    pace: str
    missed_days: List[dt.date]
    weekly_shortfalls: List[Tuple[dt.date, int]]
    on_track: bool
    next_expected_date: Optional[dt.date] = None
    days_remaining: int


class CalendarEntry(BaseModel):
    date: dt.date
    completed: bool
    value: Optional[int] = None
    notes: Optional[str] = None


class MonthStats(BaseModel):
    total_days: int
    scheduled_days: int
    completed_days: int
    completion_rate: float


class CalendarMonth(BaseModel):
    routine_id: UUID
    year: int
    month: int
    entries: List[CalendarEntry]
    scheduled_days: List[dt.date]
    stats: MonthStats
