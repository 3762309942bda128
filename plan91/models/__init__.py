"""
Pydantic models for the application
"""
from plan91.models.recurrence import (
    DayOfWeek,
    RecurrenceKind,
    RecurrenceRule,
    DailyRule,
    WeekdaysRule,
    WeekendsRule,
    SpecificDaysRule,
    NthDayOfMonthRule,
    TimesPerWeekRule,
    parse_recurrence_rule,
)
from plan91.models.streak import HabitStreak
from plan91.models.routine import MissOutcome, Routine, RoutineStatus
from plan91.models.entry import Entry
from plan91.models.analytics import RoutineAnalytics, CalendarMonth
from plan91.models.requests import (
    StartRoutineRequest,
    CompleteEntryRequest,
    RecordMissRequest,
)

__all__ = [
    "DayOfWeek",
    "RecurrenceKind",
    "RecurrenceRule",
    "DailyRule",
    "WeekdaysRule",
    "WeekendsRule",
    "SpecificDaysRule",
    "NthDayOfMonthRule",
    "TimesPerWeekRule",
    "parse_recurrence_rule",
    "HabitStreak",
    "MissOutcome",
    "Routine",
    "RoutineStatus",
    "Entry",
    "RoutineAnalytics",
    "CalendarMonth",
    "StartRoutineRequest",
    "CompleteEntryRequest",
    "RecordMissRequest",
]
