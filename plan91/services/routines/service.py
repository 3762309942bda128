"""
Routines Service - Business logic for routine management
Starts routines, records completions and misses, and builds reports
"""
from datetime import date, timedelta
from typing import Any, Dict, Mapping, Optional
from uuid import UUID
import logging

from plan91.core.config import settings
from plan91.core.exceptions import DuplicateEntryError
from plan91.models.entry import Entry
from plan91.models.recurrence import parse_recurrence_rule
from plan91.models.routine import MissOutcome, Routine, RoutineStatus
from plan91.services.progress import ProgressCalculator
from plan91.services.recurrence import RecurrenceCalculator
from plan91.utils.timezone import get_local_today_date
from . import repository

logger = logging.getLogger(__name__)

recurrence_calculator = RecurrenceCalculator(settings.RECURRENCE_SEARCH_HORIZON_DAYS)
progress_calculator = ProgressCalculator(recurrence_calculator)


def routine_to_dict(routine: Routine) -> Dict[str, Any]:
    data = routine.model_dump(mode="json")
    data["schedule"] = routine.recurrence_rule.describe()
    return data


def start_routine(recurrence: Mapping[str, Any],
                  start_date: Optional[date] = None,
                  target_completions: Optional[int] = None,
                  habit_id: Optional[str] = None,
                  practitioner_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Start a new 91-day routine

    Args:
        recurrence: Recurrence rule mapping with a 'kind' key
        start_date: First day of the cycle (defaults to today, local time)
        target_completions: Completions needed (defaults to the configured target)
        habit_id: Optional habit reference
        practitioner_id: Optional owner reference

    Returns:
        Dict with status, message, and created routine data

    Raises:
        InvalidRecurrenceRuleError: If the recurrence mapping is invalid
        RoutineValidationError: If the routine arguments are invalid
    """
    rule = parse_recurrence_rule(recurrence)
    if target_completions is None:
        target_completions = settings.DEFAULT_TARGET_COMPLETIONS
    routine = Routine.start(
        recurrence_rule=rule,
        start_date=start_date or get_local_today_date(),
        target_completions=target_completions,
        habit_id=habit_id,
        practitioner_id=practitioner_id,
    )
    repository.save_routine(routine)
    logger.info(f"Started routine {routine.id} ({rule.describe()}) on {routine.start_date}")

    return {
        "status": "success",
        "message": f"Routine started on {routine.start_date}, ends {routine.expected_end_date}",
        "data": routine_to_dict(routine),
    }


def complete_entry(routine_id: UUID,
                   day: Optional[date] = None,
                   value: Optional[int] = None,
                   notes: Optional[str] = None) -> Dict[str, Any]:
    """
    Record a completion for a routine and store its entry

    Args:
        routine_id: The routine ID
        day: Completion date (defaults to today, local time)
        value: Optional measured value for numeric habits
        notes: Optional notes

    Returns:
        Dict with status, updated routine data, and the stored entry

    Raises:
        RoutineNotFoundError: If the routine does not exist
        DuplicateEntryError: If an entry already exists for that date
        RoutineValidationError: If the date is not allowed
        InvalidRoutineStateError: If the routine is not ACTIVE
    """
    day = day or get_local_today_date()

    with repository.routine_lock(routine_id):
        routine = repository.get_routine(routine_id)
        if repository.get_entry_for_date(routine_id, day) is not None:
            raise DuplicateEntryError(f"Already completed on {day}")

        routine.record_completion(day)
        entry = Entry(routine_id=routine_id, date=day, completed=True, value=value, notes=notes)
        repository.save_routine(routine)
        repository.create_entry(entry)

    return {
        "status": "success",
        "routine_completed": routine.status == RoutineStatus.COMPLETED,
        "data": routine_to_dict(routine),
        "entry": entry.model_dump(mode="json"),
    }


def record_miss(routine_id: UUID, day: date, skip_if_completed: bool = False) -> Dict[str, Any]:
    """
    Record a missed day for a routine

    Args:
        routine_id: The routine ID
        day: The day that passed without a completion
        skip_if_completed: Ignore the miss if a completed entry exists for
            that day (checked while holding the routine lock)

    Returns:
        Dict with status, the miss outcome, and routine data

    Raises:
        RoutineNotFoundError: If the routine does not exist
    """
    with repository.routine_lock(routine_id):
        routine = repository.get_routine(routine_id)
        entry = repository.get_entry_for_date(routine_id, day) if skip_if_completed else None
        if entry is not None and entry.completed:
            outcome = MissOutcome.IGNORED
        else:
            outcome = routine.record_miss(day)
        if outcome != MissOutcome.IGNORED:
            repository.save_routine(routine)

    return {
        "status": "success",
        "outcome": outcome.value,
        "data": routine_to_dict(routine),
    }


def settle_week(routine_id: UUID, week_start: date) -> Dict[str, Any]:
    """
    Check a times-per-week routine's quota for the week starting week_start

    Returns:
        Dict with status, the miss outcome, completions counted, and routine data
    """
    week_end = week_start + timedelta(days=6)

    with repository.routine_lock(routine_id):
        routine = repository.get_routine(routine_id)
        entries = repository.get_entries_for_routine(routine_id, week_start, week_end)
        completions = len({e.date for e in entries if e.completed})
        outcome = routine.record_missed_week(week_start, completions)
        if outcome != MissOutcome.IGNORED:
            repository.save_routine(routine)

    return {
        "status": "success",
        "outcome": outcome.value,
        "completions": completions,
        "data": routine_to_dict(routine),
    }


def _transition(routine_id: UUID, action: str) -> Dict[str, Any]:
    with repository.routine_lock(routine_id):
        routine = repository.get_routine(routine_id)
        getattr(routine, action)()
        repository.save_routine(routine)

    logger.info(f"Routine {routine_id}: {action} -> {routine.status.value}")
    return {
        "status": "success",
        "message": f"Routine is now {routine.status.value}",
        "data": routine_to_dict(routine),
    }


def pause_routine(routine_id: UUID) -> Dict[str, Any]:
    return _transition(routine_id, "pause")


def resume_routine(routine_id: UUID) -> Dict[str, Any]:
    return _transition(routine_id, "resume")


def abandon_routine(routine_id: UUID) -> Dict[str, Any]:
    return _transition(routine_id, "abandon")


def archive_routine(routine_id: UUID) -> Dict[str, Any]:
    return _transition(routine_id, "archive")


def list_routines(status: Optional[RoutineStatus] = None,
                  practitioner_id: Optional[str] = None) -> Dict[str, Any]:
    routines = repository.list_routines(status=status, practitioner_id=practitioner_id)
    return {
        "status": "success",
        "count": len(routines),
        "routines": [routine_to_dict(r) for r in routines],
    }


def get_routines_for_date(day: Optional[date] = None,
                          practitioner_id: Optional[str] = None) -> Dict[str, Any]:
    """
    List ACTIVE routines that take a completion on `day`

    A routine is due when `day` falls inside its 91-day window and its
    rule allows a completion that day.

    Args:
        day: The date to check (defaults to today, local time)
        practitioner_id: Optional owner filter

    Returns:
        Dict with status, the date, and the due routines
    """
    day = day or get_local_today_date()
    routines = [
        r for r in repository.list_routines(status=RoutineStatus.ACTIVE, practitioner_id=practitioner_id)
        if r.start_date <= day <= r.expected_end_date and r.recurrence_rule.allows_completion_on(day)
    ]
    return {
        "status": "success",
        "date": str(day),
        "count": len(routines),
        "routines": [routine_to_dict(r) for r in routines],
    }


def get_routine_summary(routine_id: UUID, as_of: Optional[date] = None) -> Dict[str, Any]:
    """
    Get a routine with its headline progress numbers

    Returns:
        Dict with status, routine data, progress, compliance rate, and on-track flag
    """
    as_of = as_of or get_local_today_date()
    routine = repository.get_routine(routine_id)
    entries = repository.get_entries_for_routine(routine_id)

    return {
        "status": "success",
        "as_of": str(as_of),
        "data": routine_to_dict(routine),
        "progress": round(progress_calculator.overall_progress(routine), 2),
        "compliance_rate": round(progress_calculator.compliance_rate(routine, entries, as_of), 2),
        "on_track": progress_calculator.is_on_track(routine, entries, as_of),
        "days_remaining": routine.days_remaining(as_of),
    }


def get_routine_analytics(routine_id: UUID, as_of: Optional[date] = None) -> Dict[str, Any]:
    as_of = as_of or get_local_today_date()
    routine = repository.get_routine(routine_id)
    entries = repository.get_entries_for_routine(routine_id)
    report = progress_calculator.analytics(routine, entries, as_of)
    return {"status": "success", "data": report.model_dump(mode="json")}


def get_calendar(routine_id: UUID, year: int, month: int) -> Dict[str, Any]:
    routine = repository.get_routine(routine_id)
    entries = repository.get_entries_for_routine(routine_id)
    calendar = progress_calculator.calendar_month(routine, entries, year, month)
    return {"status": "success", "data": calendar.model_dump(mode="json")}


def delete_routine(routine_id: UUID) -> Dict[str, Any]:
    routine = repository.delete_routine(routine_id)
    return {
        "status": "success",
        "message": f"Routine {routine_id} deleted",
        "routine_id": str(routine.id),
    }
