"""
Miss detection - records misses for days that passed without a completion
Runs once a day from the scheduler, checking the day before `as_of`
"""
from datetime import date, timedelta
from typing import Any, Dict, List, Optional
import logging

from plan91.models.routine import MissOutcome, Routine, RoutineStatus
from plan91.utils.timezone import get_local_today_date
from . import repository
from . import service

logger = logging.getLogger(__name__)


def _should_record_miss(routine: Routine, day: date) -> bool:
    """
    Determine if `day` counts as a miss for this routine

    Args:
        routine: An ACTIVE routine
        day: The day being checked (already over)

    Returns:
        True if the day was owed and has no completed entry

    The entry lookup is repeated under the routine lock when the miss is
    written, since a completion can land in between.
    """
    if day < routine.start_date:
        return False
    if not routine.recurrence_rule.is_expected_on(day):
        return False

    entry = repository.get_entry_for_date(routine.id, day)
    return entry is None or not entry.completed


def _week_to_settle(routine: Routine, as_of: date) -> Optional[date]:
    """Monday of last week if `as_of` is a Monday and the routine had started by then"""
    if not routine.recurrence_rule.is_weekly_quota or as_of.weekday() != 0:
        return None
    week_start = as_of - timedelta(days=7)
    if routine.start_date > week_start + timedelta(days=6):
        return None
    return week_start


def check_missed_days(as_of: Optional[date] = None) -> Dict[str, Any]:
    """
    Record misses for every ACTIVE routine

    Called daily by the scheduler. Per-date routines are checked for the
    day before `as_of`; times-per-week routines are settled on Mondays for
    the week that just ended.

    Args:
        as_of: The current local date (defaults to today)

    Returns:
        Dict with the checked day and the miss outcomes that changed a routine
    """
    as_of = as_of or get_local_today_date()
    day = as_of - timedelta(days=1)

    logger.info(f"[MISS CHECK] Checking ACTIVE routines for misses on {day}...")

    results: List[Dict[str, Any]] = []
    failures = 0

    for routine in repository.list_routines(status=RoutineStatus.ACTIVE):
        try:
            week_start = _week_to_settle(routine, as_of)
            if week_start is not None:
                result = service.settle_week(routine.id, week_start)
            elif _should_record_miss(routine, day):
                result = service.record_miss(routine.id, day, skip_if_completed=True)
            else:
                continue
        except Exception as e:
            failures += 1
            logger.error(f"[MISS CHECK] Failed to check routine {routine.id}: {e}", exc_info=True)
            continue

        if result["outcome"] != MissOutcome.IGNORED.value:
            logger.info(f"[MISS CHECK] Routine {routine.id}: {result['outcome']}")
            results.append({"routine_id": str(routine.id), "outcome": result["outcome"]})

    if results:
        logger.info(f"[MISS CHECK] Recorded {len(results)} miss(es)")
    else:
        logger.info("[MISS CHECK] No misses found")

    return {
        "status": "success",
        "date": str(day),
        "misses": results,
        "failures": failures,
    }
