"""
Routines module - Routine lifecycle, entries and reports
"""
from . import repository
from . import service
from . import misses

# Export commonly used functions for convenience
from .service import (
    start_routine,
    complete_entry,
    record_miss,
    settle_week,
    pause_routine,
    resume_routine,
    abandon_routine,
    archive_routine,
    list_routines,
    get_routines_for_date,
    get_routine_summary,
    get_routine_analytics,
    get_calendar,
    delete_routine,
)

from .misses import check_missed_days

__all__ = [
    # Modules
    'repository',
    'service',
    'misses',

    # Service functions
    'start_routine',
    'complete_entry',
    'record_miss',
    'settle_week',
    'pause_routine',
    'resume_routine',
    'abandon_routine',
    'archive_routine',
    'list_routines',
    'get_routines_for_date',
    'get_routine_summary',
    'get_routine_analytics',
    'get_calendar',
    'delete_routine',

    # Miss detection
    'check_missed_days',
]
