"""
Business logic services
"""
from . import recurrence
from . import progress
from . import routines
from . import scheduler

from .recurrence import RecurrenceCalculator
from .progress import ProgressCalculator

__all__ = [
    'recurrence',
    'progress',
    'routines',
    'scheduler',
    'RecurrenceCalculator',
    'ProgressCalculator',
]
