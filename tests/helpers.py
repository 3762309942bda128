"""
Shared test helpers.
"""
from datetime import timedelta

from plan91.models.entry import Entry


def days(start, count):
    """`count` consecutive dates beginning at `start`."""
    return [start + timedelta(days=i) for i in range(count)]


def entries_for(routine, dates, completed=True):
    return [Entry(routine_id=routine.id, date=d, completed=completed) for d in dates]
