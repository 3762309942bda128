"""
Pytest configuration and fixtures for plan91 tests.
"""
import os

os.environ.setdefault("SCHEDULER_ENABLED", "false")

from datetime import date

import pytest

from plan91.models import recurrence
from plan91.models.routine import Routine
from plan91.services.routines import repository


@pytest.fixture(autouse=True)
def clean_repository():
    """Every test starts with an empty store."""
    repository.clear()
    yield
    repository.clear()


@pytest.fixture
def new_year():
    """2026-01-01, a Thursday."""
    return date(2026, 1, 1)


@pytest.fixture
def daily_routine(new_year):
    return Routine.start(recurrence.daily(), new_year)


@pytest.fixture
def weekday_routine():
    # 2026-02-02 is a Monday
    return Routine.start(recurrence.weekdays(), date(2026, 2, 2))
