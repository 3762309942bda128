"""
Tests for HabitStreak transitions.
"""
from datetime import date

import pytest
from pydantic import ValidationError

from plan91.core.exceptions import InvalidRoutineStateError
from plan91.models.streak import HabitStreak

JAN_1 = date(2026, 1, 1)
JAN_2 = date(2026, 1, 2)


def test_initial_streak():
    streak = HabitStreak.initial()

    assert streak.current_streak == 0
    assert streak.longest_streak == 0
    assert streak.total_completions == 0
    assert not streak.strike_used
    assert streak.strike_date is None
    assert streak.last_completion_date is None


def test_increment_returns_new_value():
    start = HabitStreak.initial()
    streak = start.increment(JAN_1)

    assert start.current_streak == 0
    assert streak.current_streak == 1
    assert streak.longest_streak == 1
    assert streak.total_completions == 1
    assert streak.last_completion_date == JAN_1


def test_longest_survives_reset():
    streak = HabitStreak.initial().increment(JAN_1).increment(JAN_2)
    streak = streak.use_strike(date(2026, 1, 3)).reset().increment(date(2026, 1, 4))

    assert streak.current_streak == 1
    assert streak.longest_streak == 2
    assert streak.total_completions == 3


def test_use_strike_preserves_counts():
    streak = HabitStreak.initial().increment(JAN_1).increment(JAN_2)
    struck = streak.use_strike(date(2026, 1, 3))

    assert struck.strike_used
    assert struck.strike_date == date(2026, 1, 3)
    assert struck.current_streak == 2
    assert struck.longest_streak == 2
    assert struck.total_completions == 2
    assert struck.last_completion_date == JAN_2


def test_strike_is_single_use():
    streak = HabitStreak.initial().use_strike(JAN_1)

    with pytest.raises(InvalidRoutineStateError):
        streak.use_strike(JAN_2)


def test_reset_keeps_strike_and_history():
    streak = HabitStreak.initial().increment(JAN_1).use_strike(JAN_2).reset()

    assert streak.current_streak == 0
    assert streak.longest_streak == 1
    assert streak.total_completions == 1
    assert streak.strike_used
    assert streak.strike_date == JAN_2


def test_increment_keeps_strike_fields():
    streak = HabitStreak.initial().use_strike(JAN_1).increment(JAN_2)

    assert streak.strike_used
    assert streak.strike_date == JAN_1


def test_current_cannot_exceed_longest():
    with pytest.raises(ValidationError):
        HabitStreak(current_streak=3, longest_streak=2)


def test_strike_date_set_iff_strike_used():
    with pytest.raises(ValidationError):
        HabitStreak(strike_used=True)
    with pytest.raises(ValidationError):
        HabitStreak(strike_date=JAN_1)


def test_negative_counts_rejected():
    with pytest.raises(ValidationError):
        HabitStreak(total_completions=-1)


def test_streak_is_immutable():
    streak = HabitStreak.initial()
    with pytest.raises(ValidationError):
        streak.current_streak = 5
