"""
Tests for recurrence rules.
"""
from datetime import date

import pytest
from pydantic import ValidationError

from plan91.core.exceptions import InvalidRecurrenceRuleError, RoutineValidationError
from plan91.models import recurrence
from plan91.models.recurrence import (
    DayOfWeek,
    NthDayOfMonthRule,
    RecurrenceKind,
    SpecificDaysRule,
    TimesPerWeekRule,
    parse_recurrence_rule,
)
from plan91.services.recurrence import RecurrenceCalculator
from tests.helpers import days

MONDAY = date(2026, 2, 2)
SATURDAY = date(2026, 2, 7)
SUNDAY = date(2026, 2, 8)


def test_day_of_week_from_date():
    assert DayOfWeek.of(MONDAY) == DayOfWeek.MONDAY
    assert DayOfWeek.of(SATURDAY) == DayOfWeek.SATURDAY
    assert DayOfWeek.of(date(2026, 1, 1)) == DayOfWeek.THURSDAY


def test_daily_expects_every_day():
    rule = recurrence.daily()
    assert all(rule.is_expected_on(d) for d in days(date(2026, 1, 1), 14))


def test_weekdays_and_weekends_are_complementary():
    weekdays = recurrence.weekdays()
    weekends = recurrence.weekends()

    assert weekdays.is_expected_on(MONDAY)
    assert not weekdays.is_expected_on(SATURDAY)
    assert not weekdays.is_expected_on(SUNDAY)
    assert weekends.is_expected_on(SATURDAY)
    assert weekends.is_expected_on(SUNDAY)
    for d in days(MONDAY, 14):
        assert weekdays.is_expected_on(d) != weekends.is_expected_on(d)


def test_specific_days():
    rule = recurrence.specific_days({DayOfWeek.MONDAY, DayOfWeek.FRIDAY})

    assert rule.is_expected_on(MONDAY)
    assert rule.is_expected_on(date(2026, 2, 6))
    assert not rule.is_expected_on(date(2026, 2, 4))


def test_specific_days_requires_at_least_one_day():
    with pytest.raises(InvalidRecurrenceRuleError):
        recurrence.specific_days(set())


def test_rule_errors_are_validation_errors():
    with pytest.raises(RoutineValidationError):
        recurrence.specific_days([])


def test_first_monday_of_month():
    rule = recurrence.nth_day_of_month(DayOfWeek.MONDAY, 1)

    assert rule.is_expected_on(date(2026, 1, 5))
    assert rule.is_expected_on(date(2026, 2, 2))
    assert not rule.is_expected_on(date(2026, 1, 12))
    assert not rule.is_expected_on(date(2026, 1, 6))


def test_fourth_week_covers_days_22_to_28():
    rule = recurrence.nth_day_of_month(DayOfWeek.MONDAY, 4)

    assert rule.is_expected_on(date(2026, 3, 23))
    # 30th falls in the fifth week, which no rule can target
    assert not rule.is_expected_on(date(2026, 3, 30))


@pytest.mark.parametrize("week", [0, 5, -1])
def test_nth_week_out_of_range(week):
    with pytest.raises(InvalidRecurrenceRuleError):
        recurrence.nth_day_of_month(DayOfWeek.MONDAY, week)


def test_times_per_week():
    rule = recurrence.times_per_week(3)

    assert rule.kind == RecurrenceKind.TIMES_PER_WEEK_3
    assert rule.weekly_target == 3
    assert rule.is_weekly_quota
    assert not rule.is_expected_on(MONDAY)
    assert rule.allows_completion_on(SUNDAY)


@pytest.mark.parametrize("n", [0, 2, 7])
def test_times_per_week_rejects_unsupported_counts(n):
    with pytest.raises(InvalidRecurrenceRuleError):
        recurrence.times_per_week(n)


def test_per_date_rules_have_no_weekly_quota():
    assert recurrence.daily().weekly_target is None
    assert not recurrence.weekdays().is_weekly_quota


def test_rules_are_immutable():
    rule = recurrence.nth_day_of_month(DayOfWeek.MONDAY, 1)
    with pytest.raises(ValidationError):
        rule.nth_week = 2


def test_parse_specific_days():
    rule = parse_recurrence_rule({"kind": "SPECIFIC_DAYS", "specific_days": ["MONDAY", "FRIDAY"]})

    assert isinstance(rule, SpecificDaysRule)
    assert rule.specific_days == frozenset({DayOfWeek.MONDAY, DayOfWeek.FRIDAY})


def test_parse_nth_day_of_month():
    rule = parse_recurrence_rule({"kind": "NTH_DAY_OF_MONTH", "nth_day": "TUESDAY", "nth_week": 2})

    assert isinstance(rule, NthDayOfMonthRule)
    assert rule.nth_day == DayOfWeek.TUESDAY
    assert rule.nth_week == 2


def test_parse_times_per_week():
    rule = parse_recurrence_rule({"kind": "TIMES_PER_WEEK_5"})

    assert isinstance(rule, TimesPerWeekRule)
    assert rule.weekly_target == 5


@pytest.mark.parametrize("data", [
    {"kind": "DAILY", "specific_days": ["MONDAY"]},
    {"kind": "WEEKDAYS", "nth_week": 1},
    {"kind": "SPECIFIC_DAYS"},
    {"kind": "NTH_DAY_OF_MONTH", "nth_day": "MONDAY"},
    {"kind": "NTH_DAY_OF_MONTH", "nth_day": "MONDAY", "nth_week": 5},
    {"kind": "TIMES_PER_WEEK_2"},
    {"kind": "HOURLY"},
    {},
])
def test_parse_rejects_fields_that_do_not_match_kind(data):
    with pytest.raises(InvalidRecurrenceRuleError):
        parse_recurrence_rule(data)


def test_describe():
    assert recurrence.daily().describe() == "Every day"
    assert recurrence.weekdays().describe() == "Every weekday"
    assert recurrence.nth_day_of_month(DayOfWeek.MONDAY, 1).describe() == "1st Monday of the month"
    assert recurrence.times_per_week(3).describe() == "3× per week"
    rule = recurrence.specific_days([DayOfWeek.FRIDAY, DayOfWeek.MONDAY])
    assert rule.describe() == "Every Monday, Friday"


ALL_RULES = [
    recurrence.daily(),
    recurrence.weekdays(),
    recurrence.weekends(),
    recurrence.specific_days([DayOfWeek.WEDNESDAY]),
    recurrence.nth_day_of_month(DayOfWeek.MONDAY, 1),
    recurrence.times_per_week(1),
]


@pytest.mark.parametrize("rule", ALL_RULES, ids=lambda r: r.kind.value)
def test_single_day_range_matches_predicate(rule):
    calculator = RecurrenceCalculator()
    for d in days(date(2026, 1, 1), 40):
        expected = list(calculator.expected_dates(rule, d, d))
        assert len(expected) == (1 if rule.is_expected_on(d) else 0)
