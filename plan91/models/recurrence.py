"""
Recurrence rules - when is a completion expected?

Each kind of schedule is its own frozen model carrying only the fields it
needs, joined into the `RecurrenceRule` union on the `kind` field. A
weekday rule with `specific_days` attached simply cannot be built.
"""
from datetime import date
from enum import Enum
from typing import Annotated, Any, FrozenSet, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from plan91.core.constants import NTH_WEEK_MAX, NTH_WEEK_MIN
from plan91.core.exceptions import InvalidRecurrenceRuleError


class DayOfWeek(str, Enum):
    """Days of the week, Monday first (matches date.weekday())"""
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @classmethod
    def of(cls, day: date) -> "DayOfWeek":
        return _WEEK_ORDER[day.weekday()]

    @property
    def is_weekend(self) -> bool:
        return self in (DayOfWeek.SATURDAY, DayOfWeek.SUNDAY)


_WEEK_ORDER = tuple(DayOfWeek)


class RecurrenceKind(str, Enum):
    """Supported schedule kinds"""
    DAILY = "DAILY"
    WEEKDAYS = "WEEKDAYS"
    WEEKENDS = "WEEKENDS"
    SPECIFIC_DAYS = "SPECIFIC_DAYS"
    NTH_DAY_OF_MONTH = "NTH_DAY_OF_MONTH"
    TIMES_PER_WEEK_1 = "TIMES_PER_WEEK_1"
    TIMES_PER_WEEK_3 = "TIMES_PER_WEEK_3"
    TIMES_PER_WEEK_4 = "TIMES_PER_WEEK_4"
    TIMES_PER_WEEK_5 = "TIMES_PER_WEEK_5"
    TIMES_PER_WEEK_6 = "TIMES_PER_WEEK_6"


TIMES_PER_WEEK_KINDS = {
    1: RecurrenceKind.TIMES_PER_WEEK_1,
    3: RecurrenceKind.TIMES_PER_WEEK_3,
    4: RecurrenceKind.TIMES_PER_WEEK_4,
    5: RecurrenceKind.TIMES_PER_WEEK_5,
    6: RecurrenceKind.TIMES_PER_WEEK_6,
}

_ORDINALS = {1: "1st", 2: "2nd", 3: "3rd", 4: "4th"}


class _RuleBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    def is_expected_on(self, day: date) -> bool:
        """True if a completion is owed on this exact date"""
        raise NotImplementedError

    def allows_completion_on(self, day: date) -> bool:
        """True if a completion may be recorded on this date"""
        return self.is_expected_on(day)

    @property
    def weekly_target(self) -> Optional[int]:
        """Completions owed per calendar week, for quota-style rules only"""
        return None

    @property
    def is_weekly_quota(self) -> bool:
        return self.weekly_target is not None

    def describe(self) -> str:
        raise NotImplementedError


class DailyRule(_RuleBase):
    kind: Literal[RecurrenceKind.DAILY] = RecurrenceKind.DAILY

    def is_expected_on(self, day: date) -> bool:
        return True

    def describe(self) -> str:
        return "Every day"


class WeekdaysRule(_RuleBase):
    kind: Literal[RecurrenceKind.WEEKDAYS] = RecurrenceKind.WEEKDAYS

    def is_expected_on(self, day: date) -> bool:
        return not DayOfWeek.of(day).is_weekend

    def describe(self) -> str:
        return "Every weekday"


class WeekendsRule(_RuleBase):
    kind: Literal[RecurrenceKind.WEEKENDS] = RecurrenceKind.WEEKENDS

    def is_expected_on(self, day: date) -> bool:
        return DayOfWeek.of(day).is_weekend

    def describe(self) -> str:
        return "Every weekend day"


class SpecificDaysRule(_RuleBase):
    kind: Literal[RecurrenceKind.SPECIFIC_DAYS] = RecurrenceKind.SPECIFIC_DAYS
    specific_days: FrozenSet[DayOfWeek] = Field(..., min_length=1)

    def is_expected_on(self, day: date) -> bool:
        return DayOfWeek.of(day) in self.specific_days

    def describe(self) -> str:
        ordered = [d for d in _WEEK_ORDER if d in self.specific_days]
        return "Every " + ", ".join(d.value.capitalize() for d in ordered)


class NthDayOfMonthRule(_RuleBase):
    kind: Literal[RecurrenceKind.NTH_DAY_OF_MONTH] = RecurrenceKind.NTH_DAY_OF_MONTH
    nth_day: DayOfWeek
    nth_week: int = Field(..., ge=NTH_WEEK_MIN, le=NTH_WEEK_MAX)

    def is_expected_on(self, day: date) -> bool:
        if DayOfWeek.of(day) != self.nth_day:
            return False
        # Week 1 is days 1-7, week 2 is days 8-14, ...
        return (day.day - 1) // 7 + 1 == self.nth_week

    def describe(self) -> str:
        return f"{_ORDINALS[self.nth_week]} {self.nth_day.value.capitalize()} of the month"


class TimesPerWeekRule(_RuleBase):
    """
    N completions per Monday-Sunday week, on any days.

    No individual date is owed, so `is_expected_on` is always False;
    the quota is checked week by week instead.
    """
    kind: Literal[
        RecurrenceKind.TIMES_PER_WEEK_1,
        RecurrenceKind.TIMES_PER_WEEK_3,
        RecurrenceKind.TIMES_PER_WEEK_4,
        RecurrenceKind.TIMES_PER_WEEK_5,
        RecurrenceKind.TIMES_PER_WEEK_6,
    ]

    def is_expected_on(self, day: date) -> bool:
        return False

    def allows_completion_on(self, day: date) -> bool:
        return True

    @property
    def weekly_target(self) -> int:
        return int(RecurrenceKind(self.kind).value.rsplit("_", 1)[1])

    def describe(self) -> str:
        return f"{self.weekly_target}× per week"


RecurrenceRule = Annotated[
    Union[
        DailyRule,
        WeekdaysRule,
        WeekendsRule,
        SpecificDaysRule,
        NthDayOfMonthRule,
        TimesPerWeekRule,
    ],
    Field(discriminator="kind"),
]

_rule_adapter = TypeAdapter(RecurrenceRule)


def parse_recurrence_rule(data: Mapping[str, Any]) -> RecurrenceRule:
    """
    Build a recurrence rule from a plain mapping (e.g. an API payload)

    Args:
        data: Mapping with a 'kind' key plus the fields that kind needs

    Returns:
        The matching rule variant

    Raises:
        InvalidRecurrenceRuleError: If the kind is unknown or its fields are wrong
    """
    try:
        return _rule_adapter.validate_python(dict(data))
    except ValidationError as e:
        raise InvalidRecurrenceRuleError(f"Invalid recurrence rule: {e}") from e


def _build(model_cls, **fields) -> RecurrenceRule:
    try:
        return model_cls(**fields)
    except ValidationError as e:
        raise InvalidRecurrenceRuleError(f"Invalid {model_cls.__name__}: {e}") from e


def daily() -> DailyRule:
    return DailyRule()


def weekdays() -> WeekdaysRule:
    return WeekdaysRule()


def weekends() -> WeekendsRule:
    return WeekendsRule()


def specific_days(days) -> SpecificDaysRule:
    """Expected on each of the given weekdays (at least one)"""
    return _build(SpecificDaysRule, specific_days=frozenset(days or ()))


def nth_day_of_month(day: DayOfWeek, week: int) -> NthDayOfMonthRule:
    """Expected on the Nth (1-4) given weekday of every month"""
    return _build(NthDayOfMonthRule, nth_day=day, nth_week=week)


def times_per_week(n: int) -> TimesPerWeekRule:
    """Expected N times (1, 3, 4, 5 or 6) per calendar week"""
    kind = TIMES_PER_WEEK_KINDS.get(n)
    if kind is None:
        allowed = ", ".join(str(k) for k in TIMES_PER_WEEK_KINDS)
        raise InvalidRecurrenceRuleError(f"Times per week must be one of {allowed}, got: {n}")
    return TimesPerWeekRule(kind=kind)
