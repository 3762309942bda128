"""
Recurrence Calculator - expands a recurrence rule over calendar dates
"""
from datetime import date, timedelta
from typing import Iterator, Optional, Tuple

from plan91.core.constants import SEARCH_HORIZON_DAYS
from plan91.models.recurrence import RecurrenceRule

ONE_DAY = timedelta(days=1)


class RecurrenceCalculator:
    """
    Stateless date expansion for recurrence rules

    Args:
        horizon_days: How far next/previous lookups scan before returning None
    """

    def __init__(self, horizon_days: int = SEARCH_HORIZON_DAYS):
        if horizon_days < 1:
            raise ValueError(f"horizon_days must be at least 1, got: {horizon_days}")
        self.horizon_days = horizon_days

    def _horizon(self, horizon: Optional[int]) -> int:
        if horizon is None:
            return self.horizon_days
        # 0 is allowed per call and finds nothing
        if horizon < 0:
            raise ValueError(f"horizon must not be negative, got: {horizon}")
        return horizon

    def expected_dates(self, rule: RecurrenceRule, start: date, end: date) -> Iterator[date]:
        """
        Yield every date in [start, end] on which the rule expects a completion

        Dates come out in ascending order. An empty range (start > end)
        yields nothing. Each call starts a fresh scan.
        """
        current = start
        while current <= end:
            if rule.is_expected_on(current):
                yield current
            current += ONE_DAY

    def count_expected_dates(self, rule: RecurrenceRule, start: date, end: date) -> int:
        return sum(1 for _ in self.expected_dates(rule, start, end))

    def next_expected_after(
        self, rule: RecurrenceRule, after: date, horizon: Optional[int] = None
    ) -> Optional[date]:
        """
        First expected date strictly after `after`, within the search horizon

        Returns:
            The date, or None if nothing is expected within the horizon
        """
        limit = after + timedelta(days=self._horizon(horizon))
        current = after + ONE_DAY
        while current <= limit:
            if rule.is_expected_on(current):
                return current
            current += ONE_DAY
        return None

    def previous_expected_before(
        self, rule: RecurrenceRule, before: date, horizon: Optional[int] = None
    ) -> Optional[date]:
        """
        Last expected date strictly before `before`, within the search horizon

        Returns:
            The date, or None if nothing is expected within the horizon
        """
        limit = before - timedelta(days=self._horizon(horizon))
        current = before - ONE_DAY
        while current >= limit:
            if rule.is_expected_on(current):
                return current
            current -= ONE_DAY
        return None

    @staticmethod
    def weekly_windows(start: date, end: date) -> Iterator[Tuple[date, date, date]]:
        """
        Yield (week_start, window_start, window_end) for each Monday-Sunday
        week overlapping [start, end], with the window clipped to the range
        """
        week_start = start - timedelta(days=start.weekday())
        while week_start <= end:
            week_end = week_start + timedelta(days=6)
            yield week_start, max(week_start, start), min(week_end, end)
            week_start += timedelta(days=7)

    def expected_weekly_count(self, rule: RecurrenceRule, window_start: date, window_end: date) -> int:
        """Completions owed inside one (possibly partial) week window"""
        if window_start > window_end:
            return 0
        if rule.is_weekly_quota:
            return min(rule.weekly_target, (window_end - window_start).days + 1)
        return self.count_expected_dates(rule, window_start, window_end)
