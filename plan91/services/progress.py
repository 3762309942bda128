"""
Progress Calculator - compliance and progress reports for a routine

Inputs are a routine plus the entries storage holds for it; nothing here
mutates either. Only entries marked completed count toward progress.
"""
from calendar import monthrange
from datetime import date, timedelta
from typing import Iterable, List, Optional, Set, Tuple

from plan91.core.constants import (
    CONSISTENCY_GRADE_FAILING,
    CONSISTENCY_GRADES,
    PACE_ON_TRACK_RATIO,
    PACE_SLIGHTLY_BEHIND_RATIO,
)
from plan91.models.analytics import (
    CalendarEntry,
    CalendarMonth,
    MonthStats,
    ProgressMetrics,
    RoutineAnalytics,
    StreakMetrics,
)
from plan91.models.entry import Entry
from plan91.models.routine import Routine
from plan91.services.recurrence import RecurrenceCalculator

PACE_ON_TRACK = "on_track"
PACE_SLIGHTLY_BEHIND = "slightly_behind"
PACE_BEHIND = "behind"


class ProgressCalculator:
    """Derives compliance, missed days and on-track status for routines"""

    def __init__(self, recurrence: Optional[RecurrenceCalculator] = None):
        self.recurrence = recurrence or RecurrenceCalculator()

    # ------------------------------------------------------------------
    # Core metrics
    # ------------------------------------------------------------------

    def compliance_rate(self, routine: Routine, entries: Iterable[Entry], up_to: date) -> float:
        """
        Percentage of owed completions that were made, from start_date to up_to

        With nothing owed yet (e.g. up_to before start_date) the routine is
        100% compliant.
        """
        done = _completed_dates(routine, entries)

        if routine.recurrence_rule.is_weekly_quota:
            owed_total = 0
            done_total = 0
            for _, owed, made in self._weekly_tallies(routine, done, up_to):
                owed_total += owed
                done_total += min(made, owed)
            if owed_total == 0:
                return 100.0
            return done_total * 100.0 / owed_total

        expected = list(self.recurrence.expected_dates(routine.recurrence_rule, routine.start_date, up_to))
        if not expected:
            return 100.0
        hits = sum(1 for d in expected if d in done)
        return hits * 100.0 / len(expected)

    def overall_progress(self, routine: Routine) -> float:
        """Share of the target reached, from the streak's own total (capped at 100)"""
        return min(100.0, routine.streak.total_completions * 100.0 / routine.target_completions)

    def missed_days(self, routine: Routine, entries: Iterable[Entry], up_to: date) -> List[date]:
        """
        Expected dates from start_date to up_to with no completed entry, ascending

        Times-per-week routines never owe a specific date, so this is empty
        for them; see `weekly_shortfalls`.
        """
        if routine.recurrence_rule.is_weekly_quota:
            return []
        done = _completed_dates(routine, entries)
        return [
            d for d in self.recurrence.expected_dates(routine.recurrence_rule, routine.start_date, up_to)
            if d not in done
        ]

    def weekly_shortfalls(self, routine: Routine, entries: Iterable[Entry], up_to: date) -> List[Tuple[date, int]]:
        """(week_start, completions short) for each finished week that missed its quota"""
        if not routine.recurrence_rule.is_weekly_quota:
            return []
        done = _completed_dates(routine, entries)
        return [
            (week_start, owed - made)
            for week_start, owed, made in self._weekly_tallies(routine, done, up_to)
            if made < owed
        ]

    def is_on_track(self, routine: Routine, entries: Iterable[Entry], as_of: date) -> bool:
        """
        True with no misses, or exactly one miss already covered by the strike

        Two or more misses, or one miss while the strike is still unused,
        means the routine and its entries disagree.
        """
        entries = list(entries)
        if routine.recurrence_rule.is_weekly_quota:
            misses = len(self.weekly_shortfalls(routine, entries, as_of))
        else:
            misses = len(self.missed_days(routine, entries, as_of))

        if misses == 0:
            return True
        return misses == 1 and routine.streak.strike_used

    def count_expected_days(self, routine: Routine, up_to: date) -> int:
        rule = routine.recurrence_rule
        if rule.is_weekly_quota:
            return sum(
                self.recurrence.expected_weekly_count(rule, window_start, window_end)
                for _, window_start, window_end in self.recurrence.weekly_windows(routine.start_date, up_to)
            )
        return self.recurrence.count_expected_dates(rule, routine.start_date, up_to)

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    @staticmethod
    def consistency_grade(rate: float) -> str:
        for threshold, grade in CONSISTENCY_GRADES:
            if rate >= threshold:
                return grade
        return CONSISTENCY_GRADE_FAILING

    def pace(self, routine: Routine, as_of: date) -> str:
        """How total completions compare with what the schedule asked for so far"""
        owed = self.count_expected_days(routine, min(as_of, routine.expected_end_date))
        if owed == 0:
            return PACE_ON_TRACK
        ratio = routine.streak.total_completions / owed
        if ratio >= PACE_ON_TRACK_RATIO:
            return PACE_ON_TRACK
        if ratio >= PACE_SLIGHTLY_BEHIND_RATIO:
            return PACE_SLIGHTLY_BEHIND
        return PACE_BEHIND

    def analytics(self, routine: Routine, entries: Iterable[Entry], as_of: date) -> RoutineAnalytics:
        """Full progress report for one routine as of a date"""
        entries = list(entries)
        streak = routine.streak
        completed = streak.total_completions
        days_elapsed = routine.day_number(as_of)
        weeks_elapsed = max(1, days_elapsed // 7)
        compliance = self.compliance_rate(routine, entries, as_of)

        next_expected = None
        if not routine.recurrence_rule.is_weekly_quota:
            # Days already completed are never "next"
            anchor = max(as_of, routine.start_date) - timedelta(days=1)
            if streak.last_completion_date is not None:
                anchor = max(anchor, streak.last_completion_date)
            next_expected = self.recurrence.next_expected_after(routine.recurrence_rule, anchor)

        return RoutineAnalytics(
            routine_id=routine.id,
            as_of=as_of,
            status=routine.status.value,
            schedule=routine.recurrence_rule.describe(),
            progress=ProgressMetrics(
                completed=completed,
                target=routine.target_completions,
                percentage=round(self.overall_progress(routine), 2),
                remaining=max(0, routine.target_completions - completed),
                days_elapsed=days_elapsed,
            ),
            streaks=StreakMetrics(
                current=streak.current_streak,
                longest=streak.longest_streak,
                total_completions=completed,
                strike_used=streak.strike_used,
                strike_date=streak.strike_date,
            ),
            compliance_rate=round(compliance, 2),
            weekly_average=round(completed / weeks_elapsed, 2),
            consistency_grade=self.consistency_grade(compliance),
            pace=self.pace(routine, as_of),
            missed_days=self.missed_days(routine, entries, as_of),
            weekly_shortfalls=self.weekly_shortfalls(routine, entries, as_of),
            on_track=self.is_on_track(routine, entries, as_of),
            next_expected_date=next_expected,
            days_remaining=routine.days_remaining(as_of),
        )

    def calendar_month(self, routine: Routine, entries: Iterable[Entry], year: int, month: int) -> CalendarMonth:
        """
        Scheduled days and entries for one month, clipped to the routine window

        Raises:
            ValueError: If month is not 1-12
        """
        first = date(year, month, 1)
        last = date(year, month, monthrange(year, month)[1])
        window_start = max(first, routine.start_date)
        window_end = min(last, routine.expected_end_date)

        rule = routine.recurrence_rule
        scheduled: List[date] = []
        current = window_start
        while current <= window_end:
            if rule.allows_completion_on(current):
                scheduled.append(current)
            current += timedelta(days=1)

        month_entries = sorted(
            (e for e in entries if e.routine_id == routine.id and first <= e.date <= last),
            key=lambda e: e.date,
        )
        completed_days = len({e.date for e in month_entries if e.completed})
        rate = completed_days * 100.0 / len(scheduled) if scheduled else 0.0

        return CalendarMonth(
            routine_id=routine.id,
            year=year,
            month=month,
            entries=[
                CalendarEntry(date=e.date, completed=e.completed, value=e.value, notes=e.notes)
                for e in month_entries
            ],
            scheduled_days=scheduled,
            stats=MonthStats(
                total_days=last.day,
                scheduled_days=len(scheduled),
                completed_days=completed_days,
                completion_rate=round(rate, 2),
            ),
        )

    # ------------------------------------------------------------------

    def _weekly_tallies(self, routine: Routine, done: Set[date], up_to: date) -> List[Tuple[date, int, int]]:
        """
        (week_start, owed, made) per week from start_date to up_to

        A week still in progress owes no more than has already been made.
        """
        rule = routine.recurrence_rule
        tallies = []
        for week_start, window_start, window_end in self.recurrence.weekly_windows(routine.start_date, up_to):
            owed = self.recurrence.expected_weekly_count(rule, window_start, window_end)
            made = sum(1 for d in done if window_start <= d <= window_end)
            if week_start + timedelta(days=6) > up_to:
                owed = min(owed, made)
            tallies.append((week_start, owed, made))
        return tallies


def _completed_dates(routine: Routine, entries: Iterable[Entry]) -> Set[date]:
    return {e.date for e in entries if e.completed and e.routine_id == routine.id}
