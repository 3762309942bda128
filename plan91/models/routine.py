"""
Routine - one 91-day commitment cycle to a habit

Owns the state machine:

    ACTIVE -> COMPLETED | ABANDONED | PAUSED | ARCHIVED
    PAUSED -> ACTIVE | ABANDONED | ARCHIVED
    COMPLETED, ABANDONED -> ARCHIVED

Nothing returns to ACTIVE except a PAUSED routine. A routine is mutated
by one caller at a time; the storage layer is responsible for that.
"""
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4
import logging

from pydantic import BaseModel, Field, ValidationError, model_validator

from plan91.core.constants import (
    DEFAULT_TARGET_COMPLETIONS,
    ROUTINE_TOTAL_DAYS,
    ROUTINE_WINDOW_DAYS,
)
from plan91.core.exceptions import (
    DuplicateEntryError,
    InvalidRoutineStateError,
    RoutineValidationError,
)
from plan91.models.recurrence import RecurrenceRule
from plan91.models.streak import HabitStreak

logger = logging.getLogger(__name__)


class RoutineStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"
    ABANDONED = "ABANDONED"
    ARCHIVED = "ARCHIVED"


class MissOutcome(str, Enum):
    """What recording a miss did to the routine"""
    IGNORED = "IGNORED"          # not owed that day, or routine not ACTIVE
    STRIKE_USED = "STRIKE_USED"  # first miss, forgiven
    ABANDONED = "ABANDONED"      # second miss, routine is over


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Routine(BaseModel):
    """Routine aggregate. Create with `Routine.start(...)`."""

    id: UUID = Field(default_factory=uuid4)
    habit_id: Optional[str] = None
    practitioner_id: Optional[str] = None

    recurrence_rule: RecurrenceRule
    start_date: date
    expected_end_date: date
    target_completions: int = Field(DEFAULT_TARGET_COMPLETIONS, ge=1)

    streak: HabitStreak = Field(default_factory=HabitStreak.initial)
    status: RoutineStatus = RoutineStatus.ACTIVE
    completed_on: Optional[date] = None

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _check_invariants(self) -> "Routine":
        window = (self.expected_end_date - self.start_date).days
        if window != ROUTINE_WINDOW_DAYS:
            raise ValueError(
                f"expected_end_date must be {ROUTINE_WINDOW_DAYS} days after start_date "
                f"({ROUTINE_TOTAL_DAYS} days total), got: {window}"
            )
        if self.status in (RoutineStatus.ACTIVE, RoutineStatus.PAUSED) and self.completed_on is not None:
            raise ValueError(f"{self.status.value} routine cannot have completed_on")
        if self.status == RoutineStatus.COMPLETED:
            if self.completed_on is None:
                raise ValueError("COMPLETED routine requires completed_on")
            if self.streak.total_completions < self.target_completions:
                raise ValueError("COMPLETED routine must have reached its target")
        return self

    @classmethod
    def start(
        cls,
        recurrence_rule: RecurrenceRule,
        start_date: date,
        target_completions: int = DEFAULT_TARGET_COMPLETIONS,
        habit_id: Optional[str] = None,
        practitioner_id: Optional[str] = None,
    ) -> "Routine":
        """
        Start a new ACTIVE routine with a fresh streak

        Args:
            recurrence_rule: When completions are expected
            start_date: First day of the cycle
            target_completions: Completions needed to finish (>= 1)
            habit_id: Optional habit reference
            practitioner_id: Optional owner reference

        Returns:
            The new routine

        Raises:
            RoutineValidationError: If any argument is invalid
        """
        try:
            return cls(
                habit_id=habit_id,
                practitioner_id=practitioner_id,
                recurrence_rule=recurrence_rule,
                start_date=start_date,
                expected_end_date=start_date + timedelta(days=ROUTINE_WINDOW_DAYS),
                target_completions=target_completions,
            )
        except ValidationError as e:
            raise RoutineValidationError(f"Invalid routine: {e}") from e

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def record_completion(self, day: date) -> None:
        """
        Record a completion on `day`

        Raises:
            InvalidRoutineStateError: If the routine is not ACTIVE
            DuplicateEntryError: If `day` is the last recorded completion
            RoutineValidationError: If `day` is before the start, earlier than
                the last completion, or not a day the rule allows
        """
        if self.status != RoutineStatus.ACTIVE:
            raise InvalidRoutineStateError(
                f"Can only complete ACTIVE routines, status is: {self.status.value}"
            )
        if day < self.start_date:
            raise RoutineValidationError(f"Cannot complete before start date: {self.start_date}")

        last = self.streak.last_completion_date
        if last is not None and day == last:
            raise DuplicateEntryError(f"Already completed on: {day}")
        if last is not None and day < last:
            raise RoutineValidationError(
                f"Completions must be recorded in order: {day} is before {last}"
            )
        if not self.recurrence_rule.allows_completion_on(day):
            raise RoutineValidationError(f"Not an expected day: {day}")

        self.streak = self.streak.increment(day)
        self._touch()

        if self.streak.total_completions >= self.target_completions:
            self.status = RoutineStatus.COMPLETED
            self.completed_on = day
            logger.info(
                f"Routine {self.id} completed on {day} "
                f"({self.streak.total_completions}/{self.target_completions})"
            )

    def record_miss(self, day: date) -> MissOutcome:
        """
        Record that `day` passed without a completion

        Misses on days the rule never asked for, and misses on routines
        that are not ACTIVE, are ignored.
        """
        if self.status != RoutineStatus.ACTIVE:
            return MissOutcome.IGNORED
        if not self.recurrence_rule.is_expected_on(day):
            return MissOutcome.IGNORED
        return self._apply_miss(day)

    def record_missed_week(self, week_start: date, completions: int) -> MissOutcome:
        """
        Settle a week for a times-per-week routine

        Args:
            week_start: Monday of the week being settled
            completions: Completions recorded that week

        Returns:
            STRIKE_USED or ABANDONED if the week fell short, IGNORED otherwise

        Raises:
            RoutineValidationError: If week_start is not a Monday
        """
        if week_start.weekday() != 0:
            raise RoutineValidationError(f"Week must start on a Monday, got: {week_start}")
        if self.status != RoutineStatus.ACTIVE or not self.recurrence_rule.is_weekly_quota:
            return MissOutcome.IGNORED

        week_end = week_start + timedelta(days=6)
        window_start = max(week_start, self.start_date)
        if window_start > week_end:
            return MissOutcome.IGNORED

        owed = min(self.recurrence_rule.weekly_target, (week_end - window_start).days + 1)
        if completions >= owed:
            return MissOutcome.IGNORED
        return self._apply_miss(week_end)

    def _apply_miss(self, day: date) -> MissOutcome:
        if self.streak.strike_available:
            self.streak = self.streak.use_strike(day)
            self._touch()
            logger.info(f"Routine {self.id} used its strike on {day}")
            return MissOutcome.STRIKE_USED

        self.streak = self.streak.reset()
        self.status = RoutineStatus.ABANDONED
        self._touch()
        logger.info(f"Routine {self.id} abandoned after second miss on {day}")
        return MissOutcome.ABANDONED

    def pause(self) -> None:
        if self.status != RoutineStatus.ACTIVE:
            raise InvalidRoutineStateError(
                f"Can only pause ACTIVE routines, status is: {self.status.value}"
            )
        self.status = RoutineStatus.PAUSED
        self._touch()

    def resume(self) -> None:
        if self.status != RoutineStatus.PAUSED:
            raise InvalidRoutineStateError(
                f"Can only resume PAUSED routines, status is: {self.status.value}"
            )
        self.status = RoutineStatus.ACTIVE
        self._touch()

    def abandon(self) -> None:
        """Administrative override, allowed from any state"""
        self.status = RoutineStatus.ABANDONED
        self._touch()

    def archive(self) -> None:
        if self.status == RoutineStatus.ARCHIVED:
            raise InvalidRoutineStateError("Routine is already archived")
        self.status = RoutineStatus.ARCHIVED
        self._touch()

    def _touch(self) -> None:
        self.updated_at = _utcnow()

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    @property
    def total_days(self) -> int:
        return ROUTINE_TOTAL_DAYS

    def is_active(self) -> bool:
        return self.status == RoutineStatus.ACTIVE

    def is_paused(self) -> bool:
        return self.status == RoutineStatus.PAUSED

    def is_completed(self) -> bool:
        return self.status == RoutineStatus.COMPLETED

    def is_abandoned(self) -> bool:
        return self.status == RoutineStatus.ABANDONED

    def is_owned_by(self, practitioner_id: str) -> bool:
        return self.practitioner_id is not None and self.practitioner_id == practitioner_id

    def days_remaining(self, as_of: date) -> int:
        """Calendar days left in the window after `as_of` (never negative)"""
        return max(0, (self.expected_end_date - as_of).days)

    def day_number(self, as_of: date) -> int:
        """1-based day of the window for `as_of`, clamped to 0..91"""
        elapsed = (as_of - self.start_date).days + 1
        return min(max(elapsed, 0), ROUTINE_TOTAL_DAYS)
