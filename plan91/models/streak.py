"""
HabitStreak - immutable streak state with the one-strike forgiveness rule
"""
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from plan91.core.exceptions import InvalidRoutineStateError


class HabitStreak(BaseModel):
    """
    Streak counters for one routine.

    Start from `HabitStreak.initial()`; every other value comes from
    `increment`, `use_strike` or `reset`, each of which returns a new
    instance.
    """
    model_config = ConfigDict(frozen=True)

    current_streak: int = Field(0, ge=0)
    longest_streak: int = Field(0, ge=0)
    total_completions: int = Field(0, ge=0)
    strike_used: bool = False
    strike_date: Optional[date] = None
    last_completion_date: Optional[date] = None

    @model_validator(mode="after")
    def _check_invariants(self) -> "HabitStreak":
        if self.current_streak > self.longest_streak:
            raise ValueError(
                f"Current streak ({self.current_streak}) cannot exceed "
                f"longest streak ({self.longest_streak})"
            )
        if self.strike_used != (self.strike_date is not None):
            raise ValueError("strike_date must be set exactly when strike_used is true")
        return self

    @classmethod
    def initial(cls) -> "HabitStreak":
        return cls()

    def increment(self, completion_date: date) -> "HabitStreak":
        """Count a completion on `completion_date`"""
        current = self.current_streak + 1
        return HabitStreak(
            current_streak=current,
            longest_streak=max(self.longest_streak, current),
            total_completions=self.total_completions + 1,
            strike_used=self.strike_used,
            strike_date=self.strike_date,
            last_completion_date=completion_date,
        )

    def use_strike(self, miss_date: date) -> "HabitStreak":
        """
        Spend the single forgiveness strike on `miss_date`.

        The streak itself is preserved.

        Raises:
            InvalidRoutineStateError: If the strike was already used
        """
        if self.strike_used:
            raise InvalidRoutineStateError(f"Strike already used on {self.strike_date}")
        return HabitStreak(
            current_streak=self.current_streak,
            longest_streak=self.longest_streak,
            total_completions=self.total_completions,
            strike_used=True,
            strike_date=miss_date,
            last_completion_date=self.last_completion_date,
        )

    def reset(self) -> "HabitStreak":
        """Drop the current run to zero, keeping history and strike state"""
        return HabitStreak(
            current_streak=0,
            longest_streak=self.longest_streak,
            total_completions=self.total_completions,
            strike_used=self.strike_used,
            strike_date=self.strike_date,
            last_completion_date=self.last_completion_date,
        )

    @property
    def strike_available(self) -> bool:
        return not self.strike_used
