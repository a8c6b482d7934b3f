"""
Typed configuration domain objects.

Rule parameters consumed by the habit core, as Pydantic-validated,
immutable models:
- per-habit settings (enable flags, thresholds, required fields)
- StreakSettings  (sensitivity mode, recovery cap)
- ScoringSettings (life-score weights and penalties)
- Configuration   (the snapshot threaded through every evaluation)

Thresholds are required fields. Defaults live in ``config/defaults.yaml``,
never in these models, so a missing key fails instead of silently
loosening a rule.
"""

import logging
from datetime import time
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Habits
# ---------------------------------------------------------------------------

LEARNING_FIELDS = {"learning_hours", "topic"}
WORKOUT_FIELDS = {"workout_type"}


class HabitToggle(BaseModel):
    """Flags shared by every habit."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = True
    counts_toward_completion: bool = True
    required_fields: List[str] = []


class LearningSettings(HabitToggle):
    min_hours: float = Field(ge=0)
    weekly_hours_target: float = Field(gt=0)

    @field_validator("required_fields")
    @classmethod
    def known_fields(cls, v: List[str]) -> List[str]:
        unknown = set(v) - LEARNING_FIELDS
        if unknown:
            raise ValueError(f"unknown learning required_fields: {sorted(unknown)}")
        return v


class WorkoutSettings(HabitToggle):
    weekly_target: int = Field(gt=0)

    @field_validator("required_fields")
    @classmethod
    def known_fields(cls, v: List[str]) -> List[str]:
        unknown = set(v) - WORKOUT_FIELDS
        if unknown:
            raise ValueError(f"unknown workout required_fields: {sorted(unknown)}")
        return v


class SleepSettings(HabitToggle):
    wake_target: time
    wake_tolerance_minutes: int = Field(ge=0)
    bedtime_target: Optional[time] = None


class ScreenTimeSettings(HabitToggle):
    daily_limit_hours: float = Field(gt=0)
    critical_hours: float = Field(gt=0)


class HabitSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    learning: LearningSettings
    workout: WorkoutSettings
    sleep: SleepSettings
    screen_time: ScreenTimeSettings


# ---------------------------------------------------------------------------
# Streaks
# ---------------------------------------------------------------------------

Sensitivity = Literal["strict", "moderate", "lenient"]


class StreakSettings(BaseModel):
    """How a MISSED day is punished."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    sensitivity: Sensitivity
    max_recovery_days: int = Field(ge=0)
    recovery_divisor: int = Field(gt=0)

    @field_validator("sensitivity", mode="before")
    @classmethod
    def normal_is_moderate(cls, v: str) -> str:
        if isinstance(v, str) and v.strip().lower() == "normal":
            return "moderate"
        return v.strip().lower() if isinstance(v, str) else v


# ---------------------------------------------------------------------------
# Life score
# ---------------------------------------------------------------------------


class ScoreWeights(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    learning: float = Field(ge=0)
    workout: float = Field(ge=0)
    sleep: float = Field(ge=0)
    screen_time: float = Field(ge=0)
    screen_time_partial: float = Field(ge=0)
    screen_time_minimal: float = Field(ge=0)
    mits: float = Field(ge=0)


class StreakBonus(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    learning: float = Field(ge=0)
    workout: float = Field(ge=0)
    sleep: float = Field(ge=0)
    cap: float = Field(ge=0)


class ScorePenalties(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    late_day_hour: int = Field(ge=0, le=23)
    late_day_no_learning: float = Field(ge=0)
    slept_late: float = Field(ge=0)
    screen_over_double_goal: float = Field(ge=0)
    screen_heavy: float = Field(ge=0)
    today_screen_critical: float = Field(ge=0)
    today_screen_over_limit: float = Field(ge=0)
    per_recovery_day: float = Field(ge=0)


class ScoringSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    window_days: int = Field(gt=0)
    weights: ScoreWeights
    streak_bonus: StreakBonus
    penalties: ScorePenalties


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


class Configuration(BaseModel):
    """Immutable rule snapshot for one evaluation."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    day_cutoff_hour: int = Field(ge=0, le=23)
    week_start_day: int = Field(ge=0, le=6)  # 0 = Monday
    habits: HabitSettings
    streaks: StreakSettings
    scoring: ScoringSettings

    def habit(self, habit_id: str) -> Optional[HabitToggle]:
        """Settings for ``habit_id``, or None for an unknown habit."""
        if habit_id not in HabitSettings.model_fields:
            return None
        return getattr(self.habits, habit_id)

    def is_enabled(self, habit_id: str) -> bool:
        settings = self.habit(habit_id)
        return settings is None or settings.enabled is not False
