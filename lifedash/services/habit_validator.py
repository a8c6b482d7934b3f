"""
Pure per-habit predicates.

A record and a Configuration in, a bool out. Nothing here touches I/O.
Finalize, preview, streak evaluation and scoring all go through
``HabitValidator.is_satisfied`` so they can never disagree.
"""

from datetime import date, datetime, time
from typing import List, Optional

from ..core.typed_config import Configuration
from ..models.value_objects import DayRecord
from .habit_registry import HABIT_ORDER, LEARNING, SCREEN_TIME, SLEEP, WORKOUT


def minutes_late(wake_time: time, target: time) -> int:
    """Minutes ``wake_time`` falls after ``target`` (negative when earlier)."""
    wake_minutes = wake_time.hour * 60 + wake_time.minute
    target_minutes = target.hour * 60 + target.minute
    return wake_minutes - target_minutes


def is_wake_on_time(
    wake_time: Optional[time], target: time, tolerance_minutes: int
) -> bool:
    if wake_time is None:
        return False
    return minutes_late(wake_time, target) <= tolerance_minutes


def _evening_minutes(value: time) -> int:
    # Minutes since noon, so 23:30 sorts before 00:30.
    return (value.hour * 60 + value.minute - 720) % 1440


def is_bedtime_on_time(bedtime: time, target: time) -> bool:
    """True when ``bedtime`` is at or before ``target``, across midnight."""
    return _evening_minutes(bedtime) <= _evening_minutes(target)


def is_past_bedtime(now: datetime, today: date, target: time) -> bool:
    """True when ``now`` is already later than the bedtime of logical ``today``.

    After midnight but before the day cutoff the calendar date is ahead of
    ``today``, which is always late.
    """
    if now.date() > today:
        return True
    return now.hour >= 12 and _evening_minutes(now.time()) >= _evening_minutes(target)


class HabitValidator:
    """Is a habit satisfied today, given this record and these rules.

    All methods are static and accept plain data.
    """

    @staticmethod
    def is_satisfied(
        habit_id: str, record: DayRecord, configuration: Configuration
    ) -> bool:
        habits = configuration.habits

        if habit_id == LEARNING:
            return (
                record.learning_done
                and record.learning_hours >= habits.learning.min_hours
            )
        if habit_id == WORKOUT:
            return record.workout_done
        if habit_id == SLEEP:
            return is_wake_on_time(
                record.wake_time,
                habits.sleep.wake_target,
                habits.sleep.wake_tolerance_minutes,
            )
        if habit_id == SCREEN_TIME:
            return record.screen_time_hours <= habits.screen_time.daily_limit_hours

        # Unrecognized checks never block completion.
        return True

    @staticmethod
    def get_enabled_required_habits(configuration: Configuration) -> List[str]:
        """Habits that gate day completion, in registry order."""
        required = []
        for habit_id in HABIT_ORDER:
            settings = configuration.habit(habit_id)
            if settings is None:
                continue
            if settings.enabled is False or settings.counts_toward_completion is False:
                continue
            required.append(habit_id)
        return required

    @staticmethod
    def failing_habits(record: DayRecord, configuration: Configuration) -> List[str]:
        """Enabled required habits that are not satisfied, in order."""
        return [
            habit_id
            for habit_id in HabitValidator.get_enabled_required_habits(configuration)
            if not HabitValidator.is_satisfied(habit_id, record, configuration)
        ]

    @staticmethod
    def completion_percent(record: DayRecord, configuration: Configuration) -> int:
        required = HabitValidator.get_enabled_required_habits(configuration)
        if not required:
            return 100
        done = len(required) - len(HabitValidator.failing_habits(record, configuration))
        return int(done * 100 / len(required) + 0.5)

    @staticmethod
    def validate_required_data(
        habit_id: str, record: DayRecord, configuration: Configuration
    ) -> List[str]:
        """Reasons a habit toggled ON lacks its required data.

        An empty list means the data is complete (or the toggle is off).
        """
        reasons: List[str] = []

        if habit_id == LEARNING and record.learning_done:
            required = configuration.habits.learning.required_fields
            if "learning_hours" in required and record.learning_hours <= 0:
                reasons.append("Enter learning hours first")
            if "topic" in required and not record.learning_topic.strip():
                reasons.append("Enter what you learned first")

        elif habit_id == WORKOUT and record.workout_done:
            required = configuration.habits.workout.required_fields
            if "workout_type" in required and not record.workout_type.strip():
                reasons.append("Select workout type first")

        return reasons
