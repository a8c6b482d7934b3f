"""Weekly aggregates for the dashboard's "this week" panel."""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Iterable, Optional, Tuple

from ..core.typed_config import Configuration
from ..models.value_objects import DayRecord, DayState
from .habit_validator import is_wake_on_time


def week_start_for(day: date, week_start_day: int) -> date:
    """First day of the week containing ``day`` (0 = Monday)."""
    return day - timedelta(days=(day.weekday() - week_start_day) % 7)


@dataclass(frozen=True)
class WeekStats:
    week_start: date
    week_end: date
    days_elapsed: int
    days_tracked: int
    completed_days: int
    missed_days: int
    not_counted_days: int
    total_learning_hours: float
    workout_sessions: int
    on_time_wakeups: int
    avg_screen_time: float
    avg_mood: Optional[float]
    learning_progress: float
    workout_progress: float

    @property
    def consistency_score(self) -> float:
        return (self.learning_progress + self.workout_progress) / 2

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week_start": self.week_start.isoformat(),
            "week_end": self.week_end.isoformat(),
            "days_elapsed": self.days_elapsed,
            "days_tracked": self.days_tracked,
            "completed_days": self.completed_days,
            "missed_days": self.missed_days,
            "not_counted_days": self.not_counted_days,
            "total_learning_hours": round(self.total_learning_hours, 2),
            "workout_sessions": self.workout_sessions,
            "on_time_wakeups": self.on_time_wakeups,
            "avg_screen_time": round(self.avg_screen_time, 2),
            "avg_mood": round(self.avg_mood, 2) if self.avg_mood is not None else None,
            "learning_progress": round(self.learning_progress, 1),
            "workout_progress": round(self.workout_progress, 1),
            "consistency_score": round(self.consistency_score, 1),
        }


class WeeklyStatsCalculator:
    """Aggregates the current week's DayRecords.

    Display only: nothing here feeds streaks or the life score.
    """

    @staticmethod
    def week_bounds(today: date, configuration: Configuration) -> Tuple[date, date]:
        start = week_start_for(today, configuration.week_start_day)
        return start, start + timedelta(days=6)

    @staticmethod
    def calculate(
        records: Iterable[DayRecord], configuration: Configuration, *, today: date
    ) -> WeekStats:
        start, end = WeeklyStatsCalculator.week_bounds(today, configuration)
        week = [r for r in records if start <= r.date <= min(end, today)]
        tracked = [r for r in week if r.has_any_data()]

        sleep = configuration.habits.sleep
        learning_hours = sum(r.learning_hours for r in week)
        workouts = sum(1 for r in week if r.workout_done)
        moods = [r.mood for r in week if r.mood is not None]

        learning_target = configuration.habits.learning.weekly_hours_target
        workout_target = configuration.habits.workout.weekly_target

        return WeekStats(
            week_start=start,
            week_end=end,
            days_elapsed=(today - start).days + 1,
            days_tracked=len(tracked),
            completed_days=sum(1 for r in week if r.final_state is DayState.COMPLETED),
            missed_days=sum(1 for r in week if r.final_state is DayState.MISSED),
            not_counted_days=sum(
                1 for r in week if r.final_state is DayState.NOT_COUNTED
            ),
            total_learning_hours=learning_hours,
            workout_sessions=workouts,
            on_time_wakeups=sum(
                1
                for r in week
                if is_wake_on_time(
                    r.wake_time, sleep.wake_target, sleep.wake_tolerance_minutes
                )
            ),
            avg_screen_time=(
                sum(r.screen_time_hours for r in tracked) / len(tracked)
                if tracked
                else 0.0
            ),
            avg_mood=sum(moods) / len(moods) if moods else None,
            learning_progress=min(learning_hours / learning_target * 100, 100.0),
            workout_progress=min(workouts / workout_target * 100, 100.0),
        )
