"""
Life score: a 0-100 integer from the trailing window of finalized days.

Components (shipped defaults in parentheses):
    learning     days with learning done / window * weight (30)
    workout      min(workout days / weekly target * weight, weight) (20)
    sleep        days woken on time / window * weight (20)
    screen time  tiered on the window's average vs the daily limit (15/8/3)
    MITs         average done/filled ratio * weight (15)
    streaks      weighted current streaks, capped (10)

Penalties are summed and subtracted once; only the total is clamped.
An empty window scores exactly 0.
"""

import logging
import math
from datetime import datetime
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..core.typed_config import Configuration
from ..models.value_objects import EMPTY_SCORE, DayRecord, ScoreSnapshot, StreakState
from .habit_registry import LEARNING, SLEEP, WORKOUT
from .habit_validator import is_wake_on_time

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    return max(0, min(100, round_half_up(value)))


def _mit_ratio(record: DayRecord) -> float:
    filled = record.mits_filled
    if filled == 0:
        return 0.0
    done = sum(1 for mit in record.mits if mit.is_filled and mit.done)
    return done / filled


class ScoreEngine:
    """Pure score computation; callers pass every input explicitly."""

    @staticmethod
    def compute_score(
        window: Iterable[DayRecord],
        streak_states: Mapping[str, StreakState],
        configuration: Configuration,
        *,
        today: Optional[DayRecord] = None,
        yesterday: Optional[DayRecord] = None,
        now: datetime,
    ) -> int:
        return ScoreEngine.breakdown(
            window,
            streak_states,
            configuration,
            today=today,
            yesterday=yesterday,
            now=now,
        ).score

    @staticmethod
    def breakdown(
        window: Iterable[DayRecord],
        streak_states: Mapping[str, StreakState],
        configuration: Configuration,
        *,
        today: Optional[DayRecord] = None,
        yesterday: Optional[DayRecord] = None,
        now: datetime,
    ) -> ScoreSnapshot:
        """Score plus the components it was built from."""
        days = [r for r in window if r.finalized]
        if not days:
            return EMPTY_SCORE

        scoring = configuration.scoring
        weights = scoring.weights
        habits = configuration.habits
        window_days = scoring.window_days

        learning_days = sum(1 for r in days if r.learning_done)
        learning = learning_days / window_days * weights.learning

        workout_days = sum(1 for r in days if r.workout_done)
        workout = min(
            workout_days / habits.workout.weekly_target * weights.workout,
            weights.workout,
        )

        on_time_days = sum(
            1
            for r in days
            if is_wake_on_time(
                r.wake_time,
                habits.sleep.wake_target,
                habits.sleep.wake_tolerance_minutes,
            )
        )
        sleep = on_time_days / window_days * weights.sleep

        screen_time, screen_penalty = ScoreEngine._screen_component(days, configuration)

        mits = sum(_mit_ratio(r) for r in days) / len(days) * weights.mits

        streak_bonus = ScoreEngine._streak_bonus(streak_states, configuration)

        penalty = screen_penalty + ScoreEngine._penalties(
            streak_states, configuration, today=today, yesterday=yesterday, now=now
        )

        raw = learning + workout + sleep + screen_time + mits + streak_bonus
        snapshot = ScoreSnapshot(
            score=clamp_score(raw - penalty),
            learning=learning,
            workout=workout,
            sleep=sleep,
            screen_time=screen_time,
            mits=mits,
            streak_bonus=streak_bonus,
            penalty=penalty,
            finalized_days=len(days),
        )
        logger.debug("Computed life score %d from %d day(s)", snapshot.score, len(days))
        return snapshot

    @staticmethod
    def _screen_component(
        days: List[DayRecord], configuration: Configuration
    ) -> Tuple[float, float]:
        """(points, penalty) for the window's average screen time."""
        weights = configuration.scoring.weights
        penalties = configuration.scoring.penalties
        goal = configuration.habits.screen_time.daily_limit_hours

        average = sum(r.screen_time_hours for r in days) / len(days)
        if average <= goal:
            return weights.screen_time, 0.0
        if average <= goal * 1.5:
            return weights.screen_time_partial, 0.0
        if average <= goal * 2:
            return weights.screen_time_minimal, penalties.screen_over_double_goal
        return 0.0, penalties.screen_heavy

    @staticmethod
    def _streak_bonus(
        streak_states: Mapping[str, StreakState], configuration: Configuration
    ) -> float:
        bonus = configuration.scoring.streak_bonus
        factors: Dict[str, float] = {
            LEARNING: bonus.learning,
            WORKOUT: bonus.workout,
            SLEEP: bonus.sleep,
        }
        total = 0.0
        for habit_id, factor in factors.items():
            state = streak_states.get(habit_id)
            if state is not None:
                total += state.current * factor
        return min(total, bonus.cap)

    @staticmethod
    def _penalties(
        streak_states: Mapping[str, StreakState],
        configuration: Configuration,
        *,
        today: Optional[DayRecord],
        yesterday: Optional[DayRecord],
        now: datetime,
    ) -> float:
        p = configuration.scoring.penalties
        screen = configuration.habits.screen_time
        total = 0.0

        learned_today = today is not None and today.learning_done
        if now.hour >= p.late_day_hour and not learned_today:
            total += p.late_day_no_learning

        if yesterday is not None and yesterday.slept_on_time is False:
            total += p.slept_late

        if today is not None:
            if today.screen_time_hours > screen.critical_hours:
                total += p.today_screen_critical
            elif today.screen_time_hours > screen.daily_limit_hours:
                total += p.today_screen_over_limit

        recovery_days = sum(s.recovery_days_remaining for s in streak_states.values())
        total += recovery_days * p.per_recovery_day

        return total
