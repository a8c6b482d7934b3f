"""
Per-habit streak state machine.

Two states per habit: NORMAL (``recovery_days_remaining == 0``) and
RECOVERING. Only a finalized DayRecord moves a streak, and each
(habit, date) pair is applied at most once: ``last_evaluated_date`` is the
idempotency guard.

Break policy by sensitivity:

    strict    current -> 0, recovery = min(ceil(prior / divisor), max_recovery_days)
    moderate  current -> prior // 2, no recovery
    lenient   no penalty
"""

import logging
import math
from datetime import date, datetime
from typing import Dict, Iterable, Optional

from ..core.typed_config import Configuration, StreakSettings
from ..domain.errors import StaleEvaluationError
from ..models.value_objects import DayRecord, StreakState
from .habit_registry import STREAK_HABITS, get_habit
from .habit_validator import HabitValidator

logger = logging.getLogger(__name__)

AT_RISK_HOUR = 20


def _ensure_fresh(habit_id: str, day: date, last_evaluated: Optional[date]) -> None:
    if last_evaluated is not None and day < last_evaluated:
        raise StaleEvaluationError(habit_id, day, last_evaluated)


def recovery_length(prior_streak: int, settings: StreakSettings) -> int:
    """Longer broken streaks earn longer recovery, capped."""
    return min(
        math.ceil(prior_streak / settings.recovery_divisor),
        settings.max_recovery_days,
    )


class StreakEngine:
    """Pure streak transitions. All methods are static."""

    @staticmethod
    def evaluate(
        habit_id: str,
        record: DayRecord,
        state: StreakState,
        configuration: Configuration,
    ) -> StreakState:
        """Apply one day's outcome to one habit's streak."""
        if state.last_evaluated_date == record.date:
            return state
        try:
            _ensure_fresh(habit_id, record.date, state.last_evaluated_date)
        except StaleEvaluationError as e:
            logger.debug("Skipping stale streak evaluation: %s", e)
            return state

        habit = get_habit(habit_id)
        if habit is None or not habit.streak_enabled:
            return state
        # Disabled habits are frozen, not penalized.
        if not configuration.is_enabled(habit_id):
            return state
        # NOT_COUNTED days never touch streaks.
        if not record.finalized:
            return state

        satisfied = HabitValidator.is_satisfied(habit_id, record, configuration)

        if state.is_recovering:
            if not satisfied:
                return state.with_changes(last_evaluated_date=record.date)
            remaining = state.recovery_days_remaining - 1
            current = 1 if remaining == 0 else state.current
            if remaining == 0:
                logger.info("%s streak restarted after recovery on %s", habit_id, record.date)
            return state.with_changes(
                recovery_days_remaining=remaining,
                current=current,
                best=max(state.best, current),
                last_evaluated_date=record.date,
            )

        if satisfied:
            current = state.current + 1
            return state.with_changes(
                current=current,
                best=max(state.best, current),
                last_evaluated_date=record.date,
            )

        return StreakEngine.apply_break(state, record.date, configuration.streaks)

    @staticmethod
    def apply_break(
        state: StreakState, day: date, settings: StreakSettings
    ) -> StreakState:
        """Penalize a MISSED day for one habit."""
        prior = state.current
        stamped = state.with_changes(last_evaluated_date=day)

        # Nothing to break.
        if prior == 0:
            return stamped

        if settings.sensitivity == "lenient":
            return stamped

        if settings.sensitivity == "moderate":
            broken = stamped.with_changes(
                current=prior // 2,
                best=max(state.best, prior),
                last_broken_date=day,
                recovery_days_remaining=0,
            )
        else:
            broken = stamped.with_changes(
                current=0,
                best=max(state.best, prior),
                last_broken_date=day,
                recovery_days_remaining=recovery_length(prior, settings),
            )

        logger.info(
            "%s streak broken on %s (%s): %d -> %d, recovery %d day(s)",
            state.habit_id,
            day,
            settings.sensitivity,
            prior,
            broken.current,
            broken.recovery_days_remaining,
        )
        return broken

    @staticmethod
    def evaluate_all(
        record: DayRecord,
        states: Dict[str, StreakState],
        configuration: Configuration,
        habit_ids: Iterable[str] = STREAK_HABITS,
    ) -> Dict[str, StreakState]:
        """Evaluate every streak habit; each runs to completion before the next."""
        updated = dict(states)
        for habit_id in habit_ids:
            current = updated.get(habit_id) or StreakState(habit_id=habit_id)
            updated[habit_id] = StreakEngine.evaluate(
                habit_id, record, current, configuration
            )
        return updated

    @staticmethod
    def is_at_risk(
        habit_id: str,
        record: DayRecord,
        configuration: Configuration,
        now: datetime,
    ) -> bool:
        """Late in the day and an enabled streak habit is still unmet."""
        habit = get_habit(habit_id)
        if habit is None or not habit.streak_enabled:
            return False
        if not configuration.is_enabled(habit_id) or record.finalized:
            return False
        if HabitValidator.is_satisfied(habit_id, record, configuration):
            return False
        return now.hour >= AT_RISK_HOUR
