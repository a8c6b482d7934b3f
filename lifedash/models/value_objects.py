"""Domain value objects: immutable day, streak and score records.

Everything here is a frozen dataclass. Services never mutate a record in
place; they return a new one via ``dataclasses.replace`` so a failed
finalize can never leave a half-updated object behind.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class DayState(str, Enum):
    """Every state a calendar day can be in.

    ``NOT_STARTED`` and ``IN_PROGRESS`` are UI-only states for a day that has
    not been finalized. The other three are terminal and persisted.
    """

    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    MISSED = "MISSED"
    NOT_COUNTED = "NOT_COUNTED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset({DayState.COMPLETED, DayState.MISSED, DayState.NOT_COUNTED})

MIT_SLOTS = 3


@dataclass(frozen=True)
class TaskItem:
    """A Most-Important-Task slot or an additional task."""

    text: str = ""
    done: bool = False

    @property
    def is_filled(self) -> bool:
        return bool(self.text.strip())


def _empty_mits() -> Tuple[TaskItem, ...]:
    return tuple(TaskItem() for _ in range(MIT_SLOTS))


# Bookkeeping fields that do not count as "user touched the day".
_NON_DATA_FIELDS = frozenset(
    {"date", "finalized", "finalized_at", "final_state", "last_interaction"}
)


@dataclass(frozen=True)
class DayRecord:
    """One calendar day of logged activity, keyed by ``date``."""

    date: date
    wake_time: Optional[time] = None
    bedtime: Optional[time] = None
    slept_on_time: Optional[bool] = None
    learning_done: bool = False
    learning_hours: float = 0.0
    learning_topic: str = ""
    workout_done: bool = False
    workout_type: str = ""
    screen_time_hours: float = 0.0
    mood: Optional[int] = None
    mits: Tuple[TaskItem, ...] = field(default_factory=_empty_mits)
    tasks: Tuple[TaskItem, ...] = ()
    finalized: bool = False
    finalized_at: Optional[datetime] = None
    final_state: Optional[DayState] = None
    last_interaction: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.mood is not None and not 1 <= self.mood <= 5:
            raise ValueError(f"mood must be between 1 and 5, got {self.mood}")
        if self.learning_hours < 0:
            raise ValueError("learning_hours must be >= 0")
        if self.screen_time_hours < 0:
            raise ValueError("screen_time_hours must be >= 0")
        if len(self.mits) != MIT_SLOTS:
            raise ValueError(f"a day has exactly {MIT_SLOTS} MIT slots")
        if self.final_state is not None and not self.final_state.is_terminal:
            raise ValueError(f"final_state must be terminal, got {self.final_state}")

    @classmethod
    def empty(cls, day: date) -> "DayRecord":
        """A fresh, untouched record for ``day``."""
        return cls(date=day)

    # --- Derived facts ---

    def has_any_data(self) -> bool:
        """True once any data field differs from a fresh record."""
        blank = DayRecord.empty(self.date)
        for f in fields(self):
            if f.name in _NON_DATA_FIELDS:
                continue
            if getattr(self, f.name) != getattr(blank, f.name):
                return True
        return False

    @property
    def mits_completed(self) -> int:
        return sum(1 for mit in self.mits if mit.done)

    @property
    def mits_filled(self) -> int:
        return sum(1 for mit in self.mits if mit.is_filled)

    @property
    def is_settled(self) -> bool:
        """Finalized by the user, or swept into a terminal state."""
        return self.finalized or self.final_state is not None

    # --- Transitions (return new records) ---

    def with_changes(self, **changes: Any) -> "DayRecord":
        return replace(self, **changes)

    def as_finalized(self, at: datetime, state: DayState) -> "DayRecord":
        return replace(
            self,
            finalized=True,
            finalized_at=at,
            final_state=state,
            last_interaction=at,
        )

    def as_not_counted(self) -> "DayRecord":
        return replace(self, finalized=False, final_state=DayState.NOT_COUNTED)


@dataclass(frozen=True)
class StreakState:
    """Streak counters for one streak-eligible habit."""

    habit_id: str
    current: int = 0
    best: int = 0
    last_evaluated_date: Optional[date] = None
    last_broken_date: Optional[date] = None
    recovery_days_remaining: int = 0

    def __post_init__(self) -> None:
        if self.current < 0:
            raise ValueError("current streak must be >= 0")
        if self.recovery_days_remaining < 0:
            raise ValueError("recovery_days_remaining must be >= 0")

    @property
    def is_recovering(self) -> bool:
        return self.recovery_days_remaining > 0

    def with_changes(self, **changes: Any) -> "StreakState":
        return replace(self, **changes)


@dataclass(frozen=True)
class ScoreSnapshot:
    """Life score with the components it was built from."""

    score: int
    learning: float = 0.0
    workout: float = 0.0
    sleep: float = 0.0
    screen_time: float = 0.0
    mits: float = 0.0
    streak_bonus: float = 0.0
    penalty: float = 0.0
    finalized_days: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "components": {
                "learning": round(self.learning, 2),
                "workout": round(self.workout, 2),
                "sleep": round(self.sleep, 2),
                "screen_time": round(self.screen_time, 2),
                "mits": round(self.mits, 2),
                "streak_bonus": round(self.streak_bonus, 2),
            },
            "penalty": round(self.penalty, 2),
            "finalized_days": self.finalized_days,
        }


EMPTY_SCORE = ScoreSnapshot(score=0)


@dataclass(frozen=True)
class DayStateTransition:
    """One entry of a day's state log: finalize or automatic close."""

    date: date
    to_state: DayState
    from_state: Optional[DayState] = None
    reason: str = ""
    automatic: bool = False
    logged_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "from_state": self.from_state.value if self.from_state else None,
            "to_state": self.to_state.value,
            "reason": self.reason,
            "automatic": self.automatic,
            "logged_at": self.logged_at.isoformat() if self.logged_at else None,
        }
