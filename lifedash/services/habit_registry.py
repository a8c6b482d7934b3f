"""
Static catalog of trackable habits.

The registry says what a habit *is*; Configuration says whether it is
enabled and how strict it is.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

LEARNING = "learning"
WORKOUT = "workout"
SLEEP = "sleep"
SCREEN_TIME = "screen_time"


@dataclass(frozen=True)
class HabitDefinition:
    id: str
    name: str
    streak_enabled: bool


# Order matters: it is the order of get_enabled_required_habits().
HABITS: Dict[str, HabitDefinition] = {
    LEARNING: HabitDefinition(
        id=LEARNING,
        name="Learning",
        streak_enabled=True,
    ),
    WORKOUT: HabitDefinition(
        id=WORKOUT,
        name="Workout",
        streak_enabled=True,
    ),
    SLEEP: HabitDefinition(
        id=SLEEP,
        name="Sleep",
        streak_enabled=True,
    ),
    SCREEN_TIME: HabitDefinition(
        id=SCREEN_TIME,
        name="Screen Time",
        streak_enabled=False,  # a limit, not a streak
    ),
}

HABIT_ORDER: List[str] = list(HABITS)

STREAK_HABITS: List[str] = [h.id for h in HABITS.values() if h.streak_enabled]


def get_habit(habit_id: str) -> Optional[HabitDefinition]:
    return HABITS.get(habit_id)


def display_name(habit_id: str) -> str:
    habit = HABITS.get(habit_id)
    return habit.name if habit else habit_id
