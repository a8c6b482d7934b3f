"""
Day state machine.

Classifies a day; never mutates it. The single governing rule:

- never finalized          -> NOT_COUNTED (partial data is never failure)
- finalized, no habits      -> COMPLETED
- finalized, all satisfied  -> COMPLETED
- finalized, any failing    -> MISSED
"""

from dataclasses import dataclass, field
from typing import List, Optional

from ..core.typed_config import Configuration
from ..models.value_objects import DayRecord, DayState
from .habit_registry import display_name
from .habit_validator import HabitValidator


@dataclass(frozen=True)
class FinalStatePreview:
    """What finalizing right now would produce."""

    state: DayState
    failing_habits: List[str] = field(default_factory=list)
    mits_completed: int = 0

    @property
    def will_complete(self) -> bool:
        return self.state is DayState.COMPLETED


class DayStateMachine:
    """Pure classification of DayRecords."""

    @staticmethod
    def calculate_state(
        record: Optional[DayRecord], configuration: Configuration
    ) -> DayState:
        if record is None or not record.finalized:
            return DayState.NOT_COUNTED
        return DayStateMachine._judge(record, configuration)

    @staticmethod
    def get_ui_state(
        record: Optional[DayRecord], configuration: Configuration
    ) -> DayState:
        """Display state; never feeds streaks or score."""
        if record is None:
            return DayState.NOT_STARTED
        if record.finalized:
            return DayStateMachine.calculate_state(record, configuration)
        if not record.has_any_data():
            return DayState.NOT_STARTED
        return DayState.IN_PROGRESS

    @staticmethod
    def preview_final_state(
        record: DayRecord, configuration: Configuration
    ) -> FinalStatePreview:
        failing = HabitValidator.failing_habits(record, configuration)
        return FinalStatePreview(
            state=DayStateMachine._judge(record, configuration),
            failing_habits=[display_name(h) for h in failing],
            mits_completed=record.mits_completed,
        )

    @staticmethod
    def _judge(record: DayRecord, configuration: Configuration) -> DayState:
        # Shared by finalize and preview.
        required = HabitValidator.get_enabled_required_habits(configuration)
        if not required:
            return DayState.COMPLETED
        if all(HabitValidator.is_satisfied(h, record, configuration) for h in required):
            return DayState.COMPLETED
        return DayState.MISSED
