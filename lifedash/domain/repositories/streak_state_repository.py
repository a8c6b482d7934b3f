"""StreakStateRepository protocol: defines streak counter storage contract."""

from typing import Dict, Protocol, runtime_checkable

from ...models.value_objects import StreakState


@runtime_checkable
class StreakStateRepository(Protocol):
    """Repository interface for per-habit StreakState."""

    async def load_all(self) -> Dict[str, StreakState]:
        """Load every stored streak, keyed by habit id.

        Returns:
            Mapping of habit id to StreakState (may be empty).
        """
        ...

    async def save_all(self, states: Dict[str, StreakState]) -> None:
        """Insert or replace every state in ``states``."""
        ...
