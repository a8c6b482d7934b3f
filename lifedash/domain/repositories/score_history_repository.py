"""ScoreHistoryRepository protocol: defines life score history contract."""

from datetime import date
from typing import List, Protocol, Tuple, runtime_checkable

from ...models.value_objects import ScoreSnapshot


@runtime_checkable
class ScoreHistoryRepository(Protocol):
    """Repository interface for per-day score snapshots."""

    async def record(self, day: date, snapshot: ScoreSnapshot) -> None:
        """Store the score computed when ``day`` was finalized."""
        ...

    async def list_recent(self, days: int) -> List[Tuple[date, ScoreSnapshot]]:
        """Up to ``days`` most recent entries, newest first."""
        ...
