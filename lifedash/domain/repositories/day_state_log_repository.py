"""DayStateLogRepository protocol: defines day state transition log contract."""

from datetime import date
from typing import List, Protocol, runtime_checkable

from ...models.value_objects import DayStateTransition


@runtime_checkable
class DayStateLogRepository(Protocol):
    """Append-only log of day state transitions."""

    async def append(self, transition: DayStateTransition) -> None:
        """Record one transition."""
        ...

    async def list_for(self, day: date) -> List[DayStateTransition]:
        """Transitions of ``day``, oldest first."""
        ...
