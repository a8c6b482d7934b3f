"""UnitOfWork port -- one atomic persistence scope for all day storage."""

from typing import Protocol, runtime_checkable

from ..repositories import (
    DayRecordRepository,
    DayStateLogRepository,
    ScoreHistoryRepository,
    StreakStateRepository,
)


@runtime_checkable
class UnitOfWork(Protocol):
    """Async context manager over one storage transaction.

    Changes become durable only on ``commit()``. Leaving the block without a
    commit, or by raising, rolls everything back.
    """

    days: DayRecordRepository
    streaks: StreakStateRepository
    scores: ScoreHistoryRepository
    state_log: DayStateLogRepository

    async def __aenter__(self) -> "UnitOfWork":
        ...

    async def __aexit__(self, exc_type, exc, tb) -> None:
        ...

    async def commit(self) -> None:
        ...
