"""SQLAlchemy implementation of StreakStateRepository."""

import logging
from typing import Dict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...models.streak import StreakRow
from ...models.value_objects import StreakState

logger = logging.getLogger(__name__)


class SqlAlchemyStreakRepository:
    """Concrete StreakStateRepository backed by SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def load_all(self) -> Dict[str, StreakState]:
        result = await self._session.execute(select(StreakRow))
        return {
            row.habit_id: StreakState(
                habit_id=row.habit_id,
                current=row.current,
                best=row.best,
                last_evaluated_date=row.last_evaluated_date,
                last_broken_date=row.last_broken_date,
                recovery_days_remaining=row.recovery_days_remaining,
            )
            for row in result.scalars().all()
        }

    async def save_all(self, states: Dict[str, StreakState]) -> None:
        for habit_id, state in states.items():
            row = await self._session.get(StreakRow, habit_id)
            if row is None:
                row = StreakRow(habit_id=habit_id)
                self._session.add(row)
            row.current = state.current
            row.best = state.best
            row.last_evaluated_date = state.last_evaluated_date
            row.last_broken_date = state.last_broken_date
            row.recovery_days_remaining = state.recovery_days_remaining
        await self._session.flush()
        logger.debug("Saved %d streak state(s)", len(states))
