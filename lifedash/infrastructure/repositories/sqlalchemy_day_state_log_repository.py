"""SQLAlchemy implementation of DayStateLogRepository."""

from datetime import date
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...models.day_state_log import DayStateLogRow
from ...models.value_objects import DayState, DayStateTransition


class SqlAlchemyDayStateLogRepository:
    """Concrete DayStateLogRepository backed by SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def append(self, transition: DayStateTransition) -> None:
        self._session.add(
            DayStateLogRow(
                date=transition.date,
                from_state=transition.from_state.value if transition.from_state else None,
                to_state=transition.to_state.value,
                reason=transition.reason,
                automatic=transition.automatic,
                logged_at=transition.logged_at,
            )
        )
        await self._session.flush()

    async def list_for(self, day: date) -> List[DayStateTransition]:
        result = await self._session.execute(
            select(DayStateLogRow)
            .where(DayStateLogRow.date == day)
            .order_by(DayStateLogRow.logged_at, DayStateLogRow.id)
        )
        return [
            DayStateTransition(
                date=row.date,
                to_state=DayState(row.to_state),
                from_state=DayState(row.from_state) if row.from_state else None,
                reason=row.reason,
                automatic=row.automatic,
                logged_at=row.logged_at,
            )
            for row in result.scalars().all()
        ]
