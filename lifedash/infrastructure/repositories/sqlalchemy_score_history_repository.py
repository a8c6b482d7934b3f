"""SQLAlchemy implementation of ScoreHistoryRepository."""

from datetime import date
from typing import List, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...models.score_history import ScoreHistoryRow
from ...models.value_objects import ScoreSnapshot


class SqlAlchemyScoreHistoryRepository:
    """Concrete ScoreHistoryRepository backed by SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def record(self, day: date, snapshot: ScoreSnapshot) -> None:
        row = await self._session.get(ScoreHistoryRow, day)
        if row is None:
            row = ScoreHistoryRow(date=day, score=snapshot.score)
            self._session.add(row)
        row.score = snapshot.score
        row.learning = snapshot.learning
        row.workout = snapshot.workout
        row.sleep = snapshot.sleep
        row.screen_time = snapshot.screen_time
        row.mits = snapshot.mits
        row.streak_bonus = snapshot.streak_bonus
        row.penalty = snapshot.penalty
        row.finalized_days = snapshot.finalized_days
        await self._session.flush()

    async def list_recent(self, days: int) -> List[Tuple[date, ScoreSnapshot]]:
        result = await self._session.execute(
            select(ScoreHistoryRow).order_by(ScoreHistoryRow.date.desc()).limit(days)
        )
        return [
            (
                row.date,
                ScoreSnapshot(
                    score=row.score,
                    learning=row.learning,
                    workout=row.workout,
                    sleep=row.sleep,
                    screen_time=row.screen_time,
                    mits=row.mits,
                    streak_bonus=row.streak_bonus,
                    penalty=row.penalty,
                    finalized_days=row.finalized_days,
                ),
            )
            for row in result.scalars().all()
        ]
