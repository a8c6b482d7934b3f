"""SQLAlchemy implementation of the UnitOfWork port."""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .sqlalchemy_day_record_repository import SqlAlchemyDayRecordRepository
from .sqlalchemy_day_state_log_repository import SqlAlchemyDayStateLogRepository
from .sqlalchemy_score_history_repository import SqlAlchemyScoreHistoryRepository
from .sqlalchemy_streak_repository import SqlAlchemyStreakRepository

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork:
    """One AsyncSession shared by the day, streak, score and state log repositories.

    Nothing is durable until ``commit()``. Exiting without a commit, or with
    an exception, rolls the session back.
    """

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        self._session = self._session_factory()
        self.days = SqlAlchemyDayRecordRepository(self._session)
        self.streaks = SqlAlchemyStreakRepository(self._session)
        self.scores = SqlAlchemyScoreHistoryRepository(self._session)
        self.state_log = SqlAlchemyDayStateLogRepository(self._session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is not None:
                logger.warning("Rolling back unit of work: %s", exc)
            await self._session.rollback()
        finally:
            await self._session.close()
            self._session = None

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()


class SqlAlchemyUnitOfWorkFactory:
    """Callable producing a fresh SqlAlchemyUnitOfWork per operation."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory

    def __call__(self) -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(self._session_factory)
