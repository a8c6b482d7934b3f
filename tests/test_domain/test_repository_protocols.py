"""Concrete repositories and units of work satisfy the domain protocols."""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from lifedash.core.typed_config_loader import YamlConfigurationProvider
from lifedash.domain.ports import ConfigurationProvider, UnitOfWork
from lifedash.domain.repositories import (
    DayRecordRepository,
    DayStateLogRepository,
    ScoreHistoryRepository,
    StreakStateRepository,
)
from lifedash.infrastructure.repositories import (
    SqlAlchemyDayRecordRepository,
    SqlAlchemyDayStateLogRepository,
    SqlAlchemyScoreHistoryRepository,
    SqlAlchemyStreakRepository,
    SqlAlchemyUnitOfWork,
)


def _session() -> AsyncSession:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    return async_sessionmaker(engine, class_=AsyncSession)()


class TestRepositoryProtocols:
    def test_day_record_repository(self):
        assert isinstance(SqlAlchemyDayRecordRepository(_session()), DayRecordRepository)

    def test_streak_repository(self):
        assert isinstance(SqlAlchemyStreakRepository(_session()), StreakStateRepository)

    def test_score_history_repository(self):
        assert isinstance(
            SqlAlchemyScoreHistoryRepository(_session()), ScoreHistoryRepository
        )

    def test_state_log_repository(self):
        assert isinstance(
            SqlAlchemyDayStateLogRepository(_session()), DayStateLogRepository
        )

    def test_plain_object_is_not_a_repository(self):
        assert not isinstance(object(), DayRecordRepository)


class TestPorts:
    def test_yaml_provider_is_configuration_provider(self):
        assert isinstance(YamlConfigurationProvider(), ConfigurationProvider)

    async def test_sqlalchemy_unit_of_work(self):
        engine = create_async_engine("sqlite+aiosqlite:///:memory:")
        factory = async_sessionmaker(engine, class_=AsyncSession)
        async with SqlAlchemyUnitOfWork(factory) as uow:
            assert isinstance(uow, UnitOfWork)
        await engine.dispose()
