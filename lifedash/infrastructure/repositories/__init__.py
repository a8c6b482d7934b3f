from .sqlalchemy_day_record_repository import SqlAlchemyDayRecordRepository
from .sqlalchemy_day_state_log_repository import SqlAlchemyDayStateLogRepository
from .sqlalchemy_score_history_repository import SqlAlchemyScoreHistoryRepository
from .sqlalchemy_streak_repository import SqlAlchemyStreakRepository
from .sqlalchemy_unit_of_work import SqlAlchemyUnitOfWork, SqlAlchemyUnitOfWorkFactory

__all__ = [
    "SqlAlchemyDayRecordRepository",
    "SqlAlchemyDayStateLogRepository",
    "SqlAlchemyScoreHistoryRepository",
    "SqlAlchemyStreakRepository",
    "SqlAlchemyUnitOfWork",
    "SqlAlchemyUnitOfWorkFactory",
]
