from .day_record_repository import DayRecordRepository
from .day_state_log_repository import DayStateLogRepository
from .score_history_repository import ScoreHistoryRepository
from .streak_state_repository import StreakStateRepository

__all__ = [
    "DayRecordRepository",
    "DayStateLogRepository",
    "ScoreHistoryRepository",
    "StreakStateRepository",
]
