from .base import Base, TimestampMixin
from .day_log import DayLog, DayTaskRow
from .day_state_log import DayStateLogRow
from .score_history import ScoreHistoryRow
from .streak import StreakRow

__all__ = [
    "Base",
    "TimestampMixin",
    "DayLog",
    "DayTaskRow",
    "DayStateLogRow",
    "StreakRow",
    "ScoreHistoryRow",
]
