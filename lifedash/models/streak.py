from datetime import date
from typing import Optional

from sqlalchemy import Date, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class StreakRow(Base, TimestampMixin):
    """Persisted StreakState, one row per streak habit."""

    __tablename__ = "streaks"

    habit_id: Mapped[str] = mapped_column(String(50), primary_key=True)
    current: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    best: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_evaluated_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    last_broken_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    recovery_days_remaining: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<StreakRow(habit_id={self.habit_id}, current={self.current}, "
            f"recovery={self.recovery_days_remaining})>"
        )
