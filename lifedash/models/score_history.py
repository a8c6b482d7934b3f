import datetime as dt

from sqlalchemy import Date, Float, Integer
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class ScoreHistoryRow(Base, TimestampMixin):
    """Life score recorded when a day was finalized."""

    __tablename__ = "score_history"

    date: Mapped[dt.date] = mapped_column(Date, primary_key=True)
    score: Mapped[int] = mapped_column(Integer, nullable=False)

    # Component breakdown
    learning: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    workout: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    sleep: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    screen_time: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    mits: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    streak_bonus: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    penalty: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    finalized_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
