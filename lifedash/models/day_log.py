"""
Day log models: one row per calendar day plus its MIT and task rows.
"""

import datetime as dt
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin


class DayLog(Base, TimestampMixin):
    """Persisted DayRecord."""

    __tablename__ = "daily_logs"

    date: Mapped[dt.date] = mapped_column(Date, primary_key=True)

    # Sleep
    wake_time: Mapped[Optional[dt.time]] = mapped_column(Time, nullable=True)
    bedtime: Mapped[Optional[dt.time]] = mapped_column(Time, nullable=True)
    slept_on_time: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)

    # Learning / workout
    learning_done: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    learning_hours: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    learning_topic: Mapped[str] = mapped_column(Text, default="", nullable=False)
    workout_done: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    workout_type: Mapped[str] = mapped_column(String(100), default="", nullable=False)

    screen_time_hours: Mapped[float] = mapped_column(
        Float, default=0.0, nullable=False
    )
    mood: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # 1-5

    # Lifecycle
    finalized: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    finalized_at: Mapped[Optional[dt.datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    final_state: Mapped[Optional[str]] = mapped_column(
        String(20), nullable=True
    )  # COMPLETED, MISSED, NOT_COUNTED
    last_interaction: Mapped[Optional[dt.datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    tasks: Mapped[List["DayTaskRow"]] = relationship(
        "DayTaskRow",
        back_populates="day",
        cascade="all, delete-orphan",
        order_by="(DayTaskRow.kind, DayTaskRow.position)",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return (
            f"<DayLog(date={self.date}, finalized={self.finalized}, "
            f"final_state={self.final_state})>"
        )


class DayTaskRow(Base):
    """An MIT slot (kind="mit") or an additional task (kind="task")."""

    __tablename__ = "day_tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    day_date: Mapped[dt.date] = mapped_column(
        Date, ForeignKey("daily_logs.date", ondelete="CASCADE"), nullable=False, index=True
    )
    kind: Mapped[str] = mapped_column(String(10), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    text: Mapped[str] = mapped_column(Text, default="", nullable=False)
    done: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    day: Mapped["DayLog"] = relationship("DayLog", back_populates="tasks")
