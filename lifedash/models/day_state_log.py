import datetime as dt
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class DayStateLogRow(Base):
    """Append-only day state transition (finalize, automatic close)."""

    __tablename__ = "day_state_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    from_state: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    to_state: Mapped[str] = mapped_column(String(20), nullable=False)
    reason: Mapped[str] = mapped_column(Text, default="", nullable=False)
    automatic: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    logged_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<DayStateLogRow(date={self.date}, {self.from_state} -> {self.to_state}, "
            f"automatic={self.automatic})>"
        )
