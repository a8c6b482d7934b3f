"""
Typed domain errors for the life dashboard.

Callers can tell a recoverable rejection (already finalized, missing habit
data, closed day) apart from a fatal one (bad configuration) and map each to
an appropriate user-facing response.
"""

from datetime import date
from typing import List, Optional


class DomainError(Exception):
    """Base class for all domain-specific errors."""


# ---------------------------------------------------------------------------
# Day lifecycle
# ---------------------------------------------------------------------------


class AlreadyFinalizedError(DomainError):
    """The day was already finalized; nothing was changed."""

    def __init__(self, day: date) -> None:
        self.day = day
        super().__init__(f"Day {day.isoformat()} is already finalized")


class DayClosedError(DomainError):
    """The day is no longer the logical today and cannot be edited."""

    def __init__(self, day: date, today: date) -> None:
        self.day = day
        self.today = today
        super().__init__(
            f"Day {day.isoformat()} is closed (today is {today.isoformat()})"
        )


class HabitDataRejected(DomainError):
    """Required habit data is missing; rejected before any state change."""

    def __init__(self, habit_id: str, reasons: List[str]) -> None:
        self.habit_id = habit_id
        self.reasons = list(reasons)
        super().__init__(f"{habit_id}: " + "; ".join(self.reasons))


class InvalidRangeError(DomainError):
    """A date range whose start falls after its end."""

    def __init__(self, start: date, end: date) -> None:
        self.start = start
        self.end = end
        super().__init__(
            f"Range start {start.isoformat()} is after end {end.isoformat()}"
        )


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class InvalidConfigurationError(DomainError):
    """Rule parameters are missing or malformed."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        self.path = path
        if path:
            message = f"{message} ({path})"
        super().__init__(message)


# ---------------------------------------------------------------------------
# Streaks
# ---------------------------------------------------------------------------


class StaleEvaluationError(DomainError):
    """A streak evaluation was requested for a date older than the last one."""

    def __init__(self, habit_id: str, day: date, last_evaluated: date) -> None:
        self.habit_id = habit_id
        self.day = day
        self.last_evaluated = last_evaluated
        super().__init__(
            f"{habit_id}: {day.isoformat()} is older than last evaluation "
            f"{last_evaluated.isoformat()}"
        )
