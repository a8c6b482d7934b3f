"""DayRecordRepository protocol: defines day log storage contract."""

from datetime import date
from typing import List, Optional, Protocol, runtime_checkable

from ...models.value_objects import DayRecord


@runtime_checkable
class DayRecordRepository(Protocol):
    """Repository interface for DayRecord access, keyed by calendar date."""

    async def get(self, day: date) -> Optional[DayRecord]:
        """Load the record for ``day``.

        Args:
            day: Calendar date of the record.

        Returns:
            The DayRecord, or None if the day was never touched.
        """
        ...

    async def save(self, record: DayRecord) -> None:
        """Insert or replace the record for ``record.date``."""
        ...

    async def list_range(self, start: date, end: date) -> List[DayRecord]:
        """Records with ``start <= date <= end``, oldest first.

        Args:
            start: First date, inclusive.
            end: Last date, inclusive.

        Returns:
            List of DayRecords (may be empty; gaps are omitted).
        """
        ...

    async def latest_date_before(self, day: date) -> Optional[date]:
        """Most recent stored date strictly before ``day``, or None."""
        ...
