"""SQLAlchemy implementation of DayRecordRepository."""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...models.day_log import DayLog, DayTaskRow
from ...models.value_objects import MIT_SLOTS, DayRecord, DayState, TaskItem

logger = logging.getLogger(__name__)

MIT_KIND = "mit"
TASK_KIND = "task"


def row_to_record(row: DayLog) -> DayRecord:
    """Map a DayLog row (with its task rows loaded) to a DayRecord."""
    mits = [TaskItem() for _ in range(MIT_SLOTS)]
    tasks = []
    for task in sorted(row.tasks, key=lambda t: (t.kind, t.position)):
        item = TaskItem(text=task.text, done=task.done)
        if task.kind == MIT_KIND and 0 <= task.position < MIT_SLOTS:
            mits[task.position] = item
        elif task.kind == TASK_KIND:
            tasks.append(item)

    return DayRecord(
        date=row.date,
        wake_time=row.wake_time,
        bedtime=row.bedtime,
        slept_on_time=row.slept_on_time,
        learning_done=row.learning_done,
        learning_hours=row.learning_hours,
        learning_topic=row.learning_topic or "",
        workout_done=row.workout_done,
        workout_type=row.workout_type or "",
        screen_time_hours=row.screen_time_hours,
        mood=row.mood,
        mits=tuple(mits),
        tasks=tuple(tasks),
        finalized=row.finalized,
        finalized_at=row.finalized_at,
        final_state=DayState(row.final_state) if row.final_state else None,
        last_interaction=row.last_interaction,
    )


def apply_record(row: DayLog, record: DayRecord) -> None:
    """Copy every DayRecord field onto ``row``, replacing its task rows."""
    row.wake_time = record.wake_time
    row.bedtime = record.bedtime
    row.slept_on_time = record.slept_on_time
    row.learning_done = record.learning_done
    row.learning_hours = record.learning_hours
    row.learning_topic = record.learning_topic
    row.workout_done = record.workout_done
    row.workout_type = record.workout_type
    row.screen_time_hours = record.screen_time_hours
    row.mood = record.mood
    row.finalized = record.finalized
    row.finalized_at = record.finalized_at
    row.final_state = record.final_state.value if record.final_state else None
    row.last_interaction = record.last_interaction

    row.tasks = [
        DayTaskRow(kind=MIT_KIND, position=i, text=m.text, done=m.done)
        for i, m in enumerate(record.mits)
    ] + [
        DayTaskRow(kind=TASK_KIND, position=i, text=t.text, done=t.done)
        for i, t in enumerate(record.tasks)
    ]


class SqlAlchemyDayRecordRepository:
    """Concrete DayRecordRepository backed by SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, day: date) -> Optional[DayRecord]:
        row = await self._session.get(DayLog, day)
        return row_to_record(row) if row is not None else None

    async def save(self, record: DayRecord) -> None:
        row = await self._session.get(DayLog, record.date)
        if row is None:
            row = DayLog(date=record.date, tasks=[])
            self._session.add(row)
        apply_record(row, record)
        await self._session.flush()

    async def list_range(self, start: date, end: date) -> List[DayRecord]:
        result = await self._session.execute(
            select(DayLog)
            .where(DayLog.date >= start, DayLog.date <= end)
            .order_by(DayLog.date)
        )
        return [row_to_record(row) for row in result.scalars().all()]

    async def latest_date_before(self, day: date) -> Optional[date]:
        result = await self._session.execute(
            select(func.max(DayLog.date)).where(DayLog.date < day)
        )
        return result.scalar_one_or_none()
