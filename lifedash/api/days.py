"""
Day lifecycle HTTP API.

Thin adapter: parses requests, calls DayLifecycleService, JSON-encodes the
result. Domain errors are mapped to responses by the error handler.
"""

import logging
from datetime import date, time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Path, Query, Request
from pydantic import BaseModel, ConfigDict, Field

from ..models.value_objects import (
    MIT_SLOTS,
    DayRecord,
    DayState,
    ScoreSnapshot,
    StreakState,
    TaskItem,
)
from ..services.day_lifecycle import DayLifecycleService, DayStatus, FinalizeResult
from ..services.habit_registry import display_name

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["days"])


def get_lifecycle_service(request: Request) -> DayLifecycleService:
    """FastAPI dependency: the service built in the app lifespan."""
    return request.app.state.lifecycle_service


# Request models
class TaskModel(BaseModel):
    text: str = ""
    done: bool = False


class DayUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    wake_time: Optional[time] = None
    bedtime: Optional[time] = None
    slept_on_time: Optional[bool] = None
    learning_done: Optional[bool] = None
    learning_hours: Optional[float] = Field(default=None, ge=0)
    learning_topic: Optional[str] = None
    workout_done: Optional[bool] = None
    workout_type: Optional[str] = None
    screen_time_hours: Optional[float] = Field(default=None, ge=0)
    mood: Optional[int] = Field(default=None, ge=1, le=5)
    mits: Optional[List[TaskModel]] = Field(default=None, max_length=MIT_SLOTS)
    tasks: Optional[List[TaskModel]] = None

    def to_changes(self) -> Dict[str, Any]:
        """Only the fields the client sent; task lists become TaskItem tuples.

        An explicit null is passed through so the service can reject it for
        fields that are not nullable.
        """
        changes = self.model_dump(exclude_unset=True, exclude={"mits", "tasks"})
        for name in ("mits", "tasks"):
            if name in self.model_fields_set:
                items = getattr(self, name)
                changes[name] = (
                    None
                    if items is None
                    else tuple(TaskItem(text=t.text, done=t.done) for t in items)
                )
        return changes


# Serialization
def _clock(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M") if value else None


def record_to_dict(record: DayRecord) -> Dict[str, Any]:
    return {
        "date": record.date.isoformat(),
        "wake_time": _clock(record.wake_time),
        "bedtime": _clock(record.bedtime),
        "slept_on_time": record.slept_on_time,
        "learning_done": record.learning_done,
        "learning_hours": record.learning_hours,
        "learning_topic": record.learning_topic,
        "workout_done": record.workout_done,
        "workout_type": record.workout_type,
        "screen_time_hours": record.screen_time_hours,
        "mood": record.mood,
        "mits": [{"text": m.text, "done": m.done} for m in record.mits],
        "tasks": [{"text": t.text, "done": t.done} for t in record.tasks],
        "finalized": record.finalized,
        "finalized_at": record.finalized_at.isoformat() if record.finalized_at else None,
        "final_state": record.final_state.value if record.final_state else None,
    }


def status_to_dict(status: DayStatus) -> Dict[str, Any]:
    return {
        "day": record_to_dict(status.record),
        "state": status.state.value,
        "is_today": status.is_today,
        "editable": status.editable,
        "completion_percent": status.completion_percent,
        "failing_habits": status.failing_habits,
        "at_risk": status.at_risk,
    }


def streak_to_dict(state: StreakState) -> Dict[str, Any]:
    return {
        "habit_id": state.habit_id,
        "name": display_name(state.habit_id),
        "current": state.current,
        "best": state.best,
        "recovering": state.is_recovering,
        "recovery_days_remaining": state.recovery_days_remaining,
        "last_evaluated_date": (
            state.last_evaluated_date.isoformat() if state.last_evaluated_date else None
        ),
        "last_broken_date": (
            state.last_broken_date.isoformat() if state.last_broken_date else None
        ),
    }


def finalize_to_dict(result: FinalizeResult) -> Dict[str, Any]:
    return {
        "day": record_to_dict(result.record),
        "state": result.state.value,
        "streaks": [streak_to_dict(s) for s in result.streaks.values()],
        "score": result.score.to_dict(),
    }


def _history_entry(day: date, snapshot: ScoreSnapshot) -> Dict[str, Any]:
    return {"date": day.isoformat(), **snapshot.to_dict()}


# Endpoints
@router.get("/today")
async def get_today(
    service: DayLifecycleService = Depends(get_lifecycle_service),
) -> Dict[str, Any]:
    """Today's record and UI state; creates the record on first read."""
    return status_to_dict(await service.get_current_state())


@router.get("/day/{day}")
async def get_day(
    day: date, service: DayLifecycleService = Depends(get_lifecycle_service)
) -> Dict[str, Any]:
    return status_to_dict(await service.get_current_state(day))


@router.patch("/day/{day}")
async def update_day(
    day: date,
    update: DayUpdate,
    service: DayLifecycleService = Depends(get_lifecycle_service),
) -> Dict[str, Any]:
    """Edit today's record. Past and finalized days are read-only."""
    return status_to_dict(await service.update_day(day, update.to_changes()))


@router.get("/day/{day}/preview")
async def preview_day(
    day: date, service: DayLifecycleService = Depends(get_lifecycle_service)
) -> Dict[str, Any]:
    preview = await service.preview_final_state(day)
    return {
        "date": day.isoformat(),
        "state": preview.state.value,
        "will_complete": preview.will_complete,
        "failing_habits": preview.failing_habits,
        "mits_completed": preview.mits_completed,
    }


@router.post("/day/{day}/finalize")
async def finalize_day(
    day: date, service: DayLifecycleService = Depends(get_lifecycle_service)
) -> Dict[str, Any]:
    result = await service.finalize(day)
    logger.info(f"Finalized {day}: {result.state.value}, score {result.score.score}")
    return finalize_to_dict(result)


@router.post("/rollover")
async def run_rollover(
    service: DayLifecycleService = Depends(get_lifecycle_service),
) -> Dict[str, Any]:
    report = await service.run_day_rollover_sweep()
    return report.to_dict()


@router.get("/score")
async def get_score(
    service: DayLifecycleService = Depends(get_lifecycle_service),
) -> Dict[str, Any]:
    return (await service.get_score()).to_dict()


@router.get("/score/history")
async def get_score_history(
    days: int = Query(default=30, ge=1, le=366),
    service: DayLifecycleService = Depends(get_lifecycle_service),
) -> Dict[str, Any]:
    history = await service.get_score_history(days)
    return {"history": [_history_entry(d, s) for d, s in history]}


@router.get("/streaks")
async def get_streaks(
    service: DayLifecycleService = Depends(get_lifecycle_service),
) -> Dict[str, Any]:
    streaks = await service.get_streaks()
    at_risk = await service.get_streaks_at_risk()
    return {
        "streaks": [streak_to_dict(s) for s in streaks.values()],
        "at_risk": at_risk,
    }


@router.get("/week/current")
async def get_current_week(
    service: DayLifecycleService = Depends(get_lifecycle_service),
) -> Dict[str, Any]:
    return (await service.get_week_stats()).to_dict()


async def _history(service: DayLifecycleService, days: int) -> Dict[str, Any]:
    history = await service.get_history(days)
    return {"history": [status_to_dict(s) for s in history]}


@router.get("/history")
async def get_history(
    days: int = Query(default=30, ge=1, le=366),
    service: DayLifecycleService = Depends(get_lifecycle_service),
) -> Dict[str, Any]:
    """The last ``days`` stored days, newest first."""
    return await _history(service, days)


@router.get("/history/{days}")
async def get_history_days(
    days: int = Path(ge=1, le=366),
    service: DayLifecycleService = Depends(get_lifecycle_service),
) -> Dict[str, Any]:
    return await _history(service, days)


@router.get("/history/range/{start}/{end}")
async def get_history_range(
    start: date,
    end: date,
    service: DayLifecycleService = Depends(get_lifecycle_service),
) -> Dict[str, Any]:
    history = await service.get_history_range(start, end)
    return {"history": [status_to_dict(s) for s in history]}


@router.get("/days-by-state")
async def get_days_by_state(
    start: date,
    end: date,
    service: DayLifecycleService = Depends(get_lifecycle_service),
) -> Dict[str, Any]:
    grouped = await service.days_by_state(start, end)
    return {
        "start": start.isoformat(),
        "end": end.isoformat(),
        "days": {
            state.value: [d.isoformat() for d in grouped[state]] for state in DayState
        },
    }


@router.get("/day/{day}/state-log")
async def get_state_log(
    day: date, service: DayLifecycleService = Depends(get_lifecycle_service)
) -> Dict[str, Any]:
    log = await service.get_state_log(day)
    return {"date": day.isoformat(), "log": [t.to_dict() for t in log]}
