"""
Application-layer day lifecycle service.

Orchestrates the pure engines (HabitValidator, DayStateMachine, StreakEngine,
ScoreEngine) with storage behind the UnitOfWork port. This is the only
component that writes DayRecords, StreakStates or score history.

Two events drive it:
- ``finalize(day)``: the user closes today; streaks and score move.
- ``run_day_rollover_sweep()``: the logical day advanced; every elapsed day
  nobody finalized becomes NOT_COUNTED. Streaks and score never move here.

Both events and the lazy creation of today share one ``asyncio.Lock`` so a
sweep can never interleave with another write. Each finalize or automatic
close also appends an entry to the day's state log.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..core.typed_config import Configuration
from ..domain.errors import (
    AlreadyFinalizedError,
    DayClosedError,
    HabitDataRejected,
    InvalidRangeError,
)
from ..domain.ports import ConfigurationProvider, UnitOfWork
from ..models.value_objects import (
    MIT_SLOTS,
    DayRecord,
    DayState,
    DayStateTransition,
    ScoreSnapshot,
    StreakState,
    TaskItem,
)
from ..utils.logging import LifecycleLogContext, log_lifecycle_event
from .day_state import DayStateMachine, FinalStatePreview
from .habit_registry import (
    HABIT_ORDER,
    LEARNING,
    SLEEP,
    STREAK_HABITS,
    WORKOUT,
    display_name,
)
from .habit_validator import HabitValidator, is_bedtime_on_time, is_past_bedtime
from .score_engine import ScoreEngine
from .streak_engine import StreakEngine
from .weekly_stats import WeeklyStatsCalculator, WeekStats

logger = logging.getLogger(__name__)

UnitOfWorkFactory = Callable[[], UnitOfWork]
Clock = Callable[[], datetime]

# DayRecord fields a client may edit; bookkeeping fields are service-owned.
EDITABLE_FIELDS = frozenset(
    {
        "wake_time",
        "bedtime",
        "slept_on_time",
        "learning_done",
        "learning_hours",
        "learning_topic",
        "workout_done",
        "workout_type",
        "screen_time_hours",
        "mood",
        "mits",
        "tasks",
    }
)

# The only editable fields that accept an explicit null.
NULLABLE_FIELDS = frozenset({"wake_time", "bedtime", "slept_on_time", "mood"})

# Toggle field -> habit whose required data it gates.
_TOGGLES = {"learning_done": LEARNING, "workout_done": WORKOUT}


def logical_date(now: datetime, cutoff_hour: int) -> date:
    """Calendar day ``now`` belongs to: before the cutoff it is still yesterday."""
    return (now - timedelta(hours=cutoff_hour)).date()


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RolloverReport:
    today: date
    materialized: List[date] = field(default_factory=list)
    kept_finalized: List[date] = field(default_factory=list)
    created_today: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.materialized) or self.created_today

    def to_dict(self) -> Dict[str, Any]:
        return {
            "today": self.today.isoformat(),
            "materialized": [d.isoformat() for d in self.materialized],
            "kept_finalized": [d.isoformat() for d in self.kept_finalized],
            "created_today": self.created_today,
        }


@dataclass(frozen=True)
class DayStatus:
    """A day as the dashboard shows it."""

    record: DayRecord
    state: DayState
    is_today: bool
    completion_percent: int
    failing_habits: List[str] = field(default_factory=list)
    at_risk: List[str] = field(default_factory=list)

    @property
    def editable(self) -> bool:
        return self.is_today and not self.record.finalized


@dataclass(frozen=True)
class FinalizeResult:
    record: DayRecord
    streaks: Dict[str, StreakState]
    score: ScoreSnapshot

    @property
    def state(self) -> DayState:
        return self.record.final_state


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class DayLifecycleService:
    """Owns every state transition of DayRecords, streaks and score history."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        configuration_provider: ConfigurationProvider,
        clock: Clock = datetime.now,
    ) -> None:
        self._uow_factory = uow_factory
        self._configuration = configuration_provider
        self._clock = clock
        self._lock = asyncio.Lock()

    # -- Calendar --

    async def logical_today(self) -> date:
        configuration = await self._configuration.load()
        return logical_date(self._clock(), configuration.day_cutoff_hour)

    async def _snapshot(self) -> Tuple[Configuration, datetime, date]:
        # One rule snapshot and one clock reading per operation.
        configuration = await self._configuration.load()
        now = self._clock()
        return configuration, now, logical_date(now, configuration.day_cutoff_hour)

    # -- Rollover --

    async def run_day_rollover_sweep(self) -> RolloverReport:
        """Close out every elapsed day that was never finalized.

        Idempotent: finalized and already-materialized days are skipped, so a
        second run on the same state changes nothing.
        """
        async with self._lock:
            configuration, now, today = await self._snapshot()
            with LifecycleLogContext("rollover_sweep", today=today.isoformat()):
                materialized: List[date] = []
                kept: List[date] = []

                async with self._uow_factory() as uow:
                    last_seen = await uow.days.latest_date_before(today)
                    if last_seen is not None:
                        stored = {
                            r.date: r
                            for r in await uow.days.list_range(
                                last_seen, today - timedelta(days=1)
                            )
                        }
                        day = last_seen
                        while day < today:
                            record = stored.get(day)
                            if record is not None and record.is_settled:
                                if record.finalized:
                                    kept.append(day)
                            else:
                                base = record or DayRecord.empty(day)
                                await uow.days.save(base.as_not_counted())
                                await uow.state_log.append(
                                    DayStateTransition(
                                        date=day,
                                        from_state=(
                                            DayStateMachine.get_ui_state(
                                                record, configuration
                                            )
                                            if record is not None
                                            else None
                                        ),
                                        to_state=DayState.NOT_COUNTED,
                                        reason="Closed by rollover",
                                        automatic=True,
                                        logged_at=now,
                                    )
                                )
                                materialized.append(day)
                            day += timedelta(days=1)

                    created = False
                    if await uow.days.get(today) is None:
                        await uow.days.save(DayRecord.empty(today))
                        created = True

                    await uow.commit()

                report = RolloverReport(
                    today=today,
                    materialized=materialized,
                    kept_finalized=kept,
                    created_today=created,
                )
                if report.changed:
                    log_lifecycle_event("day_rolled_over", report.to_dict())
                return report

    # -- Finalize --

    async def finalize(self, day: date) -> FinalizeResult:
        """Close today for good: terminal state, streaks, score, all or nothing.

        Raises:
            DayClosedError: ``day`` is not the logical today.
            AlreadyFinalizedError: ``day`` was finalized before.
            HabitDataRejected: a toggled-on habit lacks required data.
        """
        async with self._lock:
            configuration, now, today = await self._snapshot()
            with LifecycleLogContext("finalize", day=day.isoformat()):
                if day != today:
                    raise DayClosedError(day, today)

                async with self._uow_factory() as uow:
                    record = await uow.days.get(day) or DayRecord.empty(day)
                    if record.finalized:
                        raise AlreadyFinalizedError(day)
                    self._validate_required_data(record, configuration)

                    preview = DayStateMachine.preview_final_state(record, configuration)
                    final = record.as_finalized(now, preview.state)

                    # Every streak settles before the score reads them.
                    streaks = StreakEngine.evaluate_all(
                        final, await uow.streaks.load_all(), configuration
                    )
                    window = await self._load_window(uow, configuration, today)
                    window = [r for r in window if r.date != day] + [final]
                    snapshot = ScoreEngine.breakdown(
                        window,
                        streaks,
                        configuration,
                        today=final,
                        yesterday=await uow.days.get(day - timedelta(days=1)),
                        now=now,
                    )

                    await uow.days.save(final)
                    await uow.streaks.save_all(streaks)
                    await uow.scores.record(day, snapshot)
                    await uow.state_log.append(
                        DayStateTransition(
                            date=day,
                            from_state=DayStateMachine.get_ui_state(record, configuration),
                            to_state=final.final_state,
                            reason="Finalized",
                            logged_at=now,
                        )
                    )
                    await uow.commit()

            log_lifecycle_event(
                "day_finalized",
                {
                    "day": day.isoformat(),
                    "state": final.final_state.value,
                    "score": snapshot.score,
                    "streaks": {h: s.current for h, s in streaks.items()},
                    "failing_habits": preview.failing_habits,
                },
            )
            return FinalizeResult(record=final, streaks=streaks, score=snapshot)

    @staticmethod
    def _validate_required_data(record: DayRecord, configuration: Configuration) -> None:
        for habit_id in HABIT_ORDER:
            if not configuration.is_enabled(habit_id):
                continue
            reasons = HabitValidator.validate_required_data(
                habit_id, record, configuration
            )
            if reasons:
                raise HabitDataRejected(habit_id, reasons)

    # -- Editing --

    @staticmethod
    def _fill_mit_slots(mits) -> Tuple[TaskItem, ...]:
        mits = tuple(mits)
        if len(mits) > MIT_SLOTS:
            raise HabitDataRejected("day", [f"At most {MIT_SLOTS} MITs per day"])
        return mits + tuple(TaskItem() for _ in range(MIT_SLOTS - len(mits)))

    @staticmethod
    def _derived_sleep(
        record: DayRecord,
        changes: Mapping[str, Any],
        configuration: Configuration,
        now: datetime,
        today: date,
    ) -> Dict[str, Any]:
        target = configuration.habits.sleep.bedtime_target
        if target is None or "slept_on_time" in changes:
            return {}
        if not configuration.is_enabled(SLEEP):
            return {}

        bedtime = changes.get("bedtime")
        if bedtime is not None:
            return {"slept_on_time": is_bedtime_on_time(bedtime, target)}
        if record.slept_on_time is None and is_past_bedtime(now, today, target):
            # Still up after the target: the night counts as late.
            return {"slept_on_time": False}
        return {}

    async def update_day(self, day: date, changes: Mapping[str, Any]) -> DayStatus:
        """Apply field edits to today's record.

        Turning a habit toggle on requires its configured data in the same or
        an earlier edit. A short ``mits`` list fills the remaining slots with
        blanks. With a bedtime target configured, ``slept_on_time`` follows
        the reported bedtime, or turns False once today's bedtime has passed
        while it is still unknown.
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise HabitDataRejected("day", [f"Unknown field: {f}" for f in sorted(unknown)])
        nulls = sorted(
            f for f, value in changes.items() if value is None and f not in NULLABLE_FIELDS
        )
        if nulls:
            raise HabitDataRejected("day", [f"{f} may not be null" for f in nulls])

        changes = dict(changes)
        if "mits" in changes:
            changes["mits"] = self._fill_mit_slots(changes["mits"])

        async with self._lock:
            configuration, now, today = await self._snapshot()
            if day != today:
                raise DayClosedError(day, today)

            async with self._uow_factory() as uow:
                record = await uow.days.get(day) or DayRecord.empty(day)
                if record.finalized:
                    raise AlreadyFinalizedError(day)

                changes.update(self._derived_sleep(record, changes, configuration, now, today))
                try:
                    updated = record.with_changes(**changes, last_interaction=now)
                except (TypeError, ValueError) as e:
                    raise HabitDataRejected("day", [str(e)]) from e

                for toggle, habit_id in _TOGGLES.items():
                    if changes.get(toggle) is True and configuration.is_enabled(habit_id):
                        reasons = HabitValidator.validate_required_data(
                            habit_id, updated, configuration
                        )
                        if reasons:
                            raise HabitDataRejected(habit_id, reasons)

                await uow.days.save(updated)
                await uow.commit()

        logger.debug("Updated %s: %s", day, sorted(changes))
        return self._status(updated, configuration, today, now)

    # -- Queries --

    async def get_current_state(self, day: Optional[date] = None) -> DayStatus:
        """Status of ``day`` (default: logical today).

        Today's record is created lazily the first time it is read.
        """
        configuration, now, today = await self._snapshot()
        day = day or today

        async with self._uow_factory() as uow:
            record = await uow.days.get(day)
        if record is None and day == today:
            record = await self._ensure_day(day)

        return self._status(record or DayRecord.empty(day), configuration, today, now)

    async def _ensure_day(self, day: date) -> DayRecord:
        # Same lock as the sweep, which may be creating this row right now.
        async with self._lock:
            async with self._uow_factory() as uow:
                record = await uow.days.get(day)
                if record is None:
                    record = DayRecord.empty(day)
                    await uow.days.save(record)
                    await uow.commit()
        return record

    async def get_history(self, days: int = 30) -> List[DayStatus]:
        """Stored days among the last ``days`` (today included), newest first."""
        configuration, now, today = await self._snapshot()
        start = today - timedelta(days=max(days, 1) - 1)
        async with self._uow_factory() as uow:
            records = await uow.days.list_range(start, today)
        return [
            self._status(r, configuration, today, now)
            for r in sorted(records, key=lambda r: r.date, reverse=True)
        ]

    async def get_history_range(self, start: date, end: date) -> List[DayStatus]:
        """Stored days between ``start`` and ``end`` inclusive, oldest first."""
        if start > end:
            raise InvalidRangeError(start, end)
        configuration, now, today = await self._snapshot()
        async with self._uow_factory() as uow:
            records = await uow.days.list_range(start, end)
        return [self._status(r, configuration, today, now) for r in records]

    async def days_by_state(self, start: date, end: date) -> Dict[DayState, List[date]]:
        """Every date from ``start`` up to ``end`` (never past today), grouped by state.

        Past days with no record count as NOT_COUNTED.
        """
        if start > end:
            raise InvalidRangeError(start, end)
        configuration, now, today = await self._snapshot()
        end = min(end, today)
        async with self._uow_factory() as uow:
            stored = {r.date: r for r in await uow.days.list_range(start, end)}

        grouped: Dict[DayState, List[date]] = {state: [] for state in DayState}
        day = start
        while day <= end:
            record = stored.get(day) or DayRecord.empty(day)
            grouped[self._status(record, configuration, today, now).state].append(day)
            day += timedelta(days=1)
        return grouped

    async def get_state_log(self, day: date) -> List[DayStateTransition]:
        async with self._uow_factory() as uow:
            return await uow.state_log.list_for(day)

    async def preview_final_state(self, day: Optional[date] = None) -> FinalStatePreview:
        configuration, _, today = await self._snapshot()
        day = day or today
        async with self._uow_factory() as uow:
            record = await uow.days.get(day) or DayRecord.empty(day)
        return DayStateMachine.preview_final_state(record, configuration)

    async def get_score(self) -> ScoreSnapshot:
        """Life score as of now, from stored data only."""
        configuration, now, today = await self._snapshot()
        async with self._uow_factory() as uow:
            window = await self._load_window(uow, configuration, today)
            streaks = await uow.streaks.load_all()
            by_date = {r.date: r for r in window}
            yesterday = by_date.get(today - timedelta(days=1))
            if yesterday is None:
                yesterday = await uow.days.get(today - timedelta(days=1))
        return ScoreEngine.breakdown(
            window,
            streaks,
            configuration,
            today=by_date.get(today),
            yesterday=yesterday,
            now=now,
        )

    async def get_streaks(self) -> Dict[str, StreakState]:
        """Every streak habit's state, zeroed for habits never evaluated."""
        async with self._uow_factory() as uow:
            stored = await uow.streaks.load_all()
        return {h: stored.get(h) or StreakState(habit_id=h) for h in STREAK_HABITS}

    async def get_streaks_at_risk(self) -> List[str]:
        configuration, now, today = await self._snapshot()
        async with self._uow_factory() as uow:
            record = await uow.days.get(today) or DayRecord.empty(today)
        return [
            h
            for h in STREAK_HABITS
            if StreakEngine.is_at_risk(h, record, configuration, now)
        ]

    async def get_week_stats(self) -> WeekStats:
        configuration, _, today = await self._snapshot()
        start, _ = WeeklyStatsCalculator.week_bounds(today, configuration)
        async with self._uow_factory() as uow:
            records = await uow.days.list_range(start, today)
        return WeeklyStatsCalculator.calculate(records, configuration, today=today)

    async def get_score_history(self, days: int = 30) -> List[Tuple[date, ScoreSnapshot]]:
        async with self._uow_factory() as uow:
            return await uow.scores.list_recent(days)

    # -- Helpers --

    @staticmethod
    async def _load_window(
        uow: UnitOfWork, configuration: Configuration, today: date
    ) -> List[DayRecord]:
        start = today - timedelta(days=configuration.scoring.window_days - 1)
        return await uow.days.list_range(start, today)

    @staticmethod
    def _status(
        record: DayRecord, configuration: Configuration, today: date, now: datetime
    ) -> DayStatus:
        is_today = record.date == today
        if is_today:
            state = DayStateMachine.get_ui_state(record, configuration)
        elif record.final_state is not None:
            state = record.final_state
        elif record.date < today:
            state = DayStateMachine.calculate_state(record, configuration)
        else:
            state = DayState.NOT_STARTED

        at_risk = []
        if is_today:
            at_risk = [
                display_name(h)
                for h in STREAK_HABITS
                if StreakEngine.is_at_risk(h, record, configuration, now)
            ]

        return DayStatus(
            record=record,
            state=state,
            is_today=is_today,
            completion_percent=HabitValidator.completion_percent(record, configuration),
            failing_habits=[
                display_name(h)
                for h in HabitValidator.failing_habits(record, configuration)
            ],
            at_risk=at_risk,
        )
