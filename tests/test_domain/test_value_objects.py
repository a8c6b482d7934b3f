"""Tests for DayRecord, StreakState and ScoreSnapshot."""

from datetime import date, datetime, time

import pytest

from lifedash.models.value_objects import (
    DayRecord,
    DayState,
    ScoreSnapshot,
    StreakState,
    TaskItem,
)

DAY = date(2026, 3, 10)


class TestDayState:
    def test_terminal_states(self):
        assert DayState.COMPLETED.is_terminal
        assert DayState.MISSED.is_terminal
        assert DayState.NOT_COUNTED.is_terminal

    def test_ui_states_are_not_terminal(self):
        assert not DayState.NOT_STARTED.is_terminal
        assert not DayState.IN_PROGRESS.is_terminal


class TestDayRecord:
    def test_empty_record_has_no_data(self):
        record = DayRecord.empty(DAY)
        assert not record.has_any_data()
        assert len(record.mits) == 3
        assert not record.finalized

    def test_any_field_counts_as_data(self):
        assert DayRecord.empty(DAY).with_changes(wake_time=time(6, 0)).has_any_data()
        assert DayRecord.empty(DAY).with_changes(mood=3).has_any_data()
        mits = (TaskItem("write"), TaskItem(), TaskItem())
        assert DayRecord.empty(DAY).with_changes(mits=mits).has_any_data()

    def test_bookkeeping_is_not_data(self):
        record = DayRecord.empty(DAY).with_changes(last_interaction=datetime(2026, 3, 10, 9))
        assert not record.has_any_data()

    def test_records_are_immutable(self):
        record = DayRecord.empty(DAY)
        with pytest.raises(AttributeError):
            record.learning_done = True

    def test_with_changes_returns_new_record(self):
        record = DayRecord.empty(DAY)
        changed = record.with_changes(learning_done=True)
        assert changed.learning_done
        assert not record.learning_done

    @pytest.mark.parametrize(
        "changes",
        [
            {"mood": 0},
            {"mood": 6},
            {"learning_hours": -1},
            {"screen_time_hours": -0.5},
            {"mits": (TaskItem(),)},
            {"final_state": DayState.IN_PROGRESS},
        ],
    )
    def test_invalid_values_rejected(self, changes):
        with pytest.raises(ValueError):
            DayRecord.empty(DAY).with_changes(**changes)

    def test_mit_counts(self):
        mits = (TaskItem("a", True), TaskItem("b", False), TaskItem())
        record = DayRecord.empty(DAY).with_changes(mits=mits)
        assert record.mits_completed == 1
        assert record.mits_filled == 2

    def test_as_finalized(self):
        at = datetime(2026, 3, 10, 21, 0)
        record = DayRecord.empty(DAY).as_finalized(at, DayState.MISSED)
        assert record.finalized
        assert record.finalized_at == at
        assert record.final_state is DayState.MISSED
        assert record.is_settled

    def test_as_not_counted(self):
        record = DayRecord.empty(DAY).with_changes(learning_done=True).as_not_counted()
        assert record.finalized is False
        assert record.final_state is DayState.NOT_COUNTED
        assert record.learning_done  # partial data kept, never judged
        assert record.is_settled


class TestStreakState:
    def test_defaults(self):
        state = StreakState("learning")
        assert state.current == 0
        assert state.best == 0
        assert not state.is_recovering

    def test_negative_counters_rejected(self):
        with pytest.raises(ValueError):
            StreakState("learning", current=-1)
        with pytest.raises(ValueError):
            StreakState("learning", recovery_days_remaining=-1)

    def test_recovering(self):
        assert StreakState("sleep", recovery_days_remaining=2).is_recovering


class TestScoreSnapshot:
    def test_to_dict_rounds_components(self):
        snapshot = ScoreSnapshot(score=42, learning=12.857142, penalty=5)
        data = snapshot.to_dict()
        assert data["score"] == 42
        assert data["components"]["learning"] == 12.86
        assert data["penalty"] == 5
