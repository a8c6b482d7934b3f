"""Tests for DayStateMachine classification."""

from datetime import date, datetime, time

from lifedash.models.value_objects import DayRecord, DayState

DAY = date(2026, 3, 10)
AT = datetime(2026, 3, 10, 21, 0)


def _perfect_day() -> DayRecord:
    return DayRecord.empty(DAY).with_changes(
        learning_done=True,
        learning_hours=2.5,
        workout_done=True,
        wake_time=time(5, 40),
        screen_time_hours=2,
    )


class TestCalculateState:
    def test_missing_record_is_not_counted(self, configuration):
        from lifedash.services.day_state import DayStateMachine

        assert DayStateMachine.calculate_state(None, configuration) is DayState.NOT_COUNTED

    def test_unfinalized_is_not_counted_even_when_perfect(self, configuration):
        from lifedash.services.day_state import DayStateMachine

        assert (
            DayStateMachine.calculate_state(_perfect_day(), configuration)
            is DayState.NOT_COUNTED
        )

    def test_finalized_all_satisfied_is_completed(self, configuration):
        from lifedash.services.day_state import DayStateMachine

        record = _perfect_day().as_finalized(AT, DayState.COMPLETED)
        assert DayStateMachine.calculate_state(record, configuration) is DayState.COMPLETED

    def test_finalized_one_failing_is_missed(self, configuration):
        from lifedash.services.day_state import DayStateMachine

        record = _perfect_day().with_changes(workout_done=False)
        record = record.as_finalized(AT, DayState.MISSED)
        assert DayStateMachine.calculate_state(record, configuration) is DayState.MISSED

    def test_disabled_failing_habit_ignored(self, config_factory):
        from lifedash.services.day_state import DayStateMachine

        config = config_factory({"habits": {"workout": {"enabled": False}}})
        record = _perfect_day().with_changes(workout_done=False)
        record = record.as_finalized(AT, DayState.COMPLETED)
        assert DayStateMachine.calculate_state(record, config) is DayState.COMPLETED

    def test_no_enabled_habits_is_completed(self, config_factory):
        from lifedash.services.day_state import DayStateMachine

        config = config_factory(
            {
                "habits": {
                    h: {"enabled": False}
                    for h in ("learning", "workout", "sleep", "screen_time")
                }
            }
        )
        record = DayRecord.empty(DAY).as_finalized(AT, DayState.COMPLETED)
        assert DayStateMachine.calculate_state(record, config) is DayState.COMPLETED


class TestUiState:
    def test_missing_record(self, configuration):
        from lifedash.services.day_state import DayStateMachine

        assert DayStateMachine.get_ui_state(None, configuration) is DayState.NOT_STARTED

    def test_untouched(self, configuration):
        from lifedash.services.day_state import DayStateMachine

        assert (
            DayStateMachine.get_ui_state(DayRecord.empty(DAY), configuration)
            is DayState.NOT_STARTED
        )

    def test_touched(self, configuration):
        from lifedash.services.day_state import DayStateMachine

        record = DayRecord.empty(DAY).with_changes(mood=4)
        assert DayStateMachine.get_ui_state(record, configuration) is DayState.IN_PROGRESS

    def test_finalized_shows_terminal_state(self, configuration):
        from lifedash.services.day_state import DayStateMachine

        record = _perfect_day().as_finalized(AT, DayState.COMPLETED)
        assert DayStateMachine.get_ui_state(record, configuration) is DayState.COMPLETED


class TestPreview:
    def test_preview_lists_failing_display_names(self, configuration):
        from lifedash.services.day_state import DayStateMachine

        record = _perfect_day().with_changes(workout_done=False, screen_time_hours=4)
        preview = DayStateMachine.preview_final_state(record, configuration)

        assert preview.state is DayState.MISSED
        assert not preview.will_complete
        assert preview.failing_habits == ["Workout", "Screen Time"]

    def test_preview_matches_finalize_outcome(self, configuration):
        from lifedash.services.day_state import DayStateMachine

        record = _perfect_day()
        preview = DayStateMachine.preview_final_state(record, configuration)
        finalized = record.as_finalized(AT, preview.state)

        assert preview.will_complete
        assert DayStateMachine.calculate_state(finalized, configuration) is preview.state

    def test_preview_counts_mits(self, configuration):
        from lifedash.models.value_objects import TaskItem
        from lifedash.services.day_state import DayStateMachine

        mits = (TaskItem("a", True), TaskItem("b", True), TaskItem("c"))
        record = DayRecord.empty(DAY).with_changes(mits=mits)
        assert DayStateMachine.preview_final_state(record, configuration).mits_completed == 2
