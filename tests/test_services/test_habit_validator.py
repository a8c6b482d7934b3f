"""
Tests for HabitValidator: pure per-habit predicates.

Covers:
- Satisfaction rules per habit and fail-open for unknown ids
- Enabled/required habit selection driven by configuration
- Completion percent
- Required-data validation for toggles
- Bedtime checks across midnight
"""

from datetime import date, datetime, time

import pytest

from lifedash.models.value_objects import DayRecord

DAY = date(2026, 3, 10)


def _record(**changes) -> DayRecord:
    return DayRecord.empty(DAY).with_changes(**changes)


class TestIsSatisfied:
    def test_learning_requires_flag_and_min_hours(self, configuration):
        from lifedash.services.habit_validator import HabitValidator

        assert HabitValidator.is_satisfied(
            "learning", _record(learning_done=True, learning_hours=2), configuration
        )
        assert not HabitValidator.is_satisfied(
            "learning", _record(learning_done=True, learning_hours=1.5), configuration
        )
        assert not HabitValidator.is_satisfied(
            "learning", _record(learning_done=False, learning_hours=3), configuration
        )

    def test_workout_is_the_flag(self, configuration):
        from lifedash.services.habit_validator import HabitValidator

        assert HabitValidator.is_satisfied("workout", _record(workout_done=True), configuration)
        assert not HabitValidator.is_satisfied("workout", _record(), configuration)

    @pytest.mark.parametrize(
        "wake, expected",
        [
            (time(5, 0), True),
            (time(5, 45), True),
            (time(6, 15), True),  # exactly at tolerance
            (time(6, 16), False),
            (None, False),
        ],
    )
    def test_sleep_wake_within_tolerance(self, configuration, wake, expected):
        from lifedash.services.habit_validator import HabitValidator

        assert (
            HabitValidator.is_satisfied("sleep", _record(wake_time=wake), configuration)
            is expected
        )

    def test_screen_time_at_or_under_limit(self, configuration):
        from lifedash.services.habit_validator import HabitValidator

        assert HabitValidator.is_satisfied(
            "screen_time", _record(screen_time_hours=3), configuration
        )
        assert not HabitValidator.is_satisfied(
            "screen_time", _record(screen_time_hours=3.1), configuration
        )

    def test_unknown_habit_fails_open(self, configuration):
        from lifedash.services.habit_validator import HabitValidator

        assert HabitValidator.is_satisfied("meditation", _record(), configuration)


class TestRequiredHabits:
    def test_default_order(self, configuration):
        from lifedash.services.habit_validator import HabitValidator

        assert HabitValidator.get_enabled_required_habits(configuration) == [
            "learning",
            "workout",
            "sleep",
            "screen_time",
        ]

    def test_disabled_habit_excluded(self, config_factory):
        from lifedash.services.habit_validator import HabitValidator

        config = config_factory({"habits": {"workout": {"enabled": False}}})
        assert "workout" not in HabitValidator.get_enabled_required_habits(config)

    def test_screen_time_can_be_score_only(self, config_factory):
        from lifedash.services.habit_validator import HabitValidator

        config = config_factory(
            {"habits": {"screen_time": {"counts_toward_completion": False}}}
        )
        assert "screen_time" not in HabitValidator.get_enabled_required_habits(config)

    def test_failing_habits_in_order(self, configuration):
        from lifedash.services.habit_validator import HabitValidator

        record = _record(learning_done=True, learning_hours=2, screen_time_hours=6)
        assert HabitValidator.failing_habits(record, configuration) == [
            "workout",
            "sleep",
            "screen_time",
        ]


class TestCompletionPercent:
    def test_partial(self, configuration):
        from lifedash.services.habit_validator import HabitValidator

        # learning + screen_time satisfied out of four
        record = _record(learning_done=True, learning_hours=2)
        assert HabitValidator.completion_percent(record, configuration) == 50

    def test_rounds(self, config_factory):
        from lifedash.services.habit_validator import HabitValidator

        config = config_factory({"habits": {"screen_time": {"enabled": False}}})
        record = _record(workout_done=True)
        assert HabitValidator.completion_percent(record, config) == 33

    def test_no_enabled_habits_is_complete(self, config_factory):
        from lifedash.services.habit_validator import HabitValidator

        config = config_factory(
            {
                "habits": {
                    h: {"enabled": False}
                    for h in ("learning", "workout", "sleep", "screen_time")
                }
            }
        )
        assert HabitValidator.completion_percent(_record(), config) == 100


class TestValidateRequiredData:
    def test_learning_hours_required(self, configuration):
        from lifedash.services.habit_validator import HabitValidator

        reasons = HabitValidator.validate_required_data(
            "learning", _record(learning_done=True), configuration
        )
        assert reasons == ["Enter learning hours first"]

    def test_learning_complete(self, configuration):
        from lifedash.services.habit_validator import HabitValidator

        record = _record(learning_done=True, learning_hours=1)
        assert HabitValidator.validate_required_data("learning", record, configuration) == []

    def test_toggle_off_needs_nothing(self, configuration):
        from lifedash.services.habit_validator import HabitValidator

        assert HabitValidator.validate_required_data("learning", _record(), configuration) == []

    def test_topic_when_configured(self, config_factory):
        from lifedash.services.habit_validator import HabitValidator

        config = config_factory(
            {"habits": {"learning": {"required_fields": ["learning_hours", "topic"]}}}
        )
        record = _record(learning_done=True, learning_hours=2, learning_topic="  ")
        assert HabitValidator.validate_required_data("learning", record, config) == [
            "Enter what you learned first"
        ]

    def test_workout_type_when_configured(self, config_factory):
        from lifedash.services.habit_validator import HabitValidator

        config = config_factory({"habits": {"workout": {"required_fields": ["workout_type"]}}})
        record = _record(workout_done=True)
        assert HabitValidator.validate_required_data("workout", record, config) == [
            "Select workout type first"
        ]

    def test_workout_type_optional_by_default(self, configuration):
        from lifedash.services.habit_validator import HabitValidator

        record = _record(workout_done=True)
        assert HabitValidator.validate_required_data("workout", record, configuration) == []


class TestBedtime:
    @pytest.mark.parametrize(
        "bedtime, expected",
        [
            (time(21, 0), True),
            (time(23, 30), True),
            (time(23, 31), False),
            (time(0, 15), False),
            (time(3, 0), False),
        ],
    )
    def test_on_time_before_target(self, bedtime, expected):
        from lifedash.services.habit_validator import is_bedtime_on_time

        assert is_bedtime_on_time(bedtime, time(23, 30)) is expected

    def test_target_after_midnight(self):
        from lifedash.services.habit_validator import is_bedtime_on_time

        assert is_bedtime_on_time(time(23, 50), time(0, 30))
        assert not is_bedtime_on_time(time(0, 45), time(0, 30))

    @pytest.mark.parametrize(
        "now, expected",
        [
            (datetime(2026, 3, 10, 8, 0), False),
            (datetime(2026, 3, 10, 23, 29), False),
            (datetime(2026, 3, 10, 23, 30), True),
            (datetime(2026, 3, 11, 1, 0), True),
        ],
    )
    def test_past_bedtime(self, now, expected):
        from lifedash.services.habit_validator import is_past_bedtime

        assert is_past_bedtime(now, DAY, time(23, 30)) is expected
