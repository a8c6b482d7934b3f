"""Tests for the habit rules loader: YAML -> validated Configuration."""

from datetime import time
from pathlib import Path

import pytest

from lifedash.core.typed_config_loader import (
    DEFAULTS_PATH,
    YamlConfigurationProvider,
    build_configuration,
    deep_merge,
    get_default_configuration,
    load_configuration,
)
from lifedash.domain.errors import InvalidConfigurationError


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


class TestShippedDefaults:
    """config/defaults.yaml parses into the documented thresholds."""

    def test_defaults_file_exists(self):
        assert DEFAULTS_PATH.exists()

    def test_thresholds(self):
        config = load_configuration(DEFAULTS_PATH, with_overrides=False)

        assert config.day_cutoff_hour == 0
        assert config.habits.learning.min_hours == 2
        assert config.habits.workout.weekly_target == 5
        assert config.habits.sleep.wake_target == time(5, 45)
        assert config.habits.sleep.wake_tolerance_minutes == 30
        assert config.habits.screen_time.daily_limit_hours == 3
        assert config.habits.screen_time.critical_hours == 5

    def test_streak_defaults(self):
        config = load_configuration(DEFAULTS_PATH, with_overrides=False)

        assert config.streaks.sensitivity == "strict"
        assert config.streaks.max_recovery_days == 5
        assert config.streaks.recovery_divisor == 3

    def test_every_habit_enabled_by_default(self):
        config = get_default_configuration()
        for habit_id in ("learning", "workout", "sleep", "screen_time"):
            assert config.is_enabled(habit_id)

    def test_cached(self):
        assert get_default_configuration() is get_default_configuration()


class TestOverrides:
    """settings.yaml is deep-merged over the defaults."""

    def test_override_single_threshold(self, tmp_path):
        settings = _write(
            tmp_path / "settings.yaml",
            "rules:\n  habits:\n    learning:\n      min_hours: 1\n",
        )
        config = load_configuration(DEFAULTS_PATH, settings)

        assert config.habits.learning.min_hours == 1
        # Siblings keep their defaults
        assert config.habits.learning.required_fields == ["learning_hours"]
        assert config.habits.workout.weekly_target == 5

    def test_missing_settings_file_is_fine(self, tmp_path):
        config = load_configuration(DEFAULTS_PATH, tmp_path / "nope.yaml")
        assert config.streaks.sensitivity == "strict"

    def test_gym_alias_maps_to_workout(self, tmp_path):
        settings = _write(
            tmp_path / "settings.yaml",
            "rules:\n  habits:\n    gym:\n      enabled: false\n",
        )
        config = load_configuration(DEFAULTS_PATH, settings)

        assert config.is_enabled("workout") is False

    def test_normal_sensitivity_is_moderate(self, tmp_path):
        settings = _write(
            tmp_path / "settings.yaml",
            "rules:\n  streaks:\n    sensitivity: Normal\n",
        )
        config = load_configuration(DEFAULTS_PATH, settings)

        assert config.streaks.sensitivity == "moderate"


class TestInvalidConfiguration:
    """Anything missing or malformed raises InvalidConfigurationError."""

    def test_missing_defaults_file(self, tmp_path):
        with pytest.raises(InvalidConfigurationError, match="not found"):
            load_configuration(tmp_path / "missing.yaml", with_overrides=False)

    def test_malformed_yaml(self, tmp_path):
        bad = _write(tmp_path / "defaults.yaml", "rules: [unclosed\n")
        with pytest.raises(InvalidConfigurationError, match="Malformed YAML"):
            load_configuration(bad, with_overrides=False)

    def test_top_level_not_mapping(self, tmp_path):
        bad = _write(tmp_path / "defaults.yaml", "- just\n- a list\n")
        with pytest.raises(InvalidConfigurationError, match="mapping"):
            load_configuration(bad, with_overrides=False)

    def test_no_rules_section(self, tmp_path):
        bad = _write(tmp_path / "defaults.yaml", "other: 1\n")
        with pytest.raises(InvalidConfigurationError, match="rules"):
            load_configuration(bad, with_overrides=False)

    def test_missing_threshold_does_not_default(self, tmp_path):
        settings = _write(
            tmp_path / "settings.yaml",
            "rules:\n  habits:\n    sleep:\n      wake_tolerance_minutes: -5\n",
        )
        with pytest.raises(InvalidConfigurationError, match="wake_tolerance_minutes"):
            load_configuration(DEFAULTS_PATH, settings)

    def test_unknown_sensitivity(self):
        with pytest.raises(InvalidConfigurationError, match="sensitivity"):
            build_configuration(
                deep_merge(_raw_defaults(), {"streaks": {"sensitivity": "brutal"}})
            )

    def test_partial_rules_rejected(self):
        with pytest.raises(InvalidConfigurationError):
            build_configuration({"day_cutoff_hour": 0})

    def test_unknown_required_field(self):
        with pytest.raises(InvalidConfigurationError, match="required_fields"):
            build_configuration(
                deep_merge(
                    _raw_defaults(),
                    {"habits": {"learning": {"required_fields": ["vibes"]}}},
                )
            )


class TestYamlConfigurationProvider:
    async def test_load_reads_files(self, tmp_path):
        settings = _write(
            tmp_path / "settings.yaml",
            "rules:\n  day_cutoff_hour: 3\n",
        )
        provider = YamlConfigurationProvider(DEFAULTS_PATH, settings)

        config = await provider.load()

        assert config.day_cutoff_hour == 3

    async def test_edits_apply_on_next_load(self, tmp_path):
        settings = _write(tmp_path / "settings.yaml", "rules:\n  day_cutoff_hour: 1\n")
        provider = YamlConfigurationProvider(DEFAULTS_PATH, settings)
        first = await provider.load()

        _write(settings, "rules:\n  day_cutoff_hour: 4\n")
        second = await provider.load()

        assert first.day_cutoff_hour == 1
        assert second.day_cutoff_hour == 4


def _raw_defaults():
    import yaml

    with open(DEFAULTS_PATH, encoding="utf-8") as f:
        return yaml.safe_load(f)["rules"]
