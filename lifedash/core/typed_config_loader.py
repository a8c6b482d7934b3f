"""
Typed config loader: parses YAML into the habit rule Configuration.

Reads ``config/defaults.yaml`` (checked in), deep-merges the optional
``config/settings.yaml`` user overrides on top, and validates the result
into an immutable ``Configuration``. Unlike the permissive YAML helpers
elsewhere, every failure here raises ``InvalidConfigurationError``: a rule
snapshot that silently fell back to defaults could break a streak that
should have survived.
"""

import asyncio
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from ..domain.errors import InvalidConfigurationError
from .typed_config import Configuration

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DEFAULTS_PATH = PROJECT_ROOT / "config" / "defaults.yaml"
SETTINGS_PATH = PROJECT_ROOT / "config" / "settings.yaml"

# Keys accepted from older settings files.
_HABIT_ALIASES = {"gym": "workout", "screenTime": "screen_time"}


# ---------------------------------------------------------------------------
# Raw YAML helpers
# ---------------------------------------------------------------------------


def _load_yaml(path: Path, required: bool) -> Dict[str, Any]:
    if not path.exists():
        if required:
            raise InvalidConfigurationError("Config file not found", str(path))
        logger.debug("Optional config file not found: %s", path)
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise InvalidConfigurationError(f"Malformed YAML: {e}", str(path)) from e
    if not isinstance(content, dict):
        raise InvalidConfigurationError("Top level must be a mapping", str(path))
    return content


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def _normalize_habit_keys(rules: Dict[str, Any]) -> Dict[str, Any]:
    habits = rules.get("habits")
    if not isinstance(habits, dict):
        return rules
    normalized = {}
    for key, value in habits.items():
        target = _HABIT_ALIASES.get(key, key)
        if target in normalized and isinstance(value, dict):
            value = deep_merge(normalized[target], value)
        normalized[target] = value
    return {**rules, "habits": normalized}


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


def build_configuration(rules: Dict[str, Any]) -> Configuration:
    """Validate a raw ``rules`` mapping into a Configuration."""
    try:
        return Configuration.model_validate(_normalize_habit_keys(rules))
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidConfigurationError(f"Invalid habit rules: {problems}") from e


def load_configuration(
    defaults_path: Optional[Path] = None,
    settings_path: Optional[Path] = None,
    *,
    with_overrides: bool = True,
) -> Configuration:
    """Parse defaults.yaml (+ optional settings.yaml) into a Configuration."""
    defaults_path = defaults_path or DEFAULTS_PATH
    settings_path = settings_path or SETTINGS_PATH

    defaults = _load_yaml(defaults_path, required=True)
    overrides = _load_yaml(settings_path, required=False) if with_overrides else {}

    rules = deep_merge(defaults.get("rules") or {}, overrides.get("rules") or {})
    if not rules:
        raise InvalidConfigurationError("No 'rules' section", str(defaults_path))

    configuration = build_configuration(rules)
    logger.debug(
        "Loaded habit rules: sensitivity=%s cutoff_hour=%d",
        configuration.streaks.sensitivity,
        configuration.day_cutoff_hour,
    )
    return configuration


class YamlConfigurationProvider:
    """ConfigurationProvider reading the YAML files on every load.

    Re-reading keeps settings edits "cold": they apply to the next
    evaluation and never to one already in flight.
    """

    def __init__(
        self,
        defaults_path: Optional[Path] = None,
        settings_path: Optional[Path] = None,
    ) -> None:
        self._defaults_path = defaults_path
        self._settings_path = settings_path

    async def load(self) -> Configuration:
        return await asyncio.to_thread(
            load_configuration, self._defaults_path, self._settings_path
        )


@lru_cache()
def get_default_configuration() -> Configuration:
    """Cached Configuration built from the shipped defaults only."""
    return load_configuration(DEFAULTS_PATH, with_overrides=False)
