"""
Startup configuration validation and summary logging.

Called early in the FastAPI lifespan to fail fast on misconfiguration.
"""

import logging
import re
from typing import List

from ..domain.errors import InvalidConfigurationError
from .config import Settings
from .typed_config_loader import load_configuration

logger = logging.getLogger(__name__)

# Minimal pattern: scheme://... or scheme:///...
_SQLALCHEMY_URL_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+\-.]*://")

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def validate_config(settings: Settings) -> List[str]:
    """
    Validate application configuration and return a list of error strings.

    An empty list means the configuration is valid. Habit rule files are
    parsed as part of validation so a broken threshold stops startup.
    """
    errors: List[str] = []

    # -- DATABASE_URL format -----------------------------------------------
    db_url = (settings.database_url or "").strip()
    if not db_url:
        errors.append("DATABASE_URL is required but missing or empty")
    elif not _SQLALCHEMY_URL_RE.match(db_url):
        errors.append(
            f"DATABASE_URL format is invalid (expected SQLAlchemy URL like "
            f"'sqlite+aiosqlite:///...'): '{db_url}'"
        )

    # -- Scheduler ---------------------------------------------------------
    if settings.rollover_interval_seconds <= 0:
        errors.append(
            f"ROLLOVER_INTERVAL_SECONDS must be positive, "
            f"got {settings.rollover_interval_seconds}"
        )

    # -- Logging -----------------------------------------------------------
    if settings.log_level.upper() not in _LOG_LEVELS:
        errors.append(f"LOG_LEVEL is invalid: '{settings.log_level}'")

    # -- Habit rules -------------------------------------------------------
    try:
        load_configuration(settings.get_defaults_path(), settings.get_overrides_path())
    except InvalidConfigurationError as e:
        errors.append(f"Habit rules are invalid: {e}")

    return errors


def _db_type(database_url: str) -> str:
    """Extract the database backend name from a SQLAlchemy URL."""
    if not database_url:
        return "none"
    scheme = database_url.split("://")[0] if "://" in database_url else database_url
    # e.g. "sqlite+aiosqlite" -> "sqlite"
    return scheme.split("+")[0].lower()


def log_config_summary(settings: Settings) -> None:
    """Log an INFO-level summary of loaded configuration."""
    summary_lines = [
        f"environment={settings.environment}",
        f"database={_db_type(settings.database_url)}",
        f"rollover_interval={settings.rollover_interval_seconds}s",
        f"defaults={settings.habits_defaults_path or 'config/defaults.yaml'}",
        f"overrides={settings.habits_settings_path or 'config/settings.yaml'}",
    ]
    logger.info("Config loaded: %s", " | ".join(summary_lines))
