"""
Application configuration using Pydantic Settings.

Process-level settings (database, logging, scheduler) come from environment
variables. Habit rules live in YAML and are loaded by typed_config_loader.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/lifedash.db"

    # Habit rule files (defaults to config/ in the project root)
    habits_defaults_path: Optional[str] = None
    habits_settings_path: Optional[str] = None

    # Background rollover sweep
    rollover_interval_seconds: int = 60

    # HTTP
    cors_origins: str = ""  # comma-separated

    # Environment
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra env vars

    def get_cors_origins(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def get_defaults_path(self) -> Optional[Path]:
        return Path(self.habits_defaults_path) if self.habits_defaults_path else None

    def get_overrides_path(self) -> Optional[Path]:
        return Path(self.habits_settings_path) if self.habits_settings_path else None


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
