"""
Configuration helpers for the cashback tracker.

Settings are read from environment variables once and cached, so that
repositories/services do not fetch os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os


class ConfigurationError(ValueError):
    """Raised when a configuration value (e.g. storage kind) is not accepted."""


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    data_dir: Path
    storage_kind: str
    log_level: str
    log_json: bool


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        data_dir=Path(os.getenv("CASHBACK_DATA_DIR") or "data"),
        storage_kind=(os.getenv("CASHBACK_STORAGE") or "sqlite").strip(),
        log_level=(os.getenv("CASHBACK_LOG_LEVEL") or "INFO").upper(),
        log_json=_bool(os.getenv("CASHBACK_LOG_JSON"), False),
    )
