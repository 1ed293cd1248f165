"""Configuration management for lofi-sync."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path


@dataclass
class Config:
    """
    Application configuration.

    Loaded from environment variables with sensible defaults.
    """

    # Logging
    log_level: str = "WARNING"

    # Merge behaviour surfaced by the CLI
    fail_on_conflict: bool = True
    conflict_exit_code: int = 2

    # Output
    json_indent: int = 2

    # Default card stores for `lofi-sync sync`
    local_store: Path = Path("cards.local.json")
    remote_store: Path = Path("cards.remote.json")

    @property
    def log_level_value(self) -> int:
        """Numeric logging level, WARNING when the name is unknown."""
        value = logging.getLevelName(self.log_level.upper())
        return value if isinstance(value, int) else logging.WARNING

    @classmethod
    def from_env(cls) -> Config:
        """Load configuration from environment variables."""

        def get_bool(key: str, default: bool) -> bool:
            value = os.getenv(key)
            if value is None:
                return default
            return value.lower() in ("true", "1", "yes")

        def get_int(key: str, default: int) -> int:
            value = os.getenv(key)
            if value is None:
                return default
            try:
                return int(value)
            except ValueError:
                return default

        def get_path(key: str, default: Path) -> Path:
            value = os.getenv(key)
            if not value:
                return default
            return Path(value).expanduser()

        return cls(
            log_level=os.getenv("LOFI_SYNC_LOG_LEVEL", "WARNING"),
            fail_on_conflict=get_bool("LOFI_SYNC_FAIL_ON_CONFLICT", True),
            conflict_exit_code=get_int("LOFI_SYNC_CONFLICT_EXIT_CODE", 2),
            json_indent=get_int("LOFI_SYNC_JSON_INDENT", 2),
            local_store=get_path("LOFI_SYNC_LOCAL_STORE", Path("cards.local.json")),
            remote_store=get_path("LOFI_SYNC_REMOTE_STORE", Path("cards.remote.json")),
        )


# Singleton config instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
