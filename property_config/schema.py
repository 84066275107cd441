"""
Application configuration schema.

Frozen dataclasses that the loader fills from YAML.  Every field has a
default, so an empty file yields a working desktop configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_DATABASE_PATH = "~/.property-management/property_management.db"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class DatabaseConfig:
    """Where the embedded SQLite store lives and how it is opened."""

    path: str = DEFAULT_DATABASE_PATH
    echo: bool = False
    # Off matches the historical store: deleting a tenant keeps its records.
    enforce_foreign_keys: bool = False

    def __post_init__(self) -> None:
        if not self.path or not str(self.path).strip():
            raise ValueError("database.path cannot be empty")

    @property
    def resolved_path(self) -> Path:
        return Path(self.path).expanduser()

    @property
    def url(self) -> str:
        if self.path == ":memory:":
            return "sqlite://"
        return f"sqlite:///{self.resolved_path}"


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"

    def __post_init__(self) -> None:
        if self.level.upper() not in _LOG_LEVELS:
            raise ValueError(
                f"logging.level must be one of {', '.join(_LOG_LEVELS)}, got {self.level!r}"
            )


@dataclass(frozen=True)
class PaymentsConfig:
    """Payment review settings."""

    # Months shown by the "recent records" view.
    review_window_months: int = 12

    def __post_init__(self) -> None:
        if self.review_window_months < 1:
            raise ValueError(
                "payments.review_window_months must be at least 1, "
                f"got {self.review_window_months}"
            )


@dataclass(frozen=True)
class AppConfig:
    """Complete application configuration."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    payments: PaymentsConfig = field(default_factory=PaymentsConfig)
