"""
Configuration Loader (``property_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the frozen dataclasses
of ``property_config.schema``.  Runtime callers go through
``property_config.get_active_config()`` instead of calling this directly.

Invariants enforced
-------------------
* Unknown sections and keys are rejected with ``ValueError`` so that a typo
  never silently falls back to a default.
* Every parsed object is a frozen dataclass from ``schema.py``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Wrong shape or value  -> ``ValueError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from property_config.schema import (
    AppConfig,
    DatabaseConfig,
    LoggingConfig,
    PaymentsConfig,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return data


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"{name}: must be a mapping")
    return section


def _check_keys(section: dict[str, Any], name: str, allowed: set[str]) -> None:
    unknown = set(section) - allowed
    if unknown:
        raise ValueError(f"{name}: unknown keys {sorted(unknown)}")


def _parse_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ValueError(f"{name}: expected true/false, got {value!r}")


def _parse_int(value: Any, name: str) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    raise ValueError(f"{name}: expected an integer, got {value!r}")


def parse_database(data: dict[str, Any]) -> DatabaseConfig:
    _check_keys(data, "database", {"path", "echo", "enforce_foreign_keys"})
    defaults = DatabaseConfig()
    return DatabaseConfig(
        path=str(data.get("path", defaults.path)),
        echo=_parse_bool(data.get("echo", defaults.echo), "database.echo"),
        enforce_foreign_keys=_parse_bool(
            data.get("enforce_foreign_keys", defaults.enforce_foreign_keys),
            "database.enforce_foreign_keys",
        ),
    )


def parse_logging(data: dict[str, Any]) -> LoggingConfig:
    _check_keys(data, "logging", {"level"})
    return LoggingConfig(level=str(data.get("level", LoggingConfig.level)).upper())


def parse_payments(data: dict[str, Any]) -> PaymentsConfig:
    _check_keys(data, "payments", {"review_window_months"})
    return PaymentsConfig(
        review_window_months=_parse_int(
            data.get("review_window_months", PaymentsConfig.review_window_months),
            "payments.review_window_months",
        )
    )


def parse_config(data: dict[str, Any]) -> AppConfig:
    """Build an AppConfig from an already-loaded mapping."""
    _check_keys(data, "config", {"database", "logging", "payments"})
    return AppConfig(
        database=parse_database(_section(data, "database")),
        logging=parse_logging(_section(data, "logging")),
        payments=parse_payments(_section(data, "payments")),
    )


def load_config(path: Path | str) -> AppConfig:
    """Load and parse one configuration file."""
    return parse_config(load_yaml_file(Path(path)))
