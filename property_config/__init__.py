"""
property_config -- single public entrypoint for application configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration
    files or environment variables directly.

Architecture position:
    Configuration -- sits beside ``property_kernel`` and below
    ``property_services`` and the scripts.  The kernel MUST NEVER import
    from ``property_config``; the facade passes plain values into it.

Failure modes:
    - ``FileNotFoundError`` -- an explicit or environment-supplied path does
      not exist.
    - ``ValueError`` -- schema or value validation failures.
    - ``yaml.YAMLError`` -- malformed YAML.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from property_config.loader import load_config
from property_config.schema import (
    AppConfig,
    DatabaseConfig,
    LoggingConfig,
    PaymentsConfig,
)

_logger = logging.getLogger("property_kernel.config")

CONFIG_ENV_VAR = "PROPERTY_MANAGEMENT_CONFIG"

_DEFAULT_CONFIG_FILE = Path(__file__).parent / "defaults.yaml"


def get_active_config(path: Path | str | None = None) -> AppConfig:
    """The ONLY public configuration entrypoint.

    Resolution order: ``path`` if given, else the file named by the
    ``PROPERTY_MANAGEMENT_CONFIG`` environment variable, else the packaged
    ``defaults.yaml``.

    Raises:
        FileNotFoundError: If the chosen file does not exist.
        ValueError: If configuration validation fails.
    """
    if path is not None:
        source, config_path = "argument", Path(path)
    elif os.environ.get(CONFIG_ENV_VAR):
        source, config_path = "environment", Path(os.environ[CONFIG_ENV_VAR])
    else:
        source, config_path = "defaults", _DEFAULT_CONFIG_FILE

    config = load_config(config_path)

    _logger.info(
        "config_loaded",
        extra={
            "config_source": source,
            "config_path": str(config_path),
            "database_path": config.database.path,
            "enforce_foreign_keys": config.database.enforce_foreign_keys,
            "review_window_months": config.payments.review_window_months,
        },
    )
    return config


__all__ = [
    "get_active_config",
    "load_config",
    "AppConfig",
    "DatabaseConfig",
    "LoggingConfig",
    "PaymentsConfig",
    "CONFIG_ENV_VAR",
]
