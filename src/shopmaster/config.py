# ShopMaster - Retail Point-of-Sale & Inventory manager for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for ShopMaster.

This module is responsible for:
- loading the application configuration from a TOML file,
- exposing typed dataclasses used by the rest of the application.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import]

from .db import DatabaseConfig

DEFAULT_CONFIG_FILE = "shopmaster_config.toml"
DEFAULT_DB_PATH = "data/db/shopmaster.sqlite"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_DISPLAY_MODES = ("table", "csv", "both")


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for ShopMaster.

    This aggregates:
    - the database configuration (where records are stored),
    - the logging level,
    - display options for the CLI tables and CSV exports.
    """

    database: DatabaseConfig
    log_level: str
    display_mode: str
    output_dir: Path


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    """Return a TOML table, or an empty mapping if absent or not a table."""
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        return {}
    return section


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the ShopMaster application configuration from a TOML file.

    Expected top-level sections in the TOML file
    --------------------------------------------
    [database]
        Database engine ("sqlite") and the SQLite file path.

    [logging]
        Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).

    [display]
        Display mode for the CLI ("table", "csv" or "both") and the output
        directory for CSV exports.

    Notes
    -----
    - Every section is optional.
    - When no path is given and ``shopmaster_config.toml`` does not exist in
      the current directory, built-in defaults are used. An explicit path
      that does not exist is an error.
    - All file paths in the TOML are resolved relative to the directory of
      the TOML file itself.

    Parameters
    ----------
    config_path:
        Path to the TOML configuration file.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.

    Raises
    ------
    FileNotFoundError
        If an explicit ``config_path`` does not exist.
    ValueError
        If the TOML cannot be parsed or a value is invalid.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
        raw = _load_toml(config_file) if config_file.is_file() else {}
    else:
        config_file = Path(config_path).resolve()
        raw = _load_toml(config_file)

    base_dir = config_file.parent

    # 1) Database section
    database_section = _section(raw, "database")
    db_engine = str(database_section.get("engine") or "sqlite")
    if db_engine.lower() != "sqlite":
        raise ValueError(
            f"Unsupported database engine: {db_engine!r}. "
            "Only 'sqlite' is supported for now."
        )
    db_path_raw = database_section.get("path") or DEFAULT_DB_PATH
    db_path = (base_dir / str(db_path_raw)).resolve()

    # 2) Logging section
    logging_section = _section(raw, "logging")
    log_level = str(logging_section.get("level", "INFO")).upper()
    if log_level not in _LOG_LEVELS:
        raise ValueError(
            f"Invalid value for 'logging.level': {log_level!r}. "
            f"Expected one of: {', '.join(_LOG_LEVELS)}."
        )

    # 3) Display options
    display_section = _section(raw, "display")
    display_mode = str(display_section.get("mode", "table"))
    if display_mode not in _DISPLAY_MODES:
        display_mode = "table"
    output_dir = (base_dir / str(display_section.get("output_dir") or "data/output")).resolve()

    return AppConfig(
        database=DatabaseConfig(engine=db_engine, path=db_path),
        log_level=log_level,
        display_mode=display_mode,
        output_dir=output_dir,
    )
