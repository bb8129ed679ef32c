# ShopMaster - Retail Point-of-Sale & Inventory manager for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Persistent store adapter for ShopMaster.

This module is the only place that talks to durable storage. It exposes a
deliberately small key-value contract on top of a SQLite database:

- ``load_record(cfg, key, default, validate=...)``
- ``save_record(cfg, key, value)``

Each record is a JSON document stored under a name (for example
``"sm_products_v2"``). Higher layers (``stores.py``) decide which keys exist,
which default applies to each key and when records are saved.

------------------------------------------------------------------------------
Schema Overview
------------------------------------------------------------------------------

A single table holds every record:

1) records

   Columns:
   - key         TEXT PRIMARY KEY     -- record name
   - value       TEXT NOT NULL        -- JSON document
   - updated_at  TEXT NOT NULL        -- ISO datetime, UTC

   ``save_record`` fully replaces the previous value stored under the key.

------------------------------------------------------------------------------
Failure policy
------------------------------------------------------------------------------

- Loading never raises. A missing key, unreadable JSON, a value of the wrong
  shape (e.g. an object where a list is expected) or a SQLite error is
  logged and the caller-supplied default is returned instead.
- Saving raises ``sqlite3.Error`` / ``OSError`` / ``TypeError`` /
  ``ValueError`` on failure. Callers on a mutation path (the persistence
  observer in ``stores.py``) are responsible for catching and logging.

------------------------------------------------------------------------------
SQLite Notes
------------------------------------------------------------------------------

- All timestamps are stored as ISO-8601 text (UTC).
- Each call opens and closes its own connection; there is a single writer.
- The database file is created on first use, together with its parent
  directory.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TypeVar

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseConfig:
    """
    Database configuration for ShopMaster.

    Attributes
    ----------
    engine:
        Database engine identifier. Only "sqlite" is supported.
    path:
        Path to the SQLite database file.
    """

    engine: str
    path: Path


# ---------------------------------------------------------------------------
# Shape validators
# ---------------------------------------------------------------------------


def expect_list(value: Any) -> bool:
    """Shape check for record collections (a JSON array)."""
    return isinstance(value, list)


def expect_object(value: Any) -> bool:
    """Shape check for single records (a JSON object)."""
    return isinstance(value, dict)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _ensure_sqlite(cfg: DatabaseConfig) -> None:
    """Raise if the configuration does not refer to a supported engine."""
    if cfg.engine.lower() != "sqlite":
        msg = (
            f"Unsupported database engine: {cfg.engine!r}. "
            "Only 'sqlite' is supported for now."
        )
        raise ValueError(msg)


def _connect(cfg: DatabaseConfig) -> sqlite3.Connection:
    """
    Open a SQLite connection.

    The caller is responsible for closing the connection.
    """
    _ensure_sqlite(cfg)
    return sqlite3.connect(cfg.path)


def _create_schema_if_needed(conn: sqlite3.Connection) -> None:
    """Create the ``records`` table if it does not exist yet."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS records (
            key         TEXT PRIMARY KEY,
            value       TEXT NOT NULL,
            updated_at  TEXT NOT NULL
        );
        """
    )
    conn.commit()


def _now_utc_iso() -> str:
    """Return the current UTC datetime as ISO string."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def init_database(cfg: DatabaseConfig) -> None:
    """
    Initialize the database schema if needed.

    - Creates the SQLite file (and its parent directory) if it does not exist.
    - Creates the ``records`` table if it is missing.
    - This function is idempotent: calling it multiple times is safe.

    Raises
    ------
    ValueError
        If cfg.engine is not supported.
    sqlite3.Error
        If schema creation fails.
    """
    _ensure_sqlite(cfg)
    cfg.path.parent.mkdir(parents=True, exist_ok=True)

    conn = _connect(cfg)
    try:
        _create_schema_if_needed(conn)
    finally:
        conn.close()


def load_record(
    cfg: DatabaseConfig,
    key: str,
    default: T,
    *,
    validate: Callable[[Any], bool] | None = None,
) -> Any | T:
    """
    Load the JSON document stored under ``key``.

    Parameters
    ----------
    cfg:
        Database configuration.
    key:
        Record name.
    default:
        Value returned when the record is missing or unusable.
    validate:
        Optional shape check applied to the parsed value (see
        :func:`expect_list` / :func:`expect_object`). A value that fails the
        check is treated exactly like corrupted data.

    Returns
    -------
    Any
        The parsed JSON value, or ``default``.
    """
    try:
        init_database(cfg)
        conn = _connect(cfg)
        try:
            row = conn.execute(
                "SELECT value FROM records WHERE key = ?;", (key,)
            ).fetchone()
        finally:
            conn.close()
    except (sqlite3.Error, OSError, ValueError) as exc:
        LOGGER.error("Storage error while loading %r: %s", key, exc)
        return default

    if row is None:
        LOGGER.debug("No stored record for %r, using default.", key)
        return default

    try:
        value = json.loads(row[0])
    except (TypeError, ValueError) as exc:
        LOGGER.warning("Stored record %r is not valid JSON (%s), using default.", key, exc)
        return default

    if validate is not None and not validate(value):
        LOGGER.warning(
            "Stored record %r has an unexpected shape (%s), using default.",
            key,
            type(value).__name__,
        )
        return default

    return value


def save_record(cfg: DatabaseConfig, key: str, value: Any) -> None:
    """
    Serialize ``value`` as JSON and store it under ``key``.

    The previous value stored under the same key is fully replaced.

    Raises
    ------
    TypeError, ValueError
        If ``value`` cannot be serialized to JSON.
    sqlite3.Error, OSError
        If the database cannot be written.
    """
    payload = json.dumps(value, ensure_ascii=False)

    init_database(cfg)
    conn = _connect(cfg)
    try:
        conn.execute(
            """
            INSERT OR REPLACE INTO records (key, value, updated_at)
            VALUES (?, ?, ?);
            """,
            (key, payload, _now_utc_iso()),
        )
        conn.commit()
    finally:
        conn.close()


def list_record_keys(cfg: DatabaseConfig) -> list[str]:
    """Return the names of all stored records, sorted alphabetically."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        rows = conn.execute("SELECT key FROM records ORDER BY key;").fetchall()
    finally:
        conn.close()

    return [row[0] for row in rows]


def delete_record(cfg: DatabaseConfig, key: str) -> bool:
    """
    Delete the record stored under ``key``.

    Returns
    -------
    bool
        True if a record was deleted, False if no record existed.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute("DELETE FROM records WHERE key = ?;", (key,))
        conn.commit()
        deleted = cur.rowcount > 0
    finally:
        conn.close()

    return deleted
