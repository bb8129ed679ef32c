# ShopMaster - Retail Point-of-Sale & Inventory manager for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Entity stores for ShopMaster.

An entity store is a named, versioned slot holding either a record
collection (products, sales, expenses, stock-outs) or a single record
(settings). Its current value is always the loaded/default value or the
result of the last successful ``set``.

Stores are observable:

- ``subscribe(callback)`` registers an observer called synchronously, with
  the store as argument, after every change;
- ``persist_to(...)`` wires the observer that writes the store to the
  database after each change;
- ``deferred()`` holds notifications back until a paired update (for
  example a stock-out and the matching product decrement) has been applied
  to every involved store.

A write to one store never writes another store. Updating two stores
together is the job of the mutation handlers in ``state.py``.
"""

import logging
import sqlite3
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

from .db import DatabaseConfig, expect_list, expect_object, load_record, save_record

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

Observer = Callable[["EntityStore[Any]"], None]


class EntityStore(Generic[T]):
    """
    Observable in-memory value with a version counter.

    Parameters
    ----------
    name:
        Human-readable store name (used in logs).
    value:
        Initial value (loaded from storage or defaulted).
    """

    def __init__(self, name: str, value: T) -> None:
        self.name = name
        self._value = value
        self._version = 0
        self._observers: list[Observer] = []
        self._defer_depth = 0
        self._pending = False

    def __repr__(self) -> str:
        return f"EntityStore(name={self.name!r}, version={self._version})"

    @property
    def version(self) -> int:
        """Number of successful changes since the store was created."""
        return self._version

    def get(self) -> T:
        """Return the current value."""
        return self._value

    def set(self, value: T) -> None:
        """Replace the current value and notify observers."""
        self._value = value
        self._version += 1
        if self._defer_depth:
            self._pending = True
            return
        self._notify()

    def subscribe(self, callback: Observer) -> Callable[[], None]:
        """
        Register an observer and return a function that unregisters it.

        Observers are called in registration order.
        """
        self._observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    @contextmanager
    def deferred(self) -> Iterator["EntityStore[T]"]:
        """Hold notifications until the outermost ``deferred`` block exits."""
        self._defer_depth += 1
        try:
            yield self
        finally:
            self._defer_depth -= 1
            if self._defer_depth == 0 and self._pending:
                self._pending = False
                self._notify()

    def _notify(self) -> None:
        for callback in list(self._observers):
            callback(self)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_collection(
    cfg: DatabaseConfig,
    key: str,
    decode: Callable[[Mapping[str, Any]], R],
    default: tuple[R, ...],
) -> tuple[R, ...]:
    """
    Load a record collection stored under ``key``.

    A missing, unreadable or non-list value yields ``default``. Elements that
    are not JSON objects cannot be decoded and are dropped with a warning.
    """
    raw = load_record(cfg, key, None, validate=expect_list)
    if raw is None:
        return default

    items = []
    for position, element in enumerate(raw):
        if not isinstance(element, Mapping):
            LOGGER.warning(
                "Skipping element #%d of %r: expected an object, got %s.",
                position,
                key,
                type(element).__name__,
            )
            continue
        items.append(decode(element))
    return tuple(items)


def load_single(
    cfg: DatabaseConfig,
    key: str,
    decode: Callable[[Mapping[str, Any]], R],
    default: Callable[[], R],
) -> R:
    """Load a single record stored under ``key``, or build the default."""
    raw = load_record(cfg, key, None, validate=expect_object)
    if raw is None:
        return default()
    return decode(raw)


# ---------------------------------------------------------------------------
# Persistence observer
# ---------------------------------------------------------------------------


def encode_collection(items: tuple[Any, ...]) -> list[dict[str, Any]]:
    """Encode a collection of records (anything with ``to_dict``) as a list."""
    return [item.to_dict() for item in items]


def persist_to(
    store: EntityStore[T],
    cfg: DatabaseConfig,
    key: str,
    encode: Callable[[T], Any],
) -> Callable[[], None]:
    """
    Save ``store`` under ``key`` after every change.

    Save failures are logged and swallowed: the in-memory value stays the
    source of truth and the next successful save writes it in full.

    Returns
    -------
    Callable[[], None]
        Function unregistering the observer.
    """

    def _save(changed: EntityStore[T]) -> None:
        try:
            save_record(cfg, key, encode(changed.get()))
        except (sqlite3.Error, OSError, TypeError, ValueError) as exc:
            LOGGER.error(
                "Failed to save %s (key %r, version %d): %s",
                changed.name,
                key,
                changed.version,
                exc,
            )

    return store.subscribe(_save)
