# ShopMaster - Retail Point-of-Sale & Inventory manager for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Shop state and mutation handlers for ShopMaster.

``ShopState`` owns the five entity stores of a shop and is the only place
where they are written. It sits between:

- the entity stores and the persistence adapter (``stores.py``, ``db.py``),
- user-facing layers such as the CLI or any other front-end.

Responsibilities
----------------
1) Lifecycle
   - Load every store exactly once when the state is opened, with its own
     default (seed products, empty collections, default settings).
   - Wire one persistence observer per store: each successful mutation is
     written to the database synchronously.

2) Mutation handlers (the only legal write paths)
   - add_product      : prepend a product.
   - update_product   : replace the product with the same id (no-op if none).
   - delete_product   : remove a product; history referencing it is kept.
   - add_expense      : append an expense.
   - record_stock_out : append a stock-out AND decrement the product stock.
   - record_sale      : append a sale AND decrement the stock of its items.
   - update_settings  : replace the settings record.

3) Metrics
   - Recompute the dashboard metrics from scratch whenever one of the four
     collections changes (``stats`` / ``breakdown``).

Design notes
------------
- Handlers are intentionally permissive: they do not validate business
  rules beyond the stock floor. Removing more units than available simply
  leaves the product at zero stock (the shortfall is only logged at DEBUG
  level).
- Paired updates (stock-out + product, sale + products) run inside
  :meth:`ShopState.batch`. Observers (persistence, metrics) only run once
  every store involved holds its new value, so no reader ever sees a
  stock-out without its stock decrement.
- Single writer: there is no locking. A multi-writer front-end would need
  to serialize calls to the handlers.
"""

import logging
from collections.abc import Callable, Iterator
from contextlib import ExitStack, contextmanager
from datetime import datetime, timezone
from typing import Any, Optional

from .db import DatabaseConfig
from .defaults import (
    EXPENSES_KEY,
    INITIAL_PRODUCTS,
    PRODUCTS_KEY,
    SALES_KEY,
    SETTINGS_KEY,
    STOCK_OUTS_KEY,
    default_settings,
)
from .engine import (
    DashboardStats,
    MetricsBreakdown,
    ProductLookup,
    Snapshot,
    compute_breakdown,
)
from .models import Expense, Product, Sale, ShopSettings, StockOut
from .numeric import safe_number
from .stores import (
    EntityStore,
    encode_collection,
    load_collection,
    load_single,
    persist_to,
)

LOGGER = logging.getLogger(__name__)


def _now_utc_iso() -> str:
    """Return the current UTC datetime as ISO string (isolated for testing)."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _decrement(
    products: tuple[Product, ...],
    product_id: Any,
    quantity: Any,
    timestamp: str,
) -> tuple[tuple[Product, ...], bool]:
    """
    Remove ``quantity`` units from every product whose id is ``product_id``.

    Stock is clamped at zero. Returns the new product tuple and whether a
    product matched.
    """
    wanted = safe_number(quantity)
    matched = False
    updated = []
    for product in products:
        if product.id != product_id:
            updated.append(product)
            continue

        matched = True
        available = safe_number(product.stock)
        new_stock = max(0.0, available - wanted)
        if wanted > available:
            LOGGER.debug(
                "Stock of %r clamped at 0: %s requested, %s available "
                "(shortfall %s).",
                product_id,
                wanted,
                available,
                wanted - available,
            )
        updated.append(product.with_stock(_as_quantity(new_stock), timestamp))
    return tuple(updated), matched


def _as_quantity(value: float) -> float:
    """Keep whole quantities as integers so that stored stock stays integral."""
    return int(value) if float(value).is_integer() else value


class ShopState:
    """
    In-memory state of a shop, backed by the database.

    Parameters
    ----------
    cfg:
        Database configuration used to load and persist the stores.
    clock:
        Function returning the current timestamp as ISO string. Used to
        refresh ``lastUpdated`` on stock changes.
    """

    def __init__(
        self,
        cfg: DatabaseConfig,
        *,
        clock: Optional[Callable[[], str]] = None,
    ) -> None:
        self.cfg = cfg
        self._clock = clock or _now_utc_iso

        self.products_store: EntityStore[tuple[Product, ...]] = EntityStore(
            "products",
            load_collection(cfg, PRODUCTS_KEY, Product.from_dict, INITIAL_PRODUCTS),
        )
        self.sales_store: EntityStore[tuple[Sale, ...]] = EntityStore(
            "sales", load_collection(cfg, SALES_KEY, Sale.from_dict, ())
        )
        self.expenses_store: EntityStore[tuple[Expense, ...]] = EntityStore(
            "expenses", load_collection(cfg, EXPENSES_KEY, Expense.from_dict, ())
        )
        self.stock_outs_store: EntityStore[tuple[StockOut, ...]] = EntityStore(
            "stock_outs",
            load_collection(cfg, STOCK_OUTS_KEY, StockOut.from_dict, ()),
        )
        self.settings_store: EntityStore[ShopSettings] = EntityStore(
            "settings",
            load_single(cfg, SETTINGS_KEY, ShopSettings.from_dict, default_settings),
        )

        # 1) Persistence observers, one per store.
        persist_to(self.products_store, cfg, PRODUCTS_KEY, encode_collection)
        persist_to(self.sales_store, cfg, SALES_KEY, encode_collection)
        persist_to(self.expenses_store, cfg, EXPENSES_KEY, encode_collection)
        persist_to(self.stock_outs_store, cfg, STOCK_OUTS_KEY, encode_collection)
        persist_to(
            self.settings_store, cfg, SETTINGS_KEY, lambda settings: settings.to_dict()
        )

        # 2) Metrics: full recomputation on every change of a collection.
        self._breakdown = compute_breakdown(self.snapshot())
        for store in self._collection_stores():
            store.subscribe(self._recompute_metrics)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def products(self) -> tuple[Product, ...]:
        return self.products_store.get()

    @property
    def sales(self) -> tuple[Sale, ...]:
        return self.sales_store.get()

    @property
    def expenses(self) -> tuple[Expense, ...]:
        return self.expenses_store.get()

    @property
    def stock_outs(self) -> tuple[StockOut, ...]:
        return self.stock_outs_store.get()

    @property
    def settings(self) -> ShopSettings:
        return self.settings_store.get()

    @property
    def stats(self) -> DashboardStats:
        """Dashboard metrics of the latest settled state."""
        return self._breakdown.to_stats()

    @property
    def breakdown(self) -> MetricsBreakdown:
        """Metric terms of the latest settled state."""
        return self._breakdown

    def snapshot(self) -> Snapshot:
        """Return the four collections as an immutable snapshot."""
        return Snapshot(
            products=self.products,
            sales=self.sales,
            expenses=self.expenses,
            stock_outs=self.stock_outs,
        )

    def find_product(self, product_id: Any) -> Optional[Product]:
        """Return the product with this id, or None if it does not exist."""
        return ProductLookup(self.products).get(product_id)

    # ------------------------------------------------------------------
    # Mutation handlers
    # ------------------------------------------------------------------

    def add_product(self, product: Product) -> None:
        """Prepend a new product. Generating a unique id is up to the caller."""
        self.products_store.set((product,) + self.products)

    def update_product(self, product: Product) -> None:
        """Replace the product with the same id. Unknown ids are ignored."""
        current = self.products
        if not any(p.id == product.id for p in current):
            LOGGER.debug("update_product: no product with id %r.", product.id)
            return
        self.products_store.set(
            tuple(product if p.id == product.id else p for p in current)
        )

    def delete_product(self, product_id: Any) -> None:
        """
        Remove the product with this id.

        Sales and stock-outs referencing it are left untouched.
        """
        current = self.products
        remaining = tuple(p for p in current if p.id != product_id)
        if len(remaining) == len(current):
            LOGGER.debug("delete_product: no product with id %r.", product_id)
            return
        self.products_store.set(remaining)

    def add_expense(self, expense: Expense) -> None:
        """Append an expense."""
        self.expenses_store.set(self.expenses + (expense,))

    def record_stock_out(self, record: StockOut) -> None:
        """
        Append a stock-out and decrement the matching product's stock.

        The decrement is clamped at zero and refreshes the product's
        ``lastUpdated``. When no product matches, the stock-out is still
        recorded and no product is modified.
        """
        products, matched = _decrement(
            self.products, record.product_id, record.quantity, self._clock()
        )
        with self.batch():
            self.stock_outs_store.set(self.stock_outs + (record,))
            if matched:
                self.products_store.set(products)

    def record_sale(self, sale: Sale) -> None:
        """
        Append a sale and decrement the stock of each item's product.

        Items referencing a product that does not exist are skipped. Stock is
        clamped at zero, exactly as for stock-outs.
        """
        timestamp = self._clock()
        products = self.products
        any_matched = False
        for item in sale.items:
            products, matched = _decrement(
                products, item.product_id, item.quantity, timestamp
            )
            any_matched = any_matched or matched

        with self.batch():
            self.sales_store.set(self.sales + (sale,))
            if any_matched:
                self.products_store.set(products)

    def update_settings(self, settings: ShopSettings) -> None:
        """Replace the settings record."""
        self.settings_store.set(settings)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @contextmanager
    def batch(self) -> Iterator["ShopState"]:
        """
        Apply several store updates as one step.

        Observers of every store are held back until the block exits, so
        persistence and metrics only ever see the fully settled state.
        """
        with ExitStack() as stack:
            for store in self._all_stores():
                stack.enter_context(store.deferred())
            yield self

    def _collection_stores(self) -> tuple[EntityStore[Any], ...]:
        return (
            self.products_store,
            self.sales_store,
            self.expenses_store,
            self.stock_outs_store,
        )

    def _all_stores(self) -> tuple[EntityStore[Any], ...]:
        return self._collection_stores() + (self.settings_store,)

    def _recompute_metrics(self, _store: EntityStore[Any]) -> None:
        self._breakdown = compute_breakdown(self.snapshot())
