# ShopMaster - Retail Point-of-Sale & Inventory manager for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Record types for ShopMaster.

Every record stream is persisted as a JSON array of objects whose field
names follow the historical (camelCase) storage layout:

    Product  : id, name, price, cost, stock, minStock, lastUpdated
    Sale     : id, items[{productId, quantity, price}], total, timestamp
    Expense  : id, amount, category, description, timestamp
    StockOut : id, productId, quantity, reason, timestamp
    Settings : returnPolicy{enabled, content, lastUpdated}

Design notes
------------
- All dataclasses are frozen and deeply read-only: JSON objects become
  read-only mappings and JSON arrays become tuples when a record is built.
  A record is replaced, never edited in place, so records can be handed to
  any reader without giving it write access to the shop state.
- Field values are kept exactly as they were loaded (a number may be a
  string, a name may be null, ...). Computations go through
  ``numeric.safe_number``. Keys that were absent on load and are still
  empty are not written back. Together this keeps a save/load cycle
  lossless even for partially migrated data. The only normalization is
  ``Sale.items``: a value that is not an array is read as no items.
- Unknown fields found on read are kept in ``extra`` and written back on
  save, so that newer or foreign data is never silently dropped.
- References between records (``productId``) are plain identifiers with no
  integrity guarantee. See ``engine.ProductLookup``.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Any, Optional

# A sale recorded through the stock-out screen rather than as a Sale record.
# Every other reason is an opaque label.
SALE_REASON = "Sale"

STOCK_OUT_REASONS: tuple[str, ...] = (
    SALE_REASON,
    "Damaged",
    "Expired",
    "Lost",
    "Adjustment",
)


def _freeze(value: Any) -> Any:
    """Return a read-only copy of a JSON-like value."""
    if isinstance(value, Mapping):
        return MappingProxyType({str(k): _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    """Return a plain (JSON-serializable) copy of a frozen value."""
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_thaw(v) for v in value]
    return value


def _extra_fields(data: Mapping[str, Any], known: tuple[str, ...]) -> dict[str, Any]:
    """Return the entries of ``data`` whose keys are not in ``known``."""
    return {str(k): v for k, v in data.items() if k not in known}


def _loaded_keys(data: Mapping[str, Any], known: tuple[str, ...]) -> frozenset[str]:
    return frozenset(k for k in known if k in data)


class _Record:
    """
    Base of the record dataclasses.

    Subclasses declare ``extra`` (unknown stored fields) and ``loaded_keys``
    (known keys present in the stored object, or None for a record built in
    code).
    """

    def __post_init__(self) -> None:
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if isinstance(value, (Mapping, list)):
                object.__setattr__(self, f.name, _freeze(value))

    def _encode(
        self, known: Mapping[str, Any], optional: tuple[str, ...] = ()
    ) -> dict[str, Any]:
        """Merge ``extra`` and ``known`` into a plain dict ready for JSON."""
        out: dict[str, Any] = dict(self.extra)  # type: ignore[attr-defined]
        out.update(known)
        loaded = self.loaded_keys  # type: ignore[attr-defined]
        if loaded is None:
            dropped = [k for k in optional if out.get(k) is None]
        else:
            # Keys missing from the stored object stay missing while empty.
            dropped = [
                k for k in known if k not in loaded and out.get(k) in (None, (), [])
            ]
        for key in dropped:
            out.pop(key, None)
        return _thaw(out)


# ---------------------------------------------------------------------------
# Product
# ---------------------------------------------------------------------------

_PRODUCT_FIELDS = (
    "id",
    "name",
    "price",
    "cost",
    "stock",
    "minStock",
    "lastUpdated",
    "category",
    "sku",
)


@dataclass(frozen=True)
class Product(_Record):
    """
    A catalogue item and its current stock level.

    Attributes
    ----------
    id:
        Unique, stable identifier (generated by the caller).
    name:
        Display name.
    price:
        Unit selling price.
    cost:
        Unit cost, used for cost of goods sold.
    stock:
        Quantity currently in stock. Never negative after a decrement.
    min_stock:
        Threshold at or below which the product is reported as low stock.
    last_updated:
        ISO-8601 timestamp of the last stock change.
    category, sku:
        Optional descriptive fields.
    extra:
        Unknown fields preserved from storage.
    """

    id: Any
    name: Any
    price: Any = 0.0
    cost: Any = 0.0
    stock: Any = 0
    min_stock: Any = 0
    last_updated: Optional[str] = None
    category: Optional[str] = None
    sku: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)
    loaded_keys: Optional[frozenset[str]] = field(
        default=None, compare=False, repr=False
    )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Product":
        return cls(
            id=data.get("id"),
            name=data.get("name"),
            price=data.get("price"),
            cost=data.get("cost"),
            stock=data.get("stock"),
            min_stock=data.get("minStock"),
            last_updated=data.get("lastUpdated"),
            category=data.get("category"),
            sku=data.get("sku"),
            extra=_extra_fields(data, _PRODUCT_FIELDS),
            loaded_keys=_loaded_keys(data, _PRODUCT_FIELDS),
        )

    def to_dict(self) -> dict[str, Any]:
        return self._encode(
            {
                "id": self.id,
                "name": self.name,
                "price": self.price,
                "cost": self.cost,
                "stock": self.stock,
                "minStock": self.min_stock,
                "lastUpdated": self.last_updated,
                "category": self.category,
                "sku": self.sku,
            },
            optional=("category", "sku"),
        )

    def with_stock(self, stock: float, last_updated: str) -> "Product":
        """Return a copy with a new stock level and refreshed timestamp."""
        return replace(self, stock=stock, last_updated=last_updated)


# ---------------------------------------------------------------------------
# Sale
# ---------------------------------------------------------------------------

_SALE_ITEM_FIELDS = ("productId", "quantity", "price")
_SALE_FIELDS = ("id", "items", "total", "timestamp")


@dataclass(frozen=True)
class SaleItem(_Record):
    """One line of a sale: a product reference, a quantity and a price snapshot."""

    product_id: Any
    quantity: Any = 0
    price: Any = 0.0
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)
    loaded_keys: Optional[frozenset[str]] = field(
        default=None, compare=False, repr=False
    )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SaleItem":
        return cls(
            product_id=data.get("productId"),
            quantity=data.get("quantity"),
            price=data.get("price"),
            extra=_extra_fields(data, _SALE_ITEM_FIELDS),
            loaded_keys=_loaded_keys(data, _SALE_ITEM_FIELDS),
        )

    def to_dict(self) -> dict[str, Any]:
        return self._encode(
            {
                "productId": self.product_id,
                "quantity": self.quantity,
                "price": self.price,
            }
        )


@dataclass(frozen=True)
class Sale(_Record):
    """
    A formal sale transaction.

    ``total`` is stored independently of the items and is the authoritative
    revenue figure. Items are only used to look up the cost of goods sold.
    """

    id: Any
    items: tuple[SaleItem, ...] = ()
    total: Any = 0.0
    timestamp: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)
    loaded_keys: Optional[frozenset[str]] = field(
        default=None, compare=False, repr=False
    )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Sale":
        raw_items = data.get("items")
        if not isinstance(raw_items, list):
            raw_items = []
        return cls(
            id=data.get("id"),
            items=tuple(
                SaleItem.from_dict(item) for item in raw_items if isinstance(item, Mapping)
            ),
            total=data.get("total"),
            timestamp=data.get("timestamp"),
            extra=_extra_fields(data, _SALE_FIELDS),
            loaded_keys=_loaded_keys(data, _SALE_FIELDS),
        )

    def to_dict(self) -> dict[str, Any]:
        return self._encode(
            {
                "id": self.id,
                "items": [item.to_dict() for item in self.items],
                "total": self.total,
                "timestamp": self.timestamp,
            }
        )


# ---------------------------------------------------------------------------
# Expense
# ---------------------------------------------------------------------------

_EXPENSE_FIELDS = ("id", "amount", "category", "description", "timestamp")


@dataclass(frozen=True)
class Expense(_Record):
    """A cash-out record. Expenses are not related to products."""

    id: Any
    amount: Any = 0.0
    category: Any = ""
    description: Any = ""
    timestamp: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)
    loaded_keys: Optional[frozenset[str]] = field(
        default=None, compare=False, repr=False
    )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Expense":
        return cls(
            id=data.get("id"),
            amount=data.get("amount"),
            category=data.get("category"),
            description=data.get("description"),
            timestamp=data.get("timestamp"),
            extra=_extra_fields(data, _EXPENSE_FIELDS),
            loaded_keys=_loaded_keys(data, _EXPENSE_FIELDS),
        )

    def to_dict(self) -> dict[str, Any]:
        return self._encode(
            {
                "id": self.id,
                "amount": self.amount,
                "category": self.category,
                "description": self.description,
                "timestamp": self.timestamp,
            }
        )


# ---------------------------------------------------------------------------
# StockOut
# ---------------------------------------------------------------------------

_STOCK_OUT_FIELDS = ("id", "productId", "quantity", "reason", "timestamp", "note")


@dataclass(frozen=True)
class StockOut(_Record):
    """
    Inventory leaving stock outside of a formal Sale record.

    A stock-out with ``reason == "Sale"`` is a sale recorded directly from
    the stock-out screen; it counts as revenue. Any other reason (damage,
    loss, adjustment, ...) only reduces stock.
    """

    id: Any
    product_id: Any
    quantity: Any = 0
    reason: Any = ""
    timestamp: Optional[str] = None
    note: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)
    loaded_keys: Optional[frozenset[str]] = field(
        default=None, compare=False, repr=False
    )

    @property
    def is_sale(self) -> bool:
        return self.reason == SALE_REASON

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StockOut":
        return cls(
            id=data.get("id"),
            product_id=data.get("productId"),
            quantity=data.get("quantity"),
            reason=data.get("reason"),
            timestamp=data.get("timestamp"),
            note=data.get("note"),
            extra=_extra_fields(data, _STOCK_OUT_FIELDS),
            loaded_keys=_loaded_keys(data, _STOCK_OUT_FIELDS),
        )

    def to_dict(self) -> dict[str, Any]:
        return self._encode(
            {
                "id": self.id,
                "productId": self.product_id,
                "quantity": self.quantity,
                "reason": self.reason,
                "timestamp": self.timestamp,
                "note": self.note,
            },
            optional=("note",),
        )


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

_RETURN_POLICY_FIELDS = ("enabled", "content", "lastUpdated")
_SETTINGS_FIELDS = ("returnPolicy",)


@dataclass(frozen=True)
class ReturnPolicy(_Record):
    """
    Return policy printed on receipts.

    ``enabled`` keeps the stored value; use :attr:`is_enabled` to test it.
    """

    enabled: Any = False
    content: Any = ""
    last_updated: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)
    loaded_keys: Optional[frozenset[str]] = field(
        default=None, compare=False, repr=False
    )

    @property
    def is_enabled(self) -> bool:
        return bool(self.enabled)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ReturnPolicy":
        return cls(
            enabled=data.get("enabled"),
            content=data.get("content"),
            last_updated=data.get("lastUpdated"),
            extra=_extra_fields(data, _RETURN_POLICY_FIELDS),
            loaded_keys=_loaded_keys(data, _RETURN_POLICY_FIELDS),
        )

    def to_dict(self) -> dict[str, Any]:
        return self._encode(
            {
                "enabled": self.enabled,
                "content": self.content,
                "lastUpdated": self.last_updated,
            }
        )


@dataclass(frozen=True)
class ShopSettings(_Record):
    """Single settings record of the shop."""

    return_policy: ReturnPolicy = field(default_factory=ReturnPolicy)
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)
    loaded_keys: Optional[frozenset[str]] = field(
        default=None, compare=False, repr=False
    )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ShopSettings":
        raw_policy = data.get("returnPolicy")
        if not isinstance(raw_policy, Mapping):
            raw_policy = {}
        return cls(
            return_policy=ReturnPolicy.from_dict(raw_policy),
            extra=_extra_fields(data, _SETTINGS_FIELDS),
            loaded_keys=_loaded_keys(data, _SETTINGS_FIELDS),
        )

    def to_dict(self) -> dict[str, Any]:
        return self._encode({"returnPolicy": self.return_policy.to_dict()})
