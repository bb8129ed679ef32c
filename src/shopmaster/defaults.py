# ShopMaster - Retail Point-of-Sale & Inventory manager for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Storage keys, seed data and default settings for ShopMaster.

The storage keys are part of the persisted layout: changing one of them
makes the application start from defaults again for that record stream.
"""

from datetime import datetime, timezone

from .models import Product, ReturnPolicy, ShopSettings

PRODUCTS_KEY = "sm_products_v2"
SALES_KEY = "sm_sales_v2"
EXPENSES_KEY = "sm_expenses_v2"
STOCK_OUTS_KEY = "sm_stockouts_v2"
SETTINGS_KEY = "sm_settings_v2"

ALL_KEYS: tuple[str, ...] = (
    PRODUCTS_KEY,
    SALES_KEY,
    EXPENSES_KEY,
    STOCK_OUTS_KEY,
    SETTINGS_KEY,
)

DEFAULT_RETURN_POLICY_TEXT = (
    "Items can be returned within 7 days of purchase in original packaging. "
    "Receipt is mandatory."
)

_SEED_TIMESTAMP = "2025-01-01T00:00:00+00:00"

# Catalogue used on first start, or when the stored product list is unreadable.
INITIAL_PRODUCTS: tuple[Product, ...] = (
    Product(
        id="p-1001",
        name="Basmati Rice 5kg",
        price=2450.0,
        cost=2100.0,
        stock=40,
        min_stock=10,
        last_updated=_SEED_TIMESTAMP,
        category="Grocery",
    ),
    Product(
        id="p-1002",
        name="Cooking Oil 1L",
        price=620.0,
        cost=540.0,
        stock=60,
        min_stock=15,
        last_updated=_SEED_TIMESTAMP,
        category="Grocery",
    ),
    Product(
        id="p-1003",
        name="Black Tea 950g",
        price=1650.0,
        cost=1420.0,
        stock=8,
        min_stock=10,
        last_updated=_SEED_TIMESTAMP,
        category="Beverages",
    ),
    Product(
        id="p-1004",
        name="Laundry Detergent 1kg",
        price=480.0,
        cost=390.0,
        stock=25,
        min_stock=5,
        last_updated=_SEED_TIMESTAMP,
        category="Household",
    ),
)


def default_settings() -> ShopSettings:
    """Settings used when no (readable) settings record is stored."""
    return ShopSettings(
        return_policy=ReturnPolicy(
            enabled=False,
            content=DEFAULT_RETURN_POLICY_TEXT,
            last_updated=datetime.now(timezone.utc).isoformat(timespec="seconds"),
        )
    )
