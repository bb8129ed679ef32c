# ShopMaster - Retail Point-of-Sale & Inventory manager for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for ShopMaster.

This module reads a product catalogue from a CSV file and normalizes it
into ``Product`` records that can be fed to the mutation handlers.

Expected input format
---------------------
Column names are case-insensitive and trimmed:

    id, name, price, cost, stock, min_stock[, category, sku]

- ``id``:        unique product identifier (kept as text)
- ``name``:      product name
- ``price``:     unit selling price
- ``cost``:      unit cost
- ``stock``:     quantity in stock
- ``min_stock``: low-stock threshold

``minstock`` is accepted as an alias for ``min_stock``. Any other column is
ignored.

Empty ``id`` or ``name`` cells are rejected. Cells are read as text, so an
identifier such as ``NA`` or ``001`` is kept verbatim.

If the CSV structure does not match, or a numeric column contains a value
that cannot be parsed, a clear ValueError is raised.
"""

import os
from datetime import datetime, timezone
from typing import Union

import pandas as pd

from .models import Product

_REQUIRED = ("id", "name", "price", "cost", "stock", "min_stock")
_NUMERIC = ("price", "cost", "stock", "min_stock")


def read_products_csv(path: Union[str, "os.PathLike[str]"]) -> list[Product]:
    """
    Read a product catalogue from a CSV file.

    Parameters
    ----------
    path:
        Path to the CSV file.

    Returns
    -------
    list[Product]
        One product per CSV row, in file order. ``last_updated`` is set to
        the import time.

    Raises
    ------
    ValueError
        If required columns are missing, an id is empty or numeric parsing
        fails.
    """
    # Read everything as text so that identifiers such as "001" are kept as is,
    # and empty cells as empty strings rather than NaN.
    df = pd.read_csv(path, dtype=str, keep_default_na=False)

    # Normalize column names to lowercase (to make the check case-insensitive)
    df.columns = [str(c).lower().strip() for c in df.columns]

    # 'minstock' -> 'min_stock' if needed
    if "minstock" in df.columns and "min_stock" not in df.columns:
        df = df.rename(columns={"minstock": "min_stock"})

    missing = [c for c in _REQUIRED if c not in df.columns]
    if missing:
        raise ValueError(
            "Invalid product CSV structure. Missing column(s): "
            f"{', '.join(missing)}. Expected: {', '.join(_REQUIRED)} "
            "(optional: category, sku)."
        )

    d = df.copy()
    for col in ("id", "name"):
        d[col] = d[col].fillna("").astype(str).str.strip()
        if (d[col] == "").any():
            raise ValueError(f"Empty values in '{col}' column.")

    for col in _NUMERIC:
        d[col] = pd.to_numeric(d[col], errors="coerce")
    if d[list(_NUMERIC)].isna().any().any():
        raise ValueError(
            "Invalid numeric values in 'price'/'cost'/'stock'/'min_stock' columns."
        )
    if (d[["stock", "min_stock"]] < 0).any().any():
        raise ValueError("Negative values in 'stock'/'min_stock' columns.")

    imported_at = datetime.now(timezone.utc).isoformat(timespec="seconds")

    def _optional(row: pd.Series, col: str):
        if col not in row.index or pd.isna(row[col]):
            return None
        return str(row[col]).strip() or None

    def _quantity(value: float):
        return int(value) if float(value).is_integer() else float(value)

    products = []
    for _, row in d.iterrows():
        products.append(
            Product(
                id=row["id"],
                name=str(row["name"]).strip(),
                price=float(row["price"]),
                cost=float(row["cost"]),
                stock=_quantity(row["stock"]),
                min_stock=_quantity(row["min_stock"]),
                last_updated=imported_at,
                category=_optional(row, "category"),
                sku=_optional(row, "sku"),
            )
        )
    return products
