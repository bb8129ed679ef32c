# ShopMaster - Retail Point-of-Sale & Inventory manager for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Numeric coercion helpers for ShopMaster.

Stored records may come from older versions of the application, from a
manual edit of the database or from a partially failed import. Numeric
fields (price, cost, stock, quantity, total, amount, ...) are therefore
kept exactly as they were loaded, and every computation site converts them
through :func:`safe_number`.

The coercion policy is the same everywhere (engine, mutation handlers and
views):

- int / float values are used as-is,
- numeric strings (e.g. ``"12.5"``, ``" 3 "``) are parsed; Python-only
  literals with digit separators (``"1_000"``) are not numbers,
- ``None``, booleans, empty strings, non-numeric strings, containers and
  any other type become ``0.0``,
- NaN and infinite values become ``0.0``.
"""

import math
from typing import Any


def safe_number(value: Any) -> float:
    """
    Convert a raw stored value into a finite float, falling back to 0.0.

    Parameters
    ----------
    value:
        Any value read from a stored record.

    Returns
    -------
    float
        The numeric value, or 0.0 when the value is absent or not numeric.
    """
    # bool is a subclass of int but a flag is never a quantity.
    if value is None or isinstance(value, bool):
        return 0.0

    if not isinstance(value, (int, float, str)):
        return 0.0

    if isinstance(value, str):
        value = value.strip()
        # Digit separators ("1_000") are not part of a stored number.
        if "_" in value:
            return 0.0

    try:
        number = float(value)
    except (OverflowError, ValueError):
        return 0.0

    if not math.isfinite(number):
        return 0.0
    return number
