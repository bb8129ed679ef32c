# ShopMaster - Retail Point-of-Sale & Inventory manager for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for ShopMaster.

This module turns the current shop state into read-only tabular
projections (pandas DataFrames) ready for display or CSV export. It never
writes to the state.

The available views are:

- dashboard:   one row per dashboard metric,
- inventory:   products with a low-stock flag,
- sales:       sales history, most recent first,
- daily-sales: sales grouped by calendar day,
- cash-out:    expenses,
- stock-out:   stock-out log, with product names resolved when possible.

AI insights are not a tabular view: they are produced by an external
provider through ``insights.request_insights``.
"""

from enum import Enum

import pandas as pd

from .engine import ProductLookup, is_low_stock
from .numeric import safe_number
from .state import ShopState

UNKNOWN_PRODUCT = "Unknown product"


class View(str, Enum):
    """Views selectable by the presentation layer."""

    DASHBOARD = "dashboard"
    INVENTORY = "inventory"
    SALES = "sales"
    DAILY_SALES = "daily-sales"
    CASH_OUT = "cash-out"
    STOCK_OUT = "stock-out"


def dashboard_frame(state: ShopState) -> pd.DataFrame:
    """Return the dashboard metrics as a two-column (metric, value) table."""
    stats = state.stats.to_dict()
    return pd.DataFrame(
        {"metric": list(stats.keys()), "value": list(stats.values())},
        columns=["metric", "value"],
    )


def inventory_frame(state: ShopState) -> pd.DataFrame:
    """Return one row per product, in catalogue order."""
    rows = [
        {
            "id": p.id,
            "name": p.name,
            "category": p.category or "",
            "price": safe_number(p.price),
            "cost": safe_number(p.cost),
            "stock": safe_number(p.stock),
            "min_stock": safe_number(p.min_stock),
            "low_stock": is_low_stock(p),
            "last_updated": p.last_updated or "",
        }
        for p in state.products
    ]
    columns = [
        "id",
        "name",
        "category",
        "price",
        "cost",
        "stock",
        "min_stock",
        "low_stock",
        "last_updated",
    ]
    return pd.DataFrame(rows, columns=columns)


def sales_history_frame(state: ShopState) -> pd.DataFrame:
    """Return one row per sale, most recent first."""
    rows = [
        {
            "id": s.id,
            "timestamp": s.timestamp or "",
            "items": len(s.items),
            "units": sum((safe_number(i.quantity) for i in s.items), 0.0),
            "total": safe_number(s.total),
        }
        for s in state.sales
    ]
    df = pd.DataFrame(rows, columns=["id", "timestamp", "items", "units", "total"])
    # Stable sort keeps insertion order for equal (or missing) timestamps.
    df = df.iloc[::-1].sort_values("timestamp", ascending=False, kind="stable")
    return df.reset_index(drop=True)


def daily_sales_frame(state: ShopState) -> pd.DataFrame:
    """
    Aggregate sales by calendar day.

    Columns: date, sales (count), units, revenue. Sales whose timestamp
    cannot be parsed are grouped under an empty date.
    """
    history = sales_history_frame(state)
    columns = ["date", "sales", "units", "revenue"]
    if history.empty:
        return pd.DataFrame(columns=columns)

    parsed = pd.to_datetime(
        history["timestamp"], errors="coerce", utc=True, format="ISO8601"
    )
    history["date"] = parsed.dt.strftime("%Y-%m-%d").fillna("")

    out = (
        history.groupby("date", as_index=False)
        .agg(sales=("id", "size"), units=("units", "sum"), revenue=("total", "sum"))
        .sort_values("date", ascending=False, kind="stable")
        .reset_index(drop=True)
    )
    return out[columns]


def cash_out_frame(state: ShopState) -> pd.DataFrame:
    """Return one row per expense, in recording order."""
    rows = [
        {
            "id": e.id,
            "timestamp": e.timestamp or "",
            "category": e.category,
            "description": e.description,
            "amount": safe_number(e.amount),
        }
        for e in state.expenses
    ]
    return pd.DataFrame(
        rows, columns=["id", "timestamp", "category", "description", "amount"]
    )


def stock_out_frame(state: ShopState) -> pd.DataFrame:
    """
    Return the stock-out log, in recording order.

    The product name is resolved from the current catalogue; stock-outs of a
    deleted product are shown as ``UNKNOWN_PRODUCT``.
    """
    lookup = ProductLookup(state.products)
    rows = []
    for record in state.stock_outs:
        product = lookup.get(record.product_id)
        rows.append(
            {
                "id": record.id,
                "timestamp": record.timestamp or "",
                "product_id": record.product_id,
                "product": product.name if product is not None else UNKNOWN_PRODUCT,
                "quantity": safe_number(record.quantity),
                "reason": record.reason,
            }
        )
    return pd.DataFrame(
        rows,
        columns=["id", "timestamp", "product_id", "product", "quantity", "reason"],
    )


_PROJECTIONS = {
    View.DASHBOARD: dashboard_frame,
    View.INVENTORY: inventory_frame,
    View.SALES: sales_history_frame,
    View.DAILY_SALES: daily_sales_frame,
    View.CASH_OUT: cash_out_frame,
    View.STOCK_OUT: stock_out_frame,
}


def project(view: View | str, state: ShopState) -> pd.DataFrame:
    """
    Return the projection of ``state`` for ``view``.

    Unknown view names fall back to the dashboard.
    """
    try:
        selected = View(view)
    except ValueError:
        selected = View.DASHBOARD
    return _PROJECTIONS[selected](state)
