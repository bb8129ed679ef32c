# ShopMaster - Retail Point-of-Sale & Inventory manager for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
ShopMaster
----------

A Python-based point-of-sale and inventory manager for small retail shops.
The project is built around a small state-reconciliation and metrics engine
that keeps four independent record streams consistent with each other:

- products (catalogue and stock levels),
- sales (formal sale transactions),
- expenses (cash-out records),
- stock-outs (inventory leaving stock outside a formal sale, including
  sales recorded directly as a stock-out).

Main capabilities:
- durable storage of every record stream as named JSON records (SQLite),
- corruption-tolerant loading with safe defaults and seed data,
- explicit entity stores with synchronous observers (persistence, metrics),
- mutation handlers enforcing the stock floor on every decrement,
- dashboard metrics (revenue, profit, transaction count, low stock),
- tabular views for inventory, sales history, daily sales, cash-out
  and stock-out logs,
- a read-only boundary for an external insights provider.

ShopMaster separates state (stores), rules (mutation handlers),
computation (engine), configuration (TOML) and presentation (CLI), making
it easy to plug a different front-end on top of the same core.


Version: 0.2.0

Usage:
    python -m shopmaster.cli --help
"""

__all__ = ["engine", "state", "stores", "views", "db", "insights"]

__version__ = "0.2.0"
