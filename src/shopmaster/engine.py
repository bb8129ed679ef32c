# ShopMaster - Retail Point-of-Sale & Inventory manager for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Metrics engine for ShopMaster.

This module derives the dashboard metrics from a snapshot of the four
record collections (products, sales, expenses, stock-outs). It is a pure
computation layer: no I/O, no state, no side effects. The same snapshot
always produces the same result.

Two recording paths produce revenue
-----------------------------------
A sale can be recorded in two ways:

- as a formal ``Sale`` (with line items and an authoritative ``total``),
- as a ``StockOut`` whose reason is ``"Sale"`` (quantity only; the value
  comes from the referenced product's current price and cost).

Both are first-class revenue events. They never describe the same event
twice, because the mutation handlers write them to distinct collections.

Definitions
-----------
- direct sales revenue   = sum of Sale.total
- stock-out revenue      = sum over "Sale" stock-outs of quantity x price
- total revenue          = direct sales revenue + stock-out revenue
- total expenses         = sum of Expense.amount
- sales profit           = sum over sales of total - sum(items: cost x quantity)
- stock-out profit       = sum over "Sale" stock-outs of (price - cost) x quantity
- total profit           = sales profit + stock-out profit - total expenses
- transaction count      = number of sales + number of "Sale" stock-outs
- low stock count        = number of products with stock <= minStock

Every numeric field goes through ``numeric.safe_number``. References to a
product that no longer exists resolve to a zero price and a zero cost
through :class:`ProductLookup`; they are expected and never logged.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Optional

from .models import Expense, Product, Sale, StockOut
from .numeric import safe_number


@dataclass(frozen=True)
class Snapshot:
    """
    Immutable view of the four record collections at a given instant.

    Produced by ``ShopState.snapshot()`` after a mutation has fully settled.
    """

    products: tuple[Product, ...] = ()
    sales: tuple[Sale, ...] = ()
    expenses: tuple[Expense, ...] = ()
    stock_outs: tuple[StockOut, ...] = ()


@dataclass(frozen=True)
class DashboardStats:
    """
    Dashboard metrics, as consumed by the presentation layer.

    Attributes
    ----------
    total_revenue:
        Formal sales totals plus the value of "Sale" stock-outs.
    total_profit:
        Sales profit plus stock-out profit, minus expenses.
    total_sales:
        Number of sale events (formal sales + "Sale" stock-outs).
    total_expenses:
        Sum of expense amounts.
    low_stock_count:
        Number of products at or below their minimum stock.
    """

    total_revenue: float = 0.0
    total_profit: float = 0.0
    total_sales: int = 0
    total_expenses: float = 0.0
    low_stock_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Return the metrics with their external (camelCase) field names."""
        return {
            "totalRevenue": self.total_revenue,
            "totalProfit": self.total_profit,
            "totalSales": self.total_sales,
            "totalExpenses": self.total_expenses,
            "lowStockCount": self.low_stock_count,
        }


@dataclass(frozen=True)
class MetricsBreakdown:
    """Intermediate terms of the dashboard metrics."""

    direct_sales_revenue: float = 0.0
    stock_out_revenue: float = 0.0
    total_expenses: float = 0.0
    sales_profit: float = 0.0
    stock_out_profit: float = 0.0
    sales_count: int = 0
    stock_out_sales_count: int = 0
    low_stock_count: int = 0
    low_stock_ids: tuple[Any, ...] = ()

    @property
    def total_revenue(self) -> float:
        return self.direct_sales_revenue + self.stock_out_revenue

    @property
    def total_profit(self) -> float:
        return self.sales_profit + self.stock_out_profit - self.total_expenses

    @property
    def total_sales(self) -> int:
        return self.sales_count + self.stock_out_sales_count

    def to_stats(self) -> DashboardStats:
        return DashboardStats(
            total_revenue=self.total_revenue,
            total_profit=self.total_profit,
            total_sales=self.total_sales,
            total_expenses=self.total_expenses,
            low_stock_count=self.low_stock_count,
        )


class ProductLookup:
    """
    Lookup-or-default accessor for product references.

    The first product carrying a given id wins. Ids that cannot be used as
    dictionary keys (corrupted records) never match anything.
    """

    def __init__(self, products: Iterable[Product]) -> None:
        self._by_id: dict[Any, Product] = {}
        for product in products:
            try:
                self._by_id.setdefault(product.id, product)
            except TypeError:
                continue

    def get(self, product_id: Any) -> Optional[Product]:
        """Return the product with this id, or None."""
        try:
            return self._by_id.get(product_id)
        except TypeError:
            return None

    def price(self, product_id: Any) -> float:
        """Unit price of the referenced product, 0.0 when it does not exist."""
        product = self.get(product_id)
        return safe_number(product.price) if product is not None else 0.0

    def cost(self, product_id: Any) -> float:
        """Unit cost of the referenced product, 0.0 when it does not exist."""
        product = self.get(product_id)
        return safe_number(product.cost) if product is not None else 0.0


def is_low_stock(product: Product) -> bool:
    """A product is low on stock when stock <= minStock (boundary inclusive)."""
    return safe_number(product.stock) <= safe_number(product.min_stock)


def cost_of_goods(sale: Sale, lookup: ProductLookup) -> float:
    """Sum of (product cost x quantity) over the sale's line items."""
    return sum(
        (lookup.cost(item.product_id) * safe_number(item.quantity) for item in sale.items),
        0.0,
    )


def compute_breakdown(snapshot: Snapshot) -> MetricsBreakdown:
    """
    Compute every metric term from a snapshot.

    Parameters
    ----------
    snapshot:
        Settled collections to aggregate.

    Returns
    -------
    MetricsBreakdown
        The individual terms; use :meth:`MetricsBreakdown.to_stats` for the
        dashboard view.
    """
    lookup = ProductLookup(snapshot.products)

    # 1) Formal sales: authoritative totals, items only drive the cost.
    direct_sales_revenue = 0.0
    sales_profit = 0.0
    for sale in snapshot.sales:
        total = safe_number(sale.total)
        direct_sales_revenue += total
        sales_profit += total - cost_of_goods(sale, lookup)

    # 2) Sales recorded as stock-outs: valued at the product's current price.
    stock_out_revenue = 0.0
    stock_out_profit = 0.0
    stock_out_sales_count = 0
    for record in snapshot.stock_outs:
        if not record.is_sale:
            continue
        stock_out_sales_count += 1

        product = lookup.get(record.product_id)
        if product is None:
            continue

        quantity = safe_number(record.quantity)
        price = safe_number(product.price)
        cost = safe_number(product.cost)
        stock_out_revenue += quantity * price
        stock_out_profit += (price - cost) * quantity

    # 3) Expenses and stock alerts.
    total_expenses = sum(
        (safe_number(expense.amount) for expense in snapshot.expenses), 0.0
    )
    low_stock_ids = tuple(p.id for p in snapshot.products if is_low_stock(p))

    return MetricsBreakdown(
        direct_sales_revenue=direct_sales_revenue,
        stock_out_revenue=stock_out_revenue,
        total_expenses=total_expenses,
        sales_profit=sales_profit,
        stock_out_profit=stock_out_profit,
        sales_count=len(snapshot.sales),
        stock_out_sales_count=stock_out_sales_count,
        low_stock_count=len(low_stock_ids),
        low_stock_ids=low_stock_ids,
    )


def compute_dashboard_stats(snapshot: Snapshot) -> DashboardStats:
    """Compute the dashboard metrics from a snapshot."""
    return compute_breakdown(snapshot).to_stats()
