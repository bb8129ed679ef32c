import pytest

from shopmaster.db import DatabaseConfig, save_record
from shopmaster.defaults import PRODUCTS_KEY
from shopmaster.models import Expense, Product, Sale, SaleItem, StockOut
from shopmaster.state import ShopState
from shopmaster.views import (
    UNKNOWN_PRODUCT,
    View,
    cash_out_frame,
    daily_sales_frame,
    dashboard_frame,
    inventory_frame,
    project,
    sales_history_frame,
    stock_out_frame,
)


def sale(sale_id: str, timestamp: str, quantity: int, total: float) -> Sale:
    return Sale(
        id=sale_id,
        items=(SaleItem(product_id="p1", quantity=quantity, price=total / quantity),),
        total=total,
        timestamp=timestamp,
    )


@pytest.fixture
def state(tmp_path) -> ShopState:
    cfg = DatabaseConfig(engine="sqlite", path=tmp_path / "shop.sqlite")
    save_record(
        cfg,
        PRODUCTS_KEY,
        [
            Product(id="p1", name="Widget", price=100, cost=60, stock=50, min_stock=5).to_dict(),
            Product(id="p2", name="Gadget", price=20, cost=5, stock=1, min_stock=3).to_dict(),
        ],
    )
    return ShopState(cfg, clock=lambda: "2025-06-03T08:00:00+00:00")


def test_dashboard_frame_lists_every_metric(state):
    df = dashboard_frame(state)

    assert list(df.columns) == ["metric", "value"]
    assert list(df["metric"]) == [
        "totalRevenue",
        "totalProfit",
        "totalSales",
        "totalExpenses",
        "lowStockCount",
    ]
    values = dict(zip(df["metric"], df["value"]))
    assert values["lowStockCount"] == 1


def test_inventory_frame_flags_low_stock(state):
    df = inventory_frame(state)

    assert list(df["id"]) == ["p1", "p2"]
    assert list(df["low_stock"]) == [False, True]
    assert df.loc[df["id"] == "p2", "stock"].iloc[0] == pytest.approx(1.0)


def test_sales_history_is_most_recent_first(state):
    state.record_sale(sale("s1", "2025-06-01T10:00:00+00:00", 1, 100))
    state.record_sale(sale("s2", "2025-06-02T09:00:00+00:00", 2, 200))
    state.record_sale(sale("s3", "2025-06-01T15:00:00+00:00", 1, 100))

    df = sales_history_frame(state)

    assert list(df["id"]) == ["s2", "s3", "s1"]
    assert list(df["units"]) == [2.0, 1.0, 1.0]


def test_daily_sales_groups_by_day(state):
    state.record_sale(sale("s1", "2025-06-01T10:00:00+00:00", 1, 100))
    state.record_sale(sale("s2", "2025-06-02T09:00:00+00:00", 2, 200))
    state.record_sale(sale("s3", "2025-06-01T15:00:00+00:00", 3, 300))

    df = daily_sales_frame(state)

    assert list(df.columns) == ["date", "sales", "units", "revenue"]
    assert list(df["date"]) == ["2025-06-02", "2025-06-01"]
    assert list(df["sales"]) == [1, 2]
    assert list(df["units"]) == [2.0, 4.0]
    assert list(df["revenue"]) == [200.0, 400.0]


def test_daily_sales_empty(state):
    df = daily_sales_frame(state)

    assert df.empty
    assert list(df.columns) == ["date", "sales", "units", "revenue"]


def test_cash_out_frame_keeps_recording_order(state):
    state.add_expense(Expense(id="e1", amount=30, category="Rent", description="June"))
    state.add_expense(Expense(id="e2", amount="12.5", category="Misc"))

    df = cash_out_frame(state)

    assert list(df["id"]) == ["e1", "e2"]
    assert list(df["amount"]) == [30.0, 12.5]


def test_stock_out_frame_resolves_product_names(state):
    state.record_stock_out(StockOut(id="so1", product_id="p1", quantity=2, reason="Damaged"))
    state.record_stock_out(StockOut(id="so2", product_id="gone", quantity=1, reason="Lost"))

    df = stock_out_frame(state)

    assert list(df["product"]) == ["Widget", UNKNOWN_PRODUCT]
    assert list(df["reason"]) == ["Damaged", "Lost"]


def test_views_do_not_mutate_state(state):
    state.record_sale(sale("s1", "2025-06-01T10:00:00+00:00", 1, 100))
    before = state.snapshot()
    versions = [s.version for s in (state.products_store, state.sales_store)]

    for view in View:
        project(view, state)

    assert state.snapshot() == before
    assert [s.version for s in (state.products_store, state.sales_store)] == versions


def test_unknown_view_falls_back_to_dashboard(state):
    df = project("reports", state)

    assert list(df.columns) == ["metric", "value"]


def test_project_accepts_view_names(state):
    df = project("inventory", state)

    assert "low_stock" in df.columns
