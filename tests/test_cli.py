from pathlib import Path

import pytest

from shopmaster import __version__
from shopmaster.cli import main
from shopmaster.config import load_app_config
from shopmaster.state import ShopState


@pytest.fixture
def config_path(tmp_path) -> Path:
    path = tmp_path / "shopmaster_config.toml"
    path.write_text(
        '[database]\nengine = "sqlite"\npath = "db/shop.sqlite"\n\n'
        '[logging]\nlevel = "WARNING"\n\n'
        '[display]\nmode = "table"\noutput_dir = "out"\n',
        encoding="utf-8",
    )
    return path


def run(config_path: Path, *args: str) -> None:
    main(["--config", str(config_path), *args])


def open_state(config_path: Path) -> ShopState:
    return ShopState(load_app_config(str(config_path)).database)


def test_version(capsys):
    main(["--version"])

    assert __version__ in capsys.readouterr().out


def test_stats_on_first_start(config_path, capsys):
    run(config_path, "stats")

    out = capsys.readouterr().out
    assert "total revenue   : 0.00" in out
    assert "low stock items : 1" in out


def test_stock_out_with_sale_reason_counts_as_sale(config_path, capsys):
    run(config_path, "stock-out", "p-1001", "3", "--reason", "Sale")
    run(config_path, "stats")

    out = capsys.readouterr().out
    assert "Stock is now 37" in out
    assert "total revenue   : 7350.00" in out
    assert "total profit    : 1050.00" in out
    assert "total sales     : 1" in out


def test_sale_uses_catalogue_prices(config_path, capsys):
    run(config_path, "sale", "--item", "p-1001:2", "--item", "p-1002:1")

    assert "total 5520.00" in capsys.readouterr().out
    state = open_state(config_path)
    assert state.find_product("p-1001").stock == 38
    assert state.find_product("p-1002").stock == 59
    assert state.sales[0].items[0].price == pytest.approx(2450.0)


def test_sale_rejects_malformed_item(config_path):
    with pytest.raises(SystemExit, match="PRODUCT_ID:QUANTITY"):
        run(config_path, "sale", "--item", "p-1001")


def test_product_lifecycle(config_path, capsys):
    run(
        config_path,
        "product", "add", "--id", "p-9", "--name", "Sugar 1kg",
        "--price", "300", "--cost", "250", "--stock", "4", "--min-stock", "5",
    )
    run(config_path, "product", "update", "p-9", "--price", "320")
    run(config_path, "view", "inventory")

    out = capsys.readouterr().out
    assert "Sugar 1kg" in out
    state = open_state(config_path)
    assert state.products[0].id == "p-9"
    assert state.products[0].price == pytest.approx(320.0)
    assert state.stats.low_stock_count == 2

    run(config_path, "product", "delete", "p-9")
    assert open_state(config_path).find_product("p-9") is None


def test_update_unknown_product_fails(config_path):
    with pytest.raises(SystemExit, match="not found"):
        run(config_path, "product", "update", "nope", "--price", "1")


def test_expense_and_return_policy(config_path, capsys):
    run(config_path, "expense", "--amount", "1500", "--category", "Rent")
    run(config_path, "return-policy", "--enable", "--content", "No returns.")

    state = open_state(config_path)
    assert state.stats.total_expenses == pytest.approx(1500.0)
    assert state.settings.return_policy.enabled is True
    assert state.settings.return_policy.content == "No returns."

    run(config_path, "return-policy", "--disable")
    policy = open_state(config_path).settings.return_policy
    assert policy.enabled is False
    assert policy.content == "No returns."


def test_view_csv_export(config_path, tmp_path, capsys):
    run(config_path, "sale", "--item", "p-1004:1")
    run(config_path, "view", "daily-sales", "--display-mode", "csv")

    files = list((tmp_path / "out").glob("daily_sales_*.csv"))
    assert len(files) == 1
    assert "revenue" in files[0].read_text(encoding="utf-8")
    assert "Wrote" in capsys.readouterr().out


def test_import_adds_and_updates(config_path, tmp_path, capsys):
    csv_path = tmp_path / "catalogue.csv"
    csv_path.write_text(
        "id,name,price,cost,stock,min_stock\n"
        "p-1001,Basmati Rice 5kg,2500,2100,50,10\n"
        "p-2000,Salt 1kg,90,60,100,20\n",
        encoding="utf-8",
    )

    run(config_path, "import", str(csv_path))

    assert "1 added, 1 updated" in capsys.readouterr().out
    state = open_state(config_path)
    assert state.find_product("p-1001").price == pytest.approx(2500.0)
    assert state.products[0].id == "p-2000"


def test_import_missing_file_fails(config_path, tmp_path):
    with pytest.raises(SystemExit, match="not found"):
        run(config_path, "import", str(tmp_path / "missing.csv"))


def test_reset_restores_defaults(config_path, capsys):
    run(config_path, "expense", "--amount", "10")
    run(config_path, "reset")

    assert "Deleted" in capsys.readouterr().out
    state = open_state(config_path)
    assert state.expenses == ()
    assert len(state.products) == 4


@pytest.mark.parametrize(
    "args",
    [
        ("product", "add", "--id", "neg", "--name", "X", "--price", "1", "--cost", "1", "--stock=-5"),
        ("product", "add", "--name", "X", "--price", "1", "--cost", "1", "--min-stock=-1"),
        ("product", "update", "p-1001", "--stock=-7"),
        ("stock-out", "p-1001", "0", "--reason", "Lost"),
        ("stock-out", "p-1001", "-3", "--reason", "Lost"),
    ],
)
def test_negative_or_zero_quantities_are_rejected(config_path, args):
    with pytest.raises(SystemExit):
        run(config_path, *args)

    state = open_state(config_path)
    assert state.find_product("neg") is None
    assert state.find_product("p-1001").stock == 40
    assert state.stock_outs == ()


def test_sale_rejects_negative_quantity(config_path):
    with pytest.raises(SystemExit, match="Invalid quantity"):
        run(config_path, "sale", "--item", "p-1001:-2")

    assert open_state(config_path).sales == ()
