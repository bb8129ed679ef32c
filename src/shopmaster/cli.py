# ShopMaster - Retail Point-of-Sale & Inventory manager for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for ShopMaster.

This module wires together the main building blocks of ShopMaster:

- configuration (database location, logging, display options),
- the shop state (entity stores + mutation handlers),
- the metrics engine,
- the view helpers (tabular projections).

The CLI is intentionally thin: it does not implement any business rule
itself. Every write goes through a ``ShopState`` mutation handler and every
read goes through ``ShopState.stats`` or ``views.project``.


Commands
--------

- ``stats``:
    Print the dashboard metrics.

- ``view NAME``:
    Render one view (dashboard, inventory, sales, daily-sales, cash-out,
    stock-out) as a console table and/or a CSV file, depending on the
    display mode.

- ``product add|update|delete``:
    Manage the catalogue.

- ``expense``:
    Record a cash-out.

- ``stock-out PRODUCT_ID QUANTITY --reason REASON``:
    Remove units from stock. ``--reason Sale`` records a sale.

- ``sale --item PRODUCT_ID:QUANTITY [--item ...] [--total AMOUNT]``:
    Record a formal sale. Unit prices are snapshotted from the catalogue;
    the total defaults to the sum of the lines.

- ``return-policy [--enable | --disable] [--content TEXT]``:
    Update the return policy.

- ``import CSV_PATH``:
    Import a product catalogue (new ids are added, existing ids updated).

- ``reset``:
    Delete every stored record. The next start uses the defaults again.


Configuration
-------------

By default, the CLI reads ``shopmaster_config.toml`` from the current
working directory (built-in defaults are used when it does not exist). Use
``--config PATH`` to point to another file.

Examples
--------
    python -m shopmaster.cli stats
    python -m shopmaster.cli view inventory --display-mode both
    python -m shopmaster.cli stock-out p-1001 3 --reason Damaged
    python -m shopmaster.cli sale --item p-1001:2 --item p-1002:1
"""

import argparse
import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from . import __version__
from .config import AppConfig, load_app_config
from .db import delete_record
from .defaults import ALL_KEYS
from .io import read_products_csv
from .models import (
    STOCK_OUT_REASONS,
    Expense,
    Product,
    ReturnPolicy,
    Sale,
    SaleItem,
    ShopSettings,
    StockOut,
)
from .numeric import safe_number
from .state import ShopState
from .views import View, project

LOGGER = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure console logging for the CLI process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _now_utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def _non_negative_int(raw: str) -> int:
    """argparse type for stock levels and thresholds."""
    try:
        value = int(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer: {raw!r}") from exc
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be zero or more, got {value}")
    return value


def _positive_int(raw: str) -> int:
    """argparse type for quantities removed from stock."""
    value = _non_negative_int(raw)
    if value == 0:
        raise argparse.ArgumentTypeError("must be at least 1")
    return value


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m shopmaster.cli",
        description=(
            "ShopMaster - Retail Point-of-Sale & Inventory manager for small "
            "shops. Records products, sales, expenses and stock-outs, keeps "
            "stock levels consistent and computes dashboard metrics."
        ),
    )

    # Generic options
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of shopmaster and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. "
            "If omitted, 'shopmaster_config.toml' in the current directory is "
            "used when it exists."
        ),
    )

    subparsers = ap.add_subparsers(dest="command", metavar="command")

    # ------------------------------------------------------------------
    # Read commands
    # ------------------------------------------------------------------
    subparsers.add_parser("stats", help="Print the dashboard metrics.")

    view_parser = subparsers.add_parser("view", help="Render a view of the shop.")
    view_parser.add_argument("name", choices=[v.value for v in View])
    view_parser.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=["table", "csv", "both"],
        help=(
            "Override the display.mode setting from the configuration file. "
            "'table' prints results to stdout, "
            "'csv' writes a CSV file only, "
            "'both' does both."
        ),
    )
    view_parser.add_argument(
        "--output",
        dest="output_dir",
        help="Output directory for CSV files (overrides display.output_dir).",
    )

    # ------------------------------------------------------------------
    # product add | update | delete
    # ------------------------------------------------------------------
    product_parser = subparsers.add_parser("product", help="Manage the catalogue.")
    product_sub = product_parser.add_subparsers(
        dest="product_command", metavar="product-command"
    )

    product_add = product_sub.add_parser("add", help="Add a product.")
    product_add.add_argument("--id", dest="product_id", help="Defaults to a new id.")
    product_add.add_argument("--name", required=True)
    product_add.add_argument("--price", type=float, required=True)
    product_add.add_argument("--cost", type=float, required=True)
    product_add.add_argument("--stock", type=_non_negative_int, default=0)
    product_add.add_argument(
        "--min-stock", dest="min_stock", type=_non_negative_int, default=0
    )
    product_add.add_argument("--category")
    product_add.add_argument("--sku")

    product_update = product_sub.add_parser(
        "update", help="Update fields of an existing product."
    )
    product_update.add_argument("product_id")
    product_update.add_argument("--name")
    product_update.add_argument("--price", type=float)
    product_update.add_argument("--cost", type=float)
    product_update.add_argument("--stock", type=_non_negative_int)
    product_update.add_argument(
        "--min-stock", dest="min_stock", type=_non_negative_int
    )
    product_update.add_argument("--category")
    product_update.add_argument("--sku")

    product_delete = product_sub.add_parser("delete", help="Delete a product.")
    product_delete.add_argument("product_id")

    # ------------------------------------------------------------------
    # expense / stock-out / sale / return-policy
    # ------------------------------------------------------------------
    expense_parser = subparsers.add_parser("expense", help="Record a cash-out.")
    expense_parser.add_argument("--amount", type=float, required=True)
    expense_parser.add_argument("--category", default="General")
    expense_parser.add_argument("--description", default="")

    stock_out_parser = subparsers.add_parser(
        "stock-out", help="Remove units from stock."
    )
    stock_out_parser.add_argument("product_id")
    stock_out_parser.add_argument("quantity", type=_positive_int)
    stock_out_parser.add_argument(
        "--reason",
        required=True,
        help=(
            f"Reason for the removal (known: {', '.join(STOCK_OUT_REASONS)}). "
            "'Sale' records the removal as a sale."
        ),
    )
    stock_out_parser.add_argument("--note")

    sale_parser = subparsers.add_parser("sale", help="Record a sale.")
    sale_parser.add_argument(
        "--item",
        dest="items",
        action="append",
        required=True,
        metavar="PRODUCT_ID:QUANTITY",
        help="Sale line; repeat for several lines.",
    )
    sale_parser.add_argument(
        "--total",
        type=float,
        help="Sale total. Defaults to the sum of quantity x catalogue price.",
    )

    policy_parser = subparsers.add_parser(
        "return-policy", help="Update the return policy."
    )
    toggle = policy_parser.add_mutually_exclusive_group()
    toggle.add_argument("--enable", dest="enabled", action="store_true", default=None)
    toggle.add_argument("--disable", dest="enabled", action="store_false")
    policy_parser.add_argument("--content")
    policy_parser.set_defaults(enabled=None)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------
    import_parser = subparsers.add_parser(
        "import", help="Import a product catalogue from CSV."
    )
    import_parser.add_argument("csv_path", metavar="CSV_PATH")

    subparsers.add_parser(
        "reset", help="Delete all stored records (defaults are used again)."
    )

    return ap


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _handle_stats(args: argparse.Namespace, state: ShopState) -> None:
    stats = state.stats
    print("Dashboard")
    print(f"  total revenue   : {stats.total_revenue:.2f}")
    print(f"  total profit    : {stats.total_profit:.2f}")
    print(f"  total sales     : {stats.total_sales}")
    print(f"  total expenses  : {stats.total_expenses:.2f}")
    print(f"  low stock items : {stats.low_stock_count}")


def _handle_view(args: argparse.Namespace, state: ShopState, config: AppConfig) -> None:
    df = project(args.name, state)

    display_mode = args.display_mode or config.display_mode

    if display_mode in {"table", "both"}:
        print(f"=== {args.name} ===")
        if df.empty:
            print("No records.")
        else:
            print(df.to_string(index=False))

    if display_mode in {"csv", "both"}:
        output_dir = Path(args.output_dir) if args.output_dir else config.output_dir
        output_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
        path = output_dir / f"{args.name.replace('-', '_')}_{timestamp}.csv"
        df.to_csv(path, index=False)
        print(f"Wrote {path} ({len(df)} rows)")


def _handle_product(args: argparse.Namespace, state: ShopState) -> None:
    subcmd = getattr(args, "product_command", None)

    if subcmd == "add":
        product = Product(
            id=args.product_id or _new_id("p"),
            name=args.name,
            price=args.price,
            cost=args.cost,
            stock=args.stock,
            min_stock=args.min_stock,
            last_updated=_now_utc_iso(),
            category=args.category,
            sku=args.sku,
        )
        if state.find_product(product.id) is not None:
            raise SystemExit(f"A product with id {product.id!r} already exists.")
        state.add_product(product)
        print(f"Added product {product.id} ({product.name}).")

    elif subcmd == "update":
        existing = state.find_product(args.product_id)
        if existing is None:
            raise SystemExit(f"Product {args.product_id!r} not found.")

        changes = {
            field: getattr(args, field)
            for field in ("name", "price", "cost", "stock", "min_stock", "category", "sku")
            if getattr(args, field) is not None
        }
        state.update_product(replace(existing, last_updated=_now_utc_iso(), **changes))
        print(f"Updated product {existing.id}.")

    elif subcmd == "delete":
        if state.find_product(args.product_id) is None:
            raise SystemExit(f"Product {args.product_id!r} not found.")
        state.delete_product(args.product_id)
        print(f"Deleted product {args.product_id}.")

    else:
        print(
            "No product subcommand specified. "
            "Available subcommands are: 'add', 'update', 'delete'."
        )


def _handle_expense(args: argparse.Namespace, state: ShopState) -> None:
    expense = Expense(
        id=_new_id("e"),
        amount=args.amount,
        category=args.category,
        description=args.description,
        timestamp=_now_utc_iso(),
    )
    state.add_expense(expense)
    print(f"Recorded expense {expense.id}: {args.amount:.2f} ({args.category}).")


def _handle_stock_out(args: argparse.Namespace, state: ShopState) -> None:
    product = state.find_product(args.product_id)
    if product is None:
        print(f"Warning: product {args.product_id!r} not found; recording anyway.")

    record = StockOut(
        id=_new_id("so"),
        product_id=args.product_id,
        quantity=args.quantity,
        reason=args.reason,
        timestamp=_now_utc_iso(),
        note=args.note,
    )
    state.record_stock_out(record)

    updated = state.find_product(args.product_id)
    if updated is not None:
        print(
            f"Recorded stock-out {record.id}: {args.quantity} x {updated.name} "
            f"({args.reason}). Stock is now {updated.stock}."
        )
    else:
        print(f"Recorded stock-out {record.id}.")


def _parse_item(raw: str) -> tuple[str, int]:
    product_id, sep, quantity = raw.rpartition(":")
    if not sep or not product_id:
        raise SystemExit(f"Invalid --item {raw!r}. Expected PRODUCT_ID:QUANTITY.")
    try:
        return product_id, _positive_int(quantity)
    except argparse.ArgumentTypeError as exc:
        raise SystemExit(f"Invalid quantity in --item {raw!r}: {exc}.") from exc


def _handle_sale(args: argparse.Namespace, state: ShopState) -> None:
    items = []
    for raw in args.items:
        product_id, quantity = _parse_item(raw)
        product = state.find_product(product_id)
        if product is None:
            print(f"Warning: product {product_id!r} not found; price set to 0.")
        price = safe_number(product.price) if product is not None else 0.0
        items.append(SaleItem(product_id=product_id, quantity=quantity, price=price))

    total = args.total
    if total is None:
        total = sum((safe_number(i.price) * i.quantity for i in items), 0.0)

    sale = Sale(id=_new_id("s"), items=tuple(items), total=total, timestamp=_now_utc_iso())
    state.record_sale(sale)
    print(f"Recorded sale {sale.id}: {len(items)} line(s), total {total:.2f}.")


def _handle_return_policy(args: argparse.Namespace, state: ShopState) -> None:
    current = state.settings.return_policy
    policy = ReturnPolicy(
        enabled=current.enabled if args.enabled is None else args.enabled,
        content=current.content if args.content is None else args.content,
        last_updated=_now_utc_iso(),
        extra=current.extra,
    )
    state.update_settings(ShopSettings(return_policy=policy, extra=state.settings.extra))
    status = "enabled" if policy.is_enabled else "disabled"
    print(f"Return policy {status}.")


def _handle_import(args: argparse.Namespace, state: ShopState) -> None:
    csv_path = Path(args.csv_path)
    if not csv_path.is_file():
        raise SystemExit(f"CSV file for import not found: {csv_path}")

    print(f"Importing products from {csv_path}...")
    try:
        products = read_products_csv(csv_path)
    except ValueError as exc:
        raise SystemExit(f"Import failed: {exc}") from exc

    added = updated = 0
    for product in products:
        if state.find_product(product.id) is None:
            state.add_product(product)
            added += 1
        else:
            state.update_product(product)
            updated += 1
    print(f"Imported {len(products)} products: {added} added, {updated} updated.")


def _handle_reset(args: argparse.Namespace, config: AppConfig) -> None:
    deleted = sum(1 for key in ALL_KEYS if delete_record(config.database, key))
    print(f"Deleted {deleted} stored record(s).")


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the ShopMaster CLI.

    This function parses command-line arguments, loads the configuration,
    configures logging, opens the shop state (loading every store once) and
    dispatches to the requested command.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"shopmaster version {__version__}")
        return

    config = load_app_config(args.config_path)
    configure_logging(config.log_level)

    command = getattr(args, "command", None)
    if command is None:
        parser.print_help()
        return

    # Maintenance command working on raw records: no state is loaded.
    if command == "reset":
        _handle_reset(args, config)
        return

    state = ShopState(config.database)
    LOGGER.debug("Opened shop state from %s", config.database.path)

    if command == "stats":
        _handle_stats(args, state)
    elif command == "view":
        _handle_view(args, state, config)
    elif command == "product":
        _handle_product(args, state)
    elif command == "expense":
        _handle_expense(args, state)
    elif command == "stock-out":
        _handle_stock_out(args, state)
    elif command == "sale":
        _handle_sale(args, state)
    elif command == "return-policy":
        _handle_return_policy(args, state)
    elif command == "import":
        _handle_import(args, state)


if __name__ == "__main__":
    main()
