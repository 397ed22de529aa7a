# HomeFin - Personal & Family Finance Dashboard client
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for HomeFin.

This module wires together the main building blocks of HomeFin:

- configuration (backend URL, token file, report and display options),
- the session and its persisted tokens,
- the async API client and the resource services,
- the reports and the budget execution engine,
- view helpers (tabular rendering).

The CLI is intentionally thin: it does not implement any financial logic
itself. It parses arguments, runs the requested command on a single event
loop (``asyncio.run``) and prints the resulting tables.


Commands
--------

    homefin login --username U [--password P]
    homefin logout
    homefin profile

    homefin wallets list [--balances]
    homefin wallets show WALLET_ID
    homefin projects list
    homefin categories list | tree | delete ID

    homefin receipts list [filters]
    homefin expenditures list [filters] [--in-budget | --not-in-budget]
    homefin transfers list
    homefin budgets list [--type income|expense]
    homefin auto-payments list [--kind transfer|expense]

    homefin reports budget|income-expense|categories|wallets|dashboard
        [--period mtd|last-month|ytd|year | --from-date D --to-date D]
        [--granularity daily|monthly]

Listing filters: ``--search``, ``--from-date``, ``--to-date``, ``--wallet``,
``--category``, ``--min-amount``, ``--max-amount``.


Configuration
-------------

By default, the CLI reads ``homefin_config.toml`` in the current working
directory (defaults apply when it does not exist). Use ``--config PATH`` to
point to another file. ``HOMEFIN_API_URL`` overrides the backend URL.

Tokens obtained with ``login`` are stored in the configured token file, so
later invocations reuse (and refresh) them until ``logout``.


Errors and logging
------------------

Every HomeFin error is reported as a one-line message on stderr and the
process exits with status 1. ``--verbose`` enables debug logging (one line
per HTTP request, token refreshes, skipped wallets).
"""

import argparse
import asyncio
import getpass
import logging
import sys
from datetime import date
from typing import Optional

import pandas as pd

from . import __version__
from .api import ApiClient
from .auth import AuthService
from .config import AppConfig, load_app_config
from .errors import AuthenticationError, HomeFinError
from .filters import OperationFilter, apply_filter, operations_for_wallet, sort_by_date
from .periods import PERIOD_CHOICES, Period, determine_period_from_args
from .reports import (
    fetch_wallet_balances,
    load_budget_execution,
    load_category_expenses,
    load_dashboard_summary,
    load_income_expense,
    load_wallet_balances,
)
from .services import Services
from .session import Session, TokenStore
from .views import (
    budget_execution_to_dataframe,
    category_expenses_to_dataframe,
    hierarchy_to_dataframe,
    income_expense_to_dataframe,
    records_to_dataframe,
    wallet_balances_to_dataframe,
)

logger = logging.getLogger(__name__)

REPORT_CHOICES = ("budget", "income-expense", "categories", "wallets", "dashboard")

OPERATION_COLUMNS = [
    "id",
    "date",
    "amount",
    "wallet",
    "cash_flow_item",
    "description",
]


def _add_period_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--period",
        choices=PERIOD_CHOICES,
        help=(
            "Named reporting period. If omitted, the custom dates or the "
            "default period from the configuration are used."
        ),
    )
    parser.add_argument(
        "--from-date",
        dest="from_date",
        help="Custom start date (YYYY-MM-DD).",
    )
    parser.add_argument(
        "--to-date",
        dest="to_date",
        help="Custom end date (YYYY-MM-DD).",
    )


def _add_operation_filters(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--search",
        help="Case-insensitive text matched on description, wallet and category.",
    )
    parser.add_argument(
        "--from-date",
        dest="from_date",
        help="Only operations on or after this date (YYYY-MM-DD).",
    )
    parser.add_argument(
        "--to-date",
        dest="to_date",
        help="Only operations on or before this date (YYYY-MM-DD).",
    )
    parser.add_argument("--wallet", help="Filter by wallet id.")
    parser.add_argument(
        "--category", dest="cash_flow_item", help="Filter by cash-flow item id."
    )
    parser.add_argument(
        "--min-amount", dest="min_amount", type=float, help="Minimum amount."
    )
    parser.add_argument(
        "--max-amount", dest="max_amount", type=float, help="Maximum amount."
    )
    parser.add_argument(
        "--limit", type=int, help="Maximum number of rows to display."
    )


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="homefin",
        description=(
            "HomeFin - Personal & Family Finance Dashboard client. "
            "Lists wallets, categories and operations stored on a HomeFin "
            "backend and renders budget and cash-flow reports."
        ),
    )

    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of homefin and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. "
            "If omitted, 'homefin_config.toml' in the current directory is used."
        ),
    )
    ap.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging.",
    )

    subparsers = ap.add_subparsers(dest="command", metavar="command")

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    login = subparsers.add_parser("login", help="Log in and store the tokens.")
    login.add_argument("--username", required=True)
    login.add_argument(
        "--password", help="Password (prompted for when omitted)."
    )
    subparsers.add_parser("logout", help="Log out and forget the tokens.")
    subparsers.add_parser("profile", help="Show the profile of the current user.")

    # ------------------------------------------------------------------
    # Reference data
    # ------------------------------------------------------------------
    wallets = subparsers.add_parser("wallets", help="Wallets.")
    wallets_sub = wallets.add_subparsers(dest="action", metavar="action")
    wallets_list = wallets_sub.add_parser("list", help="List wallets.")
    wallets_list.add_argument(
        "--balances", action="store_true", help="Also fetch each wallet's balance."
    )
    wallets_show = wallets_sub.add_parser(
        "show", help="Show a wallet with its balance and latest operations."
    )
    wallets_show.add_argument("wallet_id")

    projects = subparsers.add_parser("projects", help="Projects.")
    projects_sub = projects.add_subparsers(dest="action", metavar="action")
    projects_sub.add_parser("list", help="List projects.")

    categories = subparsers.add_parser("categories", help="Cash-flow items.")
    categories_sub = categories.add_subparsers(dest="action", metavar="action")
    categories_sub.add_parser("list", help="List cash-flow items.")
    categories_sub.add_parser("tree", help="Show the cash-flow item hierarchy.")
    categories_delete = categories_sub.add_parser(
        "delete", help="Delete a cash-flow item."
    )
    categories_delete.add_argument("item_id")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    receipts = subparsers.add_parser("receipts", help="Receipts (income).")
    receipts_sub = receipts.add_subparsers(dest="action", metavar="action")
    _add_operation_filters(receipts_sub.add_parser("list", help="List receipts."))

    expenditures = subparsers.add_parser("expenditures", help="Expenditures.")
    expenditures_sub = expenditures.add_subparsers(dest="action", metavar="action")
    expenditures_list = expenditures_sub.add_parser("list", help="List expenditures.")
    _add_operation_filters(expenditures_list)
    budget_flag = expenditures_list.add_mutually_exclusive_group()
    budget_flag.add_argument(
        "--in-budget",
        dest="include_in_budget",
        action="store_const",
        const=True,
        help="Only expenditures included in the budget.",
    )
    budget_flag.add_argument(
        "--not-in-budget",
        dest="include_in_budget",
        action="store_const",
        const=False,
        help="Only expenditures excluded from the budget.",
    )

    transfers = subparsers.add_parser("transfers", help="Transfers between wallets.")
    transfers_sub = transfers.add_subparsers(dest="action", metavar="action")
    transfers_sub.add_parser("list", help="List transfers.")

    budgets = subparsers.add_parser("budgets", help="Budgets.")
    budgets_sub = budgets.add_subparsers(dest="action", metavar="action")
    budgets_list = budgets_sub.add_parser("list", help="List budgets.")
    budgets_list.add_argument(
        "--type", dest="budget_type", choices=["income", "expense"]
    )

    auto_payments = subparsers.add_parser("auto-payments", help="Auto-payments.")
    auto_payments_sub = auto_payments.add_subparsers(dest="action", metavar="action")
    auto_payments_list = auto_payments_sub.add_parser(
        "list", help="List auto-payments."
    )
    auto_payments_list.add_argument("--kind", choices=["transfer", "expense"])

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------
    reports = subparsers.add_parser("reports", help="Dashboard reports.")
    reports.add_argument("report", choices=REPORT_CHOICES)
    _add_period_arguments(reports)
    reports.add_argument(
        "--granularity",
        choices=["daily", "monthly"],
        default="monthly",
        help="Bucket size of the income-expense report.",
    )

    return ap


def _parse_optional_date(value: Optional[str]) -> Optional[date]:
    """Parse an optional CLI date argument (YYYY-MM-DD)."""
    if value is None:
        return None

    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        msg = f"Invalid date format: {value!r}. Expected YYYY-MM-DD."
        raise SystemExit(msg) from exc


def _report_period(args, config: AppConfig) -> Period:
    """Resolve the report period, exiting with a message on bad bounds."""
    _parse_optional_date(args.from_date)
    _parse_optional_date(args.to_date)
    try:
        return determine_period_from_args(args, config.reports.default_period)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc


def _money(amount: float, config: AppConfig) -> str:
    return f"{amount:,.{config.display.decimals}f} {config.display.currency}"


def _print_table(df, empty_message: str) -> None:
    if df.empty:
        print(empty_message)
        return
    print()
    print(df.to_string(index=False))


async def _name_lookups(services: Services) -> tuple[dict, dict]:
    wallets, categories = await asyncio.gather(
        services.wallets.list(), services.cash_flow_items.list()
    )
    wallet_names = {w.id: w.name for w in wallets}
    category_names = {c.id: c.name for c in categories if c.name}
    return wallet_names, category_names


# ----------------------------------------------------------------------
# Handlers
# ----------------------------------------------------------------------


async def _handle_login(args, config: AppConfig, client: ApiClient) -> None:
    password = args.password or getpass.getpass("Password: ")
    auth = AuthService(client)
    await auth.login(args.username, password)
    profile = await auth.get_profile()
    print(f"Logged in as {profile.display_name or args.username}.")


async def _handle_logout(args, config: AppConfig, client: ApiClient) -> None:
    await AuthService(client).logout()
    print("Logged out.")


async def _handle_profile(args, config: AppConfig, client: ApiClient) -> None:
    profile = await AuthService(client).get_profile()
    print(f"  id:         {profile.id}")
    print(f"  username:   {profile.username}")
    print(f"  email:      {profile.email}")
    print(f"  name:       {profile.display_name}")
    print(f"  company:    {profile.is_company}")


async def _handle_wallets(args, config: AppConfig, client: ApiClient) -> None:
    services = Services.for_client(client)

    if args.action == "show":
        wallet, balance, receipts, expenditures = await asyncio.gather(
            services.wallets.get(args.wallet_id),
            services.wallets.get_balance(args.wallet_id),
            services.receipts.list(),
            services.expenditures.list(),
        )
        print(f"Wallet: {wallet.name} ({wallet.code or '-'})")
        print(f"Balance: {_money(balance.balance, config)}")
        history = operations_for_wallet(wallet.id, receipts, expenditures)
        rows = [
            {
                "date": op.date,
                "kind": op.kind,
                "amount": round(op.signed_amount, config.display.decimals),
                "description": op.operation.description or "",
            }
            for op in history
        ]
        _print_table(pd.DataFrame(rows), "No operations for this wallet.")
        return

    wallets = await services.wallets.list()
    columns = ["id", "name", "code", "hidden"]
    df = records_to_dataframe(wallets, columns, config.display.decimals)
    if args.balances and not df.empty:
        balances = await fetch_wallet_balances(services, wallets)
        df["balance"] = [
            round(balances[w.id], config.display.decimals) if w.id in balances else None
            for w in wallets
        ]
    _print_table(df, "No wallets found.")


async def _handle_projects(args, config: AppConfig, client: ApiClient) -> None:
    projects = await Services.for_client(client).projects.list()
    df = records_to_dataframe(projects, ["id", "name", "code"])
    _print_table(df, "No projects found.")


async def _handle_categories(args, config: AppConfig, client: ApiClient) -> None:
    service = Services.for_client(client).cash_flow_items

    if args.action == "tree":
        forest = await service.get_hierarchy(config.reports.untitled_label)
        _print_table(hierarchy_to_dataframe(forest), "No cash-flow items found.")
        return

    if args.action == "delete":
        await service.delete(args.item_id)
        print(f"Cash-flow item {args.item_id} deleted.")
        return

    items = await service.list()
    df = records_to_dataframe(
        items, ["id", "name", "code", "parent", "include_in_budget"]
    )
    _print_table(df, "No cash-flow items found.")


async def _handle_operations(args, config: AppConfig, client: ApiClient) -> None:
    """List receipts or expenditures with the client-side filters."""
    services = Services.for_client(client)

    if args.command == "receipts":
        fetch = services.receipts.list()
        include_in_budget = None
    else:
        include_in_budget = args.include_in_budget
        fetch = services.expenditures.list(include_in_budget=include_in_budget)

    records, (wallet_names, category_names) = await asyncio.gather(
        fetch, _name_lookups(services)
    )

    criteria = OperationFilter(
        search=args.search,
        date_from=_parse_optional_date(args.from_date),
        date_to=_parse_optional_date(args.to_date),
        wallet=args.wallet,
        cash_flow_item=args.cash_flow_item,
        min_amount=args.min_amount,
        max_amount=args.max_amount,
        include_in_budget=include_in_budget,
    )
    filtered = apply_filter(records, criteria, wallet_names, category_names)
    ordered = sort_by_date(filtered, descending=True, limit=args.limit)

    columns = list(OPERATION_COLUMNS)
    if args.command == "expenditures":
        columns.append("include_in_budget")
    df = records_to_dataframe(
        ordered,
        columns,
        config.display.decimals,
        wallet_names=wallet_names,
        category_names=category_names,
    )
    _print_table(df, f"No {args.command} found for the given criteria.")

    if ordered:
        total = sum(r.amount for r in filtered)
        print()
        print(
            f"Total {args.command}: {len(filtered)} | "
            f"Total amount: {_money(total, config)}"
        )


async def _handle_transfers(args, config: AppConfig, client: ApiClient) -> None:
    services = Services.for_client(client)
    transfers, (wallet_names, _) = await asyncio.gather(
        services.transfers.list(), _name_lookups(services)
    )
    df = records_to_dataframe(
        sort_by_date(transfers),
        ["id", "date", "amount", "wallet_from", "wallet_to", "description"],
        config.display.decimals,
        wallet_names=wallet_names,
    )
    _print_table(df, "No transfers found.")


async def _handle_budgets(args, config: AppConfig, client: ApiClient) -> None:
    services = Services.for_client(client)
    budgets, (_, category_names) = await asyncio.gather(
        services.budgets.list(type=args.budget_type), _name_lookups(services)
    )
    df = records_to_dataframe(
        sort_by_date(budgets),
        ["id", "date", "type", "amount", "cash_flow_item", "description"],
        config.display.decimals,
        category_names=category_names,
    )
    _print_table(df, "No budgets found.")


async def _handle_auto_payments(args, config: AppConfig, client: ApiClient) -> None:
    services = Services.for_client(client)
    is_transfer = None if args.kind is None else args.kind == "transfer"
    auto_payments, (wallet_names, category_names) = await asyncio.gather(
        services.auto_payments.list(is_transfer=is_transfer), _name_lookups(services)
    )
    df = records_to_dataframe(
        auto_payments,
        [
            "id",
            "next_date",
            "period_days",
            "amount",
            "is_transfer",
            "wallet_from",
            "wallet_to",
            "cash_flow_item",
            "description",
        ],
        config.display.decimals,
        wallet_names=wallet_names,
        category_names=category_names,
    )
    _print_table(df, "No auto-payments found.")


async def _handle_reports(args, config: AppConfig, client: ApiClient) -> None:
    services = Services.for_client(client)
    decimals = config.display.decimals

    if args.report == "wallets":
        report = await load_wallet_balances(services)
        _print_table(wallet_balances_to_dataframe(report, decimals), "No wallets.")
        print()
        print(f"Total balance:   {_money(report.total, config)}")
        print(f"Positive total:  {_money(report.positive_total, config)}")
        print(f"Negative total:  {_money(report.negative_total, config)}")
        return

    if args.report == "dashboard":
        summary = await load_dashboard_summary(services)
        print(f"Total balance: {_money(summary.total_balance, config)}")
        print(f"Wallets:       {summary.wallet_count}")
        print()
        print("Recent receipts:")
        _print_table(
            records_to_dataframe(
                summary.recent_receipts, ["date", "amount", "description"], decimals
            ),
            "  (none)",
        )
        print()
        print("Recent expenditures:")
        _print_table(
            records_to_dataframe(
                summary.recent_expenditures, ["date", "amount", "description"], decimals
            ),
            "  (none)",
        )
        return

    period = _report_period(args, config)
    print(
        f"Applied period: {period.label} "
        f"({period.start.isoformat()} → {period.end.isoformat()})"
    )

    if args.report == "budget":
        execution = await load_budget_execution(
            services, period, config.reports.unknown_category_label
        )
        _print_table(
            budget_execution_to_dataframe(execution, decimals),
            "No budget or operation in this period.",
        )
    elif args.report == "income-expense":
        report = await load_income_expense(services, period, args.granularity)
        _print_table(
            income_expense_to_dataframe(report, decimals),
            "No operation in this period.",
        )
        print()
        print(f"Income:  {_money(report.income_total, config)}")
        print(f"Expense: {_money(report.expense_total, config)}")
        print(f"Balance: {_money(report.balance, config)}")
    else:
        report = await load_category_expenses(
            services, period, config.reports.untitled_label
        )
        df = category_expenses_to_dataframe(report, decimals).head(
            config.reports.top_n
        )
        _print_table(df, "No expenditure in this period.")
        print()
        print(f"Total expense: {_money(report.total, config)}")


HANDLERS = {
    "login": _handle_login,
    "logout": _handle_logout,
    "profile": _handle_profile,
    "wallets": _handle_wallets,
    "projects": _handle_projects,
    "categories": _handle_categories,
    "receipts": _handle_operations,
    "expenditures": _handle_operations,
    "transfers": _handle_transfers,
    "budgets": _handle_budgets,
    "auto-payments": _handle_auto_payments,
    "reports": _handle_reports,
}

# Commands usable without a stored session.
ANONYMOUS_COMMANDS = {"login", "logout"}


async def _run(args: argparse.Namespace, config: AppConfig) -> None:
    session = Session.from_store(TokenStore(config.session.token_file))
    if args.command not in ANONYMOUS_COMMANDS and not session.is_authenticated:
        raise AuthenticationError("Not logged in. Run 'homefin login' first.")

    async with ApiClient(config.api, session) as client:
        await HANDLERS[args.command](args, config, client)


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the HomeFin CLI.

    This function parses command-line arguments, configures logging, loads
    the application configuration and runs the requested command. HomeFin
    errors are printed on stderr and end the process with status 1.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"homefin version {__version__}")
        return

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return
    if args.command not in ("login", "logout", "profile", "reports") and not getattr(
        args, "action", None
    ):
        parser.error(f"'{args.command}' requires an action (e.g. 'list').")

    try:
        config = load_app_config(args.config_path)
        asyncio.run(_run(args, config))
    except HomeFinError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
