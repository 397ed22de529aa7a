# HomeFin - Personal & Family Finance Dashboard client
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Reports for HomeFin.

This module builds every dashboard report from the backend data. Each
report comes in two layers:

1. a pure ``compute_*`` function, working on already loaded records and
   free of any I/O (easy to test, deterministic);
2. an async ``load_*`` function, fetching the inputs concurrently through
   the services (``asyncio.gather``) and handing them to ``compute_*``.

Available reports
-----------------
- Budget execution (see ``budget.py``): planned vs. actual per category.
- Income / expense: totals over the period plus per-day (``YYYY-MM-DD``)
  or per-month (``YYYY-MM``) buckets with income, expense and balance.
- Category expenses: in-period expenditures per known category, with
  their share of the total, largest first.
- Wallet balances: server-computed balance per wallet, total, positive and
  negative totals, share of the absolute total.
- Dashboard summary: total balance, wallet count and the most recent
  receipts and expenditures.

Error handling
--------------
A report is only computed from complete data. If any fetch fails, the
loader raises ``ReportDataError`` and no partial result is produced. The
one exception is the per-wallet balance fetch: a wallet whose balance
cannot be read is logged and left out of the report.
"""

import asyncio
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Optional

import httpx
import pandas as pd

from .budget import DEFAULT_UNKNOWN_LABEL, BudgetExecution, compute_budget_execution
from .errors import AuthenticationError, HomeFinError, ReportDataError
from .filters import sort_by_date
from .hierarchy import DEFAULT_UNTITLED_LABEL
from .models import CashFlowItem, Expenditure, Receipt, Wallet
from .periods import Period, filter_by_period
from .services import Services
from .wire import parse_timestamp

logger = logging.getLogger(__name__)

GRANULARITIES = {"daily": "%Y-%m-%d", "monthly": "%Y-%m"}

BUCKET_COLUMNS = ["bucket", "income", "expense", "balance"]


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IncomeExpenseReport:
    """
    Income and expense over a period.

    ``buckets`` has one row per day or month holding at least one
    operation, sorted chronologically, with columns:
    bucket, income, expense, balance (= income - expense).
    """

    period: Period
    granularity: str
    income_total: float
    expense_total: float
    buckets: pd.DataFrame

    @property
    def balance(self) -> float:
        return self.income_total - self.expense_total


@dataclass(frozen=True)
class CategoryExpense:
    id: str
    name: str
    amount: float
    percentage: float


@dataclass(frozen=True)
class CategoryExpensesReport:
    period: Period
    items: list[CategoryExpense]
    total: float


@dataclass(frozen=True)
class WalletBalanceRow:
    id: str
    name: str
    balance: float
    percentage: float


@dataclass(frozen=True)
class WalletBalancesReport:
    """Balances per wallet (highest first) and their totals."""

    rows: list[WalletBalanceRow]
    total: float
    positive_total: float
    negative_total: float


@dataclass(frozen=True)
class DashboardSummary:
    total_balance: float
    wallet_count: int
    recent_receipts: list[Receipt]
    recent_expenditures: list[Expenditure]


# ---------------------------------------------------------------------------
# Pure computations
# ---------------------------------------------------------------------------


def compute_income_expense(
    receipts: Iterable[Receipt],
    expenditures: Iterable[Expenditure],
    period: Period,
    granularity: str = "monthly",
) -> IncomeExpenseReport:
    """
    Sum income and expense over a period, in total and per bucket.

    Parameters
    ----------
    receipts, expenditures:
        Operations to aggregate; only those dated within the period count.
    period:
        Inclusive reporting period.
    granularity:
        "daily" (buckets ``YYYY-MM-DD``) or "monthly" (``YYYY-MM``). Bucket
        keys are derived from the UTC date of each operation.

    Raises
    ------
    ValueError
        If the granularity is unknown.
    """
    if granularity not in GRANULARITIES:
        raise ValueError(
            f"Unknown granularity: {granularity!r}. "
            f"Expected one of: {', '.join(GRANULARITIES)}."
        )
    fmt = GRANULARITIES[granularity]

    rows: list[dict[str, Any]] = []
    for receipt in filter_by_period(receipts, period):
        ts = parse_timestamp(receipt.date)
        rows.append(
            {"bucket": ts.strftime(fmt), "income": receipt.amount, "expense": 0.0}
        )
    for expenditure in filter_by_period(expenditures, period):
        ts = parse_timestamp(expenditure.date)
        rows.append(
            {"bucket": ts.strftime(fmt), "income": 0.0, "expense": expenditure.amount}
        )

    if not rows:
        return IncomeExpenseReport(
            period=period,
            granularity=granularity,
            income_total=0.0,
            expense_total=0.0,
            buckets=pd.DataFrame(columns=BUCKET_COLUMNS),
        )

    df = pd.DataFrame(rows)
    buckets = df.groupby("bucket", as_index=False)[["income", "expense"]].sum()
    buckets = buckets.sort_values("bucket", kind="stable").reset_index(drop=True)
    buckets["balance"] = buckets["income"] - buckets["expense"]

    return IncomeExpenseReport(
        period=period,
        granularity=granularity,
        income_total=float(df["income"].sum()),
        expense_total=float(df["expense"].sum()),
        buckets=buckets[BUCKET_COLUMNS],
    )


def compute_category_expenses(
    categories: Iterable[CashFlowItem],
    expenditures: Iterable[Expenditure],
    period: Period,
    untitled_label: str = DEFAULT_UNTITLED_LABEL,
) -> CategoryExpensesReport:
    """
    Sum in-period expenditures per category.

    Expenditures on categories missing from ``categories`` are ignored and
    do not count towards the total. Only categories with a non-zero amount
    are returned, largest amount first (ties keep the category order).
    """
    amounts: dict[str, float] = {}
    names: dict[str, str] = {}
    for category in categories:
        amounts.setdefault(category.id, 0.0)
        names.setdefault(category.id, category.name or untitled_label)

    total = 0.0
    for expenditure in filter_by_period(expenditures, period):
        category_id = expenditure.cash_flow_item
        if category_id is None or category_id not in amounts:
            continue
        amounts[category_id] += expenditure.amount
        total += expenditure.amount

    items = [
        CategoryExpense(
            id=category_id,
            name=names[category_id],
            amount=amount,
            percentage=amount / total * 100 if total > 0 else 0.0,
        )
        for category_id, amount in amounts.items()
        if amount != 0
    ]
    items.sort(key=lambda item: item.amount, reverse=True)

    return CategoryExpensesReport(period=period, items=items, total=total)


def compute_wallet_balances(
    wallets: Iterable[Wallet], balances: Mapping[str, float]
) -> WalletBalancesReport:
    """
    Build the wallet balances report.

    ``balances`` maps wallet ids to their balance. Wallets without an entry
    (balance could not be fetched) are skipped. Percentages are relative to
    the absolute total and are 0 when the total is 0.
    """
    known = [(w, float(balances[w.id])) for w in wallets if w.id in balances]

    total = sum(balance for _, balance in known)
    positive = sum(balance for _, balance in known if balance > 0)
    negative = sum(abs(balance) for _, balance in known if balance < 0)

    rows = [
        WalletBalanceRow(
            id=wallet.id,
            name=wallet.name,
            balance=balance,
            percentage=balance / abs(total) * 100 if total != 0 else 0.0,
        )
        for wallet, balance in known
    ]
    rows.sort(key=lambda row: row.balance, reverse=True)

    return WalletBalancesReport(
        rows=rows, total=total, positive_total=positive, negative_total=negative
    )


def compute_dashboard_summary(
    wallets: Iterable[Wallet],
    balances: Mapping[str, float],
    receipts: Iterable[Receipt],
    expenditures: Iterable[Expenditure],
    limit: int = 5,
) -> DashboardSummary:
    wallets = list(wallets)
    total = sum(float(balances[w.id]) for w in wallets if w.id in balances)
    return DashboardSummary(
        total_balance=total,
        wallet_count=len(wallets),
        recent_receipts=sort_by_date(receipts, descending=True, limit=limit),
        recent_expenditures=sort_by_date(expenditures, descending=True, limit=limit),
    )


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------


async def _gather(*aws):
    """
    Await the fetches concurrently; any failure aborts the report.

    Fetches still in flight when one fails are cancelled and awaited before
    the error propagates, so no request outlives the report.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except (HomeFinError, httpx.HTTPError) as exc:
        raise ReportDataError(f"Failed to load report data: {exc}") from exc
    finally:
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)


async def fetch_wallet_balances(
    services: Services, wallets: Iterable[Wallet]
) -> dict[str, float]:
    """
    Fetch the balance of every wallet concurrently.

    Wallets whose balance cannot be fetched are logged and left out.
    Authentication failures are not skipped.
    """

    async def _one(wallet: Wallet) -> Optional[float]:
        try:
            return (await services.wallets.get_balance(wallet.id)).balance
        except AuthenticationError:
            raise
        except HomeFinError as exc:
            logger.warning("Skipping balance of wallet %s: %s", wallet.id, exc)
            return None

    wallets = list(wallets)
    results = await _gather(*(_one(w) for w in wallets))
    return {w.id: b for w, b in zip(wallets, results) if b is not None}


async def load_budget_execution(
    services: Services,
    period: Period,
    unknown_label: str = DEFAULT_UNKNOWN_LABEL,
) -> BudgetExecution:
    budgets, receipts, expenditures, categories = await _gather(
        services.budgets.list(),
        services.receipts.list(),
        services.expenditures.list(),
        services.cash_flow_items.list(),
    )
    category_names = {c.id: c.name for c in categories if c.name}
    return compute_budget_execution(
        budgets, receipts, expenditures, period, category_names, unknown_label
    )


async def load_income_expense(
    services: Services, period: Period, granularity: str = "monthly"
) -> IncomeExpenseReport:
    if granularity not in GRANULARITIES:
        # Fail before fetching anything.
        raise ValueError(f"Unknown granularity: {granularity!r}")
    receipts, expenditures = await _gather(
        services.receipts.list(), services.expenditures.list()
    )
    return compute_income_expense(receipts, expenditures, period, granularity)


async def load_category_expenses(
    services: Services,
    period: Period,
    untitled_label: str = DEFAULT_UNTITLED_LABEL,
) -> CategoryExpensesReport:
    categories, expenditures = await _gather(
        services.cash_flow_items.list(), services.expenditures.list()
    )
    return compute_category_expenses(categories, expenditures, period, untitled_label)


async def load_wallet_balances(services: Services) -> WalletBalancesReport:
    (wallets,) = await _gather(services.wallets.list())
    balances = await fetch_wallet_balances(services, wallets)
    return compute_wallet_balances(wallets, balances)


async def load_dashboard_summary(
    services: Services, limit: int = 5
) -> DashboardSummary:
    wallets, receipts, expenditures = await _gather(
        services.wallets.list(),
        services.receipts.list(),
        services.expenditures.list(),
    )
    balances = await fetch_wallet_balances(services, wallets)
    return compute_dashboard_summary(wallets, balances, receipts, expenditures, limit)
