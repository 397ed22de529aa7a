# HomeFin - Personal & Family Finance Dashboard client
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for HomeFin.

This module turns domain objects and report results into pandas DataFrames
ready to be printed (``DataFrame.to_string``) or exported. It does not fetch
or compute anything: listings come from the services, reports from
``reports.py`` / ``budget.py``.

Conventions shared by every view:

- amounts are rounded to the configured number of decimals,
- ids referencing wallets and categories are replaced by their names when
  a lookup is given (the id is kept when the name is unknown),
- empty inputs give an empty DataFrame with the expected columns.
"""

from collections.abc import Iterable, Mapping
from dataclasses import asdict
from typing import Any, Optional

import pandas as pd

from .budget import BudgetExecution
from .hierarchy import CashFlowItemNode, iter_with_depth
from .reports import CategoryExpensesReport, IncomeExpenseReport, WalletBalancesReport


def _frame(rows: list[dict[str, Any]], columns: list[str]) -> pd.DataFrame:
    """Build a DataFrame with a fixed column order (empty-safe)."""
    if not rows:
        return pd.DataFrame(columns=columns)
    df = pd.DataFrame(rows)
    return df[[c for c in columns if c in df.columns]]


def _name(lookup: Optional[Mapping[str, str]], key: Optional[str]) -> str:
    if key is None:
        return ""
    return (lookup or {}).get(key, key)


def records_to_dataframe(
    records: Iterable[Any],
    columns: list[str],
    decimals: int = 2,
    wallet_names: Optional[Mapping[str, str]] = None,
    category_names: Optional[Mapping[str, str]] = None,
) -> pd.DataFrame:
    """
    Convert model dataclasses (operations, wallets, projects, ...) into rows.

    Only ``columns`` are kept, in that order. Columns holding wallet ids
    (wallet, wallet_from, wallet_to) and category ids (cash_flow_item) are
    resolved through the lookups. Amount-like columns are rounded.
    """
    rows = []
    for record in records:
        row = asdict(record)
        for key in ("wallet", "wallet_from", "wallet_to"):
            if key in row:
                row[key] = _name(wallet_names, row[key])
        if "cash_flow_item" in row:
            row["cash_flow_item"] = _name(category_names, row["cash_flow_item"])
        if "amount" in row:
            row["amount"] = round(float(row["amount"]), decimals)
        rows.append(row)
    return _frame(rows, columns)


def hierarchy_to_dataframe(forest: Iterable[CashFlowItemNode]) -> pd.DataFrame:
    """
    Render the category forest as an indented table (pre-order).

    Children are indented by two spaces per level under their parent.
    """
    rows = [
        {
            "id": node.id,
            "name": "  " * depth + node.name,
            "code": node.code or "",
            "level": depth,
            "include_in_budget": node.include_in_budget,
        }
        for depth, node in iter_with_depth(forest)
    ]
    return _frame(rows, ["id", "name", "code", "level", "include_in_budget"])


def budget_execution_to_dataframe(
    execution: BudgetExecution, decimals: int = 2
) -> pd.DataFrame:
    """One row per bucket (income first), plus one total row per type."""
    columns = ["type", "name", "budget", "actual", "difference", "execution_pct"]
    rows: list[dict[str, Any]] = []

    for kind, items, budget, actual, pct in (
        (
            "income",
            execution.income_items,
            execution.income_total,
            execution.income_actual_total,
            execution.income_execution_percent,
        ),
        (
            "expense",
            execution.expense_items,
            execution.expense_total,
            execution.expense_actual_total,
            execution.expense_execution_percent,
        ),
    ):
        for item in items:
            rows.append(
                {
                    "type": kind,
                    "name": item.name,
                    "budget": round(item.budget_amount, decimals),
                    "actual": round(item.actual_amount, decimals),
                    "difference": round(item.difference, decimals),
                    "execution_pct": round(item.execution_percent, 1),
                }
            )
        if items:
            difference = actual - budget if kind == "income" else budget - actual
            rows.append(
                {
                    "type": kind,
                    "name": "TOTAL",
                    "budget": round(budget, decimals),
                    "actual": round(actual, decimals),
                    "difference": round(difference, decimals),
                    "execution_pct": round(pct, 1),
                }
            )

    return _frame(rows, columns)


def income_expense_to_dataframe(
    report: IncomeExpenseReport, decimals: int = 2
) -> pd.DataFrame:
    df = report.buckets.copy()
    for col in ("income", "expense", "balance"):
        if col in df.columns and not df.empty:
            df[col] = df[col].astype(float).round(decimals)
    return df


def category_expenses_to_dataframe(
    report: CategoryExpensesReport, decimals: int = 2
) -> pd.DataFrame:
    rows = [
        {
            "name": item.name,
            "amount": round(item.amount, decimals),
            "percentage": round(item.percentage, 1),
        }
        for item in report.items
    ]
    return _frame(rows, ["name", "amount", "percentage"])


def wallet_balances_to_dataframe(
    report: WalletBalancesReport, decimals: int = 2
) -> pd.DataFrame:
    rows = [
        {
            "name": row.name,
            "balance": round(row.balance, decimals),
            "percentage": round(row.percentage, 1),
        }
        for row in report.rows
    ]
    return _frame(rows, ["name", "balance", "percentage"])
