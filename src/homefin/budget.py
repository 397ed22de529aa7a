# HomeFin - Personal & Family Finance Dashboard client
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Budget execution engine for HomeFin.

This module compares planned amounts (budgets) with actual amounts
(receipts for income, budget-relevant expenditures for expenses) per
category over a reporting period.

Steps performed by ``compute_budget_execution()``:

1. Keep only the budgets, receipts and expenditures dated within the period
   (both bounds inclusive).
2. Seed one bucket per ``"{type}-{cash_flow_item}"`` key from the budgets:
   ``budget_amount`` is the planned amount, ``actual_amount`` starts at 0.
   Budget totals per type are accumulated at the same time.
3. Fold receipts into the ``income-{category}`` buckets. A receipt on a
   category without budget creates a bucket with ``budget_amount = 0``.
4. Fold expenditures flagged ``include_in_budget`` into the
   ``expense-{category}`` buckets, the same way.
5. For every bucket, compute:
      difference        = actual - budget   (income)
                        = budget - actual   (expense)
      execution_percent = actual / budget * 100   if budget > 0
                        = 100                     if no budget but actuals
                        = 0                       otherwise
6. Return income buckets then expense buckets, each sorted by
   ``execution_percent`` descending, along with the four totals.

Inputs are never modified and the result only depends on the three
collections, the period and the category names.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Optional

from .models import Budget, Expenditure, Receipt
from .periods import Period, filter_by_period

DEFAULT_UNKNOWN_LABEL = "Unknown category"


@dataclass(frozen=True)
class BudgetItem:
    """
    Execution summary for one (type, category) pair.

    Attributes
    ----------
    id:
        Id of the record that created the bucket (the budget, or the first
        receipt/expenditure when the category has no budget).
    cash_flow_item:
        Category id the bucket is keyed on.
    name:
        Category name (placeholder when the category is unknown).
    type:
        'income' or 'expense'.
    budget_amount, actual_amount:
        Planned and actual amounts over the period.
    difference:
        Favourable difference: actual - budget for income, budget - actual
        for expenses.
    execution_percent:
        Actual amount as a percentage of the budget.
    """

    id: str
    cash_flow_item: Optional[str]
    name: str
    type: str
    budget_amount: float
    actual_amount: float
    difference: float
    execution_percent: float

    @property
    def key(self) -> str:
        return bucket_key(self.type, self.cash_flow_item)


@dataclass(frozen=True)
class BudgetExecution:
    """Result of ``compute_budget_execution``."""

    items: list[BudgetItem]
    income_total: float
    expense_total: float
    income_actual_total: float
    expense_actual_total: float

    @property
    def income_items(self) -> list[BudgetItem]:
        return [item for item in self.items if item.type == "income"]

    @property
    def expense_items(self) -> list[BudgetItem]:
        return [item for item in self.items if item.type == "expense"]

    @property
    def income_execution_percent(self) -> float:
        return _percent(self.income_actual_total, self.income_total)

    @property
    def expense_execution_percent(self) -> float:
        return _percent(self.expense_actual_total, self.expense_total)


def bucket_key(kind: str, cash_flow_item: Optional[str]) -> str:
    """Key of a budget bucket: ``"{type}-{category id}"``."""
    return f"{kind}-{cash_flow_item}"


def _percent(actual: float, budget: float) -> float:
    if budget == 0:
        return 0.0
    return actual / budget * 100


def _execution_percent(budget_amount: float, actual_amount: float) -> float:
    if budget_amount > 0:
        return actual_amount / budget_amount * 100
    if actual_amount > 0:
        # No budget but has actuals
        return 100.0
    return 0.0


def compute_budget_execution(
    budgets: Iterable[Budget],
    receipts: Iterable[Receipt],
    expenditures: Iterable[Expenditure],
    period: Period,
    category_names: Mapping[str, str],
    unknown_label: str = DEFAULT_UNKNOWN_LABEL,
) -> BudgetExecution:
    """Fold budgets, receipts and expenditures into per-category buckets.

    Args:
        budgets: Budget entries (income and expense).
        receipts: Income receipts.
        expenditures: Expenditures; only those with ``include_in_budget``
            count towards the expense buckets.
        period: Inclusive date range applied to all three collections.
        category_names: Lookup from category id to display name.
        unknown_label: Name used for categories missing from the lookup.

    Returns:
        A BudgetExecution with income items first, then expense items, each
        sorted by execution percentage (highest first), plus the totals.
    """

    def _name(category: Optional[str]) -> str:
        if category is None:
            return unknown_label
        return category_names.get(category) or unknown_label

    # 1) Keep only records dated within the period.
    period_budgets = filter_by_period(budgets, period)
    period_receipts = filter_by_period(receipts, period)
    period_expenditures = filter_by_period(expenditures, period)

    # Buckets are plain dicts while folding; frozen items are built at the end.
    buckets: dict[str, dict] = {}
    income_total = 0.0
    expense_total = 0.0

    # 2) Seed buckets from budgets. A later budget on the same key replaces
    #    the bucket, while the per-type totals count every budget.
    for budget in period_budgets:
        kind = "income" if budget.type == "income" else "expense"
        key = bucket_key(kind, budget.cash_flow_item)
        buckets[key] = {
            "id": budget.id,
            "cash_flow_item": budget.cash_flow_item,
            "name": _name(budget.cash_flow_item),
            "type": kind,
            "budget_amount": budget.amount,
            "actual_amount": 0.0,
        }

        if kind == "income":
            income_total += budget.amount
        else:
            expense_total += budget.amount

    # 3) / 4) Fold actual amounts.
    def _fold(kind: str, record_id: str, category: Optional[str], amount: float):
        key = bucket_key(kind, category)
        bucket = buckets.get(key)
        if bucket is None:
            buckets[key] = {
                "id": record_id,
                "cash_flow_item": category,
                "name": _name(category),
                "type": kind,
                "budget_amount": 0.0,
                "actual_amount": amount,
            }
        else:
            bucket["actual_amount"] += amount

    income_actual_total = 0.0
    for receipt in period_receipts:
        _fold("income", receipt.id, receipt.cash_flow_item, receipt.amount)
        income_actual_total += receipt.amount

    expense_actual_total = 0.0
    for expenditure in period_expenditures:
        if not expenditure.include_in_budget:
            continue
        _fold("expense", expenditure.id, expenditure.cash_flow_item, expenditure.amount)
        expense_actual_total += expenditure.amount

    # 5) Differences and execution percentages.
    items: list[BudgetItem] = []
    for bucket in buckets.values():
        budget_amount = bucket["budget_amount"]
        actual_amount = bucket["actual_amount"]
        if bucket["type"] == "income":
            difference = actual_amount - budget_amount
        else:
            difference = budget_amount - actual_amount
        items.append(
            BudgetItem(
                id=bucket["id"],
                cash_flow_item=bucket["cash_flow_item"],
                name=bucket["name"],
                type=bucket["type"],
                budget_amount=budget_amount,
                actual_amount=actual_amount,
                difference=difference,
                execution_percent=_execution_percent(budget_amount, actual_amount),
            )
        )

    # 6) Income first, then expenses; each by execution percentage (stable).
    income_items = sorted(
        (i for i in items if i.type == "income"),
        key=lambda i: i.execution_percent,
        reverse=True,
    )
    expense_items = sorted(
        (i for i in items if i.type == "expense"),
        key=lambda i: i.execution_percent,
        reverse=True,
    )

    return BudgetExecution(
        items=income_items + expense_items,
        income_total=income_total,
        expense_total=expense_total,
        income_actual_total=income_actual_total,
        expense_actual_total=expense_actual_total,
    )
