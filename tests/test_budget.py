from datetime import date

import pytest

from homefin.budget import compute_budget_execution
from homefin.models import Budget, Expenditure, Receipt
from homefin.periods import Period

JANUARY = Period(start=date(2024, 1, 1), end=date(2024, 1, 31), label="January")
NAMES = {"salary": "Salary", "food": "Food", "rent": "Rent"}


def _budget(id_, amount, type_, item, day="2024-01-01") -> Budget:
    return Budget(id=id_, date=day, amount=amount, type=type_, cash_flow_item=item)


def _receipt(id_, day, amount, item="salary") -> Receipt:
    return Receipt(id=id_, date=day, amount=amount, cash_flow_item=item)


def _spent(id_, day, amount, item, in_budget=True) -> Expenditure:
    return Expenditure(
        id=id_,
        date=day,
        amount=amount,
        cash_flow_item=item,
        include_in_budget=in_budget,
    )


def test_income_fully_executed() -> None:
    """Budget 1000 with receipts totalling 1000 -> 100 % and difference 0."""
    budgets = [_budget("b1", 1000.0, "income", "salary")]
    receipts = [
        _receipt("r1", "2024-01-05", 600.0),
        _receipt("r2", "2024-01-20", 400.0),
    ]

    result = compute_budget_execution(budgets, receipts, [], JANUARY, NAMES)

    assert len(result.items) == 1
    item = result.items[0]
    assert item.key == "income-salary"
    assert item.name == "Salary"
    assert item.budget_amount == pytest.approx(1000.0)
    assert item.actual_amount == pytest.approx(1000.0)
    assert item.difference == pytest.approx(0.0)
    assert item.execution_percent == pytest.approx(100.0)
    assert result.income_total == pytest.approx(1000.0)
    assert result.income_actual_total == pytest.approx(1000.0)
    assert result.income_execution_percent == pytest.approx(100.0)


def test_receipts_without_budget() -> None:
    """Actuals without budget -> budget 0, 100 %, difference = actual."""
    receipts = [_receipt("r1", "2024-01-10", 250.0)]

    result = compute_budget_execution([], receipts, [], JANUARY, NAMES)

    item = result.items[0]
    assert item.id == "r1"
    assert item.budget_amount == 0.0
    assert item.actual_amount == pytest.approx(250.0)
    assert item.difference == pytest.approx(250.0)
    assert item.execution_percent == pytest.approx(100.0)
    assert result.income_total == 0.0
    assert result.income_execution_percent == 0.0


def test_expense_partially_spent() -> None:
    """Expense budget 500, 300 spent in range -> difference 200, 60 %."""
    budgets = [_budget("b1", 500.0, "expense", "food")]
    expenditures = [_spent("e1", "2024-01-15", 300.0, "food")]

    result = compute_budget_execution(budgets, [], expenditures, JANUARY, NAMES)

    item = result.expense_items[0]
    assert item.difference == pytest.approx(200.0)
    assert item.execution_percent == pytest.approx(60.0)
    assert result.expense_actual_total == pytest.approx(300.0)


def test_expense_spent_out_of_range() -> None:
    """Spending outside the period is ignored -> actual 0, 0 %."""
    budgets = [_budget("b1", 500.0, "expense", "food")]
    expenditures = [_spent("e1", "2024-02-02", 300.0, "food")]

    result = compute_budget_execution(budgets, [], expenditures, JANUARY, NAMES)

    item = result.expense_items[0]
    assert item.actual_amount == 0.0
    assert item.execution_percent == 0.0
    assert item.difference == pytest.approx(500.0)


def test_expenditures_outside_budget_are_ignored() -> None:
    expenditures = [_spent("e1", "2024-01-15", 80.0, "food", in_budget=False)]

    result = compute_budget_execution([], [], expenditures, JANUARY, NAMES)

    assert result.items == []
    assert result.expense_actual_total == 0.0


def test_period_bounds_are_inclusive() -> None:
    receipts = [
        _receipt("r1", "2024-01-01", 1.0),
        _receipt("r2", "2024-01-31T00:00:00Z", 2.0),
        _receipt("r3", "2023-12-31T23:59:59Z", 4.0),
    ]

    result = compute_budget_execution([], receipts, [], JANUARY, NAMES)

    assert result.income_actual_total == pytest.approx(3.0)


def test_unknown_category_gets_placeholder_name() -> None:
    receipts = [_receipt("r1", "2024-01-10", 10.0, item="gift")]

    result = compute_budget_execution(
        [], receipts, [], JANUARY, NAMES, unknown_label="???"
    )

    assert result.items[0].name == "???"


def test_later_budget_on_same_category_replaces_earlier() -> None:
    """The later budget owns the bucket; the totals count both budgets."""
    budgets = [
        _budget("b1", 500.0, "expense", "rent", day="2024-01-05"),
        _budget("b2", 200.0, "expense", "rent", day="2024-01-20"),
    ]
    expenditures = [_spent("e1", "2024-01-25", 100.0, "rent")]

    result = compute_budget_execution(budgets, [], expenditures, JANUARY, NAMES)

    assert len(result.items) == 1
    item = result.items[0]
    assert item.id == "b2"
    assert item.budget_amount == pytest.approx(200.0)
    assert item.actual_amount == pytest.approx(100.0)
    assert item.execution_percent == pytest.approx(50.0)
    assert result.expense_total == pytest.approx(700.0)


def test_income_first_then_expenses_sorted_by_execution() -> None:
    budgets = [
        _budget("b1", 100.0, "expense", "food"),
        _budget("b2", 100.0, "expense", "rent"),
        _budget("b3", 100.0, "income", "salary"),
    ]
    expenditures = [
        _spent("e1", "2024-01-02", 20.0, "food"),
        _spent("e2", "2024-01-02", 90.0, "rent"),
    ]

    result = compute_budget_execution(budgets, [], expenditures, JANUARY, NAMES)

    assert [item.key for item in result.items] == [
        "income-salary",
        "expense-rent",
        "expense-food",
    ]


def test_inputs_are_not_modified() -> None:
    budgets = [_budget("b1", 100.0, "income", "salary")]
    receipts = [_receipt("r1", "2024-01-02", 50.0)]
    before = (list(budgets), list(receipts))

    first = compute_budget_execution(budgets, receipts, [], JANUARY, NAMES)
    second = compute_budget_execution(budgets, receipts, [], JANUARY, NAMES)

    assert (budgets, receipts) == before
    assert first == second
