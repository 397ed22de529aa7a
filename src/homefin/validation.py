# HomeFin - Personal & Family Finance Dashboard client
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Client-side validation of records before they are submitted.

Every ``validate_*`` function checks one kind of record and raises a single
``ValidationError`` listing all offending fields (missing values first, in
form order, then invalid ones). Nothing is sent to the backend when a check
fails; the backend still performs its own validation.
"""

from typing import Any, Optional

from .errors import ValidationError
from .models import (
    AutoPayment,
    Budget,
    CashFlowItem,
    Expenditure,
    Project,
    Receipt,
    Transfer,
    Wallet,
)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _is_positive_number(value: Any) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    return number == number and number > 0


def _raise_if_any(missing: list[str], invalid: list[str], extra: str = "") -> None:
    if not missing and not invalid and not extra:
        return

    parts = []
    if missing:
        parts.append(f"missing required fields: {', '.join(missing)}")
    if invalid:
        parts.append(f"invalid fields: {', '.join(invalid)}")
    if extra:
        parts.append(extra)
    message = "; ".join(parts)
    raise ValidationError(message[0].upper() + message[1:], missing + invalid)


def _check(
    values: dict[str, Any],
    required: list[str],
    amount_fields: tuple[str, ...] = ("amount",),
) -> tuple[list[str], list[str]]:
    """Return (missing, invalid) field names for ``values``."""
    missing = [name for name in required if _is_blank(values.get(name))]
    invalid = [
        name
        for name in amount_fields
        if name not in missing and not _is_positive_number(values.get(name))
    ]
    return missing, invalid


def validate_amount(value: Any, field: str = "amount") -> float:
    """Parse an amount typed by the user; it must be a positive number."""
    if not _is_positive_number(value):
        raise ValidationError(f"{field} must be a positive number", [field])
    return float(value)


def validate_receipt(receipt: Receipt) -> None:
    missing, invalid = _check(
        {
            "amount": receipt.amount,
            "date": receipt.date,
            "wallet": receipt.wallet,
            "cash_flow_item": receipt.cash_flow_item,
        },
        ["amount", "date", "wallet", "cash_flow_item"],
    )
    _raise_if_any(missing, invalid)


def validate_expenditure(expenditure: Expenditure) -> None:
    missing, invalid = _check(
        {
            "amount": expenditure.amount,
            "date": expenditure.date,
            "wallet": expenditure.wallet,
            "cash_flow_item": expenditure.cash_flow_item,
        },
        ["amount", "date", "wallet", "cash_flow_item"],
    )
    _raise_if_any(missing, invalid)


def validate_transfer(
    transfer: Transfer, source_balance: Optional[float] = None
) -> None:
    """
    Check a transfer before submission.

    Besides the required fields, the two wallets must differ and, when the
    balance of the source wallet is known, the amount must not exceed it.
    """
    missing, invalid = _check(
        {
            "amount": transfer.amount,
            "date": transfer.date,
            "wallet_from": transfer.wallet_from,
            "wallet_to": transfer.wallet_to,
        },
        ["amount", "date", "wallet_from", "wallet_to"],
    )
    extra = ""
    if not missing and transfer.wallet_from == transfer.wallet_to:
        invalid.append("wallet_to")
        extra = "source and destination wallets must be different"
    elif (
        not missing
        and "amount" not in invalid
        and source_balance is not None
        and float(transfer.amount) > source_balance
    ):
        invalid.append("amount")
        extra = (
            f"amount exceeds the balance of the source wallet "
            f"({source_balance:.2f})"
        )
    _raise_if_any(missing, invalid, extra)


def validate_budget(budget: Budget) -> None:
    missing, invalid = _check(
        {
            "type": budget.type,
            "amount": budget.amount,
            "date": budget.date,
            "cash_flow_item": budget.cash_flow_item,
        },
        ["type", "amount", "date", "cash_flow_item"],
    )
    if "type" not in missing and budget.type not in ("income", "expense"):
        invalid.insert(0, "type")
    _raise_if_any(missing, invalid)


def validate_auto_payment(auto_payment: AutoPayment) -> None:
    """
    Check an auto-payment template.

    Transfers need a destination wallet different from the source one;
    expenses need a category. ``period_days`` must be a positive integer.
    """
    values = {
        "amount": auto_payment.amount,
        "next_date": auto_payment.next_date,
        "period_days": auto_payment.period_days,
        "wallet_from": auto_payment.wallet_from,
        "wallet_to": auto_payment.wallet_to,
        "cash_flow_item": auto_payment.cash_flow_item,
    }
    required = ["amount", "next_date", "period_days", "wallet_from"]
    required.append("wallet_to" if auto_payment.is_transfer else "cash_flow_item")

    missing, invalid = _check(values, required)

    period_days = auto_payment.period_days
    if "period_days" not in missing and (
        isinstance(period_days, bool)
        or not isinstance(period_days, int)
        or period_days <= 0
    ):
        invalid.append("period_days")

    extra = ""
    if (
        auto_payment.is_transfer
        and "wallet_to" not in missing
        and "wallet_from" not in missing
        and auto_payment.wallet_from == auto_payment.wallet_to
    ):
        invalid.append("wallet_to")
        extra = "source and destination wallets must be different"
    _raise_if_any(missing, invalid, extra)


def _validate_name(name: Optional[str]) -> None:
    if _is_blank(name):
        _raise_if_any(["name"], [])


def validate_wallet(wallet: Wallet) -> None:
    _validate_name(wallet.name)


def validate_project(project: Project) -> None:
    _validate_name(project.name)


def validate_cash_flow_item(item: CashFlowItem) -> None:
    _validate_name(item.name)
