# HomeFin - Personal & Family Finance Dashboard client
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Domain model for HomeFin.

Each backend resource is represented by a frozen dataclass with:

- ``from_api(data)``: build the domain object from a decoded JSON record,
  applying defaults and converting decimal-string amounts to floats,
- ``to_api()``: build the JSON payload sent on create/update, converting
  amounts back to 2-decimal strings and omitting unset fields.

Field names follow the backend except where noted. Transfers are the only
resource whose wire names differ from the domain ones:

    domain        wire
    -----------   ----------
    wallet_from   wallet_out
    wallet_to     wallet_in

Both spellings are accepted when reading, so older backends that echo
``wallet_from`` / ``wallet_to`` keep working.

Dates are kept as the ISO strings sent by the backend. Parsing happens only
where dates are compared (see ``periods.py`` and ``wire.parse_timestamp``).
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal, Optional

from .wire import compact_payload, from_api_amount, to_api_amount, to_api_datetime

BudgetType = Literal["income", "expense"]


def _opt_str(value: Any) -> Optional[str]:
    """Return ``str(value)``, or None for missing/empty values."""
    if value is None or value == "":
        return None
    return str(value)


def _opt_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    return bool(value)


# ---------------------------------------------------------------------------
# Reference data: wallets, projects, categories, user profile
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Wallet:
    """A named money-holding account. Its balance is computed server-side."""

    id: str
    name: str
    code: Optional[str] = None
    hidden: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    deleted: bool = False

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Wallet":
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name") or ""),
            code=_opt_str(data.get("code")),
            hidden=bool(data.get("hidden")),
            created_at=_opt_str(data.get("created_at")),
            updated_at=_opt_str(data.get("updated_at")),
            deleted=bool(data.get("deleted")),
        )

    def to_api(self) -> dict[str, Any]:
        return compact_payload(
            {"code": self.code, "name": self.name, "hidden": self.hidden}
        )


@dataclass(frozen=True)
class WalletBalance:
    """Balance of one wallet, as computed by the backend."""

    wallet: str
    balance: float

    @classmethod
    def from_api(cls, wallet_id: str, data: Any) -> "WalletBalance":
        """
        Read the balance from the balance endpoint response.

        The endpoint is expected to return an object with a ``balance``
        field. Numbers and decimal strings are accepted; any other shape
        gives a balance of 0.0.
        """
        balance = 0.0
        if isinstance(data, Mapping):
            raw = data.get("balance")
            if isinstance(raw, (int, float, str)) and not isinstance(raw, bool):
                balance = from_api_amount(raw)
        return cls(wallet=wallet_id, balance=balance)


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    code: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    deleted: bool = False

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Project":
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name") or ""),
            code=_opt_str(data.get("code")),
            created_at=_opt_str(data.get("created_at")),
            updated_at=_opt_str(data.get("updated_at")),
            deleted=bool(data.get("deleted")),
        )

    def to_api(self) -> dict[str, Any]:
        return compact_payload({"name": self.name, "code": self.code})


@dataclass(frozen=True)
class CashFlowItem:
    """
    A user-defined category used to classify receipts and expenditures.

    Items may be organized hierarchically through ``parent`` (an id
    reference). The tree itself is built by ``hierarchy.build_hierarchy``.
    """

    id: str
    name: Optional[str] = None
    code: Optional[str] = None
    parent: Optional[str] = None
    include_in_budget: Optional[bool] = None
    description: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    deleted: bool = False

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "CashFlowItem":
        return cls(
            id=str(data.get("id", "")),
            name=_opt_str(data.get("name")),
            code=_opt_str(data.get("code")),
            parent=_opt_str(data.get("parent")),
            include_in_budget=_opt_bool(data.get("include_in_budget")),
            description=_opt_str(data.get("description")),
            created_at=_opt_str(data.get("created_at")),
            updated_at=_opt_str(data.get("updated_at")),
            deleted=bool(data.get("deleted")),
        )

    def to_api(self) -> dict[str, Any]:
        payload = {
            "name": self.name,
            "code": self.code,
            "parent": self.parent,
            "include_in_budget": self.include_in_budget,
            "description": self.description,
        }
        return compact_payload(payload)


@dataclass(frozen=True)
class UserProfile:
    id: str
    username: str = ""
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    is_company: bool = False

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "UserProfile":
        return cls(
            id=str(data.get("id", "")),
            username=str(data.get("username") or ""),
            email=str(data.get("email") or ""),
            first_name=str(data.get("first_name") or ""),
            last_name=str(data.get("last_name") or ""),
            is_company=bool(data.get("is_company")),
        )

    def to_api(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "is_company": self.is_company,
        }

    @property
    def display_name(self) -> str:
        full = f"{self.first_name} {self.last_name}".strip()
        return full or self.username


# ---------------------------------------------------------------------------
# Financial operations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Operation:
    """
    Fields shared by every dated financial document.

    Attributes
    ----------
    id:
        Backend identifier (empty for objects not created yet).
    date:
        ISO date or datetime string.
    amount:
        Amount in monetary units (always positive; the kind of operation
        tells the direction).
    description:
        Free-text comment.
    project:
        Optional project id.
    number:
        Optional document number assigned by the backend.
    """

    id: str = ""
    date: str = ""
    amount: float = 0.0
    description: Optional[str] = None
    project: Optional[str] = None
    number: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    deleted: bool = False

    @staticmethod
    def _base_fields(data: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "id": str(data.get("id", "")),
            "date": str(data.get("date") or ""),
            "amount": from_api_amount(data.get("amount")),
            # The backend calls the free-text field "comment".
            "description": _opt_str(data.get("description", data.get("comment"))),
            "project": _opt_str(data.get("project")),
            "number": _opt_str(data.get("number")),
            "created_at": _opt_str(data.get("created_at")),
            "updated_at": _opt_str(data.get("updated_at")),
            "deleted": bool(data.get("deleted")),
        }

    def _base_payload(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "date": to_api_datetime(self.date),
            "amount": to_api_amount(self.amount),
            "description": self.description,
            "project": self.project,
        }


@dataclass(frozen=True)
class Receipt(Operation):
    """Income received into a wallet."""

    wallet: Optional[str] = None
    cash_flow_item: Optional[str] = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Receipt":
        return cls(
            **cls._base_fields(data),
            wallet=_opt_str(data.get("wallet")),
            cash_flow_item=_opt_str(data.get("cash_flow_item")),
        )

    def to_api(self) -> dict[str, Any]:
        payload = self._base_payload()
        payload["wallet"] = self.wallet
        payload["cash_flow_item"] = self.cash_flow_item
        return compact_payload(payload)


@dataclass(frozen=True)
class Expenditure(Operation):
    """Money spent from a wallet."""

    wallet: Optional[str] = None
    cash_flow_item: Optional[str] = None
    include_in_budget: bool = False

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Expenditure":
        return cls(
            **cls._base_fields(data),
            wallet=_opt_str(data.get("wallet")),
            cash_flow_item=_opt_str(data.get("cash_flow_item")),
            include_in_budget=bool(data.get("include_in_budget")),
        )

    def to_api(self) -> dict[str, Any]:
        payload = self._base_payload()
        payload["wallet"] = self.wallet
        payload["cash_flow_item"] = self.cash_flow_item
        payload["include_in_budget"] = self.include_in_budget
        return compact_payload(payload)


@dataclass(frozen=True)
class Transfer(Operation):
    """Money moved from one wallet to another."""

    wallet_from: Optional[str] = None
    wallet_to: Optional[str] = None
    cash_flow_item: Optional[str] = None
    include_in_budget: bool = False

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Transfer":
        return cls(
            **cls._base_fields(data),
            wallet_from=_opt_str(data.get("wallet_out", data.get("wallet_from"))),
            wallet_to=_opt_str(data.get("wallet_in", data.get("wallet_to"))),
            cash_flow_item=_opt_str(data.get("cash_flow_item")),
            include_in_budget=bool(data.get("include_in_budget")),
        )

    def to_api(self) -> dict[str, Any]:
        payload = self._base_payload()
        payload["wallet_out"] = self.wallet_from
        payload["wallet_in"] = self.wallet_to
        payload["cash_flow_item"] = self.cash_flow_item
        payload["include_in_budget"] = self.include_in_budget
        return compact_payload(payload)


@dataclass(frozen=True)
class Budget(Operation):
    """Planned income or expense for a category at a given date."""

    type: BudgetType = "expense"
    cash_flow_item: Optional[str] = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Budget":
        raw_type = str(data.get("type") or "expense").lower()
        return cls(
            **cls._base_fields(data),
            type="income" if raw_type == "income" else "expense",
            cash_flow_item=_opt_str(data.get("cash_flow_item")),
        )

    def to_api(self) -> dict[str, Any]:
        payload = self._base_payload()
        payload["type"] = self.type
        payload["cash_flow_item"] = self.cash_flow_item
        return compact_payload(payload)


@dataclass(frozen=True)
class AutoPayment(Operation):
    """
    Template for a recurring transfer or expense.

    A transfer auto-payment moves money from ``wallet_from`` to
    ``wallet_to``; an expense auto-payment spends from ``wallet_from`` on
    ``cash_flow_item``. The next occurrence is due on ``next_date`` and
    repeats every ``period_days`` days.
    """

    is_transfer: bool = False
    wallet_from: Optional[str] = None
    wallet_to: Optional[str] = None
    cash_flow_item: Optional[str] = None
    period_days: int = 0
    next_date: str = ""

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "AutoPayment":
        try:
            period_days = int(data.get("period_days") or 0)
        except (TypeError, ValueError):
            period_days = 0
        return cls(
            **cls._base_fields(data),
            is_transfer=bool(data.get("is_transfer")),
            wallet_from=_opt_str(data.get("wallet_from")),
            wallet_to=_opt_str(data.get("wallet_to")),
            cash_flow_item=_opt_str(data.get("cash_flow_item")),
            period_days=period_days,
            next_date=str(data.get("next_date") or ""),
        )

    def to_api(self) -> dict[str, Any]:
        payload = self._base_payload()
        payload["is_transfer"] = self.is_transfer
        payload["wallet_from"] = self.wallet_from
        # Only the field matching the auto-payment type is sent.
        payload["wallet_to"] = self.wallet_to if self.is_transfer else None
        payload["cash_flow_item"] = None if self.is_transfer else self.cash_flow_item
        payload["period_days"] = self.period_days
        payload["next_date"] = to_api_datetime(self.next_date)
        return compact_payload(payload)
