# HomeFin - Personal & Family Finance Dashboard client
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Listing filters for receipts and expenditures.

The backend only filters expenditures by ``include_in_budget``; every other
criterion used by the listings (free-text search, date range, wallet,
category, amount range) is applied client-side by ``apply_filter``.

Date bounds follow the same rule as reporting periods: both bounds are
inclusive and a bare date stands for midnight UTC of that day.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from typing import Optional, TypeVar, Union

import pandas as pd

from .models import Expenditure, Receipt
from .wire import parse_timestamp

Op = TypeVar("Op", Receipt, Expenditure)

_MIN_TS = pd.Timestamp.min


@dataclass(frozen=True)
class OperationFilter:
    """
    Criteria for filtering receipts or expenditures.

    All criteria are optional; unset criteria match every record. Text
    search is case-insensitive and matches the description, the wallet
    name or the category name.
    """

    search: Optional[str] = None
    date_from: Optional[Union[date, str]] = None
    date_to: Optional[Union[date, str]] = None
    wallet: Optional[str] = None
    cash_flow_item: Optional[str] = None
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    include_in_budget: Optional[bool] = None

    def matches(
        self,
        record,
        wallet_names: Optional[Mapping[str, str]] = None,
        category_names: Optional[Mapping[str, str]] = None,
    ) -> bool:
        if self.search:
            term = self.search.lower()
            wallet_name = (wallet_names or {}).get(record.wallet or "", "")
            category_name = (category_names or {}).get(record.cash_flow_item or "", "")
            haystack = (record.description or "", wallet_name, category_name)
            if not any(term in text.lower() for text in haystack):
                return False

        if self.wallet and record.wallet != self.wallet:
            return False
        if self.cash_flow_item and record.cash_flow_item != self.cash_flow_item:
            return False

        if self.date_from or self.date_to:
            ts = parse_timestamp(record.date)
            if ts is None:
                return False
            start = parse_timestamp(self.date_from)
            end = parse_timestamp(self.date_to)
            if start is not None and ts < start:
                return False
            if end is not None and ts > end:
                return False

        if self.min_amount is not None and record.amount < self.min_amount:
            return False
        if self.max_amount is not None and record.amount > self.max_amount:
            return False

        if self.include_in_budget is not None:
            # Receipts have no budget flag and never match this criterion.
            flag = getattr(record, "include_in_budget", None)
            if flag is None or bool(flag) != self.include_in_budget:
                return False

        return True


def apply_filter(
    records: Iterable[Op],
    criteria: OperationFilter,
    wallet_names: Optional[Mapping[str, str]] = None,
    category_names: Optional[Mapping[str, str]] = None,
) -> list[Op]:
    """Return the records matching ``criteria``, in their original order."""
    return [
        r for r in records if criteria.matches(r, wallet_names, category_names)
    ]


def sort_by_date(
    records: Iterable[Op], descending: bool = True, limit: Optional[int] = None
) -> list[Op]:
    """
    Sort records by date (newest first by default).

    Records with an unparseable date sort as the oldest. The sort is stable,
    so records sharing a date keep their relative order.
    """

    def _key(record) -> pd.Timestamp:
        ts = parse_timestamp(record.date)
        return _MIN_TS if ts is None else ts

    ordered = sorted(records, key=_key, reverse=descending)
    if limit is not None:
        ordered = ordered[: max(limit, 0)]
    return ordered


@dataclass(frozen=True)
class WalletOperation:
    """A receipt or expenditure tagged with its kind, for wallet histories."""

    kind: str  # "receipt" | "expenditure"
    operation: Union[Receipt, Expenditure]

    @property
    def date(self) -> str:
        return self.operation.date

    @property
    def signed_amount(self) -> float:
        """Amount as it affects the wallet (negative for expenditures)."""
        if self.kind == "expenditure":
            return -self.operation.amount
        return self.operation.amount


def operations_for_wallet(
    wallet_id: str,
    receipts: Iterable[Receipt],
    expenditures: Iterable[Expenditure],
    limit: int = 10,
) -> list[WalletOperation]:
    """Most recent receipts and expenditures of one wallet, newest first."""
    tagged = [WalletOperation("receipt", r) for r in receipts if r.wallet == wallet_id]
    tagged += [
        WalletOperation("expenditure", e) for e in expenditures if e.wallet == wallet_id
    ]
    return sort_by_date(tagged, descending=True, limit=limit)
