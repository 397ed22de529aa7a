# HomeFin - Personal & Family Finance Dashboard client
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for HomeFin.

This module defines a Period value object and helpers to derive reporting
periods (month to date, last month, year to date, calendar year, custom
range) from CLI arguments, plus the inclusive date filter used by every
report.

Period bounds are compared as parsed date-time values: ``start`` and
``end`` both stand for midnight (UTC) of their day, and a record is kept when
``start <= record.date <= end``.
"""

from calendar import monthrange
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, TypeVar

import pandas as pd

from .wire import parse_timestamp

T = TypeVar("T")

PERIOD_CHOICES = ("mtd", "last-month", "ytd", "year")


@dataclass(frozen=True)
class Period:
    """Represents a reporting period with a human-readable label."""

    start: date
    end: date
    label: str

    def contains(self, value) -> bool:
        """Return True if ``value`` (date, datetime or ISO string) is in the period."""
        ts = parse_timestamp(value)
        if ts is None:
            return False
        return pd.Timestamp(self.start) <= ts <= pd.Timestamp(self.end)


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def period_mtd() -> Period:
    """Month-to-date."""
    today = _today()
    return Period(start=today.replace(day=1), end=today, label="Month to date")


def period_last_month() -> Period:
    """Full previous calendar month."""
    today = _today()

    if today.month == 1:
        year = today.year - 1
        month = 12
    else:
        year = today.year
        month = today.month - 1

    start = date(year, month, 1)
    end = date(year, month, monthrange(year, month)[1])
    return Period(start=start, end=end, label="Last month")


def period_ytd() -> Period:
    """Year-to-date within the current calendar year."""
    today = _today()
    return Period(start=date(today.year, 1, 1), end=today, label="Year to date")


def period_year() -> Period:
    """Full current calendar year."""
    year = _today().year
    return Period(
        start=date(year, 1, 1),
        end=date(year, 12, 31),
        label=f"Year {year}",
    )


def period_from_name(name: str) -> Period:
    """Resolve a predefined period name (see PERIOD_CHOICES)."""
    if name == "mtd":
        return period_mtd()
    if name == "last-month":
        return period_last_month()
    if name == "ytd":
        return period_ytd()
    if name == "year":
        return period_year()
    raise ValueError(f"Unknown period: {name!r}")


def custom_period(start: date, end: date) -> Period:
    """Build a custom period, checking that the bounds are ordered."""
    if end < start:
        raise ValueError("Custom period end date cannot be before start date.")
    return Period(start=start, end=end, label=f"Custom period ({start} → {end})")


def determine_period_from_args(args, default: str = "mtd") -> Period:
    """
    Determine the reporting period to use based on CLI args.

    Priority (highest to lowest):

        1. args.period (mtd, last-month, ytd, year)
        2. args.from_date / args.to_date (custom period); a missing bound
           is taken from the default period
        3. the default period (from the configuration)
    """
    if getattr(args, "period", None):
        return period_from_name(args.period)

    from_raw: Optional[str] = getattr(args, "from_date", None)
    to_raw: Optional[str] = getattr(args, "to_date", None)

    if from_raw or to_raw:
        fallback = period_from_name(default)
        start = date.fromisoformat(from_raw) if from_raw else fallback.start
        end = date.fromisoformat(to_raw) if to_raw else fallback.end
        return custom_period(start, end)

    return period_from_name(default)


def filter_by_period(
    records: Iterable[T], period: Period, attr: str = "date"
) -> list[T]:
    """
    Keep only the records whose ``attr`` date falls within the period.

    Records with a missing or unparseable date are dropped. The input is
    not modified; a new list is returned in the original order.

    Parameters
    ----------
    records:
        Objects exposing a date attribute (e.g. Receipt, Expenditure, Budget).
    period:
        Period defining the [start, end] boundaries (inclusive).
    attr:
        Name of the date attribute to read.
    """
    return [r for r in records if period.contains(getattr(r, attr, None))]
