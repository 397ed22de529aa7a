# HomeFin - Personal & Family Finance Dashboard client
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Wire format helpers for HomeFin.

This module converts values between the representation used by the backend
(the "wire" format) and the one used by the rest of the package.

Amounts
-------
The backend transmits monetary amounts as decimal strings (``"1250.50"``).
Internally, amounts are plain floats so they can be summed, compared and
displayed. On write, amounts are converted back to strings with exactly two
decimals.

    from_api_amount("1250.5")  -> 1250.5
    from_api_amount(None)      -> 0.0
    to_api_amount(1250.5)      -> "1250.50"
    to_api_amount("")          -> None   (field omitted from the payload)

Dates
-----
Dates travel as ISO date (``YYYY-MM-DD``) or ISO datetime strings. Operation
dates are sent as datetimes: a bare date is expanded to midnight UTC.

For comparisons (period filtering, sorting), strings are parsed into
timezone-naive UTC ``pandas.Timestamp`` values:

- timezone-aware values are converted to UTC,
- naive values are taken as UTC,
- unparseable or empty values give ``None``.
"""

import re
from typing import Any, Optional, Union

import pandas as pd

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def from_api_amount(amount: Union[str, float, int, None]) -> float:
    """
    Convert a wire amount (decimal string or number) into a float.

    Missing or empty values are read as 0.0. Values that cannot be parsed
    are also read as 0.0 so that a single malformed record never breaks a
    listing or a report.
    """
    if amount is None or amount == "":
        return 0.0
    if isinstance(amount, bool):
        return float(amount)
    if isinstance(amount, (int, float)):
        return float(amount)
    try:
        return float(str(amount).strip())
    except ValueError:
        return 0.0


def to_api_amount(amount: Union[str, float, int, None]) -> Optional[str]:
    """
    Convert an amount into the fixed 2-decimal string expected by the API.

    Returns None when the amount is missing, empty or not a number; callers
    drop None values from their payloads.
    """
    if amount is None or amount == "":
        return None
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return None
    if value != value:  # NaN
        return None
    return f"{value:.2f}"


def to_api_datetime(value: Optional[str]) -> Optional[str]:
    """
    Expand a bare ISO date into an ISO datetime at midnight UTC.

    Datetime strings (or anything else) are passed through unchanged.
    """
    if not value:
        return None
    if _ISO_DATE_RE.match(value):
        return f"{value}T00:00:00Z"
    return value


def parse_timestamp(value: Any) -> Optional[pd.Timestamp]:
    """
    Parse a date or datetime into a naive UTC ``pandas.Timestamp``.

    Accepts ISO strings, ``datetime.date``/``datetime.datetime`` objects and
    Timestamps. Returns None for missing or unparseable values.
    """
    if value is None or value == "":
        return None
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts


def compact_payload(payload: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``payload`` without None values."""
    return {key: value for key, value in payload.items() if value is not None}
