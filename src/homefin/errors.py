# HomeFin - Personal & Family Finance Dashboard client
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Exceptions raised by HomeFin.

All errors raised on purpose by the package derive from ``HomeFinError`` so
that user-facing layers (the CLI, a future Web UI) can catch a single type
and display a readable message. Validation and configuration errors are
also ``ValueError`` subclasses, in line with the rest of the code base where
invalid input is reported with ``ValueError``.
"""

from typing import Optional


class HomeFinError(Exception):
    """Base class for all HomeFin errors."""


class ApiError(HomeFinError):
    """The backend answered with a non-successful HTTP status.

    Attributes
    ----------
    status_code:
        HTTP status code returned by the backend (0 when the request never
        reached the server).
    detail:
        Human-readable error detail. Taken from the JSON ``detail`` field of
        the response when present, otherwise from the response text.
    """

    def __init__(self, status_code: int, detail: str = ""):
        self.status_code = status_code
        self.detail = detail
        message = f"API error {status_code}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class AuthenticationError(ApiError):
    """Authentication is missing or could not be recovered.

    Raised when a request is rejected with 401 and the token refresh failed
    (or no refresh token was available). The session has already been
    cleared when this is raised: the user must log in again.
    """

    def __init__(self, detail: str = "Authentication required, please log in again."):
        super().__init__(401, detail)


class CategoryInUseError(ApiError):
    """The backend refused to delete a cash-flow item."""

    def __init__(self, status_code: int, item_id: str):
        self.item_id = item_id
        super().__init__(
            status_code,
            "Could not delete the cash-flow item. "
            "It may be used by existing operations.",
        )


class ReportDataError(HomeFinError):
    """A report could not be computed because its input data failed to load."""


class ConfigError(HomeFinError, ValueError):
    """Invalid or unreadable configuration."""


class ValidationError(HomeFinError, ValueError):
    """Required fields are missing or invalid before a submission.

    Attributes
    ----------
    fields:
        Names of the offending fields, in the order they were checked.
    """

    def __init__(self, message: str, fields: Optional[list[str]] = None):
        self.fields = list(fields or [])
        super().__init__(message)
