# HomeFin - Personal & Family Finance Dashboard client
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Session context for HomeFin.

A ``Session`` holds everything that identifies the current user towards the
backend: the access token, the refresh token and (once loaded) the user
profile. It is an explicit object handed to the API client, never a module
level singleton, so that services, reports and tests can each work with
their own session.

``TokenStore`` optionally persists the two tokens as JSON on disk. This is
what lets the CLI stay logged in between two invocations. When a session is
bound to a store, every token change is written through immediately.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .models import UserProfile

logger = logging.getLogger(__name__)


@dataclass
class TokenStore:
    """JSON file holding ``{"access": ..., "refresh": ...}``."""

    path: Path

    def load(self) -> tuple[Optional[str], Optional[str]]:
        """Return (access, refresh); (None, None) if missing or unreadable."""
        if not self.path.is_file():
            return None, None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable token file %s", self.path)
            return None, None
        if not isinstance(data, dict):
            return None, None
        return data.get("access") or None, data.get("refresh") or None

    def save(self, access: Optional[str], refresh: Optional[str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps({"access": access, "refresh": refresh}), encoding="utf-8"
        )

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


@dataclass
class Session:
    """
    Authentication state shared by an ApiClient and the services using it.

    Attributes
    ----------
    access_token:
        Bearer token attached to every request, if any.
    refresh_token:
        Token used to obtain a new access token after a 401.
    profile:
        Profile of the logged-in user, once loaded.
    store:
        Optional TokenStore the tokens are persisted to.
    """

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    profile: Optional[UserProfile] = None
    store: Optional[TokenStore] = field(default=None, repr=False)

    @classmethod
    def from_store(cls, store: TokenStore) -> "Session":
        """Create a session bound to ``store`` and pre-filled from it."""
        access, refresh = store.load()
        return cls(access_token=access, refresh_token=refresh, store=store)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    def set_tokens(self, access: str, refresh: Optional[str] = None) -> None:
        """Store a new access token (and refresh token when given)."""
        self.access_token = access
        if refresh is not None:
            self.refresh_token = refresh
        if self.store is not None:
            self.store.save(self.access_token, self.refresh_token)

    def clear(self) -> None:
        """Forget tokens and profile (logout or unrecoverable auth failure)."""
        self.access_token = None
        self.refresh_token = None
        self.profile = None
        if self.store is not None:
            self.store.clear()
