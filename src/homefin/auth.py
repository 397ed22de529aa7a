# HomeFin - Personal & Family Finance Dashboard client
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Authentication for HomeFin.

``AuthService`` talks to the token and profile endpoints and keeps the
Session up to date:

- ``login``          POST /auth/token/     -> access + refresh tokens
- ``refresh_token``  POST /auth/refresh/   -> new access token
- ``logout``         POST /auth/logout/    (best effort, tokens always cleared)
- ``get_profile``    GET  /profile/        (list or single object)
- ``update_profile`` PUT  /profile/{id}/

``AuthState`` wraps the service for interactive front-ends: it exposes
whether the user is logged in, whether an action is in progress and the
last error message to display.
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional

from .api import ApiClient
from .errors import ApiError, AuthenticationError, HomeFinError
from .models import UserProfile
from .session import Session

logger = logging.getLogger(__name__)

TOKEN_PATH = "/auth/token/"
REFRESH_PATH = "/auth/refresh/"
LOGOUT_PATH = "/auth/logout/"
PROFILE_PATH = "/profile/"


class AuthService:
    """Login, logout, token refresh and profile operations."""

    def __init__(self, client: ApiClient):
        self.client = client

    @property
    def session(self) -> Session:
        return self.client.session

    async def login(self, username: str, password: str) -> Session:
        """
        Obtain a token pair and store it in the session.

        Raises
        ------
        ApiError
            If the credentials are rejected (``detail`` holds the reason).
        """
        data = await self.client.post(
            TOKEN_PATH,
            json_body={"username": username, "password": password},
            authenticated=False,
        )
        access = data.get("access") if isinstance(data, Mapping) else None
        if not access:
            raise ApiError(0, "Login response did not contain an access token")

        self.session.set_tokens(access, data.get("refresh"))
        logger.info("Logged in as %s", username)
        return self.session

    async def refresh_token(self, refresh: Optional[str] = None) -> str:
        """Exchange a refresh token (default: the session's) for an access token."""
        refresh = refresh or self.session.refresh_token
        if not refresh:
            raise AuthenticationError()

        data = await self.client.post(
            REFRESH_PATH, json_body={"refresh": refresh}, authenticated=False
        )
        access = data.get("access") if isinstance(data, Mapping) else None
        if not access:
            raise AuthenticationError()
        self.session.set_tokens(access, data.get("refresh") or refresh)
        return access

    async def logout(self) -> None:
        """Tell the backend to revoke the tokens, then clear the session."""
        try:
            if self.session.is_authenticated:
                await self.client.post(
                    LOGOUT_PATH, json_body={"refresh": self.session.refresh_token}
                )
        except HomeFinError as exc:
            logger.warning("Logout request failed: %s", exc)
        finally:
            self.session.clear()
            logger.info("Logged out")

    async def get_profile(self) -> UserProfile:
        """
        Fetch the profile of the logged-in user.

        The endpoint returns either the profile object or a one-element list.
        """
        data = await self.client.get(PROFILE_PATH)
        if isinstance(data, list):
            data = data[0] if data else None
        if not isinstance(data, Mapping):
            raise ApiError(404, "No profile returned by the backend")

        profile = UserProfile.from_api(data)
        self.session.profile = profile
        return profile

    async def update_profile(self, data: Mapping[str, Any]) -> UserProfile:
        """
        Update the profile of the logged-in user.

        When ``data`` has no ``id``, the id of the current profile is used
        (fetched first if the session does not hold it yet).
        """
        payload = dict(data)
        if not payload.get("id"):
            current = self.session.profile or await self.get_profile()
            payload["id"] = current.id

        response = await self.client.put(
            f"{PROFILE_PATH}{payload['id']}/", json_body=payload
        )
        profile = UserProfile.from_api(
            response if isinstance(response, Mapping) else payload
        )
        self.session.profile = profile
        return profile


class AuthState:
    """
    Observable authentication state for interactive front-ends.

    Attributes
    ----------
    is_loading:
        True while an action is awaiting the backend.
    error:
        Message of the last failed action, None after a success.
    """

    def __init__(self, auth: AuthService):
        self.auth = auth
        self.is_loading = False
        self.error: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.auth.session.is_authenticated

    @property
    def user(self) -> Optional[UserProfile]:
        return self.auth.session.profile

    async def login(self, username: str, password: str) -> None:
        """Log in and load the profile.

        On failure ``error`` is set and the exception re-raised.
        """
        self.is_loading = True
        self.error = None
        try:
            await self.auth.login(username, password)
        except ApiError as exc:
            self.error = exc.detail or "Login failed"
            raise
        finally:
            self.is_loading = False
        await self.load_profile()

    async def logout(self) -> None:
        self.is_loading = True
        try:
            await self.auth.logout()
        finally:
            self.is_loading = False
            self.error = None

    async def load_profile(self) -> Optional[UserProfile]:
        """
        Load the user profile into the session.

        A rejected session (401) is cleared; other failures only set
        ``error``. Returns the profile, or None when it could not be loaded.
        """
        self.is_loading = True
        try:
            return await self.auth.get_profile()
        except ApiError as exc:
            if exc.status_code == 401:
                self.auth.session.clear()
                self.error = None
            else:
                self.error = "Failed to load profile"
            logger.warning("Could not load profile: %s", exc)
            return None
        finally:
            self.is_loading = False
