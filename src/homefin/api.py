# HomeFin - Personal & Family Finance Dashboard client
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Async HTTP client for the HomeFin backend.

``ApiClient`` is the single place where HTTP happens. It:

- prefixes every path with the configured base URL,
- attaches ``Authorization: Bearer <access token>`` from the Session,
- on a 401 response, refreshes the access token once (``POST
  /auth/refresh/``) and retries the original request once,
- clears the session and raises ``AuthenticationError`` when the refresh is
  impossible or fails, or when the retried request is rejected again,
- raises ``ApiError`` for every other non-2xx response, and for network
  failures (status code 0),
- returns decoded JSON bodies (None for empty bodies).

Ordinary requests are never retried. Concurrent requests that hit a 401 at
the same time share a single refresh: the refresh runs under a lock and a
request whose token was already replaced simply retries with the new one.
"""

import asyncio
import json
import logging
from typing import Any, Optional

import httpx

from .config import ApiConfig
from .errors import ApiError, AuthenticationError
from .session import Session

logger = logging.getLogger(__name__)

REFRESH_PATH = "/auth/refresh/"


def _error_detail(response: httpx.Response) -> str:
    """Extract a readable error message from an error response."""
    try:
        data = response.json()
    except ValueError:
        return response.text.strip()

    if isinstance(data, dict):
        detail = data.get("detail")
        if detail:
            return str(detail)
        return json.dumps(data, ensure_ascii=False)
    return str(data)


class ApiClient:
    """
    Thin async wrapper around the backend REST API.

    Parameters
    ----------
    config:
        Base URL and timeout.
    session:
        Session providing (and receiving refreshed) tokens.
    transport:
        Optional httpx transport, used by tests to fake the backend.
    """

    def __init__(
        self,
        config: ApiConfig,
        session: Session,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.session = session
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            transport=transport,
        )
        self._refresh_lock = asyncio.Lock()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    # -- low level ----------------------------------------------------------

    async def _send(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json_body: Any = None,
        authenticated: bool = True,
    ) -> httpx.Response:
        headers = {}
        if authenticated and self.session.access_token:
            headers["Authorization"] = f"Bearer {self.session.access_token}"

        logger.debug("%s %s%s", method, self.config.base_url, path)
        try:
            return await self._client.request(
                method, path, params=params, json=json_body, headers=headers
            )
        except httpx.HTTPError as exc:
            raise ApiError(0, f"Request to {path} failed: {exc}") from exc

    async def _refresh_access_token(self, stale_token: Optional[str]) -> None:
        """
        Obtain a new access token with the refresh token.

        ``stale_token`` is the access token the rejected request was sent
        with. If the session already holds a different token, another
        request refreshed it in the meantime and nothing is done.
        """
        async with self._refresh_lock:
            current = self.session.access_token
            if current and current != stale_token:
                return

            refresh = self.session.refresh_token
            if not refresh:
                self.session.clear()
                raise AuthenticationError()

            logger.info("Access token rejected, refreshing")
            try:
                response = await self._send(
                    "POST",
                    REFRESH_PATH,
                    json_body={"refresh": refresh},
                    authenticated=False,
                )
            except ApiError as exc:
                logger.info("Token refresh failed: %s", exc.detail)
                self.session.clear()
                raise AuthenticationError() from exc
            access = None
            if response.is_success:
                try:
                    data = response.json()
                except ValueError:
                    data = None
                if isinstance(data, dict):
                    access = data.get("access")

            if not access:
                logger.info("Token refresh failed (HTTP %s)", response.status_code)
                self.session.clear()
                raise AuthenticationError()

            self.session.set_tokens(access, data.get("refresh"))

    # -- public API ---------------------------------------------------------

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json_body: Any = None,
        authenticated: bool = True,
    ) -> Any:
        """
        Send a request and return the decoded JSON body.

        Anonymous requests (``authenticated=False``, used by the token
        endpoints) carry no Authorization header and a 401 answer is
        reported as a plain ApiError, without refresh.

        Raises
        ------
        AuthenticationError
            If the request is rejected with 401 and the session cannot be
            refreshed. The session is cleared.
        ApiError
            For any other non-successful response or network failure.
        """
        sent_token = self.session.access_token
        response = await self._send(
            method,
            path,
            params=params,
            json_body=json_body,
            authenticated=authenticated,
        )

        if authenticated and response.status_code == 401:
            await self._refresh_access_token(sent_token)
            response = await self._send(
                method, path, params=params, json_body=json_body
            )
            if response.status_code == 401:
                self.session.clear()
                raise AuthenticationError()

        if response.is_error:
            raise ApiError(response.status_code, _error_detail(response))

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(
                response.status_code, f"Invalid JSON response from {path}"
            ) from exc

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(
        self, path: str, json_body: Any = None, authenticated: bool = True
    ) -> Any:
        return await self.request(
            "POST", path, json_body=json_body, authenticated=authenticated
        )

    async def put(self, path: str, json_body: Any = None) -> Any:
        return await self.request("PUT", path, json_body=json_body)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)
