import json

import httpx
import pytest

from homefin.api import ApiClient
from homefin.config import ApiConfig
from homefin.services import Services
from homefin.session import Session

BASE_URL = "http://backend.test/api/v1"
PREFIX = "/api/v1"


class FakeBackend:
    """Minimal in-memory backend for httpx.MockTransport.

    Routes are registered per (method, path) where ``path`` is relative to
    the API prefix (e.g. "/wallets/"). Unknown routes answer 404.
    """

    def __init__(self):
        self.routes = {}
        self.requests: list[httpx.Request] = []

    def add(self, method, path, status=200, json_body=None, handler=None):
        if handler is None:

            def handler(request, status=status, json_body=json_body):
                if json_body is None:
                    return httpx.Response(status)
                return httpx.Response(status, json=json_body)

        self.routes[(method, path)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path[len(PREFIX) :]
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"detail": "Not found."})
        return route(request)

    def calls(self, method, path):
        return [
            r
            for r in self.requests
            if r.method == method and r.url.path[len(PREFIX) :] == path
        ]

    @staticmethod
    def body(request: httpx.Request):
        return json.loads(request.content) if request.content else None


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def session():
    return Session(access_token="access-1", refresh_token="refresh-1")


@pytest.fixture
async def client(backend, session):
    api = ApiClient(
        ApiConfig(base_url=BASE_URL),
        session,
        transport=httpx.MockTransport(backend),
    )
    yield api
    await api.aclose()


@pytest.fixture
def services(client):
    return Services.for_client(client)
