import os

# Settings are read at import time
os.environ.setdefault("OTEL_ENABLED", "false")

from typing import Any, Callable

import httpx
import pytest
import pytest_asyncio

from gateway.api.dependencies import get_api_repository, get_credential_decryptor, get_http_client
from gateway.core.config import ENCRYPTED_FIELDS, iv_name, key_name
from gateway.core.crypto import CredentialDecryptor
from gateway.main import app
from gateway.models.api import Api
from gateway.services.http_client import HubHttpClient


TEST_KEY = "0123456789abcdef0123456789abcdef"
TEST_IV = "abcdef9876543210"


class FakeApiRepository:
    """Stands in for ApiRepository; returns fixed descriptors and records the filters it saw."""

    def __init__(self, apis: list[Api], error: Exception | None = None):
        self.apis = apis
        self.error = error
        self.filter_maps: list[Any] = []

    async def find_apis(self, filter_map):
        self.filter_maps.append(filter_map)
        if self.error:
            raise self.error
        return list(self.apis)


class RecordingHandler:
    """MockTransport handler: routes by host, keeps every request it served."""

    def __init__(self, routes: dict[str, Callable[[httpx.Request], httpx.Response]] | None = None):
        self.routes = dict(routes or {})
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.host)
        if route is None:
            return httpx.Response(200, json={"host": request.url.host, "path": request.url.path})
        return route(request)

    def for_host(self, host: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]


@pytest.fixture
def keyring() -> dict[str, str]:
    ring: dict[str, str] = {}
    for field in ENCRYPTED_FIELDS:
        ring[key_name(field)] = TEST_KEY
        ring[iv_name(field)] = TEST_IV
    return ring


@pytest.fixture
def decryptor(keyring) -> CredentialDecryptor:
    return CredentialDecryptor(keyring)


@pytest.fixture
def make_api():
    counter = {"id": 0}

    def _make(name: str, **fields: Any) -> Api:
        counter["id"] += 1
        fields.setdefault("id", counter["id"])
        fields.setdefault("url", f"https://{name}.test/v1/data")
        fields.setdefault("method_type", "GET")
        fields.setdefault("response_type", "json")
        fields.setdefault("is_api_active", True)
        return Api(name=name, **fields)

    return _make


@pytest.fixture
def fake_repository():
    return FakeApiRepository


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def http_client(handler) -> HubHttpClient:
    return HubHttpClient(transport=httpx.MockTransport(handler))


@pytest_asyncio.fixture
async def api_client(decryptor, http_client):
    """
    HTTP client against the app with outbound calls, decryption and the
    descriptor store swapped for test doubles; tests put their
    repository in `api_client.state["repository"]`.
    """
    state: dict[str, Any] = {"repository": FakeApiRepository([])}

    app.dependency_overrides[get_api_repository] = lambda: state["repository"]
    app.dependency_overrides[get_credential_decryptor] = lambda: decryptor
    app.dependency_overrides[get_http_client] = lambda: http_client

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        ac.state = state
        yield ac

    app.dependency_overrides.clear()
    await http_client.aclose()
