import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from survey_builder.core.config import settings
from survey_builder.core.dependencies import get_backend_client, get_handoff_slot, get_registry
from survey_builder.main import app as fastapi_app
from survey_builder.services.drafts import BackendClient, HandoffSlot, SessionRegistry

# Enable debug mode for tests
settings.DEBUG = True

BACKEND_URL = "http://backend.test/api"

# ---------------------------------------------------------------------------
# Fake survey backend: httpx.MockTransport, no network needed
# ---------------------------------------------------------------------------

Handler = Callable[[httpx.Request], httpx.Response] | tuple[int, Any]


class FakeBackend:
    """Routes requests by (method, path) and records every request it sees.

    A route is either ``(status_code, json_body)`` or a callable taking the
    request and returning an ``httpx.Response``. Unknown routes answer 404.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], Handler] = {}

    def on(self, method: str, path: str, handler: Handler) -> None:
        self._routes[(method, f"/api{path}")] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self._routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": "Not found"})
        if callable(handler):
            return handler(request)
        status_code, body = handler
        return httpx.Response(status_code, json=body)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == f"/api{path}"]

    @staticmethod
    def body(request: httpx.Request) -> dict[str, Any]:
        return json.loads(request.content)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def backend_client(backend):
    return BackendClient(BACKEND_URL, transport=httpx.MockTransport(backend.handle))


@pytest.fixture
def handoff_slot(tmp_path):
    return HandoffSlot(tmp_path / "handoff")


@pytest.fixture
def registry(backend_client):
    return SessionRegistry(backend_client)


@pytest.fixture
def client(backend_client, registry, handoff_slot):
    """TestClient with the backend client, registry and handoff slot overridden."""
    fastapi_app.dependency_overrides[get_backend_client] = lambda: backend_client
    fastapi_app.dependency_overrides[get_registry] = lambda: registry
    fastapi_app.dependency_overrides[get_handoff_slot] = lambda: handoff_slot
    yield TestClient(fastapi_app)
    fastapi_app.dependency_overrides.clear()
