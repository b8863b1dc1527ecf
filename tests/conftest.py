"""Shared fixtures for the Konnect Portal Gateway test suite."""

import httpx
import pytest

from src.config.settings import get_settings
from src.konnect.client import KonnectClient

ADMIN_HOST = "eu.api.konghq.com"
PORTAL_ID = "portal-1"
PORTAL_HOST = "dev.example.com"

PORTALS_PAYLOAD = {
    "data": [
        {
            "id": "portal-0",
            "name": "Internal",
            "description": "Internal portal",
            "canonical_domain": "internal.example.com",
            "created_at": "2024-01-01T00:00:00Z",
            "updated_at": "2024-01-02T00:00:00Z",
        },
        {
            "id": PORTAL_ID,
            "name": "Public",
            "description": "Public developer portal",
            "active": True,
            "canonical_domain": PORTAL_HOST,
            "created_at": "2024-02-01T00:00:00Z",
            "updated_at": "2024-02-02T00:00:00Z",
        },
    ],
    "meta": {"page_count": 1, "total_count": 2},
}


class Upstream:
    """Scripted Konnect upstream served through httpx.MockTransport.

    Routes are keyed by (method, host, path); the query string is ignored.
    Every request is recorded for assertions.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str, str], httpx.Response | Exception] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, host: str, path: str, status: int = 200,
            json=None, headers=None, text: str | None = None) -> None:
        if text is not None:
            response = httpx.Response(status, text=text, headers=headers)
        elif json is not None:
            response = httpx.Response(status, json=json, headers=headers)
        else:
            response = httpx.Response(status, headers=headers)
        self.routes[(method, host, path)] = response

    def fail(self, method: str, host: str, path: str, error: Exception) -> None:
        self.routes[(method, host, path)] = error

    def add_portals(self, payload: dict = PORTALS_PAYLOAD) -> None:
        self.add("GET", ADMIN_HOST, "/v3/portals", json=payload)

    def add_portal(self, method: str, path: str, **kwargs) -> None:
        self.add(method, PORTAL_HOST, path, **kwargs)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.host, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": f"no route for {request.url.path}"})
        if isinstance(route, Exception):
            raise route
        return httpx.Response(
            route.status_code, headers=route.headers, content=route.content
        )

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]


@pytest.fixture
def upstream() -> Upstream:
    return Upstream()


@pytest.fixture
def konnect_client(upstream) -> KonnectClient:
    """A client wired to the scripted upstream, in the EU region."""
    return KonnectClient(
        access_token="kpat_test_token",
        region="eu",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler)),
    )


@pytest.fixture
def override_settings(monkeypatch):
    """Factory fixture: set env vars and clear settings cache.

    Usage:
        override_settings(KONNECT_REGION="eu", DEV_PORTAL_USER="dev@example.com")
    """
    def _override(**kwargs):
        for key, value in kwargs.items():
            monkeypatch.setenv(key.upper(), str(value))
        # Clear lru_cache so Settings re-reads env
        get_settings.cache_clear()

    yield _override

    get_settings.cache_clear()
