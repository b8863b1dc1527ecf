"""Integration tests for src/main.py: HTTP tool surface via ASGI transport."""

import httpx
import pytest

import src.konnect.factory as factory_mod
from src.konnect.factory import get_konnect_client
from src.main import app


@pytest.fixture
def app_client(override_settings, konnect_client):
    """httpx AsyncClient wired to the FastAPI app with a scripted Konnect upstream."""
    override_settings(GATEWAY_API_KEYS="gw-test-key")
    app.dependency_overrides[get_konnect_client] = lambda: konnect_client
    transport = httpx.ASGITransport(app=app)
    yield httpx.AsyncClient(transport=transport, base_url="http://test")
    app.dependency_overrides.clear()


HEADERS = {"X-API-Key": "gw-test-key"}


class TestHealthEndpoint:

    async def test_health(self, app_client):
        resp = await app_client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"


class TestToolsEndpoints:

    async def test_requires_api_key(self, app_client):
        resp = await app_client.post("/v1/tools/list_portals", json={})
        assert resp.status_code == 401

    async def test_rejects_wrong_key(self, app_client):
        resp = await app_client.get("/v1/tools", headers={"X-API-Key": "nope"})
        assert resp.status_code == 403

    async def test_lists_tools(self, app_client):
        resp = await app_client.get("/v1/tools", headers=HEADERS)
        assert resp.status_code == 200
        methods = {tool["method"] for tool in resp.json()["tools"]}
        assert "subscribe_to_api" in methods

    async def test_invoke_tool(self, app_client, upstream):
        upstream.add_portals()
        resp = await app_client.post(
            "/v1/tools/list_portals", json={"pageSize": 5}, headers=HEADERS,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["isError"] is False
        assert '"pageSize": 5' in body["content"][0]["text"]
        assert len(resp.headers["X-Request-Id"]) == 12

    async def test_tool_error_reported_in_body(self, app_client):
        resp = await app_client.post("/v1/tools/unknown_tool", json={}, headers=HEADERS)
        assert resp.status_code == 200
        assert resp.json()["isError"] is True


class TestClientFactory:

    def test_singleton(self, override_settings, monkeypatch):
        monkeypatch.setattr(factory_mod, "_client", None)
        override_settings(KONNECT_ACCESS_TOKEN="kpat_x", KONNECT_REGION="au")
        first = factory_mod.get_konnect_client()
        assert first is factory_mod.get_konnect_client()
        assert first.admin_base_url == "https://au.api.konghq.com/v2"

    async def test_close_resets(self, monkeypatch, konnect_client):
        monkeypatch.setattr(factory_mod, "_client", konnect_client)
        await factory_mod.close_konnect_client()
        assert factory_mod._client is None
