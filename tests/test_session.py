"""Tests for developer login and session reuse (src/konnect/session.py, client)."""

import json

import httpx
import pytest

from src.konnect.client import KonnectClient
from src.konnect.errors import InvalidCredentialsError, UpstreamError
from src.konnect.session import extract_session_cookie, resolve_credentials
from tests.conftest import PORTAL_ID

AUTH_PATH = "/api/v3/developer/authenticate"


class TestResolveCredentials:

    def test_explicit_credentials_win(self):
        creds = resolve_credentials("me@example.com", "pw", "default@example.com", "dpw")
        assert creds.username == "me@example.com"
        assert creds.password == "pw"

    def test_falls_back_to_defaults(self):
        creds = resolve_credentials(None, None, "default@example.com", "dpw")
        assert creds.username == "default@example.com"
        assert creds.password == "dpw"

    def test_missing_password_raises(self):
        with pytest.raises(InvalidCredentialsError, match="DEV_PORTAL_PASSWORD"):
            resolve_credentials("me@example.com", None)


class TestExtractSessionCookie:

    def test_finds_token_among_cookies(self):
        cookies = [
            "other=1; Path=/",
            "portalaccesstoken=ABC123; Path=/; HttpOnly; Secure",
        ]
        assert extract_session_cookie(cookies) == "portalaccesstoken=ABC123"

    def test_no_matching_cookie(self):
        assert extract_session_cookie(["session=abc; Path=/"]) is None

    def test_ignores_similarly_named_cookie(self):
        assert extract_session_cookie(["xportalaccesstoken=NOPE; Path=/"]) is None

    def test_empty_list(self):
        assert extract_session_cookie([]) is None


class TestAuthenticateDeveloper:

    async def test_cookie_reused_by_later_portal_calls(self, konnect_client, upstream):
        upstream.add_portals()
        upstream.add_portal(
            "POST", AUTH_PATH, status=204,
            headers=[("set-cookie", "portalaccesstoken=ABC123; Path=/; HttpOnly")],
        )
        upstream.add_portal("GET", "/api/v3/applications", json={"data": []})

        result = await konnect_client.authenticate_developer(PORTAL_ID, "dev@example.com", "pw")
        assert result == {"success": True}
        assert konnect_client.session_cookie(PORTAL_ID) == "portalaccesstoken=ABC123"

        await konnect_client.request(
            "/api/v3/applications", use_portal_context=True, portal_id=PORTAL_ID,
        )
        request = upstream.calls("GET", "/api/v3/applications")[0]
        assert request.headers["Cookie"] == "portalaccesstoken=ABC123"

    async def test_posts_credentials(self, konnect_client, upstream):
        upstream.add_portals()
        upstream.add_portal("POST", AUTH_PATH, status=204)
        await konnect_client.authenticate_developer(PORTAL_ID, "dev@example.com", "pw")
        login = upstream.calls("POST", AUTH_PATH)[0]
        assert json.loads(login.content) == {"username": "dev@example.com", "password": "pw"}
        assert "Authorization" not in login.headers

    async def test_no_cookie_still_succeeds_without_session(self, konnect_client, upstream):
        upstream.add_portals()
        upstream.add_portal("POST", AUTH_PATH, status=204,
                            headers=[("set-cookie", "tracking=1; Path=/")])
        result = await konnect_client.authenticate_developer(PORTAL_ID, "dev@example.com", "pw")
        assert result == {"success": True}
        assert konnect_client.session_cookie(PORTAL_ID) is None

    async def test_redirect_accepted_and_not_followed(self, konnect_client, upstream):
        upstream.add_portals()
        upstream.add_portal(
            "POST", AUTH_PATH, status=302,
            headers=[("location", "/welcome"), ("set-cookie", "portalaccesstoken=R1; Path=/")],
        )
        await konnect_client.authenticate_developer(PORTAL_ID, "dev@example.com", "pw")
        assert konnect_client.session_cookie(PORTAL_ID) == "portalaccesstoken=R1"
        assert [r.url.path for r in upstream.requests if r.url.path == "/welcome"] == []

    async def test_rejected_login_raises(self, konnect_client, upstream):
        upstream.add_portals()
        upstream.add_portal("POST", AUTH_PATH, status=401, json={"message": "Unauthorized"})
        with pytest.raises(UpstreamError, match="Status 401"):
            await konnect_client.authenticate_developer(PORTAL_ID, "dev@example.com", "bad")
        assert konnect_client.session_cookie(PORTAL_ID) is None

    async def test_missing_credentials_fail_before_network(self, konnect_client, upstream):
        with pytest.raises(InvalidCredentialsError):
            await konnect_client.authenticate_developer(PORTAL_ID)
        assert upstream.requests == []

    async def test_default_credentials_from_client(self, upstream):
        client = KonnectClient(
            access_token="t", region="eu",
            default_username="default@example.com", default_password="dpw",
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler)),
        )
        upstream.add_portals()
        upstream.add_portal("POST", AUTH_PATH, status=204)
        await client.authenticate_developer(PORTAL_ID)
        login = upstream.calls("POST", AUTH_PATH)[0]
        assert json.loads(login.content)["username"] == "default@example.com"
