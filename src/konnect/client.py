"""Konnect upstream client.

Every tool call goes through one KonnectClient. A call targets either the
organization admin API (bearer token) or a developer portal's own API
(session cookie). Portal base URLs and developer session cookies are cached
per portal on the client instance for the life of the process.
"""

from typing import Any

import httpx

from src.config.settings import Region, Settings
from src.konnect.errors import (
    DecodeError,
    MissingPortalIdError,
    NetworkError,
    PortalNotFoundError,
    RequestError,
    UpstreamError,
)
from src.konnect.models import Page, Portal, decode
from src.konnect.query import with_query
from src.konnect.session import (
    AUTHENTICATE_ENDPOINT,
    extract_session_cookie,
    resolve_credentials,
    session_cookie,
)
from src.logging.audit import RequestTimer, get_audit_logger, mask_secret

ADMIN_URL_TEMPLATE = "https://{region}.api.konghq.com/v2"
LEGACY_VERSION_SEGMENT = "/v2"
PORTAL_LIST_ENDPOINT = "/v3/portals"
PORTAL_LOOKUP_PAGE_SIZE = 1000


class KonnectClient:
    """Dispatches requests to the Konnect admin API or a developer portal API."""

    def __init__(
        self,
        access_token: str = "",
        region: Region | str = Region.US,
        default_username: str = "",
        default_password: str = "",
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._region = Region(region)
        self._admin_base_url = ADMIN_URL_TEMPLATE.format(region=self._region.value)
        self._access_token = access_token
        self._default_username = default_username
        self._default_password = default_password
        self._timeout = timeout
        self._client = http_client

        # portal id -> https://<canonical domain>
        self._portal_base_urls: dict[str, str] = {}
        # portal id -> "portalaccesstoken=<token>"
        self._session_cookies: dict[str, str] = {}

        if not access_token:
            get_audit_logger().warning(
                "KONNECT_ACCESS_TOKEN not set, admin API calls will fail",
                extra={"audit_data": {"region": self._region.value}},
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> "KonnectClient":
        return cls(
            access_token=settings.konnect_access_token,
            region=settings.konnect_region,
            default_username=settings.dev_portal_user,
            default_password=settings.dev_portal_password,
            timeout=settings.request_timeout_seconds,
        )

    @property
    def region(self) -> Region:
        return self._region

    @property
    def admin_base_url(self) -> str:
        return self._admin_base_url

    def cached_portal_base_url(self, portal_id: str) -> str | None:
        return self._portal_base_urls.get(portal_id)

    def session_cookie(self, portal_id: str) -> str | None:
        return self._session_cookies.get(portal_id)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout, connect=10.0)
            )
        return self._client

    def _admin_url(self, endpoint: str) -> str:
        base_url = self._admin_base_url
        # v3 endpoints live at the host root, not under /v2
        if endpoint.startswith("/v3") and base_url.endswith(LEGACY_VERSION_SEGMENT):
            base_url = base_url[: -len(LEGACY_VERSION_SEGMENT)]
        return f"{base_url}{endpoint}"

    def _portal_cookie(self, portal_id: str, session_token: str | None) -> str | None:
        if session_token:
            return session_cookie(session_token)
        cached = self._session_cookies.get(portal_id)
        if cached:
            get_audit_logger().debug(
                "Using stored session cookie",
                extra={"audit_data": {"portal_id": portal_id}},
            )
        return cached

    async def resolve_portal_base_url(self, portal_id: str) -> str:
        """Return ``https://<canonical_domain>`` for a portal, memoized per portal.

        Raises:
            PortalNotFoundError: No portal with this id in the admin listing.
        """
        cached = self._portal_base_urls.get(portal_id)
        if cached is not None:
            return cached

        payload = await self.request(
            with_query(PORTAL_LIST_ENDPOINT, [("page[size]", PORTAL_LOOKUP_PAGE_SIZE)])
        )
        page = decode(Page[Portal], payload, "portal list")

        portal = next((p for p in page.data if p.id == portal_id), None)
        if portal is None:
            raise PortalNotFoundError(portal_id)
        if not portal.canonical_domain:
            raise DecodeError(f"Portal {portal_id} has no canonical_domain")

        base_url = f"https://{portal.canonical_domain}"
        self._portal_base_urls[portal_id] = base_url
        get_audit_logger().info(
            "Resolved portal base URL",
            extra={"audit_data": {"portal_id": portal_id, "base_url": base_url}},
        )
        return base_url

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        use_portal_context: bool = False,
        portal_id: str | None = None,
        session_token: str | None = None,
    ) -> Any:
        """Send a request and return the parsed JSON body.

        Args:
            endpoint: Path plus query string, e.g. ``/api/v3/apis?page[size]=10``.
            method: HTTP method.
            body: JSON body, omitted when None.
            use_portal_context: Target the portal API instead of the admin API.
            portal_id: Portal to target when use_portal_context is set.
            session_token: Raw portal access token overriding any cached session.

        Returns:
            The decoded JSON body, or ``{"success": True}`` for 204 responses.
        """
        headers = {"Content-Type": "application/json", "Accept": "application/json"}

        if use_portal_context:
            if not portal_id:
                raise MissingPortalIdError(f"{method} {endpoint}")
            base_url = await self.resolve_portal_base_url(portal_id)
            url = f"{base_url}{endpoint}"
            cookie = self._portal_cookie(portal_id, session_token)
            if cookie:
                headers["Cookie"] = cookie
        else:
            url = self._admin_url(endpoint)
            headers["Authorization"] = f"Bearer {self._access_token}"

        response = await self._send(method, url, headers=headers, json=body)

        if response.status_code == 204:
            return {"success": True}
        if not response.is_success:
            raise UpstreamError(response.status_code, _error_body(response))
        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"Kong API returned invalid JSON for {method} {url}") from e

    async def authenticate_developer(
        self,
        portal_id: str,
        username: str | None = None,
        password: str | None = None,
    ) -> dict:
        """Log a developer into a portal and cache the session cookie.

        The login endpoint answers with an empty body and a Set-Cookie header,
        so this bypasses request(). A login accepted without a usable cookie
        still succeeds; later portal calls then go out unauthenticated.
        """
        if not portal_id:
            raise MissingPortalIdError("authenticate_developer_portal")
        credentials = resolve_credentials(
            username, password, self._default_username, self._default_password
        )

        base_url = await self.resolve_portal_base_url(portal_id)
        response = await self._send(
            "POST",
            f"{base_url}{AUTHENTICATE_ENDPOINT}",
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            json={"username": credentials.username, "password": credentials.password},
            follow_redirects=False,
        )
        if not 200 <= response.status_code < 400:
            raise UpstreamError(response.status_code, _error_body(response))

        logger = get_audit_logger()
        cookie = extract_session_cookie(response.headers.get_list("set-cookie"))
        if cookie is None:
            logger.warning(
                "Login accepted without a session cookie",
                extra={"audit_data": {"portal_id": portal_id, "status": response.status_code}},
            )
        else:
            self._session_cookies[portal_id] = cookie
            logger.info(
                "Developer session stored",
                extra={"audit_data": {"portal_id": portal_id, "cookie": mask_secret(cookie, 22)}},
            )
        return {"success": True}

    async def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        json: Any = None,
        follow_redirects: bool = True,
    ) -> httpx.Response:
        logger = get_audit_logger()
        client = await self._get_client()
        try:
            with RequestTimer() as timer:
                response = await client.request(
                    method,
                    url,
                    headers=headers,
                    json=json,
                    follow_redirects=follow_redirects,
                )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise RequestError(str(e)) from e
        except httpx.TransportError as e:
            logger.error(
                "Kong API unreachable",
                extra={"audit_data": {"method": method, "url": url, "error": str(e)}},
            )
            raise NetworkError(str(e)) from e
        except httpx.HTTPError as e:
            raise RequestError(str(e)) from e

        logger.info(
            "Upstream request",
            extra={"audit_data": {
                "method": method,
                "url": url,
                "upstream_status": response.status_code,
                "latency_ms": timer.elapsed_ms,
            }},
        )
        return response

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None


def _error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text
