"""Error types raised by the Konnect client and operation handlers."""

import json
from typing import Any

MAX_TEXT_DETAIL = 200


class KonnectError(Exception):
    """Base class for every failure surfaced to a tool caller."""


class ConfigurationError(KonnectError):
    pass


class InvalidCredentialsError(ConfigurationError):
    pass


class MissingPortalIdError(ConfigurationError):
    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(
            f"portalId is required for {operation}. "
            "Use the list_portals tool to find the ID of the developer portal to target."
        )


class PortalNotFoundError(KonnectError):
    def __init__(self, portal_id: str):
        self.portal_id = portal_id
        super().__init__(f"Portal with ID {portal_id} not found")


class UpstreamError(KonnectError):
    """Konnect answered with a non-2xx status."""

    def __init__(self, status_code: int, body: Any = None):
        self.status_code = status_code
        self.body = body
        super().__init__(format_upstream_message(status_code, body))


class NetworkError(KonnectError):
    def __init__(self, reason: str = ""):
        self.reason = reason
        super().__init__(
            "Network Error: No response received from Kong API. Please check your "
            "network connection and API endpoint configuration."
        )


class RequestError(KonnectError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(
            f"Request Error: {reason}. Please check your request parameters and try again."
        )


class DecodeError(KonnectError):
    """Upstream payload did not have the expected shape."""


class UnknownToolError(KonnectError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool method: {name}")


def format_upstream_message(status_code: int, body: Any) -> str:
    message = f"API Error (Status {status_code})"
    if isinstance(body, dict):
        detail = body.get("message") or json.dumps(body)
        message += f": {detail}"
    elif isinstance(body, list):
        message += f": {json.dumps(body)}"
    elif isinstance(body, str) and body:
        message += f": {body[:MAX_TEXT_DETAIL]}"
    return message
