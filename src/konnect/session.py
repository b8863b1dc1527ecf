"""Developer portal session helpers.

A developer logs in with username/password against a portal; the portal
answers with a ``portalaccesstoken`` cookie that authenticates later
portal-scoped calls.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass

from src.konnect.errors import InvalidCredentialsError

SESSION_COOKIE_NAME = "portalaccesstoken"
AUTHENTICATE_ENDPOINT = "/api/v3/developer/authenticate"

_TOKEN_PATTERN = re.compile(rf"(?:^|;)\s*{SESSION_COOKIE_NAME}=([^;]+)")


@dataclass
class DeveloperCredentials:
    username: str
    password: str


def resolve_credentials(
    username: str | None,
    password: str | None,
    default_username: str = "",
    default_password: str = "",
) -> DeveloperCredentials:
    """Pick explicit credentials first, then the configured defaults."""
    resolved_username = username or default_username
    resolved_password = password or default_password
    if not resolved_username or not resolved_password:
        raise InvalidCredentialsError(
            "Developer credentials not provided and not found in environment "
            "variables (DEV_PORTAL_USER, DEV_PORTAL_PASSWORD)"
        )
    return DeveloperCredentials(username=resolved_username, password=resolved_password)


def session_cookie(token: str) -> str:
    return f"{SESSION_COOKIE_NAME}={token}"


def extract_session_cookie(set_cookie_values: Iterable[str]) -> str | None:
    """Return ``portalaccesstoken=<token>`` from the first matching Set-Cookie value."""
    for value in set_cookie_values:
        match = _TOKEN_PATTERN.search(value)
        if match and match.group(1).strip():
            return session_cookie(match.group(1).strip())
    return None
