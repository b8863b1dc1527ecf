"""API key authentication for the HTTP tool surface.

Validates the X-API-Key header against the comma-separated GATEWAY_API_KEYS.
With no keys configured every key is rejected.
"""

import hmac

from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader

from src.config.settings import get_settings

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(api_key: str | None = Security(api_key_header)) -> str:
    """FastAPI dependency returning a log-safe caller id for a valid key."""
    if api_key is None:
        raise HTTPException(status_code=401, detail="Missing API key")

    match: str | None = None
    for valid_key in get_settings().api_keys_list:
        # Compare against every key to keep timing independent of position
        if hmac.compare_digest(api_key, valid_key):
            match = valid_key

    if match is None:
        raise HTTPException(status_code=403, detail="Invalid API key")
    return f"key-{match[:8]}"
