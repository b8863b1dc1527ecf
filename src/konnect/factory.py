"""Process-wide KonnectClient built from settings."""

from src.config.settings import get_settings
from src.konnect.client import KonnectClient

_client: KonnectClient | None = None


def get_konnect_client() -> KonnectClient:
    """Get or create the shared client."""
    global _client
    if _client is None:
        _client = KonnectClient.from_settings(get_settings())
    return _client


async def close_konnect_client() -> None:
    """Close the shared client's connections on shutdown."""
    global _client
    if _client is not None:
        await _client.close()
        _client = None
