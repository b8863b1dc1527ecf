"""Application settings loaded from environment variables."""

from enum import Enum
from functools import lru_cache

from pydantic_settings import BaseSettings


class Region(str, Enum):
    """Konnect API regions, each served from its own admin host."""

    US = "us"
    EU = "eu"
    AU = "au"
    ME = "me"
    IN = "in"


class Settings(BaseSettings):
    # Konnect admin API
    konnect_access_token: str = ""
    konnect_region: Region = Region.US
    request_timeout_seconds: float = 30.0

    # Default developer credentials for portal login
    dev_portal_user: str = ""
    dev_portal_password: str = ""

    # HTTP tool surface authentication
    # Comma-separated list of keys accepted in X-API-Key
    gateway_api_keys: str = ""

    # Logging
    log_level: str = "INFO"
    audit_log_file: str = ""  # Empty = stream only

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def api_keys_list(self) -> list[str]:
        return [k.strip() for k in self.gateway_api_keys.split(",") if k.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
