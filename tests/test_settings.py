"""Tests for src/config/settings.py: Settings and api_keys_list."""

import pytest
from pydantic import ValidationError

from src.config.settings import Region, get_settings


class TestSettings:

    def test_defaults(self, override_settings, monkeypatch):
        for name in ("KONNECT_ACCESS_TOKEN", "KONNECT_REGION", "DEV_PORTAL_USER"):
            monkeypatch.delenv(name, raising=False)
        override_settings()
        s = get_settings()
        assert s.konnect_region == Region.US
        assert s.konnect_access_token == ""
        assert s.request_timeout_seconds == 30.0
        assert s.log_level == "INFO"

    def test_env_override(self, override_settings):
        override_settings(
            KONNECT_ACCESS_TOKEN="kpat_abc",
            KONNECT_REGION="me",
            DEV_PORTAL_USER="dev@example.com",
            DEV_PORTAL_PASSWORD="pw",
        )
        s = get_settings()
        assert s.konnect_access_token == "kpat_abc"
        assert s.konnect_region == Region.ME
        assert s.dev_portal_user == "dev@example.com"
        assert s.dev_portal_password == "pw"

    def test_invalid_region(self, override_settings):
        override_settings(KONNECT_REGION="mars")
        with pytest.raises(ValidationError):
            get_settings()

    def test_api_keys_list_strips_empty(self, override_settings):
        override_settings(GATEWAY_API_KEYS="k1,, k2 ,")
        assert get_settings().api_keys_list == ["k1", "k2"]
