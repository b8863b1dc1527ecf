"""Tests for src/konnect/models.py: boundary decoding."""

import pytest

from src.konnect.errors import DecodeError
from src.konnect.models import Page, Portal, Registration, Specification, decode


class TestDecode:

    def test_ignores_unknown_fields(self):
        portal = decode(Portal, {"id": "p", "canonical_domain": "x.example.com", "extra": 1},
                        "portal")
        assert portal.canonical_domain == "x.example.com"

    def test_missing_data_array(self):
        with pytest.raises(DecodeError, match="portal list"):
            decode(Page[Portal], {"meta": {}}, "portal list")

    def test_non_object_payload(self):
        with pytest.raises(DecodeError):
            decode(Page[Portal], ["not", "a", "page"], "portal list")

    def test_nested_reference_required(self):
        with pytest.raises(DecodeError, match="application"):
            decode(Registration, {"id": "r", "api": {"id": "a"}}, "subscription")

    def test_specification_type_aliases(self):
        assert decode(Specification, {"id": "s", "api_type": "oas3"}, "spec").api_type == "oas3"
        assert decode(Specification, {"id": "s", "type": "asyncapi"}, "spec").api_type == "asyncapi"

    def test_page_meta_defaults(self):
        page = decode(Page[Portal], {"data": []}, "portal list")
        assert page.meta.page_count is None
        assert page.meta.total_count is None
