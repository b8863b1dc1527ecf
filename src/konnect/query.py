"""Query-string construction for Konnect list endpoints.

Konnect filters and pagination use bracketed keys (``page[size]``,
``filter[name][contains]``). Keys are emitted verbatim and in the order given;
values are percent-encoded. Parameters whose value is None are skipped.
"""

from typing import Any
from urllib.parse import quote


def format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return quote(str(value), safe="")


def build_query(params: list[tuple[str, Any]]) -> str:
    return "&".join(
        f"{key}={format_value(value)}" for key, value in params if value is not None
    )


def with_query(path: str, params: list[tuple[str, Any]]) -> str:
    query = build_query(params)
    return f"{path}?{query}" if query else path


def path_segment(value: Any) -> str:
    """Encode an identifier for use as a single URL path segment."""
    return quote(str(value), safe="")
