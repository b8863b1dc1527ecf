"""Decoded shapes of the Konnect payloads the gateway consumes.

Only the fields the operation handlers read are declared. Unknown fields are
ignored; a missing required field fails decoding with DecodeError instead of
leaking None into the normalized output.
"""

from typing import Any, Generic, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from src.konnect.errors import DecodeError

Timestamp = str | int | None

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


class UpstreamModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class PageMeta(UpstreamModel):
    page_count: int | None = None
    total_count: int | None = None


class Page(UpstreamModel, Generic[T]):
    data: list[T]
    meta: PageMeta = Field(default_factory=PageMeta)


# --- Developer portal ---

class Portal(UpstreamModel):
    id: str
    name: str | None = None
    description: str | None = None
    active: bool | None = None
    canonical_domain: str | None = None
    created_at: Timestamp = None
    updated_at: Timestamp = None


class CatalogApi(UpstreamModel):
    id: str
    name: str | None = None
    description: str | None = None
    version: str | None = None
    published: bool | None = None
    deprecated: bool | None = None
    specification: Any = None
    specification_format: str | None = None
    created_at: Timestamp = None
    updated_at: Timestamp = None


class SpecificationRef(UpstreamModel):
    id: str


class Specification(UpstreamModel):
    id: str
    api_type: str | None = Field(None, validation_alias=AliasChoices("api_type", "type"))
    content: Any = None


class Application(UpstreamModel):
    id: str
    name: str | None = None
    description: str | None = None
    status: str | None = None
    created_at: Timestamp = None
    updated_at: Timestamp = None


class NamedRef(UpstreamModel):
    id: str
    name: str | None = None


class Registration(UpstreamModel):
    """A subscription as returned by the registration list endpoints."""

    id: str
    api: NamedRef
    application: NamedRef
    status: str | None = None
    created_at: Timestamp = None
    updated_at: Timestamp = None


class CreatedRegistration(UpstreamModel):
    """A subscription as returned by the registration create endpoint (flat ids)."""

    id: str
    api_id: str | None = None
    api_name: str | None = None
    application_id: str | None = None
    application_name: str | None = None
    status: str | None = None
    created_at: Timestamp = None
    updated_at: Timestamp = None


class Credential(UpstreamModel):
    id: str
    credential: str
    display_name: str | None = None
    expires_at: Timestamp = None
    created_at: Timestamp = None
    updated_at: Timestamp = None


# --- Control planes ---

class ControlPlaneConfig(UpstreamModel):
    cluster_type: str | None = None
    control_plane_endpoint: str | None = None
    telemetry_endpoint: str | None = None
    cloud_gateway: bool | None = None
    auth_type: str | None = None


class ControlPlane(UpstreamModel):
    id: str
    name: str | None = None
    description: str | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    config: ControlPlaneConfig = Field(default_factory=ControlPlaneConfig)
    created_at: Timestamp = None
    updated_at: Timestamp = None


class CursorPage(UpstreamModel, Generic[T]):
    data: list[T]
    meta: dict[str, Any] = Field(default_factory=dict)

    @property
    def next_cursor(self) -> str | None:
        page = self.meta.get("page") or {}
        return page.get("next") if isinstance(page, dict) else None


class GroupMemberStatus(UpstreamModel):
    is_member: bool


class EntityRef(UpstreamModel):
    id: str


class Service(UpstreamModel):
    id: str
    name: str | None = None
    host: str | None = None
    port: int | None = None
    protocol: str | None = None
    path: str | None = None
    enabled: bool | None = None
    tags: list[str] | None = None
    created_at: Timestamp = None
    updated_at: Timestamp = None


class Route(UpstreamModel):
    id: str
    name: str | None = None
    protocols: list[str] | None = None
    methods: list[str] | None = None
    hosts: list[str] | None = None
    paths: list[str] | None = None
    strip_path: bool | None = None
    service: EntityRef | None = None
    tags: list[str] | None = None
    created_at: Timestamp = None
    updated_at: Timestamp = None


class Consumer(UpstreamModel):
    id: str
    username: str | None = None
    custom_id: str | None = None
    tags: list[str] | None = None
    created_at: Timestamp = None
    updated_at: Timestamp = None


class Plugin(UpstreamModel):
    id: str
    name: str | None = None
    enabled: bool | None = None
    config: dict[str, Any] | None = None
    protocols: list[str] | None = None
    service: EntityRef | None = None
    route: EntityRef | None = None
    consumer: EntityRef | None = None
    tags: list[str] | None = None
    created_at: Timestamp = None
    updated_at: Timestamp = None


class OffsetPage(UpstreamModel, Generic[T]):
    """Core-entity listing: items plus an opaque offset for the next page."""

    data: list[T]
    offset: str | None = None


# --- Analytics ---

class ApiRequestRecord(UpstreamModel):
    request_start: Timestamp = None
    trace_id: str | None = None
    http_method: str | None = None
    request_uri: str | None = None
    status_code: int | None = None
    consumer: str | None = None
    gateway_service: str | None = None
    route: str | None = None
    control_plane: str | None = None
    client_ip: str | None = None
    latencies_response_ms: float | None = None
    latencies_kong_gateway_ms: float | None = None
    latencies_upstream_ms: float | None = None


class ApiRequestsResult(UpstreamModel):
    meta: dict[str, Any] = Field(default_factory=dict)
    results: list[ApiRequestRecord] = Field(default_factory=list)


def decode(model: type[M], payload: Any, what: str) -> M:
    """Validate an upstream payload against a model.

    Raises:
        DecodeError: The payload is missing fields the handlers rely on.
    """
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "<root>"
        raise DecodeError(
            f"Unexpected {what} response from Kong API: {location}: {first['msg']}"
        ) from e
