"""Argument schemas for each tool.

Tool callers use camelCase argument names; handlers receive the snake_case
field names via ``model_dump()``.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.operations.analytics import TimeRange

PageSize = Annotated[int, Field(ge=1, le=1000, description="Number of items per page")]
PageNumber = Annotated[int, Field(ge=1, description="Page number to retrieve")]
StatusCode = Annotated[int, Field(ge=100, le=599)]

PORTAL_ID_HELP = "Portal ID to target (obtainable from the list_portals tool)"
ACCESS_TOKEN_HELP = (
    "Portal access token; overrides the session stored by authenticate_developer_portal"
)


class ToolParams(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class PortalScopedParams(ToolParams):
    portal_id: str | None = Field(None, description=PORTAL_ID_HELP)
    portal_access_token: str | None = Field(None, description=ACCESS_TOKEN_HELP)


# --- Developer portal ---

class AuthenticateDeveloperPortalParams(ToolParams):
    portal_id: str | None = Field(None, description=PORTAL_ID_HELP)
    username: str | None = Field(
        None, description="Developer email; defaults to DEV_PORTAL_USER"
    )
    password: str | None = Field(
        None, description="Developer password; defaults to DEV_PORTAL_PASSWORD"
    )


class ListPortalsParams(ToolParams):
    page_size: PageSize = 10
    page_number: PageNumber | None = None


class ListApisParams(PortalScopedParams):
    page_size: PageSize = 10
    page_number: PageNumber | None = None
    filter_name: str | None = Field(None, description="Filter APIs by name (contains)")
    filter_published: bool | None = Field(None, description="Filter by published status")
    sort: str | None = Field(None, description="Sort field and direction, e.g. 'name,-created_at'")


class GetApiSpecificationsParams(PortalScopedParams):
    api_id: str = Field(description="ID of the API (obtainable from the list_apis tool)")


class ListApplicationsParams(PortalScopedParams):
    page_size: PageSize = 10
    page_number: PageNumber | None = None
    filter_name: str | None = Field(None, description="Filter applications by name (contains)")
    sort: str | None = Field(None, description="Sort field and direction, e.g. 'name,-created_at'")


class CreateApplicationParams(PortalScopedParams):
    name: str = Field(min_length=1, description="Name of the new application")
    description: str | None = None


class SubscribeToApiParams(PortalScopedParams):
    api_id: str = Field(description="API ID to subscribe to (obtainable from list_apis)")
    application_id: str = Field(
        description="Application ID (from list_applications), or 'new' to create one"
    )
    app_name: str | None = Field(None, description="Name for the new application")
    app_description: str | None = Field(None, description="Description for the new application")


class ListSubscriptionsParams(PortalScopedParams):
    application_id: str | None = Field(None, description="Filter by application ID")
    api_id: str | None = Field(None, description="Filter by API ID")
    page_size: PageSize = 10
    page_number: PageNumber | None = None
    status: str | None = Field(None, description="Filter by status, e.g. 'approved', 'pending'")
    sort: str | None = None


class GenerateApiKeyParams(PortalScopedParams):
    application_id: str = Field(description="Application ID (from list_applications)")
    name: str = Field("API Key", description="Display name for the key")
    expires_in: int | None = Field(None, ge=1, description="Seconds until the key expires")


# --- Control planes ---

class ListControlPlanesParams(ToolParams):
    page_size: PageSize = 10
    page_number: PageNumber | None = None
    filter_name: str | None = None
    filter_cluster_type: str | None = Field(
        None, description="e.g. CLUSTER_TYPE_CONTROL_PLANE, CLUSTER_TYPE_CONTROL_PLANE_GROUP"
    )
    filter_cloud_gateway: bool | None = None
    labels: str | None = Field(None, description="Label filter, e.g. 'env:prod'")
    sort: str | None = None


class ControlPlaneIdParams(ToolParams):
    control_plane_id: str = Field(description="Control plane ID (from list_control_planes)")


class ListGroupMembershipsParams(ToolParams):
    group_id: str = Field(description="Control plane group ID")
    page_size: PageSize = 10
    page_after: str | None = Field(None, description="Cursor from a previous page")


class ListCoreEntitiesParams(ToolParams):
    control_plane_id: str = Field(description="Control plane ID (from list_control_planes)")
    size: PageSize = 100
    offset: str | None = Field(None, description="Offset from a previous page")


# --- Analytics ---

class QueryApiRequestsParams(ToolParams):
    time_range: TimeRange = "1H"
    status_codes: list[StatusCode] | None = None
    exclude_status_codes: list[StatusCode] | None = None
    http_methods: list[str] | None = None
    consumer_ids: list[str] | None = None
    service_ids: list[str] | None = None
    route_ids: list[str] | None = None
    max_results: PageSize = 100
