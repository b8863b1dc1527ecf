"""Tool registry: tool method name -> definition."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from pydantic import BaseModel

from src.konnect.errors import UnknownToolError
from src.operations import analytics, control_planes, dev_portal
from src.tools import params


@dataclass
class ToolDefinition:
    method: str
    name: str
    description: str
    parameters: type[BaseModel]
    handler: Callable[..., Awaitable[dict]]
    category: str

    def input_schema(self) -> dict:
        return self.parameters.model_json_schema(by_alias=True)


TOOLS: list[ToolDefinition] = [
    # Developer portal
    ToolDefinition(
        method="authenticate_developer_portal",
        name="Authenticate Developer Portal",
        description=(
            "Log in as a developer to a Dev Portal. The session is reused by later "
            "Dev Portal tools for the same portalId, so portalAccessToken can be omitted."
        ),
        parameters=params.AuthenticateDeveloperPortalParams,
        handler=dev_portal.authenticate_developer_portal,
        category="dev_portal",
    ),
    ToolDefinition(
        method="list_portals",
        name="List Portals",
        description="List the organization's developer portals and their IDs.",
        parameters=params.ListPortalsParams,
        handler=dev_portal.list_portals,
        category="dev_portal",
    ),
    ToolDefinition(
        method="list_apis",
        name="List APIs",
        description="List APIs published in a Dev Portal, with optional name/published filters.",
        parameters=params.ListApisParams,
        handler=dev_portal.list_apis,
        category="dev_portal",
    ),
    ToolDefinition(
        method="get_api_specifications",
        name="Get API Specifications",
        description="Get every specification document (e.g. OpenAPI) attached to a Dev Portal API.",
        parameters=params.GetApiSpecificationsParams,
        handler=dev_portal.get_api_specifications,
        category="dev_portal",
    ),
    ToolDefinition(
        method="list_applications",
        name="List Applications",
        description="List the developer's applications in a Dev Portal.",
        parameters=params.ListApplicationsParams,
        handler=dev_portal.list_applications,
        category="dev_portal",
    ),
    ToolDefinition(
        method="create_application",
        name="Create Application",
        description="Create a developer application in a Dev Portal.",
        parameters=params.CreateApplicationParams,
        handler=dev_portal.create_application,
        category="dev_portal",
    ),
    ToolDefinition(
        method="subscribe_to_api",
        name="Subscribe to API",
        description=(
            "Subscribe an application to an API. Use applicationId 'new' with appName "
            "to create the application in the same call."
        ),
        parameters=params.SubscribeToApiParams,
        handler=dev_portal.subscribe_to_api,
        category="dev_portal",
    ),
    ToolDefinition(
        method="list_subscriptions",
        name="List Subscriptions",
        description="List API subscriptions, optionally for one application, API or status.",
        parameters=params.ListSubscriptionsParams,
        handler=dev_portal.list_subscriptions,
        category="dev_portal",
    ),
    ToolDefinition(
        method="generate_api_key",
        name="Generate API Key",
        description=(
            "Generate an API key for an application. The key value is shown only once "
            "and cannot be retrieved again."
        ),
        parameters=params.GenerateApiKeyParams,
        handler=dev_portal.generate_api_key,
        category="dev_portal",
    ),
    # Control planes
    ToolDefinition(
        method="list_control_planes",
        name="List Control Planes",
        description="List control planes in the organization.",
        parameters=params.ListControlPlanesParams,
        handler=control_planes.list_control_planes,
        category="control_planes",
    ),
    ToolDefinition(
        method="get_control_plane",
        name="Get Control Plane",
        description="Get details of one control plane.",
        parameters=params.ControlPlaneIdParams,
        handler=control_planes.get_control_plane,
        category="control_planes",
    ),
    ToolDefinition(
        method="list_control_plane_group_memberships",
        name="List Control Plane Group Memberships",
        description="List the control planes that are members of a control plane group.",
        parameters=params.ListGroupMembershipsParams,
        handler=control_planes.list_control_plane_group_memberships,
        category="control_planes",
    ),
    ToolDefinition(
        method="check_control_plane_group_membership",
        name="Check Control Plane Group Membership",
        description="Check whether a control plane belongs to a group.",
        parameters=params.ControlPlaneIdParams,
        handler=control_planes.check_control_plane_group_membership,
        category="control_planes",
    ),
    ToolDefinition(
        method="list_services",
        name="List Services",
        description="List gateway services configured in a control plane.",
        parameters=params.ListCoreEntitiesParams,
        handler=control_planes.list_services,
        category="configuration",
    ),
    ToolDefinition(
        method="list_routes",
        name="List Routes",
        description="List routes configured in a control plane.",
        parameters=params.ListCoreEntitiesParams,
        handler=control_planes.list_routes,
        category="configuration",
    ),
    ToolDefinition(
        method="list_consumers",
        name="List Consumers",
        description="List consumers configured in a control plane.",
        parameters=params.ListCoreEntitiesParams,
        handler=control_planes.list_consumers,
        category="configuration",
    ),
    ToolDefinition(
        method="list_plugins",
        name="List Plugins",
        description="List plugins configured in a control plane.",
        parameters=params.ListCoreEntitiesParams,
        handler=control_planes.list_plugins,
        category="configuration",
    ),
    # Analytics
    ToolDefinition(
        method="query_api_requests",
        name="Query API Requests",
        description="Query recent API request records over a relative time range.",
        parameters=params.QueryApiRequestsParams,
        handler=analytics.query_api_requests,
        category="analytics",
    ),
]

_tools: dict[str, ToolDefinition] = {tool.method: tool for tool in TOOLS}


def get_tool(method: str) -> ToolDefinition:
    try:
        return _tools[method]
    except KeyError:
        raise UnknownToolError(method) from None


def list_tools() -> list[ToolDefinition]:
    return list(TOOLS)
