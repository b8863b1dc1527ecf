"""Control plane and core-entity operations (admin API, read-only)."""

from collections.abc import Callable

from pydantic import BaseModel

from src.konnect.client import KonnectClient
from src.konnect.models import (
    Consumer,
    ControlPlane,
    CursorPage,
    GroupMemberStatus,
    OffsetPage,
    Page,
    Plugin,
    Route,
    Service,
    decode,
)
from src.konnect.query import path_segment, with_query


def _control_plane(cp: ControlPlane) -> dict:
    return {
        "controlPlaneId": cp.id,
        "name": cp.name,
        "description": cp.description,
        "labels": cp.labels,
        "config": {
            "clusterType": cp.config.cluster_type,
            "controlPlaneEndpoint": cp.config.control_plane_endpoint,
            "telemetryEndpoint": cp.config.telemetry_endpoint,
            "cloudGateway": cp.config.cloud_gateway,
            "authType": cp.config.auth_type,
        },
        "metadata": {"createdAt": cp.created_at, "updatedAt": cp.updated_at},
    }


async def list_control_planes(
    client: KonnectClient,
    page_size: int = 10,
    page_number: int | None = None,
    filter_name: str | None = None,
    filter_cluster_type: str | None = None,
    filter_cloud_gateway: bool | None = None,
    labels: str | None = None,
    sort: str | None = None,
) -> dict:
    endpoint = with_query("/control-planes", [
        ("page[size]", page_size),
        ("page[number]", page_number),
        ("filter[name][contains]", filter_name),
        ("filter[cluster_type][eq]", filter_cluster_type),
        ("filter[cloud_gateway]", filter_cloud_gateway),
        ("labels", labels),
        ("sort", sort),
    ])
    page = decode(Page[ControlPlane], await client.request(endpoint), "control plane list")

    return {
        "metadata": {
            "pageSize": page_size,
            "pageNumber": page_number or 1,
            "totalPages": page.meta.page_count or 0,
            "totalCount": page.meta.total_count or 0,
            "filters": {
                "name": filter_name,
                "clusterType": filter_cluster_type,
                "cloudGateway": filter_cloud_gateway,
                "labels": labels,
            },
            "sort": sort,
        },
        "controlPlanes": [_control_plane(cp) for cp in page.data],
        "relatedTools": [
            "Use get_control_plane for details of one control plane",
            "Use list_services, list_routes, list_consumers or list_plugins to inspect its configuration",
            "Use query_api_requests to analyze traffic",
        ],
    }


async def get_control_plane(client: KonnectClient, control_plane_id: str) -> dict:
    payload = await client.request(f"/control-planes/{path_segment(control_plane_id)}")
    cp = decode(ControlPlane, payload, "control plane")
    return {
        "controlPlane": _control_plane(cp),
        "relatedTools": [
            "Use list_control_plane_group_memberships if this is a control plane group",
            "Use check_control_plane_group_membership to see whether it belongs to a group",
            "Use list_services to inspect its configuration",
        ],
    }


async def list_control_plane_group_memberships(
    client: KonnectClient,
    group_id: str,
    page_size: int = 10,
    page_after: str | None = None,
) -> dict:
    endpoint = with_query(f"/control-planes/{path_segment(group_id)}/group-memberships", [
        ("page[size]", page_size),
        ("page[after]", page_after),
    ])
    page = decode(CursorPage[ControlPlane], await client.request(endpoint),
                  "group membership list")
    return {
        "metadata": {
            "groupId": group_id,
            "pageSize": page_size,
            "nextPageAfter": page.next_cursor,
        },
        "members": [_control_plane(cp) for cp in page.data],
        "relatedTools": [
            "Use get_control_plane for details of a member",
            "Use list_services to inspect a member's configuration",
        ],
    }


async def check_control_plane_group_membership(
    client: KonnectClient,
    control_plane_id: str,
) -> dict:
    payload = await client.request(
        f"/control-planes/{path_segment(control_plane_id)}/group-member-status"
    )
    status = decode(GroupMemberStatus, payload, "group member status")
    return {
        "controlPlaneId": control_plane_id,
        "groupMembership": {"isMember": status.is_member},
        "relatedTools": [
            "Use list_control_plane_group_memberships to list the members of a group",
        ],
    }


def _service(service: Service) -> dict:
    return {
        "serviceId": service.id,
        "name": service.name,
        "host": service.host,
        "port": service.port,
        "protocol": service.protocol,
        "path": service.path,
        "enabled": service.enabled,
        "tags": service.tags or [],
        "metadata": {"createdAt": service.created_at, "updatedAt": service.updated_at},
    }


def _route(route: Route) -> dict:
    return {
        "routeId": route.id,
        "name": route.name,
        "protocols": route.protocols or [],
        "methods": route.methods or [],
        "hosts": route.hosts or [],
        "paths": route.paths or [],
        "stripPath": route.strip_path,
        "serviceId": route.service.id if route.service else None,
        "tags": route.tags or [],
        "metadata": {"createdAt": route.created_at, "updatedAt": route.updated_at},
    }


def _consumer(consumer: Consumer) -> dict:
    return {
        "consumerId": consumer.id,
        "username": consumer.username,
        "customId": consumer.custom_id,
        "tags": consumer.tags or [],
        "metadata": {"createdAt": consumer.created_at, "updatedAt": consumer.updated_at},
    }


def _plugin(plugin: Plugin) -> dict:
    return {
        "pluginId": plugin.id,
        "name": plugin.name,
        "enabled": plugin.enabled,
        "config": plugin.config or {},
        "protocols": plugin.protocols or [],
        "scoping": {
            "serviceId": plugin.service.id if plugin.service else None,
            "routeId": plugin.route.id if plugin.route else None,
            "consumerId": plugin.consumer.id if plugin.consumer else None,
            "global": not (plugin.service or plugin.route or plugin.consumer),
        },
        "tags": plugin.tags or [],
        "metadata": {"createdAt": plugin.created_at, "updatedAt": plugin.updated_at},
    }


async def _list_core_entities(
    client: KonnectClient,
    control_plane_id: str,
    kind: str,
    model: type[BaseModel],
    shape: Callable[[BaseModel], dict],
    size: int,
    offset: str | None,
    related_tools: list[str],
) -> dict:
    endpoint = with_query(f"/control-planes/{path_segment(control_plane_id)}/core-entities/{kind}", [
        ("size", size),
        ("offset", offset),
    ])
    page = decode(OffsetPage[model], await client.request(endpoint), f"{kind} list")
    return {
        "metadata": {
            "controlPlaneId": control_plane_id,
            "size": size,
            "offset": offset,
            "nextOffset": page.offset,
            "totalItems": len(page.data),
        },
        kind: [shape(item) for item in page.data],
        "relatedTools": related_tools,
    }


async def list_services(
    client: KonnectClient,
    control_plane_id: str,
    size: int = 100,
    offset: str | None = None,
) -> dict:
    return await _list_core_entities(
        client, control_plane_id, "services", Service, _service, size, offset,
        ["Use list_routes to see how traffic reaches these services",
         "Use query_api_requests to analyze traffic for a service"],
    )


async def list_routes(
    client: KonnectClient,
    control_plane_id: str,
    size: int = 100,
    offset: str | None = None,
) -> dict:
    return await _list_core_entities(
        client, control_plane_id, "routes", Route, _route, size, offset,
        ["Use list_services to see the services behind these routes",
         "Use list_plugins to see plugins applied to routes"],
    )


async def list_consumers(
    client: KonnectClient,
    control_plane_id: str,
    size: int = 100,
    offset: str | None = None,
) -> dict:
    return await _list_core_entities(
        client, control_plane_id, "consumers", Consumer, _consumer, size, offset,
        ["Use query_api_requests to analyze traffic for a consumer",
         "Use list_plugins to see consumer-scoped plugins"],
    )


async def list_plugins(
    client: KonnectClient,
    control_plane_id: str,
    size: int = 100,
    offset: str | None = None,
) -> dict:
    return await _list_core_entities(
        client, control_plane_id, "plugins", Plugin, _plugin, size, offset,
        ["Use list_services, list_routes or list_consumers to inspect plugin targets"],
    )
