"""API request analytics (admin API)."""

from typing import Any, Literal

from src.konnect.client import KonnectClient
from src.konnect.models import ApiRequestsResult, decode

TimeRange = Literal["15M", "1H", "6H", "12H", "24H", "7D"]


def build_filters(
    status_codes: list[int] | None = None,
    exclude_status_codes: list[int] | None = None,
    http_methods: list[str] | None = None,
    consumer_ids: list[str] | None = None,
    service_ids: list[str] | None = None,
    route_ids: list[str] | None = None,
) -> list[dict[str, Any]]:
    """Translate tool filter arguments into Konnect api-requests filter objects."""
    candidates = [
        ("status_code", "in", status_codes),
        ("status_code", "not_in", exclude_status_codes),
        ("http_method", "in", [m.upper() for m in http_methods] if http_methods else None),
        ("consumer", "in", consumer_ids),
        ("gateway_service", "in", service_ids),
        ("route", "in", route_ids),
    ]
    return [
        {"field": field, "operator": operator, "value": value}
        for field, operator, value in candidates
        if value
    ]


async def query_api_requests(
    client: KonnectClient,
    time_range: TimeRange = "1H",
    status_codes: list[int] | None = None,
    exclude_status_codes: list[int] | None = None,
    http_methods: list[str] | None = None,
    consumer_ids: list[str] | None = None,
    service_ids: list[str] | None = None,
    route_ids: list[str] | None = None,
    max_results: int = 100,
) -> dict:
    filters = build_filters(
        status_codes, exclude_status_codes, http_methods,
        consumer_ids, service_ids, route_ids,
    )
    body = {
        "time_range": {"type": "relative", "time_range": time_range},
        "filters": filters,
        "size": max_results,
    }
    payload = await client.request("/api-requests", method="POST", body=body)
    result = decode(ApiRequestsResult, payload, "API requests")

    return {
        "metadata": {
            "totalRequests": len(result.results),
            "timeRange": time_range,
            "filters": filters,
            "maxResults": max_results,
        },
        "requests": [
            {
                "timestamp": record.request_start,
                "traceId": record.trace_id,
                "httpMethod": record.http_method,
                "uri": record.request_uri,
                "statusCode": record.status_code,
                "consumerId": record.consumer,
                "serviceId": record.gateway_service,
                "routeId": record.route,
                "controlPlaneId": record.control_plane,
                "clientIp": record.client_ip,
                "latency": {
                    "totalMs": record.latencies_response_ms,
                    "gatewayMs": record.latencies_kong_gateway_ms,
                    "upstreamMs": record.latencies_upstream_ms,
                },
            }
            for record in result.results
        ],
        "relatedTools": [
            "Use list_services or list_routes to resolve the ids in these requests",
            "Use list_consumers to identify the consumers making these requests",
        ],
    }
