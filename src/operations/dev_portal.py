"""Developer portal operations.

Each operation calls the Konnect client and reshapes the upstream payload into
a stable camelCase result. Audit fields go under ``metadata``. ``relatedTools``
names the tools a caller usually needs next.
"""

from typing import Any

from src.konnect.client import KonnectClient
from src.konnect.errors import DecodeError, MissingPortalIdError
from src.konnect.models import (
    Application,
    CatalogApi,
    CreatedRegistration,
    Credential,
    Page,
    Portal,
    Registration,
    Specification,
    SpecificationRef,
    decode,
)
from src.konnect.query import path_segment, with_query
from src.logging.audit import get_audit_logger

NEW_APPLICATION = "new"
DEFAULT_KEY_NAME = "API Key"


def _require_portal(portal_id: str | None, operation: str) -> str:
    if not portal_id:
        raise MissingPortalIdError(operation)
    return portal_id


def _page_metadata(page: Page, page_size: int, page_number: int | None) -> dict:
    return {
        "pageSize": page_size,
        "pageNumber": page_number or 1,
        "totalPages": page.meta.page_count or 0,
        "totalCount": page.meta.total_count or 0,
    }


def _timestamps(record: Any) -> dict:
    return {"createdAt": record.created_at, "updatedAt": record.updated_at}


async def authenticate_developer_portal(
    client: KonnectClient,
    portal_id: str | None,
    username: str | None = None,
    password: str | None = None,
) -> dict:
    portal_id = _require_portal(portal_id, "authenticate_developer_portal")
    await client.authenticate_developer(portal_id, username, password)
    return {
        "authentication": {
            "status": "success",
            "message": "Successfully authenticated with the developer portal",
        },
        "usage": {
            "instructions": (
                "You are now authenticated with the developer portal. You can use other "
                "Dev Portal tools without providing a portalAccessToken."
            ),
            "security": "Your session is held in memory by the gateway for this portal.",
        },
    }


async def list_portals(
    client: KonnectClient,
    page_size: int = 10,
    page_number: int | None = None,
) -> dict:
    # Admin-only: this is how callers discover portal ids
    endpoint = with_query("/v3/portals", [
        ("page[size]", page_size),
        ("page[number]", page_number),
    ])
    page = decode(Page[Portal], await client.request(endpoint), "portal list")

    return {
        "metadata": _page_metadata(page, page_size, page_number),
        "portals": [
            {
                "portalId": portal.id,
                "name": portal.name,
                "description": portal.description,
                "active": portal.active,
                "metadata": _timestamps(portal),
            }
            for portal in page.data
        ],
        "relatedTools": [
            "Use authenticate_developer_portal to get access also to private APIs",
            "Use list_apis to find APIs published to these portals",
            "Use list_applications to see applications that can subscribe to APIs",
        ],
    }


async def list_apis(
    client: KonnectClient,
    portal_id: str | None,
    page_size: int = 10,
    page_number: int | None = None,
    filter_name: str | None = None,
    filter_published: bool | None = None,
    sort: str | None = None,
    portal_access_token: str | None = None,
) -> dict:
    portal_id = _require_portal(portal_id, "list_apis")
    endpoint = with_query("/api/v3/apis", [
        ("page[size]", page_size),
        ("page[number]", page_number),
        ("filter[name][contains]", filter_name),
        ("filter[published]", filter_published),
        ("sort", sort),
    ])
    payload = await client.request(
        endpoint,
        use_portal_context=True,
        portal_id=portal_id,
        session_token=portal_access_token,
    )
    page = decode(Page[CatalogApi], payload, "API list")

    metadata = _page_metadata(page, page_size, page_number)
    metadata["filters"] = {"name": filter_name, "published": filter_published}
    metadata["sort"] = sort
    return {
        "metadata": metadata,
        "apis": [
            {
                "apiId": api.id,
                "name": api.name,
                "description": api.description,
                "version": api.version,
                "published": api.published,
                "deprecated": api.deprecated,
                "documentation": {
                    "specification": api.specification,
                    "specificationFormat": api.specification_format,
                },
                "metadata": _timestamps(api),
            }
            for api in page.data
        ],
        "relatedTools": [
            "Use authenticate_developer_portal to get access also to private APIs",
            "Use get_api_specifications to read an API's specification documents",
            "Use subscribe_to_api to subscribe to an API",
            "Use generate_api_key to generate an API key for a subscription",
        ],
    }


async def get_api_specifications(
    client: KonnectClient,
    api_id: str,
    portal_id: str | None,
    portal_access_token: str | None = None,
) -> dict:
    """Fetch every specification document attached to an API.

    One discovery call lists the specification ids, then each document is
    fetched in turn. A discovery body without a ``data`` array is treated as
    "no specifications".
    """
    portal_id = _require_portal(portal_id, "get_api_specifications")
    base = f"/api/v3/apis/{path_segment(api_id)}/specifications"
    context = {
        "use_portal_context": True,
        "portal_id": portal_id,
        "session_token": portal_access_token,
    }

    try:
        listing = decode(Page[SpecificationRef], await client.request(base, **context),
                         "specification list")
        refs = listing.data
    except DecodeError:
        get_audit_logger().warning(
            "Specification list had no usable data array",
            extra={"audit_data": {"api_id": api_id, "portal_id": portal_id}},
        )
        refs = []

    specifications = []
    for ref in refs:
        payload = await client.request(f"{base}/{path_segment(ref.id)}", **context)
        spec = decode(Specification, payload, "specification")
        specifications.append({"id": spec.id, "type": spec.api_type, "content": spec.content})

    return {
        "apiId": api_id,
        "specifications": specifications,
        "relatedTools": [
            "Use list_apis to find more APIs",
            "Use subscribe_to_api to subscribe to this API",
        ],
    }


async def list_applications(
    client: KonnectClient,
    portal_id: str | None,
    page_size: int = 10,
    page_number: int | None = None,
    filter_name: str | None = None,
    sort: str | None = None,
    portal_access_token: str | None = None,
) -> dict:
    portal_id = _require_portal(portal_id, "list_applications")
    endpoint = with_query("/api/v3/applications", [
        ("page[size]", page_size),
        ("page[number]", page_number),
        ("filter[name][contains]", filter_name),
        ("sort", sort),
    ])
    payload = await client.request(
        endpoint,
        use_portal_context=True,
        portal_id=portal_id,
        session_token=portal_access_token,
    )
    page = decode(Page[Application], payload, "application list")

    metadata = _page_metadata(page, page_size, page_number)
    metadata["filters"] = {"name": filter_name}
    metadata["sort"] = sort
    return {
        "metadata": metadata,
        "applications": [_application(app) for app in page.data],
        "relatedTools": [
            "Use subscribe_to_api to subscribe an application to an API",
            "Use list_apis to find APIs to subscribe to",
        ],
    }


def _application(app: Application) -> dict:
    return {
        "applicationId": app.id,
        "name": app.name,
        "description": app.description,
        "status": app.status,
        "metadata": _timestamps(app),
    }


async def _create_application(
    client: KonnectClient,
    portal_id: str,
    name: str,
    description: str,
    portal_access_token: str | None,
) -> Application:
    payload = await client.request(
        "/api/v3/applications",
        method="POST",
        body={"name": name, "description": description},
        use_portal_context=True,
        portal_id=portal_id,
        session_token=portal_access_token,
    )
    return decode(Application, payload, "application")


async def create_application(
    client: KonnectClient,
    name: str,
    portal_id: str | None,
    description: str | None = None,
    portal_access_token: str | None = None,
) -> dict:
    portal_id = _require_portal(portal_id, "create_application")
    app = await _create_application(client, portal_id, name, description or "", portal_access_token)
    return {
        "application": _application(app),
        "relatedTools": [
            "Use subscribe_to_api to subscribe this application to an API",
            "Use generate_api_key to generate an API key for this application",
        ],
    }


async def subscribe_to_api(
    client: KonnectClient,
    api_id: str,
    application_id: str,
    portal_id: str | None,
    app_name: str | None = None,
    app_description: str | None = None,
    portal_access_token: str | None = None,
) -> dict:
    """Register an application against an API.

    ``application_id == "new"`` together with ``app_name`` creates the
    application first. Without ``app_name`` the literal "new" is sent upstream.
    """
    portal_id = _require_portal(portal_id, "subscribe_to_api")

    final_application_id = application_id
    if application_id == NEW_APPLICATION:
        if app_name:
            app = await _create_application(
                client, portal_id, app_name, app_description or "", portal_access_token
            )
            final_application_id = app.id
        else:
            get_audit_logger().warning(
                "applicationId 'new' without appName, subscribing with the literal id",
                extra={"audit_data": {"api_id": api_id, "portal_id": portal_id}},
            )

    payload = await client.request(
        f"/api/v3/applications/{path_segment(final_application_id)}/registrations",
        method="POST",
        body={"api_id": api_id},
        use_portal_context=True,
        portal_id=portal_id,
        session_token=portal_access_token,
    )
    result = decode(CreatedRegistration, payload, "subscription")

    return {
        "subscription": {
            "subscriptionId": result.id,
            "apiId": result.api_id or api_id,
            "apiName": result.api_name,
            "applicationId": result.application_id or final_application_id,
            "applicationName": result.application_name,
            "status": result.status,
            "metadata": _timestamps(result),
        },
        "relatedTools": [
            "Use generate_api_key to generate an API key for this subscription",
            "Use list_apis to find more APIs to subscribe to",
        ],
    }


async def list_subscriptions(
    client: KonnectClient,
    portal_id: str | None,
    application_id: str | None = None,
    api_id: str | None = None,
    page_size: int = 10,
    page_number: int | None = None,
    status: str | None = None,
    sort: str | None = None,
    portal_access_token: str | None = None,
) -> dict:
    portal_id = _require_portal(portal_id, "list_subscriptions")
    if application_id:
        path = f"/api/v3/applications/{path_segment(application_id)}/registrations"
    else:
        path = "/api/v3/registrations"
    endpoint = with_query(path, [
        ("page[size]", page_size),
        ("page[number]", page_number),
        ("filter[api.id][eq]", api_id),
        ("filter[status][eq]", status),
        ("sort", sort),
    ])
    payload = await client.request(
        endpoint,
        use_portal_context=True,
        portal_id=portal_id,
        session_token=portal_access_token,
    )
    page = decode(Page[Registration], payload, "subscription list")

    metadata = _page_metadata(page, page_size, page_number)
    metadata["filters"] = {"applicationId": application_id, "apiId": api_id, "status": status}
    metadata["sort"] = sort
    return {
        "metadata": metadata,
        "subscriptions": [
            {
                "subscriptionId": sub.id,
                "apiId": sub.api.id,
                "apiName": sub.api.name,
                "applicationId": sub.application.id,
                "applicationName": sub.application.name,
                "status": sub.status,
                "metadata": _timestamps(sub),
            }
            for sub in page.data
        ],
        "relatedTools": [
            "Use generate_api_key to generate an API key for a subscription",
            "Use subscribe_to_api to create a new subscription",
        ],
    }


async def generate_api_key(
    client: KonnectClient,
    application_id: str,
    portal_id: str | None,
    name: str | None = DEFAULT_KEY_NAME,
    expires_in: int | None = None,
    portal_access_token: str | None = None,
) -> dict:
    """Create a credential for an application.

    The secret is only ever returned here; Konnect does not disclose it again.
    """
    portal_id = _require_portal(portal_id, "generate_api_key")
    body: dict[str, Any] = {"display_name": name or DEFAULT_KEY_NAME}
    if expires_in:
        body["expires_in"] = expires_in

    payload = await client.request(
        f"/api/v3/applications/{path_segment(application_id)}/credentials",
        method="POST",
        body=body,
        use_portal_context=True,
        portal_id=portal_id,
        session_token=portal_access_token,
    )
    result = decode(Credential, payload, "API key")

    return {
        "apiKey": {
            "id": result.id,
            "key": result.credential,
            "name": result.display_name,
            "applicationId": application_id,
            "expiresAt": result.expires_at,
            "metadata": _timestamps(result),
        },
        "usage": {
            "instructions": (
                "Use this API key in your requests to the API with the header: "
                "'apikey: YOUR_API_KEY'"
            ),
            "security": (
                "Store this API key securely. For security reasons, you won't be able "
                "to retrieve the full key value again."
            ),
        },
    }
