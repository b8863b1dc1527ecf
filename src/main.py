"""Konnect Portal Gateway: FastAPI application entry point.

Exposes the Konnect tools over HTTP for callers that do not speak MCP.
Tool results use the same content/isError envelope as the MCP server.
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, Depends, FastAPI
from fastapi.responses import JSONResponse

from src.konnect.client import KonnectClient
from src.konnect.factory import close_konnect_client, get_konnect_client
from src.logging.audit import get_audit_logger, setup_logging
from src.security.auth import verify_api_key
from src.tools.dispatcher import invoke_tool
from src.tools.registry import list_tools

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle hooks."""
    setup_logging()
    get_audit_logger().info("Gateway started")
    yield
    await close_konnect_client()
    get_audit_logger().info("Gateway stopped")


app = FastAPI(
    title="Konnect Portal Gateway",
    description="Kong Konnect developer portal and admin operations as callable tools",
    version=VERSION,
    lifespan=lifespan,
)


@app.get("/health")
async def health():
    return {"status": "healthy", "version": VERSION}


@app.get("/v1/tools")
async def tools(caller: str = Depends(verify_api_key)):
    return {
        "tools": [
            {
                "method": tool.method,
                "name": tool.name,
                "description": tool.description,
                "category": tool.category,
                "inputSchema": tool.input_schema(),
            }
            for tool in list_tools()
        ]
    }


@app.post("/v1/tools/{method}")
async def call_tool(
    method: str,
    arguments: dict[str, Any] | None = Body(default=None),
    caller: str = Depends(verify_api_key),
    client: KonnectClient = Depends(get_konnect_client),
):
    """Invoke one tool. Tool failures are reported in the body, not the status code."""
    get_audit_logger().info(
        "Tool call received",
        extra={"audit_data": {"caller": caller, "tool": method}},
    )
    result = await invoke_tool(client, method, arguments)
    return JSONResponse(
        status_code=200,
        content=result.to_content(),
        headers={"X-Request-Id": result.request_id},
    )
