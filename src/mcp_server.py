"""MCP stdio server exposing the Konnect tools to AI assistants.

stdout carries MCP frames, so audit logs go to stderr.
"""

import asyncio
import sys

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from src.config.settings import get_settings
from src.konnect.client import KonnectClient
from src.logging.audit import get_audit_logger, setup_logging
from src.tools.dispatcher import invoke_tool
from src.tools.registry import list_tools

SERVER_NAME = "kong-konnect-mcp"


class ToolInvocationError(Exception):
    """Carries an error-flagged tool result; the MCP SDK reports it with isError."""


def build_server(client: KonnectClient) -> Server:
    server = Server(SERVER_NAME)

    @server.list_tools()
    async def handle_list_tools() -> list[Tool]:
        return [
            Tool(name=tool.method, description=tool.description, inputSchema=tool.input_schema())
            for tool in list_tools()
        ]

    @server.call_tool()
    async def handle_call_tool(name: str, arguments: dict | None) -> list[TextContent]:
        result = await invoke_tool(client, name, arguments)
        if result.is_error:
            raise ToolInvocationError(result.text)
        return [TextContent(type="text", text=result.text)]

    return server


async def serve() -> None:
    setup_logging(stream=sys.stderr)
    client = KonnectClient.from_settings(get_settings())
    server = build_server(client)
    logger = get_audit_logger()
    logger.info("Kong Konnect MCP server running", extra={"audit_data": {"region": client.region.value}})
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
    finally:
        await client.close()
        logger.info("Kong Konnect MCP server stopped")


def run() -> None:
    asyncio.run(serve())


if __name__ == "__main__":
    run()
