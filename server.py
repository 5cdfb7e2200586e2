#!/usr/bin/env python3
"""
MySQL MCP Server
Exposes a MySQL server as MCP tools: authentication, schema discovery,
row CRUD and raw SQL, plus table descriptions as resources.
"""

import asyncio
import logging
import sys
from typing import Any, Optional

from mcp.server.models import InitializationOptions
from mcp.server import NotificationOptions, Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from mcp import types

from config import ServerConfig, create_env_file, get_environment_mode
from container import ServiceContainer
from utils.errors import ToolError, serialize_error
from utils.serialization import to_json

__version__ = "1.0.0"

SERVER_NAME = "mysql-mcp-server"

# stdout carries the MCP stream; logs go to stderr
logging.basicConfig(
    level=logging.INFO,
    stream=sys.stderr,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = Server(SERVER_NAME)

# Initialized in main()
services: Optional[ServiceContainer] = None


class ToolCallError(Exception):
    """Carries a serialized error envelope out of call_tool so the result is flagged isError."""


def require_services() -> ServiceContainer:
    if services is None:
        raise RuntimeError("Server not initialized")
    return services


@app.list_tools()
async def handle_list_tools() -> list[types.Tool]:
    """List available MCP tools: session, schema discovery and row tools."""
    from tools import get_core_tool_catalog
    return get_core_tool_catalog()


@app.call_tool(validate_input=False)
async def handle_call_tool(
    name: str, arguments: dict[str, Any]
) -> list[types.TextContent]:
    """
    Handle tool execution.

    Argument validation happens in the dispatcher so every failure reaches
    the caller as the same {"error": {kind, message}} document.
    """
    payload, is_error = await require_services().call_tool(name, arguments)

    if is_error:
        raise ToolCallError(to_json({"error": payload}))

    return [types.TextContent(type="text", text=to_json(payload))]


@app.list_resources()
async def handle_list_resources() -> list[types.Resource]:
    """One resource per table of the session's default database."""
    try:
        resources = await require_services().gateway.list_resources()
    except ToolError as e:
        logger.warning(f"⚠️  list_resources failed: [{e.kind}] {e.message}")
        return []

    return [
        types.Resource(
            uri=resource["uri"],
            name=resource["name"],
            description=resource["description"],
            mimeType=resource["mimeType"],
        )
        for resource in resources
    ]


@app.read_resource()
async def handle_read_resource(uri) -> list[ReadResourceContents]:
    """Describe the table addressed by mysql://table/<database>/<table>."""
    try:
        resource = await require_services().gateway.read_resource(str(uri))
    except ToolError as e:
        envelope = serialize_error(e)
        raise ValueError(f"[{envelope['kind']}] {envelope['message']}") from e

    return [ReadResourceContents(content=resource["text"], mime_type=resource["mimeType"])]


async def main():
    """Main entry point for MCP server"""
    global services

    config = ServerConfig.from_environment()
    logging.getLogger().setLevel(config.log_level)

    services = ServiceContainer(config)

    try:
        logger.info("MySQL MCP Server starting...")
        logger.info(f"Environment: {get_environment_mode()}")
        await services.startup()

        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                InitializationOptions(
                    server_name=SERVER_NAME,
                    server_version=__version__,
                    capabilities=app.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={}
                    )
                )
            )
    except Exception as e:
        logger.error(f"Failed to start MCP server: {e}", exc_info=True)
        raise
    finally:
        await services.shutdown()
        logger.info("MySQL session closed")


def cli_entry():
    """Entry point for console script - wraps async main()"""
    import argparse

    parser = argparse.ArgumentParser(description="MySQL MCP Server")
    parser.add_argument('--version', '-v', action='store_true', help='Show version')
    parser.add_argument('--init-env', metavar='PATH', nargs='?', const='.env.development',
                        help='Write a template .env file and exit (default: .env.development)')
    parser.add_argument('--http', action='store_true', help='Run in HTTP mode (Streamable HTTP transport)')
    parser.add_argument('--port', type=int, default=3333, help='Port for HTTP mode (default: 3333)')
    parser.add_argument('--host', type=str, default='127.0.0.1', help='Host for HTTP mode (default: 127.0.0.1)')

    args = parser.parse_args()

    if args.version:
        print(f"{SERVER_NAME} version {__version__}")
        sys.exit(0)

    if args.init_env:
        create_env_file(args.init_env)
        sys.exit(0)

    if args.http:
        logger.info(f"Starting in HTTP mode (Streamable HTTP) on {args.host}:{args.port}/mcp")
        from transport.http import run_http_server
        run_http_server(host=args.host, port=args.port)
    else:
        logger.info("Starting in stdio mode...")
        asyncio.run(main())


if __name__ == "__main__":
    cli_entry()
