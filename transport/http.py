"""
Streamable HTTP transport for MCP (Model Context Protocol).

Implements the JSON-response subset of the MCP Streamable HTTP transport:
- Single /mcp endpoint for all JSON-RPC communication
- POST /mcp: accepts JSON-RPC requests, responds with JSON
- GET /mcp: optional persistent SSE stream for server notifications
- /healthz: health check endpoint (separate from /mcp)

Tool calls go through the same ServiceContainer/dispatcher as stdio mode.
"""

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request, Response, Header
from fastapi.responses import JSONResponse, StreamingResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.status import HTTP_202_ACCEPTED, HTTP_400_BAD_REQUEST, HTTP_503_SERVICE_UNAVAILABLE
import uvicorn

from config import ServerConfig
from container import ServiceContainer
from utils.errors import ToolError, serialize_error
from utils.jsonrpc import (
    SUPPORTED_PROTOCOL_VERSIONS,
    JsonRpcError,
    create_error_response,
    create_success_response,
    is_notification,
    is_valid_jsonrpc,
    validate_mcp_protocol_version,
)
from utils.serialization import to_json

logger = logging.getLogger(__name__)


def _tools_list() -> list[dict]:
    """MCP Tool objects as JSON-ready dicts"""
    from tools import get_core_tool_catalog

    return [
        {
            "name": tool.name,
            "description": tool.description,
            "inputSchema": tool.inputSchema
        }
        for tool in get_core_tool_catalog()
    ]


async def handle_mcp_request(services: ServiceContainer, request_data: dict) -> Optional[dict]:
    """
    Handle a single MCP JSON-RPC message.

    Returns the JSON-RPC response dict, or None for notifications.
    """
    from server import SERVER_NAME, __version__

    method = request_data.get("method")
    params = request_data.get("params") or {}
    request_id = request_data.get("id")

    try:
        if method == "initialize":
            requested = params.get("protocolVersion")
            version = requested if requested in SUPPORTED_PROTOCOL_VERSIONS else SUPPORTED_PROTOCOL_VERSIONS[0]
            result = {
                "protocolVersion": version,
                "capabilities": {
                    "tools": {},
                    "resources": {}
                },
                "serverInfo": {
                    "name": SERVER_NAME,
                    "version": __version__
                }
            }
            return create_success_response(request_id, result)

        elif method == "ping":
            return create_success_response(request_id, {})

        elif method == "tools/list":
            return create_success_response(request_id, {"tools": _tools_list()})

        elif method == "tools/call":
            tool_name = params.get("name")
            if not tool_name:
                return create_error_response(
                    request_id, JsonRpcError.INVALID_PARAMS, "Missing tool name"
                )

            logger.info(f"[TOOL_CALL] {tool_name}")
            payload, is_error = await services.call_tool(tool_name, params.get("arguments"))
            text = to_json({"error": payload} if is_error else payload)

            return create_success_response(request_id, {
                "content": [{"type": "text", "text": text}],
                "isError": is_error
            })

        elif method == "resources/list":
            try:
                resources = await services.gateway.list_resources()
            except ToolError as e:
                logger.warning(f"⚠️  list_resources failed: [{e.kind}] {e.message}")
                resources = []
            return create_success_response(request_id, {"resources": resources})

        elif method == "resources/read":
            uri = params.get("uri")
            if not uri:
                return create_error_response(
                    request_id, JsonRpcError.INVALID_PARAMS, "Missing resource uri"
                )
            resource = await services.gateway.read_resource(uri)
            return create_success_response(request_id, {"contents": [resource]})

        elif method.startswith("notifications/"):
            return None

        else:
            return create_error_response(
                request_id, JsonRpcError.METHOD_NOT_FOUND, f"Unknown method: {method}"
            )

    except ToolError as e:
        return create_error_response(
            request_id, JsonRpcError.INVALID_PARAMS, e.message, serialize_error(e)
        )
    except Exception as e:
        logger.error(f"Error handling method {method}: {e}", exc_info=True)
        return create_error_response(
            request_id, JsonRpcError.INTERNAL_ERROR, str(e)
        )


def create_app(services: ServiceContainer, manage_lifecycle: bool = True) -> FastAPI:
    """
    Build the FastAPI app around one ServiceContainer.

    With manage_lifecycle the container's startup/shutdown run as the app's
    lifespan.
    """

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        if manage_lifecycle:
            await services.startup()
        try:
            yield
        finally:
            if manage_lifecycle:
                await services.shutdown()

    app = FastAPI(title="MySQL MCP Server - Streamable HTTP", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["MCP-Protocol-Version"],
    )

    @app.post("/mcp")
    async def mcp_post_endpoint(
        request: Request,
        mcp_protocol_version: Optional[str] = Header(None, alias="MCP-Protocol-Version")
    ):
        """
        POST /mcp - Main MCP endpoint for JSON-RPC requests.

        Returns:
        - 202 Accepted for notifications (no response body)
        - 200 OK with a JSON-RPC response otherwise
        """
        if mcp_protocol_version and not validate_mcp_protocol_version(mcp_protocol_version):
            return JSONResponse(
                status_code=HTTP_400_BAD_REQUEST,
                content=create_error_response(
                    None, JsonRpcError.INVALID_REQUEST,
                    f"Unsupported MCP protocol version: {mcp_protocol_version}"
                )
            )

        try:
            body = await request.json()
        except json.JSONDecodeError as e:
            return JSONResponse(
                status_code=HTTP_400_BAD_REQUEST,
                content=create_error_response(
                    None, JsonRpcError.PARSE_ERROR, f"Invalid JSON: {str(e)}"
                )
            )

        if not is_valid_jsonrpc(body):
            request_id = body.get("id") if isinstance(body, dict) else None
            return JSONResponse(
                status_code=HTTP_400_BAD_REQUEST,
                content=create_error_response(
                    request_id, JsonRpcError.INVALID_REQUEST, "Invalid JSON-RPC request"
                )
            )

        if is_notification(body):
            await handle_mcp_request(services, body)
            return Response(status_code=HTTP_202_ACCEPTED)

        response = await handle_mcp_request(services, body)
        if response is None:
            return Response(status_code=HTTP_202_ACCEPTED)

        return JSONResponse(content=response)

    @app.get("/mcp")
    async def mcp_get_endpoint():
        """GET /mcp - SSE stream kept alive with comments; no server push yet."""
        async def event_generator():
            while True:
                yield ": keepalive\n\n"
                await asyncio.sleep(30)

        return StreamingResponse(
            event_generator(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive"
            }
        )

    @app.get("/healthz")
    async def health_check():
        """Process health plus MySQL session state"""
        try:
            health = await services.gateway.health()
        except ToolError as e:
            logger.error(f"Health check failed: {e.message}")
            return JSONResponse(
                status_code=HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "unhealthy", "error": serialize_error(e)}
            )

        return JSONResponse(content={
            "status": "healthy",
            "database": "connected" if health["ok"] else "not authenticated",
        })

    return app


def run_http_server(host: str = "127.0.0.1", port: int = 3333):
    """
    Run the MCP server with Streamable HTTP transport.

    Args:
        host: Host to bind to
        port: Port to listen on
    """
    config = ServerConfig.from_environment()
    logging.getLogger().setLevel(config.log_level)

    app = create_app(ServiceContainer(config))
    logger.info(f"MySQL MCP Server (HTTP) starting on http://{host}:{port}/mcp")
    uvicorn.run(app, host=host, port=port, log_level=config.log_level.lower())
