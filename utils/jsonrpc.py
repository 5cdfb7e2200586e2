"""
JSON-RPC 2.0 helpers for the HTTP transport.

Covers message validation, the standard error codes and response envelopes.
"""

from typing import Any, Optional

JSONRPC_VERSION = "2.0"

# MCP protocol revisions the HTTP transport answers to
SUPPORTED_PROTOCOL_VERSIONS = ("2024-11-05", "2025-03-26", "2025-06-18")


class JsonRpcError:
    """Standard JSON-RPC 2.0 error codes"""
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


def is_valid_jsonrpc(data: Any) -> bool:
    """A request or notification: version 2.0 and a string method."""
    if not isinstance(data, dict):
        return False
    if data.get("jsonrpc") != JSONRPC_VERSION:
        return False
    return isinstance(data.get("method"), str)


def is_notification(data: dict) -> bool:
    """Notifications carry no id and get no response."""
    return "id" not in data


def create_success_response(request_id: Any, result: Any) -> dict:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "result": result
    }


def create_error_response(request_id: Any, code: int, message: str, data: Any = None) -> dict:
    """
    Create a JSON-RPC error response.

    Args:
        request_id: ID from original request (can be None)
        code: One of the JsonRpcError codes
        message: Error message
        data: Optional structured detail, e.g. a tool error envelope
    """
    error = {
        "code": code,
        "message": message
    }

    if data is not None:
        error["data"] = data

    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": error
    }


def validate_mcp_protocol_version(version: Optional[str]) -> bool:
    """Check an MCP-Protocol-Version header value."""
    return bool(version) and version in SUPPORTED_PROTOCOL_VERSIONS
