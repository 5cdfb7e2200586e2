"""
Error types surfaced to MCP callers.

Every failure leaves the dispatcher as a {kind, message} envelope; these
classes carry the kind. Driver errors are wrapped in DatabaseError with the
server's original text preserved.
"""

from typing import Any, Optional


class ToolError(Exception):
    """Base class for errors reported back to the caller."""

    kind = "InternalError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ToolError):
    """Malformed, missing or out-of-range arguments. Never retried."""

    kind = "ValidationError"


class AuthError(ToolError):
    """No active session, or an authentication attempt failed."""

    kind = "AuthError"


class ApiError(ToolError):
    """Requested resource (database, table, tool) does not exist."""

    kind = "ApiError"


class DatabaseError(ToolError):
    """Network, syntax or constraint failure reported by MySQL."""

    kind = "DatabaseError"

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


def serialize_error(error: BaseException) -> dict[str, Any]:
    """Shape any exception into the uniform error envelope."""
    if isinstance(error, ToolError):
        return {"kind": error.kind, "message": error.message}
    return {"kind": ToolError.kind, "message": str(error) or error.__class__.__name__}


__all__ = [
    "ToolError",
    "ValidationError",
    "AuthError",
    "ApiError",
    "DatabaseError",
    "serialize_error",
]
