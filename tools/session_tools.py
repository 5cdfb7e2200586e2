"""
Session MCP Tools
Authentication, session state and default database selection.
"""

from mcp import types

NO_ARGUMENTS = {
    "type": "object",
    "properties": {},
    "additionalProperties": False
}


def authenticate() -> types.Tool:
    """
    Returns the authenticate tool. Every other database tool requires a
    successful call to this first.
    """
    return types.Tool(
        name="authenticate",
        description="Authenticate to MySQL using host/user/password credentials. Replaces any current session. The password is never echoed back.",
        inputSchema={
            "type": "object",
            "properties": {
                "host": {
                    "type": "string",
                    "description": "MySQL host (default: 127.0.0.1)"
                },
                "port": {
                    "type": "integer",
                    "description": "MySQL port (default: 3306)"
                },
                "user": {
                    "type": "string",
                    "description": "MySQL username"
                },
                "password": {
                    "type": "string",
                    "description": "MySQL password"
                },
                "database": {
                    "type": "string",
                    "description": "Default database/schema (optional)"
                },
                "tls": {
                    "type": "boolean",
                    "description": "Enable TLS connection"
                }
            },
            "required": ["user", "password"],
            "additionalProperties": False
        }
    )


def status() -> types.Tool:
    return types.Tool(
        name="status",
        description="Check current MySQL authentication status and session details.",
        inputSchema=NO_ARGUMENTS
    )


def logout() -> types.Tool:
    return types.Tool(
        name="logout",
        description="Clear the current MySQL session and close its connection pool. Safe to call when not authenticated.",
        inputSchema=NO_ARGUMENTS
    )


def use_database() -> types.Tool:
    return types.Tool(
        name="use_database",
        description="Set the default database for this session (like USE database). The database must exist.",
        inputSchema={
            "type": "object",
            "properties": {
                "database": {
                    "type": "string",
                    "description": "Database name to use by default"
                }
            },
            "required": ["database"],
            "additionalProperties": False
        }
    )


def health() -> types.Tool:
    return types.Tool(
        name="health",
        description="Check MySQL connection health and auth state.",
        inputSchema=NO_ARGUMENTS
    )


def get_session_tools() -> list[types.Tool]:
    return [authenticate(), status(), logout(), use_database(), health()]
