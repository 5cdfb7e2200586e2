"""
Schema Discovery MCP Tools
Use these to understand the database structure before reading or writing rows.
"""

from mcp import types

from .session_tools import NO_ARGUMENTS


def list_databases() -> types.Tool:
    return types.Tool(
        name="list_databases",
        description="List databases available to the current MySQL user.",
        inputSchema=NO_ARGUMENTS
    )


def list_tables() -> types.Tool:
    return types.Tool(
        name="list_tables",
        description="List tables in a database. Uses the session's default database when none is given.",
        inputSchema={
            "type": "object",
            "properties": {
                "database": {
                    "type": "string",
                    "description": "Database name (optional)"
                }
            },
            "additionalProperties": False
        }
    )


def describe_table() -> types.Tool:
    return types.Tool(
        name="describe_table",
        description="Describe table columns: name, data type, nullability, key, default value and extra attributes.",
        inputSchema={
            "type": "object",
            "properties": {
                "database": {
                    "type": "string",
                    "description": "Database name (optional)"
                },
                "table": {
                    "type": "string",
                    "description": "Table name"
                }
            },
            "required": ["table"],
            "additionalProperties": False
        }
    )


def get_schema_tools() -> list[types.Tool]:
    return [list_databases(), list_tables(), describe_table()]
