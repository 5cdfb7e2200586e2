"""
MCP Tools Package
Tool declarations (name, description, input JSON schema) by category:

- Session: authenticate, status, logout, use_database, health
- Schema discovery: list_databases, list_tables, describe_table
- Rows: select_rows, insert_row, update_rows, delete_rows, execute_sql
"""

from .session_tools import get_session_tools
from .schema_tools import get_schema_tools
from .record_tools import get_record_tools


def get_core_tool_catalog():
    """Get every MCP tool the server exposes, session tools first."""
    return [
        *get_session_tools(),
        *get_schema_tools(),
        *get_record_tools(),
    ]


__all__ = [
    "get_core_tool_catalog",
    "get_session_tools",
    "get_schema_tools",
    "get_record_tools",
]
