"""
Record MCP Tools
Row-level CRUD with exact-match filters, plus raw SQL execution.

Table, column and database names must contain only letters, numbers and
underscore. Values are always sent to MySQL as bound parameters.
"""

from mcp import types

DATABASE_PROPERTY = {
    "type": "string",
    "description": "Database name (optional, defaults to the session's database)"
}

TABLE_PROPERTY = {
    "type": "string",
    "description": "Table name"
}


def select_rows() -> types.Tool:
    return types.Tool(
        name="select_rows",
        description="Select rows with optional exact-match where filters, ordering and limit/offset pagination.",
        inputSchema={
            "type": "object",
            "properties": {
                "database": DATABASE_PROPERTY,
                "table": TABLE_PROPERTY,
                "columns": {
                    "type": "array",
                    "description": "Columns to select (default: all)",
                    "items": {"type": "string"}
                },
                "where": {
                    "type": "object",
                    "description": "Exact-match filters object (AND semantics). A null value matches IS NULL."
                },
                "orderBy": {
                    "type": "string",
                    "description": "Order expression: \"column\" or \"column ASC|DESC\""
                },
                "limit": {
                    "type": "integer",
                    "description": "Maximum row count (greater than 0)"
                },
                "offset": {
                    "type": "integer",
                    "description": "Rows to skip (requires limit)"
                }
            },
            "required": ["table"],
            "additionalProperties": False
        }
    )


def insert_row() -> types.Tool:
    return types.Tool(
        name="insert_row",
        description="Insert a single row into a table. Returns the generated auto-increment id when there is one.",
        inputSchema={
            "type": "object",
            "properties": {
                "database": DATABASE_PROPERTY,
                "table": TABLE_PROPERTY,
                "data": {
                    "type": "object",
                    "description": "Column-value object to insert (at least one column)"
                }
            },
            "required": ["table", "data"],
            "additionalProperties": False
        }
    )


def update_rows() -> types.Tool:
    return types.Tool(
        name="update_rows",
        description="Update rows matching exact-match where filters. An empty where is rejected.",
        inputSchema={
            "type": "object",
            "properties": {
                "database": DATABASE_PROPERTY,
                "table": TABLE_PROPERTY,
                "data": {
                    "type": "object",
                    "description": "Columns to update"
                },
                "where": {
                    "type": "object",
                    "description": "Exact-match filters object (required, non-empty)"
                }
            },
            "required": ["table", "data", "where"],
            "additionalProperties": False
        }
    )


def delete_rows() -> types.Tool:
    return types.Tool(
        name="delete_rows",
        description="Delete rows matching exact-match where filters. An empty where is rejected.",
        inputSchema={
            "type": "object",
            "properties": {
                "database": DATABASE_PROPERTY,
                "table": TABLE_PROPERTY,
                "where": {
                    "type": "object",
                    "description": "Exact-match filters object (required, non-empty)"
                }
            },
            "required": ["table", "where"],
            "additionalProperties": False
        }
    )


def execute_sql() -> types.Tool:
    """
    Returns the raw SQL tool. The statement runs verbatim; callers must pass
    values through params rather than splicing them into the SQL text.
    """
    return types.Tool(
        name="execute_sql",
        description="Execute custom SQL with optional positional parameters. Use %s placeholders and pass values in params. Statements returning rows come back as mode 'query', everything else as mode 'mutation' with affected/changed row counts and insert id.",
        inputSchema={
            "type": "object",
            "properties": {
                "sql": {
                    "type": "string",
                    "description": "SQL statement to execute"
                },
                "params": {
                    "type": "array",
                    "description": "Positional values for %s placeholders (not ?). When params are given, write a literal % in sql as %%",
                    "items": {}
                },
                "database": {
                    "type": "string",
                    "description": "Database name (optional, applies to this call only and does not change the session's database)"
                }
            },
            "required": ["sql"],
            "additionalProperties": False
        }
    )


def get_record_tools() -> list[types.Tool]:
    return [select_rows(), insert_row(), update_rows(), delete_rows(), execute_sql()]
