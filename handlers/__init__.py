"""
Handler Registry - Maps tool names to handler functions

Routes tool calls to their handler functions. Handlers are organized by
category matching the tools/ directory structure.

Architecture:
- Each handler module exports async functions: handle_<tool_name>(gateway, args)
- `args` is the pydantic model the registry pairs with the tool, already parsed
- dispatch() is the only place exceptions become {kind, message} envelopes

Usage:
    from handlers import dispatch

    payload, is_error = await dispatch(gateway, tool_name, arguments)
"""

import logging
from typing import Any, Callable, Optional, Tuple, Type

from pydantic import BaseModel

from models import (
    AuthenticateArgs,
    DeleteRowsArgs,
    DescribeTableArgs,
    EmptyArgs,
    ExecuteSqlArgs,
    InsertRowArgs,
    ListTablesArgs,
    SelectRowsArgs,
    UpdateRowsArgs,
    UseDatabaseArgs,
)
from query.validators import parse_arguments
from utils.errors import ApiError, ToolError, serialize_error

from . import record_handlers
from . import schema_handlers
from . import session_handlers

logger = logging.getLogger(__name__)


# Handler registry: {tool_name: (args_model, handler_function)}
HANDLER_REGISTRY = {
    # Session
    "authenticate": (AuthenticateArgs, session_handlers.handle_authenticate),
    "status": (EmptyArgs, session_handlers.handle_status),
    "logout": (EmptyArgs, session_handlers.handle_logout),
    "use_database": (UseDatabaseArgs, session_handlers.handle_use_database),
    "health": (EmptyArgs, session_handlers.handle_health),

    # Schema discovery
    "list_databases": (EmptyArgs, schema_handlers.handle_list_databases),
    "list_tables": (ListTablesArgs, schema_handlers.handle_list_tables),
    "describe_table": (DescribeTableArgs, schema_handlers.handle_describe_table),

    # Rows
    "select_rows": (SelectRowsArgs, record_handlers.handle_select_rows),
    "insert_row": (InsertRowArgs, record_handlers.handle_insert_row),
    "update_rows": (UpdateRowsArgs, record_handlers.handle_update_rows),
    "delete_rows": (DeleteRowsArgs, record_handlers.handle_delete_rows),
    "execute_sql": (ExecuteSqlArgs, record_handlers.handle_execute_sql),
}


def get_handler(tool_name: str) -> Optional[Tuple[Type[BaseModel], Callable]]:
    """
    Get handler information for a tool.

    Args:
        tool_name: Name of the tool to look up

    Returns:
        Tuple of (args_model, handler_function) or None if not found
    """
    return HANDLER_REGISTRY.get(tool_name)


def list_all_handlers() -> list[str]:
    """Get list of all registered tool names."""
    return list(HANDLER_REGISTRY.keys())


async def dispatch(gateway, tool_name: str, arguments: Optional[Any]) -> Tuple[Any, bool]:
    """
    Run one tool call end to end.

    Returns (payload, is_error). On failure the payload is the error
    envelope {kind, message}; exceptions never escape.
    """
    try:
        handler_info = get_handler(tool_name)
        if handler_info is None:
            raise ApiError(f"Unknown tool: {tool_name}")

        model, handler = handler_info
        args = parse_arguments(model, arguments)
        return await handler(gateway, args), False

    except ToolError as e:
        logger.warning(f"⚠️  {tool_name} failed: [{e.kind}] {e.message}")
        return serialize_error(e), True
    except Exception as e:
        logger.error(f"Error executing tool {tool_name}: {e}", exc_info=True)
        return serialize_error(e), True


__all__ = [
    "HANDLER_REGISTRY",
    "get_handler",
    "list_all_handlers",
    "dispatch",
]
