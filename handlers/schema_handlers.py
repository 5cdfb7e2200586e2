"""
Schema Discovery Handlers
Handles: list_databases, list_tables, describe_table
"""

from typing import Any

from models import DescribeTableArgs, EmptyArgs, ListTablesArgs


async def handle_list_databases(gateway, args: EmptyArgs) -> dict[str, Any]:
    return await gateway.list_databases()


async def handle_list_tables(gateway, args: ListTablesArgs) -> dict[str, Any]:
    """Tables of the given database, or of the active one"""
    return await gateway.list_tables(args.database)


async def handle_describe_table(gateway, args: DescribeTableArgs) -> dict[str, Any]:
    return await gateway.describe_table(args.table, args.database)
