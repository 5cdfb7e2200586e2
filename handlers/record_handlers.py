"""
Record Handlers
Handles: select_rows, insert_row, update_rows, delete_rows, execute_sql

Filters are exact-match only. update_rows and delete_rows refuse to run
without a filter.
"""

from typing import Any

from models import (
    DeleteRowsArgs,
    ExecuteSqlArgs,
    InsertRowArgs,
    SelectRowsArgs,
    UpdateRowsArgs,
)


async def handle_select_rows(gateway, args: SelectRowsArgs) -> dict[str, Any]:
    return await gateway.select_rows(
        table=args.table,
        database=args.database,
        columns=args.columns,
        where=args.where,
        order_by=args.order_by,
        limit=args.limit,
        offset=args.offset,
    )


async def handle_insert_row(gateway, args: InsertRowArgs) -> dict[str, Any]:
    return await gateway.insert_row(args.table, args.data, database=args.database)


async def handle_update_rows(gateway, args: UpdateRowsArgs) -> dict[str, Any]:
    return await gateway.update_rows(args.table, args.data, args.where, database=args.database)


async def handle_delete_rows(gateway, args: DeleteRowsArgs) -> dict[str, Any]:
    return await gateway.delete_rows(args.table, args.where, database=args.database)


async def handle_execute_sql(gateway, args: ExecuteSqlArgs) -> dict[str, Any]:
    """Raw SQL; values must still be passed as params"""
    return await gateway.execute_sql(args.sql, params=args.params, database=args.database)
