"""
Database Gateway

Turns validated tool arguments into SQL, runs it through the SessionManager
and shapes the results. Driver failures leave here as DatabaseError with the
server's original message kept.
"""

import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

import aiomysql

from database import SessionManager, bind_params
from query.builder import (
    DESCRIBE_TABLE_SQL,
    LIST_DATABASES_SQL,
    LIST_TABLES_SQL,
    QueryBuilder,
)
from query.identifiers import validate_identifier
from utils.error_messages import enhance_error_message, split_driver_error
from utils.errors import ApiError, DatabaseError, ValidationError
from utils.serialization import serialize_row, serialize_value, to_json

logger = logging.getLogger(__name__)

NO_DATABASE_SELECTED = (
    "No database selected. Pass the database parameter, call use_database, "
    "or authenticate with a default database."
)

PLACEHOLDER_MISMATCH = (
    "Invalid parameter: params do not match the %s placeholders in sql "
    "(use %s, not ?, and escape a literal % as %%)"
)

RESOURCE_URI_PATTERN = re.compile(r"^mysql://table/([^/]+)/([^/]+)$")
RESOURCE_MIME_TYPE = "application/json"

_CHANGED_ROWS_RE = re.compile(r"Changed:\s*(\d+)")


@dataclass(frozen=True)
class TargetRef:
    """Resolved (database, table) pair, both validated identifiers."""

    database: str
    table: str


def _changed_rows(connection) -> int:
    """Read the "Changed: N" count from the server's OK packet info."""
    result = getattr(connection, "_result", None)
    message = getattr(result, "message", None)
    if isinstance(message, (bytes, bytearray)):
        message = message.decode("utf-8", "replace")
    if not message:
        return 0
    match = _CHANGED_ROWS_RE.search(message)
    return int(match.group(1)) if match else 0


@contextmanager
def driver_errors():
    """Re-raise aiomysql/PyMySQL errors as DatabaseError."""
    try:
        yield
    except aiomysql.MySQLError as e:
        code, _ = split_driver_error(e)
        raise DatabaseError(enhance_error_message(e), code=code) from e


class DatabaseGateway:
    """Schema discovery, row CRUD and raw SQL against the session's pool."""

    def __init__(self, session: SessionManager, builder: Optional[QueryBuilder] = None):
        self.session = session
        self.builder = builder or QueryBuilder()

    # ------------------------------------------------------------------
    # Target resolution
    # ------------------------------------------------------------------

    def resolve_database(self, database: Optional[str] = None) -> str:
        """Explicit argument, else the session's active database."""
        self.session.require_session()
        resolved = database if database is not None else self.session.active_database
        if not resolved:
            raise ValidationError(NO_DATABASE_SELECTED)
        return validate_identifier(resolved, "database")

    def resolve_target(self, table: str, database: Optional[str] = None) -> TargetRef:
        resolved = self.resolve_database(database)
        return TargetRef(database=resolved, table=validate_identifier(table, "table"))

    def _table_ref(self, target: TargetRef) -> str:
        return self.builder.build_table_ref(target.database, target.table)

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    async def use_database(self, database: str) -> Dict[str, Any]:
        with driver_errors():
            name = await self.session.set_active_database(database)
        return {
            "message": f"Default database set to {name}",
            "database": name,
            "authenticated": True,
        }

    async def health(self) -> Dict[str, Any]:
        with driver_errors():
            return await self.session.health()

    # ------------------------------------------------------------------
    # Schema discovery
    # ------------------------------------------------------------------

    async def list_databases(self) -> Dict[str, Any]:
        self.session.require_session()
        with driver_errors():
            rows = await self.session.fetch_all(LIST_DATABASES_SQL)

        # SHOW DATABASES names its single column "Database"
        items = [{"name": str(next(iter(row.values())))} for row in rows if row]
        return {"items": items, "count": len(items)}

    async def list_tables(self, database: Optional[str] = None) -> Dict[str, Any]:
        target_database = self.resolve_database(database)
        with driver_errors():
            rows = await self.session.fetch_all(LIST_TABLES_SQL, [target_database])

        items = [
            {
                "database": str(row["databaseName"]),
                "name": str(row["tableName"]),
                "type": str(row["tableType"]),
            }
            for row in rows
        ]
        return {"items": items, "count": len(items)}

    async def describe_table(self, table: str, database: Optional[str] = None) -> Dict[str, Any]:
        target = self.resolve_target(table, database)
        with driver_errors():
            rows = await self.session.fetch_all(DESCRIBE_TABLE_SQL, [target.database, target.table])

        if not rows:
            raise ApiError(f"Table not found: {target.database}.{target.table}")

        columns = [
            {
                "name": str(row["columnName"]),
                "dataType": str(row["dataType"]),
                "isNullable": str(row["isNullable"]).upper() == "YES",
                "key": str(row.get("columnKey") or ""),
                "defaultValue": serialize_value(row.get("defaultValue")),
                "extra": str(row.get("extra") or ""),
            }
            for row in rows
        ]
        return {"database": target.database, "table": target.table, "columns": columns}

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------

    async def select_rows(
        self,
        table: str,
        database: Optional[str] = None,
        columns: Optional[Sequence[str]] = None,
        where: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Dict[str, Any]:
        target = self.resolve_target(table, database)
        sql, params = self.builder.build_select(
            self._table_ref(target),
            columns=columns,
            where=where,
            order_by=order_by,
            limit=limit,
            offset=offset,
        )
        with driver_errors():
            rows = await self.session.fetch_all(sql, params)

        items = [serialize_row(row) for row in rows]
        return {"items": items, "count": len(items)}

    async def insert_row(
        self,
        table: str,
        data: Mapping[str, Any],
        database: Optional[str] = None,
    ) -> Dict[str, Any]:
        target = self.resolve_target(table, database)
        sql, params = self.builder.build_insert(self._table_ref(target), data)
        with driver_errors():
            affected, insert_id = await self.session.execute(sql, params)

        logger.info(f"Inserted {affected} row(s) into {target.database}.{target.table}")
        return {"insertedId": insert_id, "affectedRows": affected}

    async def update_rows(
        self,
        table: str,
        data: Mapping[str, Any],
        where: Mapping[str, Any],
        database: Optional[str] = None,
    ) -> Dict[str, Any]:
        target = self.resolve_target(table, database)
        sql, params = self.builder.build_update(self._table_ref(target), data, where)
        with driver_errors():
            affected, _ = await self.session.execute(sql, params)

        logger.info(f"Updated {affected} row(s) in {target.database}.{target.table}")
        return {"affectedRows": affected}

    async def delete_rows(
        self,
        table: str,
        where: Mapping[str, Any],
        database: Optional[str] = None,
    ) -> Dict[str, Any]:
        target = self.resolve_target(table, database)
        sql, params = self.builder.build_delete(self._table_ref(target), where)
        with driver_errors():
            affected, _ = await self.session.execute(sql, params)

        logger.info(f"Deleted {affected} row(s) from {target.database}.{target.table}")
        return {"affectedRows": affected}

    async def execute_sql(
        self,
        sql: str,
        params: Optional[List[Any]] = None,
        database: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Run caller-supplied SQL verbatim on one dedicated connection.

        The statement text is the caller's responsibility; values still go
        through `params` as %s placeholders. When a database is resolved,
        `USE` is issued on this connection only and the session's active
        database is left alone. The connection is discarded afterwards, so
        neither that `USE` nor session state set by the statement reaches
        later calls. Result mode follows the driver: a statement that
        produced a result set is a "query", anything else a "mutation".
        """
        self.session.require_session()
        target = database if database is not None else self.session.active_database
        if target is not None:
            target = validate_identifier(target, "database")

        with driver_errors():
            async with self.session.acquire(discard=True) as conn:
                async with conn.cursor(aiomysql.DictCursor) as cursor:
                    if target:
                        await cursor.execute(self.builder.build_use(target))

                    logger.debug(f"execute_sql: {' '.join(sql.split())}")
                    try:
                        await cursor.execute(sql, bind_params(params))
                    except (TypeError, ValueError) as e:
                        # the driver interpolates params client-side with %
                        raise ValidationError(PLACEHOLDER_MISMATCH) from e

                    if cursor.description is not None:
                        rows = await cursor.fetchall()
                        items = [serialize_row(row) for row in rows]
                        return {
                            "mode": "query",
                            "sql": sql,
                            "database": target,
                            "count": len(items),
                            "items": items,
                        }

                    return {
                        "mode": "mutation",
                        "sql": sql,
                        "database": target,
                        "affectedRows": cursor.rowcount,
                        "changedRows": _changed_rows(conn),
                        "insertId": cursor.lastrowid or 0,
                    }

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    async def list_resources(self) -> List[Dict[str, str]]:
        """One resource per table of the active database; empty when there is none."""
        if not self.session.is_authenticated or not self.session.active_database:
            return []

        tables = await self.list_tables()
        return [
            {
                "uri": f"mysql://table/{item['database']}/{item['name']}",
                "name": f"{item['database']}.{item['name']}",
                "description": f"MySQL table {item['database']}.{item['name']}",
                "mimeType": RESOURCE_MIME_TYPE,
            }
            for item in tables["items"]
        ]

    async def read_resource(self, uri: str) -> Dict[str, str]:
        match = RESOURCE_URI_PATTERN.match(uri)
        if not match:
            raise ValidationError("Invalid resource URI")

        database, table = match.groups()
        description = await self.describe_table(table, database)
        return {"uri": uri, "mimeType": RESOURCE_MIME_TYPE, "text": to_json(description)}
