"""
Query Builder

Translates validated tool arguments into parameterized MySQL statements.
All values are passed as driver parameters (%s), never interpolated.
Identifiers (database, table, column names) are validated and backtick-quoted
by query.identifiers before they touch SQL text.

Supports:
- Exact-match filters (`col = %s`, `col IS NULL` for None values)
- ORDER BY "column [ASC|DESC]"
- LIMIT / OFFSET as bound parameters
- INSERT / UPDATE / DELETE against a database-qualified table
"""

from typing import Any, Mapping, Optional, Sequence

from utils.errors import ValidationError

from .identifiers import quote_identifier


ORDER_DIRECTIONS = ("ASC", "DESC")
ORDER_BY_FORMAT_ERROR = "Invalid parameter: orderBy must be in format 'column [ASC|DESC]'"


def split_order_by(expression: str) -> tuple[str, Optional[str]]:
    """
    Split "column" / "column DIRECTION" into (column, DIRECTION or None).

    Only checks the grammar; the column is validated as an identifier by the
    builder.
    """
    tokens = expression.split() if isinstance(expression, str) else []
    if not tokens or len(tokens) > 2:
        raise ValidationError(ORDER_BY_FORMAT_ERROR)

    column = tokens[0]
    direction = None
    if len(tokens) == 2:
        direction = tokens[1].upper()
        if direction not in ORDER_DIRECTIONS:
            raise ValidationError(ORDER_BY_FORMAT_ERROR)
    return column, direction


class QueryBuilder:
    """Builds parameterized SQL from structured row-operation input."""

    def build_table_ref(self, database: str, table: str) -> str:
        """`database`.`table` with both parts validated."""
        return f"{quote_identifier(database, 'database')}.{quote_identifier(table, 'table')}"

    def build_where(self, where: Optional[Mapping[str, Any]]) -> tuple[str, list]:
        """
        Build a WHERE clause from an exact-match filter mapping.

        Returns ("", []) for an empty or missing filter; the caller decides
        whether an unfiltered statement is acceptable.
        """
        if not where:
            return "", []

        conditions = []
        params: list = []
        for column, value in where.items():
            col = quote_identifier(column, f"where.{column}")
            if value is None:
                conditions.append(f"{col} IS NULL")
            else:
                conditions.append(f"{col} = %s")
                params.append(value)

        return f" WHERE {' AND '.join(conditions)}", params

    def build_order_by(self, expression: Optional[str]) -> str:
        if expression is None:
            return ""
        column, direction = split_order_by(expression)
        clause = f" ORDER BY {quote_identifier(column, 'orderBy')}"
        if direction:
            clause += f" {direction}"
        return clause

    def build_columns(self, columns: Optional[Sequence[str]]) -> str:
        if not columns:
            return "*"
        return ", ".join(quote_identifier(column, f"columns.{column}") for column in columns)

    def build_select(
        self,
        table_ref: str,
        columns: Optional[Sequence[str]] = None,
        where: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> tuple[str, list]:
        """
        Build a SELECT for a database-qualified table.
        Returns (sql, params).
        """
        if offset is not None and limit is None:
            raise ValidationError("Invalid parameter: offset requires limit")

        select_clause = self.build_columns(columns)
        where_clause, params = self.build_where(where)
        order_clause = self.build_order_by(order_by)

        limit_clause = ""
        if limit is not None:
            limit_clause = " LIMIT %s"
            params.append(limit)
            if offset is not None:
                limit_clause += " OFFSET %s"
                params.append(offset)

        sql = f"SELECT {select_clause} FROM {table_ref}{where_clause}{order_clause}{limit_clause}"
        return sql, params

    def build_insert(self, table_ref: str, data: Mapping[str, Any]) -> tuple[str, list]:
        if not data:
            raise ValidationError("Invalid parameter: data cannot be empty")

        columns = ", ".join(quote_identifier(column, f"data.{column}") for column in data)
        placeholders = ", ".join(["%s"] * len(data))
        sql = f"INSERT INTO {table_ref} ({columns}) VALUES ({placeholders})"
        return sql, list(data.values())

    def build_update(
        self,
        table_ref: str,
        data: Mapping[str, Any],
        where: Mapping[str, Any],
    ) -> tuple[str, list]:
        if not data:
            raise ValidationError("Invalid parameter: data cannot be empty")

        set_clause = ", ".join(
            f"{quote_identifier(column, f'data.{column}')} = %s" for column in data
        )
        where_clause, where_params = self.build_where(where)
        if not where_clause:
            raise ValidationError("Invalid parameter: where cannot be empty for update_rows")

        sql = f"UPDATE {table_ref} SET {set_clause}{where_clause}"
        return sql, [*data.values(), *where_params]

    def build_delete(self, table_ref: str, where: Mapping[str, Any]) -> tuple[str, list]:
        where_clause, params = self.build_where(where)
        if not where_clause:
            raise ValidationError("Invalid parameter: where cannot be empty for delete_rows")

        return f"DELETE FROM {table_ref}{where_clause}", params

    def build_use(self, database: str) -> str:
        return f"USE {quote_identifier(database, 'database')}"


# Catalog lookups: metadata queries, every value bound
LIST_DATABASES_SQL = "SHOW DATABASES"

SCHEMA_EXISTS_SQL = (
    "SELECT SCHEMA_NAME AS name FROM information_schema.schemata WHERE SCHEMA_NAME = %s"
)

LIST_TABLES_SQL = """
    SELECT TABLE_SCHEMA AS databaseName, TABLE_NAME AS tableName, TABLE_TYPE AS tableType
    FROM information_schema.tables
    WHERE TABLE_SCHEMA = %s
    ORDER BY TABLE_NAME
"""

DESCRIBE_TABLE_SQL = """
    SELECT
        COLUMN_NAME AS columnName,
        DATA_TYPE AS dataType,
        IS_NULLABLE AS isNullable,
        COLUMN_KEY AS columnKey,
        COLUMN_DEFAULT AS defaultValue,
        EXTRA AS extra
    FROM information_schema.columns
    WHERE TABLE_SCHEMA = %s
      AND TABLE_NAME = %s
    ORDER BY ORDINAL_POSITION
"""

__all__ = [
    "QueryBuilder",
    "split_order_by",
    "LIST_DATABASES_SQL",
    "SCHEMA_EXISTS_SQL",
    "LIST_TABLES_SQL",
    "DESCRIBE_TABLE_SQL",
]
