"""
Argument models for every MCP tool.
Using Pydantic for shape validation and coercion.

Each tool gets one model; `query.validators.parse_arguments` is the single
parse-or-fail step that turns raw tool arguments into one of these.

Models only check shape and bounds (required fields, types, non-empty
filters, integer ranges, orderBy grammar). Whether a name is a legal SQL
identifier is decided later by query.identifiers when SQL is built.
"""

from typing import Any, Optional, List, Dict
from pydantic import BaseModel, Field, field_validator, ConfigDict

from query.builder import split_order_by
from utils.errors import ValidationError as ToolValidationError

SCALAR_TYPES = (str, int, float, bool)


def _require_scalars(values: Dict[str, Any], field_name: str) -> Dict[str, Any]:
    for key, value in values.items():
        if value is not None and not isinstance(value, SCALAR_TYPES):
            raise ValueError(f"{field_name}.{key} must be a string, number, boolean or null")
    return values


class ToolArguments(BaseModel):
    """Base model for tool arguments"""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class EmptyArgs(ToolArguments):
    """Tools that take no arguments (status, logout, health, list_databases)"""


# ============================================================================
# Session
# ============================================================================

class AuthenticateArgs(ToolArguments):
    """authenticate request"""
    host: Optional[str] = Field(None, min_length=1, description="MySQL host (default: 127.0.0.1)")
    port: Optional[int] = Field(None, description="MySQL port (default: 3306)")
    user: str = Field(..., min_length=1)
    password: str
    database: Optional[str] = Field(None, min_length=1, description="Default database/schema")
    tls: bool = False

    @field_validator('port')
    @classmethod
    def validate_port(cls, v):
        if v is not None and not 1 <= v <= 65535:
            raise ValueError("port must be between 1 and 65535")
        return v


class UseDatabaseArgs(ToolArguments):
    """use_database request"""
    database: str = Field(..., min_length=1)


# ============================================================================
# Schema discovery
# ============================================================================

class ListTablesArgs(ToolArguments):
    """list_tables request"""
    database: Optional[str] = Field(None, min_length=1)


class DescribeTableArgs(ToolArguments):
    """describe_table request"""
    table: str = Field(..., min_length=1)
    database: Optional[str] = Field(None, min_length=1)


# ============================================================================
# Rows
# ============================================================================

class SelectRowsArgs(ToolArguments):
    """select_rows request"""
    table: str = Field(..., min_length=1)
    database: Optional[str] = Field(None, min_length=1)
    columns: Optional[List[str]] = None
    where: Optional[Dict[str, Any]] = None
    order_by: Optional[str] = Field(None, alias="orderBy")
    limit: Optional[int] = None
    offset: Optional[int] = None

    @field_validator('where')
    @classmethod
    def validate_where(cls, v):
        if v is None:
            return v
        return _require_scalars(v, "where")

    @field_validator('order_by')
    @classmethod
    def validate_order_by(cls, v):
        if v is None:
            return v
        try:
            split_order_by(v)
        except ToolValidationError:
            raise ValueError("orderBy must be in format 'column [ASC|DESC]'")
        return v

    @field_validator('limit')
    @classmethod
    def validate_limit(cls, v):
        if v is not None and v < 1:
            raise ValueError("limit must be greater than 0")
        return v

    @field_validator('offset')
    @classmethod
    def validate_offset(cls, v):
        if v is not None and v < 0:
            raise ValueError("offset must be 0 or greater")
        return v


class InsertRowArgs(ToolArguments):
    """insert_row request"""
    table: str = Field(..., min_length=1)
    database: Optional[str] = Field(None, min_length=1)
    data: Dict[str, Any]

    @field_validator('data')
    @classmethod
    def validate_data(cls, v):
        if not v:
            raise ValueError("data cannot be empty")
        return _require_scalars(v, "data")


class UpdateRowsArgs(ToolArguments):
    """update_rows request"""
    table: str = Field(..., min_length=1)
    database: Optional[str] = Field(None, min_length=1)
    data: Dict[str, Any]
    where: Dict[str, Any]

    @field_validator('data')
    @classmethod
    def validate_data(cls, v):
        if not v:
            raise ValueError("data cannot be empty")
        return _require_scalars(v, "data")

    @field_validator('where')
    @classmethod
    def validate_where(cls, v):
        if not v:
            raise ValueError("where cannot be an empty object")
        return _require_scalars(v, "where")


class DeleteRowsArgs(ToolArguments):
    """delete_rows request"""
    table: str = Field(..., min_length=1)
    database: Optional[str] = Field(None, min_length=1)
    where: Dict[str, Any]

    @field_validator('where')
    @classmethod
    def validate_where(cls, v):
        if not v:
            raise ValueError("where cannot be an empty object")
        return _require_scalars(v, "where")


class ExecuteSqlArgs(ToolArguments):
    """execute_sql request"""
    sql: str = Field(..., min_length=1)
    params: Optional[List[Any]] = None
    database: Optional[str] = Field(None, min_length=1)

    @field_validator('sql')
    @classmethod
    def validate_sql(cls, v):
        if not v.strip():
            raise ValueError("sql cannot be blank")
        return v
