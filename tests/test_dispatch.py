"""
Dispatcher Tests
Tool calls routed through the handler registry like the real server does:
parse arguments, run the handler, fold every failure into {kind, message}.
"""

import aiomysql
import pytest

from handlers import HANDLER_REGISTRY, get_handler, list_all_handlers
from tests.handler_test_utils import FakePool
from tools import get_core_tool_catalog

ROW_AND_SCHEMA_CALLS = [
    ("list_databases", {}),
    ("use_database", {"database": "shop"}),
    ("list_tables", {"database": "shop"}),
    ("describe_table", {"table": "orders", "database": "shop"}),
    ("select_rows", {"table": "orders", "database": "shop"}),
    ("insert_row", {"table": "orders", "database": "shop", "data": {"customer_id": 1}}),
    ("update_rows", {"table": "orders", "database": "shop", "data": {"a": 1}, "where": {"id": 1}}),
    ("delete_rows", {"table": "orders", "database": "shop", "where": {"id": 1}}),
    ("execute_sql", {"sql": "SELECT 1", "database": "shop"}),
]


class TestRegistry:

    def test_every_declared_tool_has_a_handler(self):
        declared = {tool.name for tool in get_core_tool_catalog()}
        assert declared == set(list_all_handlers())

    def test_lookup(self):
        model, handler = get_handler("select_rows")
        assert model.__name__ == "SelectRowsArgs"
        assert callable(handler)
        assert get_handler("drop_everything") is None

    def test_declared_required_fields_match_models(self):
        """Tool schemas and argument models agree on what is required."""
        for tool in get_core_tool_catalog():
            model, _ = HANDLER_REGISTRY[tool.name]
            required = {
                field.alias or name
                for name, field in model.model_fields.items()
                if field.is_required()
            }
            assert set(tool.inputSchema.get("required", [])) == required, tool.name


class TestDispatch:

    @pytest.mark.asyncio
    async def test_unknown_tool(self, helper):
        payload = await helper.error("drop_everything", {})
        assert payload == {"kind": "ApiError", "message": "Unknown tool: drop_everything"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name, arguments", ROW_AND_SCHEMA_CALLS)
    async def test_requires_authentication(self, helper, pool_factory, name, arguments):
        """Every database tool fails with AuthError before authenticate."""
        payload = await helper.error(name, arguments)

        assert payload["kind"] == "AuthError"
        assert payload["message"] == "Not authenticated. Call authenticate first."
        assert pool_factory.calls == []

    @pytest.mark.asyncio
    async def test_validation_error_envelope(self, helper):
        payload = await helper.error("authenticate", {"user": "app"})
        assert payload == {"kind": "ValidationError", "message": "Missing required parameter: password"}

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_internal_error(self, helper, monkeypatch):
        async def explode(*args, **kwargs):
            raise RuntimeError("unexpected")

        monkeypatch.setattr(helper.services.session, "logout", explode)

        payload = await helper.error("logout", {})
        assert payload == {"kind": "InternalError", "message": "unexpected"}

    @pytest.mark.asyncio
    async def test_status_before_and_after_authenticate(self, helper):
        assert await helper.ok("status") == {"authenticated": False, "session": None}

        summary = await helper.ok("authenticate", {"user": "app", "password": "pw", "database": "shop"})
        assert summary["authenticated"] is True

        status = await helper.ok("status")
        assert status["authenticated"] is True
        assert status["session"]["database"] == "shop"
        assert "password" not in status["session"]

    @pytest.mark.asyncio
    async def test_failed_authenticate_clears_session(self, helper, pool_factory):
        await helper.ok("authenticate", {"user": "app", "password": "pw"})

        failing = FakePool()
        failing.on("SELECT 1", error=aiomysql.OperationalError(1045, "Access denied for user 'app'"))
        pool_factory.pools.append(failing)

        payload = await helper.error("authenticate", {"user": "app", "password": "wrong"})

        assert payload["kind"] == "AuthError"
        assert "Access denied" in payload["message"]
        assert await helper.ok("status") == {"authenticated": False, "session": None}

    @pytest.mark.asyncio
    async def test_logout_twice(self, helper):
        await helper.ok("authenticate", {"user": "app", "password": "pw"})

        assert (await helper.ok("logout"))["authenticated"] is False
        assert (await helper.ok("logout"))["authenticated"] is False

    @pytest.mark.asyncio
    async def test_health_never_errors_unauthenticated(self, helper):
        health = await helper.ok("health")
        assert health["ok"] is False
        assert health["authenticated"] is False


class TestRowToolProperties:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name, arguments", [
        ("update_rows", {"table": "orders", "data": {"status": "x"}, "where": {}}),
        ("delete_rows", {"table": "orders", "where": {}}),
        ("insert_row", {"table": "orders", "data": {}}),
    ])
    async def test_empty_required_mappings_rejected(self, authed, helper, pool, name, arguments):
        payload = await helper.error(name, arguments)

        assert payload["kind"] == "ValidationError"
        assert pool.statements == ["select 1"]

    @pytest.mark.asyncio
    async def test_select_with_empty_where_succeeds(self, authed, helper, pool):
        pool.on("FROM `shop`.`orders`", rows=[{"id": 1}, {"id": 2}])

        result = await helper.ok("select_rows", {"table": "orders", "where": {}})
        assert result["count"] == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("table, database", [
        ("orders", None), ("customers", "shop"), ("events", "analytics"),
    ])
    async def test_offset_without_limit_always_fails(self, authed, helper, table, database):
        arguments = {"table": table, "offset": 5}
        if database:
            arguments["database"] = database

        payload = await helper.error("select_rows", arguments)
        assert payload == {"kind": "ValidationError", "message": "Invalid parameter: offset requires limit"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("order_by, ok", [
        ("col DOWN", False),
        ("col ASC extra", False),
        ("col", True),
        ("col DESC", True),
    ])
    async def test_order_by_grammar(self, authed, helper, order_by, ok):
        payload, is_error = await helper.call("select_rows", {"table": "orders", "orderBy": order_by})

        assert is_error is not ok
        if not ok:
            assert payload["kind"] == "ValidationError"

    @pytest.mark.asyncio
    async def test_unsafe_identifier_reaches_no_sql(self, authed, helper, pool):
        payload = await helper.error("select_rows", {"table": "orders; DROP TABLE users"})

        assert payload["kind"] == "ValidationError"
        assert "table must contain only letters" in payload["message"]
        assert pool.statements == ["select 1"]

    @pytest.mark.asyncio
    async def test_insert_returns_generated_id(self, authed, helper, pool):
        pool.on("INSERT INTO", rowcount=1, lastrowid=17)

        result = await helper.ok("insert_row", {"table": "orders", "data": {"customer_id": 1}})
        assert result == {"insertedId": 17, "affectedRows": 1}

    @pytest.mark.asyncio
    async def test_database_error_envelope(self, authed, helper, pool):
        pool.on("INSERT INTO", error=aiomysql.IntegrityError(1062, "Duplicate entry '1' for key 'orders.PRIMARY'"))

        payload = await helper.error("insert_row", {"table": "orders", "data": {"id": 1}})

        assert payload["kind"] == "DatabaseError"
        assert "Duplicate entry '1' for key 'orders.PRIMARY'" in payload["message"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("sql", [
        "SELECT * FROM orders WHERE id = ?",
        "SELECT * FROM orders WHERE note LIKE 'a%' AND id = %s",
    ])
    async def test_execute_sql_placeholder_mismatch_envelope(self, authed, helper, sql):
        payload = await helper.error("execute_sql", {"sql": sql, "params": [1]})

        assert payload["kind"] == "ValidationError"
        assert payload["message"].startswith("Invalid parameter: params do not match")

    @pytest.mark.asyncio
    async def test_use_database_unknown(self, authed, helper):
        payload = await helper.error("use_database", {"database": "ghost"})
        assert payload == {"kind": "ApiError", "message": "Database not found: ghost"}
