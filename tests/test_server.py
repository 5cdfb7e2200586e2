"""
MCP Server Handler Tests
The stdio server's tool/resource handlers wired to a ServiceContainer.
"""

import json

import aiomysql
import pytest

import server


@pytest.fixture
def live_services(services, monkeypatch):
    monkeypatch.setattr(server, "services", services)
    return services


class TestTools:

    @pytest.mark.asyncio
    async def test_list_tools(self):
        names = [tool.name for tool in await server.handle_list_tools()]

        assert names[:5] == ["authenticate", "status", "logout", "use_database", "health"]
        assert len(names) == len(set(names)) == 13

    @pytest.mark.asyncio
    async def test_call_tool_returns_json_text(self, live_services):
        content = await server.handle_call_tool("status", {})

        assert len(content) == 1
        assert content[0].type == "text"
        assert json.loads(content[0].text) == {"authenticated": False, "session": None}

    @pytest.mark.asyncio
    async def test_call_tool_error_is_flagged(self, live_services):
        """Failures leave as an exception carrying the {"error": ...} document."""
        with pytest.raises(server.ToolCallError) as exc_info:
            await server.handle_call_tool("list_databases", {})

        assert json.loads(str(exc_info.value)) == {
            "error": {"kind": "AuthError", "message": "Not authenticated. Call authenticate first."}
        }

    @pytest.mark.asyncio
    async def test_uninitialized_server(self, monkeypatch):
        monkeypatch.setattr(server, "services", None)
        with pytest.raises(RuntimeError, match="not initialized"):
            await server.handle_call_tool("status", {})


class TestResources:

    @pytest.mark.asyncio
    async def test_no_resources_without_session(self, live_services):
        assert await server.handle_list_resources() == []

    @pytest.mark.asyncio
    async def test_list_and_read_resources(self, live_services, pool):
        pool.on("information_schema.tables", rows=[
            {"databaseName": "shop", "tableName": "orders", "tableType": "BASE TABLE"},
        ])
        pool.on("information_schema.columns", rows=[
            {"columnName": "id", "dataType": "int", "isNullable": "NO",
             "columnKey": "PRI", "defaultValue": None, "extra": "auto_increment"},
        ])
        await live_services.session.authenticate(user="app", password="x", database="shop")

        resources = await server.handle_list_resources()
        assert [str(resource.uri) for resource in resources] == ["mysql://table/shop/orders"]
        assert resources[0].name == "shop.orders"
        assert resources[0].mimeType == "application/json"

        contents = await server.handle_read_resource(resources[0].uri)
        assert contents[0].mime_type == "application/json"
        assert json.loads(contents[0].content)["table"] == "orders"

    @pytest.mark.asyncio
    async def test_list_resources_failure_returns_empty(self, live_services, pool):
        pool.on("information_schema.tables", error=aiomysql.OperationalError(2013, "Lost connection"))
        await live_services.session.authenticate(user="app", password="x", database="shop")

        assert await server.handle_list_resources() == []

    @pytest.mark.asyncio
    async def test_read_resource_error(self, live_services):
        with pytest.raises(ValueError, match=r"\[AuthError\] Not authenticated"):
            await server.handle_read_resource("mysql://table/shop/orders")


class TestStartup:

    @pytest.mark.asyncio
    async def test_startup_without_credentials(self, services, pool_factory):
        assert await services.startup() is False
        assert pool_factory.calls == []

    @pytest.mark.asyncio
    async def test_startup_authenticates_from_config(self, services, pool_factory):
        services.config.user = "app"
        services.config.password = "pw"
        services.config.database = "shop"

        assert await services.startup() is True
        assert services.session.status()["session"]["database"] == "shop"
        assert pool_factory.calls[0]["user"] == "app"
        assert pool_factory.calls[0]["password"] == "pw"

        await services.shutdown()
        assert services.session.status()["authenticated"] is False

    @pytest.mark.asyncio
    async def test_startup_failure_keeps_running(self, services, pool):
        pool.on("SELECT 1", error=aiomysql.OperationalError(2003, "Can't connect to MySQL server"))
        services.config.user = "app"

        assert await services.startup() is False
        assert services.session.status()["authenticated"] is False
