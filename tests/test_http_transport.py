"""
Streamable HTTP transport tests (FastAPI TestClient)
"""

import json

import aiomysql
import pytest
from fastapi.testclient import TestClient

from transport.http import create_app
from utils.jsonrpc import JsonRpcError


@pytest.fixture
def client(services):
    with TestClient(create_app(services, manage_lifecycle=False)) as test_client:
        yield test_client


def rpc(client, method, params=None, request_id=1, headers=None):
    body = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        body["params"] = params
    return client.post("/mcp", json=body, headers=headers or {})


def tool_payload(response):
    result = response.json()["result"]
    return json.loads(result["content"][0]["text"]), result["isError"]


class TestHttpTransport:

    def test_initialize(self, client):
        response = rpc(client, "initialize", {"protocolVersion": "2025-03-26"})

        result = response.json()["result"]
        assert result["protocolVersion"] == "2025-03-26"
        assert result["serverInfo"]["name"] == "mysql-mcp-server"
        assert "resources" in result["capabilities"]

    def test_tools_list(self, client):
        tools = rpc(client, "tools/list").json()["result"]["tools"]

        assert len(tools) == 13
        assert all("inputSchema" in tool for tool in tools)

    def test_tool_call_round_trip(self, client, pool):
        payload, is_error = tool_payload(rpc(client, "tools/call", {
            "name": "authenticate",
            "arguments": {"user": "app", "password": "pw", "database": "shop"},
        }))
        assert is_error is False
        assert payload["database"] == "shop"

        pool.on("FROM `shop`.`orders`", rows=[{"id": 1}])
        payload, is_error = tool_payload(rpc(client, "tools/call", {
            "name": "select_rows",
            "arguments": {"table": "orders", "limit": 1},
        }))
        assert is_error is False
        assert payload == {"items": [{"id": 1}], "count": 1}

    def test_tool_error_flagged(self, client):
        payload, is_error = tool_payload(rpc(client, "tools/call", {"name": "list_tables", "arguments": {}}))

        assert is_error is True
        assert payload["error"]["kind"] == "AuthError"

    def test_missing_tool_name(self, client):
        error = rpc(client, "tools/call", {}).json()["error"]
        assert error["code"] == JsonRpcError.INVALID_PARAMS

    def test_resource_error_carries_envelope(self, client):
        error = rpc(client, "resources/read", {"uri": "bogus"}).json()["error"]

        assert error["code"] == JsonRpcError.INVALID_PARAMS
        assert error["data"] == {"kind": "ValidationError", "message": "Invalid resource URI"}

    def test_resources_list_failure_returns_empty(self, client, pool):
        """Listing failures degrade to no resources, the same as over stdio."""
        rpc(client, "tools/call", {
            "name": "authenticate",
            "arguments": {"user": "app", "password": "pw", "database": "shop"},
        })
        pool.on("information_schema.tables", error=aiomysql.OperationalError(2013, "Lost connection"))

        response = rpc(client, "resources/list").json()

        assert "error" not in response
        assert response["result"] == {"resources": []}

    def test_notification_accepted(self, client):
        response = client.post("/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"})
        assert response.status_code == 202

    def test_unknown_method(self, client):
        error = rpc(client, "prompts/list").json()["error"]
        assert error["code"] == JsonRpcError.METHOD_NOT_FOUND

    def test_invalid_jsonrpc(self, client):
        response = client.post("/mcp", json={"id": 1, "method": "tools/list"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == JsonRpcError.INVALID_REQUEST

    def test_invalid_json(self, client):
        response = client.post("/mcp", content=b"{not json", headers={"Content-Type": "application/json"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == JsonRpcError.PARSE_ERROR

    def test_unsupported_protocol_version(self, client):
        response = rpc(client, "tools/list", headers={"MCP-Protocol-Version": "1999-01-01"})
        assert response.status_code == 400

    def test_healthz(self, client):
        response = client.get("/healthz")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "database": "not authenticated"}
