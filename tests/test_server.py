"""Tests for the HTTP and MCP front ends."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from mcp_tools.nomad.catalog import OPERATIONS
from mcp_tools.nomad.client import NomadAPIError, NomadConnectionError

from tests.fixtures.nomad_responses import JOBS_LIST


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_check(self, test_client):
        """Test health endpoint returns healthy status."""
        response = test_client.get("/health")

        data = response.json()

        assert response.status_code == 200
        assert data["status"] == "healthy"
        assert data["nomad_addr"] == "http://nomad.test:4646"
        assert data["tool_count"] >= len(OPERATIONS)


class TestToolsEndpoint:
    """Tests for tool discovery and execution."""

    def test_list_tools(self, test_client):
        """Test the manifest lists the Nomad tools."""
        response = test_client.get("/api/tools")

        assert response.status_code == 200
        names = {tool["name"] for tool in response.json()}
        assert {"list_jobs", "drain_node", "bootstrap_acl_token"} <= names

    def test_unknown_tool(self, test_client):
        """Test executing an unknown tool returns 404."""
        response = test_client.post("/api/tools/launch_rocket/execute", json={})

        assert response.status_code == 404

    def test_validation_error(self, test_client):
        """Test invalid parameters return 400 naming the field."""
        response = test_client.post(
            "/api/tools/scale_job/execute", json={"job_id": "web", "group": "frontend"}
        )

        assert response.status_code == 400
        assert response.json()["detail"]["field"] == "count"

    def test_execute_success(self, test_client, fake_nomad, nomad_client):
        """Test a successful call returns Nomad's key names."""
        fake_nomad.add("GET", "jobs", json_body=JOBS_LIST)

        with patch("mcp_tools.nomad.operations.get_nomad_client", AsyncMock(return_value=nomad_client)):
            response = test_client.post("/api/tools/list_jobs/execute", json={})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert [job["ID"] for job in data["result"]] == ["test-job-1", "test-job-2"]

    def test_execute_api_error(self, test_client):
        """Test remote errors are surfaced verbatim."""
        error = NomadAPIError("API error (status 403): Permission denied", 403, body="Permission denied")

        with patch("mcp_tools.nomad.invoke", AsyncMock(side_effect=error)):
            response = test_client.post("/api/tools/list_jobs/execute", json={})

        data = response.json()
        assert data["success"] is False
        assert data["error_type"] == "NomadAPIError"
        assert data["status_code"] == 403
        assert data["body"] == "Permission denied"


class TestMcpServer:
    """Tests for the MCP stdio front end."""

    @pytest.mark.asyncio
    async def test_list_tools(self):
        """Test every registered tool is advertised."""
        import mcp_server

        tools = await mcp_server.list_tools()
        by_name = {tool.name: tool for tool in tools}

        assert by_name["scale_job"].inputSchema["required"] == ["job_id", "group", "count"]

    @pytest.mark.asyncio
    async def test_call_tool_raw_text(self, fake_nomad, nomad_client):
        """Test RAW results are returned as plain text."""
        import mcp_server
        fake_nomad.add("GET", "regions", content=b'["global"]')

        with patch("mcp_tools.nomad.operations.get_nomad_client", AsyncMock(return_value=nomad_client)):
            content = await mcp_server.call_tool("list_regions", {})

        assert content[0].text == '["global"]'

    @pytest.mark.asyncio
    async def test_call_tool_json(self, fake_nomad, nomad_client):
        """Test typed results are serialized as JSON."""
        import mcp_server
        fake_nomad.add("GET", "jobs", json_body=JOBS_LIST)

        with patch("mcp_tools.nomad.operations.get_nomad_client", AsyncMock(return_value=nomad_client)):
            content = await mcp_server.call_tool("list_jobs", {"namespace": "default"})

        assert [job["ID"] for job in json.loads(content[0].text)] == ["test-job-1", "test-job-2"]

    @pytest.mark.asyncio
    async def test_call_tool_error(self):
        """Test errors are returned as structured JSON."""
        import mcp_server

        with patch(
            "mcp_tools.nomad.operations.get_nomad_client",
            AsyncMock(side_effect=NomadConnectionError("Failed to connect to Nomad server")),
        ):
            content = await mcp_server.call_tool("list_jobs", {})

        payload = json.loads(content[0].text)
        assert payload["success"] is False
        assert payload["error_type"] == "NomadConnectionError"

    @pytest.mark.asyncio
    async def test_call_unknown_tool(self):
        """Test unknown tools are reported as validation errors."""
        import mcp_server

        content = await mcp_server.call_tool("launch_rocket", {})

        payload = json.loads(content[0].text)
        assert payload["error_type"] == "NomadValidationError"
        assert payload["field"] == "operation"

    def test_handlers_registered_on_server(self):
        """Test the low-level server wires both tool request handlers."""
        import mcp_server
        from mcp.types import CallToolRequest, ListToolsRequest

        handlers = mcp_server.mcp.request_handlers

        assert ListToolsRequest in handlers
        assert CallToolRequest in handlers
