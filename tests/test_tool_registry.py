"""Tests for tool registry functionality."""

import pytest

from tool_registry import ToolRegistry, get_registry

from mcp_tools.nomad import register_tools
from mcp_tools.nomad.catalog import OPERATIONS


SAMPLE_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "description": "A name"},
        "count": {"type": "number", "description": "A count", "default": 1},
        "mode": {"type": "string", "description": "A mode", "enum": ["fast", "slow"]},
    },
    "required": ["name"],
}


class TestToolRegistry:
    """Tests for ToolRegistry class."""

    def test_register_tool(self):
        """Test registering a new tool."""
        registry = ToolRegistry()

        async def handler(params):
            return {"result": f"Hello {params['name']}"}

        registry.register(
            name="test_tool",
            description="A test tool",
            input_schema=SAMPLE_SCHEMA,
            handler=handler,
            tags=["test"]
        )

        assert registry.get("test_tool") is not None
        assert registry.get("test_tool").description == "A test tool"

    def test_register_duplicate_raises(self):
        """Test that registering duplicate tool raises error."""
        registry = ToolRegistry()

        registry.register(name="test_tool", description="First", input_schema={}, handler=lambda p: p)

        with pytest.raises(ValueError, match="already registered"):
            registry.register(name="test_tool", description="Second", input_schema={}, handler=lambda p: p)

    def test_manifest(self):
        """Test manifest flattens the argument schema."""
        registry = ToolRegistry()
        registry.register(
            name="test_tool", description="A test tool",
            input_schema=SAMPLE_SCHEMA, handler=lambda p: p, tags=["test"],
        )

        manifest = registry.get_manifest()

        assert len(manifest) == 1
        params = {p["name"]: p for p in manifest[0]["parameters"]}
        assert params["name"]["required"] is True
        assert params["count"]["default"] == 1
        assert params["mode"]["enum"] == ["fast", "slow"]
        assert manifest[0]["tags"] == ["test"]

    @pytest.mark.asyncio
    async def test_execute_async_handler(self):
        """Test executing an async handler."""
        registry = ToolRegistry()

        async def handler(params):
            return {"result": f"Hello {params['name']}"}

        registry.register(name="test_tool", description="", input_schema=SAMPLE_SCHEMA, handler=handler)

        result = await registry.execute("test_tool", {"name": "World"})

        assert result == {"result": "Hello World"}

    @pytest.mark.asyncio
    async def test_execute_sync_handler(self):
        """Test executing a plain function handler."""
        registry = ToolRegistry()
        registry.register(name="echo", description="", input_schema={}, handler=lambda p: p)

        assert await registry.execute("echo", None) == {}

    @pytest.mark.asyncio
    async def test_execute_unknown_tool(self):
        """Test executing a missing tool."""
        registry = ToolRegistry()

        with pytest.raises(KeyError, match="not found"):
            await registry.execute("nope", {})


class TestNomadRegistration:
    """Tests for registering the Nomad catalog."""

    def test_global_registry_has_every_operation(self):
        """Test importing the tools package registers the catalog."""
        import mcp_tools  # noqa: F401

        names = {tool.name for tool in get_registry().list_tools()}

        assert set(OPERATIONS) <= names

    def test_register_into_fresh_registry(self):
        """Test registration carries schema and tags."""
        registry = ToolRegistry()
        register_tools(registry)

        definition = registry.get("scale_job")

        assert definition.input_schema["required"] == ["job_id", "group", "count"]
        assert "jobs" in definition.tags
        assert len(registry.list_tools()) == len(OPERATIONS)
