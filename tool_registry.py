"""Tool registration and discovery system for the Nomad MCP Server.

Provides a central registry for all MCP tools with:
- JSON Schema argument declarations for tool listings
- Tool discovery endpoint
- Execution routing
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional


@dataclass
class ToolDefinition:
    """Definition of an MCP tool.

    Attributes:
        name: Unique tool identifier (e.g., "list_jobs")
        description: Human-readable description
        input_schema: JSON Schema of the tool arguments
        handler: Async function that executes the tool
        tags: Optional tags for categorization
    """
    name: str
    description: str
    input_schema: Dict[str, Any]
    handler: Callable
    tags: List[str] = field(default_factory=list)

    def to_manifest_dict(self) -> Dict[str, Any]:
        """Convert to manifest dictionary for API response.

        Returns:
            Dictionary with tool metadata and parameters
        """
        return {
            "name": self.name,
            "description": self.description,
            "tags": self.tags,
            "parameters": self._schema_to_parameters(self.input_schema),
        }

    @staticmethod
    def _schema_to_parameters(schema: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Convert a JSON Schema object to a flat parameter list."""
        parameters = []
        properties = schema.get("properties", {})
        required = schema.get("required", [])

        for name, prop in properties.items():
            param = {
                "name": name,
                "type": prop.get("type", "string"),
                "description": prop.get("description", ""),
                "required": name in required,
            }

            if "default" in prop:
                param["default"] = prop["default"]

            if "enum" in prop:
                param["enum"] = prop["enum"]

            parameters.append(param)

        return parameters


class ToolRegistry:
    """Central registry for MCP tools.

    Manages tool registration, discovery, and execution.
    """

    def __init__(self):
        self._tools: Dict[str, ToolDefinition] = {}

    def register(
        self,
        name: str,
        description: str,
        input_schema: Dict[str, Any],
        handler: Callable,
        tags: Optional[List[str]] = None
    ) -> None:
        """Register a new tool.

        Raises:
            ValueError: If tool with same name already exists
        """
        if name in self._tools:
            raise ValueError(f"Tool '{name}' is already registered")

        self._tools[name] = ToolDefinition(
            name=name,
            description=description,
            input_schema=input_schema,
            handler=handler,
            tags=tags or []
        )

    def get(self, name: str) -> Optional[ToolDefinition]:
        return self._tools.get(name)

    def list_tools(self) -> List[ToolDefinition]:
        return list(self._tools.values())

    def get_manifest(self) -> List[Dict[str, Any]]:
        """Get tool manifest for API response."""
        return [tool.to_manifest_dict() for tool in self._tools.values()]

    async def execute(
        self,
        name: str,
        parameters: Optional[Dict[str, Any]] = None
    ) -> Any:
        """Execute a tool with the given parameters.

        Args:
            name: Tool identifier
            parameters: Raw input parameters, validated by the handler

        Returns:
            Tool execution result

        Raises:
            KeyError: If tool not found
        """
        tool = self.get(name)
        if tool is None:
            raise KeyError(f"Tool '{name}' not found")

        if asyncio.iscoroutinefunction(tool.handler):
            return await tool.handler(parameters or {})
        return tool.handler(parameters or {})


# Global registry instance
_registry: Optional[ToolRegistry] = None


def get_registry() -> ToolRegistry:
    """Get the global tool registry.

    Creates the instance on first call.
    """
    global _registry
    if _registry is None:
        _registry = ToolRegistry()
    return _registry
