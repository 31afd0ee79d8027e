"""MCP Protocol Server exposing the Nomad tools.

Uses the official MCP Python SDK with stdio transport.

IMPORTANT: All logging MUST go to stderr, not stdout!
The MCP protocol uses stdout for JSON-RPC communication.
"""

import asyncio
import json
from typing import Any, List

from logging_config import setup_logging

# Configure logging to stderr before any module gets a chance to log
setup_logging("WARNING", use_stderr=True)

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from config import get_settings
from logging_config import get_logger
from tool_registry import get_registry
import mcp_tools  # noqa: F401  # registers the tools
from mcp_tools.nomad import NomadValidationError, close_nomad_client, error_to_dict

settings = get_settings()
setup_logging(settings.mcp_log_level, use_stderr=True)
logger = get_logger(__name__)

mcp = Server("nomad-mcp")


def get_tool_definitions() -> List[Tool]:
    """Return every registered tool with its argument schema."""
    return [
        Tool(
            name=definition.name,
            description=definition.description,
            inputSchema=definition.input_schema,
        )
        for definition in get_registry().list_tools()
    ]


def format_result(result: Any) -> str:
    """Raw text results are returned untouched; everything else as JSON."""
    if isinstance(result, str):
        return result
    return json.dumps(result, indent=2, default=str)


@mcp.list_tools()
async def list_tools() -> List[Tool]:
    """Return the list of available tools."""
    return get_tool_definitions()


@mcp.call_tool()
async def call_tool(name: str, arguments: dict) -> List[TextContent]:
    """Execute a tool and return the result."""
    logger.info("Calling tool", extra={"tool_name": name})

    registry = get_registry()
    try:
        if registry.get(name) is None:
            raise NomadValidationError(f"Unknown operation: {name}", field="operation")
        result = await registry.execute(name, arguments or {})
        text = format_result(result)
    except Exception as e:
        logger.error("Tool execution failed", extra={"tool_name": name}, exc_info=True)
        text = json.dumps(error_to_dict(e), indent=2, default=str)

    return [TextContent(type="text", text=text)]


async def main():
    """Run the MCP server using stdio transport."""
    logger.info("Starting Nomad MCP Server (stdio transport)")

    try:
        async with stdio_server() as (read_stream, write_stream):
            await mcp.run(
                read_stream,
                write_stream,
                mcp.create_initialization_options()
            )
    finally:
        await close_nomad_client()


if __name__ == "__main__":
    asyncio.run(main())
