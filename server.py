"""Core server setup and routing for the Nomad MCP Server.

Defines the FastAPI application with:
- Tool discovery endpoint (/api/tools)
- Tool execution endpoint (/api/tools/{tool_name}/execute)
- Health check endpoint (/health)
"""

from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from config import get_settings
from logging_config import get_logger, setup_logging
from tool_registry import get_registry
import mcp_tools  # noqa: F401  # registers the tools
from mcp_tools.nomad import NomadValidationError, close_nomad_client, error_to_dict

__version__ = "0.1.0"

# Initialize logging
settings = get_settings()
setup_logging(settings.mcp_log_level)
logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    nomad_addr: str
    tool_count: int


class ToolExecutionResponse(BaseModel):
    """Response for tool execution."""
    success: bool
    result: Any = None
    error: str = ""
    error_type: Optional[str] = None
    status_code: Optional[int] = None
    body: Optional[str] = None


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    app = FastAPI(
        title="Nomad MCP Server",
        description="MCP tools for the HashiCorp Nomad HTTP API",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Report the configured agent and how many tools are registered.

        Does not contact Nomad; the agent is probed on the first tool call.
        """
        return HealthResponse(
            status="healthy",
            version=__version__,
            nomad_addr=get_settings().nomad_addr,
            tool_count=len(get_registry().list_tools()),
        )

    @app.get("/api/tools")
    async def list_tools():
        """List all available tools with their parameters."""
        registry = get_registry()
        return registry.get_manifest()

    @app.post("/api/tools/{tool_name}/execute", response_model=ToolExecutionResponse)
    async def execute_tool(
        tool_name: str,
        request: Dict[str, Any]
    ) -> ToolExecutionResponse:
        """Execute a specific tool.

        Args:
            tool_name: Name of the tool to execute
            request: Tool parameters

        Raises:
            HTTPException: 404 if the tool is unknown, 400 on invalid parameters
        """
        registry = get_registry()

        if registry.get(tool_name) is None:
            logger.warning("Tool not found", extra={"tool_name": tool_name})
            raise HTTPException(
                status_code=404,
                detail=f"Tool '{tool_name}' not found"
            )

        try:
            result = await registry.execute(tool_name, request)
            return ToolExecutionResponse(success=True, result=result)

        except NomadValidationError as e:
            logger.warning("Invalid parameters", extra={"tool_name": tool_name, "error": str(e)})
            raise HTTPException(status_code=400, detail=error_to_dict(e))
        except Exception as e:
            logger.error("Tool execution failed", extra={"tool_name": tool_name}, exc_info=True)
            payload = error_to_dict(e)
            payload.pop("field", None)
            return ToolExecutionResponse(**payload)

    @app.on_event("shutdown")
    async def shutdown_event():
        """Release the Nomad HTTP client."""
        await close_nomad_client()

    return app


# Create the app instance
app = create_app()
