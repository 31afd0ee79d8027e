"""Main entry point for the Nomad MCP Server.

Serves the tools over HTTP with uvicorn by default, or over MCP stdio
with ``--stdio``.
"""

import argparse
import asyncio
from typing import List, Optional

import uvicorn

from config import get_settings
from logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Nomad MCP Server")
    parser.add_argument(
        "--stdio",
        action="store_true",
        help="Serve MCP over stdio instead of HTTP",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """Start the server on the selected transport."""
    args = parse_args(argv)

    if args.stdio:
        # Imported lazily so stdout stays free of HTTP server logging
        import mcp_server
        asyncio.run(mcp_server.main())
        return

    settings = get_settings()
    setup_logging(settings.mcp_log_level)

    from server import app

    logger.info(
        "Starting Nomad MCP Server",
        extra={
            "host": settings.mcp_server_host,
            "port": settings.mcp_server_port,
            "config": settings.get_safe_dict()
        }
    )

    uvicorn.run(
        app,
        host=settings.mcp_server_host,
        port=settings.mcp_server_port,
        log_level=settings.mcp_log_level.lower(),
    )


if __name__ == "__main__":
    main()
