"""Sandbox MCP FastMCP server.

This is a thin wrapper that wires the MCP server to the transfer tools.
All business logic is delegated to the tools/, services/ and archive/ modules.
"""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from sandbox_mcp.config import Settings
from sandbox_mcp.dependencies import Dependencies
from sandbox_mcp.middleware import ErrorHandlingMiddleware, LoggingMiddleware
from sandbox_mcp.services import set_dependencies
from sandbox_mcp.tools import remote_machine_download, remote_machine_upload
from sandbox_mcp.utils.console import MCPRequestFormatter

NOISY_LOGGERS = (
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "httpx",
    "httpcore",
    "fastmcp",
    "starlette",
    "anyio",
)


def _configure_logging(settings: Settings) -> None:
    """Configure colorful logging for the sandbox_mcp package.

    Called at module load time so logging is set up before any logger is
    used, regardless of how the server is started. All output goes to
    stderr; stdout belongs to the stdio transport.
    """
    use_colors = settings.log_colors and sys.stderr.isatty()

    package_logger = logging.getLogger("sandbox_mcp")
    package_logger.setLevel(getattr(logging, settings.log_level, logging.INFO))

    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(MCPRequestFormatter(use_colors=use_colors))
        package_logger.addHandler(handler)
        package_logger.propagate = False

    for name in NOISY_LOGGERS:
        lg = logging.getLogger(name)
        lg.setLevel(logging.WARNING)
        lg.handlers = []
        lg.propagate = False

    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(logging.WARNING)


_configure_logging(Settings.from_env())

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Build the control and object-store clients at startup.

    Args:
        server: The FastMCP server instance

    Yields:
        Dict with the control API base URL
    """
    logger.info("Sandbox MCP server starting up")

    deps = Dependencies.create()
    set_dependencies(deps)

    settings = deps.settings
    logger.info("Control API: %s", settings.api_base_url)
    if not settings.has_token:
        logger.warning(
            "No API token configured (SANDBOX_API_TOKEN not set). "
            "Transfers will fail until one is provided."
        )
    logger.info("Sandbox MCP server ready to accept connections")

    try:
        yield {"api_base_url": settings.api_base_url}
    finally:
        logger.info("Sandbox MCP server shutting down")


def configure_middleware(server: FastMCP, settings: Settings | None = None) -> None:
    """Configure middleware stack for the server.

    Adds middleware in order: ErrorHandling -> Logging (with integrated timing)

    Args:
        server: The FastMCP server to configure.
        settings: Settings to read middleware options from (default: env).
    """
    settings = settings or Settings.from_env()

    # First added = innermost
    server.add_middleware(
        ErrorHandlingMiddleware(include_traceback=settings.include_traceback)
    )
    server.add_middleware(
        LoggingMiddleware(
            include_payloads=settings.log_payloads,
            slow_threshold_ms=settings.slow_threshold_ms,
        )
    )


def create_server() -> FastMCP:
    """Create and configure the MCP server with middleware and tools.

    Returns:
        Configured FastMCP server instance
    """
    server = FastMCP(
        "sandbox_mcp",
        lifespan=app_lifespan,
    )

    configure_middleware(server)

    server.tool()(remote_machine_upload)
    server.tool()(remote_machine_download)

    @server.custom_route("/health", methods=["GET"])
    async def health_check(request: Request) -> PlainTextResponse:
        """Health check endpoint."""
        client_host = request.client.host if request.client else "unknown"
        logger.debug("Health check from %s", client_host)
        return PlainTextResponse("OK")

    return server


# Default server instance
mcp = create_server()
