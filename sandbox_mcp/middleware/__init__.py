"""Sandbox MCP middleware components."""

from sandbox_mcp.middleware.base import SandboxMiddleware
from sandbox_mcp.middleware.errors import ErrorHandlingMiddleware
from sandbox_mcp.middleware.logging import LoggingMiddleware

__all__ = [
    "ErrorHandlingMiddleware",
    "LoggingMiddleware",
    "SandboxMiddleware",
]
