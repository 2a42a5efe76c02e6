"""Configuration module for Sandbox MCP."""

from sandbox_mcp.config.settings import DEFAULT_API_BASE_URL, Settings

__all__ = ["DEFAULT_API_BASE_URL", "Settings"]
