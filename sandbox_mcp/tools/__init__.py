"""MCP tools for Sandbox MCP."""

from sandbox_mcp.tools.transfer import remote_machine_download, remote_machine_upload

__all__ = ["remote_machine_download", "remote_machine_upload"]
