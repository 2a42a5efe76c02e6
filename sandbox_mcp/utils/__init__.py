"""Utilities for Sandbox MCP."""

from sandbox_mcp.utils.console import ColorfulFormatter, MCPRequestFormatter
from sandbox_mcp.utils.opener import open_command, open_path
from sandbox_mcp.utils.validation import (
    check_real_containment,
    is_within_dir,
    redact_url,
    resolve_member_path,
    validate_machine_id,
)

__all__ = [
    "check_real_containment",
    "ColorfulFormatter",
    "is_within_dir",
    "MCPRequestFormatter",
    "open_command",
    "open_path",
    "redact_url",
    "resolve_member_path",
    "validate_machine_id",
]
