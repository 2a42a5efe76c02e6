"""Services for Sandbox MCP."""

from sandbox_mcp.services.control import ControlClient
from sandbox_mcp.services.object_store import ObjectStoreClient
from sandbox_mcp.services.state import (
    get_control_client,
    get_dependencies,
    get_object_store,
    get_settings,
    reset_state,
    set_dependencies,
)
from sandbox_mcp.services.transfer import download_path, upload_path

__all__ = [
    "ControlClient",
    "ObjectStoreClient",
    "download_path",
    "get_control_client",
    "get_dependencies",
    "get_object_store",
    "get_settings",
    "reset_state",
    "set_dependencies",
    "upload_path",
]
