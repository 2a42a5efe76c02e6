"""Global state management for Sandbox MCP."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sandbox_mcp.config import Settings
    from sandbox_mcp.dependencies import Dependencies
    from sandbox_mcp.services.control import ControlClient
    from sandbox_mcp.services.object_store import ObjectStoreClient

# Global state (initialized on first access)
_deps: "Dependencies | None" = None


def get_dependencies() -> "Dependencies":
    """Get or create the dependency container."""
    global _deps
    if _deps is None:
        from sandbox_mcp.dependencies import Dependencies

        _deps = Dependencies.create()
    return _deps


def get_settings() -> "Settings":
    """Get current settings."""
    return get_dependencies().settings


def get_control_client() -> "ControlClient":
    """Get the control API client."""
    return get_dependencies().control


def get_object_store() -> "ObjectStoreClient":
    """Get the object-store client."""
    return get_dependencies().store


def reset_state() -> None:
    """Reset global state for testing.

    This function clears the singleton instance, allowing tests
    to start with fresh state. Should only be used in test fixtures.
    """
    global _deps
    _deps = None


def set_dependencies(deps: "Dependencies") -> None:
    """Set the global dependency container.

    Allows tests to inject custom clients without modifying module internals.

    Args:
        deps: Dependencies instance to use globally.
    """
    global _deps
    _deps = deps
