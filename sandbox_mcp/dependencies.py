"""Dependency injection container for Sandbox MCP.

Replaces global singleton pattern with explicit dependency injection.
"""

from dataclasses import dataclass

from sandbox_mcp.config import Settings
from sandbox_mcp.services.control import ControlClient
from sandbox_mcp.services.object_store import ObjectStoreClient


@dataclass
class Dependencies:
    """Container for Sandbox MCP dependencies.

    Holds settings plus the control API and object-store clients.
    Pass this to functions/tools that need them.

    Example:
        deps = Dependencies.create()
        result = await upload_path(deps.control, deps.store, ...)
    """

    settings: Settings
    control: ControlClient
    store: ObjectStoreClient

    @classmethod
    def create(cls) -> "Dependencies":
        """Create dependencies from environment settings.

        Returns:
            Initialized Dependencies instance
        """
        return cls.from_settings(Settings.from_env())

    @classmethod
    def from_settings(cls, settings: Settings) -> "Dependencies":
        """Create dependencies with custom settings.

        Args:
            settings: Custom Settings instance

        Returns:
            Dependencies with clients initialized from settings
        """
        control = ControlClient(
            base_url=settings.api_base_url,
            token=settings.api_token,
            timeout=settings.api_timeout,
        )
        store = ObjectStoreClient(timeout=settings.transfer_timeout)
        return cls(settings=settings, control=control, store=store)
