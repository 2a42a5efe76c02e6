"""Application settings from environment variables.

Centralized environment variable parsing and validation.
"""

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://api.bitrise.io/v0.1"


@dataclass
class Settings:
    """Application settings from environment.

    Handles parsing, validation, and defaults for all env vars.
    """

    # Control API
    api_token: str = field(default="", repr=False)
    api_base_url: str = field(default=DEFAULT_API_BASE_URL)
    api_timeout: float = field(default=30.0)

    # Signed URL transfers (sized for large build artifacts)
    transfer_timeout: float = field(default=600.0)

    # Transport
    transport: str = field(default="stdio")
    http_host: str = field(default="127.0.0.1")
    http_port: int = field(default=8000)

    # Logging
    log_level: str = field(default="INFO")
    log_colors: bool = field(default=True)
    log_payloads: bool = field(default=False)
    slow_threshold_ms: int = field(default=1000)
    include_traceback: bool = field(default=False)

    @property
    def has_token(self) -> bool:
        """Whether a control API token is configured."""
        return bool(self.api_token)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables.

        Supports both SANDBOX_* (preferred) and legacy BITRISE_* names for
        the token and base URL. SANDBOX_* takes precedence if both are set.

        Returns:
            Settings instance with values from environment
        """
        return cls(
            api_token=cls._get_str("SANDBOX_API_TOKEN", "BITRISE_TOKEN", ""),
            api_base_url=cls._get_str(
                "SANDBOX_API_BASE_URL", "BITRISE_API_BASE_URL", DEFAULT_API_BASE_URL
            ).rstrip("/"),
            api_timeout=cls._get_float("SANDBOX_API_TIMEOUT", 30.0),
            transfer_timeout=cls._get_float("SANDBOX_TRANSFER_TIMEOUT", 600.0),
            transport=cls._get_transport(),
            http_host=os.getenv("SANDBOX_HTTP_HOST", "127.0.0.1"),
            http_port=cls._get_int("SANDBOX_HTTP_PORT", 8000),
            log_level=os.getenv("SANDBOX_LOG_LEVEL", "INFO").upper(),
            log_colors=cls._get_bool("SANDBOX_LOG_COLORS", True),
            log_payloads=cls._get_bool("SANDBOX_LOG_PAYLOADS", False),
            slow_threshold_ms=cls._get_int("SANDBOX_SLOW_THRESHOLD_MS", 1000),
            include_traceback=cls._get_bool("SANDBOX_INCLUDE_TRACEBACK", False),
        )

    @staticmethod
    def _get_str(key: str, legacy_key: str, default: str) -> str:
        """Get string from environment with legacy fallback.

        Args:
            key: Primary environment variable key
            legacy_key: Legacy BITRISE_* key (empty string to skip)
            default: Default value if neither is set

        Returns:
            Stripped string value or default
        """
        value = os.getenv(key)
        if not value and legacy_key:
            value = os.getenv(legacy_key)
        if not value:
            return default
        return value.strip()

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Get integer from environment.

        Args:
            key: Environment variable key
            default: Default value if not set or invalid

        Returns:
            Integer value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default

        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid int for %s: %s, using default %d", key, value, default)
            return default

    @staticmethod
    def _get_float(key: str, default: float) -> float:
        """Get positive float from environment (seconds)."""
        value = os.getenv(key)
        if value is None:
            return default

        try:
            parsed = float(value)
        except ValueError:
            logger.warning("Invalid number for %s: %s, using default %s", key, value, default)
            return default

        if parsed <= 0:
            logger.warning("%s must be positive, using default %s", key, default)
            return default
        return parsed

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        """Get boolean from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Boolean value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ("1", "true", "yes", "on")

    @staticmethod
    def _get_transport() -> str:
        """Get transport from environment with validation.

        Returns:
            Transport type ("stdio" or "http")
        """
        transport = os.getenv("SANDBOX_TRANSPORT", "").lower()
        if transport in ("http", "stdio"):
            return transport
        return "stdio"
