"""Error handling middleware for consistent error logging."""

import logging
import traceback
from collections import Counter
from typing import Any

from fastmcp.exceptions import ToolError
from fastmcp.server.middleware import MiddlewareContext

from sandbox_mcp.exceptions import TransferError
from sandbox_mcp.middleware.base import SandboxMiddleware


def _phase_of(error: Exception) -> str | None:
    if isinstance(error, TransferError) and error.phase is not None:
        return error.phase.value
    return None


class ErrorHandlingMiddleware(SandboxMiddleware):
    """Logs and counts errors raised while handling MCP requests.

    A ToolError is how a tool reports a failed transfer, so it is a
    warning. Anything else escaped a tool and is logged as an error,
    tagged with the transfer phase when it has one. Errors are counted by
    type and by phase, then re-raised unchanged.
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        include_traceback: bool = False,
    ) -> None:
        """Initialize error handling middleware.

        Args:
            logger: Optional custom logger.
            include_traceback: Append the traceback to unexpected errors.
        """
        super().__init__(logger=logger)
        self.include_traceback = include_traceback
        self._by_type: Counter[str] = Counter()
        self._by_phase: Counter[str] = Counter()

    def get_error_stats(self) -> dict[str, int]:
        """Error counts keyed by exception type name."""
        return dict(self._by_type)

    def get_phase_stats(self) -> dict[str, int]:
        """Transfer error counts keyed by the phase that failed."""
        return dict(self._by_phase)

    def reset_stats(self) -> None:
        self._by_type.clear()
        self._by_phase.clear()

    def _record(self, error: Exception) -> str | None:
        self._by_type[type(error).__name__] += 1
        phase = _phase_of(error)
        if phase is not None:
            self._by_phase[phase] += 1
        return phase

    async def on_message(
        self,
        context: MiddlewareContext,
        call_next: Any,
    ) -> Any:
        """Pass the request on; log, count and re-raise whatever fails."""
        try:
            return await call_next(context)
        except ToolError as e:
            self._record(e)
            self.logger.warning("Tool error in %s: %s", context.method, e)
            raise
        except Exception as e:
            phase = self._record(e)
            label = type(e).__name__
            if phase is not None:
                label = f"{label} [phase={phase}]"

            if self.include_traceback:
                self.logger.error(
                    "Error in %s: %s: %s\n%s",
                    context.method,
                    label,
                    e,
                    traceback.format_exc(),
                )
            else:
                self.logger.error("Error in %s: %s: %s", context.method, label, e)
            raise
