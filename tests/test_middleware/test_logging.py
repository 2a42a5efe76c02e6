"""Tests for logging middleware."""

import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from sandbox_mcp.middleware.logging import LoggingMiddleware


@pytest.fixture
def mock_logger() -> MagicMock:
    """Logger double."""
    return MagicMock()


@pytest.fixture
def tool_context() -> MagicMock:
    """Context for a tools/call request."""
    context = MagicMock()
    context.method = "tools/call"
    context.message = MagicMock()
    context.message.name = "remote_machine_download"
    context.message.arguments = {
        "machine_id": "m-1",
        "source_path": "/Users/vagrant/" + "deep/" * 20 + "App.ipa",
    }
    return context


@pytest.mark.asyncio
async def test_tool_call_logged(mock_logger: MagicMock, tool_context: MagicMock) -> None:
    """Tool calls log a start and a finish line."""
    middleware = LoggingMiddleware(logger=mock_logger)
    call_next = AsyncMock(return_value="Successfully downloaded\n  Size: 1 KB")

    result = await middleware.on_call_tool(tool_context, call_next)

    assert result == "Successfully downloaded\n  Size: 1 KB"
    start_line = mock_logger.info.call_args_list[0]
    assert "remote_machine_download" in str(start_line)
    finish = mock_logger.log.call_args
    assert finish.args[0] == logging.INFO
    assert finish.args[3] == "Successfully downloaded"


@pytest.mark.asyncio
async def test_long_paths_shortened(
    mock_logger: MagicMock, tool_context: MagicMock
) -> None:
    """Long argument values keep only their tail."""
    middleware = LoggingMiddleware(logger=mock_logger)

    await middleware.on_call_tool(tool_context, AsyncMock(return_value="ok"))

    formatted = mock_logger.info.call_args_list[0].args[2]
    assert "source_path='...deep/" in formatted
    assert formatted.count("deep/") == 10
    assert "App.ipa'" in formatted
    assert "'m-1'" in formatted


@pytest.mark.asyncio
async def test_slow_call_warns(mock_logger: MagicMock, tool_context: MagicMock) -> None:
    """Calls over the threshold log at warning level."""
    middleware = LoggingMiddleware(logger=mock_logger, slow_threshold_ms=100)

    with patch(
        "sandbox_mcp.middleware.logging.time.perf_counter", side_effect=[0.0, 0.5]
    ):
        await middleware.on_call_tool(tool_context, AsyncMock(return_value="ok"))

    finish = mock_logger.log.call_args
    assert finish.args[0] == logging.WARNING
    assert "SLOW" in finish.args[4]


@pytest.mark.asyncio
async def test_tool_failure_logged_and_raised(
    mock_logger: MagicMock, tool_context: MagicMock
) -> None:
    """Failures are logged with the exception type and re-raised."""
    middleware = LoggingMiddleware(logger=mock_logger)

    with pytest.raises(RuntimeError):
        await middleware.on_call_tool(
            tool_context, AsyncMock(side_effect=RuntimeError("boom"))
        )

    error_args = mock_logger.error.call_args.args
    assert error_args[2] == "RuntimeError"
    assert error_args[3] == "boom"


@pytest.mark.asyncio
async def test_payloads_logged_when_enabled(
    mock_logger: MagicMock, tool_context: MagicMock
) -> None:
    """Arguments and results are logged at debug when enabled."""
    middleware = LoggingMiddleware(logger=mock_logger, include_payloads=True)

    await middleware.on_call_tool(tool_context, AsyncMock(return_value="ok"))

    debug_lines = [str(c) for c in mock_logger.debug.call_args_list]
    assert any("Args" in line for line in debug_lines)
    assert any("Result" in line for line in debug_lines)


@pytest.mark.asyncio
async def test_list_tools_counts(mock_logger: MagicMock) -> None:
    """Tool listings log the number of tools."""
    middleware = LoggingMiddleware(logger=mock_logger)
    context = MagicMock()
    context.method = "tools/list"

    await middleware.on_list_tools(context, AsyncMock(return_value=[1, 2]))

    assert mock_logger.debug.call_args.args[1] == 2


@pytest.mark.asyncio
async def test_on_message_skips_tool_methods(mock_logger: MagicMock) -> None:
    """Tool calls are not double-logged by on_message."""
    middleware = LoggingMiddleware(logger=mock_logger)
    context = MagicMock()
    context.method = "tools/call"

    await middleware.on_message(context, AsyncMock(return_value="x"))

    mock_logger.debug.assert_not_called()


def test_truncate_long_payload() -> None:
    """Payloads over the limit are truncated."""
    middleware = LoggingMiddleware(max_payload_length=10)
    assert middleware._truncate("x" * 50).endswith("... [truncated]")


@pytest.mark.parametrize(
    ("result", "expected"),
    [(None, "null"), (["a", "b"], "2 items"), (42, "int")],
)
def test_summarize_result(result: object, expected: str) -> None:
    """Results are summarized by shape."""
    assert LoggingMiddleware()._summarize_result(result) == expected
