"""Tests for the system opener."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from sandbox_mcp.utils.opener import open_command, open_path


@pytest.mark.parametrize(
    ("platform", "expected"),
    [
        ("darwin", ["open", "/tmp/x"]),
        ("linux", ["xdg-open", "/tmp/x"]),
        ("linux2", ["xdg-open", "/tmp/x"]),
        ("win32", ["cmd", "/c", "start", "", "/tmp/x"]),
    ],
)
def test_open_command_per_platform(platform: str, expected: list[str]) -> None:
    """Each supported platform maps to its launcher."""
    assert open_command("/tmp/x", platform=platform) == expected


def test_open_command_unsupported_platform() -> None:
    """Unknown platforms raise OSError."""
    with pytest.raises(OSError, match="Unsupported operating system"):
        open_command("/tmp/x", platform="plan9")


def _process(returncode: int, stderr: bytes = b"") -> MagicMock:
    process = MagicMock()
    process.returncode = returncode
    process.communicate = AsyncMock(return_value=(None, stderr))
    process.wait = AsyncMock(return_value=returncode)
    return process


@pytest.mark.asyncio
async def test_open_path_success() -> None:
    """A zero exit code succeeds."""
    create = AsyncMock(return_value=_process(0))
    with (
        patch("sandbox_mcp.utils.opener.open_command", return_value=["open", "/tmp/x"]),
        patch("asyncio.create_subprocess_exec", create),
    ):
        await open_path("/tmp/x")

    assert create.call_args.args == ("open", "/tmp/x")


@pytest.mark.asyncio
async def test_open_path_nonzero_exit() -> None:
    """A non-zero exit raises OSError with stderr detail."""
    create = AsyncMock(return_value=_process(3, b"no handler"))
    with (
        patch("sandbox_mcp.utils.opener.open_command", return_value=["xdg-open", "/x"]),
        patch("asyncio.create_subprocess_exec", create),
    ):
        with pytest.raises(OSError, match="exited with code 3: no handler"):
            await open_path("/x")


@pytest.mark.asyncio
async def test_open_path_timeout_kills_process() -> None:
    """A launcher that never exits is killed."""
    process = _process(0)

    async def hang() -> tuple[None, bytes]:
        await asyncio.sleep(10)
        return None, b""

    process.communicate = hang
    with (
        patch("sandbox_mcp.utils.opener.open_command", return_value=["open", "/x"]),
        patch("asyncio.create_subprocess_exec", AsyncMock(return_value=process)),
    ):
        with pytest.raises(OSError, match="did not exit"):
            await open_path("/x", timeout=0.01)

    process.kill.assert_called_once()


@pytest.mark.asyncio
async def test_open_path_missing_launcher() -> None:
    """A missing launcher binary raises OSError."""
    argv = ["no-such-opener-bin", "/x"]
    with patch("sandbox_mcp.utils.opener.open_command", return_value=argv):
        with pytest.raises(OSError):
            await open_path("/x")
