"""Open files and folders with the system default application."""

import asyncio
import logging
import sys

logger = logging.getLogger(__name__)


def open_command(target: str, platform: str | None = None) -> list[str]:
    """Build the platform command that opens target.

    Args:
        target: Absolute path or URL to open
        platform: sys.platform value (defaults to the current one)

    Returns:
        Command argv

    Raises:
        OSError: If the platform has no known opener
    """
    platform = platform or sys.platform
    if platform == "darwin":
        return ["open", target]
    if platform.startswith("linux"):
        return ["xdg-open", target]
    if platform == "win32":
        return ["cmd", "/c", "start", "", target]
    raise OSError(f"Unsupported operating system: {platform}")


async def open_path(target: str, timeout: float = 10.0) -> None:
    """Open target with the system default handler and wait for the launcher.

    Args:
        target: Absolute path or URL to open
        timeout: Seconds to wait for the launcher to exit

    Raises:
        OSError: If the launcher is missing, fails, or times out
    """
    argv = open_command(target)
    logger.debug("Opening %s with %s", target, argv[0])

    process = await asyncio.create_subprocess_exec(
        *argv,
        stdout=asyncio.subprocess.DEVNULL,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        _, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except TimeoutError as e:
        process.kill()
        await process.wait()
        raise OSError(f"{argv[0]} did not exit within {timeout}s") from e

    if process.returncode != 0:
        detail = stderr.decode(errors="replace").strip() if stderr else ""
        raise OSError(
            f"{argv[0]} exited with code {process.returncode}"
            + (f": {detail}" if detail else "")
        )
