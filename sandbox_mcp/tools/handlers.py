"""Transfer tool handlers and result formatting."""

import logging
import os

from sandbox_mcp.archive import resolve_reveal_target
from sandbox_mcp.models import TransferResult
from sandbox_mcp.services import (
    download_path,
    get_control_client,
    get_object_store,
    upload_path,
)
from sandbox_mcp.utils.opener import open_path

logger = logging.getLogger(__name__)


def format_size(num_bytes: int) -> str:
    """Format a byte count for humans."""
    size = float(num_bytes)
    for unit in ("B", "KB", "MB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.2f} {unit}"
        size /= 1024
    return f"{size:.2f} GB"


async def open_extracted(result: TransferResult, destination: str) -> str:
    """Open the downloaded item, or the destination folder, and describe it.

    Failures are advisory and returned as a note, never raised.
    """
    target = resolve_reveal_target(result.extracted, destination)
    is_folder = target == os.path.normpath(destination)

    try:
        await open_path(target)
    except OSError as e:
        logger.warning("Failed to open %s: %s", target, e)
        if is_folder:
            return f"(Note: Failed to automatically open folder: {e})"
        return f"(Note: Failed to automatically open: {e})"

    if is_folder:
        return "Destination folder opened automatically."
    return "Item opened automatically."


async def handle_upload(
    machine_id: str,
    source_path: str,
    destination_parent: str,
    only_contents: bool = False,
) -> TransferResult:
    """Run an upload with the shared clients."""
    return await upload_path(
        get_control_client(),
        get_object_store(),
        machine_id,
        source_path,
        destination_parent,
        only_contents=only_contents,
    )


async def handle_download(
    machine_id: str,
    source_path: str,
    destination_parent: str,
    only_contents: bool = False,
    open_after: bool = False,
) -> TransferResult:
    """Run a download and optionally open what was extracted."""
    result = await download_path(
        get_control_client(),
        get_object_store(),
        machine_id,
        source_path,
        destination_parent,
        only_contents=only_contents,
    )

    if result.success and open_after and result.extracted:
        result.notes.append(await open_extracted(result, os.path.abspath(destination_parent)))

    return result


def format_result(result: TransferResult) -> str:
    """Format a successful transfer for the tool response."""
    lines = [result.message, f"  Size: {format_size(result.bytes_transferred)}"]
    lines.extend(result.notes)
    return "\n".join(lines)
