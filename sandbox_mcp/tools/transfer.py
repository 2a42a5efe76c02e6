"""MCP tools for moving files between this machine and a remote machine."""

from fastmcp.exceptions import ToolError

from sandbox_mcp.tools.handlers import format_result, handle_download, handle_upload
from sandbox_mcp.utils.validation import validate_machine_id


def _require(name: str, value: str) -> str:
    if not value.strip():
        raise ToolError(f"Error: {name} is required")
    return value


def _validated_machine_id(machine_id: str) -> str:
    try:
        return validate_machine_id(machine_id)
    except ValueError as e:
        raise ToolError(f"Error: {e}") from e


async def remote_machine_upload(
    machine_id: str,
    source_path: str,
    destination_parent_folder: str,
    only_contents_of_folder: bool = False,
) -> str:
    """Upload a local file or folder to a remote machine.

    The content is packed as tar.gz, uploaded through a signed URL and
    extracted on the machine inside destination_parent_folder. Missing
    parent folders are created. Use this tool to move local projects to
    the machine; do not try to clone or copy them with shell commands.

    Args:
        machine_id: The remote machine to upload to.
        source_path: Absolute local path of the file or folder to upload.
        destination_parent_folder: Absolute path on the machine of the folder
            the content is placed in (e.g. "/Users/vagrant/project").
        only_contents_of_folder: If true and source_path is a folder, upload
            its contents without the folder itself.

    Examples:
        remote_machine_upload("abc123", "/local/file.txt", "/Users/vagrant")
        remote_machine_upload("abc123", "/local/myapp", "/Users/vagrant/src")

    Returns:
        Success message with the archive size. On failure the error names
        the phase that failed (pack, start, transmit or complete); retry
        the upload after fixing the cause.
    """
    machine_id = _validated_machine_id(machine_id)
    source_path = _require("source_path", source_path)
    destination_parent_folder = _require(
        "destination_parent_folder", destination_parent_folder
    )

    result = await handle_upload(
        machine_id,
        source_path,
        destination_parent_folder,
        only_contents=only_contents_of_folder,
    )
    if not result.success:
        raise ToolError(f"Error: {result.message}")
    return format_result(result)


async def remote_machine_download(
    machine_id: str,
    source_path: str,
    destination_parent_folder: str,
    only_contents_of_folder: bool = False,
    open_after_download: bool = False,
) -> str:
    """Download a file or folder from a remote machine.

    The machine packs the content as tar.gz, it is fetched through a
    signed URL and extracted locally inside destination_parent_folder.
    Entries that would land outside that folder are rejected.

    Args:
        machine_id: The remote machine to download from.
        source_path: Absolute path on the machine of the file or folder.
        destination_parent_folder: Absolute local path of the folder to
            extract into (created if missing).
        only_contents_of_folder: If true and source_path is a folder, fetch
            its contents without the folder itself.
        open_after_download: If true, open the downloaded item (or the
            destination folder when several items arrived) with the
            system default application.

    Examples:
        remote_machine_download("abc123", "/Users/vagrant/build/App.ipa", "/local/builds")
        remote_machine_download("abc123", "/Users/vagrant/results", "/tmp", open_after_download=True)

    Returns:
        Success message, plus a note about opening when requested. On
        failure the error names the phase that failed (request, fetch or
        extract).
    """
    machine_id = _validated_machine_id(machine_id)
    source_path = _require("source_path", source_path)
    destination_parent_folder = _require(
        "destination_parent_folder", destination_parent_folder
    )

    result = await handle_download(
        machine_id,
        source_path,
        destination_parent_folder,
        only_contents=only_contents_of_folder,
        open_after=open_after_download,
    )
    if not result.success:
        raise ToolError(f"Error: {result.message}")
    return format_result(result)
