"""Transfer protocol driver for uploads and downloads.

Upload:   pack -> start_upload -> PUT signed URL -> complete_upload
Download: download request -> GET signed URL -> unpack

Each leg runs only after the previous one succeeded. A failure stops the
flow and is reported as a TransferResult naming the failing phase; nothing
is retried here.
"""

import asyncio
import logging
from typing import TYPE_CHECKING

from sandbox_mcp.archive import pack, unpack
from sandbox_mcp.exceptions import TransferError
from sandbox_mcp.models import TransferPhase, TransferResult, TransferSession

if TYPE_CHECKING:
    from sandbox_mcp.services.control import ControlClient
    from sandbox_mcp.services.object_store import ObjectStoreClient

logger = logging.getLogger(__name__)


def _failed(
    direction: str,
    phase: TransferPhase,
    error: TransferError,
) -> TransferResult:
    error.phase = phase
    logger.error(
        "%s failed in %s phase: %s: %s",
        direction.capitalize(),
        phase.value,
        type(error).__name__,
        error,
    )
    return TransferResult(
        success=False,
        direction=direction,
        phase=phase,
        message=f"{direction.capitalize()} failed in {phase.value} phase: {error}",
        error=error,
    )


async def upload_path(
    control: "ControlClient",
    store: "ObjectStoreClient",
    machine_id: str,
    source_path: str,
    destination_parent: str,
    only_contents: bool = False,
) -> TransferResult:
    """Upload a local file or folder to a remote machine.

    Args:
        control: Control API client
        store: Object-store client for the signed URL
        machine_id: Target machine
        source_path: Local file or folder to send
        destination_parent: Remote folder the content is placed in
        only_contents: For folders, send the contents without the folder

    Returns:
        TransferResult; on failure, phase names the step that failed
    """
    session = TransferSession(machine_id=machine_id)
    phase = TransferPhase.PACK

    try:
        archive = await asyncio.to_thread(pack, source_path, not only_contents)
        session.data = archive.data

        phase = TransferPhase.START
        ticket = await control.begin_upload(machine_id)
        session.start(ticket)
        logger.info("Upload %s started on machine %s", ticket.upload_id, machine_id)

        phase = TransferPhase.TRANSMIT
        await store.put(ticket.signed_url, session.data)
        session.mark_transmitted()

        phase = TransferPhase.COMPLETE
        await control.complete_upload(machine_id, ticket.upload_id, destination_parent)
        session.mark_completed()
    except TransferError as e:
        return _failed("upload", phase, e)

    logger.info(
        "Upload %s completed: %s -> %s on machine %s (%d bytes)",
        session.upload_id,
        source_path,
        destination_parent,
        machine_id,
        len(session.data),
    )
    return TransferResult(
        success=True,
        direction="upload",
        phase=phase,
        message=(
            f"Successfully uploaded {source_path} to {destination_parent} "
            f"on machine {machine_id}"
        ),
        bytes_transferred=len(session.data),
    )


async def download_path(
    control: "ControlClient",
    store: "ObjectStoreClient",
    machine_id: str,
    source_path: str,
    destination_parent: str,
    only_contents: bool = False,
) -> TransferResult:
    """Download a remote file or folder and extract it locally.

    Nothing is written locally unless both the request and fetch legs
    succeeded.

    Args:
        control: Control API client
        store: Object-store client for the signed URL
        machine_id: Source machine
        source_path: Remote file or folder to fetch
        destination_parent: Local folder to extract into
        only_contents: For folders, fetch the contents without the folder

    Returns:
        TransferResult with the extracted paths on success
    """
    session = TransferSession(machine_id=machine_id)
    phase = TransferPhase.REQUEST

    try:
        session.signed_url = await control.request_download(
            machine_id, source_path, only_contents
        )

        phase = TransferPhase.FETCH
        session.data = await store.get(session.signed_url)

        phase = TransferPhase.EXTRACT
        extracted = await asyncio.to_thread(unpack, session.data, destination_parent)
    except TransferError as e:
        return _failed("download", phase, e)

    logger.info(
        "Downloaded %s from machine %s into %s (%d bytes, %d paths)",
        source_path,
        machine_id,
        destination_parent,
        len(session.data),
        len(extracted),
    )
    return TransferResult(
        success=True,
        direction="download",
        phase=phase,
        message=(
            f"Successfully downloaded {source_path} from machine {machine_id} "
            f"to {destination_parent}"
        ),
        bytes_transferred=len(session.data),
        extracted=extracted,
    )
