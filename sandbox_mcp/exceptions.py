"""Exception taxonomy for archive transfers.

Every failure raised by the packer, unpacker or protocol driver is a
TransferError subclass. The driver stamps the failing phase onto the
exception so callers can tell where a transfer stopped.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sandbox_mcp.models import TransferPhase


class TransferError(Exception):
    """Base class for archive transfer failures."""

    def __init__(self, message: str, phase: "TransferPhase | None" = None) -> None:
        super().__init__(message)
        self.phase = phase


class AccessError(TransferError):
    """Source path unreadable or destination unwritable."""


class FormatError(TransferError):
    """Corrupt gzip stream or tar structure."""


class PathTraversalError(TransferError):
    """An archive entry or symlink target would escape the destination root."""


class TransferIOError(TransferError):
    """Read, write or network failure not covered by the other errors."""


class ProtocolError(TransferError):
    """Control API or object store returned a non-success or unparsable response."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str = "",
        phase: "TransferPhase | None" = None,
    ) -> None:
        super().__init__(message, phase=phase)
        self.status_code = status_code
        self.body = body
