"""Transfer session and result models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from sandbox_mcp.models.archive import ExtractedPath

if TYPE_CHECKING:
    from sandbox_mcp.exceptions import TransferError


class TransferPhase(str, Enum):
    """Step of an upload or download flow."""

    # Upload
    PACK = "pack"
    START = "start"
    TRANSMIT = "transmit"
    COMPLETE = "complete"

    # Download
    REQUEST = "request"
    FETCH = "fetch"
    EXTRACT = "extract"


class UploadState(str, Enum):
    """Progress of the start/transmit/complete upload saga."""

    PENDING = "pending"
    STARTED = "started"
    TRANSMITTED = "transmitted"
    COMPLETED = "completed"


@dataclass(frozen=True)
class UploadTicket:
    """Identifier and signed write URL handed out by start_upload."""

    upload_id: str
    signed_url: str


@dataclass
class TransferSession:
    """State of one in-flight upload or download.

    Lives only for the duration of a single transfer call.
    """

    machine_id: str
    state: UploadState = UploadState.PENDING
    upload_id: str | None = None
    signed_url: str | None = None
    data: bytes = b""

    def start(self, ticket: UploadTicket) -> None:
        """Record the ticket returned by start_upload."""
        self.upload_id = ticket.upload_id
        self.signed_url = ticket.signed_url
        self.state = UploadState.STARTED

    def mark_transmitted(self) -> None:
        """Record a successful PUT of the archive buffer."""
        if self.state is not UploadState.STARTED:
            raise RuntimeError(f"Cannot transmit from state {self.state.value}")
        self.state = UploadState.TRANSMITTED

    def mark_completed(self) -> None:
        """Record a successful complete_upload call."""
        if self.state is not UploadState.TRANSMITTED:
            raise RuntimeError(f"Cannot complete from state {self.state.value}")
        self.state = UploadState.COMPLETED


@dataclass
class TransferResult:
    """Outcome of an upload or download call."""

    success: bool
    direction: str
    phase: TransferPhase
    message: str
    bytes_transferred: int = 0
    error: "TransferError | None" = None
    extracted: set[ExtractedPath] = field(default_factory=set)
    notes: list[str] = field(default_factory=list)

    @property
    def extracted_paths(self) -> list[str]:
        """Sorted local paths written during extraction."""
        return sorted(item.path for item in self.extracted)
