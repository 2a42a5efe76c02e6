"""Data models for Sandbox MCP."""

from sandbox_mcp.models.archive import (
    ArchiveStream,
    EntryKind,
    ExtractedPath,
    SourceEntry,
)
from sandbox_mcp.models.transfer import (
    TransferPhase,
    TransferResult,
    TransferSession,
    UploadState,
    UploadTicket,
)

__all__ = [
    "ArchiveStream",
    "EntryKind",
    "ExtractedPath",
    "SourceEntry",
    "TransferPhase",
    "TransferResult",
    "TransferSession",
    "UploadState",
    "UploadTicket",
]
