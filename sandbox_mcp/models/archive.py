"""Archive data models."""

from dataclasses import dataclass, field
from enum import Enum


class EntryKind(str, Enum):
    """Kind of filesystem object carried in an archive."""

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"


@dataclass(frozen=True)
class SourceEntry:
    """A filesystem object observed while walking a source path."""

    path: str
    arcname: str
    kind: EntryKind
    mode: int
    size: int = 0
    link_target: str | None = None
    mtime: float = 0.0


@dataclass
class ArchiveStream:
    """A packed tar.gz archive and the entries written into it, in order."""

    data: bytes
    entries: list[SourceEntry] = field(default_factory=list)

    @property
    def size(self) -> int:
        """Compressed size in bytes."""
        return len(self.data)

    @property
    def arcnames(self) -> list[str]:
        """Archive-relative names in traversal order."""
        return [entry.arcname for entry in self.entries]


@dataclass(frozen=True)
class ExtractedPath:
    """A local path written while unpacking an archive."""

    path: str
    kind: EntryKind
