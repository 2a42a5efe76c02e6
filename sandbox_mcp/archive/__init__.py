"""Archive packing, unpacking and post-extraction resolution.

Public API:
    pack(source_path, include_root) -> ArchiveStream
    unpack(data, destination) -> set[ExtractedPath]
    resolve_reveal_target(paths, destination) -> str
"""

from sandbox_mcp.archive.packer import is_archivable, pack, walk_source
from sandbox_mcp.archive.resolver import resolve_reveal_target, top_level_items
from sandbox_mcp.archive.unpacker import is_metadata_noise, unpack

__all__ = [
    "is_archivable",
    "is_metadata_noise",
    "pack",
    "resolve_reveal_target",
    "top_level_items",
    "unpack",
    "walk_source",
]
