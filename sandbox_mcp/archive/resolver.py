"""Post-extraction resolver: picks what to reveal after a download."""

import os
from collections.abc import Iterable

from sandbox_mcp.models import ExtractedPath


def top_level_items(
    paths: Iterable[str | ExtractedPath],
    destination: str,
) -> set[str]:
    """Return the distinct items directly beneath destination.

    Paths outside destination, and destination itself, contribute nothing.
    """
    root = os.path.normpath(destination)
    items: set[str] = set()

    for item in paths:
        path = item.path if isinstance(item, ExtractedPath) else item
        try:
            rel_path = os.path.relpath(os.path.normpath(path), root)
        except ValueError:
            # Different drive on Windows
            continue
        first = rel_path.split(os.sep, 1)[0]
        if first in (".", "..") or not first:
            continue
        items.add(os.path.join(root, first))

    return items


def resolve_reveal_target(
    paths: Iterable[str | ExtractedPath],
    destination: str,
) -> str:
    """Pick the natural target to open after extraction.

    A single top-level item (a file, folder or .app bundle) is opened
    directly; otherwise the destination folder itself is.
    """
    items = top_level_items(paths, destination)
    if len(items) == 1:
        return items.pop()
    return os.path.normpath(destination)
