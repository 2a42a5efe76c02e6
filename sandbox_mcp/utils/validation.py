"""Path containment and input validation utilities."""

import os
from typing import Final
from urllib.parse import urlsplit, urlunsplit

from sandbox_mcp.exceptions import PathTraversalError

# Characters that must never appear in a machine id used as a URL path segment
SUSPICIOUS_CHARS: Final[tuple[str, ...]] = (
    "/",
    "\\",
    ";",
    "&",
    "|",
    "$",
    "`",
    "?",
    "#",
    "%",
    " ",
    "\n",
    "\r",
    "\t",
    "\x00",
)


def is_within_dir(path: str, root: str) -> bool:
    """Check that path is root itself or a descendant of it.

    Both paths are normalized lexically; symlinks are not resolved.
    """
    path = os.path.normpath(path)
    root = os.path.normpath(root)
    if path == root:
        return True
    prefix = root if root.endswith(os.sep) else root + os.sep
    return path.startswith(prefix)


def resolve_member_path(root: str, name: str) -> str:
    """Join an archive member name to root and verify containment.

    Args:
        root: Absolute, normalized destination directory
        name: Member name as recorded in the archive

    Returns:
        Normalized absolute path for the member

    Raises:
        PathTraversalError: If the name is absolute, contains a null byte,
            or normalizes to a location outside root
    """
    if "\x00" in name:
        raise PathTraversalError(f"Archive entry contains null byte: {name!r}")

    if name.startswith(("/", "\\")) or os.path.isabs(name):
        raise PathTraversalError(f"Absolute path in archive entry: {name}")

    target = os.path.normpath(os.path.join(root, name))
    if not is_within_dir(target, root):
        raise PathTraversalError(f"Path traversal detected: {name}")
    return target


def check_real_containment(path: str, real_root: str, name: str) -> None:
    """Verify path still lies within real_root after resolving symlinks.

    Catches writes redirected through a symlinked ancestor directory.

    Raises:
        PathTraversalError: If the resolved path escapes real_root
    """
    if not is_within_dir(os.path.realpath(path), real_root):
        raise PathTraversalError(
            f"Archive entry resolves outside destination via symlink: {name}"
        )


def validate_machine_id(machine_id: str) -> str:
    """Validate a remote machine identifier.

    The id is interpolated into control API paths, so anything that could
    alter the URL is rejected.

    Returns:
        The stripped machine id

    Raises:
        ValueError: If the id is empty or contains invalid characters
    """
    machine_id = machine_id.strip()
    if not machine_id:
        raise ValueError("machine_id cannot be empty")

    if len(machine_id) > 253:
        raise ValueError(f"machine_id too long: {len(machine_id)} chars")

    if machine_id in (".", ".."):
        raise ValueError(f"Invalid machine_id: {machine_id!r}")

    for char in SUSPICIOUS_CHARS:
        if char in machine_id:
            raise ValueError(f"machine_id contains invalid characters: {machine_id!r}")

    return machine_id


def redact_url(url: str) -> str:
    """Strip the query string and fragment from a signed URL for logging."""
    parts = urlsplit(url)
    if not parts.query and not parts.fragment:
        return url
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "<redacted>", ""))
