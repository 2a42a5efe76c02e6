"""Archive unpacker: safely materializes tar.gz bytes under a destination root."""

import gzip
import io
import logging
import os
import posixpath
import tarfile
import zlib
from collections.abc import Iterator
from typing import IO

from sandbox_mcp.exceptions import (
    AccessError,
    FormatError,
    PathTraversalError,
    TransferIOError,
)
from sandbox_mcp.models import EntryKind, ExtractedPath
from sandbox_mcp.utils.validation import (
    check_real_containment,
    is_within_dir,
    resolve_member_path,
)

logger = logging.getLogger(__name__)

# AppleDouble files shadow extended attributes on macOS
METADATA_NOISE_PREFIX = "._"

MODE_MASK = 0o777

COPY_CHUNK_SIZE = 1024 * 1024

_FORMAT_ERRORS = (tarfile.TarError, EOFError, zlib.error, gzip.BadGzipFile)


def is_metadata_noise(name: str) -> bool:
    """Return True for AppleDouble entries such as ``dir/._file``."""
    base_name = posixpath.basename(name.rstrip("/"))
    return base_name.startswith(METADATA_NOISE_PREFIX)


def _iter_members(tar: tarfile.TarFile) -> Iterator[tarfile.TarInfo]:
    members = iter(tar)
    while True:
        try:
            member = next(members)
        except StopIteration:
            return
        except _FORMAT_ERRORS as e:
            raise FormatError(f"Corrupt archive: {e}") from e
        yield member


def _ensure_dir(path: str, mode: int = 0o755) -> None:
    try:
        os.makedirs(path, mode=mode, exist_ok=True)
    except FileExistsError as e:
        raise TransferIOError(f"Cannot create directory {path}: a file is in the way") from e
    except PermissionError as e:
        raise AccessError(f"Cannot create directory {path}: permission denied") from e
    except OSError as e:
        raise TransferIOError(f"Cannot create directory {path}: {e}") from e


def _remove_existing(path: str) -> None:
    """Remove a file or symlink at path so it is replaced, not written through."""
    if os.path.islink(path) or os.path.isfile(path):
        try:
            os.unlink(path)
        except OSError as e:
            raise TransferIOError(f"Cannot replace {path}: {e}") from e


def _copy_member(source: IO[bytes], fd: int, name: str) -> None:
    with os.fdopen(fd, "wb") as target:
        while True:
            try:
                chunk = source.read(COPY_CHUNK_SIZE)
            except _FORMAT_ERRORS as e:
                raise FormatError(f"Corrupt data for {name}: {e}") from e
            if not chunk:
                break
            try:
                target.write(chunk)
            except OSError as e:
                raise TransferIOError(f"Failed writing {name}: {e}") from e


def _extract_directory(member: tarfile.TarInfo, target: str) -> None:
    # Owner keeps rwx so later entries can be written inside
    mode = (member.mode & MODE_MASK) | 0o700
    _ensure_dir(target, mode)
    try:
        os.chmod(target, mode)
    except OSError as e:
        raise TransferIOError(f"Cannot set mode on {target}: {e}") from e


def _extract_file(tar: tarfile.TarFile, member: tarfile.TarInfo, target: str) -> None:
    _ensure_dir(os.path.dirname(target))
    _remove_existing(target)

    source = tar.extractfile(member)
    if source is None:
        raise FormatError(f"No data for regular file entry: {member.name}")

    mode = member.mode & MODE_MASK
    try:
        fd = os.open(target, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, mode)
    except PermissionError as e:
        raise AccessError(f"Cannot write {target}: permission denied") from e
    except OSError as e:
        raise TransferIOError(f"Cannot create file {target}: {e}") from e

    _copy_member(source, fd, member.name)

    try:
        os.chmod(target, mode)
    except OSError as e:
        raise TransferIOError(f"Cannot set mode on {target}: {e}") from e


def _extract_symlink(
    member: tarfile.TarInfo,
    target: str,
    root: str,
    real_root: str,
) -> None:
    parent = os.path.dirname(target)
    link_target = os.path.normpath(os.path.join(parent, member.linkname))
    real_link_target = os.path.normpath(
        os.path.join(os.path.realpath(parent), member.linkname)
    )
    if not is_within_dir(link_target, root) or not is_within_dir(
        os.path.realpath(real_link_target), real_root
    ):
        raise PathTraversalError(
            f"Symlink escapes destination: {member.name} -> {member.linkname}"
        )

    _ensure_dir(parent)
    _remove_existing(target)
    try:
        os.symlink(member.linkname, target)
    except OSError as e:
        raise TransferIOError(f"Cannot create symlink {target}: {e}") from e


def unpack(data: bytes, destination: str) -> set[ExtractedPath]:
    """Extract a tar.gz archive under destination.

    Entries are written in archive order. Extraction stops at the first
    error; entries already written are left in place, so re-running with
    the same archive is safe.

    Args:
        data: Compressed archive bytes
        destination: Directory to extract into (created if missing)

    Returns:
        Set of every directory, file and symlink written

    Raises:
        FormatError: If the gzip stream or tar structure is corrupt
        PathTraversalError: If an entry or symlink target escapes destination
        AccessError: If the destination cannot be written
        TransferIOError: If a write fails
    """
    root = os.path.normpath(os.path.abspath(destination))
    _ensure_dir(root)
    real_root = os.path.realpath(root)

    extracted: set[ExtractedPath] = set()
    skipped = 0

    try:
        tar = tarfile.open(fileobj=io.BytesIO(data), mode="r:gz")
    except _FORMAT_ERRORS as e:
        raise FormatError(f"Not a valid tar.gz archive: {e}") from e

    with tar:
        for member in _iter_members(tar):
            if is_metadata_noise(member.name):
                logger.debug("Skipping metadata entry: %s", member.name)
                skipped += 1
                continue

            target = resolve_member_path(root, member.name)

            if member.isdir():
                check_real_containment(target, real_root, member.name)
                _extract_directory(member, target)
                extracted.add(ExtractedPath(target, EntryKind.DIRECTORY))
            elif member.isreg():
                check_real_containment(os.path.dirname(target), real_root, member.name)
                _extract_file(tar, member, target)
                extracted.add(ExtractedPath(target, EntryKind.FILE))
            elif member.issym():
                check_real_containment(os.path.dirname(target), real_root, member.name)
                _extract_symlink(member, target, root, real_root)
                extracted.add(ExtractedPath(target, EntryKind.SYMLINK))
            else:
                logger.debug("Skipping unsupported entry type: %s", member.name)
                skipped += 1

    logger.info(
        "Extracted %d path(s) into %s (%d skipped)",
        len(extracted),
        root,
        skipped,
    )
    return extracted
