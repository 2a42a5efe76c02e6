"""Archive packer: serializes a file or directory tree into tar.gz bytes."""

import gzip
import io
import logging
import os
import stat
import tarfile
from collections.abc import Iterator

from sandbox_mcp.exceptions import AccessError, TransferIOError
from sandbox_mcp.models import ArchiveStream, EntryKind, SourceEntry

logger = logging.getLogger(__name__)

# Only permission bits travel; setuid/setgid/sticky do not
MODE_MASK = 0o777


def is_archivable(mode: int) -> bool:
    """Return True for regular files, directories and symlinks.

    Devices, sockets and FIFOs cannot be reproduced on the other side
    and are skipped instead of failing the pack.
    """
    return stat.S_ISREG(mode) or stat.S_ISDIR(mode) or stat.S_ISLNK(mode)


def _entry_kind(mode: int) -> EntryKind:
    if stat.S_ISLNK(mode):
        return EntryKind.SYMLINK
    if stat.S_ISDIR(mode):
        return EntryKind.DIRECTORY
    return EntryKind.FILE


def _lstat(path: str) -> os.stat_result:
    try:
        return os.lstat(path)
    except PermissionError as e:
        raise AccessError(f"Permission denied: {path}") from e
    except FileNotFoundError as e:
        raise AccessError(f"Source path not found: {path}") from e
    except OSError as e:
        raise AccessError(f"Cannot access {path}: {e}") from e


def _make_entry(path: str, arcname: str, st: os.stat_result) -> SourceEntry:
    kind = _entry_kind(st.st_mode)
    link_target = None
    if kind is EntryKind.SYMLINK:
        try:
            link_target = os.readlink(path)
        except OSError as e:
            raise TransferIOError(f"Cannot read symlink {path}: {e}") from e

    return SourceEntry(
        path=path,
        arcname=arcname,
        kind=kind,
        mode=stat.S_IMODE(st.st_mode) & MODE_MASK,
        size=st.st_size if kind is EntryKind.FILE else 0,
        link_target=link_target,
        mtime=st.st_mtime,
    )


def _walk_dir(path: str, arcname: str | None) -> Iterator[SourceEntry]:
    """Yield children of path depth-first, sorted by name, parents first."""
    try:
        with os.scandir(path) as it:
            names = sorted(entry.name for entry in it)
    except PermissionError as e:
        raise AccessError(f"Cannot list directory {path}: permission denied") from e
    except OSError as e:
        raise TransferIOError(f"Cannot list directory {path}: {e}") from e

    for name in names:
        child = os.path.join(path, name)
        child_arcname = name if arcname is None else f"{arcname}/{name}"
        st = _lstat(child)

        if not is_archivable(st.st_mode):
            logger.debug("Skipping special file: %s", child)
            continue

        yield _make_entry(child, child_arcname, st)

        if stat.S_ISDIR(st.st_mode):
            yield from _walk_dir(child, child_arcname)


def walk_source(source_path: str, include_root: bool = True) -> Iterator[SourceEntry]:
    """Walk a source path and yield the entries to archive.

    Args:
        source_path: File or directory to pack
        include_root: For directories, whether the directory itself becomes
            the top-level entry. When False, or when the source is the
            filesystem root, its children are top-level.

    Yields:
        SourceEntry records in traversal order (parents before children)

    Raises:
        AccessError: If the source cannot be read
        TransferIOError: If a directory listing or symlink read fails
    """
    source_path = os.path.abspath(source_path)
    st = _lstat(source_path)
    base_name = os.path.basename(source_path)

    if not stat.S_ISDIR(st.st_mode):
        if not is_archivable(st.st_mode):
            logger.debug("Skipping special file: %s", source_path)
            return
        yield _make_entry(source_path, base_name, st)
        return

    # The filesystem root has no name to nest under
    if include_root and base_name:
        yield _make_entry(source_path, base_name, st)
        yield from _walk_dir(source_path, base_name)
    else:
        yield from _walk_dir(source_path, None)


def _tar_info(entry: SourceEntry) -> tarfile.TarInfo:
    info = tarfile.TarInfo(name=entry.arcname)
    info.mode = entry.mode
    # Ownership does not travel
    info.uid = info.gid = 0
    info.uname = info.gname = ""

    info.mtime = int(entry.mtime)

    if entry.kind is EntryKind.DIRECTORY:
        info.type = tarfile.DIRTYPE
    elif entry.kind is EntryKind.SYMLINK:
        info.type = tarfile.SYMTYPE
        info.linkname = entry.link_target or ""
    else:
        info.type = tarfile.REGTYPE
        info.size = entry.size
    return info


def _add_entry(tar: tarfile.TarFile, entry: SourceEntry) -> None:
    info = _tar_info(entry)

    if entry.kind is not EntryKind.FILE:
        tar.addfile(info)
        return

    try:
        fileobj = open(entry.path, "rb")
    except PermissionError as e:
        raise AccessError(f"Cannot read {entry.path}: permission denied") from e
    except OSError as e:
        raise TransferIOError(f"Cannot open {entry.path}: {e}") from e

    with fileobj:
        try:
            tar.addfile(info, fileobj)
        except OSError as e:
            raise TransferIOError(f"Failed reading {entry.path}: {e}") from e


def pack(source_path: str, include_root: bool = True) -> ArchiveStream:
    """Pack a file or directory into an in-memory tar.gz archive.

    The gzip header carries a fixed mtime so identical trees produce
    identical bytes.

    Args:
        source_path: File or directory to pack
        include_root: For directories, keep the directory itself as the
            top-level entry (False packs only its contents)

    Returns:
        ArchiveStream with the compressed bytes and the ordered entries

    Raises:
        AccessError: If the source or one of its files cannot be read
        TransferIOError: If reading fails partway through
    """
    buffer = io.BytesIO()
    entries: list[SourceEntry] = []

    with gzip.GzipFile(fileobj=buffer, mode="wb", mtime=0) as gz:
        with tarfile.open(fileobj=gz, mode="w", format=tarfile.PAX_FORMAT) as tar:
            for entry in walk_source(source_path, include_root=include_root):
                _add_entry(tar, entry)
                entries.append(entry)

    archive = ArchiveStream(data=buffer.getvalue(), entries=entries)
    logger.info(
        "Packed %s: %d entries, %d bytes compressed",
        source_path,
        len(entries),
        archive.size,
    )
    return archive
