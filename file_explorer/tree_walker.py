"""
Tree Walker
--------------------------------------------------

Depth-first copy, delete and search over a directory subtree, plus the
rename-or-copy-then-delete move built from them.

Every operation reads the live filesystem at each step and never prints,
prompts or asks for confirmation; the caller formats the outcome.

Policies:
  • Symlinks are never followed: copy recreates the link, delete unlinks it,
    search matches its name but does not descend into it.
  • Copy never overwrites: an existing destination fails with AlreadyExists.
  • The first failing entry aborts the walk. Nothing is rolled back.
  • Children are visited in sorted name order.
  • Traversal uses an explicit stack so deep trees cannot exhaust the
    interpreter recursion limit.
"""

import errno
import logging
import os
import stat
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Union

from file_explorer.entries import DirectoryEntry, EntryKind, read_entry, scan_directory
from file_explorer.errors import (
    AlreadyExists,
    CrossDeviceMove,
    DirectoryNotEmpty,
    FileExplorerError,
    TreeIOError,
    from_os_error,
)

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024

Predicate = Callable[[str], bool]


@dataclass
class TraversalResult:
    ok: bool = True
    failed_path: Optional[str] = None
    error: Optional[FileExplorerError] = None
    matches: List[str] = field(default_factory=list)
    cross_device: bool = False

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def failure(cls, error: FileExplorerError) -> "TraversalResult":
        return cls(ok=False, failed_path=error.path or None, error=error)


def name_contains(term: str) -> Predicate:
    """Case-insensitive substring match on the entry name."""
    needle = term.lower()
    return lambda name: needle in name.lower()


def _is_within(path: str, directory: str) -> bool:
    path = os.path.realpath(path)
    directory = os.path.realpath(directory)
    return os.path.commonpath([path, directory]) == directory


def _sorted_children(path: str, reverse: bool = False) -> List[DirectoryEntry]:
    return sorted(scan_directory(path), key=lambda e: e.name, reverse=reverse)


def _as_error(exc: OSError, fallback_path: str) -> FileExplorerError:
    return from_os_error(exc, exc.filename or fallback_path)


# ----------------------------------------------------------------
# Copy
# ----------------------------------------------------------------
def copy_file(source: str, destination: str) -> None:
    """Copy one regular file's bytes and permission bits.

    The destination is opened for exclusive creation, so an existing file
    raises AlreadyExists instead of being truncated.
    """
    try:
        mode = stat.S_IMODE(os.stat(source).st_mode)
        with open(source, "rb") as fin, open(destination, "xb") as fout:
            while buf := fin.read(CHUNK_SIZE):
                fout.write(buf)
        os.chmod(destination, mode)
    except OSError as e:
        raise _as_error(e, source) from e


def copy_tree(source: str, destination: str) -> TraversalResult:
    source = os.path.abspath(source)
    destination = os.path.abspath(destination)
    logger.info(f"Copying {source} -> {destination}")

    try:
        root = read_entry(source)
    except FileExplorerError as e:
        return TraversalResult.failure(e)
    if os.path.lexists(destination):
        return TraversalResult.failure(AlreadyExists(destination))
    if root.is_dir and _is_within(destination, source):
        return TraversalResult.failure(
            TreeIOError(destination, "Destination is inside the source directory")
        )

    # (entry, target, finished); a finished frame applies the final
    # directory mode once all of its children have been written.
    stack = [(root, destination, False)]
    current = source
    try:
        while stack:
            entry, target, finished = stack.pop()
            current = entry.path
            if finished:
                os.chmod(target, entry.permission_bits)
                continue
            logger.debug(f"copy {entry.kind.value} {entry.path}")
            if entry.kind == EntryKind.DIRECTORY:
                os.mkdir(target, entry.permission_bits | stat.S_IRWXU)
                stack.append((entry, target, True))
                for child in _sorted_children(entry.path, reverse=True):
                    stack.append((child, os.path.join(target, child.name), False))
            elif entry.kind == EntryKind.FILE:
                copy_file(entry.path, target)
            elif entry.kind == EntryKind.SYMLINK:
                link = os.readlink(entry.path)
                try:
                    os.symlink(link, target)
                except OSError as e:
                    # filename is the link text here, not a path in either tree
                    raise from_os_error(e, target) from e
            else:
                raise TreeIOError(entry.path, "Cannot copy special file")
    except OSError as e:
        error = _as_error(e, current)
        logger.warning(f"Copy of {source} stopped at {error.path}: {error.message}")
        return TraversalResult.failure(error)
    return TraversalResult()


# ----------------------------------------------------------------
# Delete
# ----------------------------------------------------------------
def _delete_recursive(root: DirectoryEntry) -> None:
    # (entry, expanded); an expanded directory has had its children pushed
    # above it and is removed once they are gone.
    stack = [(root, False)]
    while stack:
        entry, expanded = stack.pop()
        if entry.kind != EntryKind.DIRECTORY:
            logger.debug(f"unlink {entry.path}")
            os.unlink(entry.path)
        elif expanded:
            logger.debug(f"rmdir {entry.path}")
            os.rmdir(entry.path)
        else:
            stack.append((entry, True))
            for child in _sorted_children(entry.path, reverse=True):
                stack.append((child, False))


def delete_tree(path: str, recursive: bool = False) -> TraversalResult:
    """Remove ``path``.

    A directory is first removed non-recursively. If it is not empty and
    ``recursive`` is false the result carries DirectoryNotEmpty so the
    caller can confirm before calling again with ``recursive=True``.
    """
    path = os.path.abspath(path)
    logger.info(f"Deleting {path} (recursive={recursive})")
    try:
        entry = read_entry(path)
    except FileExplorerError as e:
        return TraversalResult.failure(e)

    try:
        if not entry.is_dir:
            os.unlink(path)
            return TraversalResult()
        try:
            os.rmdir(path)
            return TraversalResult()
        except OSError as e:
            if e.errno not in (errno.ENOTEMPTY, errno.EEXIST):
                raise
            if not recursive:
                return TraversalResult.failure(DirectoryNotEmpty(path))
        _delete_recursive(entry)
    except OSError as e:
        error = _as_error(e, path)
        logger.warning(f"Delete of {path} stopped at {error.path}: {error.message}")
        return TraversalResult.failure(error)
    return TraversalResult()


# ----------------------------------------------------------------
# Search
# ----------------------------------------------------------------
def search_tree(
    root: str,
    predicate: Union[Predicate, str],
    include_dirs: bool = False,
) -> Iterator[str]:
    """Lazily yield absolute paths under ``root`` whose name matches.

    A string predicate is a case-insensitive substring. Directories are
    always descended into, but directory matches are opt-in: a directory is
    only yielded itself when ``include_dirs`` is true. A missing or
    non-directory root yields nothing and unreadable directories are skipped.
    """
    if isinstance(predicate, str):
        predicate = name_contains(predicate)
    root = os.path.abspath(root)
    if not os.path.isdir(root):
        return
    try:
        stack = _sorted_children(root, reverse=True)
    except FileExplorerError as e:
        logger.debug(f"Cannot read {root}: {e}")
        return

    while stack:
        entry = stack.pop()
        if predicate(entry.name) and (include_dirs or not entry.is_dir):
            yield entry.path
        if entry.is_dir:
            try:
                stack.extend(_sorted_children(entry.path, reverse=True))
            except FileExplorerError as e:
                logger.debug(f"Cannot read {entry.path}: {e}")


def collect_matches(
    root: str, predicate: Union[Predicate, str], include_dirs: bool = False
) -> TraversalResult:
    return TraversalResult(matches=list(search_tree(root, predicate, include_dirs)))


# ----------------------------------------------------------------
# Move
# ----------------------------------------------------------------
def move_tree(source: str, destination: str) -> TraversalResult:
    """Rename ``source`` to ``destination``, copying then deleting across devices."""
    source = os.path.abspath(source)
    destination = os.path.abspath(destination)
    logger.info(f"Moving {source} -> {destination}")
    try:
        read_entry(source)
    except FileExplorerError as e:
        return TraversalResult.failure(e)
    if os.path.lexists(destination):
        return TraversalResult.failure(AlreadyExists(destination))

    try:
        os.rename(source, destination)
        return TraversalResult()
    except OSError as e:
        error = _as_error(e, source)
        if not isinstance(error, CrossDeviceMove):
            logger.warning(f"Move of {source} failed: {error}")
            return TraversalResult.failure(error)

    logger.info("Cross-device move detected: copying then deleting source")
    result = copy_tree(source, destination)
    if result:
        result = delete_tree(source, recursive=True)
    result.cross_device = True
    return result
