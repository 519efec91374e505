import logging
import os
import stat
from dataclasses import dataclass
from enum import Enum
from typing import List

from file_explorer.errors import from_os_error

logger = logging.getLogger(__name__)


class EntryKind(str, Enum):
    DIRECTORY = "directory"
    FILE = "file"
    SYMLINK = "symlink"
    OTHER = "other"

    @classmethod
    def from_mode(cls, mode: int) -> "EntryKind":
        if stat.S_ISLNK(mode):
            return cls.SYMLINK
        if stat.S_ISDIR(mode):
            return cls.DIRECTORY
        if stat.S_ISREG(mode):
            return cls.FILE
        return cls.OTHER


@dataclass
class DirectoryEntry:
    name: str
    path: str
    kind: EntryKind
    size: int
    mtime: float
    mode: int
    uid: int = -1
    gid: int = -1

    @property
    def is_dir(self) -> bool:
        return self.kind == EntryKind.DIRECTORY

    @property
    def is_executable(self) -> bool:
        return self.kind == EntryKind.FILE and bool(self.mode & stat.S_IXUSR)

    @property
    def permission_bits(self) -> int:
        return stat.S_IMODE(self.mode)

    @classmethod
    def from_stat(cls, path: str, st: os.stat_result) -> "DirectoryEntry":
        return cls(
            name=os.path.basename(path.rstrip(os.sep)) or path,
            path=path,
            kind=EntryKind.from_mode(st.st_mode),
            size=st.st_size,
            mtime=st.st_mtime,
            mode=st.st_mode,
            uid=st.st_uid,
            gid=st.st_gid,
        )


def read_entry(path: str) -> DirectoryEntry:
    """lstat ``path`` and wrap the result; symlinks are not followed."""
    path = os.path.abspath(path)
    try:
        st = os.lstat(path)
    except OSError as e:
        raise from_os_error(e, path) from e
    return DirectoryEntry.from_stat(path, st)


def scan_directory(path: str) -> List[DirectoryEntry]:
    """Read the children of ``path`` fresh from the filesystem.

    Entries that vanish between ``readdir`` and ``lstat`` are skipped.
    """
    path = os.path.abspath(path)
    entries = []
    try:
        with os.scandir(path) as it:
            for item in it:
                try:
                    st = item.stat(follow_symlinks=False)
                except OSError as e:
                    logger.debug(f"Skipping {item.path}: {e}")
                    continue
                entries.append(DirectoryEntry.from_stat(item.path, st))
    except OSError as e:
        raise from_os_error(e, path) from e
    return entries


def sort_for_listing(entries: List[DirectoryEntry]) -> List[DirectoryEntry]:
    return sorted(entries, key=lambda e: (not e.is_dir, e.name))
