import errno
from typing import Optional


class FileExplorerError(OSError):
    """Base class for every filesystem failure the explorer reports."""

    default_message = "Filesystem error"

    def __init__(self, path: str = "", message: Optional[str] = None):
        self.path = path
        self.message = message or self.default_message
        super().__init__(f"{self.message}: {path}" if path else self.message)


class NotFound(FileExplorerError):
    default_message = "No such file or directory"


class AlreadyExists(FileExplorerError):
    default_message = "Already exists"


class PermissionDenied(FileExplorerError):
    default_message = "Permission denied"


class DirectoryNotEmpty(FileExplorerError):
    default_message = "Directory is not empty"


class CrossDeviceMove(FileExplorerError):
    default_message = "Cannot rename across filesystems"


class TreeIOError(FileExplorerError):
    default_message = "I/O error"


ERRNO_MAP = {
    errno.ENOENT: NotFound,
    errno.EEXIST: AlreadyExists,
    errno.EACCES: PermissionDenied,
    errno.EPERM: PermissionDenied,
    errno.ENOTEMPTY: DirectoryNotEmpty,
    errno.EXDEV: CrossDeviceMove,
}


def from_os_error(exc: OSError, path: str = "") -> FileExplorerError:
    if isinstance(exc, FileExplorerError):
        return exc
    path = path or exc.filename or ""
    cls = ERRNO_MAP.get(exc.errno, TreeIOError)
    if cls is TreeIOError:
        return TreeIOError(str(path), exc.strerror or str(exc))
    return cls(str(path))
