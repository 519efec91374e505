import grp
import logging
import os
import pwd
import stat
from typing import Tuple

from file_explorer.errors import NotFound, from_os_error

logger = logging.getLogger(__name__)

PERMISSION_FLAGS = [
    (stat.S_IRUSR, "r"),
    (stat.S_IWUSR, "w"),
    (stat.S_IXUSR, "x"),
    (stat.S_IRGRP, "r"),
    (stat.S_IWGRP, "w"),
    (stat.S_IXGRP, "x"),
    (stat.S_IROTH, "r"),
    (stat.S_IWOTH, "w"),
    (stat.S_IXOTH, "x"),
]


def permission_string(mode: int) -> str:
    """Render ``mode`` the way ``ls -l`` does, e.g. ``drwxr-xr-x``."""
    if stat.S_ISDIR(mode):
        kind = "d"
    elif stat.S_ISLNK(mode):
        kind = "l"
    else:
        kind = "-"
    return kind + "".join(ch if mode & flag else "-" for flag, ch in PERMISSION_FLAGS)


def octal_string(mode: int) -> str:
    return format(mode & 0o777, "o")


def parse_octal_mode(text: str) -> int:
    text = text.strip()
    if text.startswith("0o"):
        text = text[2:]
    if not text or len(text) > 4 or any(ch not in "01234567" for ch in text):
        raise ValueError(
            f"Invalid permission format '{text}'. Use octal notation (e.g., 755)"
        )
    return int(text, 8)


def owner_name(uid: int) -> str:
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


def group_name(gid: int) -> str:
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        return str(gid)


def change_mode(path: str, mode: int) -> None:
    try:
        os.chmod(path, mode)
    except OSError as e:
        raise from_os_error(e, path) from e
    logger.info(f"chmod {octal_string(mode)} {path}")


def lookup_ids(owner: str = "", group: str = "") -> Tuple[int, int]:
    """Resolve user/group names to ids; an empty name maps to -1 (unchanged)."""
    uid = gid = -1
    if owner:
        try:
            uid = pwd.getpwnam(owner).pw_uid
        except KeyError:
            raise NotFound(owner, "Unknown user") from None
    if group:
        try:
            gid = grp.getgrnam(group).gr_gid
        except KeyError:
            raise NotFound(group, "Unknown group") from None
    return uid, gid


def change_owner(path: str, owner: str = "", group: str = "") -> None:
    uid, gid = lookup_ids(owner, group)
    try:
        os.chown(path, uid, gid)
    except OSError as e:
        raise from_os_error(e, path) from e
    logger.info(f"chown {owner or '-'}:{group or '-'} {path}")
