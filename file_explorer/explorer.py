import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

from file_explorer import tree_walker
from file_explorer.config import MAX_RECENT_FILES
from file_explorer.entries import DirectoryEntry, read_entry, scan_directory, sort_for_listing
from file_explorer.errors import (
    AlreadyExists,
    FileExplorerError,
    NotFound,
    PermissionDenied,
    from_os_error,
)
from file_explorer.permissions import (
    change_mode,
    change_owner,
    group_name,
    owner_name,
    parse_octal_mode,
)
from file_explorer.themes import get_theme
from file_explorer.tree_walker import TraversalResult

logger = logging.getLogger(__name__)

BATCH_OPERATIONS = ("delete", "copy", "move")


@dataclass
class PermissionInfo:
    entry: DirectoryEntry
    owner: str
    group: str


@dataclass
class BatchOutcome:
    item: str
    result: Optional[TraversalResult] = None
    error: Optional[FileExplorerError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.result)


class RecentFiles:
    """Most-recent-first list of paths without duplicates."""

    def __init__(self, items: Optional[List[str]] = None, limit: int = MAX_RECENT_FILES):
        self.limit = max(1, limit)
        self.items: List[str] = []
        for path in reversed(items or []):
            self.add(path)

    def add(self, path: str) -> None:
        if path in self.items:
            self.items.remove(path)
        self.items.insert(0, path)
        del self.items[self.limit :]

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


@dataclass
class ExplorerSession:
    """Explicit navigation context: every relative path resolves against ``cwd``."""

    cwd: str = field(default_factory=os.getcwd)
    theme_name: str = "default"
    recent: RecentFiles = field(default_factory=RecentFiles)

    def __post_init__(self):
        self.cwd = os.path.abspath(os.path.expanduser(self.cwd))
        if not os.path.isdir(self.cwd):
            raise NotFound(self.cwd, "Directory does not exist")
        get_theme(self.theme_name)

    @property
    def theme(self):
        return get_theme(self.theme_name)

    def set_theme(self, name: str) -> None:
        get_theme(name.strip())
        self.theme_name = name.strip()
        logger.info(f"Theme changed to {self.theme_name}")

    # ------------------------------------------------------------
    # Navigation & listing
    # ------------------------------------------------------------
    def resolve(self, path: str) -> str:
        path = os.path.expanduser(path.strip())
        if not os.path.isabs(path):
            path = os.path.join(self.cwd, path)
        return os.path.normpath(path)

    def change_directory(self, path: str) -> str:
        target = self.resolve(path)
        if not os.path.isdir(target):
            raise NotFound(target, "Directory does not exist")
        if not os.access(target, os.X_OK):
            raise PermissionDenied(target)
        self.cwd = target
        logger.info(f"Changed directory to {target}")
        return target

    def go_parent(self) -> str:
        return self.change_directory("..")

    def list_entries(self, path: Optional[str] = None) -> List[DirectoryEntry]:
        return sort_for_listing(scan_directory(self.resolve(path) if path else self.cwd))

    # ------------------------------------------------------------
    # File manipulation
    # ------------------------------------------------------------
    def create_file(self, name: str) -> str:
        target = self.resolve(name)
        try:
            with open(target, "x"):
                pass
        except OSError as e:
            raise from_os_error(e, target) from e
        self.recent.add(target)
        logger.info(f"Created file {target}")
        return target

    def create_directory(self, name: str) -> str:
        target = self.resolve(name)
        try:
            os.mkdir(target, 0o755)
        except OSError as e:
            raise from_os_error(e, target) from e
        logger.info(f"Created directory {target}")
        return target

    def delete(self, name: str, recursive: bool = False) -> TraversalResult:
        return tree_walker.delete_tree(self.resolve(name), recursive=recursive)

    def _target_for(self, source: str, destination: str) -> str:
        target = self.resolve(destination)
        if os.path.isdir(target) and not os.path.islink(target):
            target = os.path.join(target, os.path.basename(source))
        return target

    def copy(self, source: str, destination: str) -> TraversalResult:
        src = self.resolve(source)
        target = self._target_for(src, destination)
        result = tree_walker.copy_tree(src, target)
        if result:
            self.recent.add(target)
        return result

    def move(self, source: str, destination: str) -> TraversalResult:
        src = self.resolve(source)
        target = self._target_for(src, destination)
        result = tree_walker.move_tree(src, target)
        if result:
            self.recent.add(target)
        return result

    def rename(self, old_name: str, new_name: str) -> str:
        new_name = new_name.strip()
        if not new_name or new_name in (".", "..") or os.sep in new_name:
            raise ValueError(
                f"Invalid name '{new_name}': rename stays in the same directory, use move to relocate"
            )
        src = self.resolve(old_name)
        target = os.path.join(os.path.dirname(src), new_name)
        if not os.path.lexists(src):
            raise NotFound(src)
        if os.path.lexists(target):
            raise AlreadyExists(target)
        try:
            os.rename(src, target)
        except OSError as e:
            raise from_os_error(e, src) from e
        logger.info(f"Renamed {src} -> {target}")
        return target

    # ------------------------------------------------------------
    # Search
    # ------------------------------------------------------------
    def search(self, term: str, root: Optional[str] = None) -> TraversalResult:
        base = self.resolve(root) if root else self.cwd
        return tree_walker.collect_matches(base, term, include_dirs=True)

    # ------------------------------------------------------------
    # Permissions
    # ------------------------------------------------------------
    def view_permissions(self, name: str) -> PermissionInfo:
        entry = read_entry(self.resolve(name))
        return PermissionInfo(entry, owner_name(entry.uid), group_name(entry.gid))

    def change_permissions(self, name: str, octal_text: str) -> int:
        mode = parse_octal_mode(octal_text)
        change_mode(self.resolve(name), mode)
        return mode

    def change_owner(self, name: str, owner: str, group: str = "") -> None:
        change_owner(self.resolve(name), owner.strip(), group.strip())

    # ------------------------------------------------------------
    # Batch operations
    # ------------------------------------------------------------
    def batch(
        self,
        operation: str,
        items: List[str],
        destination: Optional[str] = None,
        recursive: bool = False,
    ) -> List[BatchOutcome]:
        if operation not in BATCH_OPERATIONS:
            raise ValueError(f"Unknown batch operation '{operation}'")
        if operation != "delete":
            if not destination:
                raise ValueError("Destination directory is required")
            if not os.path.isdir(self.resolve(destination)):
                raise NotFound(self.resolve(destination), "Directory does not exist")

        outcomes = []
        for item in items:
            outcome = BatchOutcome(item)
            try:
                if operation == "delete":
                    outcome.result = self.delete(item, recursive=recursive)
                elif operation == "copy":
                    outcome.result = self.copy(item, destination)
                else:
                    outcome.result = self.move(item, destination)
            except FileExplorerError as e:
                outcome.error = e
            if not outcome.ok:
                logger.warning(f"Batch {operation} failed for {item}")
            outcomes.append(outcome)
        return outcomes
