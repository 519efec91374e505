#!/usr/bin/env python3
"""
File Explorer
--------------------------------------------------

Interactive, menu-driven file manager for POSIX systems with a Nord-themed
interface.

Features:
  • List (simple/detailed), navigate, create, delete, copy, move and rename
  • Recursive, case-insensitive filename search
  • View permissions, chmod and chown
  • Recent files, batch operations, zip/unzip and colour themes

Usage:
  file-explorer [--path DIR] [--theme NAME] [--config FILE] [--verbose]
"""

import argparse
import atexit
import logging
import os
import platform
import signal
import sys
import time
from datetime import datetime as dt
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from rich.align import Align
from rich.markup import escape
from rich.panel import Panel
from rich.style import Style
from rich.text import Text
from rich.traceback import install as install_rich_traceback

from file_explorer import VERSION
from file_explorer.archive import unzip_archive, zip_path
from file_explorer.config import PATH_HISTORY, AppConfig, config_path
from file_explorer.errors import DirectoryNotEmpty, FileExplorerError
from file_explorer.explorer import BATCH_OPERATIONS, ExplorerSession, RecentFiles
from file_explorer.log import setup_logging
from file_explorer.themes import THEMES, NordColors
from file_explorer.tree_walker import TraversalResult
from file_explorer.ui import (
    clear_screen,
    console,
    create_header,
    create_help_panel,
    create_listing_table,
    create_menu_table,
    create_path_table,
    create_permissions_panel,
    create_theme_table,
    get_path_input,
    get_user_confirmation,
    get_user_input,
    pause,
    print_error,
    print_section,
    print_step,
    print_success,
    print_warning,
    set_path_history,
)

logger = logging.getLogger("file_explorer.cli")

MAX_SEARCH_RESULTS = 200

MENU_SECTIONS = [
    (
        "Navigation & Listing",
        [
            ("1", "List files (simple)"),
            ("2", "List files (detailed)"),
            ("3", "Change directory"),
            ("4", "Go to parent directory"),
        ],
    ),
    (
        "File Operations",
        [
            ("5", "Create file"),
            ("6", "Create directory"),
            ("7", "Delete file/directory"),
            ("8", "Copy file/directory"),
            ("9", "Move file/directory"),
            ("10", "Rename file/directory"),
        ],
    ),
    ("Search", [("11", "Search files")]),
    (
        "Permissions Management",
        [
            ("12", "View file permissions"),
            ("13", "Change permissions (chmod)"),
            ("14", "Change owner/group (chown)"),
        ],
    ),
    (
        "Other",
        [
            ("15", "Display current path"),
            ("16", "Recent files history"),
            ("17", "Batch operations (multiple files)"),
            ("18", "Zip files/folders"),
            ("19", "Unzip files"),
            ("20", "Change color theme"),
            ("21", "Help/Documentation"),
        ],
    ),
]


def report_failure(action: str, result: TraversalResult) -> None:
    error = result.error
    print_error(f"{action} failed: {error.message if error else 'unknown error'}")
    if result.failed_path:
        console.print(f"[dim]Stopped at: {escape(result.failed_path)}[/]", highlight=False)


# ----------------------------------------------------------------
# Menu handlers
# ----------------------------------------------------------------
def list_menu(session: ExplorerSession, detailed: bool = False) -> None:
    entries = session.list_entries()
    console.print(create_listing_table(session.cwd, entries, session.theme, detailed))


def change_directory_menu(session: ExplorerSession) -> None:
    path = get_path_input("Enter directory path", session.cwd)
    if not path:
        print_error("Path cannot be empty.")
        return
    print_success(f"Changed directory to: {session.change_directory(path)}")


def parent_directory_menu(session: ExplorerSession) -> None:
    print_success(f"Changed directory to: {session.go_parent()}")


def create_file_menu(session: ExplorerSession) -> None:
    name = get_path_input("Enter filename to create", session.cwd)
    if not name:
        print_error("Filename cannot be empty.")
        return
    print_success(f"File created successfully: {session.create_file(name)}")


def create_directory_menu(session: ExplorerSession) -> None:
    name = get_path_input("Enter directory name to create", session.cwd)
    if not name:
        print_error("Directory name cannot be empty.")
        return
    print_success(f"Directory created successfully: {session.create_directory(name)}")


def delete_menu(session: ExplorerSession) -> None:
    name = get_path_input("Enter file/directory name to delete", session.cwd)
    if not name:
        print_error("Path cannot be empty.")
        return
    if not get_user_confirmation(f"Are you sure you want to delete {name}?"):
        print_step("Deletion cancelled")
        return

    result = session.delete(name)
    if not result and isinstance(result.error, DirectoryNotEmpty):
        if not get_user_confirmation("Directory is not empty. Delete recursively?"):
            print_step("Deletion cancelled")
            return
        result = session.delete(name, recursive=True)

    if result:
        print_success(f"Deleted {session.resolve(name)}")
    else:
        report_failure("Delete", result)


def copy_menu(session: ExplorerSession) -> None:
    src = get_path_input("Enter source file/directory path", session.cwd)
    dest = get_path_input("Enter destination path", session.cwd)
    if not src or not dest:
        print_error("Source and destination cannot be empty.")
        return
    print_step(f"Copying {src} to {dest}...")
    start_time = time.time()
    result = session.copy(src, dest)
    if result:
        print_success(f"Copied {src} to {dest} in {time.time() - start_time:.1f}s")
    else:
        report_failure("Copy", result)


def move_menu(session: ExplorerSession) -> None:
    src = get_path_input("Enter source file/directory path", session.cwd)
    dest = get_path_input(
        "Enter destination path (e.g., /home/user/Documents/file.txt)", session.cwd
    )
    if not src or not dest:
        print_error("Source and destination cannot be empty.")
        return
    print_step(f"Moving {src} to {dest}...")
    result = session.move(src, dest)
    if result.cross_device:
        print_warning("Cross-filesystem move: copied then deleted the original")
    if result:
        print_success(f"Moved {src} to {dest}")
    else:
        report_failure("Move", result)


def rename_menu(session: ExplorerSession) -> None:
    old = get_path_input("Enter current name", session.cwd)
    new = get_user_input("Enter new name")
    if not old or not new:
        print_error("Names cannot be empty.")
        return
    print_success(f"Renamed '{old}' to '{session.rename(old, new)}'")


def search_menu(session: ExplorerSession) -> None:
    term = get_user_input("Enter search term")
    if not term:
        print_error("Search term cannot be empty.")
        return
    root = get_path_input("Search in (Enter for current directory)", session.cwd)
    result = session.search(term, root or None)
    matches = [p + "/" if os.path.isdir(p) and not os.path.islink(p) else p for p in result.matches]
    if not matches:
        print_warning(f"No files found matching: {term}")
        return
    console.print(
        create_path_table(f"Search results for '{term}'", matches[:MAX_SEARCH_RESULTS])
    )
    print_success(f"Total matches: {len(matches)}")
    if len(matches) > MAX_SEARCH_RESULTS:
        print_warning(f"Showing first {MAX_SEARCH_RESULTS} of {len(matches)} matches")


def view_permissions_menu(session: ExplorerSession) -> None:
    name = get_path_input("Enter filename", session.cwd)
    if not name:
        print_error("Filename cannot be empty.")
        return
    info = session.view_permissions(name)
    console.print(create_permissions_panel(info.entry, info.owner, info.group))


def chmod_menu(session: ExplorerSession) -> None:
    name = get_path_input("Enter filename", session.cwd)
    if not name:
        print_error("Filename cannot be empty.")
        return
    perms = get_user_input("Enter permissions (octal, e.g., 755)")
    mode = session.change_permissions(name, perms)
    print_success(f"Permissions changed to {mode:o} for {name}")


def chown_menu(session: ExplorerSession) -> None:
    name = get_path_input("Enter filename", session.cwd)
    if not name:
        print_error("Filename cannot be empty.")
        return
    owner = get_user_input("Enter owner username")
    group = get_user_input("Enter group name (or press Enter to skip)")
    session.change_owner(name, owner, group)
    print_success(f"Owner/Group changed successfully for {name}")


def show_path_menu(session: ExplorerSession) -> None:
    print_step(f"Current path: {session.cwd}")


def recent_files_menu(session: ExplorerSession) -> None:
    if not len(session.recent):
        print_warning("No recent files accessed yet.")
        return
    console.print(create_path_table("Recent Files History", list(session.recent)))


def batch_menu(session: ExplorerSession) -> None:
    options = [(str(i), f"{op.capitalize()} multiple files") for i, op in enumerate(BATCH_OPERATIONS, 1)]
    console.print(create_menu_table("Batch operation type", options, session.theme))
    choice = get_user_input("Enter choice", "1")
    try:
        operation = BATCH_OPERATIONS[int(choice) - 1]
    except (ValueError, IndexError):
        print_error("Invalid choice!")
        return

    print_section("Enter items (empty line to finish)", session.theme)
    items: List[str] = []
    while True:
        item = get_path_input(f"Item {len(items) + 1}", session.cwd)
        if not item:
            break
        items.append(item)
    if not items:
        print_error("No items provided.")
        return

    destination = None
    recursive = False
    if operation == "delete":
        if not get_user_confirmation(f"Are you sure you want to delete {len(items)} items?"):
            print_step("Operation cancelled")
            return
        recursive = get_user_confirmation("Delete non-empty directories recursively?")
    else:
        destination = get_path_input("Enter destination directory", session.cwd)

    outcomes = session.batch(operation, items, destination, recursive=recursive)
    for outcome in outcomes:
        if outcome.ok:
            print_success(f"{operation.capitalize()}: {outcome.item}")
        elif outcome.error:
            print_error(f"{outcome.item}: {outcome.error}")
        else:
            report_failure(f"{operation.capitalize()} {outcome.item}", outcome.result)
    done = sum(1 for o in outcomes if o.ok)
    print_success(f"Batch {operation} completed: {done}/{len(outcomes)} succeeded")


def zip_menu(session: ExplorerSession) -> None:
    src = get_path_input("Enter source file/folder to zip", session.cwd)
    name = get_path_input("Enter zip filename (e.g., archive.zip)", session.cwd)
    if not src or not name:
        print_error("Source and archive name cannot be empty.")
        return
    result = zip_path(session.resolve(src), session.resolve(name))
    if result:
        print_success(f"Successfully created: {name}")
    else:
        print_error("Failed to create zip file.")


def unzip_menu(session: ExplorerSession) -> None:
    archive = get_path_input("Enter zip file to extract", session.cwd)
    dest = get_path_input("Enter destination folder (or '.' for current)", session.cwd, ".")
    result = unzip_archive(session.resolve(archive), session.resolve(dest or "."))
    if result:
        print_success(f"Successfully extracted to: {dest}")
    else:
        print_error("Failed to extract zip file.")


def theme_menu(session: ExplorerSession) -> None:
    console.print(create_theme_table())
    choice = get_user_input("Enter theme name or number", session.theme_name)
    names = list(THEMES)
    if choice.isdigit() and 1 <= int(choice) <= len(names):
        choice = names[int(choice) - 1]
    session.set_theme(choice)
    print_success(f"Theme changed to: {session.theme_name}")


def help_menu(session: ExplorerSession) -> None:
    console.print(create_help_panel(session.theme))


MENU_ACTIONS: Dict[str, Callable[[ExplorerSession], None]] = {
    "1": list_menu,
    "2": lambda session: list_menu(session, detailed=True),
    "3": change_directory_menu,
    "4": parent_directory_menu,
    "5": create_file_menu,
    "6": create_directory_menu,
    "7": delete_menu,
    "8": copy_menu,
    "9": move_menu,
    "10": rename_menu,
    "11": search_menu,
    "12": view_permissions_menu,
    "13": chmod_menu,
    "14": chown_menu,
    "15": show_path_menu,
    "16": recent_files_menu,
    "17": batch_menu,
    "18": zip_menu,
    "19": unzip_menu,
    "20": theme_menu,
    "21": help_menu,
}


def run_action(choice: str, session: ExplorerSession) -> bool:
    """Run one menu action, reporting errors instead of propagating them."""
    action = MENU_ACTIONS.get(choice)
    if action is None:
        print_error(f"Invalid choice! Please select a valid option (0-{len(MENU_ACTIONS)}).")
        return False
    try:
        action(session)
    except (FileExplorerError, ValueError) as e:
        logger.info(f"Menu action {choice} failed: {e}")
        print_error(str(e))
        return False
    return True


# ----------------------------------------------------------------
# Main menu
# ----------------------------------------------------------------
def render_main_menu(session: ExplorerSession) -> None:
    theme = session.theme
    info_panel = Panel(
        Text.from_markup(
            f"[{theme.header}]Current Directory:[/] [{theme.path}]{escape(session.cwd)}[/] | "
            f"[bold {NordColors.FROST_2}]Time:[/] {dt.now().strftime('%Y-%m-%d %H:%M:%S')} | "
            f"[bold {NordColors.FROST_2}]Theme:[/] {theme.name}"
        ),
        border_style=Style(color=NordColors.FROST_4),
        padding=(0, 2),
    )
    console.print(Align.center(info_panel))
    for title, options in MENU_SECTIONS:
        console.print(create_menu_table(title, options, theme))
    console.print(create_menu_table("", [("0", "Exit")], theme))


def main_menu(session: ExplorerSession) -> None:
    clear_screen()
    console.print(create_header())
    while True:
        render_main_menu(session)
        choice = get_user_input(f"Enter your choice (0-{len(MENU_ACTIONS)})", "0")
        if choice == "0":
            farewell = Panel(
                Text.from_markup(
                    f"[bold {NordColors.FROST_2}]Thank you for using File Explorer.[/]\n"
                    f"[{NordColors.SNOW_STORM_1}]Version {VERSION}[/]"
                ),
                border_style=Style(color=NordColors.FROST_1),
                padding=(1, 2),
                title=f"[bold {NordColors.FROST_1}]Goodbye![/]",
            )
            console.print(farewell)
            return
        run_action(choice, session)
        pause()
        clear_screen()


# ----------------------------------------------------------------
# Startup & cleanup
# ----------------------------------------------------------------
def save_state(config: AppConfig, session: ExplorerSession, path: Optional[Path]) -> None:
    config.theme = session.theme_name
    config.recent_files = list(session.recent)
    try:
        config.save(path)
    except OSError as e:
        logger.warning(f"Could not save configuration: {e}")


def install_signal_handlers(cleanup: Callable[[], None]) -> None:
    def signal_handler(signum: int, frame: Any) -> None:
        sig_name = signal.Signals(signum).name
        print_warning(f"\nInterrupted by {sig_name}.")
        logger.warning(f"Interrupted by {sig_name}")
        sys.exit(128 + signum)

    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, signal_handler)
    atexit.register(cleanup)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="file-explorer", description="Interactive menu-driven file manager."
    )
    parser.add_argument("--path", help="directory to start in")
    parser.add_argument("--theme", choices=sorted(THEMES), help="colour theme")
    parser.add_argument("--config", help="configuration file (JSON)")
    parser.add_argument("--verbose", action="store_true", help="show debug logs")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser.parse_args(argv)


def build_session(args: argparse.Namespace, config: AppConfig) -> ExplorerSession:
    start = args.path or config.start_directory or os.getcwd()
    theme = args.theme or (config.theme if config.theme in THEMES else "default")
    recent = RecentFiles(config.recent_files, config.max_recent_files)
    return ExplorerSession(cwd=start, theme_name=theme, recent=recent)


def main(argv: Optional[List[str]] = None) -> None:
    if os.name != "posix":
        print(f"This program requires a POSIX system ({platform.system()} detected).")
        sys.exit(1)

    args = parse_args(argv)
    cfg_path = Path(args.config).expanduser() if args.config else config_path()
    config = AppConfig.load(cfg_path)
    setup_logging(config.log_file, config.log_level, args.verbose, console)
    install_rich_traceback(show_locals=args.verbose)
    set_path_history(str(PATH_HISTORY))

    try:
        session = build_session(args, config)
    except (OSError, ValueError) as e:
        print_error(f"Cannot start: {e}")
        sys.exit(1)
    logger.info(f"Session started in {session.cwd}")
    install_signal_handlers(lambda: save_state(config, session, cfg_path))

    try:
        main_menu(session)
    except (KeyboardInterrupt, EOFError):
        print_warning("\nInterrupted by user.")
        sys.exit(130)
    except Exception as e:
        logger.exception("Unhandled error")
        print_error(f"Unhandled error: {e}")
        console.print_exception()
        sys.exit(1)


if __name__ == "__main__":
    main()
