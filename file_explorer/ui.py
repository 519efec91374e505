import os
import shutil
from datetime import datetime as dt
from typing import Iterable, List, Optional, Sequence, Tuple

import pyfiglet
from prompt_toolkit import prompt as pt_prompt
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.completion import PathCompleter
from prompt_toolkit.history import FileHistory, InMemoryHistory
from prompt_toolkit.styles import Style as PtStyle
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.style import Style
from rich.table import Table
from rich.text import Text
from rich.theme import Theme as RichTheme

from file_explorer import APP_NAME, APP_SUBTITLE, VERSION
from file_explorer.entries import DirectoryEntry
from file_explorer.permissions import group_name, octal_string, owner_name, permission_string
from file_explorer.themes import THEMES, NordColors, Theme, decorate_name

TERM_WIDTH = shutil.get_terminal_size().columns

console = Console(
    theme=RichTheme(
        {
            "info": f"bold {NordColors.FROST_2}",
            "warning": f"bold {NordColors.YELLOW}",
            "error": f"bold {NordColors.RED}",
            "success": f"bold {NordColors.GREEN}",
            "prompt": f"bold {NordColors.PURPLE}",
        }
    )
)

_path_history = None


def set_path_history(path: Optional[str]) -> None:
    global _path_history
    if path:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        _path_history = FileHistory(path)
    else:
        _path_history = InMemoryHistory()


# ----------------------------------------------------------------
# Formatting
# ----------------------------------------------------------------
def format_size(num_bytes):
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if num_bytes < 1024:
            return f"{num_bytes:.1f} {unit}"
        num_bytes /= 1024
    return f"{num_bytes:.1f} PB"


def format_mtime(timestamp):
    return dt.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


# ----------------------------------------------------------------
# Messages
# ----------------------------------------------------------------
def create_header():
    fonts = ["slant", "small_slant", "standard", "big", "small"]
    ascii_art = ""

    for font in fonts:
        try:
            fig = pyfiglet.Figlet(font=font, width=min(TERM_WIDTH - 8, 80))
            ascii_art = fig.renderText(APP_NAME)
            if ascii_art.strip():
                break
        except Exception:
            continue

    if not ascii_art.strip():
        ascii_art = APP_NAME

    lines = [line for line in ascii_art.splitlines() if line.strip()]
    frost_colors = NordColors.get_frost_gradient(min(len(lines), 4))

    styled_text = ""
    for i, line in enumerate(lines):
        color = frost_colors[i % len(frost_colors)]
        escaped_line = line.replace("[", "\\[").replace("]", "\\]")
        styled_text += f"[bold {color}]{escaped_line}[/]\n"

    border_line = f"[{NordColors.FROST_3}]{'═' * (min(TERM_WIDTH - 10, 80))}[/]"
    styled_text = border_line + "\n" + styled_text + border_line

    return Panel(
        Text.from_markup(styled_text),
        border_style=Style(color=NordColors.FROST_1),
        padding=(1, 2),
        title=f"[bold {NordColors.SNOW_STORM_3}]v{VERSION}[/]",
        title_align="right",
        subtitle=f"[bold {NordColors.SNOW_STORM_1}]{APP_SUBTITLE}[/]",
        subtitle_align="center",
    )


def clear_screen():
    console.clear()


def pause():
    console.input(f"\n[bold {NordColors.PURPLE}]Press Enter to continue...[/]")


def print_message(message, style=NordColors.FROST_2, prefix="•"):
    console.print(f"[{style}]{prefix} {escape(str(message))}[/{style}]", highlight=False)


def print_success(message):
    print_message(message, NordColors.GREEN, "✓")


def print_warning(message):
    print_message(message, NordColors.YELLOW, "⚠")


def print_error(message):
    print_message(message, NordColors.RED, "✗")


def print_step(message):
    print_message(message, NordColors.FROST_2, "→")


def print_section(title, theme: Optional[Theme] = None):
    style = theme.section if theme else f"bold {NordColors.FROST_2}"
    border = "═" * min(80, TERM_WIDTH - 4)
    console.print(f"\n[bold {NordColors.FROST_3}]{border}[/]")
    console.print(f"[{style}]  {title}[/]")
    console.print(f"[bold {NordColors.FROST_3}]{border}[/]\n")


# ----------------------------------------------------------------
# Input
# ----------------------------------------------------------------
def get_prompt_style():
    return PtStyle.from_dict({"prompt": f"bold {NordColors.PURPLE}"})


def get_user_input(prompt_text, default=""):
    return Prompt.ask(f"[bold {NordColors.FROST_2}]{prompt_text}[/]", default=default)


def get_path_input(prompt_text, cwd: str, default: str = "") -> str:
    """Prompt for a path with tab completion relative to ``cwd``."""
    if _path_history is None:
        set_path_history(None)
    completer = PathCompleter(expanduser=True, get_paths=lambda: [cwd])
    return pt_prompt(
        f"{prompt_text}: ",
        completer=completer,
        default=default,
        history=_path_history,
        auto_suggest=AutoSuggestFromHistory(),
        style=get_prompt_style(),
    ).strip()


def get_user_confirmation(prompt_text):
    return Confirm.ask(f"[bold {NordColors.FROST_2}]{prompt_text}[/]")


# ----------------------------------------------------------------
# Tables & panels
# ----------------------------------------------------------------
def create_menu_table(title, options: Iterable[Tuple[str, str]], theme: Optional[Theme] = None):
    table = Table(
        title=title,
        title_style=theme.title if theme else f"bold {NordColors.FROST_1}",
        box=None,
        expand=True,
        border_style=NordColors.FROST_3,
        show_header=False,
    )

    table.add_column(
        "Option",
        style=theme.option if theme else f"bold {NordColors.FROST_3}",
        width=4,
        justify="right",
    )
    table.add_column("Description", style=theme.text if theme else NordColors.SNOW_STORM_1)

    for num, desc in options:
        table.add_row(num, desc)

    return table


def create_listing_table(
    cwd: str, entries: Sequence[DirectoryEntry], theme: Theme, detailed: bool = False
):
    table = Table(
        title=f"Current Directory: {escape(cwd)}",
        title_style=theme.header,
        border_style=NordColors.FROST_3,
        show_header=detailed,
        box=box.SIMPLE_HEAD if detailed else None,
        expand=detailed,
    )
    if detailed:
        table.add_column("Permissions", style=NordColors.FROST_3)
        table.add_column("Owner", style=NordColors.FROST_2)
        table.add_column("Group", style=NordColors.FROST_2)
        table.add_column("Size", style=NordColors.SNOW_STORM_1, justify="right")
        table.add_column("Modified", style=NordColors.FROST_1)
    table.add_column("Name")

    for entry in entries:
        name = Text(decorate_name(entry), style=theme.style_for(entry))
        if detailed:
            table.add_row(
                permission_string(entry.mode),
                owner_name(entry.uid),
                group_name(entry.gid),
                format_size(entry.size),
                format_mtime(entry.mtime),
                name,
            )
        else:
            table.add_row(name)
    table.caption = f"Total items: {len(entries)}"
    return table


def create_permissions_panel(entry: DirectoryEntry, owner: str, group: str):
    body = (
        f"[bold {NordColors.FROST_2}]Permissions:[/] {permission_string(entry.mode)}\n"
        f"[bold {NordColors.FROST_2}]Octal:[/] {octal_string(entry.mode)}\n"
        f"[bold {NordColors.FROST_2}]Owner:[/] {owner}\n"
        f"[bold {NordColors.FROST_2}]Group:[/] {group}\n"
        f"[bold {NordColors.FROST_2}]Size:[/] {format_size(entry.size)}\n"
        f"[bold {NordColors.FROST_2}]Last Modified:[/] {format_mtime(entry.mtime)}"
    )
    return Panel(
        Text.from_markup(body),
        title=f"[bold {NordColors.FROST_1}]File Permissions for: {escape(entry.name)}[/]",
        border_style=NordColors.FROST_3,
        padding=(1, 2),
    )


def create_path_table(title: str, paths: List[str]):
    table = Table(
        title=title,
        title_style=f"bold {NordColors.FROST_1}",
        border_style=NordColors.FROST_3,
    )
    table.add_column("#", style=NordColors.FROST_3, justify="right")
    table.add_column("Path", style=NordColors.SNOW_STORM_1)
    for i, path in enumerate(paths, 1):
        table.add_row(str(i), escape(path))
    return table


def create_theme_table():
    return create_menu_table(
        "Available Themes",
        [(str(i), f"{t.name} ({t.description})") for i, t in enumerate(THEMES.values(), 1)],
    )


HELP_SECTIONS = [
    (
        "Navigation & Listing",
        [
            "List files (simple/detailed) - view all files in the current directory",
            "Change directory - absolute or relative path, '..' for parent",
            "Go to parent - move up one directory level",
        ],
    ),
    (
        "File Operations",
        [
            "Create - make new files or directories",
            "Delete - remove files or directories (asks before recursive deletion)",
            "Copy - duplicate files/directories recursively; never overwrites",
            "Move - relocate files/directories, across filesystems if needed",
            "Rename - change the name of a file/directory in place",
        ],
    ),
    (
        "Search",
        [
            "Searches all subdirectories recursively",
            "Case-insensitive filename matching",
        ],
    ),
    (
        "Permissions",
        [
            "View - display detailed permission information",
            "chmod - change permissions (e.g., 755, 644)",
            "chown - change owner and group (may require root)",
        ],
    ),
    (
        "Extras",
        [
            "Recent Files - history of recently created, copied or moved files",
            "Batch Operations - copy, move or delete several items at once",
            "Zip/Unzip - compress and extract .zip archives ('zip'/'unzip' required)",
            "Color Themes - default, dark or light",
        ],
    ),
    (
        "Tips",
        [
            "Directories end with /, executables with *, symlinks with @",
            "Press Tab to complete paths",
        ],
    ),
]


def create_help_panel(theme: Theme):
    lines = []
    for title, items in HELP_SECTIONS:
        lines.append(f"[{theme.section}]{title}[/]")
        lines.extend(f"  • {item}" for item in items)
        lines.append("")
    return Panel(
        Text.from_markup("\n".join(lines).rstrip()),
        title=f"[{theme.title}]File Explorer - Help[/]",
        border_style=NordColors.FROST_3,
        padding=(1, 2),
    )
