from dataclasses import dataclass
from typing import Dict

from file_explorer.entries import DirectoryEntry, EntryKind


class NordColors:
    SNOW_STORM_1 = "#D8DEE9"
    SNOW_STORM_3 = "#ECEFF4"
    FROST_1 = "#8FBCBB"
    FROST_2 = "#88C0D0"
    FROST_3 = "#81A1C1"
    FROST_4 = "#5E81AC"
    RED = "#BF616A"
    YELLOW = "#EBCB8B"
    GREEN = "#A3BE8C"
    PURPLE = "#B48EAD"

    @classmethod
    def get_frost_gradient(cls, steps=4):
        return [cls.FROST_1, cls.FROST_2, cls.FROST_3, cls.FROST_4][:steps]


@dataclass(frozen=True)
class Theme:
    name: str
    description: str
    directory: str
    executable: str
    regular: str
    symlink: str
    title: str
    header: str
    section: str
    option: str
    path: str
    text: str

    def style_for(self, entry: DirectoryEntry) -> str:
        if entry.kind == EntryKind.DIRECTORY:
            return self.directory
        if entry.kind == EntryKind.SYMLINK:
            return self.symlink
        if entry.is_executable:
            return self.executable
        return self.regular


THEMES: Dict[str, Theme] = {
    "default": Theme(
        name="default",
        description="Blue/Green/White",
        directory=f"bold {NordColors.FROST_4}",
        executable=NordColors.GREEN,
        regular=NordColors.SNOW_STORM_1,
        symlink=NordColors.FROST_1,
        title=f"bold {NordColors.FROST_2}",
        header=f"bold {NordColors.PURPLE}",
        section=f"bold {NordColors.YELLOW}",
        option=NordColors.FROST_3,
        path=NordColors.GREEN,
        text=NordColors.SNOW_STORM_1,
    ),
    "dark": Theme(
        name="dark",
        description="Cyan/Yellow/White",
        directory="bold bright_cyan",
        executable="bold bright_yellow",
        regular="bold bright_white",
        symlink="bright_magenta",
        title="bold bright_cyan",
        header="bold bright_magenta",
        section="bold bright_yellow",
        option="bold bright_cyan",
        path="bold bright_green",
        text="bold bright_white",
    ),
    "light": Theme(
        name="light",
        description="Blue/Green/Black",
        directory="blue",
        executable="green",
        regular="black",
        symlink="magenta",
        title="bold bright_blue",
        header="bold bright_magenta",
        section="yellow",
        option="cyan",
        path="green",
        text="magenta",
    ),
}


def get_theme(name: str) -> Theme:
    try:
        return THEMES[name]
    except KeyError:
        raise ValueError(
            f"Invalid theme '{name}'. Available: {', '.join(THEMES)}"
        ) from None


def decorate_name(entry: DirectoryEntry) -> str:
    """Append the ``ls -F`` style marker for the entry kind."""
    if entry.kind == EntryKind.DIRECTORY:
        return entry.name + "/"
    if entry.kind == EntryKind.SYMLINK:
        return entry.name + "@"
    if entry.is_executable:
        return entry.name + "*"
    return entry.name
