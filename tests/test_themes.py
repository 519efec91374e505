import os

import pytest

from file_explorer.entries import read_entry
from file_explorer.themes import THEMES, decorate_name, get_theme


def test_three_themes():
    assert sorted(THEMES) == ["dark", "default", "light"]


def test_get_theme_unknown():
    with pytest.raises(ValueError, match="default, dark, light"):
        get_theme("neon")


def test_decorations_and_styles(tmp_path):
    os.mkdir(tmp_path / "dir")
    (tmp_path / "plain.txt").write_text("")
    (tmp_path / "run.sh").write_text("")
    os.chmod(tmp_path / "run.sh", 0o755)
    os.symlink("plain.txt", tmp_path / "link")
    theme = get_theme("dark")

    directory = read_entry(str(tmp_path / "dir"))
    plain = read_entry(str(tmp_path / "plain.txt"))
    script = read_entry(str(tmp_path / "run.sh"))
    link = read_entry(str(tmp_path / "link"))

    assert decorate_name(directory) == "dir/"
    assert decorate_name(plain) == "plain.txt"
    assert decorate_name(script) == "run.sh*"
    assert decorate_name(link) == "link@"

    assert theme.style_for(directory) == theme.directory
    assert theme.style_for(script) == theme.executable
    assert theme.style_for(plain) == theme.regular
    assert theme.style_for(link) == theme.symlink
