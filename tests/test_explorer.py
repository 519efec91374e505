import os
import pwd
import stat

import pytest

from conftest import write
from file_explorer.errors import AlreadyExists, DirectoryNotEmpty, NotFound
from file_explorer.explorer import ExplorerSession, RecentFiles
from file_explorer.permissions import owner_name


@pytest.fixture
def session(sample_tree):
    return ExplorerSession(cwd=str(sample_tree))


def test_session_requires_existing_directory(tmp_path):
    with pytest.raises(NotFound):
        ExplorerSession(cwd=str(tmp_path / "missing"))


def test_session_rejects_unknown_theme(tmp_path):
    with pytest.raises(ValueError):
        ExplorerSession(cwd=str(tmp_path), theme_name="neon")


def test_resolve_relative_absolute_and_parent(session, sample_tree):
    assert session.resolve("a.txt") == str(sample_tree / "a.txt")
    assert session.resolve("/etc") == "/etc"
    assert session.resolve("sub/../a.txt") == str(sample_tree / "a.txt")
    assert session.resolve("~") == os.path.expanduser("~")


def test_change_directory_and_parent(session, sample_tree):
    assert session.change_directory("sub") == str(sample_tree / "sub")
    assert session.cwd == str(sample_tree / "sub")
    assert session.go_parent() == str(sample_tree)

    with pytest.raises(NotFound):
        session.change_directory("a.txt")
    assert session.cwd == str(sample_tree)


def test_parent_of_root_is_root():
    session = ExplorerSession(cwd="/")
    assert session.go_parent() == "/"


def test_session_does_not_change_process_cwd(session, monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    session.change_directory("sub")
    assert os.getcwd() == str(tmp_path)


def test_list_entries_directories_first(session):
    names = [e.name for e in session.list_entries()]
    assert names == ["sub", "a.txt"]


def test_create_file_and_directory(session, sample_tree):
    created = session.create_file("new.txt")
    assert created == str(sample_tree / "new.txt")
    assert os.path.isfile(created)
    assert list(session.recent) == [created]

    with pytest.raises(AlreadyExists):
        session.create_file("new.txt")

    folder = session.create_directory("folder")
    assert os.path.isdir(folder)
    assert stat.S_IMODE(os.stat(folder).st_mode) & 0o700 == 0o700
    with pytest.raises(AlreadyExists):
        session.create_directory("folder")


def test_rename(session, sample_tree):
    assert session.rename("a.txt", "renamed.txt") == str(sample_tree / "renamed.txt")
    assert not os.path.exists(sample_tree / "a.txt")

    with pytest.raises(NotFound):
        session.rename("a.txt", "other.txt")
    with pytest.raises(AlreadyExists):
        session.rename("renamed.txt", "sub")


@pytest.mark.parametrize("new_name", ["../escaped.txt", "sub/a.txt", "/tmp/a.txt", "..", ".", "  "])
def test_rename_stays_in_same_directory(session, sample_tree, new_name):
    with pytest.raises(ValueError):
        session.rename("a.txt", new_name)
    assert (sample_tree / "a.txt").read_text() == "hello"


def test_copy_into_existing_directory(session, sample_tree):
    result = session.copy("a.txt", "sub")
    assert result
    assert (sample_tree / "sub" / "a.txt").read_text() == "hello"
    assert list(session.recent) == [str(sample_tree / "sub" / "a.txt")]

    again = session.copy("a.txt", "sub")
    assert isinstance(again.error, AlreadyExists)


def test_copy_to_new_name(session, sample_tree):
    assert session.copy("sub", "sub_copy")
    assert (sample_tree / "sub_copy" / "b.txt").read_text() == "world"


def test_move_into_directory_and_collision(session, sample_tree):
    result = session.move("a.txt", "sub")
    assert result
    assert (sample_tree / "sub" / "a.txt").exists()
    assert not (sample_tree / "a.txt").exists()

    write(str(sample_tree / "a.txt"), "second")
    collision = session.move("a.txt", "sub")
    assert isinstance(collision.error, AlreadyExists)
    assert (sample_tree / "a.txt").read_text() == "second"


def test_delete_two_step(session, sample_tree):
    result = session.delete("sub")
    assert isinstance(result.error, DirectoryNotEmpty)
    assert session.delete("sub", recursive=True)
    assert not (sample_tree / "sub").exists()


def test_search_includes_directories(session, sample_tree):
    result = session.search("b")
    assert result.matches == [str(sample_tree / "sub"), str(sample_tree / "sub" / "b.txt")]
    assert session.search("b", "sub").matches == [str(sample_tree / "sub" / "b.txt")]
    assert session.search("zzz").matches == []


def test_view_and_change_permissions(session, sample_tree):
    assert session.change_permissions("a.txt", "600") == 0o600
    info = session.view_permissions("a.txt")
    assert info.entry.permission_bits == 0o600
    assert info.owner == owner_name(os.getuid())

    with pytest.raises(ValueError):
        session.change_permissions("a.txt", "999")
    with pytest.raises(NotFound):
        session.change_permissions("missing.txt", "644")


def test_change_owner_to_self(session, sample_tree):
    try:
        me = pwd.getpwuid(os.getuid()).pw_name
    except KeyError:
        pytest.skip("current uid has no passwd entry")
    session.change_owner("a.txt", me)
    assert os.stat(sample_tree / "a.txt").st_uid == os.getuid()

    with pytest.raises(NotFound):
        session.change_owner("a.txt", "no-such-user-file-explorer")


def test_set_theme(session):
    session.set_theme("dark")
    assert session.theme.name == "dark"
    with pytest.raises(ValueError):
        session.set_theme("sepia")
    assert session.theme_name == "dark"


# ----------------------------------------------------------------
# Batch operations
# ----------------------------------------------------------------
def test_batch_copy(session, sample_tree):
    os.mkdir(sample_tree / "out")
    outcomes = session.batch("copy", ["a.txt", "sub", "missing"], "out")

    assert [o.ok for o in outcomes] == [True, True, False]
    assert isinstance(outcomes[2].result.error, NotFound)
    assert (sample_tree / "out" / "a.txt").exists()
    assert (sample_tree / "out" / "sub" / "b.txt").exists()


def test_batch_move(session, sample_tree):
    os.mkdir(sample_tree / "out")
    outcomes = session.batch("move", ["a.txt", "sub"], "out")
    assert all(o.ok for o in outcomes)
    assert sorted(os.listdir(sample_tree)) == ["out"]


def test_batch_delete(session, sample_tree):
    outcomes = session.batch("delete", ["a.txt", "sub"])
    assert [o.ok for o in outcomes] == [True, False]
    assert isinstance(outcomes[1].result.error, DirectoryNotEmpty)

    outcomes = session.batch("delete", ["sub"], recursive=True)
    assert outcomes[0].ok
    assert os.listdir(sample_tree) == []


def test_batch_validation(session):
    with pytest.raises(ValueError):
        session.batch("shred", ["a.txt"])
    with pytest.raises(ValueError):
        session.batch("copy", ["a.txt"])
    with pytest.raises(NotFound):
        session.batch("copy", ["a.txt"], "no-such-dir")


# ----------------------------------------------------------------
# Recent files
# ----------------------------------------------------------------
def test_recent_files_order_dedup_and_cap():
    recent = RecentFiles(limit=3)
    for path in ["/a", "/b", "/c", "/a", "/d"]:
        recent.add(path)
    assert list(recent) == ["/d", "/a", "/c"]
    assert len(recent) == 3


def test_recent_files_seeded_from_saved_list():
    recent = RecentFiles(["/new", "/old", "/new"], limit=10)
    assert list(recent) == ["/new", "/old"]
