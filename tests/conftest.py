import os

import pytest


def write(path, content=""):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w") as f:
        f.write(content)


def snapshot(root):
    """Map each relative path under ``root`` to (kind, content-or-target)."""
    result = {}
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames + filenames:
            full = os.path.join(dirpath, name)
            rel = os.path.relpath(full, root)
            if os.path.islink(full):
                result[rel] = ("symlink", os.readlink(full))
            elif os.path.isdir(full):
                result[rel] = ("directory", None)
            else:
                with open(full, "rb") as f:
                    result[rel] = ("file", f.read())
    return result


@pytest.fixture
def sample_tree(tmp_path):
    root = tmp_path / "root"
    write(str(root / "a.txt"), "hello")
    write(str(root / "sub" / "b.txt"), "world")
    return root


@pytest.fixture
def nested_tree(tmp_path):
    root = tmp_path / "tree"
    write(str(root / "README.md"), "# readme")
    write(str(root / "src" / "main.py"), "print('hi')\n")
    write(str(root / "src" / "lib" / "Util.PY"), "x = 1\n")
    write(str(root / "docs" / "guide.txt"), "guide")
    os.makedirs(root / "empty")
    with open(root / "blob.bin", "wb") as f:
        f.write(bytes(range(256)) * 64)
    os.chmod(root / "src" / "main.py", 0o750)
    return root


needs_non_root = pytest.mark.skipif(
    hasattr(os, "geteuid") and os.geteuid() == 0,
    reason="permission checks are bypassed for root",
)
