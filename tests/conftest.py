"""Shared fixtures for medarch tests."""
import os
import pytest

from medarch.config import RunConfig


def write_file(path, size=10, fill=b"x"):
    """Create 'path' (and parents) with 'size' bytes of content."""
    path = str(path)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as f:
        f.write(fill * size)
    return path


def sparse_file(path, size):
    """Create a sparse file of 'size' bytes without writing them."""
    path = str(path)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as f:
        f.truncate(size)
    return path


def snapshot(root):
    """Map of relative path -> file bytes (None for directories) under 'root'."""
    result = {}
    for current, dirs, files in os.walk(root):
        for d in dirs:
            result[os.path.relpath(os.path.join(current, d), root)] = None
        for name in files:
            full = os.path.join(current, name)
            with open(full, "rb") as f:
                result[os.path.relpath(full, root)] = f.read()
    return result


@pytest.fixture
def src(tmp_path):
    path = tmp_path / "src"
    path.mkdir()
    return path


@pytest.fixture
def dest(tmp_path):
    path = tmp_path / "dest"
    path.mkdir()
    return path


@pytest.fixture
def make_config(src, dest):
    """Build a RunConfig rooted at the src/dest fixtures."""
    def _make(**kwargs):
        kwargs.setdefault("source", os.path.realpath(str(src)))
        kwargs.setdefault("destination", os.path.realpath(str(dest)))
        return RunConfig(**kwargs)
    return _make
