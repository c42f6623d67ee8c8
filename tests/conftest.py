"""Shared pytest fixtures for scaffold tests."""

import pytest

from scaffold.config import Settings
from scaffold.graph import ImportGraph

ROOT = "/work"


@pytest.fixture
def empty_graph():
    return ImportGraph(ROOT)


@pytest.fixture(autouse=True)
def state_dir(tmp_path, monkeypatch):
    """Keep persisted state out of the real home directory."""
    d = tmp_path / "state"
    monkeypatch.setenv("SCAFFOLD_STATE_DIR", str(d))
    return d


@pytest.fixture
def settings():
    return Settings(debounce_ms=20)


@pytest.fixture
def make_workspace(tmp_path):
    """Write {relative path: content} under a fresh project dir; return its root.

    bytes content is written as-is, str content as UTF-8.
    """
    def _make(files, name="proj"):
        root = tmp_path / name
        root.mkdir(exist_ok=True)
        for rel, content in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content, encoding="utf-8")
        return str(root)
    return _make

