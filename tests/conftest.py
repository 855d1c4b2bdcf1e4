"""
Pytest configuration and shared fixtures.

Provides tree builders for the local filesystem and the in-memory storage.
"""

from pathlib import Path
from typing import Union

import pytest

from treesync.core.folder import MemoryStorage
from treesync.services.context import Context


TreeLayout = dict  # name -> str/bytes (file content) or TreeLayout (directory)


def build_tree(root: Path, layout: TreeLayout) -> Path:
    """Create ``layout`` under ``root`` on the local filesystem."""
    root.mkdir(parents=True, exist_ok=True)
    for name, value in layout.items():
        path = root / name
        if isinstance(value, dict):
            build_tree(path, value)
        elif isinstance(value, bytes):
            path.write_bytes(value)
        else:
            path.write_text(value)
    return root


def read_tree(root: Path) -> dict:
    """Inverse of build_tree: read a local tree back into a layout dict."""
    result = {}
    for path in sorted(root.iterdir()):
        if path.is_dir():
            result[path.name] = read_tree(path)
        else:
            result[path.name] = path.read_text()
    return result


def build_memory_tree(storage: MemoryStorage, root: Union[str, Path], layout: TreeLayout) -> None:
    """Create ``layout`` under ``root`` in a MemoryStorage."""
    storage.make_dirs(root)
    for name, value in layout.items():
        path = f"{root}/{name}"
        if isinstance(value, dict):
            build_memory_tree(storage, path, value)
        else:
            storage.write_file(path, value)


# ============================================================================
# Tree Fixtures
# ============================================================================

@pytest.fixture
def src(tmp_path: Path) -> Path:
    """Source root (not created)."""
    return tmp_path / "src"


@pytest.fixture
def dst(tmp_path: Path) -> Path:
    """Destination root (not created)."""
    return tmp_path / "dst"


@pytest.fixture
def memory() -> MemoryStorage:
    """Empty in-memory storage."""
    return MemoryStorage()


# ============================================================================
# Context Fixtures
# ============================================================================

@pytest.fixture
def home(tmp_path: Path) -> Path:
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def context(home: Path) -> Context:
    """Context rooted in a temporary home directory."""
    return Context.from_environ({"HOME": str(home)})


@pytest.fixture
def environ(monkeypatch: pytest.MonkeyPatch, home: Path) -> Path:
    """Point the process environment at the temporary home directory."""
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.delenv("DOT_PATH", raising=False)
    return home
