"""
Storage backends used by the diff and apply engines.

The engines never touch the filesystem directly; every read and mutation
goes through a Storage implementation:
- LocalStorage: the real filesystem
- MemoryStorage: an in-memory tree, for tests and previews
"""

from __future__ import annotations

import errno
import io
import os
import stat
from abc import ABC, abstractmethod
from pathlib import Path, PurePath, PurePosixPath
from typing import BinaryIO

from treesync.core.errors import UnsupportedNodeError
from treesync.core.models import NodeType


class Storage(ABC):
    """Minimal filesystem interface needed to diff and apply."""

    @abstractmethod
    def classify(self, path: PurePath) -> NodeType:
        """
        Classify a path as a directory, a regular file or absent.

        A path is absent when it, or one of its parents, does not exist
        or is not a directory. Symbolic links and special files raise
        UnsupportedNodeError.
        """

    @abstractmethod
    def list(self, path: PurePath) -> list[str]:
        """Return the entry names of a directory, sorted."""

    @abstractmethod
    def open_read(self, path: PurePath) -> BinaryIO:
        """Open a file for binary reading."""

    @abstractmethod
    def create(self, path: PurePath) -> None:
        """Create a directory and its missing parents. Existing directories are fine."""

    @abstractmethod
    def copy(self, source: PurePath, dest: PurePath) -> int:
        """Copy file content over ``dest``. Returns bytes copied."""

    @abstractmethod
    def remove(self, path: PurePath) -> None:
        """Remove a file, or an empty directory (never recursively)."""


class LocalStorage(Storage):
    """Storage backed by the local filesystem."""

    def __init__(self, buffer_size: int = 65536):
        self.buffer_size = buffer_size

    def classify(self, path: PurePath) -> NodeType:
        try:
            stat_result = os.lstat(path)
        except (FileNotFoundError, NotADirectoryError):
            return NodeType.ABSENT

        mode = stat_result.st_mode
        if stat.S_ISDIR(mode):
            return NodeType.DIRECTORY
        if stat.S_ISREG(mode):
            return NodeType.FILE
        if stat.S_ISLNK(mode):
            raise UnsupportedNodeError(path, "symbolic link")

        raise UnsupportedNodeError(path, "special file")

    def list(self, path: PurePath) -> list[str]:
        return sorted(os.listdir(path))

    def open_read(self, path: PurePath) -> BinaryIO:
        return open(path, 'rb')

    def create(self, path: PurePath) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def copy(self, source: PurePath, dest: PurePath) -> int:
        bytes_copied = 0

        with open(source, 'rb') as src:
            with open(dest, 'wb') as dst:
                while chunk := src.read(self.buffer_size):
                    dst.write(chunk)
                    bytes_copied += len(chunk)

        return bytes_copied

    def remove(self, path: PurePath) -> None:
        path = Path(path)
        if path.is_dir() and not path.is_symlink():
            path.rmdir()
        else:
            path.unlink()


class MemoryStorage(Storage):
    """
    In-memory tree keyed by absolute POSIX paths.

    Raises the same OSError subclasses as the local filesystem so engine
    behavior is identical on both backends. The filesystem root ``/``
    always exists.
    """

    ROOT = PurePosixPath('/')

    def __init__(self):
        self._dirs: set[PurePosixPath] = {self.ROOT}
        self._files: dict[PurePosixPath, bytes] = {}

    # -- test helpers --------------------------------------------------------

    def make_dirs(self, path: PurePath | str) -> None:
        self.create(PurePosixPath(path))

    def write_file(self, path: PurePath | str, data: bytes | str) -> None:
        """Write a file, creating its parent directories."""
        key = self._key(path)
        if isinstance(data, str):
            data = data.encode('utf-8')
        self.create(key.parent)
        if key in self._dirs:
            raise self._error(errno.EISDIR, key)
        self._files[key] = data

    def read_file(self, path: PurePath | str) -> bytes:
        key = self._key(path)
        if key in self._dirs:
            raise self._error(errno.EISDIR, key)
        if key not in self._files:
            raise self._error(errno.ENOENT, key)
        return self._files[key]

    def snapshot(self, root: PurePath | str) -> dict[str, bytes | None]:
        """Map every path below ``root`` to its content (None for directories)."""
        root = self._key(root)
        result: dict[str, bytes | None] = {}
        for directory in self._dirs:
            if directory != root and root in directory.parents:
                result[str(directory.relative_to(root))] = None
        for path, data in self._files.items():
            if root in path.parents:
                result[str(path.relative_to(root))] = data
        return result

    # -- Storage -------------------------------------------------------------

    def classify(self, path: PurePath) -> NodeType:
        key = self._key(path)
        if key in self._dirs:
            return NodeType.DIRECTORY
        if key in self._files:
            return NodeType.FILE
        return NodeType.ABSENT

    def list(self, path: PurePath) -> list[str]:
        key = self._key(path)
        if key in self._files:
            raise self._error(errno.ENOTDIR, key)
        if key not in self._dirs:
            raise self._error(errno.ENOENT, key)
        return sorted(child.name for child in self._children(key))

    def open_read(self, path: PurePath) -> BinaryIO:
        return io.BytesIO(self.read_file(path))

    def create(self, path: PurePath) -> None:
        key = self._key(path)
        missing = []
        current = key
        while current not in self._dirs:
            if current in self._files:
                raise self._error(errno.EEXIST, current)
            missing.append(current)
            current = current.parent
        self._dirs.update(missing)

    def copy(self, source: PurePath, dest: PurePath) -> int:
        data = self.read_file(source)
        key = self._key(dest)
        if key in self._dirs:
            raise self._error(errno.EISDIR, key)
        if key.parent not in self._dirs:
            code = errno.ENOTDIR if key.parent in self._files else errno.ENOENT
            raise self._error(code, key)
        self._files[key] = data
        return len(data)

    def remove(self, path: PurePath) -> None:
        key = self._key(path)
        if key in self._files:
            del self._files[key]
        elif key in self._dirs:
            if key == self.ROOT:
                raise self._error(errno.EBUSY, key)
            if any(True for _ in self._children(key)):
                raise self._error(errno.ENOTEMPTY, key)
            self._dirs.discard(key)
        else:
            raise self._error(errno.ENOENT, key)

    # -- internals -----------------------------------------------------------

    def _children(self, key: PurePosixPath):
        for directory in self._dirs:
            if directory != key and directory.parent == key:
                yield directory
        for path in self._files:
            if path.parent == key:
                yield path

    def _key(self, path: PurePath | str) -> PurePosixPath:
        key = PurePosixPath(path)
        if not key.is_absolute():
            key = self.ROOT / key
        return key

    @staticmethod
    def _error(code: int, path: PurePosixPath) -> OSError:
        # OSError picks the matching subclass (FileNotFoundError, ...) from errno
        return OSError(code, os.strerror(code), str(path))
