"""
Error taxonomy for the synchronization engine.

Filesystem failures other than the ones below are raised as the
underlying OSError and reach the caller unchanged.
"""

from __future__ import annotations

from pathlib import Path


class SyncError(Exception):
    """Base class for all treesync errors."""


class SourceNotFoundError(SyncError, FileNotFoundError):
    """The source root of a diff run does not exist."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(f"Source path not found: {self.path}")


class InvalidPatternError(SyncError, ValueError):
    """An exclude pattern is not a valid shell glob."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid exclude pattern {pattern!r}: {reason}")


class UnsupportedNodeError(SyncError):
    """A path is neither a regular file nor a directory (e.g. a symlink)."""

    def __init__(self, path: Path | str, kind: str):
        self.path = Path(path)
        self.kind = kind
        super().__init__(f"Unsupported {kind}: {self.path}")


class ConfigurationError(SyncError):
    """Raised when required configuration is missing or invalid."""
