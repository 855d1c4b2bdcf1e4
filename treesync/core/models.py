"""
Core data models for tree synchronization.

This module defines the data structures shared by the engines:
- Change records produced by a diff run
- Node classification
- Sync settings and the traversal context
- Apply progress and results
- Tracked-entry sync plans

All models are UI-agnostic and immutable where practical.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from pathlib import Path

from treesync.core.patterns import ExcludeMatcher


# =============================================================================
# Enumerations
# =============================================================================

class ChangeKind(Enum):
    """Kind of change needed to bring a destination path in line."""
    ADDED = "add"
    MODIFIED = "mod"      # Files only
    DELETED = "del"

    @property
    def tag(self) -> str:
        """Short tag used in change listings."""
        return self.value


class NodeType(Enum):
    """Classification of a path on one side of a comparison."""
    DIRECTORY = auto()
    FILE = auto()
    ABSENT = auto()

    @property
    def exists(self) -> bool:
        return self is not NodeType.ABSENT


class SyncDirection(Enum):
    """Direction for tracked-entry synchronization."""
    UPDATE = auto()   # System -> dot directory
    INSTALL = auto()  # Dot directory -> system


# =============================================================================
# Change Models
# =============================================================================

ROOT_LABEL = "<root>"


@dataclass(frozen=True)
class ChangeRecord:
    """
    A single add/modify/delete instruction.

    ``relative_path`` is relative to both roots and uses ``/`` separators.
    The empty string refers to the roots themselves.
    """
    relative_path: str
    kind: ChangeKind

    @property
    def is_root(self) -> bool:
        return self.relative_path == ""

    def __str__(self) -> str:
        if self.is_root:
            return f"{self.kind.tag} {ROOT_LABEL}"
        return f"{self.kind.tag} {self.relative_path}"


def join_relative(parent: str, name: str) -> str:
    """Join an entry name onto a relative path ('' is the root)."""
    if not parent:
        return name
    return f"{parent}/{name}"


def resolve(root: Path, relative_path: str) -> Path:
    """Resolve a relative path against a tree root."""
    if not relative_path:
        return root
    return root.joinpath(*relative_path.split('/'))


# =============================================================================
# Settings Models
# =============================================================================

@dataclass(frozen=True)
class SyncSettings:
    """
    Settings for a diff run.

    ``max_depth`` bounds how many directory levels are descended into when
    ``recursive`` is off. A value of 0 is treated as 1.
    """
    max_depth: int = 1
    recursive: bool = False
    exclude: tuple[str, ...] = ()
    matcher: ExcludeMatcher = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.max_depth < 0:
            raise ValueError(f"max_depth must not be negative: {self.max_depth}")
        if self.max_depth == 0:
            object.__setattr__(self, 'max_depth', 1)

        exclude = tuple(self.exclude)
        object.__setattr__(self, 'exclude', exclude)
        # Invalid globs are rejected here, never during traversal
        object.__setattr__(self, 'matcher', ExcludeMatcher(exclude))


@dataclass(frozen=True)
class TraversalContext:
    """Per-run traversal state, copied (never shared) into each recursive call."""
    settings: SyncSettings
    depth: int = 0

    @property
    def at_depth_limit(self) -> bool:
        return not self.settings.recursive and self.depth >= self.settings.max_depth

    def descend(self) -> TraversalContext:
        return replace(self, depth=self.depth + 1)


# =============================================================================
# Apply Models
# =============================================================================

@dataclass
class ApplyProgress:
    """Progress information for an apply run."""
    current_item: str
    current_action: str
    items_completed: int
    total_items: int


@dataclass
class ApplyResult:
    """Counts for a completed apply run."""
    items_processed: int = 0
    items_created: int = 0
    items_copied: int = 0
    items_deleted: int = 0
    bytes_copied: int = 0
    duration: float = 0.0

    @property
    def summary(self) -> str:
        return (f"Processed: {self.items_processed}, Created: {self.items_created}, "
                f"Copied: {self.items_copied}, Deleted: {self.items_deleted}")


# =============================================================================
# Sync Plan Models
# =============================================================================

@dataclass
class SyncTarget:
    """Pending changes for one tracked entry."""
    entry_path: Path
    src_root: Path
    dst_root: Path
    records: list[ChangeRecord] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return len(self.records) > 0


@dataclass
class SyncPlan:
    """A reviewable set of sync targets."""
    direction: SyncDirection
    targets: list[SyncTarget] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not any(target.has_changes for target in self.targets)

    @property
    def total_records(self) -> int:
        return sum(len(target.records) for target in self.targets)

    def count(self, kind: ChangeKind) -> int:
        return sum(
            1 for target in self.targets
            for record in target.records
            if record.kind == kind
        )
