"""
Tree diff engine.

Walks a source and a destination tree in lock-step and produces the
ordered list of change records that makes the destination match the
source:
- Files only in the source are added
- Files only in the destination are deleted
- Files in both with different content are modified
- A path that is a directory on one side and a file on the other is
  replaced as a whole, never merged

Ordering: a directory is added before anything inside it and deleted
after everything inside it, so the list can be applied front to back.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from treesync.core.errors import SourceNotFoundError
from treesync.core.folder.storage import LocalStorage, Storage
from treesync.core.models import (
    ChangeKind,
    ChangeRecord,
    NodeType,
    SyncSettings,
    TraversalContext,
    join_relative,
    resolve,
)
from treesync.services.hashing import HashingService


class DiffEngine:
    """
    Computes change records between two trees.

    Sibling entries are visited in lexicographic order, so the same pair of
    trees always yields the same list.
    """

    def __init__(
        self,
        storage: Optional[Storage] = None,
        hasher: Optional[HashingService] = None
    ):
        self.storage = storage or LocalStorage()
        self.hasher = hasher or HashingService()

    def diff(
        self,
        src_root: Path | str,
        dst_root: Path | str,
        settings: Optional[SyncSettings] = None
    ) -> list[ChangeRecord]:
        """
        Compute the changes needed to make ``dst_root`` match ``src_root``.

        Args:
            src_root: Source tree root (file or directory)
            dst_root: Destination tree root, may be absent
            settings: Depth, recursion and exclusion settings

        Returns:
            Ordered change records with exclusions removed

        Raises:
            SourceNotFoundError: If ``src_root`` does not exist
        """
        src_root = Path(src_root)
        dst_root = Path(dst_root)
        settings = settings or SyncSettings()

        if self.storage.classify(src_root) is NodeType.ABSENT:
            raise SourceNotFoundError(src_root)

        logging.debug(f"DiffEngine - Comparing {src_root} -> {dst_root} ({settings})")

        context = TraversalContext(settings=settings)
        records = self._diff_rec(src_root, dst_root, "", context)

        if not settings.matcher:
            return records

        kept = settings.matcher.filter(records)
        if len(kept) != len(records):
            logging.debug(f"DiffEngine - Excluded {len(records) - len(kept)} record(s)")
        return kept

    def _diff_rec(
        self,
        src_root: Path,
        dst_root: Path,
        relative_path: str,
        context: TraversalContext
    ) -> list[ChangeRecord]:
        """Diff one relative path and everything below it."""
        if context.at_depth_limit:
            return []

        src_path = resolve(src_root, relative_path)
        dst_path = resolve(dst_root, relative_path)
        src_type = self.storage.classify(src_path)
        dst_type = self.storage.classify(dst_path)

        records: list[ChangeRecord] = []

        def recurse(names: list[str]) -> None:
            child_context = context.descend()
            for name in names:
                records.extend(self._diff_rec(
                    src_root, dst_root, join_relative(relative_path, name), child_context
                ))

        if src_type is NodeType.FILE and dst_type is NodeType.FILE:
            if not self._same_content(src_path, dst_path):
                records.append(ChangeRecord(relative_path, ChangeKind.MODIFIED))

        elif src_type is NodeType.FILE and dst_type is NodeType.ABSENT:
            records.append(ChangeRecord(relative_path, ChangeKind.ADDED))

        elif src_type is NodeType.ABSENT and dst_type is NodeType.FILE:
            records.append(ChangeRecord(relative_path, ChangeKind.DELETED))

        elif src_type is NodeType.DIRECTORY and dst_type is not NodeType.DIRECTORY:
            # Directory must exist before its children land in it
            if dst_type.exists:
                records.append(ChangeRecord(relative_path, ChangeKind.DELETED))
            records.append(ChangeRecord(relative_path, ChangeKind.ADDED))
            recurse(self.storage.list(src_path))

        elif dst_type is NodeType.DIRECTORY and src_type is not NodeType.DIRECTORY:
            # Directory must be emptied before it can be removed
            recurse(self.storage.list(dst_path))
            records.append(ChangeRecord(relative_path, ChangeKind.DELETED))
            if src_type.exists:
                records.append(ChangeRecord(relative_path, ChangeKind.ADDED))

        elif src_type is NodeType.DIRECTORY and dst_type is NodeType.DIRECTORY:
            names = set(self.storage.list(src_path))
            names.update(self.storage.list(dst_path))
            recurse(sorted(names))

        return records

    def _same_content(self, src_path: Path, dst_path: Path) -> bool:
        """Compare two files by content fingerprint."""
        with self.storage.open_read(src_path) as src:
            with self.storage.open_read(dst_path) as dst:
                return self.hasher.compare_streams(src, dst)


def diff(
    src_root: Path | str,
    dst_root: Path | str,
    settings: Optional[SyncSettings] = None,
    storage: Optional[Storage] = None
) -> list[ChangeRecord]:
    """Compute a diff with a default engine."""
    return DiffEngine(storage).diff(src_root, dst_root, settings)
