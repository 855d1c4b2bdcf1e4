"""
Apply engine.

Performs the filesystem operations described by a change list, strictly
in list order. The first failure aborts the run; nothing is rolled back.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Iterable, Optional

from treesync.core.folder.storage import LocalStorage, Storage
from treesync.core.models import (
    ApplyProgress,
    ApplyResult,
    ChangeKind,
    ChangeRecord,
    NodeType,
    resolve,
)


class ApplyEngine:
    """Applies change records from a source tree onto a destination tree."""

    def __init__(self, storage: Optional[Storage] = None):
        self.storage = storage or LocalStorage()

    def apply(
        self,
        src_root: Path | str,
        dst_root: Path | str,
        records: Iterable[ChangeRecord],
        progress_callback: Optional[Callable[[ApplyProgress], None]] = None
    ) -> ApplyResult:
        """
        Apply a change list produced by DiffEngine for the same roots.

        Node types are not re-validated: if either tree changed since the
        diff, operations may fail with the underlying OSError.

        Args:
            src_root: Source tree root
            dst_root: Destination tree root
            records: Ordered change records
            progress_callback: Called before each record is applied

        Returns:
            ApplyResult with operation counts
        """
        start_time = time.time()

        src_root = Path(src_root)
        dst_root = Path(dst_root)
        records = list(records)
        result = ApplyResult()

        # Root-level records need an existing container
        if (self.storage.classify(src_root) is NodeType.DIRECTORY
                and self.storage.classify(dst_root) is NodeType.ABSENT):
            logging.debug(f"ApplyEngine - Creating destination root {dst_root}")
            self.storage.create(dst_root)

        total_items = len(records)

        for i, record in enumerate(records):
            if progress_callback:
                progress_callback(ApplyProgress(
                    current_item=str(record),
                    current_action=record.kind.name,
                    items_completed=i,
                    total_items=total_items,
                ))

            src_path = resolve(src_root, record.relative_path)
            dst_path = resolve(dst_root, record.relative_path)
            logging.debug(f"ApplyEngine - {record}")

            if record.kind is ChangeKind.MODIFIED:
                result.bytes_copied += self.storage.copy(src_path, dst_path)
                result.items_copied += 1

            elif record.kind is ChangeKind.ADDED:
                if self.storage.classify(src_path) is NodeType.DIRECTORY:
                    self.storage.create(dst_path)
                    result.items_created += 1
                else:
                    self.storage.create(dst_path.parent)
                    result.bytes_copied += self.storage.copy(src_path, dst_path)
                    result.items_copied += 1

            elif record.kind is ChangeKind.DELETED:
                self.storage.remove(dst_path)
                result.items_deleted += 1

            result.items_processed += 1

        result.duration = time.time() - start_time
        return result


def apply(
    src_root: Path | str,
    dst_root: Path | str,
    records: Iterable[ChangeRecord],
    storage: Optional[Storage] = None
) -> ApplyResult:
    """Apply a change list with a default engine."""
    return ApplyEngine(storage).apply(src_root, dst_root, records)
