"""
Tracked-entry synchronization.

Builds a reviewable plan covering every tracked entry, in one direction:
- UPDATE copies system paths into the dot directory
- INSTALL copies the dot directory back onto the system
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from treesync.core.folder.apply import ApplyEngine
from treesync.core.folder.diff import DiffEngine
from treesync.core.models import (
    ApplyProgress,
    ApplyResult,
    SyncDirection,
    SyncPlan,
    SyncTarget,
)
from treesync.services.context import Context
from treesync.services.settings import ApplicationSettings, TrackedEntry


class FolderSync:
    """
    Synchronizes tracked entries with the dot directory.

    Supports:
    - Plan creation for review before anything is changed
    - Plan execution, target by target
    """

    def __init__(
        self,
        context: Context,
        diff_engine: Optional[DiffEngine] = None,
        apply_engine: Optional[ApplyEngine] = None
    ):
        self.context = context
        self.diff_engine = diff_engine or DiffEngine()
        self.apply_engine = apply_engine or ApplyEngine(self.diff_engine.storage)

    def resolve_roots(self, entry: TrackedEntry, direction: SyncDirection) -> tuple[Path, Path]:
        """Return (source root, destination root) for an entry."""
        system_path = self.context.get_path(entry.location) / entry.path
        dot_path = self.context.dot / entry.path

        if direction == SyncDirection.UPDATE:
            return system_path, dot_path
        return dot_path, system_path

    def create_plan(
        self,
        settings: ApplicationSettings,
        direction: SyncDirection
    ) -> SyncPlan:
        """
        Diff every tracked entry.

        Entries without changes are left out of the plan.

        Raises:
            SourceNotFoundError: If an entry's source root is missing
            InvalidPatternError: If an entry has an invalid exclude pattern
        """
        plan = SyncPlan(direction=direction)

        for entry in settings.files:
            src_root, dst_root = self.resolve_roots(entry, direction)
            records = self.diff_engine.diff(
                src_root, dst_root, settings.sync_settings_for(entry)
            )

            if not records:
                logging.debug(f"FolderSync - {entry.path} is up to date")
                continue

            plan.targets.append(SyncTarget(
                entry_path=entry.path,
                src_root=src_root,
                dst_root=dst_root,
                records=records,
            ))

        logging.info(
            f"FolderSync - Planned {plan.total_records} change(s) "
            f"across {len(plan.targets)} entr{'y' if len(plan.targets) == 1 else 'ies'}"
        )
        return plan

    def execute(
        self,
        plan: SyncPlan,
        progress_callback: Optional[Callable[[ApplyProgress], None]] = None
    ) -> list[ApplyResult]:
        """Apply every target of a plan in order. The first error aborts."""
        results = []

        for target in plan.targets:
            logging.info(f"FolderSync - Updating {target.dst_root}")
            results.append(self.apply_engine.apply(
                target.src_root,
                target.dst_root,
                target.records,
                progress_callback,
            ))

        return results
