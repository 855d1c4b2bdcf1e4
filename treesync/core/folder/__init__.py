"""
Folder synchronization module.

Provides functionality for:
- Computing ordered change lists between two trees
- Applying change lists to a destination tree
- Pluggable storage backends
- Planning sync runs over tracked entries
"""

from treesync.core.folder.storage import (
    Storage,
    LocalStorage,
    MemoryStorage,
)
from treesync.core.folder.diff import (
    DiffEngine,
    diff,
)
from treesync.core.folder.apply import (
    ApplyEngine,
    apply,
)
from treesync.core.folder.sync import FolderSync

__all__ = [
    # Storage
    'Storage',
    'LocalStorage',
    'MemoryStorage',
    # Diff
    'DiffEngine',
    'diff',
    # Apply
    'ApplyEngine',
    'apply',
    # Sync
    'FolderSync',
]
