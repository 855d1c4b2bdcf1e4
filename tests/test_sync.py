"""
Tests for tracked-entry synchronization with the dot directory.
"""

from pathlib import Path

import pytest

from treesync.core.errors import SourceNotFoundError
from treesync.core.folder import FolderSync
from treesync.core.models import ChangeKind, ChangeRecord, SyncDirection
from treesync.services.context import Location
from treesync.services.settings import ApplicationSettings, TrackedEntry

from conftest import build_tree, read_tree


@pytest.fixture
def dotfiles(home):
    build_tree(home, {
        ".bashrc": "export EDITOR=vim",
        ".config": {"nvim": {"init.lua": "-- init", "lua": {"plugins.lua": "return {}"}}},
    })
    return ApplicationSettings(files=[
        TrackedEntry(Path(".bashrc"), Location.HOME),
        TrackedEntry(Path("nvim"), Location.CONFIG, recursive=True),
    ])


class TestResolveRoots:

    def test_directions(self, context, home):
        folder_sync = FolderSync(context)
        entry = TrackedEntry(Path("nvim"), Location.CONFIG)

        assert folder_sync.resolve_roots(entry, SyncDirection.UPDATE) == (
            home / ".config" / "nvim", home / ".dot" / "nvim"
        )
        assert folder_sync.resolve_roots(entry, SyncDirection.INSTALL) == (
            home / ".dot" / "nvim", home / ".config" / "nvim"
        )

    def test_absolute_entry(self, context, home):
        entry = TrackedEntry(Path("etc/hosts"), Location.ABSOLUTE)

        src, dst = FolderSync(context).resolve_roots(entry, SyncDirection.UPDATE)

        assert src == Path("/etc/hosts")
        assert dst == home / ".dot" / "etc" / "hosts"


class TestFolderSync:

    def test_update_copies_into_dot_directory(self, context, home, dotfiles):
        folder_sync = FolderSync(context)

        plan = folder_sync.create_plan(dotfiles, SyncDirection.UPDATE)

        assert [target.entry_path for target in plan.targets] == [Path(".bashrc"), Path("nvim")]
        assert plan.count(ChangeKind.ADDED) == plan.total_records == 5

        results = folder_sync.execute(plan)

        assert len(results) == 2
        assert (home / ".dot" / ".bashrc").read_text() == "export EDITOR=vim"
        assert read_tree(home / ".dot" / "nvim") == read_tree(home / ".config" / "nvim")
        assert folder_sync.create_plan(dotfiles, SyncDirection.UPDATE).is_empty

    def test_install_restores_system_files(self, context, home, dotfiles):
        folder_sync = FolderSync(context)
        folder_sync.execute(folder_sync.create_plan(dotfiles, SyncDirection.UPDATE))
        (home / ".dot" / ".bashrc").write_text("export EDITOR=nvim")

        plan = folder_sync.create_plan(dotfiles, SyncDirection.INSTALL)

        assert [target.entry_path for target in plan.targets] == [Path(".bashrc")]
        assert plan.targets[0].records == [ChangeRecord("", ChangeKind.MODIFIED)]

        folder_sync.execute(plan)

        assert (home / ".bashrc").read_text() == "export EDITOR=nvim"

    def test_entry_settings_apply(self, context, home, dotfiles):
        dotfiles.files[1].recursive = False
        dotfiles.files[1].exclude = ["init.lua"]

        plan = FolderSync(context).create_plan(dotfiles, SyncDirection.UPDATE)

        # Default depth reaches the entry's direct children only
        assert plan.targets[1].entry_path == Path("nvim")
        assert plan.targets[1].records == [
            ChangeRecord("", ChangeKind.ADDED),
            ChangeRecord("lua", ChangeKind.ADDED),
        ]

    def test_missing_source(self, context):
        settings = ApplicationSettings(files=[TrackedEntry(Path(".missing"), Location.HOME)])

        with pytest.raises(SourceNotFoundError):
            FolderSync(context).create_plan(settings, SyncDirection.UPDATE)

    def test_no_entries(self, context):
        plan = FolderSync(context).create_plan(ApplicationSettings(), SyncDirection.INSTALL)

        assert plan.is_empty
        assert plan.targets == []
