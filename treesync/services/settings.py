"""
Persistent settings: tracked entries and sync defaults.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from treesync.core.errors import ConfigurationError, InvalidPatternError
from treesync.core.models import SyncSettings
from treesync.core.patterns import ExcludeMatcher
from treesync.services.context import Context, Location


DEFAULT_MAX_DEPTH = 2


@dataclass
class TrackedEntry:
    """A file or directory kept in sync with the dot directory."""
    path: Path
    location: Location
    recursive: bool = False
    exclude: list[str] = field(default_factory=list)

    def __post_init__(self):
        self.path = Path(self.path)
        if self.path.is_absolute():
            raise ConfigurationError(
                f"Tracked path must be relative to its location: {self.path}"
            )


@dataclass
class ApplicationSettings:
    """Main settings container."""
    files: list[TrackedEntry] = field(default_factory=list)
    max_depth: int = DEFAULT_MAX_DEPTH

    def find_entry(self, path: Path, location: Location) -> Optional[TrackedEntry]:
        for entry in self.files:
            if entry.path == path and entry.location == location:
                return entry
        return None

    def sync_settings_for(self, entry: TrackedEntry) -> SyncSettings:
        """Build validated diff settings for a tracked entry."""
        return SyncSettings(
            max_depth=self.max_depth,
            recursive=entry.recursive,
            exclude=tuple(entry.exclude),
        )


class SettingsManager:
    """Manager for loading/saving settings."""

    def __init__(self, settings_path: Path | str):
        self.settings_path = Path(settings_path)
        self._settings: Optional[ApplicationSettings] = None

    @classmethod
    def for_context(cls, context: Context) -> 'SettingsManager':
        return cls(context.dot_config)

    @property
    def settings(self) -> ApplicationSettings:
        """Get current settings, loading from disk if needed."""
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def load(self) -> ApplicationSettings:
        """
        Load settings from disk.

        A missing file yields default settings.

        Raises:
            ConfigurationError: If the file is not valid settings JSON
        """
        if not self.settings_path.exists():
            logging.debug(f"SettingsManager - No settings at {self.settings_path}, using defaults")
            self._settings = ApplicationSettings()
            return self._settings

        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid settings file {self.settings_path}: {e}") from e

        self._settings = self._from_dict(data)
        logging.debug(f"SettingsManager - Loaded {len(self._settings.files)} tracked entries")
        return self._settings

    def save(self, settings: Optional[ApplicationSettings] = None) -> None:
        """Save settings to disk."""
        settings = settings or self.settings

        self.settings_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.settings_path, 'w', encoding='utf-8') as f:
            json.dump(self._to_dict(settings), f, indent=2)

        self._settings = settings

    def add_entry(
        self,
        context: Context,
        path: Path | str,
        recursive: bool = False
    ) -> bool:
        """
        Start tracking a path.

        Entries nested under the new path are dropped since the new entry
        covers them.

        Returns:
            False if the path was already tracked
        """
        settings = self.settings
        relative, location = context.clean_path(path)

        if settings.find_entry(relative, location):
            logging.info(f"File {relative} is already added")
            return False

        settings.files = [
            entry for entry in settings.files
            if not (entry.location == location and entry.path.is_relative_to(relative))
        ]
        settings.files.append(TrackedEntry(path=relative, location=location, recursive=recursive))
        return True

    def add_exclude(self, context: Context, pattern: str) -> TrackedEntry:
        """
        Exclude a glob below a tracked entry.

        The pattern is given like a path (``~/.config/nvim/plugged``) and
        stored relative to the tracked entry that contains it.

        Raises:
            ConfigurationError: If no tracked entry contains the pattern
            InvalidPatternError: If the pattern is not a valid glob
        """
        relative, location = context.clean_path(pattern)

        for entry in self.settings.files:
            if entry.location != location or not relative.is_relative_to(entry.path):
                continue

            remainder = relative.relative_to(entry.path).as_posix()
            if remainder == ".":
                raise ConfigurationError(f"Pattern {pattern} names the tracked entry itself")

            ExcludeMatcher.validate(remainder)
            if remainder not in entry.exclude:
                entry.exclude.append(remainder)
            return entry

        raise ConfigurationError(f"No file has matched for path {pattern}")

    def _to_dict(self, settings: ApplicationSettings) -> dict:
        """Convert settings to dictionary for JSON serialization."""
        return {
            'max_depth': settings.max_depth,
            'files': [
                {
                    'path': entry.path.as_posix(),
                    'location': entry.location.value,
                    'recursive': entry.recursive,
                    'exclude': list(entry.exclude),
                }
                for entry in settings.files
            ],
        }

    def _from_dict(self, data: Any) -> ApplicationSettings:
        """Convert dictionary back to settings objects."""
        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid settings file {self.settings_path}: expected an object")

        items = data.get('files', [])
        if not isinstance(items, list):
            raise ConfigurationError(f"Invalid settings file {self.settings_path}: files must be a list")

        files = []
        for item in items:
            try:
                exclude = item.get('exclude', [])
                recursive = item.get('recursive', False)
                if not isinstance(exclude, list) or not all(isinstance(p, str) for p in exclude):
                    raise TypeError("exclude must be a list of strings")
                if not isinstance(recursive, bool):
                    raise TypeError("recursive must be true or false")

                files.append(TrackedEntry(
                    path=Path(item['path']),
                    location=Location.from_string(item.get('location', 'home')),
                    recursive=recursive,
                    exclude=[ExcludeMatcher.validate(p) for p in exclude],
                ))
            except (KeyError, TypeError, AttributeError) as e:
                raise ConfigurationError(f"Invalid tracked entry {item!r}: {e}") from e
            except InvalidPatternError as e:
                raise ConfigurationError(f"Invalid tracked entry {item!r}: {e}") from e

        max_depth = data.get('max_depth', DEFAULT_MAX_DEPTH)
        if not isinstance(max_depth, int) or isinstance(max_depth, bool) or max_depth < 0:
            raise ConfigurationError(f"Invalid max_depth: {max_depth!r}")

        return ApplicationSettings(files=files, max_depth=max_depth)
