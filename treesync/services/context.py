"""
Runtime context: where the home, config and dot directories live.

The context is built once at startup from the environment and passed to
the callers that need it. The engines never read the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from treesync.core.errors import ConfigurationError


SETTINGS_FILE_NAME = "config.json"


class Location(Enum):
    """Base directory a tracked path is relative to."""
    HOME = "home"
    CONFIG = "config"
    ABSOLUTE = "absolute"

    @classmethod
    def from_string(cls, value: str) -> 'Location':
        """Create from string value."""
        for location in cls:
            if location.value == value.lower():
                return location
        raise ConfigurationError(f"Unknown location: {value!r}")


@dataclass(frozen=True)
class Context:
    """Resolved directory layout."""
    home: Path
    xdg_config: Path
    dot: Path
    dot_config: Path

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> 'Context':
        """
        Build the context from environment variables.

        - HOME: required
        - XDG_CONFIG_HOME: defaults to $HOME/.config
        - DOT_PATH: defaults to $HOME/.dot

        Raises:
            ConfigurationError: If HOME is not set
        """
        environ = os.environ if environ is None else environ

        home = environ.get("HOME", "")
        if not home:
            raise ConfigurationError("HOME variable is not set")

        config = environ.get("XDG_CONFIG_HOME") or os.path.join(home, ".config")
        dot = environ.get("DOT_PATH") or os.path.join(home, ".dot")

        return cls(
            home=Path(home),
            xdg_config=Path(config),
            dot=Path(dot),
            dot_config=Path(dot) / SETTINGS_FILE_NAME,
        )

    def with_settings_path(self, path: Path | str) -> 'Context':
        """Copy of this context reading settings from another file."""
        return replace(self, dot_config=Path(path))

    def clean_path(self, path: Path | str) -> tuple[Path, Location]:
        """
        Split a path into a location and a location-relative path.

        A leading ``~`` expands to the home directory. The home directory
        maps to HOME, the XDG config
        directory to CONFIG, anything else is ABSOLUTE (relative to the
        filesystem root). CONFIG is checked before HOME since it usually
        lives inside it. Relative paths are made absolute first.
        """
        path = Path(path)

        if path.parts and path.parts[0] == "~":
            path = self.home.joinpath(*path.parts[1:])

        path = Path(os.path.abspath(path))
        if path.is_relative_to(self.xdg_config):
            return path.relative_to(self.xdg_config), Location.CONFIG
        if path.is_relative_to(self.home):
            return path.relative_to(self.home), Location.HOME
        return path.relative_to(path.anchor), Location.ABSOLUTE

    def get_path(self, location: Location) -> Path:
        """Base directory for a location."""
        if location == Location.HOME:
            return self.home
        elif location == Location.CONFIG:
            return self.xdg_config
        return Path("/")
