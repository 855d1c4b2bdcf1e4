"""
Tests for the runtime context.
"""

from pathlib import Path

import pytest

from treesync.core.errors import ConfigurationError
from treesync.services.context import Context, Location


class TestFromEnviron:

    def test_defaults(self):
        context = Context.from_environ({"HOME": "/home/user"})

        assert context.home == Path("/home/user")
        assert context.xdg_config == Path("/home/user/.config")
        assert context.dot == Path("/home/user/.dot")
        assert context.dot_config == Path("/home/user/.dot/config.json")

    def test_overrides(self):
        context = Context.from_environ({
            "HOME": "/h",
            "XDG_CONFIG_HOME": "/x",
            "DOT_PATH": "/d",
        })

        assert context.xdg_config == Path("/x")
        assert context.dot_config == Path("/d/config.json")

    def test_empty_override_uses_default(self):
        context = Context.from_environ({"HOME": "/h", "DOT_PATH": ""})

        assert context.dot == Path("/h/.dot")

    @pytest.mark.parametrize("environ", [{}, {"HOME": ""}])
    def test_home_required(self, environ):
        with pytest.raises(ConfigurationError):
            Context.from_environ(environ)

    def test_process_environment(self, environ):
        assert Context.from_environ().home == environ

    def test_with_settings_path(self, context, tmp_path):
        other = context.with_settings_path(tmp_path / "alt.json")

        assert other.dot_config == tmp_path / "alt.json"
        assert other.dot == context.dot


class TestCleanPath:

    def test_home(self, context, home):
        assert context.clean_path(home / ".bashrc") == (Path(".bashrc"), Location.HOME)

    def test_config_wins_over_home(self, context, home):
        assert context.clean_path(home / ".config" / "nvim") == (Path("nvim"), Location.CONFIG)

    def test_tilde(self, context):
        assert context.clean_path("~/.config/nvim/init.lua") == (
            Path("nvim/init.lua"), Location.CONFIG
        )
        assert context.clean_path("~/.zshrc") == (Path(".zshrc"), Location.HOME)

    def test_absolute(self, context):
        relative, location = context.clean_path("/etc/hosts")

        assert (relative, location) == (Path("etc/hosts"), Location.ABSOLUTE)
        assert context.get_path(location) / relative == Path("/etc/hosts")

    def test_relative_to_cwd(self, context, home, monkeypatch):
        monkeypatch.chdir(home)

        assert context.clean_path("notes.txt") == (Path("notes.txt"), Location.HOME)

    def test_normalizes_dots(self, context, home):
        assert context.clean_path(home / "a" / ".." / "b") == (Path("b"), Location.HOME)


class TestLocation:

    def test_get_path(self, context, home):
        assert context.get_path(Location.HOME) == home
        assert context.get_path(Location.CONFIG) == home / ".config"
        assert context.get_path(Location.ABSOLUTE) == Path("/")

    def test_from_string(self):
        assert Location.from_string("CONFIG") is Location.CONFIG

    def test_unknown(self):
        with pytest.raises(ConfigurationError):
            Location.from_string("somewhere")
