"""
Tests for exclude pattern matching.
"""

import pytest

from treesync.core.errors import InvalidPatternError
from treesync.core.models import ChangeKind, ChangeRecord
from treesync.core.patterns import ExcludeMatcher


class TestMatching:

    @pytest.mark.parametrize("pattern, path, expected", [
        ("b", "b", True),
        ("b", "b/c/d", True),
        ("b", "bc", False),
        ("b", "a/b", False),
        ("*.log", "x.log", True),
        ("*.log", "dir/x.log", True),
        ("*.log", "x.log.txt", False),
        ("src/**/*.rs", "src/a/b/main.rs", True),
        ("?.txt", "a.txt", True),
        ("?.txt", "ab.txt", False),
        ("[ab].txt", "a.txt", True),
        ("[ab].txt", "c.txt", False),
        ("[!ab].txt", "c.txt", True),
        ("[^ab].txt", "a.txt", False),
        ("[a-c]", "b", True),
        ("[]x]", "]", True),
        ("file(1).txt", "file(1).txt", True),
        ("a+b", "aab", False),
    ])
    def test_matches(self, pattern, path, expected):
        assert ExcludeMatcher([pattern]).matches(path) is expected

    def test_root_is_never_excluded(self):
        assert ExcludeMatcher(["*"]).matches("") is False

    def test_empty_matcher(self):
        matcher = ExcludeMatcher()

        assert not matcher
        assert matcher.matches("anything") is False

    def test_filter_keeps_order(self):
        records = [
            ChangeRecord("z", ChangeKind.DELETED),
            ChangeRecord("skip/me", ChangeKind.ADDED),
            ChangeRecord("a", ChangeKind.ADDED),
            ChangeRecord("skip", ChangeKind.ADDED),
        ]

        kept = ExcludeMatcher(["skip"]).filter(records)

        assert kept == [records[0], records[2]]


class TestValidation:

    @pytest.mark.parametrize("pattern", ["[abc", "", "[!", "x/[z-a]"])
    def test_invalid(self, pattern):
        with pytest.raises(InvalidPatternError) as exc_info:
            ExcludeMatcher([pattern])

        assert exc_info.value.pattern == pattern
        assert isinstance(exc_info.value, ValueError)

    def test_validate_returns_pattern(self):
        assert ExcludeMatcher.validate("*.bak") == "*.bak"
