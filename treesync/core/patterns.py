"""
Shell-glob exclusion for change records.

Patterns are matched against the whole relative path of a record
(``/`` separated):

- ``*`` and ``**`` match any run of characters, separators included
- ``?`` matches a single character
- ``[abc]``, ``[a-z]`` match a character class, ``[!abc]``/``[^abc]`` negate it

A pattern that matches a directory also matches everything below it.
"""

from __future__ import annotations

import re
from typing import Iterable, Iterator, TYPE_CHECKING

from treesync.core.errors import InvalidPatternError

if TYPE_CHECKING:
    from treesync.core.models import ChangeRecord


class ExcludeMatcher:
    """
    Compiled set of exclude globs.

    Construction validates every pattern, so a matcher that exists can
    never fail while filtering.
    """

    def __init__(self, patterns: Iterable[str] = ()):
        self.patterns: tuple[str, ...] = tuple(patterns)
        self._compiled: list[re.Pattern] = [
            self._compile_pattern(pattern) for pattern in self.patterns
        ]

    def __bool__(self) -> bool:
        return bool(self._compiled)

    def __repr__(self) -> str:
        return f"ExcludeMatcher({list(self.patterns)!r})"

    @classmethod
    def validate(cls, pattern: str) -> str:
        """Return the pattern unchanged, or raise InvalidPatternError."""
        cls._compile_pattern(pattern)
        return pattern

    def matches(self, relative_path: str) -> bool:
        """Check if a relative path is excluded. The root is never excluded."""
        if not relative_path:
            return False
        return any(regex.match(relative_path) for regex in self._compiled)

    def filter(self, records: Iterable[ChangeRecord]) -> list[ChangeRecord]:
        """Drop excluded records, keeping the order of the rest."""
        return list(self.iter_kept(records))

    def iter_kept(self, records: Iterable[ChangeRecord]) -> Iterator[ChangeRecord]:
        for record in records:
            if not self.matches(record.relative_path):
                yield record

    @classmethod
    def _compile_pattern(cls, pattern: str) -> re.Pattern:
        if not pattern:
            raise InvalidPatternError(pattern, "empty pattern")

        regex = cls._pattern_to_regex(pattern)
        try:
            return re.compile(regex, re.DOTALL)
        except re.error as e:
            raise InvalidPatternError(pattern, str(e)) from e

    @classmethod
    def _pattern_to_regex(cls, pattern: str) -> str:
        """Convert a glob to an anchored regex that also covers descendants."""
        result = []
        i = 0
        n = len(pattern)

        while i < n:
            c = pattern[i]

            if c == '*':
                # '*' and '**' are equivalent here
                while i + 1 < n and pattern[i + 1] == '*':
                    i += 1
                result.append('.*')
            elif c == '?':
                result.append('.')
            elif c == '[':
                translated, i = cls._translate_class(pattern, i + 1)
                result.append(translated)
                continue
            else:
                result.append(re.escape(c))

            i += 1

        return '^(?:' + ''.join(result) + ')(?:/.*)?$'

    @staticmethod
    def _translate_class(pattern: str, start: int) -> tuple[str, int]:
        """
        Translate a character class whose body starts at ``start``.

        Returns the regex fragment and the index just past the closing bracket.
        """
        n = len(pattern)
        j = start
        negate = False

        if j < n and pattern[j] in '!^':
            negate = True
            j += 1

        body_start = j
        # A ']' right after the opening bracket is a literal
        if j < n and pattern[j] == ']':
            j += 1
        while j < n and pattern[j] != ']':
            j += 1

        if j >= n:
            raise InvalidPatternError(
                pattern, f"unterminated character class at offset {start - 1}"
            )

        body = ''.join(
            '\\' + ch if ch in '\\[]^&~|' else ch
            for ch in pattern[body_start:j]
        )
        return ('[^' if negate else '[') + body + ']', j + 1
