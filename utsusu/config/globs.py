"""Glob pattern compilation for included-file matching.

Patterns are matched against paths relative to a template's files root, in POSIX form.

Supported syntax:
    ?       any single character
    *       any sequence of characters, including '/'
    **      any number of path components; must be a whole component
    [abc]   character class, with ranges ([a-z]) and negation ([!a] or [^a])
    {a,b}   alternation (not nestable)
    \\x     literal x
"""

from __future__ import annotations

import re
from pathlib import PurePath
from typing import Iterable

_UNCLOSED_CLASS = "unclosed character class; missing ']'"
_UNOPENED_ALTERNATES = "unopened alternate group; missing '{' (maybe escape '}' with '[}]'?)"
_UNCLOSED_ALTERNATES = "unclosed alternate group; missing '}' (maybe escape '{' with '[{]'?)"
_NESTED_ALTERNATES = "nested alternate groups are not allowed"
_DANGLING_ESCAPE = "dangling '\\'"
_INVALID_RECURSIVE = "invalid use of **; must be one path component"


class GlobError(ValueError):
    """Raised when a glob pattern cannot be compiled."""

    def __init__(self, pattern: str, kind: str) -> None:
        self.pattern = pattern
        self.kind = kind
        super().__init__(f"error parsing glob {pattern!r}: {kind}")


def _translate_recursive(pattern: str, start: int, out: list[str]) -> int:
    end = start + 2
    if start > 0 and pattern[start - 1] != "/":
        raise GlobError(pattern, _INVALID_RECURSIVE)
    if end < len(pattern) and pattern[end] != "/":
        raise GlobError(pattern, _INVALID_RECURSIVE)

    if end == len(pattern):
        out.append(".*")
        return end

    # '**/' matches zero or more leading directories
    out.append("(?:.*/)?")
    return end + 1


def _translate_class(pattern: str, start: int) -> tuple[str, int]:
    index = start + 1
    negated = False
    if index < len(pattern) and pattern[index] in "!^":
        negated = True
        index += 1

    items: list[str] = []
    first = True
    while True:
        if index >= len(pattern):
            raise GlobError(pattern, _UNCLOSED_CLASS)
        char = pattern[index]
        # A leading ']' is a literal member of the class
        if char == "]" and not first:
            break
        first = False

        if (
            index + 2 < len(pattern)
            and pattern[index + 1] == "-"
            and pattern[index + 2] != "]"
        ):
            low, high = char, pattern[index + 2]
            if low > high:
                raise GlobError(pattern, f"invalid range; '{low}' > '{high}'")
            items.append(f"{re.escape(low)}-{re.escape(high)}")
            index += 3
            continue

        items.append(re.escape(char))
        index += 1

    prefix = "[^" if negated else "["
    return prefix + "".join(items) + "]", index + 1


def translate(pattern: str) -> str:
    """Translate a glob pattern into an (unanchored) regular expression."""
    parts: list[str] = []
    alternates: list[str] | None = None
    current = parts
    index = 0

    while index < len(pattern):
        char = pattern[index]

        if char == "\\":
            if index + 1 >= len(pattern):
                raise GlobError(pattern, _DANGLING_ESCAPE)
            current.append(re.escape(pattern[index + 1]))
            index += 2
        elif char == "?":
            current.append(".")
            index += 1
        elif char == "*":
            if index + 1 < len(pattern) and pattern[index + 1] == "*":
                index = _translate_recursive(pattern, index, current)
            else:
                current.append(".*")
                index += 1
        elif char == "[":
            token, index = _translate_class(pattern, index)
            current.append(token)
        elif char == "{":
            if alternates is not None:
                raise GlobError(pattern, _NESTED_ALTERNATES)
            alternates = []
            current = []
            index += 1
        elif char == "," and alternates is not None:
            alternates.append("".join(current))
            current = []
            index += 1
        elif char == "}":
            if alternates is None:
                raise GlobError(pattern, _UNOPENED_ALTERNATES)
            alternates.append("".join(current))
            parts.append("(?:" + "|".join(alternates) + ")")
            alternates = None
            current = parts
            index += 1
        else:
            current.append(re.escape(char))
            index += 1

    if alternates is not None:
        raise GlobError(pattern, _UNCLOSED_ALTERNATES)

    return "".join(parts)


def compile_glob(pattern: str) -> re.Pattern[str]:
    """Compile a single glob pattern into an anchored-by-fullmatch regex."""
    try:
        return re.compile(translate(pattern), re.DOTALL)
    except re.error as exc:
        raise GlobError(pattern, str(exc)) from exc


class GlobSet:
    """A set of glob patterns matched as one unit.

    A path matches the set when it matches any member pattern. An empty set matches nothing.
    """

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        self._patterns: list[str] = []
        self._matchers: list[re.Pattern[str]] = []
        for pattern in patterns:
            self.add(pattern)

    @classmethod
    def empty(cls) -> GlobSet:
        return cls()

    def add(self, pattern: str) -> None:
        """Compile a pattern and add it to the set."""
        self._matchers.append(compile_glob(pattern))
        self._patterns.append(pattern)

    @property
    def patterns(self) -> tuple[str, ...]:
        return tuple(self._patterns)

    def is_match(self, path: str | PurePath) -> bool:
        candidate = path.as_posix() if isinstance(path, PurePath) else path
        return any(matcher.fullmatch(candidate) for matcher in self._matchers)

    def __len__(self) -> int:
        return len(self._patterns)

    def __repr__(self) -> str:
        return f"GlobSet({list(self._patterns)!r})"
