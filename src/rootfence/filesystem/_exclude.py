# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Gitignore-style exclude patterns for directory walks.

Patterns are compiled once and evaluated against each entry's path relative
to the walk root, using forward slashes regardless of platform.

Supported syntax:

- ``*`` and ``?`` match within one path segment; ``**`` crosses segments
- ``[abc]`` / ``[!abc]`` character classes and ``\\`` escapes
- a trailing ``/`` restricts the pattern to directories
- a ``/`` anywhere except a leading ``**/`` anchors the pattern to the walk
  root; unanchored patterns are tested against every segment
- ``**/name`` also matches any path ending in ``name``; ``dir/**`` also
  matches ``dir`` and everything below it
- blank lines and lines starting with ``#`` are ignored

Example usage::

    matcher = ExcludeMatcher.compile(["build/", "*.pyc", "docs/**"])
    matcher.matches_relative("src/app.pyc", is_directory=False)  # True
    matcher.matches_relative("build", is_directory=False)  # False
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Final

from ._path import relative_posix

_DIR_WILDCARD: Final[str] = "/**/"
_LEADING_RECURSIVE: Final[str] = "**/"
_TRAILING_RECURSIVE: Final[str] = "/**"

__all__ = ["ExcludeMatcher", "ExcludePattern", "compile_pattern", "translate_glob"]


@dataclass(slots=True, frozen=True)
class ExcludePattern:
    """One compiled exclude pattern.

    Attributes:
        raw: The pattern as supplied, before trimming.
        glob: Segment-aware regular expression for the pattern body.
        is_dir_only: Only directories can match.
        anchored: Match against the whole relative path instead of segments.
        prefix: Literal from a trailing ``/**``; matches leading segments.
        suffix: Literal from a leading ``**/``; matches trailing segments.
    """

    raw: str
    glob: re.Pattern[str]
    is_dir_only: bool
    anchored: bool
    prefix: str = ""
    suffix: str = ""

    def matches(self, rel_path: str, *, is_directory: bool) -> bool:
        """Return True if this pattern excludes ``rel_path``."""
        if self.is_dir_only and not is_directory:
            return False

        if self.anchored:
            if self.glob.fullmatch(rel_path):
                return True
        elif any(self.glob.fullmatch(segment) for segment in rel_path.split("/")):
            return True

        if self.suffix and (
            rel_path == self.suffix or rel_path.endswith(f"/{self.suffix}")
        ):
            return True
        return bool(self.prefix) and (
            rel_path == self.prefix or rel_path.startswith(f"{self.prefix}/")
        )


def compile_pattern(raw: str) -> ExcludePattern | None:
    """Compile one gitignore-style pattern.

    Returns ``None`` for blank lines and comments, which never match.
    """
    pattern = raw.strip()
    if not pattern or pattern.startswith("#"):
        return None

    is_dir_only = pattern.endswith("/")
    if is_dir_only:
        pattern = pattern.rstrip("/")
    anchored = "/" in pattern and not pattern.startswith(_LEADING_RECURSIVE)
    if pattern.startswith("/"):
        pattern = pattern.lstrip("/")
    if not pattern:
        return None

    body = pattern
    suffix = ""
    prefix = ""
    if body.startswith(_LEADING_RECURSIVE):
        body = body[len(_LEADING_RECURSIVE) :]
        suffix = body
    if body.endswith(_TRAILING_RECURSIVE):
        body = body[: -len(_TRAILING_RECURSIVE)]
        prefix = pattern[: -len(_TRAILING_RECURSIVE)]

    return ExcludePattern(
        raw=raw,
        glob=re.compile(translate_glob(body), re.DOTALL),
        is_dir_only=is_dir_only,
        anchored=anchored,
        prefix=prefix,
        suffix=suffix,
    )


def translate_glob(pattern: str) -> str:
    """Translate a glob into a regular expression where ``/`` is structural.

    Examples:
        >>> translate_glob("*.py")
        '[^/]*\\\\.py'
        >>> translate_glob("a/**/b")
        'a/(?:.*/)?b'
    """
    parts: list[str] = []
    index = 0
    length = len(pattern)
    while index < length:
        if pattern.startswith(_DIR_WILDCARD, index):
            parts.append("/(?:.*/)?")
            index += len(_DIR_WILDCARD)
            continue
        char = pattern[index]
        if char == "*":
            if pattern.startswith("**", index):
                parts.append(".*")
                while index < length and pattern[index] == "*":
                    index += 1
                continue
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        elif char == "\\" and index + 1 < length:
            index += 1
            parts.append(re.escape(pattern[index]))
        elif char == "[":
            end = _class_end(pattern, index)
            if end is None:
                parts.append(re.escape(char))
            else:
                parts.append(_translate_class(pattern[index + 1 : end]))
                index = end
        else:
            parts.append(re.escape(char))
        index += 1
    return "".join(parts)


def _class_end(pattern: str, start: int) -> int | None:
    index = start + 1
    if index < len(pattern) and pattern[index] in "!^":
        index += 1
    if index < len(pattern) and pattern[index] == "]":
        index += 1
    while index < len(pattern) and pattern[index] != "]":
        index += 1
    return index if index < len(pattern) else None


def _translate_class(body: str) -> str:
    negate = body[:1] in {"!", "^"}
    if negate:
        body = body[1:]
    escaped = "".join(f"\\{char}" if char in "\\[]^" else char for char in body)
    # A negated class must still never match the separator.
    return f"[^/{escaped}]" if negate else f"[{escaped}]"


@dataclass(slots=True, frozen=True)
class ExcludeMatcher:
    """Ordered collection of compiled exclude patterns.

    An entry is excluded when any pattern matches it. An empty matcher
    excludes nothing.
    """

    patterns: tuple[ExcludePattern, ...] = ()

    @classmethod
    def compile(cls, patterns: Iterable[str]) -> ExcludeMatcher:
        compiled = (compile_pattern(raw) for raw in patterns)
        return cls(patterns=tuple(p for p in compiled if p is not None))

    def matches(self, walk_root: str, candidate: str, *, is_directory: bool) -> bool:
        """Return True if ``candidate`` (below ``walk_root``) is excluded.

        The walk root itself and paths outside it are never excluded.
        """
        rel_path = relative_posix(
            os.path.abspath(candidate), os.path.abspath(walk_root)
        )
        if rel_path is None or rel_path == ".":
            return False
        return self.matches_relative(rel_path, is_directory=is_directory)

    def matches_relative(self, rel_path: str, *, is_directory: bool) -> bool:
        """Return True if the forward-slash relative path is excluded."""
        normalized = rel_path.strip("/")
        if not normalized:
            return False
        return any(
            pattern.matches(normalized, is_directory=is_directory)
            for pattern in self.patterns
        )

    def __bool__(self) -> bool:
        return bool(self.patterns)
