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

"""Core filesystem types and result dataclasses.

All types are immutable frozen dataclasses so they can be shared freely
between calls.

Types are organized into:

- **Configuration**: ``AllowedRoots`` - the administrator-configured roots
- **Validated paths**: ``ResolvedPath`` - a path that passed containment
- **Edit types**: ``Edit``, ``DiffResult`` - inputs and output of the edit engine
- **Metadata types**: ``FileInfo``, ``TreeEntry``, ``WalkEntry``

Constants:

- ``DEFAULT_TREE_DEPTH``: Default recursion bound for tree and walk operations
- ``DIFF_CONTEXT_LINES``: Unchanged lines shown around each diff hunk
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Final, Literal

from ._path import clean_absolute, is_path_under

DEFAULT_TREE_DEPTH: Final[int] = 100
DIFF_CONTEXT_LINES: Final[int] = 3

EntryType = Literal["file", "directory"]


# ---------------------------------------------------------------------------
# Configuration and validated paths
# ---------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class AllowedRoots:
    """Ordered set of canonical absolute directories the caller may touch.

    Built once at process start and passed explicitly into every validation
    call. Roots are cleaned, symlink-resolved, and de-duplicated while keeping
    their original order.

    Attributes:
        roots: Canonical absolute root directories.

    Example::

        roots = AllowedRoots.from_paths(["~/projects", "/srv/shared"])
        resolved = validate_path("~/projects/app/main.py", roots)
    """

    roots: tuple[str, ...]

    @classmethod
    def from_paths(cls, paths: Iterable[str | os.PathLike[str]]) -> AllowedRoots:
        """Canonicalize ``paths`` into an :class:`AllowedRoots` value."""
        canonical: list[str] = []
        for raw in paths:
            resolved = os.path.realpath(clean_absolute(os.fspath(raw)))
            if resolved not in canonical:
                canonical.append(resolved)
        return cls(roots=tuple(canonical))

    def containing(self, path: str) -> str | None:
        """Return the first root containing the absolute clean ``path``."""
        for root in self.roots:
            if is_path_under(path, root):
                return root
        return None

    def __iter__(self) -> Iterator[str]:
        return iter(self.roots)

    def __len__(self) -> int:
        return len(self.roots)


@dataclass(slots=True, frozen=True)
class ResolvedPath:
    """A cleaned absolute path that passed containment at every hop.

    ``path`` is the caller's own path after cleaning, never the target of a
    symlink. Instances are ``os.PathLike`` so they can be handed directly to
    ``open`` and friends.

    Attributes:
        path: Absolute, lexically clean path to use for I/O.
        requested: The raw path string the caller supplied.
        root: The allowed root that contains ``path``.
    """

    path: str
    requested: str
    root: str

    def __fspath__(self) -> str:
        return self.path

    def __str__(self) -> str:
        return self.path


# ---------------------------------------------------------------------------
# Edit types
# ---------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class Edit:
    """A single text replacement applied by the edit engine.

    Attributes:
        old_text: Text to find, exactly or line-wise ignoring surrounding
            whitespace. May span several lines.
        new_text: Replacement text.
    """

    old_text: str
    new_text: str


@dataclass(slots=True, frozen=True)
class DiffResult:
    """Outcome of applying a sequence of edits to one file.

    Attributes:
        path: Display label used on both sides of the diff.
        diff: Raw unified diff text (empty when nothing changed).
        fence: Backtick run wrapping the diff, longer than any run inside it.
        content: Final buffer with LF line endings.
        dry_run: True if the file was left untouched on purpose.

    Example::

        result = apply_edits(resolved, [Edit("a", "b")], dry_run=True)
        print(result.render())
    """

    path: str
    diff: str
    fence: str
    content: str
    dry_run: bool

    @property
    def fenced(self) -> str:
        """Diff wrapped in a ``diff`` code fence."""
        return f"{self.fence}diff\n{self.diff}{self.fence}\n\n"

    def render(self) -> str:
        return self.fenced


# ---------------------------------------------------------------------------
# Metadata types
# ---------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class FileInfo:
    """Metadata for a file, directory, or symlink.

    Timestamps are ISO 8601 strings in UTC. ``created`` is only populated on
    platforms that report a birth time; ``symlink`` only for links.

    Attributes:
        path: Validated absolute path that was inspected.
        permissions: ``ls -l`` style mode string (e.g. ``-rw-r--r--``).
        size: Size in bytes as reported by ``lstat``.
        modified: Last modification time.
        accessed: Last access time.
        changed: Last metadata change time.
        created: Creation time when available.
        symlink: Raw link target when ``path`` is a symlink.
    """

    path: str
    permissions: str
    size: int
    modified: str
    accessed: str
    changed: str | None = None
    created: str | None = None
    symlink: str | None = None

    def to_json_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"permissions": self.permissions}
        if self.symlink is not None:
            payload["symlink"] = self.symlink
        payload["size"] = self.size
        if self.created is not None:
            payload["created"] = self.created
        payload["modified"] = self.modified
        if self.changed is not None:
            payload["changed"] = self.changed
        payload["accessed"] = self.accessed
        return payload


@dataclass(slots=True, frozen=True)
class TreeEntry:
    """Node of a directory tree listing.

    Directories within the depth bound carry a (possibly empty) ``children``
    tuple; files and directories at the bound carry ``None``.
    """

    name: str
    type: EntryType
    children: tuple[TreeEntry, ...] | None = None

    def to_json_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"name": self.name, "type": self.type}
        if self.children is not None:
            payload["children"] = [child.to_json_dict() for child in self.children]
        return payload


@dataclass(slots=True, frozen=True)
class WalkEntry:
    """Entry produced by :func:`walk`.

    Attributes:
        path: Absolute path of the entry.
        rel_path: Forward-slash path relative to the walk root.
        depth: 1 for direct children of the walk root.
        is_directory: True for real directories (symlinks never count).
    """

    path: str
    rel_path: str
    depth: int
    is_directory: bool

    @property
    def name(self) -> str:
        return os.path.basename(self.path)


__all__ = [
    "DEFAULT_TREE_DEPTH",
    "DIFF_CONTEXT_LINES",
    "AllowedRoots",
    "DiffResult",
    "Edit",
    "EntryType",
    "FileInfo",
    "ResolvedPath",
    "TreeEntry",
    "WalkEntry",
]
