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

"""Containment-checked filesystem primitives.

This package holds the security boundary: every caller-supplied path goes
through :func:`validate_path` before any I/O, edits are applied all-or-nothing
by :func:`apply_edits`, and recursive listings are filtered by
:class:`ExcludeMatcher`.

Example usage::

    from rootfence.filesystem import AllowedRoots, Edit, apply_edits, validate_path

    roots = AllowedRoots.from_paths(["/srv/workspace"])
    resolved = validate_path("/srv/workspace/notes.txt", roots)
    result = apply_edits(resolved, [Edit("draft", "final")], dry_run=True)
    print(result.render())

Nothing in this package logs; errors are raised as typed exceptions from
:mod:`rootfence.errors` or as plain ``OSError``.
"""

from __future__ import annotations

from ._edits import (
    apply_edits,
    apply_edits_to_text,
    detect_line_ending,
    fence_for,
    normalize_line_endings,
    unified_diff_text,
)
from ._exclude import ExcludeMatcher, ExcludePattern, compile_pattern, translate_glob
from ._guard import MAX_SYMLINK_HOPS, validate_path
from ._info import file_info, format_timestamp
from ._path import clean_absolute, expand_home, is_path_under, relative_posix
from ._types import (
    DEFAULT_TREE_DEPTH,
    DIFF_CONTEXT_LINES,
    AllowedRoots,
    DiffResult,
    Edit,
    EntryType,
    FileInfo,
    ResolvedPath,
    TreeEntry,
    WalkEntry,
)
from ._walk import build_tree, walk

__all__ = [
    "DEFAULT_TREE_DEPTH",
    "DIFF_CONTEXT_LINES",
    "MAX_SYMLINK_HOPS",
    "AllowedRoots",
    "DiffResult",
    "Edit",
    "EntryType",
    "ExcludeMatcher",
    "ExcludePattern",
    "FileInfo",
    "ResolvedPath",
    "TreeEntry",
    "WalkEntry",
    "apply_edits",
    "apply_edits_to_text",
    "build_tree",
    "clean_absolute",
    "compile_pattern",
    "detect_line_ending",
    "expand_home",
    "fence_for",
    "file_info",
    "format_timestamp",
    "is_path_under",
    "normalize_line_endings",
    "relative_posix",
    "translate_glob",
    "unified_diff_text",
    "validate_path",
    "walk",
]
