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

"""Depth-bounded directory walks that honor exclude patterns.

The walk keeps its own stack instead of recursing, visits entries in sorted
depth-first order, and never descends into symlinked directories. Excluded
directories are pruned: nothing below them is visited.
"""

from __future__ import annotations

import os
from collections.abc import Iterator

from ._exclude import ExcludeMatcher
from ._types import DEFAULT_TREE_DEPTH, TreeEntry, WalkEntry

__all__ = ["build_tree", "walk"]


def walk(
    root: str | os.PathLike[str],
    *,
    max_depth: int | None = DEFAULT_TREE_DEPTH,
    exclude: ExcludeMatcher | None = None,
) -> Iterator[WalkEntry]:
    """Yield entries below ``root`` down to ``max_depth`` levels.

    Direct children of ``root`` have depth 1 and ``None`` removes the bound.
    Subdirectories that cannot be listed are skipped; failing to list
    ``root`` itself raises.

    Raises:
        ValueError: If ``max_depth`` is not positive.
        OSError: If ``root`` cannot be listed.
    """
    if max_depth is not None and max_depth < 1:
        msg = "max_depth must be a positive integer"
        raise ValueError(msg)

    base = os.path.abspath(os.fspath(root))
    matcher = exclude if exclude is not None else ExcludeMatcher()
    stack = _children(base, base, "", 1, matcher)
    stack.reverse()
    while stack:
        entry = stack.pop()
        yield entry
        if not entry.is_directory or (
            max_depth is not None and entry.depth >= max_depth
        ):
            continue
        try:
            children = _children(
                base, entry.path, entry.rel_path, entry.depth + 1, matcher
            )
        except OSError:
            continue
        stack.extend(reversed(children))


def _children(
    base: str, directory: str, rel_dir: str, depth: int, matcher: ExcludeMatcher
) -> list[WalkEntry]:
    with os.scandir(directory) as iterator:
        entries = sorted(iterator, key=lambda item: item.name)

    children: list[WalkEntry] = []
    for item in entries:
        try:
            is_directory = item.is_dir(follow_symlinks=False)
        except OSError:
            is_directory = False
        rel_path = f"{rel_dir}/{item.name}" if rel_dir else item.name
        if matcher.matches_relative(rel_path, is_directory=is_directory):
            continue
        children.append(
            WalkEntry(
                path=os.path.join(directory, item.name),
                rel_path=rel_path,
                depth=depth,
                is_directory=is_directory,
            )
        )
    return children


def build_tree(
    root: str | os.PathLike[str],
    *,
    max_depth: int = DEFAULT_TREE_DEPTH,
    exclude: ExcludeMatcher | None = None,
) -> tuple[TreeEntry, ...]:
    """Return the nested listing of ``root``, expanding ``max_depth`` levels.

    Directories at depth ``max_depth`` or shallower carry a ``children`` tuple,
    which may be empty, so entries appear down to depth ``max_depth + 1``.
    Directories below the bound carry ``None``.

    Example::

        >>> build_tree("/srv/workspace", max_depth=1)  # doctest: +SKIP
        (TreeEntry(name='README.md', type='file', children=None),
         TreeEntry(name='src', type='directory',
                   children=(TreeEntry(name='lib', type='directory',
                                       children=None),)))
    """
    if max_depth < 1:
        msg = "max_depth must be a positive integer"
        raise ValueError(msg)
    entries = list(walk(root, max_depth=max_depth + 1, exclude=exclude))

    # Reverse pre-order visits every child before its parent.
    built: dict[str, list[TreeEntry]] = {}
    for entry in reversed(entries):
        children: tuple[TreeEntry, ...] | None = None
        if entry.is_directory and entry.depth <= max_depth:
            children = tuple(reversed(built.pop(entry.rel_path, [])))
        node = TreeEntry(
            name=entry.name,
            type="directory" if entry.is_directory else "file",
            children=children,
        )
        parent = entry.rel_path.rpartition("/")[0]
        built.setdefault(parent, []).append(node)
    return tuple(reversed(built.get("", [])))
