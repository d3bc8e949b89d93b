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

"""Containment validation for caller-supplied paths.

Every operation that touches the host filesystem first passes the raw path
through :func:`validate_path`. Validation is lexical first and then walks the
symlink chain hop by hop, so a link inside an allowed root that points
elsewhere is rejected even though the link itself is contained.

Example usage::

    from rootfence.filesystem import AllowedRoots, validate_path

    roots = AllowedRoots.from_paths(["/srv/workspace"])
    resolved = validate_path("/srv/workspace/src/../README.md", roots)
    assert resolved.path == "/srv/workspace/README.md"

Paths that do not exist yet (write targets, new directories, move
destinations) are validated through their nearest existing ancestor.
"""

from __future__ import annotations

import os
from typing import Final

from ..errors import OutsideAllowedRootsError, SymlinkLoopError
from ._path import clean_absolute
from ._types import AllowedRoots, ResolvedPath

#: Upper bound on symlink hops followed for one request, mirroring the
#: kernel's own ``MAXSYMLINKS`` limit.
MAX_SYMLINK_HOPS: Final[int] = 40

__all__ = ["MAX_SYMLINK_HOPS", "validate_path"]


def validate_path(requested: str, allowed_roots: AllowedRoots) -> ResolvedPath:
    """Validate ``requested`` against ``allowed_roots``.

    Args:
        requested: Raw path from the caller. ``~`` is expanded and relative
            paths are taken from the current working directory.
        allowed_roots: The immutable root configuration.

    Returns:
        The cleaned absolute form of ``requested``; symlinks are checked but
        never substituted into the returned path.

    Raises:
        InvalidPathError: If the path cannot be made absolute.
        OutsideAllowedRootsError: If the path, any symlink hop, or the
            nearest existing ancestor lies outside every root.
        SymlinkLoopError: If the symlink chain revisits a hop or exceeds
            :data:`MAX_SYMLINK_HOPS`.
    """
    cleaned = clean_absolute(requested)
    _ensure_contained(cleaned, allowed_roots)
    root = allowed_roots.containing(cleaned)
    if root is None:  # pragma: no cover - _ensure_contained checked this
        raise OutsideAllowedRootsError(cleaned)
    return ResolvedPath(path=cleaned, requested=requested, root=root)


def _ensure_contained(cleaned: str, roots: AllowedRoots) -> None:
    visited: set[str] = set()
    followed: set[str] = set()
    current = cleaned
    for _ in range(MAX_SYMLINK_HOPS + 1):
        visited.add(current)
        link = _next_link(current, roots, display=cleaned)
        if link is None:
            # Link targets with ".." are only resolved lexically above; the
            # kernel resolves them physically.
            if roots.containing(os.path.realpath(cleaned)) is None:
                raise OutsideAllowedRootsError(cleaned)
            return
        if link in followed:
            raise SymlinkLoopError(cleaned)
        followed.add(link)
        target = _link_target(link, current, display=cleaned)
        if target in visited:
            raise SymlinkLoopError(cleaned)
        current = target
    raise SymlinkLoopError(cleaned)


def _next_link(candidate: str, roots: AllowedRoots, *, display: str) -> str | None:
    """Return the symlink to follow next, or ``None`` once containment holds."""
    if roots.containing(candidate) is None:
        raise OutsideAllowedRootsError(display)

    existing = _nearest_existing(candidate, roots, display=display)
    if os.path.islink(existing):
        return existing

    # Intermediate directories may themselves be symlinks; the fully
    # resolved location must still be inside a root.
    if roots.containing(os.path.realpath(existing)) is None:
        raise OutsideAllowedRootsError(display)
    return None


def _nearest_existing(candidate: str, roots: AllowedRoots, *, display: str) -> str:
    current = candidate
    while not os.path.lexists(current):
        parent = os.path.dirname(current)
        if parent == current or roots.containing(parent) is None:
            raise OutsideAllowedRootsError(display)
        current = parent
    return current


def _link_target(link: str, candidate: str, *, display: str) -> str:
    """Join ``link``'s target with whatever part of ``candidate`` lies below it."""
    try:
        raw_target = os.readlink(link)
    except OSError:
        raise OutsideAllowedRootsError(display) from None

    # Relative targets resolve against the physical directory holding the link.
    base = os.path.realpath(os.path.dirname(link))
    target = os.path.normpath(os.path.join(base, raw_target))
    if candidate != link:
        target = os.path.join(target, os.path.relpath(candidate, link))
    return os.path.normpath(target)
