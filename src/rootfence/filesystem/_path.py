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

"""Shared lexical path utilities.

None of these helpers follow symlinks; the only filesystem access is reading
the current working directory and the home directory.

Functions:
    expand_home: Expand a leading ``~`` or ``~/`` to the user's home directory
    clean_absolute: Make a path absolute and collapse ``.``/``..`` segments
    is_path_under: Segment-aware containment check for absolute paths
    relative_posix: Forward-slash path of a candidate relative to a base
"""

from __future__ import annotations

import os
from pathlib import Path

from ..errors import InvalidPathError


def expand_home(path: str) -> str:
    """Expand ``~`` and ``~/...`` to the home directory.

    Other ``~user`` forms are left alone so an untrusted caller cannot inspect
    other accounts' home directories.

    Examples:
        >>> expand_home("relative/file.txt")
        'relative/file.txt'
    """
    if path == "~" or path.startswith("~/"):
        return str(Path.home()) + path[1:]
    return path


def clean_absolute(path: str) -> str:
    """Return the absolute, lexically clean form of ``path``.

    Raises:
        InvalidPathError: If the path is empty, contains NUL, or the current
            working directory cannot be determined.
    """
    if not path:
        raise InvalidPathError("invalid path: path must not be empty")
    if "\x00" in path:
        raise InvalidPathError("invalid path: path must not contain NUL bytes")
    try:
        absolute = os.path.abspath(expand_home(path))
    except OSError as err:
        raise InvalidPathError(f"invalid path: {err}") from err
    return os.path.normpath(absolute)


def _segments(path: str) -> list[str]:
    return [segment for segment in path.split(os.sep) if segment]


def is_path_under(path: str, base: str) -> bool:
    """Check if an absolute clean path equals ``base`` or descends from it.

    The comparison is made on whole path segments, so ``/allowed`` contains
    ``/allowed/file`` but not ``/allowed2``.

    Examples:
        >>> is_path_under("/srv/data/file.txt", "/srv/data")
        True
        >>> is_path_under("/srv/data2", "/srv/data")
        False
        >>> is_path_under("/srv/data", "/srv/data")
        True
    """
    base_segments = _segments(base)
    path_segments = _segments(path)
    if len(path_segments) < len(base_segments):
        return False
    return path_segments[: len(base_segments)] == base_segments


def relative_posix(path: str, base: str) -> str | None:
    """Return ``path`` relative to ``base`` with forward slashes.

    Returns ``None`` when ``path`` is not under ``base`` and ``"."`` when the
    two are equal.
    """
    if not is_path_under(path, base):
        return None
    relative = os.path.relpath(path, base)
    return relative.replace(os.sep, "/")


__all__ = [
    "clean_absolute",
    "expand_home",
    "is_path_under",
    "relative_posix",
]
