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

"""Metadata collection for validated paths."""

from __future__ import annotations

import os
import stat
from datetime import UTC, datetime

from ._types import FileInfo, ResolvedPath

__all__ = ["file_info", "format_timestamp"]


def format_timestamp(seconds: float) -> str:
    """Render a POSIX timestamp as an ISO 8601 UTC string.

    Examples:
        >>> format_timestamp(0)
        '1970-01-01T00:00:00+00:00'
    """
    return datetime.fromtimestamp(seconds, tz=UTC).isoformat(timespec="seconds")


def file_info(resolved: ResolvedPath) -> FileInfo:
    """Describe ``resolved`` without following a final symlink.

    Raises:
        OSError: If the entry cannot be stat'ed or its link target read.
    """
    status = os.lstat(resolved)
    symlink = os.readlink(resolved) if stat.S_ISLNK(status.st_mode) else None
    birth_time: float | None = getattr(status, "st_birthtime", None)

    return FileInfo(
        path=resolved.path,
        permissions=stat.filemode(status.st_mode),
        size=status.st_size,
        modified=format_timestamp(status.st_mtime),
        accessed=format_timestamp(status.st_atime),
        changed=format_timestamp(status.st_ctime),
        created=format_timestamp(birth_time) if birth_time is not None else None,
        symlink=symlink,
    )
