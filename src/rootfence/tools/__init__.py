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

"""Agent-facing filesystem tools built on :mod:`rootfence.filesystem`."""

from __future__ import annotations

from ._params import (
    CreateDirectoryParams,
    DirectoryTreeParams,
    EditFileParams,
    GetFileInfoParams,
    ListDirectoryParams,
    MoveFileParams,
    ReadFileParams,
    ReadMultipleFilesParams,
    SearchFilesParams,
    WriteFileParams,
    parse_edits,
)
from ._result import ToolResult
from .filesystem import TOOL_NAMES, FilesystemTools, describe_error

__all__ = [
    "TOOL_NAMES",
    "CreateDirectoryParams",
    "DirectoryTreeParams",
    "EditFileParams",
    "FilesystemTools",
    "GetFileInfoParams",
    "ListDirectoryParams",
    "MoveFileParams",
    "ReadFileParams",
    "ReadMultipleFilesParams",
    "SearchFilesParams",
    "ToolResult",
    "WriteFileParams",
    "describe_error",
    "parse_edits",
]
