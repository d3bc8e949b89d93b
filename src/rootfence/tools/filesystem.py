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

"""Filesystem tool suite confined to the allowed roots.

Every handler validates its paths with :func:`validate_path` before touching
the disk and converts containment, edit, and ``OSError`` failures into a
``ToolResult`` with ``success=False``. Nothing raised by the core escapes a
handler.

Example usage::

    tools = FilesystemTools(AllowedRoots.from_paths(["/srv/workspace"]))
    result = tools.call("read_file", {"path": "/srv/workspace/README.md"})
    print(result.message)
"""

from __future__ import annotations

import json
import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Final

from ..errors import RootfenceError, ToolValidationError
from ..filesystem import (
    AllowedRoots,
    DiffResult,
    ExcludeMatcher,
    FileInfo,
    TreeEntry,
    apply_edits,
    build_tree,
    file_info,
    validate_path,
    walk,
)
from ..runtime.logging import StructuredLogger, get_logger
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
)
from ._result import ToolResult

_ENCODING: Final[str] = "utf-8"
_MULTI_FILE_SEPARATOR: Final[str] = "\n---\n"

__all__ = ["TOOL_NAMES", "FilesystemTools", "describe_error"]

TOOL_NAMES: Final[tuple[str, ...]] = (
    "read_file",
    "read_multiple_files",
    "write_file",
    "edit_file",
    "create_directory",
    "list_directory",
    "directory_tree",
    "move_file",
    "search_files",
    "get_file_info",
    "list_allowed_directories",
)


def describe_error(error: Exception) -> str:
    """Render a core or OS failure as caller-facing text."""
    if isinstance(error, RootfenceError):
        return str(error)
    if isinstance(error, OSError) and error.strerror:
        if error.filename is not None:
            return f"{error.strerror}: {error.filename}"
        return error.strerror
    return str(error)


class FilesystemTools:
    """Handlers for the file operations exposed to an agent.

    Handlers take typed params and return ``ToolResult`` values;
    :meth:`call` accepts untyped arguments by tool name and validates them
    first.
    """

    def __init__(
        self,
        allowed_roots: AllowedRoots,
        *,
        logger: StructuredLogger | None = None,
    ) -> None:
        super().__init__()
        self._roots = allowed_roots
        self._logger = logger or get_logger(__name__)

    @property
    def allowed_roots(self) -> AllowedRoots:
        return self._roots

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def call(self, name: str, arguments: Mapping[str, object]) -> ToolResult[Any]:
        """Validate ``arguments`` for tool ``name`` and run it."""
        if name == "list_allowed_directories":
            return self.list_allowed_directories()
        parsers: dict[str, Callable[[Mapping[str, object]], ToolResult[Any]]] = {
            "read_file": lambda a: self.read_file(ReadFileParams.from_mapping(a)),
            "read_multiple_files": lambda a: self.read_multiple_files(
                ReadMultipleFilesParams.from_mapping(a)
            ),
            "write_file": lambda a: self.write_file(WriteFileParams.from_mapping(a)),
            "edit_file": lambda a: self.edit_file(EditFileParams.from_mapping(a)),
            "create_directory": lambda a: self.create_directory(
                CreateDirectoryParams.from_mapping(a)
            ),
            "list_directory": lambda a: self.list_directory(
                ListDirectoryParams.from_mapping(a)
            ),
            "directory_tree": lambda a: self.directory_tree(
                DirectoryTreeParams.from_mapping(a)
            ),
            "move_file": lambda a: self.move_file(MoveFileParams.from_mapping(a)),
            "search_files": lambda a: self.search_files(
                SearchFilesParams.from_mapping(a)
            ),
            "get_file_info": lambda a: self.get_file_info(
                GetFileInfoParams.from_mapping(a)
            ),
        }
        handler = parsers.get(name)
        if handler is None:
            return self._fail(name, ToolValidationError(f"unknown tool: {name}"))
        try:
            return handler(arguments)
        except ToolValidationError as error:
            return self._fail(name, error)

    def _run[T](
        self, tool: str, operation: Callable[[], ToolResult[T]]
    ) -> ToolResult[T]:
        log = self._logger.bind(tool=tool)
        log.debug("Running filesystem tool.", event="filesystem.tool.invoke")
        try:
            result = operation()
        except (RootfenceError, OSError) as error:
            return self._fail(tool, error)
        if result.success:
            log.debug("Filesystem tool succeeded.", event="filesystem.tool.success")
        else:
            log.warning(
                "Filesystem tool failed.",
                event="filesystem.tool.error",
                context={"error_type": "rejected", "message": result.message},
            )
        return result

    def _fail[T](self, tool: str, error: Exception) -> ToolResult[T]:
        message = describe_error(error)
        self._logger.warning(
            "Filesystem tool failed.",
            event="filesystem.tool.error",
            context={
                "tool": tool,
                "error_type": type(error).__name__,
                "message": message,
            },
        )
        return ToolResult.error(message)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def read_file(self, params: ReadFileParams) -> ToolResult[str]:
        """Return the full text of one file."""

        def operation() -> ToolResult[str]:
            content = self._read_text(params.path)
            return ToolResult.ok(content, content)

        return self._run("read_file", operation)

    def read_multiple_files(
        self, params: ReadMultipleFilesParams
    ) -> ToolResult[tuple[str, ...]]:
        """Read several files; a failure is reported inline for that file only."""

        def operation() -> ToolResult[tuple[str, ...]]:
            sections: list[str] = []
            for path in params.paths:
                try:
                    content = self._read_text(path)
                except (RootfenceError, OSError) as error:
                    sections.append(f"{path}: Error - {describe_error(error)}")
                else:
                    sections.append(f"{path}:\n{content}")
            return ToolResult.ok(_MULTI_FILE_SEPARATOR.join(sections), tuple(sections))

        return self._run("read_multiple_files", operation)

    def write_file(self, params: WriteFileParams) -> ToolResult[str]:
        """Create or overwrite a file with the given content."""

        def operation() -> ToolResult[str]:
            resolved = validate_path(params.path, self._roots)
            _ = Path(resolved).write_bytes(params.content.encode(_ENCODING))
            return ToolResult.ok(f"Successfully wrote to {params.path}", resolved.path)

        return self._run("write_file", operation)

    def edit_file(self, params: EditFileParams) -> ToolResult[DiffResult]:
        """Apply line-based edits and return a fenced unified diff."""

        def operation() -> ToolResult[DiffResult]:
            resolved = validate_path(params.path, self._roots)
            result = apply_edits(
                resolved,
                params.edits,
                display_path=params.path,
                dry_run=params.dry_run,
            )
            return ToolResult.ok(result.render(), result)

        return self._run("edit_file", operation)

    def create_directory(self, params: CreateDirectoryParams) -> ToolResult[str]:
        """Create a directory and any missing parents."""

        def operation() -> ToolResult[str]:
            resolved = validate_path(params.path, self._roots)
            os.makedirs(resolved, exist_ok=True)
            return ToolResult.ok(
                f"Successfully created directory {params.path}", resolved.path
            )

        return self._run("create_directory", operation)

    def list_directory(
        self, params: ListDirectoryParams
    ) -> ToolResult[tuple[TreeEntry, ...]]:
        """List direct children with ``[DIR]``/``[FILE]`` prefixes."""

        def operation() -> ToolResult[tuple[TreeEntry, ...]]:
            resolved = validate_path(params.path, self._roots)
            with os.scandir(resolved) as iterator:
                entries = tuple(
                    TreeEntry(
                        name=item.name,
                        type="directory"
                        if item.is_dir(follow_symlinks=False)
                        else "file",
                    )
                    for item in sorted(iterator, key=lambda item: item.name)
                )
            if not entries:
                return ToolResult.ok("Empty directory", entries)
            lines = [
                f"{'[DIR]' if entry.type == 'directory' else '[FILE]'} {entry.name}"
                for entry in entries
            ]
            return ToolResult.ok("\n".join(lines), entries)

        return self._run("list_directory", operation)

    def directory_tree(
        self, params: DirectoryTreeParams
    ) -> ToolResult[tuple[TreeEntry, ...]]:
        """Return a JSON tree of entries below a directory."""

        def operation() -> ToolResult[tuple[TreeEntry, ...]]:
            resolved = validate_path(params.path, self._roots)
            tree = build_tree(resolved, max_depth=params.max_depth)
            payload = [entry.to_json_dict() for entry in tree]
            if params.pretty:
                text = json.dumps(payload, indent=2, ensure_ascii=False)
            else:
                text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
            return ToolResult.ok(text, tree)

        return self._run("directory_tree", operation)

    def move_file(self, params: MoveFileParams) -> ToolResult[str]:
        """Move or rename an entry; the destination must not exist."""

        def operation() -> ToolResult[str]:
            source = validate_path(params.source, self._roots)
            destination = validate_path(params.destination, self._roots)
            if os.path.lexists(destination):
                return ToolResult.error("Destination already exists")
            os.rename(source, destination)
            return ToolResult.ok(
                f"Successfully moved {params.source} to {params.destination}",
                destination.path,
            )

        return self._run("move_file", operation)

    def search_files(self, params: SearchFilesParams) -> ToolResult[tuple[str, ...]]:
        """Find entries whose names contain a case-insensitive substring."""

        def operation() -> ToolResult[tuple[str, ...]]:
            exclude = ExcludeMatcher.compile(params.exclude_patterns)
            resolved = validate_path(params.path, self._roots)
            if not os.path.isdir(resolved):
                return ToolResult.error("Path must be a directory")
            needle = params.pattern.lower()
            matches = tuple(
                entry.path
                for entry in walk(resolved, max_depth=None, exclude=exclude)
                if needle in entry.name.lower()
            )
            if not matches:
                return ToolResult.ok("No matches found", matches)
            return ToolResult.ok("\n".join(matches), matches)

        return self._run("search_files", operation)

    def get_file_info(self, params: GetFileInfoParams) -> ToolResult[FileInfo]:
        """Return permissions, size, and timestamps as JSON."""

        def operation() -> ToolResult[FileInfo]:
            resolved = validate_path(params.path, self._roots)
            info = file_info(resolved)
            return ToolResult.ok(json.dumps(info.to_json_dict()), info)

        return self._run("get_file_info", operation)

    def list_allowed_directories(self) -> ToolResult[tuple[str, ...]]:
        """Return the configured roots, one per line."""

        def operation() -> ToolResult[tuple[str, ...]]:
            roots = self._roots.roots
            return ToolResult.ok("Allowed directories:\n" + "\n".join(roots), roots)

        return self._run("list_allowed_directories", operation)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _read_text(self, path: str) -> str:
        resolved = validate_path(path, self._roots)
        return Path(resolved).read_bytes().decode(_ENCODING, errors="replace")
