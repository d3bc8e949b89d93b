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

"""Typed parameters for the filesystem tools.

Each dataclass validates untyped request arguments once in ``from_mapping``
so handlers only ever see well-formed values. Argument keys use the camelCase
names agents send (``dryRun``, ``maxDepth``, ``excludePatterns``); the
snake_case spellings are accepted as well.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Final, cast

from ..errors import ToolValidationError
from ..filesystem import DEFAULT_TREE_DEPTH, Edit

_MISSING: Final = object()

__all__ = [
    "CreateDirectoryParams",
    "DirectoryTreeParams",
    "EditFileParams",
    "GetFileInfoParams",
    "ListDirectoryParams",
    "MoveFileParams",
    "ReadFileParams",
    "ReadMultipleFilesParams",
    "SearchFilesParams",
    "WriteFileParams",
    "parse_edits",
]


# ---------------------------------------------------------------------------
# Argument helpers
# ---------------------------------------------------------------------------


def _lookup(arguments: Mapping[str, object], *keys: str) -> object:
    for key in keys:
        if key in arguments:
            return arguments[key]
    return _MISSING


def _require_str(arguments: Mapping[str, object], *keys: str) -> str:
    value = _lookup(arguments, *keys)
    if value is _MISSING or value is None:
        raise ToolValidationError(f"{keys[0]} is required")
    if not isinstance(value, str):
        raise ToolValidationError(f"{keys[0]} must be a string")
    return value


def _optional_bool(
    arguments: Mapping[str, object], *keys: str, default: bool
) -> bool:
    value = _lookup(arguments, *keys)
    if value is _MISSING or value is None:
        return default
    if not isinstance(value, bool):
        raise ToolValidationError(f"{keys[0]} must be a boolean")
    return value


def _string_list(
    arguments: Mapping[str, object], *keys: str, required: bool
) -> tuple[str, ...]:
    value = _lookup(arguments, *keys)
    if value is _MISSING or value is None:
        if required:
            raise ToolValidationError(f"{keys[0]} is required")
        return ()
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise ToolValidationError(f"{keys[0]} must be an array of strings")
    items = cast(Sequence[object], value)
    if not all(isinstance(item, str) for item in items):
        raise ToolValidationError(f"{keys[0]} must be an array of strings")
    return tuple(cast(Sequence[str], items))


def _depth(arguments: Mapping[str, object], *keys: str, default: int) -> int:
    value = _lookup(arguments, *keys)
    if value is _MISSING or value is None:
        return default
    # JSON numbers may arrive as floats; bools are ints but never depths.
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ToolValidationError(f"{keys[0]} must be a positive integer")
    # Zero asks for the default bound.
    return value or default


def parse_edits(raw: object) -> tuple[Edit, ...]:
    """Validate an untyped edit list into :class:`Edit` values.

    Each item needs non-empty ``oldText`` and string ``newText`` keys
    (``old_text``/``new_text`` also work).

    Raises:
        ToolValidationError: If the list or any item is malformed.
    """
    if raw is None:
        raise ToolValidationError("edits is required")
    if isinstance(raw, str) or not isinstance(raw, Sequence):
        raise ToolValidationError("edits must be an array")

    edits: list[Edit] = []
    for index, item in enumerate(cast(Sequence[object], raw)):
        if not isinstance(item, Mapping):
            raise ToolValidationError(f"edits[{index}] must be an object")
        entry = cast(Mapping[str, object], item)
        try:
            old_text = _require_str(entry, "oldText", "old_text")
            new_text = _require_str(entry, "newText", "new_text")
        except ToolValidationError as error:
            raise ToolValidationError(f"edits[{index}]: {error}") from None
        if not old_text:
            raise ToolValidationError(f"edits[{index}]: oldText must not be empty")
        edits.append(Edit(old_text=old_text, new_text=new_text))
    return tuple(edits)


# ---------------------------------------------------------------------------
# Parameter types
# ---------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class ReadFileParams:
    path: str = field(metadata={"description": "File to read."})

    @classmethod
    def from_mapping(cls, arguments: Mapping[str, object]) -> ReadFileParams:
        return cls(path=_require_str(arguments, "path"))


@dataclass(slots=True, frozen=True)
class ReadMultipleFilesParams:
    paths: tuple[str, ...] = field(
        metadata={"description": "Files to read. Failures are reported per file."}
    )

    @classmethod
    def from_mapping(cls, arguments: Mapping[str, object]) -> ReadMultipleFilesParams:
        return cls(paths=_string_list(arguments, "paths", required=True))


@dataclass(slots=True, frozen=True)
class WriteFileParams:
    path: str = field(metadata={"description": "File to create or overwrite."})
    content: str = field(metadata={"description": "Full text to write."})

    @classmethod
    def from_mapping(cls, arguments: Mapping[str, object]) -> WriteFileParams:
        return cls(
            path=_require_str(arguments, "path"),
            content=_require_str(arguments, "content"),
        )


@dataclass(slots=True, frozen=True)
class EditFileParams:
    path: str = field(metadata={"description": "File to edit."})
    edits: tuple[Edit, ...] = field(
        metadata={"description": "Replacements applied in order; all or nothing."}
    )
    dry_run: bool = field(
        default=False,
        metadata={"description": "Preview the diff without writing the file."},
    )

    @classmethod
    def from_mapping(cls, arguments: Mapping[str, object]) -> EditFileParams:
        edits = _lookup(arguments, "edits")
        return cls(
            path=_require_str(arguments, "path"),
            edits=parse_edits(None if edits is _MISSING else edits),
            dry_run=_optional_bool(arguments, "dryRun", "dry_run", default=False),
        )


@dataclass(slots=True, frozen=True)
class CreateDirectoryParams:
    path: str = field(metadata={"description": "Directory to create with parents."})

    @classmethod
    def from_mapping(cls, arguments: Mapping[str, object]) -> CreateDirectoryParams:
        return cls(path=_require_str(arguments, "path"))


@dataclass(slots=True, frozen=True)
class ListDirectoryParams:
    path: str = field(metadata={"description": "Directory to list."})

    @classmethod
    def from_mapping(cls, arguments: Mapping[str, object]) -> ListDirectoryParams:
        return cls(path=_require_str(arguments, "path"))


@dataclass(slots=True, frozen=True)
class DirectoryTreeParams:
    path: str = field(metadata={"description": "Directory at the top of the tree."})
    max_depth: int = field(
        default=DEFAULT_TREE_DEPTH,
        metadata={"description": "Levels to expand. Zero or omitted means 100."},
    )
    pretty: bool = field(
        default=True,
        metadata={"description": "Indent the JSON output by two spaces."},
    )

    @classmethod
    def from_mapping(cls, arguments: Mapping[str, object]) -> DirectoryTreeParams:
        return cls(
            path=_require_str(arguments, "path"),
            max_depth=_depth(
                arguments, "maxDepth", "max_depth", default=DEFAULT_TREE_DEPTH
            ),
            pretty=_optional_bool(arguments, "pretty", default=True),
        )


@dataclass(slots=True, frozen=True)
class MoveFileParams:
    source: str = field(metadata={"description": "Existing file or directory."})
    destination: str = field(metadata={"description": "New path; must not exist."})

    @classmethod
    def from_mapping(cls, arguments: Mapping[str, object]) -> MoveFileParams:
        return cls(
            source=_require_str(arguments, "source"),
            destination=_require_str(arguments, "destination"),
        )


@dataclass(slots=True, frozen=True)
class SearchFilesParams:
    path: str = field(metadata={"description": "Directory to search under."})
    pattern: str = field(
        metadata={"description": "Case-insensitive substring matched on names."}
    )
    exclude_patterns: tuple[str, ...] = field(
        default=(),
        metadata={"description": "Gitignore-style patterns pruned from the walk."},
    )

    @classmethod
    def from_mapping(cls, arguments: Mapping[str, object]) -> SearchFilesParams:
        return cls(
            path=_require_str(arguments, "path"),
            pattern=_require_str(arguments, "pattern"),
            exclude_patterns=_string_list(
                arguments, "excludePatterns", "exclude_patterns", required=False
            ),
        )


@dataclass(slots=True, frozen=True)
class GetFileInfoParams:
    path: str = field(metadata={"description": "File, directory, or symlink."})

    @classmethod
    def from_mapping(cls, arguments: Mapping[str, object]) -> GetFileInfoParams:
        return cls(path=_require_str(arguments, "path"))
