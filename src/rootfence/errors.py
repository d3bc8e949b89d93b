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

"""Base exception hierarchy for :mod:`rootfence`."""

from __future__ import annotations


class RootfenceError(Exception):
    """Base class for all rootfence exceptions.

    Callers can catch every library-specific failure with a single handler
    while standard filesystem errors (``FileNotFoundError``,
    ``NotADirectoryError``, ...) keep propagating unchanged.

    Example:
        Render any rootfence failure as text::

            try:
                resolved = validate_path(raw, roots)
            except RootfenceError as e:
                return ToolResult.error(str(e))

    Note:
        Subclasses also inherit from standard exception types (``ValueError``,
        ``PermissionError``, ``LookupError``) so generic handlers still work.
    """


class InvalidPathError(RootfenceError, ValueError):
    """Raised when a requested path cannot be normalized to an absolute form.

    Empty strings, strings containing NUL characters, and paths whose absolute
    form cannot be computed (for example when the working directory has been
    removed) all end up here.
    """


class AccessDeniedError(RootfenceError, PermissionError):
    """Raised when a path fails containment validation.

    Messages always begin with ``access denied`` so callers that pattern-match
    on text can recognise containment failures.

    Attributes:
        path: The absolute form of the path the caller asked for.
    """

    def __init__(self, reason: str, path: str) -> None:
        self.path = path
        super().__init__(f"access denied - {reason}: {path}")

    def __str__(self) -> str:
        return str(self.args[0])


class OutsideAllowedRootsError(AccessDeniedError):
    """Raised when a path, a symlink hop, or its nearest existing ancestor
    lies outside every allowed root."""

    def __init__(self, path: str) -> None:
        super().__init__("path outside allowed directories", path)


class SymlinkLoopError(AccessDeniedError):
    """Raised when following symlink targets revisits a path in the same chain.

    Resolution stops at the first repeated hop, so a cycle becomes a hard
    failure instead of an infinite loop.
    """

    def __init__(self, path: str) -> None:
        super().__init__("symlink loop detected", path)


class EditNotFoundError(RootfenceError, LookupError):
    """Raised when an edit's old text matches neither exactly nor fuzzily.

    The whole edit call is abandoned and the file stays untouched, even when
    earlier edits in the same call already applied to the in-memory buffer.

    Attributes:
        old_text: The literal, unmatched old text supplied by the caller.
    """

    def __init__(self, old_text: str) -> None:
        self.old_text = old_text
        super().__init__(f"could not find exact match for edit:\n{old_text}")


class ToolValidationError(RootfenceError, ValueError):
    """Raised when tool parameters fail validation checks.

    Common causes include missing required parameters, values of the wrong
    type, and values outside allowed ranges (for example a non-positive
    ``maxDepth``).

    Example:
        Handling validation errors at the boundary::

            try:
                params = EditFileParams.from_mapping(arguments)
            except ToolValidationError as e:
                return ToolResult.error(str(e))
    """


__all__ = [
    "AccessDeniedError",
    "EditNotFoundError",
    "InvalidPathError",
    "OutsideAllowedRootsError",
    "RootfenceError",
    "SymlinkLoopError",
    "ToolValidationError",
]
