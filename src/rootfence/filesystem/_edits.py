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

"""Multi-edit text patching with whitespace-tolerant matching.

Edits are applied left to right against an in-memory buffer. Each edit first
tries an exact substring match; failing that, it looks for the first window
of lines equal to the old text once surrounding whitespace is ignored, and
re-indents the replacement to fit the matched window.

The file is only written after every edit has applied, and only once, so a
failing edit leaves the file byte-identical to its state before the call.

Example usage::

    result = apply_edits(
        resolved,
        [Edit(old_text="Line 2", new_text="Modified Line 2")],
        display_path="notes.txt",
    )
    print(result.render())
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from difflib import unified_diff
from pathlib import Path
from typing import Final, Literal

from ..errors import EditNotFoundError
from ._types import DIFF_CONTEXT_LINES, DiffResult, Edit, ResolvedPath

LineEnding = Literal["\n", "\r\n"]

_LEADING_WHITESPACE: Final[re.Pattern[str]] = re.compile(r"^\s*")
_FILE_ENCODING: Final[str] = "utf-8"
_ENCODING_ERRORS: Final[str] = "surrogateescape"
_MIN_FENCE: Final[int] = 3

__all__ = [
    "LineEnding",
    "apply_edits",
    "apply_edits_to_text",
    "detect_line_ending",
    "fence_for",
    "normalize_line_endings",
    "unified_diff_text",
]


def detect_line_ending(text: str) -> LineEnding:
    """Return the dominant line ending of ``text``.

    CRLF wins only when it strictly outnumbers bare LF; ties and files without
    line breaks resolve to LF.

    Examples:
        >>> detect_line_ending("a\\r\\nb\\r\\nc\\n")
        '\\r\\n'
        >>> detect_line_ending("a\\r\\nb\\n")
        '\\n'
    """
    crlf_count = text.count("\r\n")
    lf_count = text.count("\n") - crlf_count
    return "\r\n" if crlf_count > lf_count else "\n"


def normalize_line_endings(text: str) -> str:
    """Convert every CRLF in ``text`` to LF."""
    return text.replace("\r\n", "\n")


def apply_edits_to_text(content: str, edits: Sequence[Edit]) -> str:
    """Apply ``edits`` in order to LF-normalized ``content``.

    Raises:
        EditNotFoundError: On the first edit whose old text cannot be located.
    """
    buffer = content
    for edit in edits:
        buffer = _apply_one(buffer, edit)
    return buffer


def _apply_one(buffer: str, edit: Edit) -> str:
    old = normalize_line_endings(edit.old_text)
    new = normalize_line_endings(edit.new_text)

    if old in buffer:
        return buffer.replace(old, new, 1)

    buffer_lines = buffer.split("\n")
    old_lines = old.split("\n")
    start = _find_fuzzy_window(buffer_lines, old_lines)
    if start is None:
        raise EditNotFoundError(edit.old_text)

    replacement = _reindent(new.split("\n"), old_lines, buffer_lines[start])
    buffer_lines[start : start + len(old_lines)] = replacement
    return "\n".join(buffer_lines)


def _find_fuzzy_window(buffer_lines: list[str], old_lines: list[str]) -> int | None:
    wanted = [line.strip() for line in old_lines]
    window = len(wanted)
    for start in range(len(buffer_lines) - window + 1):
        if all(
            buffer_lines[start + offset].strip() == expected
            for offset, expected in enumerate(wanted)
        ):
            return start
    return None


def _indent_of(line: str) -> str:
    match = _LEADING_WHITESPACE.match(line)
    return match.group(0) if match else ""


def _reindent(new_lines: list[str], old_lines: list[str], anchor: str) -> list[str]:
    base_indent = _indent_of(anchor)
    adjusted: list[str] = []
    for index, line in enumerate(new_lines):
        stripped = line.lstrip(" \t")
        if index == 0:
            adjusted.append(base_indent + stripped)
            continue
        if not line.strip():
            adjusted.append("")
            continue
        old_indent = len(_indent_of(old_lines[index])) if index < len(old_lines) else 0
        extra = len(_indent_of(line)) - old_indent
        if extra > 0:
            adjusted.append(base_indent + " " * extra + stripped)
        else:
            adjusted.append(base_indent + stripped)
    return adjusted


def unified_diff_text(original: str, updated: str, label: str) -> str:
    """Return a unified diff of two LF-normalized buffers.

    Every emitted line ends with a newline, including a final line that had
    none in the source buffer.
    """
    lines = unified_diff(
        _split_lines(original),
        _split_lines(updated),
        fromfile=label,
        tofile=label,
        n=DIFF_CONTEXT_LINES,
    )
    return "".join(line if line.endswith("\n") else f"{line}\n" for line in lines)


def _split_lines(text: str) -> list[str]:
    # str.splitlines also breaks on \r, \x0c and other separators.
    lines = [f"{line}\n" for line in text.split("\n")]
    lines[-1] = lines[-1][:-1]
    if not lines[-1]:
        _ = lines.pop()
    return lines


def fence_for(text: str) -> str:
    """Return the shortest backtick fence (at least three) absent from ``text``."""
    width = _MIN_FENCE
    while "`" * width in text:
        width += 1
    return "`" * width


def apply_edits(
    resolved: ResolvedPath,
    edits: Sequence[Edit],
    *,
    display_path: str | None = None,
    dry_run: bool = False,
) -> DiffResult:
    """Apply ``edits`` to the file at ``resolved`` and return the diff.

    Args:
        resolved: A path that already passed :func:`validate_path`.
        edits: Ordered replacements; all must apply for anything to be written.
        display_path: Label for both sides of the diff. Defaults to the path
            the caller originally requested.
        dry_run: Compute the diff without touching the file.

    Raises:
        EditNotFoundError: If any edit fails to match. Nothing is written.
        OSError: Read and write failures propagate unchanged.
    """
    target = Path(resolved)
    original = target.read_bytes().decode(_FILE_ENCODING, errors=_ENCODING_ERRORS)
    line_ending = detect_line_ending(original)
    content = normalize_line_endings(original)

    updated = apply_edits_to_text(content, edits)

    label = display_path if display_path is not None else resolved.requested
    diff = unified_diff_text(content, updated, label)
    result = DiffResult(
        path=label,
        diff=diff,
        fence=fence_for(diff),
        content=updated,
        dry_run=dry_run,
    )

    if not dry_run:
        final = updated.replace("\n", "\r\n") if line_ending == "\r\n" else updated
        _ = target.write_bytes(final.encode(_FILE_ENCODING, errors=_ENCODING_ERRORS))
    return result
