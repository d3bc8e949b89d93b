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

"""Command line entry point for the ``rootfence`` executable.

Exit codes: 0 on success, 1 when the tool reports a failure, 2 for usage and
configuration errors.
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

from .config import ConfigError, ServerConfig, load_config
from .runtime.logging import StructuredLogger, configure_logging, get_logger
from .tools import FilesystemTools

_EXIT_OK = 0
_EXIT_TOOL_FAILURE = 1
_EXIT_CONFIG_ERROR = 2

__all__ = ["main"]

_ArgumentBuilder = Callable[[argparse.Namespace], dict[str, object]]


def main(argv: Sequence[str] | None = None) -> int:
    """Run the rootfence CLI."""

    parser = _build_parser()
    try:
        args = parser.parse_args(list(argv) if argv is not None else None)
    except SystemExit as exc:  # argparse exits with code 2 on errors
        code = exc.code if isinstance(exc.code, int) else _EXIT_CONFIG_ERROR
        return int(code)

    try:
        config = load_config(
            Path(args.config) if args.config is not None else None,
            {
                "allowed_directories": args.roots,
                "log_level": args.log_level,
                "log_format": args.log_format,
            },
        )
    except ConfigError as error:
        print(f"rootfence: {error}", file=sys.stderr)
        return _EXIT_CONFIG_ERROR

    configure_logging(level=config.log_level, json_mode=config.log_format == "json")
    logger = get_logger(__name__).bind(command=args.command)
    return _run_command(args, config, logger)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rootfence",
        description="Run filesystem operations confined to allowed directories.",
    )
    _ = parser.add_argument(
        "--config",
        default=None,
        help="TOML or YAML config file (default: ~/.config/rootfence/config.toml).",
    )
    _ = parser.add_argument(
        "--root",
        dest="roots",
        action="append",
        default=[],
        metavar="DIR",
        help="Allowed directory; repeat for several. Replaces configured roots.",
    )
    _ = parser.add_argument(
        "--log-level",
        choices=("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"),
        default=None,
        help="Override the log level.",
    )
    _ = parser.add_argument(
        "--log-format",
        choices=("text", "json"),
        default=None,
        help="Log output format on stderr.",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    read = commands.add_parser("read", help="Print a file.")
    _ = read.add_argument("path")

    read_many = commands.add_parser("read-many", help="Print several files.")
    _ = read_many.add_argument("paths", nargs="+")

    write = commands.add_parser("write", help="Create or overwrite a file.")
    _ = write.add_argument("path")
    _ = write.add_argument(
        "--content",
        default=None,
        help="Text to write. Read from stdin when omitted.",
    )

    edit = commands.add_parser("edit", help="Apply edits and print the diff.")
    _ = edit.add_argument("path")
    _ = edit.add_argument(
        "--edits",
        default=None,
        metavar="FILE",
        help='JSON list of {"oldText", "newText"} objects. Read from stdin '
        "when omitted.",
    )
    _ = edit.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the diff without writing the file.",
    )

    mkdir = commands.add_parser("mkdir", help="Create a directory with parents.")
    _ = mkdir.add_argument("path")

    ls = commands.add_parser("ls", help="List a directory.")
    _ = ls.add_argument("path")

    tree = commands.add_parser("tree", help="Print a JSON directory tree.")
    _ = tree.add_argument("path")
    _ = tree.add_argument("--max-depth", type=int, default=None)
    _ = tree.add_argument(
        "--pretty",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Indent the JSON output (disable with --no-pretty).",
    )

    mv = commands.add_parser("mv", help="Move or rename an entry.")
    _ = mv.add_argument("source")
    _ = mv.add_argument("destination")

    search = commands.add_parser("search", help="Find entries by name.")
    _ = search.add_argument("path")
    _ = search.add_argument("pattern")
    _ = search.add_argument(
        "--exclude",
        dest="exclude_patterns",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Gitignore-style pattern to skip; repeat for several.",
    )

    info = commands.add_parser("info", help="Print file metadata as JSON.")
    _ = info.add_argument("path")

    _ = commands.add_parser("roots", help="List the allowed directories.")

    return parser


def _read_edits(args: argparse.Namespace) -> object:
    if args.edits is None:
        text = sys.stdin.read()
    else:
        text = Path(args.edits).read_text(encoding="utf-8")
    return json.loads(text)


_COMMANDS: dict[str, tuple[str, _ArgumentBuilder]] = {
    "read": ("read_file", lambda a: {"path": a.path}),
    "read-many": ("read_multiple_files", lambda a: {"paths": list(a.paths)}),
    "write": (
        "write_file",
        lambda a: {
            "path": a.path,
            "content": a.content if a.content is not None else sys.stdin.read(),
        },
    ),
    "edit": (
        "edit_file",
        lambda a: {"path": a.path, "edits": _read_edits(a), "dryRun": a.dry_run},
    ),
    "mkdir": ("create_directory", lambda a: {"path": a.path}),
    "ls": ("list_directory", lambda a: {"path": a.path}),
    "tree": (
        "directory_tree",
        lambda a: {"path": a.path, "maxDepth": a.max_depth, "pretty": a.pretty},
    ),
    "mv": (
        "move_file",
        lambda a: {"source": a.source, "destination": a.destination},
    ),
    "search": (
        "search_files",
        lambda a: {
            "path": a.path,
            "pattern": a.pattern,
            "excludePatterns": list(a.exclude_patterns),
        },
    ),
    "info": ("get_file_info", lambda a: {"path": a.path}),
    "roots": ("list_allowed_directories", lambda a: {}),
}


def _run_command(
    args: argparse.Namespace, config: ServerConfig, logger: StructuredLogger
) -> int:
    tool_name, build_arguments = _COMMANDS[args.command]
    try:
        arguments = build_arguments(args)
    except (OSError, ValueError) as error:
        logger.warning(
            "Could not read command input.",
            event="cli.input_error",
            context={"error": str(error)},
        )
        print(f"rootfence: {error}", file=sys.stderr)
        return _EXIT_TOOL_FAILURE

    tools = FilesystemTools(config.allowed_roots)
    result = tools.call(tool_name, arguments)
    if not result.success:
        print(result.message, file=sys.stderr)
        return _EXIT_TOOL_FAILURE
    print(result.render())
    return _EXIT_OK
