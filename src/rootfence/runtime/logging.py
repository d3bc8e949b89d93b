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

"""Structured logging for the rootfence tool boundary and CLI.

Every record carries an ``event`` name and a ``context`` mapping so the JSON
formatter can emit one machine-readable object per line::

    logger = get_logger(__name__).bind(tool="read_file")
    logger.debug("Reading file.", event="filesystem.tool.invoke",
                 context={"path": "/srv/workspace/a.txt"})

The filesystem core never logs; only :mod:`rootfence.tools` and
:mod:`rootfence.cli` do.
"""

from __future__ import annotations

import json
import logging
import logging.config
import os
from collections.abc import Mapping, MutableMapping
from datetime import UTC, datetime
from typing import Any, Final, cast, override

__all__ = [
    "LOG_FORMAT_ENV",
    "LOG_LEVEL_ENV",
    "StructuredLogger",
    "configure_logging",
    "get_logger",
    "parse_level",
]

LOG_LEVEL_ENV: Final[str] = "ROOTFENCE_LOG_LEVEL"
LOG_FORMAT_ENV: Final[str] = "ROOTFENCE_LOG_FORMAT"

_LEVEL_NAMES: Final[Mapping[str, int]] = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "NOTSET": logging.NOTSET,
}


class StructuredLogger(logging.LoggerAdapter[logging.Logger]):
    """Logger adapter that requires an ``event`` name on every record.

    Bound context, inline ``context=`` mappings, and stray ``extra`` keys are
    merged (in that order) into a single ``context`` attribute on the record.
    """

    def __init__(
        self,
        logger: logging.Logger,
        *,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(logger, dict(context) if context is not None else {})

    def bind(self, **context: object) -> StructuredLogger:
        """Return a copy of this adapter with ``context`` added to every record."""
        bound = cast(Mapping[str, object], self.extra)
        return type(self)(self.logger, context={**bound, **context})

    @override
    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        extra = kwargs.get("extra")
        if extra is None:
            extra = {}
        if not isinstance(extra, MutableMapping):
            raise TypeError("Structured logs require a mutable mapping for extra.")
        extra_mapping = cast(MutableMapping[str, object], extra)

        payload: dict[str, object] = dict(cast(Mapping[str, object], self.extra))
        inline = kwargs.pop("context", None)
        if inline is not None:
            if not isinstance(inline, Mapping):
                raise TypeError("context must be a mapping when provided.")
            payload.update(cast(Mapping[str, object], inline))

        event = kwargs.pop("event", None) or extra_mapping.pop("event", None)
        if not isinstance(event, str):
            raise TypeError("Structured logs require an 'event' field.")
        payload.update(extra_mapping)

        kwargs["extra"] = {"event": event, "context": payload}
        return msg, kwargs


def get_logger(
    name: str,
    *,
    logger_override: logging.Logger | StructuredLogger | None = None,
    context: Mapping[str, object] | None = None,
) -> StructuredLogger:
    """Return a :class:`StructuredLogger` for ``name``.

    ``logger_override`` lets callers (mostly tests) route records to a
    specific logger; a structured override keeps its bound context.
    """
    merged: dict[str, object] = {}
    if isinstance(logger_override, StructuredLogger):
        base = logger_override.logger
        merged.update(cast(Mapping[str, object], logger_override.extra))
    elif isinstance(logger_override, logging.Logger):
        base = logger_override
    else:
        base = logging.getLogger(name)
    merged.update(context or {})
    return StructuredLogger(base, context=merged)


def parse_level(level: int | str) -> int:
    """Return the numeric logging level for a name or number.

    Raises:
        ValueError: If ``level`` is not a known level name.
    """
    if isinstance(level, int):
        return level
    try:
        return _LEVEL_NAMES[level.strip().upper()]
    except KeyError:
        raise ValueError(f"Unknown log level: {level!r}") from None


def configure_logging(
    *,
    level: int | str | None = None,
    json_mode: bool | None = None,
    env: Mapping[str, str] | None = None,
    force: bool = False,
) -> None:
    """Install a stderr handler on the root logger.

    ``level`` and ``json_mode`` fall back to ``ROOTFENCE_LOG_LEVEL`` and
    ``ROOTFENCE_LOG_FORMAT`` (``json`` or ``text``). When the host process
    already configured handlers, only the level is adjusted unless ``force``
    is set.
    """
    env = os.environ if env is None else env
    resolved_level = parse_level(level or env.get(LOG_LEVEL_ENV) or logging.INFO)
    if json_mode is None:
        json_mode = env.get(LOG_FORMAT_ENV, "text").strip().lower() == "json"

    root_logger = logging.getLogger()
    if root_logger.handlers and not force:
        root_logger.setLevel(resolved_level)
        return

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "text": {
                    "format": (
                        "%(levelname)s %(name)s [%(event)s] %(message)s %(context)s"
                    ),
                    "defaults": {"event": "-", "context": {}},
                },
                "json": {"()": "rootfence.runtime.logging._JsonFormatter"},
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "json" if json_mode else "text",
                }
            },
            "root": {"handlers": ["stderr"], "level": resolved_level},
        }
    )


class _JsonFormatter(logging.Formatter):
    """Render structured records as one compact JSON object per line."""

    @override
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": getattr(record, "event", None),
            "message": record.getMessage(),
        }
        context = getattr(record, "context", None)
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=repr, separators=(",", ":"))
