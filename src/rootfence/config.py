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

"""Configuration loading for the rootfence command line.

Sources are merged from lowest to highest precedence: the config file, the
``ROOTFENCE_*`` environment variables, then explicit CLI values.

A TOML config file looks like::

    log_level = "DEBUG"

    [roots]
    directories = ["~/projects", "/srv/shared"]

The YAML equivalent uses the same keys, or a flat ``allowed_directories``
list.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping, MutableMapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Literal, cast

import yaml

from .errors import InvalidPathError
from .filesystem import AllowedRoots, expand_home
from .runtime.logging import LOG_FORMAT_ENV, LOG_LEVEL_ENV, parse_level

LogFormat = Literal["text", "json"]

DEFAULT_CONFIG_PATH: Final[Path] = Path("~/.config/rootfence/config.toml")
ENV_ALLOWED_DIRS: Final[str] = "ROOTFENCE_ALLOWED_DIRS"

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ENV_ALLOWED_DIRS",
    "ConfigError",
    "LogFormat",
    "ServerConfig",
    "load_config",
]


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Resolved configuration for the filesystem tools."""

    allowed_roots: AllowedRoots
    log_level: str = "INFO"
    log_format: LogFormat = "text"


class ConfigError(ValueError):
    """Raised when the rootfence configuration is invalid."""


def load_config(
    path: Path | Mapping[str, Any] | None,
    cli_overrides: Mapping[str, object] | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> ServerConfig:
    """Load, merge, and validate configuration.

    Args:
        path: Config file to read. ``None`` falls back to
            ``~/.config/rootfence/config.toml``, which may be absent. Tests can
            pass a mapping to skip file I/O.
        cli_overrides: Values from the command line. ``None`` values and
            empty root lists are ignored.
        env: Environment mapping. Defaults to :data:`os.environ`.

    Raises:
        ConfigError: If any source is malformed, no root is configured, or a
            root is not an existing directory.
    """
    env_map = os.environ if env is None else env

    if isinstance(path, Mapping):
        raw: dict[str, object] = dict(path)
    else:
        raw = _load_config_file(path)

    config = _normalise_config(raw)
    _apply_environment_overrides(config, env_map)
    _apply_cli_overrides(config, cli_overrides)
    return _build_config(config)


def _load_config_file(path: Path | None) -> dict[str, object]:
    config_path = (path or DEFAULT_CONFIG_PATH).expanduser()
    if not config_path.exists():
        if path is None:
            return {}
        raise ConfigError(f"Configuration file not found: {config_path}")

    suffix = config_path.suffix.lower()
    data: object
    try:
        if suffix == ".toml" or not suffix:
            with config_path.open("rb") as handle:
                data = tomllib.load(handle)
        elif suffix in {".yaml", ".yml"}:
            with config_path.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
        else:
            msg = f"Unsupported configuration format: {config_path.suffix}"
            raise ConfigError(msg)
    except (tomllib.TOMLDecodeError, yaml.YAMLError) as error:
        msg = f"Invalid configuration file {config_path}: {error}"
        raise ConfigError(msg) from error
    except OSError as error:
        msg = f"Cannot read configuration file {config_path}: {error}"
        raise ConfigError(msg) from error

    if not isinstance(data, MutableMapping):
        raise ConfigError("Configuration file must contain a mapping at the root.")

    typed: dict[str, object] = {}
    for key, value in cast(MutableMapping[object, object], data).items():
        if not isinstance(key, str):
            raise ConfigError(f"Configuration keys must be strings (got {key!r}).")
        typed[key] = value
    return typed


def _normalise_config(raw: Mapping[str, object]) -> dict[str, object]:
    directories = raw.get("allowed_directories")
    roots_section = raw.get("roots")
    if directories is None and isinstance(roots_section, Mapping):
        directories = cast(Mapping[str, object], roots_section).get("directories")
    return {
        "allowed_directories": directories,
        "log_level": raw.get("log_level"),
        "log_format": raw.get("log_format"),
    }


def _apply_environment_overrides(
    config: dict[str, object], env: Mapping[str, str]
) -> None:
    if env.get(ENV_ALLOWED_DIRS):
        config["allowed_directories"] = [
            part for part in env[ENV_ALLOWED_DIRS].split(os.pathsep) if part
        ]
    if env.get(LOG_LEVEL_ENV):
        config["log_level"] = env[LOG_LEVEL_ENV]
    if env.get(LOG_FORMAT_ENV):
        config["log_format"] = env[LOG_FORMAT_ENV]


def _apply_cli_overrides(
    config: dict[str, object], overrides: Mapping[str, object] | None
) -> None:
    if overrides is None:
        return
    for key, value in overrides.items():
        if value is None or (key == "allowed_directories" and not value):
            continue
        config[key] = value


def _build_config(config: Mapping[str, object]) -> ServerConfig:
    directories = _coerce_directories(config.get("allowed_directories"))
    if not directories:
        raise ConfigError(
            "At least one allowed directory must be configured "
            f"(config file, {ENV_ALLOWED_DIRS}, or --root)."
        )
    for directory in directories:
        if not os.path.isdir(expand_home(directory)):
            msg = f"Allowed directory is not an existing directory: {directory}"
            raise ConfigError(msg)

    try:
        roots = AllowedRoots.from_paths(directories)
    except InvalidPathError as error:
        raise ConfigError(str(error)) from error

    return ServerConfig(
        allowed_roots=roots,
        log_level=_coerce_level(config.get("log_level")),
        log_format=_coerce_format(config.get("log_format")),
    )


def _coerce_directories(value: object) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Sequence):
        items = cast(Sequence[object], value)
        if all(isinstance(item, str) for item in items):
            return tuple(cast(Sequence[str], items))
    raise ConfigError("Allowed directories must be a list of strings.")


def _coerce_level(value: object) -> str:
    if value is None:
        return "INFO"
    if not isinstance(value, str):
        raise ConfigError("log_level must be a string.")
    try:
        _ = parse_level(value)
    except ValueError as error:
        raise ConfigError(str(error)) from error
    return value.strip().upper()


def _coerce_format(value: object) -> LogFormat:
    if value is None:
        return "text"
    normalized = str(value).strip().lower()
    if normalized == "json":
        return "json"
    if normalized == "text":
        return "text"
    raise ConfigError(f"log_format must be 'text' or 'json' (got {value!r}).")
