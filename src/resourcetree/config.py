"""
TOML-based config file loading for resourcetree.

Searches for `.resourcetree.toml`, `resourcetree.toml`, or
`pyproject.toml [tool.resourcetree]` walking up from the current directory.
Keys may sit at the top level or in the section that owns them:

    [inputs]
    files = ["gateway.yaml"]
    directories = ["config"]

    [loading]
    exclude = ["drafts/"]
    error-policy = "collect"

    [output]
    output = "out/all.yaml"

Relative paths are resolved against the directory holding the config file.
Explicit CLI flags win over config values, which win over built-in defaults.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]

log = logging.getLogger(__name__)


@dataclass
class ResourceTreeConfig:
    """
    Parsed config from a TOML file. Fields are `None` when not set, so that
    "not configured" can be told apart from "set to the default".
    """

    files: list[str] | None = None
    dirs: list[str] | None = None
    exclude: list[str] | None = None
    error_policy: str | None = None
    output: str | None = None


# TOML key -> (field name, expected type). Each section only accepts its own keys.
_SECTION_KEYS: dict[str, dict[str, tuple[str, type]]] = {
    "inputs": {
        "files": ("files", list),
        "dirs": ("dirs", list),
        "directories": ("dirs", list),
    },
    "loading": {
        "exclude": ("exclude", list),
        "error-policy": ("error_policy", str),
    },
    "output": {
        "output": ("output", str),
    },
}
_TOP_LEVEL_KEYS = {k: v for section in _SECTION_KEYS.values() for k, v in section.items()}

_PYPROJECT = "pyproject.toml"
_CONFIG_FILENAMES = (".resourcetree.toml", "resourcetree.toml", _PYPROJECT)


def _tool_table(path: Path) -> dict[str, Any] | None:
    """The `[tool.resourcetree]` table of a pyproject.toml, or `None`."""
    try:
        data = tomllib.loads(path.read_text())
    except (tomllib.TOMLDecodeError, OSError):
        return None
    table = data.get("tool", {}).get("resourcetree")
    return table if isinstance(table, dict) else None


def find_config_file(start_dir: Path) -> Path | None:
    """
    Return the nearest config file at or above `start_dir`, or `None`. Within
    one directory the dot file wins, and `pyproject.toml` only counts when it
    has a `[tool.resourcetree]` table.
    """
    start = start_dir.resolve()
    for directory in (start, *start.parents):
        for name in _CONFIG_FILENAMES:
            candidate = directory / name
            if not candidate.is_file():
                continue
            if name != _PYPROJECT or _tool_table(candidate) is not None:
                return candidate
    return None


def _set_value(values: dict[str, Any], key: str, raw: Any, spec: tuple[str, type]) -> None:
    name, expected = spec
    if not isinstance(raw, expected):
        raise ValueError(f"config key '{key}' must be a {expected.__name__}")
    if expected is list and not all(isinstance(item, str) for item in raw):
        raise ValueError(f"config key '{key}' must be a list of strings")
    values[name] = raw


def parse_config_table(table: dict[str, Any]) -> ResourceTreeConfig:
    """
    Build a `ResourceTreeConfig` from a TOML table. Unknown keys and tables are
    ignored; a known key with the wrong type raises `ValueError`.
    """
    values: dict[str, Any] = {}
    for key, raw in table.items():
        if key in _SECTION_KEYS and isinstance(raw, dict):
            section = _SECTION_KEYS[key]
            for sub_key, sub_raw in raw.items():
                if sub_key in section:
                    _set_value(values, sub_key, sub_raw, section[sub_key])
                else:
                    log.debug("Ignoring unknown config key [%s] %s", key, sub_key)
        elif key in _TOP_LEVEL_KEYS:
            _set_value(values, key, raw, _TOP_LEVEL_KEYS[key])
        else:
            log.debug("Ignoring unknown config key %s", key)
    return ResourceTreeConfig(**values)


def load_config(config_path: Path) -> ResourceTreeConfig:
    """
    Load a `ResourceTreeConfig` from a TOML file, resolving relative paths
    against the file's directory. Raises `ValueError` (including
    `TOMLDecodeError`) for malformed config.
    """
    if config_path.name == _PYPROJECT:
        table = _tool_table(config_path) or {}
    else:
        table = tomllib.loads(config_path.read_text())

    config = parse_config_table(table)
    base = config_path.resolve().parent
    if config.files is not None:
        config.files = [str(base / f) for f in config.files]
    if config.dirs is not None:
        config.dirs = [str(base / d) for d in config.dirs]
    if config.output is not None and config.output != "-":
        config.output = str(base / config.output)
    return config


def apply_config(options: object, config: ResourceTreeConfig, explicit_flags: set[str]) -> None:
    """
    Copy every configured value onto `options` in place, except for fields the
    user set explicitly on the command line.
    """
    for cfg_field in fields(ResourceTreeConfig):
        value = getattr(config, cfg_field.name)
        if value is None or cfg_field.name in explicit_flags:
            continue
        if hasattr(options, cfg_field.name):
            setattr(options, cfg_field.name, value)
