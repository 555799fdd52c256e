# pyright: reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""TOML configuration file loading and merging."""

import json
import os
import re
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from gitproc.exceptions import ConfigLoadError

ENV_PREFIX: Final = "GITPROC_"

# Variables read directly by the logging factories, not config keys.
_RESERVED_ENV_VARS: Final = frozenset({"GITPROC_DEBUG", "GITPROC_LOG_LEVEL"})

# Before Python 3.14 the location is only part of the message.
_TOML_LOCATION: Final = re.compile(r"\(at line (?P<line>\d+), column (?P<column>\d+)\)")


def _error_location(error: tomllib.TOMLDecodeError) -> tuple[int | None, int | None]:
    line: int | None = getattr(error, "lineno", None)
    column: int | None = getattr(error, "colno", None)
    if line is None and (found := _TOML_LOCATION.search(str(error))) is not None:
        line, column = int(found["line"]), int(found["column"])
    return line, column


def read_toml_file(path: Path) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Read and parse a TOML file.

    Args:
        path: Path to the TOML file.

    Returns:
        Parsed TOML content as dictionary.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigLoadError: If the file cannot be parsed.
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Failed to parse TOML file {path}: {e}"
        line, column = _error_location(e)
        raise ConfigLoadError(msg, path=path, line=line, column=column) from e


def copy_value(value: Any) -> Any:  # pyright: ignore[reportExplicitAny]
    """Deep-copy the dicts and lists of a configuration value."""
    if isinstance(value, dict):
        return {k: copy_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [copy_value(item) for item in value]
    return value


def deep_merge(
    base: Mapping[str, Any],  # pyright: ignore[reportExplicitAny]
    override: Mapping[str, Any],  # pyright: ignore[reportExplicitAny]
) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Merge `override` into `base`, returning a new dictionary.

    Nested tables merge key by key; any other value in `override`, lists
    included, replaces the base value. Neither input is modified.

    Args:
        base: Lower precedence configuration.
        override: Higher precedence configuration.

    Returns:
        The merged configuration.
    """
    result = {key: copy_value(value) for key, value in base.items()}
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            result[key] = deep_merge(current, value)
        else:
            result[key] = copy_value(value)
    return result


def set_nested_key(
    d: dict[str, Any],  # pyright: ignore[reportExplicitAny]
    key_path: str,
    value: Any,  # pyright: ignore[reportExplicitAny]
) -> None:
    """Set a value at a dotted key path, creating tables as needed.

    Example:
        >>> d = {}
        >>> set_nested_key(d, "progress.queue_size", 64)
        >>> d
        {'progress': {'queue_size': 64}}
    """
    *parents, leaf = key_path.split(".")
    current = d
    for part in parents:
        child = current.get(part)
        if not isinstance(child, dict):
            child = {}
            current[part] = child
        current = child
    current[leaf] = value


def parse_env_value(value: str) -> Any:  # pyright: ignore[reportExplicitAny]
    """Infer the type of an environment variable value.

    Booleans (true/false), integers, decimals and JSON arrays or objects are
    converted; anything else stays a string.

    Examples:
        >>> parse_env_value("false")
        False
        >>> parse_env_value("512")
        512
        >>> parse_env_value("utf-8")
        'utf-8'
    """
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"

    try:
        return int(value)
    except ValueError:
        pass

    if "." in value:
        try:
            return float(value)
        except ValueError:
            pass

    if (value.startswith("[") and value.endswith("]")) or (
        value.startswith("{") and value.endswith("}")
    ):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass

    return value


def parse_env_vars(
    prefix: str = ENV_PREFIX,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Collect configuration values from environment variables.

    `GITPROC_PROGRESS__QUEUE_SIZE=64` becomes `{"progress": {"queue_size": 64}}`:
    the prefix is removed, double underscores separate tables and keys are
    lowercased.

    Args:
        prefix: Environment variable prefix.
        environ: Mapping to read instead of `os.environ`.

    Returns:
        Nested configuration values.
    """
    source = os.environ if environ is None else environ
    result: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]

    for key, value in source.items():
        if not key.startswith(prefix) or key in _RESERVED_ENV_VARS:
            continue
        config_key = key[len(prefix) :]
        if not config_key:
            continue
        set_nested_key(result, config_key.replace("__", ".").lower(), parse_env_value(value))

    return result
