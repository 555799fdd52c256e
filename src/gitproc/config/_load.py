"""Configuration discovery and loading."""

from pathlib import Path
from typing import Any

import platformdirs
from pydantic import ValidationError

from gitproc.config._defaults import DEFAULT_CONFIG
from gitproc.config._loader import deep_merge, parse_env_vars, read_toml_file
from gitproc.config._models import GitProcConfig
from gitproc.exceptions import ConfigValidationError


def get_user_config_path() -> Path:
    r"""Get the platform-specific user config file path.

    - Linux: ``~/.config/gitproc/config.toml``
    - macOS: ``~/Library/Application Support/gitproc/config.toml``
    - Windows: ``%APPDATA%\gitproc\config.toml``

    The path is returned whether or not the file exists.
    """
    return platformdirs.user_config_path("gitproc") / "config.toml"


def _validate(data: dict[str, Any], source: str | None) -> GitProcConfig:  # pyright: ignore[reportExplicitAny]
    try:
        return GitProcConfig.model_validate(data)
    except ValidationError as e:
        error = e.errors()[0]
        key = ".".join(str(part) for part in error["loc"])
        msg = f"Invalid configuration value for '{key}': {error['msg']}"
        raise ConfigValidationError(
            msg,
            key=key,
            value=error.get("input"),
            expected=error["type"],
            source=source,
        ) from e


def load_config(
    config_path: Path | None = None,
    *,
    include_user: bool = True,
    include_env: bool = True,
    overrides: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny]
) -> GitProcConfig:
    """Load configuration from every source, lowest precedence first.

    Sources: built-in defaults, the user config file, `config_path`,
    `GITPROC_*` environment variables, then `overrides`.

    Args:
        config_path: Explicit config file; it must exist.
        include_user: Whether to read the user config file if present.
        include_env: Whether to read environment variables.
        overrides: Values applied last.

    Returns:
        The validated configuration.

    Raises:
        FileNotFoundError: If `config_path` does not exist.
        ConfigLoadError: If a config file is not valid TOML.
        ConfigValidationError: If a value has the wrong type or range.
    """
    merged = deep_merge(DEFAULT_CONFIG, {})
    source = "default"

    if include_user:
        user_path = get_user_config_path()
        if user_path.is_file():
            merged = deep_merge(merged, read_toml_file(user_path))
            source = str(user_path)

    if config_path is not None:
        merged = deep_merge(merged, read_toml_file(config_path))
        source = str(config_path)

    if include_env:
        env_values = parse_env_vars()
        if env_values:
            merged = deep_merge(merged, env_values)
            source = "env"

    if overrides:
        merged = deep_merge(merged, overrides)
        source = "overrides"

    return _validate(merged, source)
