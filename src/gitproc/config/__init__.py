"""gitproc configuration.

Example:
    >>> from gitproc.config import load_config
    >>> config = load_config()
    >>> config.progress.encoding
    'utf-8'
"""

from gitproc.exceptions import (
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
)

from ._defaults import DEFAULT_CONFIG
from ._load import get_user_config_path, load_config
from ._loader import (
    copy_value,
    deep_merge,
    parse_env_value,
    parse_env_vars,
    read_toml_file,
    set_nested_key,
)
from ._models import GitProcConfig, LogFormat, LoggingConfig, LogLevel, ProgressConfig

__all__ = [
    "DEFAULT_CONFIG",
    "ConfigError",
    "ConfigLoadError",
    "ConfigValidationError",
    "GitProcConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "ProgressConfig",
    "copy_value",
    "deep_merge",
    "get_user_config_path",
    "load_config",
    "parse_env_value",
    "parse_env_vars",
    "read_toml_file",
    "set_nested_key",
]
