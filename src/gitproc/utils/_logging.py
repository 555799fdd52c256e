"""Logging utilities for gitproc.

This module provides standalone structlog logger factories. Each logger is
self-contained and does not modify global structlog configuration, so
applications embedding gitproc keep control of their own logging setup.
"""

import functools
import logging
import sys
from os import getenv
from pathlib import Path
from typing import TYPE_CHECKING, Literal, cast

import structlog
from structlog.typing import FilteringBoundLogger

from gitproc.exceptions import ConfigError

if TYPE_CHECKING:
    from gitproc.config import LoggingConfig

LogFormatType = Literal["json", "text"]


def _get_log_level(default: str = "warning") -> int:
    """Get the log level from environment variables.

    Checks GITPROC_DEBUG first (sets DEBUG if present), then
    GITPROC_LOG_LEVEL.

    Args:
        default: Level used when neither variable is set.

    Returns:
        The logging level as an integer.
    """
    if getenv("GITPROC_DEBUG", None):
        return logging.DEBUG

    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(getenv("GITPROC_LOG_LEVEL", default).upper(), logging.WARNING)


def _log_level_from_string(level: str, *, respect_env: bool = False) -> int:
    """Convert a log level string to a logging level integer.

    Args:
        level: Log level string (debug, info, warning, error).
        respect_env: If True, GITPROC_DEBUG overrides to DEBUG level.

    Returns:
        The logging level as an integer.
    """
    if respect_env and getenv("GITPROC_DEBUG", None):
        return logging.DEBUG

    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(level.upper(), logging.WARNING)


def create_logger(
    log_file_path: str = "",
    *,
    log_level: int | None = None,
    log_format: LogFormatType = "json",
) -> FilteringBoundLogger:
    """Create a standalone structlog logger.

    Args:
        log_file_path: File to append to; empty writes to standard error.
        log_level: Override log level (uses env vars if not specified).
        log_format: Output format, either "json" or "text".

    Returns:
        A configured FilteringBoundLogger instance.
    """
    effective_level = log_level if log_level is not None else _get_log_level()

    if log_file_path:
        log_path = Path(log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger_factory = structlog.WriteLoggerFactory(file=log_path.open("a"))
    else:
        logger_factory = structlog.PrintLoggerFactory(file=sys.stderr)

    processors: list[structlog.typing.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_format == "json":
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        # Text format: "timestamp [level] event key=value ..."
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    wrapper_class = structlog.make_filtering_bound_logger(effective_level)

    # wrap_logger leaves the global structlog configuration untouched
    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            logger_factory(),
            processors=processors,
            wrapper_class=wrapper_class,
            context_class=dict,
        ),
    )


def create_logger_from_config(config: "LoggingConfig") -> FilteringBoundLogger:  # noqa: UP037
    """Create a logger from the logging configuration section.

    GITPROC_DEBUG still forces DEBUG level regardless of the configured level.

    Args:
        config: Logging configuration section.

    Returns:
        A FilteringBoundLogger instance.
    """
    return create_logger(
        config.file,
        log_level=_log_level_from_string(config.level, respect_env=True),
        log_format=cast("LogFormatType", str(config.format)),
    )


@functools.cache
def get_logger() -> FilteringBoundLogger:
    """Return the package logger, built once from the loaded configuration.

    Configuration errors never prevent logging: an unreadable configuration
    falls back to an environment-driven stderr logger.
    """
    # Deferred import to avoid circular dependency
    from gitproc.config import load_config  # noqa: PLC0415

    try:
        config = load_config()
    except ConfigError as e:
        logger = create_logger()
        logger.warning("config_load_failed", error=str(e))
        return logger
    return create_logger_from_config(config.logging)


def reset_logger() -> None:
    """Forget the cached package logger so the next call rebuilds it."""
    get_logger.cache_clear()
