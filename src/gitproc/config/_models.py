"""Configuration models.

This module defines the Pydantic models for gitproc configuration sections
and the top-level configuration container.
"""

from enum import StrEnum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field


class LogLevel(StrEnum):
    """Log level threshold values.

    Values are ordered from most verbose (debug) to least verbose (error).
    """

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty logs to standard error).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.WARNING
    format: LogFormat = LogFormat.JSON
    file: str = ""


class ProgressConfig(BaseModel):
    """Progress parsing configuration section.

    Attributes:
        encoding: Encoding of the process output.
        errors: Decoder error handling (strict, replace, ignore, ...).
        max_held_lines: Upper bound on lines held for one multi-line match.
        queue_size: Capacity of the queue between a background parser
            thread and its consumer.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    encoding: str = "utf-8"
    errors: str = "replace"
    max_held_lines: int = Field(default=256, ge=1)
    queue_size: int = Field(default=1024, ge=1)


class GitProcConfig(BaseModel):
    """Complete gitproc configuration.

    Attributes:
        logging: Logging settings.
        progress: Progress parser settings.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    progress: ProgressConfig = Field(default_factory=ProgressConfig)
