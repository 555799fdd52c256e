"""Shared helpers: logging, byte magnitudes and the write-once cell."""

from gitproc.utils._cell import WriteOnceCell
from gitproc.utils._logging import (
    create_logger,
    create_logger_from_config,
    get_logger,
    reset_logger,
)
from gitproc.utils._magnitude import (
    GIB,
    KIB,
    MIB,
    TIB,
    format_magnitude,
    parse_magnitude,
)

__all__ = [
    "GIB",
    "KIB",
    "MIB",
    "TIB",
    "WriteOnceCell",
    "create_logger",
    "create_logger_from_config",
    "format_magnitude",
    "get_logger",
    "parse_magnitude",
    "reset_logger",
]
