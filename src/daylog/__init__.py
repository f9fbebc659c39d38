"""
daylog: leveled logging to the console or to daily rotating files.

Records are rendered as ``[YYYY-MM-DD HH:MM:SS.mmm][LEVEL]: message`` and
dispatched to one active sink:
- stdout / stderr: console output
- file: one file per local day (``{base}-YYYY-MM-DD.log``) with retention
  cleanup and a size ceiling

Design Pattern: Strategy Pattern for sink abstraction.
Library: pydantic-settings for configuration, structlog as optional front-end.
"""

from .core import LogConfig, Logger, default_logger, reset_default_logger
from .formatters import MAX_LINE_LENGTH, DateTimeParts, Formatter, RenderBuffer
from .levels import LOG_FILTERED, LOG_INVALID_PARAM, LOG_OK, LogLevel
from .sinks import BaseSink, ConsoleSink, RotatingFileSink, daily_file_name, stderr_sink, stdout_sink

__all__ = [
    "BaseSink",
    "ConsoleSink",
    "DateTimeParts",
    "Formatter",
    "LOG_FILTERED",
    "LOG_INVALID_PARAM",
    "LOG_OK",
    "LogConfig",
    "LogLevel",
    "Logger",
    "MAX_LINE_LENGTH",
    "RenderBuffer",
    "RotatingFileSink",
    "daily_file_name",
    "default_logger",
    "reset_default_logger",
    "stderr_sink",
    "stdout_sink",
]
