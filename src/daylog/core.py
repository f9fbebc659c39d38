"""
Dispatcher and runtime configuration.

A :class:`Logger` owns one :class:`LogConfig`, one scratch
:class:`~daylog.formatters.RenderBuffer` and one lock. Records at or above the
minimum level are rendered into the buffer and handed to the active sink while
the lock is held, so lines never interleave and reach the sink in lock order.
"""

from __future__ import annotations

import atexit
import os
import threading
import time
from dataclasses import dataclass, field
from collections.abc import Mapping
from typing import Any

from pydantic import ByteSize, TypeAdapter, ValidationError

from .formatters import MAX_LINE_LENGTH, DateTimeParts, Formatter, RenderBuffer
from .levels import LOG_FILTERED, LOG_INVALID_PARAM, LOG_OK, LogLevel, parse_level
from .sinks import DEFAULT_MAX_FILE_SIZE, BaseSink, Clock, ConsoleSink, RotatingFileSink

DEFAULT_LOG_FILE = "default"
DEFAULT_LOG_LEVEL = LogLevel.VERBOSE
DEFAULT_LOG_REMAIN_DAYS = 1

_BYTE_SIZE = TypeAdapter(ByteSize)


def strip_log_suffix(path: str) -> str:
    """Drop one trailing ``.log`` from ``path``."""
    return path[: -len(".log")] if path.endswith(".log") else path


@dataclass
class LogConfig:
    """Mutable settings read by the dispatcher and the sinks on every call."""

    min_level: int = DEFAULT_LOG_LEVEL
    color_enabled: bool = False
    flush_each_write: bool = True
    retention_days: int = DEFAULT_LOG_REMAIN_DAYS
    base_file_path: str = DEFAULT_LOG_FILE
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    active_sink: BaseSink = field(default_factory=ConsoleSink)


class Logger:
    """Leveled logging context.

    Lifecycle: construct (or use :func:`default_logger`), configure with the
    ``set_*`` methods, call :meth:`log`, and optionally :meth:`shutdown`.
    Configuration setters are not synchronized; configure before starting
    worker threads.
    """

    def __init__(
        self,
        config: LogConfig | None = None,
        *,
        clock: Clock | None = None,
        buffer_size: int = MAX_LINE_LENGTH,
    ):
        self.config = config or LogConfig()
        self._clock: Clock = clock or time.time
        self._buffer = RenderBuffer(buffer_size)
        # Created eagerly; the filtered path never acquires it.
        self._lock = threading.Lock()

    # =========================================================================
    # Configuration
    # =========================================================================

    @property
    def sink(self) -> BaseSink:
        return self.config.active_sink

    def set_sink(self, sink: BaseSink) -> None:
        self.config.active_sink = sink

    def file_sink(self, clock: Clock | None = None) -> RotatingFileSink:
        """Create a :class:`RotatingFileSink` bound to this logger's config."""
        return RotatingFileSink(self.config, clock=clock or self._clock)

    def set_level(self, level: int) -> None:
        self.config.min_level = level

    def set_level_by_name(self, name: str) -> int:
        level = parse_level(name)
        if level is None:
            return LOG_INVALID_PARAM
        self.config.min_level = level
        return LOG_OK

    def set_remain_days(self, days: int) -> None:
        self.config.retention_days = days

    def enable_color(self, on: bool = True) -> None:
        self.config.color_enabled = bool(on)

    def set_fflush(self, on: bool = True) -> None:
        self.config.flush_each_write = bool(on)

    def set_file(self, path: str | os.PathLike[str] | None) -> int:
        """Set the daily file stem. Returns ``LOG_INVALID_PARAM`` for an empty path."""
        if not path:
            return LOG_INVALID_PARAM
        self.config.base_file_path = strip_log_suffix(os.fspath(path))
        return LOG_OK

    def set_max_file_size(self, size: int | str) -> int:
        """Set the rollover ceiling from bytes or a size string like ``"16MiB"``."""
        try:
            value = int(_BYTE_SIZE.validate_python(size))
        except ValidationError:
            return LOG_INVALID_PARAM
        if value < 0:
            return LOG_INVALID_PARAM
        self.config.max_file_size = value
        return LOG_OK

    # =========================================================================
    # Logging
    # =========================================================================

    @staticmethod
    def _expand(fmt: str, args: Any) -> str:
        if not args:
            return str(fmt)
        if len(args) == 1 and isinstance(args[0], Mapping) and args[0]:
            args = args[0]
        try:
            return str(fmt) % args
        except (TypeError, ValueError, KeyError):
            return f"{fmt} {args!r}"

    def log(self, level: int, fmt: str, *args: Any) -> int:
        """Render and dispatch one record.

        Returns the rendered length in bytes, or ``LOG_FILTERED`` when
        ``level`` is below the configured minimum.
        """
        if level < self.config.min_level:
            return LOG_FILTERED

        with self._lock:
            parts = DateTimeParts.from_timestamp(self._clock())
            message = self._expand(fmt, args)
            length = Formatter.render_into(self._buffer, level, parts, message, self.config.color_enabled)
            try:
                self.config.active_sink.write(self._buffer.view(), length)
            except Exception:
                pass  # Fail silently to avoid breaking the application
        return length

    def verbose(self, fmt: str, *args: Any) -> int:
        return self.log(LogLevel.VERBOSE, fmt, *args)

    def debug(self, fmt: str, *args: Any) -> int:
        return self.log(LogLevel.DEBUG, fmt, *args)

    def info(self, fmt: str, *args: Any) -> int:
        return self.log(LogLevel.INFO, fmt, *args)

    def warn(self, fmt: str, *args: Any) -> int:
        return self.log(LogLevel.WARN, fmt, *args)

    def error(self, fmt: str, *args: Any) -> int:
        return self.log(LogLevel.ERROR, fmt, *args)

    def fatal(self, fmt: str, *args: Any) -> int:
        return self.log(LogLevel.FATAL, fmt, *args)

    def flush(self) -> None:
        """Flush the active sink (the file sink re-checks rotation first)."""
        with self._lock:
            try:
                self.config.active_sink.flush()
            except Exception:
                pass

    def shutdown(self) -> None:
        """Flush and close the active sink. Later calls reopen it on demand."""
        with self._lock:
            try:
                self.config.active_sink.close()
            except Exception:
                pass


# =============================================================================
# Process-wide Default
# =============================================================================

_default: Logger | None = None
_default_lock = threading.Lock()


def default_logger() -> Logger:
    """Return the process-wide logger, building it from the environment once."""
    global _default
    if _default is None:
        with _default_lock:
            if _default is None:
                from .config import build_logger

                logger = build_logger()
                atexit.register(logger.shutdown)
                _default = logger
    return _default


def reset_default_logger() -> None:
    """Shut down and forget the process-wide logger."""
    global _default
    with _default_lock:
        logger, _default = _default, None
    if logger is not None:
        atexit.unregister(logger.shutdown)
        logger.shutdown()
