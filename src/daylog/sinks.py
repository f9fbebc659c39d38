"""
Log sink abstractions and concrete implementations.
"""

from __future__ import annotations

import os
import sys
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Callable, Literal

if TYPE_CHECKING:
    from .core import LogConfig

StreamName = Literal["stdout", "stderr"]

SECONDS_PER_DAY = 86400
# Window scanned by the first retention sweep, when no rotation happened yet.
FIRST_SWEEP_DAYS = 30
DEFAULT_MAX_FILE_SIZE = 16 * 1024 * 1024

Clock = Callable[[], float]


# =============================================================================
# Sink Abstraction (Strategy Pattern)
# =============================================================================


class BaseSink(ABC):
    """Abstract base class for log sinks.

    Sinks receive an already rendered line, append a newline and must never
    raise into the caller.
    """

    @abstractmethod
    def write(self, data: bytes | memoryview, length: int) -> None:
        """Write ``length`` bytes of ``data`` as one line."""
        ...

    def flush(self) -> None:
        """Push pending output to the OS."""

    def close(self) -> None:
        """Close the sink and release resources."""


class ConsoleSink(BaseSink):
    """Standard output or standard error.

    The stream is resolved from :mod:`sys` on every write so that redirections
    made after construction are honored.
    """

    def __init__(self, stream: StreamName = "stdout"):
        if stream not in ("stdout", "stderr"):
            raise ValueError(f"unknown console stream: {stream!r}")
        self.stream_name: StreamName = stream

    @property
    def _stream(self):
        return getattr(sys, self.stream_name)

    def write(self, data: bytes | memoryview, length: int) -> None:
        try:
            line = bytes(data[:length]).decode("utf-8", errors="replace")
            self._stream.write(line + "\n")
        except Exception:
            pass  # Fail silently to avoid breaking the application

    def flush(self) -> None:
        try:
            self._stream.flush()
        except Exception:
            pass

    def close(self) -> None:
        self.flush()

    def __repr__(self) -> str:
        return f"ConsoleSink({self.stream_name!r})"


def stdout_sink() -> ConsoleSink:
    return ConsoleSink("stdout")


def stderr_sink() -> ConsoleSink:
    return ConsoleSink("stderr")


# =============================================================================
# Rotating File Sink
# =============================================================================


def daily_file_name(base: str | os.PathLike[str], ts: float) -> str:
    """``{base}-{YYYY}-{MM}-{DD}.log`` for the local calendar date of ``ts``."""
    tm = time.localtime(ts)
    return f"{os.fspath(base)}-{tm.tm_year:04d}-{tm.tm_mon:02d}-{tm.tm_mday:02d}.log"


def local_day(ts: float) -> int:
    """Index of the local calendar day containing ``ts``."""
    return int((ts + time.localtime(ts).tm_gmtoff) // SECONDS_PER_DAY)


def remove_quietly(path: str) -> bool:
    """Delete ``path`` if present. Returns whether a file was removed."""
    try:
        os.remove(path)
    except OSError:
        return False
    return True


class RotatingFileSink(BaseSink):
    """Daily file sink with retention cleanup and a size ceiling.

    One file per local calendar day, named by :func:`daily_file_name`. The
    file is re-evaluated before each write:

    - a new local day closes the current file, sweeps files
      that fell out of the retention window and opens the file for today;
    - a file larger than ``config.max_file_size`` is truncated in place.

    Files are opened in append mode so several processes may share one. The
    sink reads ``base_file_path``, ``retention_days``, ``flush_each_write``
    and ``max_file_size`` from the shared :class:`~daylog.core.LogConfig` at
    each write. It is not thread-safe on its own; the dispatcher serializes
    access.
    """

    def __init__(self, config: LogConfig, clock: Clock | None = None):
        self._config = config
        self._clock: Clock = clock or time.time
        self._file: BinaryIO | None = None
        self._cur_file: str | None = None
        self._last_rotation_ts: float = 0

    @property
    def current_file(self) -> str | None:
        """Path of the file currently open, if any."""
        return self._cur_file if self._file is not None else None

    @property
    def last_rotation_ts(self) -> float:
        return self._last_rotation_ts

    def _sweep(self, now: float, interval_days: int) -> None:
        base = self._config.base_file_path
        remain_days = self._config.retention_days
        if interval_days >= remain_days:
            # remove [today - interval_days, today - remain_days]
            for i in range(interval_days, remain_days - 1, -1):
                remove_quietly(daily_file_name(base, now - i * SECONDS_PER_DAY))
        else:
            remove_quietly(daily_file_name(base, now - remain_days * SECONDS_PER_DAY))

    def _open(self, path: str, mode: str) -> BinaryIO | None:
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            return open(path, mode)
        except OSError:
            return None

    def _shift_file(self) -> BinaryIO | None:
        now = self._clock()
        interval_days = 0
        if self._last_rotation_ts:
            interval_days = local_day(now) - local_day(self._last_rotation_ts)

        if self._file is None or interval_days > 0:
            if self._file is not None:
                self._close_file()
            else:
                interval_days = FIRST_SWEEP_DAYS
            self._sweep(now, interval_days)

        if self._file is None:
            # append mode: other processes may be writing the same file
            self._cur_file = daily_file_name(self._config.base_file_path, now)
            self._file = self._open(self._cur_file, "ab")
            self._last_rotation_ts = now

        if self._file is not None and self._cur_file is not None:
            try:
                oversized = self._file.tell() > self._config.max_file_size
            except OSError:
                oversized = False
            if oversized:
                self._close_file()
                self._file = self._open(self._cur_file, "wb")

        return self._file

    def _close_file(self) -> None:
        fp, self._file = self._file, None
        if fp is None:
            return
        try:
            fp.close()
        except OSError:
            pass

    def write(self, data: bytes | memoryview, length: int) -> None:
        fp = self._shift_file()
        if fp is None:
            return
        try:
            fp.write(data[:length])
            fp.write(b"\n")
            if self._config.flush_each_write:
                fp.flush()
        except (OSError, ValueError):
            pass

    def flush(self) -> None:
        fp = self._shift_file()
        if fp is None:
            return
        try:
            fp.flush()
        except (OSError, ValueError):
            pass

    def close(self) -> None:
        if self._file is not None:
            try:
                self._file.flush()
            except (OSError, ValueError):
                pass
        self._close_file()

    def __repr__(self) -> str:
        return f"RotatingFileSink(base={self._config.base_file_path!r}, current={self.current_file!r})"
