"""
Line rendering into a bounded buffer.

Every record renders to a single line::

    [COLOR][YYYY-MM-DD HH:MM:SS.mmm][LEVEL]: message[RESET]

The color prefix and reset suffix are only present when coloring is enabled
and the level has a color. Lines longer than ``MAX_LINE_LENGTH`` bytes are
truncated, never rejected.
"""

from __future__ import annotations

import time
from typing import NamedTuple

from .levels import CL_CLR, level_style

MAX_LINE_LENGTH = 8192

_HEADER_FORMAT = "[{:04d}-{:02d}-{:02d} {:02d}:{:02d}:{:02d}.{:03d}][{}]: "


class DateTimeParts(NamedTuple):
    """Civil local date-time breakdown with millisecond precision."""

    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int
    millisecond: int

    @classmethod
    def from_timestamp(cls, ts: float) -> DateTimeParts:
        tm = time.localtime(ts)
        ms = int((ts - int(ts)) * 1000) % 1000
        return cls(tm.tm_year, tm.tm_mon, tm.tm_mday, tm.tm_hour, tm.tm_min, tm.tm_sec, ms)


# =============================================================================
# Bounded Buffer
# =============================================================================


def _utf8_cut(data: bytes | memoryview, limit: int) -> int:
    """Largest ``n <= limit`` that does not split a UTF-8 sequence."""
    if limit >= len(data):
        return len(data)
    n = limit
    # back off over continuation bytes (10xxxxxx)
    while n > 0 and (data[n] & 0xC0) == 0x80:
        n -= 1
    return n


class RenderBuffer:
    """Fixed-capacity byte buffer reused across records."""

    def __init__(self, capacity: int = MAX_LINE_LENGTH):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._buf = bytearray(capacity)
        self._capacity = capacity
        self._length = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def length(self) -> int:
        return self._length

    @property
    def remaining(self) -> int:
        return self._capacity - self._length

    def reset(self) -> None:
        self._length = 0

    def write(self, data: bytes) -> int:
        """Append as much of ``data`` as fits. Returns the number of bytes taken."""
        n = _utf8_cut(data, self.remaining)
        if n:
            self._buf[self._length : self._length + n] = data[:n]
            self._length += n
        return n

    def view(self) -> memoryview:
        return memoryview(self._buf)[: self._length]

    def text(self) -> str:
        return self._buf[: self._length].decode("utf-8", errors="replace")


# =============================================================================
# Formatter
# =============================================================================


class Formatter:
    """Renders one record into a :class:`RenderBuffer`."""

    @staticmethod
    def render_into(
        buffer: RenderBuffer,
        level: int,
        parts: DateTimeParts,
        message: str,
        color_enabled: bool = False,
    ) -> int:
        """Render a record, replacing the buffer contents. Returns the byte length."""
        label, color = level_style(level)
        if not color_enabled:
            color = ""

        buffer.reset()
        header = color + _HEADER_FORMAT.format(*parts, label)
        buffer.write(header.encode("utf-8"))

        suffix = CL_CLR.encode("ascii") if color else b""
        body = message.encode("utf-8", errors="replace")
        room = buffer.remaining - len(suffix)
        if room > 0:
            buffer.write(body[: _utf8_cut(body, room)])
        buffer.write(suffix)
        return buffer.length

    @classmethod
    def render(
        cls,
        level: int,
        parts: DateTimeParts,
        message: str,
        color_enabled: bool = False,
        capacity: int = MAX_LINE_LENGTH,
    ) -> tuple[str, int]:
        """Render into a private buffer and return ``(text, length)``."""
        buffer = RenderBuffer(capacity)
        length = cls.render_into(buffer, level, parts, message, color_enabled)
        return buffer.text(), length
