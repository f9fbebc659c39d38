"""
Severity levels, their labels and ANSI colors.
"""

from __future__ import annotations

from enum import IntEnum

# =============================================================================
# Status Codes
# =============================================================================

LOG_FILTERED = -10
LOG_INVALID_PARAM = -10
LOG_OK = 0

# =============================================================================
# ANSI Color Codes
# =============================================================================

CL_CLR = "\033[0m"
CL_WHITE = "\033[37m"
CL_GREEN = "\033[32m"
CL_YELLOW = "\033[33m"
CL_RED = "\033[31m"
CL_RED_WHT = "\033[1;31;47m"


class LogLevel(IntEnum):
    """Record severity, ordered so that higher values are more severe."""

    VERBOSE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    FATAL = 5
    SILENT = 6  # threshold only, never rendered


# level -> (label, color)
LEVEL_TABLE: dict[LogLevel, tuple[str, str]] = {
    LogLevel.VERBOSE: ("VERB ", ""),
    LogLevel.DEBUG: ("DEBUG", CL_WHITE),
    LogLevel.INFO: ("INFO ", CL_GREEN),
    LogLevel.WARN: ("WARN ", CL_YELLOW),
    LogLevel.ERROR: ("ERROR", CL_RED),
    LogLevel.FATAL: ("FATAL", CL_RED_WHT),
}


def level_style(level: int) -> tuple[str, str]:
    """Return ``(label, color)`` for a level; unknown levels render bare."""
    return LEVEL_TABLE.get(level, ("", ""))  # type: ignore[call-overload]


def parse_level(name: str) -> LogLevel | None:
    """Resolve a case-insensitive level name (``"warning"`` is accepted for WARN)."""
    key = name.strip().upper()
    if key == "WARNING":
        key = "WARN"
    elif key == "CRITICAL":
        key = "FATAL"
    try:
        return LogLevel[key]
    except KeyError:
        return None
