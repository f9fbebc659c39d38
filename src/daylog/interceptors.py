"""
Interceptors for capturing standard library logs.
"""

from __future__ import annotations

import logging

from .core import Logger
from .levels import LogLevel


def stdlib_to_level(levelno: int) -> LogLevel:
    if levelno >= logging.CRITICAL:
        return LogLevel.FATAL
    if levelno >= logging.ERROR:
        return LogLevel.ERROR
    if levelno >= logging.WARNING:
        return LogLevel.WARN
    if levelno >= logging.INFO:
        return LogLevel.INFO
    if levelno >= logging.DEBUG:
        return LogLevel.DEBUG
    return LogLevel.VERBOSE


class RedirectStdLibHandler(logging.Handler):
    """
    Redirect standard library logging records to a :class:`Logger`.

    Third-party libraries that use :mod:`logging` end up in the same daily
    file as the host's own records.
    """

    def __init__(self, logger: Logger, level: int = logging.NOTSET):
        super().__init__(level)
        self._logger = logger

    def emit(self, record: logging.LogRecord) -> None:
        try:
            # Format message using stdlib's formatting (handles %s args)
            msg = self.format(record)
            if record.name and record.name != "root":
                msg = f"{record.name}: {msg}"
            self._logger.log(stdlib_to_level(record.levelno), "%s", msg)
        except Exception:
            self.handleError(record)


def intercept_stdlib(logger: Logger, level: int | str = logging.DEBUG) -> RedirectStdLibHandler:
    """Replace the root logger's handlers with a redirect to ``logger``."""
    handler = RedirectStdLibHandler(logger)
    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    return handler
