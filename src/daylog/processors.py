"""
structlog front-end for a :class:`~daylog.core.Logger`.

``configure_structlog(logger)`` routes every structlog call through the
dispatcher, so ``get_logger(__name__).info("started", port=8080)`` produces::

    [2024-05-01 12:00:00.000][INFO ]: app.server: started port=8080
"""

from __future__ import annotations

import logging
from typing import Any

import orjson
import structlog
from structlog.typing import EventDict, FilteringBoundLogger, WrappedLogger

from .core import Logger
from .levels import LogLevel

_METHOD_LEVELS: dict[str, LogLevel] = {
    "debug": LogLevel.DEBUG,
    "info": LogLevel.INFO,
    "warn": LogLevel.WARN,
    "warning": LogLevel.WARN,
    "error": LogLevel.ERROR,
    "exception": LogLevel.ERROR,
    "critical": LogLevel.FATAL,
    "fatal": LogLevel.FATAL,
}

_EXCLUDED_KEYS = {"event", "level", "logger", "_name"}


def get_logger(name: str | None = None) -> FilteringBoundLogger:
    """Get a structlog logger bound to ``name``."""
    return structlog.get_logger(_name=name or "root")


# =============================================================================
# Structlog Processors
# =============================================================================


def add_logger_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Move the private ``_name`` key to ``logger``."""
    event_dict["logger"] = event_dict.pop("_name", "root")
    return event_dict


def render_value(value: Any) -> str:
    """Render one value on a single line."""
    if isinstance(value, str):
        return value.replace("\r", "\\r").replace("\n", "\\n")
    try:
        return orjson.dumps(value, default=str).decode()
    except (TypeError, orjson.JSONEncodeError):
        return repr(value)


def render_message(event_dict: EventDict) -> str:
    """Flatten an event dict to ``logger: event key=value ...``."""
    message = render_value(event_dict.get("event", ""))
    extras = [f"{k}={render_value(v)}" for k, v in event_dict.items() if k not in _EXCLUDED_KEYS]
    if extras:
        message = f"{message} " + " ".join(extras)
    name = event_dict.get("logger")
    if name and name != "root":
        message = f"{name}: {message}"
    return message


class DispatchRenderer:
    """Final processor: hand the flattened event to a :class:`Logger`."""

    def __init__(self, logger: Logger):
        self._logger = logger

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> str:
        level = _METHOD_LEVELS.get(method_name, LogLevel.INFO)
        try:
            self._logger.log(level, "%s", render_message(event_dict))
        except Exception:
            pass  # Fail silently to avoid breaking the application
        return ""


# =============================================================================
# Configuration Logic
# =============================================================================


class _NopFile:
    def write(self, s: str) -> None:
        pass

    def flush(self) -> None:
        pass


_NOP_FILE = _NopFile()


class SilentPrintLoggerFactory:
    """Logger factory that returns a logger writing to nowhere."""

    def __call__(self, *args: Any) -> structlog.PrintLogger:
        return structlog.PrintLogger(file=_NOP_FILE)


def configure_structlog(logger: Logger) -> None:
    """Route structlog output to ``logger``.

    structlog itself filters nothing; ``logger`` applies its current minimum
    level on every call, so later ``set_level`` changes take effect.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            add_logger_name,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            DispatchRenderer(logger),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.NOTSET),
        context_class=dict,
        logger_factory=SilentPrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
