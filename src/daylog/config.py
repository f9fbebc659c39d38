"""
Logging Configuration.

Settings are read from ``DAYLOG_*`` environment variables (and ``.env``):

    DAYLOG_LEVEL=DEBUG
    DAYLOG_SINK=file
    DAYLOG_FILE=logs/app.log
    DAYLOG_REMAIN_DAYS=7
    DAYLOG_MAX_FILE_SIZE=16MiB
"""

from __future__ import annotations

from enum import Enum

from pydantic import ByteSize, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core import DEFAULT_LOG_FILE, DEFAULT_LOG_REMAIN_DAYS, LogConfig, Logger
from .levels import LogLevel
from .sinks import DEFAULT_MAX_FILE_SIZE, Clock, ConsoleSink


class LogLevelName(str, Enum):
    VERBOSE = "VERBOSE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    FATAL = "FATAL"
    SILENT = "SILENT"

    @property
    def level(self) -> LogLevel:
        return LogLevel[self.value]


class SinkName(str, Enum):
    STDOUT = "stdout"
    STDERR = "stderr"
    FILE = "file"


class LoggingSettings(BaseSettings):
    """Startup configuration for the process-wide logger."""

    model_config = SettingsConfigDict(
        env_prefix="DAYLOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    level: LogLevelName = Field(default=LogLevelName.INFO, description="Minimum level")
    sink: SinkName = Field(default=SinkName.STDOUT, description="Active sink (stdout, stderr, file)")
    color: bool = Field(default=False, description="Wrap lines in ANSI level colors")
    fflush: bool = Field(default=True, description="Flush after every write")
    remain_days: int = Field(default=DEFAULT_LOG_REMAIN_DAYS, ge=0, description="Daily files to keep")
    file: str = Field(default=DEFAULT_LOG_FILE, min_length=1, description="Daily file stem")
    max_file_size: ByteSize = Field(
        default=ByteSize(DEFAULT_MAX_FILE_SIZE),
        description="Size ceiling before the daily file is truncated",
    )

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: object) -> object:
        if isinstance(v, str):
            v = v.strip().upper()
            return {"WARNING": "WARN", "CRITICAL": "FATAL"}.get(v, v)
        return v

    @field_validator("sink", mode="before")
    @classmethod
    def _normalize_sink(cls, v: object) -> object:
        return v.strip().lower() if isinstance(v, str) else v


def build_logger(settings: LoggingSettings | None = None, *, clock: Clock | None = None) -> Logger:
    """Create a :class:`Logger` configured from ``settings`` (environment by default)."""
    settings = settings or LoggingSettings()

    logger = Logger(LogConfig(), clock=clock)
    logger.set_level(settings.level.level)
    logger.enable_color(settings.color)
    logger.set_fflush(settings.fflush)
    logger.set_remain_days(settings.remain_days)
    logger.set_file(settings.file)
    logger.set_max_file_size(int(settings.max_file_size))

    if settings.sink is SinkName.FILE:
        logger.set_sink(logger.file_sink())
    else:
        logger.set_sink(ConsoleSink(settings.sink.value))
    return logger
