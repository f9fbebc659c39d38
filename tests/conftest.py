import time

import pytest

from daylog import BaseSink, LogConfig, Logger, LogLevel
from daylog.sinks import SECONDS_PER_DAY


class FakeClock:
    """Manually advanced epoch clock."""

    def __init__(self, start: float):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def advance_days(self, days: int = 1) -> None:
        self.now += days * SECONDS_PER_DAY


class RecordingSink(BaseSink):
    """Keeps every written line in memory."""

    def __init__(self):
        self.lines: list[str] = []
        self.flushes = 0
        self.closed = False

    def write(self, data, length: int) -> None:
        self.lines.append(bytes(data[:length]).decode("utf-8"))

    def flush(self) -> None:
        self.flushes += 1

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def clock() -> FakeClock:
    """Clock fixed at local noon, 2024-06-10 (far from any day boundary)."""
    return FakeClock(time.mktime((2024, 6, 10, 12, 0, 0, 0, 0, -1)))


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def logger(clock, recording_sink) -> Logger:
    lg = Logger(LogConfig(min_level=LogLevel.INFO), clock=clock)
    lg.set_sink(recording_sink)
    return lg


@pytest.fixture
def file_config(tmp_path) -> LogConfig:
    return LogConfig(base_file_path=str(tmp_path / "app"), retention_days=3)
