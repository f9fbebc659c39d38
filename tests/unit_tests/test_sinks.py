"""
Console and rotating file sink tests.
"""

from __future__ import annotations

import os
import time
from pathlib import Path

import pytest

from daylog.sinks import (
    SECONDS_PER_DAY,
    ConsoleSink,
    RotatingFileSink,
    daily_file_name,
    local_day,
    remove_quietly,
)


def _write(sink: RotatingFileSink, text: str) -> None:
    data = text.encode()
    sink.write(data, len(data))


def _day_file(config, ts: float) -> Path:
    return Path(daily_file_name(config.base_file_path, ts))


def _existing_logs(tmp_path: Path) -> set[str]:
    return {p.name for p in tmp_path.glob("app-*.log")}


@pytest.fixture
def shanghai_tz():
    """Run the test in UTC+8, restoring the process zone afterwards."""
    saved = os.environ.get("TZ")
    os.environ["TZ"] = "Asia/Shanghai"
    time.tzset()
    yield
    if saved is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = saved
    time.tzset()


class TestConsoleSink:
    """stdout / stderr variants"""

    def test_stdout_appends_newline(self, capsys) -> None:
        ConsoleSink("stdout").write(b"hello world", 5)
        assert capsys.readouterr().out == "hello\n"

    def test_stderr(self, capsys) -> None:
        ConsoleSink("stderr").write(b"oops", 4)
        captured = capsys.readouterr()
        assert captured.err == "oops\n"
        assert captured.out == ""

    def test_unknown_stream_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            ConsoleSink("stdin")  # type: ignore[arg-type]

    def test_broken_stream_is_swallowed(self, monkeypatch) -> None:
        class Broken:
            def write(self, s):
                raise OSError("closed")

            def flush(self):
                raise OSError("closed")

        monkeypatch.setattr("sys.stdout", Broken())
        sink = ConsoleSink("stdout")
        sink.write(b"x", 1)
        sink.flush()


class TestDailyFileName:
    """File name derivation"""

    def test_pattern(self) -> None:
        ts = time.mktime((2024, 1, 5, 8, 0, 0, 0, 0, -1))
        assert daily_file_name("logs/app", ts) == "logs/app-2024-01-05.log"

    def test_independent_of_time_of_day(self) -> None:
        morning = time.mktime((2024, 6, 10, 0, 0, 1, 0, 0, -1))
        evening = time.mktime((2024, 6, 10, 23, 59, 59, 0, 0, -1))
        assert daily_file_name("app", morning) == daily_file_name("app", evening)
        assert daily_file_name("app", morning) == daily_file_name("app", morning)

    def test_accepts_path_objects(self, tmp_path) -> None:
        ts = time.mktime((2024, 6, 10, 12, 0, 0, 0, 0, -1))
        assert daily_file_name(tmp_path / "app", ts) == f"{tmp_path / 'app'}-2024-06-10.log"


class TestOpen:
    """First write and failure handling"""

    def test_first_write_creates_todays_file(self, file_config, clock) -> None:
        sink = RotatingFileSink(file_config, clock=clock)
        _write(sink, "hello")
        path = _day_file(file_config, clock.now)
        assert sink.current_file == str(path)
        assert path.read_text() == "hello\n"
        assert sink.last_rotation_ts == clock.now

    def test_existing_file_is_appended(self, file_config, clock) -> None:
        path = _day_file(file_config, clock.now)
        path.write_text("earlier process\n")
        sink = RotatingFileSink(file_config, clock=clock)
        _write(sink, "later")
        assert path.read_text() == "earlier process\nlater\n"

    def test_parent_directory_is_created(self, tmp_path, file_config, clock) -> None:
        file_config.base_file_path = str(tmp_path / "nested" / "dir" / "app")
        sink = RotatingFileSink(file_config, clock=clock)
        _write(sink, "x")
        assert _day_file(file_config, clock.now).exists()

    def test_open_failure_is_silent_and_retried(self, tmp_path, file_config, clock) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        file_config.base_file_path = str(blocker / "app")
        sink = RotatingFileSink(file_config, clock=clock)

        _write(sink, "lost")
        assert sink.current_file is None

        file_config.base_file_path = str(tmp_path / "app")
        _write(sink, "kept")
        assert _day_file(file_config, clock.now).read_text() == "kept\n"

    def test_without_flush_each_write_data_waits_for_flush(self, file_config, clock) -> None:
        file_config.flush_each_write = False
        sink = RotatingFileSink(file_config, clock=clock)
        _write(sink, "buffered")
        path = _day_file(file_config, clock.now)
        assert path.read_text() == ""
        sink.flush()
        assert path.read_text() == "buffered\n"

    def test_close_then_write_reopens(self, file_config, clock) -> None:
        sink = RotatingFileSink(file_config, clock=clock)
        _write(sink, "one")
        sink.close()
        assert sink.current_file is None
        _write(sink, "two")
        assert _day_file(file_config, clock.now).read_text() == "one\ntwo\n"


class TestDayRotation:
    """A new local day switches to a new file"""

    def test_second_day_goes_to_new_file(self, file_config, clock) -> None:
        sink = RotatingFileSink(file_config, clock=clock)
        day1 = clock.now
        _write(sink, "day one")
        clock.advance_days(1)
        _write(sink, "day two")
        clock.advance(60)
        _write(sink, "day two again")

        assert _day_file(file_config, day1).read_text() == "day one\n"
        assert _day_file(file_config, clock.now).read_text() == "day two\nday two again\n"
        assert sink.current_file == str(_day_file(file_config, clock.now))

    def test_same_day_does_not_rotate(self, file_config, clock) -> None:
        sink = RotatingFileSink(file_config, clock=clock)
        _write(sink, "a")
        first_rotation = sink.last_rotation_ts
        clock.advance(3600)
        _write(sink, "b")
        assert sink.last_rotation_ts == first_rotation

    def test_flush_checks_rotation(self, file_config, clock) -> None:
        sink = RotatingFileSink(file_config, clock=clock)
        _write(sink, "a")
        clock.advance_days(1)
        sink.flush()
        assert sink.current_file == str(_day_file(file_config, clock.now))

    def test_rotates_at_local_midnight(self, shanghai_tz, file_config, tmp_path) -> None:
        late = time.mktime((2024, 6, 10, 23, 0, 0, 0, 0, -1))
        early = time.mktime((2024, 6, 11, 1, 0, 0, 0, 0, -1))
        # same UTC day, different local days
        assert late // SECONDS_PER_DAY == early // SECONDS_PER_DAY

        now = [late]
        sink = RotatingFileSink(file_config, clock=lambda: now[0])
        _write(sink, "before midnight")
        now[0] = early
        _write(sink, "after midnight")

        assert _existing_logs(tmp_path) == {"app-2024-06-10.log", "app-2024-06-11.log"}
        assert sink.current_file == str(tmp_path / "app-2024-06-11.log")
        assert (tmp_path / "app-2024-06-10.log").read_text() == "before midnight\n"
        assert (tmp_path / "app-2024-06-11.log").read_text() == "after midnight\n"

    def test_local_day_follows_zone_offset(self, shanghai_tz) -> None:
        midnight = time.mktime((2024, 6, 11, 0, 0, 0, 0, 0, -1))
        assert local_day(midnight) == local_day(midnight - 1) + 1
        assert local_day(midnight) == local_day(midnight + SECONDS_PER_DAY - 1)


class TestRetention:
    """Old daily files are removed"""

    def test_only_most_recent_days_remain(self, tmp_path, file_config, clock) -> None:
        sink = RotatingFileSink(file_config, clock=clock)
        days = []
        for _ in range(6):
            days.append(clock.now)
            _write(sink, "entry")
            clock.advance_days(1)

        expected = {Path(daily_file_name(file_config.base_file_path, ts)).name for ts in days[-3:]}
        assert _existing_logs(tmp_path) == expected

    def test_first_sweep_covers_thirty_days(self, tmp_path, file_config, clock) -> None:
        for days_ago in (2, 5, 30, 31, 45):
            _day_file(file_config, clock.now - days_ago * SECONDS_PER_DAY).write_text("old\n")

        sink = RotatingFileSink(file_config, clock=clock)
        _write(sink, "today")

        remaining = {
            days_ago
            for days_ago in (2, 5, 30, 31, 45)
            if _day_file(file_config, clock.now - days_ago * SECONDS_PER_DAY).exists()
        }
        assert remaining == {2, 31, 45}

    def test_gap_longer_than_retention_sweeps_range(self, tmp_path, file_config, clock) -> None:
        sink = RotatingFileSink(file_config, clock=clock)
        _write(sink, "start")
        start = clock.now
        for days_ago in (1, 2):
            _day_file(file_config, start + days_ago * SECONDS_PER_DAY).write_text("other process\n")

        clock.advance_days(10)
        _write(sink, "back")

        assert not _day_file(file_config, start).exists()
        assert not _day_file(file_config, start + SECONDS_PER_DAY).exists()
        assert _day_file(file_config, clock.now).exists()

    def test_zero_retention_keeps_only_the_open_file(self, tmp_path, file_config, clock) -> None:
        file_config.retention_days = 0
        sink = RotatingFileSink(file_config, clock=clock)
        for _ in range(3):
            _write(sink, "entry")
            clock.advance_days(1)
        assert _existing_logs(tmp_path) == {Path(sink.current_file).name}

    def test_missing_files_are_ignored(self, tmp_path, file_config, clock) -> None:
        assert remove_quietly(str(tmp_path / "absent.log")) is False
        sink = RotatingFileSink(file_config, clock=clock)
        sink._sweep(clock.now, 30)
        sink._sweep(clock.now, 1)
        assert _existing_logs(tmp_path) == set()


class TestSizeRollover:
    """Oversized files are truncated under the same name"""

    def test_oversized_file_is_truncated_in_place(self, file_config, clock) -> None:
        file_config.max_file_size = 100
        sink = RotatingFileSink(file_config, clock=clock)
        for _ in range(5):
            _write(sink, "x" * 20)
        name = sink.current_file
        assert Path(name).stat().st_size == 105

        _write(sink, "marker")

        assert sink.current_file == name
        assert Path(name).read_text() == "marker\n"

    def test_file_at_ceiling_is_kept(self, file_config, clock) -> None:
        file_config.max_file_size = 42
        sink = RotatingFileSink(file_config, clock=clock)
        _write(sink, "x" * 20)
        _write(sink, "y" * 20)
        _write(sink, "z")
        assert Path(sink.current_file).read_text() == "x" * 20 + "\n" + "y" * 20 + "\nz\n"

    def test_preexisting_large_file_is_reset_on_first_write(self, file_config, clock) -> None:
        file_config.max_file_size = 10
        path = _day_file(file_config, clock.now)
        path.write_text("y" * 50)
        sink = RotatingFileSink(file_config, clock=clock)
        _write(sink, "fresh")
        assert path.read_text() == "fresh\n"
