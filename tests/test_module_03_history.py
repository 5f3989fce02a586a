"""
Tests for Module 03 — Rolling reading history.
"""
from datetime import datetime, timezone, timedelta

import pytest

from pipeline.ingestion.models import make_reading
from pipeline.streaming.history import HistoryBuffer

NOW = datetime(2026, 1, 15, 10, 0, tzinfo=timezone.utc)


def _hourly(values):
    n = len(values)
    return [make_reading(v, NOW - timedelta(hours=n - 1 - i)) for i, v in enumerate(values)]


class TestHistoryBuffer:
    def test_default_window_is_a_trailing_day(self):
        assert HistoryBuffer().window == 25

    def test_oldest_first(self):
        buf = HistoryBuffer(window=5)
        for r in _hourly([10.0, 20.0, 30.0]):
            buf.push("mv-p1", r)
        assert [r.pm25 for r in buf.get("mv-p1")] == [10.0, 20.0, 30.0]

    def test_window_evicts_oldest(self):
        buf = HistoryBuffer(window=3)
        for r in _hourly([1.0, 2.0, 3.0, 4.0, 5.0]):
            buf.push("mv-p1", r)
        assert [r.pm25 for r in buf.get("mv-p1")] == [3.0, 4.0, 5.0]

    def test_seed_replaces_and_truncates(self):
        buf = HistoryBuffer(window=2)
        buf.push("mv-p1", make_reading(99.0, NOW))
        buf.seed("mv-p1", _hourly([1.0, 2.0, 3.0]))
        assert [r.pm25 for r in buf.get("mv-p1")] == [2.0, 3.0]

    def test_sensors_are_independent(self):
        buf = HistoryBuffer(window=5)
        buf.push("a", make_reading(10.0, NOW))
        buf.push("b", make_reading(20.0, NOW))
        assert len(buf.get("a")) == 1
        assert buf.get("b")[0].pm25 == 20.0

    def test_unknown_sensor_is_empty(self):
        buf = HistoryBuffer()
        assert buf.get("nope") == ()
        assert "nope" not in buf

    def test_get_returns_immutable_copy(self):
        buf = HistoryBuffer(window=5)
        buf.push("a", make_reading(10.0, NOW))
        snapshot = buf.get("a")
        buf.push("a", make_reading(11.0, NOW))
        assert len(snapshot) == 1

    def test_clear(self):
        buf = HistoryBuffer(window=5)
        buf.push("a", make_reading(10.0, NOW))
        buf.clear()
        assert buf.get("a") == ()

    def test_invalid_window(self):
        with pytest.raises(ValueError):
            HistoryBuffer(window=0)
