"""
Rolling reading history per sensor.

Each sensor keeps a fixed-size trailing window of Readings, oldest first.
With hourly refreshes the default window of 25 covers the trailing day.
"""

import logging
from collections import deque
from typing import Deque, Dict, Iterable, Tuple

from pipeline import config
from pipeline.ingestion.models import Reading

logger = logging.getLogger(__name__)


class HistoryBuffer:
    """
    Bounded per-sensor reading history.

    Usage
    -----
    1.  buf = HistoryBuffer(window=25)
    2.  buf.seed("mv-p1", readings)      ← optional backfill
    3.  buf.push("mv-p1", reading)       ← once per refresh cycle
    4.  buf.get("mv-p1")                 ← immutable tuple, oldest first
    """

    def __init__(self, window: int = config.HISTORY_WINDOW):
        if window < 1:
            raise ValueError(f"History window must be at least 1, got {window}")
        self.window = window
        self._buffers: Dict[str, Deque[Reading]] = {}

    def _buffer(self, station_id: str) -> Deque[Reading]:
        if station_id not in self._buffers:
            self._buffers[station_id] = deque(maxlen=self.window)
        return self._buffers[station_id]

    def seed(self, station_id: str, readings: Iterable[Reading]) -> None:
        """Replace a sensor's history with the given readings (oldest first)."""
        buf = deque(readings, maxlen=self.window)
        self._buffers[station_id] = buf
        logger.debug("History seeded for %s with %d readings", station_id, len(buf))

    def push(self, station_id: str, reading: Reading) -> None:
        """Append a reading; the oldest one drops out once the window is full."""
        self._buffer(station_id).append(reading)

    def get(self, station_id: str) -> Tuple[Reading, ...]:
        return tuple(self._buffers.get(station_id, ()))

    def __contains__(self, station_id: str) -> bool:
        return station_id in self._buffers

    def clear(self) -> None:
        self._buffers.clear()
