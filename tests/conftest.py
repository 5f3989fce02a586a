"""Shared test fixtures and configuration for the MeshPulse test suite."""

from datetime import datetime, timedelta, timezone

import pytest

from pipeline.ingestion.catalog import load_catalog
from pipeline.ingestion.models import Observation, make_reading

NOW = datetime(2026, 1, 15, 10, 0, tzinfo=timezone.utc)


class FixedReference:
    """Second reference equal to the anchor reading times a fixed factor."""

    def __init__(self, factor: float = 1.0):
        self.factor = factor

    def __call__(self, anchor) -> float:
        return anchor.reading.pm25 * self.factor


class FixedFeed:
    """Feed that returns the same PM2.5 values every cycle."""

    def __init__(self, values: dict):
        self.values = dict(values)
        self.fail = False

    def observe(self, now=None):
        if self.fail:
            raise RuntimeError("feed offline")
        ts = now or NOW
        return [Observation(station_id=sid, pm25=v, timestamp=ts) for sid, v in self.values.items()]

    def seed_history(self, station, now=None, window=25):
        now = now or NOW
        base = self.values.get(station.station_id, 50.0)
        return [make_reading(base, now - timedelta(hours=i)) for i in range(window - 1, -1, -1)]


UNIFORM_VALUES = {
    "official-md": 100.0, "mv-p1": 100.0, "mv-p2": 100.0, "mv-p3": 100.0, "mv-p7": 100.0,
    "official-pg": 80.0, "mv-p4": 80.0, "mv-p5": 80.0, "mv-p6": 80.0, "mv-p8": 80.0,
}


@pytest.fixture(scope="session")
def catalog():
    """The default Mayur Vihar catalog from config/stations.json."""
    return load_catalog()


@pytest.fixture()
def uniform_feed():
    return FixedFeed(UNIFORM_VALUES)


@pytest.fixture()
def fixed_reference():
    return FixedReference(1.0)


@pytest.fixture()
def now():
    return NOW


@pytest.fixture()
def make_feed():
    """Factory for FixedFeed so tests can pick their own values."""
    return FixedFeed


@pytest.fixture()
def make_reference():
    return FixedReference
