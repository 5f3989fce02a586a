"""
Simulated PM2.5 feed for demos and local development.

Stands in for live sensor telemetry: official anchors read in the
85–115 μg/m³ band and community nodes run hotter at 95–145 μg/m³,
which is typical of a winter day in East Delhi.
"""

import logging
import random
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from pipeline import config
from pipeline.ingestion.models import Observation, Reading, Station, make_reading

logger = logging.getLogger(__name__)

OFFICIAL_BASE = (85.0, 30.0)      # (floor, spread)
COMMUNITY_BASE = (95.0, 50.0)
HISTORY_JITTER = 15.0             # peak-to-peak hourly variation
HISTORY_FLOOR = 5.0


class SimulatedFeed:
    """Random but reproducible (when seeded) observation source."""

    def __init__(self, stations: Sequence[Station], seed=None):
        self._stations = list(stations)
        self._rng = random.Random(seed)
        logger.info(
            "Simulated feed initialised for %d stations (seed=%s)",
            len(self._stations), seed,
        )

    def _base_value(self, station: Station) -> float:
        floor, spread = OFFICIAL_BASE if station.is_official else COMMUNITY_BASE
        return floor + self._rng.random() * spread

    def observe(self, now: Optional[datetime] = None) -> List[Observation]:
        """One fresh observation per catalog station, all stamped ``now``."""
        now = now or datetime.now(timezone.utc)
        return [
            Observation(
                station_id=s.station_id,
                pm25=round(self._base_value(s), 1),
                timestamp=now,
            )
            for s in self._stations
        ]

    def seed_history(
        self,
        station: Station,
        now: Optional[datetime] = None,
        window: int = config.HISTORY_WINDOW,
    ) -> List[Reading]:
        """Hourly backfill of ``window`` readings ending at ``now``, oldest first."""
        now = now or datetime.now(timezone.utc)
        base = self._base_value(station)
        history = []
        for i in range(window - 1, -1, -1):
            variation = (self._rng.random() - 0.5) * HISTORY_JITTER
            pm25 = max(HISTORY_FLOOR, base + variation)
            history.append(make_reading(pm25, now - timedelta(hours=i)))
        return history
