"""
Typed containers for sensor metadata, raw observations and derived readings.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from pipeline.aqi.converter import Category, convert

PM10_RATIO = 1.6   # PM10 is estimated as a fixed multiple of PM2.5


@dataclass(frozen=True)
class Station:
    """Static catalog entry for an official station or a community sensor."""
    station_id: str
    name: str
    latitude: float
    longitude: float
    is_official: bool = False
    anchor_id: Optional[str] = None   # community sensors only

    @property
    def coordinates(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(frozen=True)
class Observation:
    """One raw PM2.5 sample as delivered by the feed."""
    station_id: str
    pm25: float          # μg/m³
    timestamp: datetime


@dataclass(frozen=True)
class Reading:
    """A point-in-time reading with its derived index. Immutable."""
    timestamp: datetime
    pm25: float
    pm10: float
    aqi: int
    category: Category


def make_reading(pm25: float, timestamp: datetime) -> Reading:
    """
    Build a Reading from a raw PM2.5 value, deriving PM10 and the NAQI.

    The index is computed from the unrounded value; pm25 is stored to 0.1.
    """
    aqi, category = convert(float(pm25))
    pm25 = round(float(pm25), 1)
    return Reading(
        timestamp=timestamp,
        pm25=pm25,
        pm10=round(pm25 * PM10_RATIO, 1),
        aqi=aqi,
        category=category,
    )
