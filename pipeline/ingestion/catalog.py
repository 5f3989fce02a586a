"""
Sensor catalog loader.

Reads config/stations.json into Station records and checks the catalog's
structural rules up front. A broken catalog is a deployment error, so this
fails fast rather than degrading.
"""

import json
import logging
import os
from typing import List, Optional

from pipeline import config
from pipeline.ingestion.models import Station

logger = logging.getLogger(__name__)


def _parse_station(raw: dict) -> Station:
    try:
        return Station(
            station_id=str(raw["station_id"]),
            name=str(raw.get("name", raw["station_id"])),
            latitude=float(raw["latitude"]),
            longitude=float(raw["longitude"]),
            is_official=bool(raw.get("is_official", False)),
            anchor_id=raw.get("anchor_id"),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Malformed station entry {raw!r}: {e}") from e


def validate_catalog(stations: List[Station]) -> None:
    """
    Raise ValueError if the catalog breaks any structural rule:
      - station ids are unique
      - official stations carry no anchor
      - every community sensor names an anchor
    """
    seen = set()
    for s in stations:
        if s.station_id in seen:
            raise ValueError(f"Duplicate station_id in catalog: {s.station_id}")
        seen.add(s.station_id)
        if s.is_official and s.anchor_id:
            raise ValueError(f"Official station {s.station_id} must not have an anchor_id")
        if not s.is_official and not s.anchor_id:
            raise ValueError(f"Community sensor {s.station_id} has no anchor_id")

    officials = {s.station_id for s in stations if s.is_official}
    for s in stations:
        if s.anchor_id and s.anchor_id not in officials:
            logger.warning(
                "Sensor %s anchored to unknown station %s — it will not be verified",
                s.station_id, s.anchor_id,
            )


def load_catalog(path: Optional[str] = None) -> List[Station]:
    """
    Load and validate the sensor catalog.

    Raises:
        FileNotFoundError: If the catalog file does not exist.
        ValueError: If an entry is malformed or the catalog is inconsistent.
    """
    path = path or config.STATIONS_CONFIG
    if not os.path.exists(path):
        raise FileNotFoundError(
            f"CRITICAL: stations.json not found at {path}. Cannot build sensor mesh."
        )

    with open(path, "r") as f:
        raw = json.load(f)

    stations = [_parse_station(entry) for entry in raw]
    validate_catalog(stations)
    logger.info(
        "Catalog loaded from %s: %d stations (%d official)",
        path, len(stations), sum(1 for s in stations if s.is_official),
    )
    return stations
