"""
Refresh-cycle orchestrator.

Turns one batch of raw observations into a complete, internally consistent
Snapshot:
  1. Validate each observation and derive its Reading (NAQI + category)
  2. Group community sensors under their official anchor
  3. Aggregate each cluster (mean, deviations, confidence, calibration)
  4. Triangulate each member against the anchor and a second reference

Nothing here is published until the whole Snapshot is built.
"""

import logging
import random
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from pipeline import config
from pipeline.aqi.converter import Category
from pipeline.confidence.cluster import ClusterData, ClusterThresholds, aggregate
from pipeline.confidence.verifier import VerificationData, VerificationThresholds, verify
from pipeline.ingestion.models import Observation, Reading, Station, make_reading
from pipeline.ingestion.validator import validate_observation
from pipeline.streaming.history import HistoryBuffer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SensorSnapshot:
    """A sensor's derived state for one cycle."""
    station: Station
    reading: Reading
    history: Tuple[Reading, ...] = ()
    verification: Optional[VerificationData] = None

    @property
    def station_id(self) -> str:
        return self.station.station_id

    @property
    def name(self) -> str:
        return self.station.name

    @property
    def is_official(self) -> bool:
        return self.station.is_official

    @property
    def anchor_id(self) -> Optional[str]:
        return self.station.anchor_id

    @property
    def aqi(self) -> int:
        return self.reading.aqi

    @property
    def category(self) -> Category:
        return self.reading.category


@dataclass
class Snapshot:
    """Everything derived from one batch of raw observations."""
    generated_at: datetime
    sensors: Dict[str, SensorSnapshot] = field(default_factory=dict)
    clusters: Dict[str, ClusterData] = field(default_factory=dict)

    def members_of(self, anchor_id: str) -> List[SensorSnapshot]:
        return [s for s in self.sensors.values() if s.anchor_id == anchor_id]

    def cluster_for(self, station_id: str) -> Optional[ClusterData]:
        sensor = self.sensors.get(station_id)
        if sensor is None or sensor.anchor_id is None:
            return None
        return self.clusters.get(sensor.anchor_id)


# A second reference source maps an anchor's snapshot to an independent
# PM2.5 concentration for the same moment.
SecondaryReferenceSource = Callable[[SensorSnapshot], float]


class PerturbedAnchorReference:
    """
    Demo second reference: the anchor's own reading scaled by a random
    multiplier in [low, high]. A real deployment plugs in a second
    reference instrument instead.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        low: float = config.SECONDARY_REF_LOW,
        high: float = config.SECONDARY_REF_HIGH,
    ):
        if low > high:
            raise ValueError(f"low ({low}) must not exceed high ({high})")
        self._rng = rng or random.Random()
        self.low = low
        self.high = high

    def __call__(self, anchor: SensorSnapshot) -> float:
        return anchor.reading.pm25 * self._rng.uniform(self.low, self.high)


def _resolve_concentration(
    station: Station,
    obs: Optional[Observation],
    now: datetime,
) -> Tuple[float, datetime, bool]:
    """
    Concentration, timestamp and validity flag to use for one sensor.

    Missing or invalid input becomes an inactive 0.0 reading stamped with
    the cycle time, so history stays ordered oldest first.
    """
    if obs is None:
        logger.warning("No observation for sensor %s this cycle, marked inactive", station.station_id)
        return 0.0, now, False
    validation = validate_observation(obs, now=now)
    if not validation.is_valid:
        return 0.0, now, False
    return float(obs.pm25), obs.timestamp, True


def run_cycle(
    stations: Sequence[Station],
    observations: Iterable[Observation],
    secondary_reference: SecondaryReferenceSource,
    histories: Optional[HistoryBuffer] = None,
    now: Optional[datetime] = None,
    cluster_thresholds: Optional[ClusterThresholds] = None,
    verification_thresholds: Optional[VerificationThresholds] = None,
) -> Snapshot:
    """
    Compute a full Snapshot from one batch of observations.

    Args:
        stations: The sensor catalog.
        observations: Raw PM2.5 samples for this cycle, at most one per sensor.
        secondary_reference: Supplies the second reference for triangulation.
        histories: Rolling history; each new reading is appended to it.
        now: Cycle time (defaults to UTC now).
        cluster_thresholds: Optional override for the aggregator.
        verification_thresholds: Optional override for the verifier.

    Returns:
        Snapshot with every sensor and one ClusterData per anchor that has
        at least one member. Members of an anchor with no valid reading this
        cycle are left unverified.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    obs_by_id = {o.station_id: o for o in observations}

    unknown = set(obs_by_id) - {s.station_id for s in stations}
    if unknown:
        logger.warning("Ignoring observations for unknown sensors: %s", sorted(unknown))

    # 1. Readings for every sensor
    sensors: Dict[str, SensorSnapshot] = {}
    live = set()
    for station in stations:
        pm25, ts, valid = _resolve_concentration(station, obs_by_id.get(station.station_id), now)
        if valid:
            live.add(station.station_id)
        reading = make_reading(pm25, ts)
        if histories is not None:
            histories.push(station.station_id, reading)
            history = histories.get(station.station_id)
        else:
            history = (reading,)
        sensors[station.station_id] = SensorSnapshot(
            station=station, reading=reading, history=history,
        )

    # 2-4. Clusters and per-member verification
    clusters: Dict[str, ClusterData] = {}
    for anchor in [s for s in sensors.values() if s.is_official]:
        members = [s for s in sensors.values() if s.anchor_id == anchor.station_id]
        if not members:
            continue

        cluster = aggregate(
            members,
            anchor.reading.pm25,
            thresholds=cluster_thresholds,
            anchor_id=anchor.station_id,
        )
        cluster.anchor_name = anchor.name
        clusters[anchor.station_id] = cluster

        if anchor.station_id not in live:
            cluster.calibration_factor = 1.0
            logger.warning(
                "Anchor %s has no valid reading, %d members left unverified",
                anchor.station_id, len(members),
            )
            continue
        logger.info("Cluster %s: %s", anchor.station_id, cluster)

        for member in members:
            verification = verify(
                member.reading.pm25,
                anchor.reading.pm25,
                secondary_reference(anchor),
                thresholds=verification_thresholds,
            )
            sensors[member.station_id] = replace(member, verification=verification)

    snapshot = Snapshot(generated_at=now, sensors=sensors, clusters=clusters)
    logger.info(
        "Cycle complete: %d sensors, %d clusters, %d unverified",
        len(sensors), len(clusters),
        sum(1 for s in sensors.values() if s.verification and not s.verification.is_verified),
    )
    return snapshot
