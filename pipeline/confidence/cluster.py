"""
Cluster Aggregator.

Summarises the community sensors anchored to one official station:
cluster mean, per-member deviation and anomaly flags, an overall
confidence tier, and a calibration factor against the anchor reading.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from pipeline import config
from pipeline.confidence.verifier import Tier

logger = logging.getLogger(__name__)

MIN_ACTIVE_MEMBERS = 2   # Fewer active members than this forces Low confidence


@dataclass(frozen=True)
class ClusterThresholds:
    """Deviation cutoffs for member anomalies and cluster confidence."""
    anomaly: float = config.CLUSTER_ANOMALY_THRESHOLD
    low_confidence: float = config.CLUSTER_LOW_THRESHOLD
    medium_confidence: float = config.CLUSTER_MEDIUM_THRESHOLD


@dataclass(frozen=True)
class MemberStatus:
    deviation: float
    is_anomaly: bool


@dataclass
class ClusterData:
    """Aggregate view of one anchor's cluster for one refresh cycle."""
    mean_concentration: float
    confidence: Tier
    anomaly_detected: bool
    active_sensors: int
    calibration_factor: float
    member_status: Dict[str, MemberStatus] = field(default_factory=dict)
    anchor_name: str = ""

    @property
    def max_deviation(self) -> float:
        return max((m.deviation for m in self.member_status.values()), default=0.0)

    def __str__(self) -> str:
        return (
            f"[{self.confidence.value}] anchor={self.anchor_name or '?'} "
            f"mean={self.mean_concentration:.1f} active={self.active_sensors} "
            f"calibration={self.calibration_factor:.3f} "
            f"anomaly={'yes' if self.anomaly_detected else 'no'}"
        )


def _empty_cluster() -> ClusterData:
    return ClusterData(
        mean_concentration=0.0,
        confidence=Tier.LOW,
        anomaly_detected=False,
        active_sensors=0,
        calibration_factor=1.0,
    )


def _confidence_tier(active: int, max_deviation: float, t: ClusterThresholds) -> Tier:
    if active < MIN_ACTIVE_MEMBERS:
        return Tier.LOW
    if max_deviation > t.low_confidence:
        return Tier.LOW
    if max_deviation > t.medium_confidence:
        return Tier.MEDIUM
    return Tier.HIGH


def aggregate(
    members: Iterable,
    anchor_concentration: float,
    thresholds: Optional[ClusterThresholds] = None,
    anchor_id: Optional[str] = None,
) -> ClusterData:
    """
    Aggregate the member sensors of one cluster.

    Args:
        members: Sensors with a ``station_id`` and a current ``reading.pm25``.
        anchor_concentration: The anchor station's current PM2.5.
        thresholds: Optional override of the anomaly/confidence cutoffs.
        anchor_id: When given, a member carrying the anchor's own identity
                   is ignored.

    Returns:
        ClusterData. ``anchor_name`` is left empty for the caller to fill in.
        A cluster with no active (pm25 > 0) members yields the degenerate
        result: zero mean, Low confidence, calibration factor 1.
    """
    t = thresholds or ClusterThresholds()

    active = [
        m for m in members
        if m.reading.pm25 > 0 and (anchor_id is None or m.station_id != anchor_id)
    ]
    if not active:
        logger.debug("Cluster has no active members")
        return _empty_cluster()

    mean = sum(m.reading.pm25 for m in active) / len(active)

    member_status: Dict[str, MemberStatus] = {}
    for m in active:
        deviation = abs(m.reading.pm25 - mean) / mean
        member_status[m.station_id] = MemberStatus(
            deviation=deviation,
            is_anomaly=deviation > t.anomaly,
        )

    anomaly_detected = any(s.is_anomaly for s in member_status.values())
    max_deviation = max(s.deviation for s in member_status.values())

    result = ClusterData(
        mean_concentration=mean,
        confidence=_confidence_tier(len(active), max_deviation, t),
        anomaly_detected=anomaly_detected,
        active_sensors=len(active),
        calibration_factor=anchor_concentration / (mean or 1),
        member_status=member_status,
    )

    if anomaly_detected:
        logger.warning(
            "Cluster anomaly: %d of %d members beyond %.2f deviation (max=%.2f)",
            sum(1 for s in member_status.values() if s.is_anomaly),
            len(active), t.anomaly, max_deviation,
        )
    return result
