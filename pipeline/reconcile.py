"""
Snapshot reconciliation.

Presentation layers keep their own retained state (map markers, cluster
overlays) keyed by sensor identity. Instead of redrawing everything on
every refresh they diff the previous Snapshot against the new one and
apply only what changed.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from pipeline.orchestrator import SensorSnapshot, Snapshot

# The parts of a sensor a consumer actually displays.
VisualState = Tuple[int, str, Optional[str], bool, bool]


@dataclass
class SnapshotDiff:
    added: List[str] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.updated or self.removed)

    def __len__(self) -> int:
        return len(self.added) + len(self.updated) + len(self.removed)


def visual_state(sensor: SensorSnapshot, snapshot: Snapshot) -> VisualState:
    v = sensor.verification
    cluster = snapshot.cluster_for(sensor.station_id)
    member = cluster.member_status.get(sensor.station_id) if cluster else None
    return (
        sensor.aqi,
        sensor.category.value,
        v.tier.value if v else None,
        bool(v and v.anomaly_detected),
        bool(member and member.is_anomaly),
    )


def diff_snapshots(previous: Optional[Snapshot], current: Snapshot) -> SnapshotDiff:
    """
    Compare two snapshots sensor by sensor.

    A None ``previous`` means nothing has been rendered yet, so every
    sensor in ``current`` is reported as added. Ids are sorted for
    stable output.
    """
    diff = SnapshotDiff()
    if previous is None:
        diff.added = sorted(current.sensors)
        return diff

    before: Dict[str, VisualState] = {
        sid: visual_state(s, previous) for sid, s in previous.sensors.items()
    }
    after: Dict[str, VisualState] = {
        sid: visual_state(s, current) for sid, s in current.sensors.items()
    }

    diff.added = sorted(set(after) - set(before))
    diff.removed = sorted(set(before) - set(after))
    diff.updated = sorted(
        sid for sid in set(after) & set(before) if after[sid] != before[sid]
    )
    return diff
