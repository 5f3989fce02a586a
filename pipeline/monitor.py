"""
MeshMonitor — owns the refresh cycle.

Pulls a batch of observations from the feed, runs the orchestrator and
publishes the resulting Snapshot in one swap, so readers (the scheduler
log, the API) never see a half-computed cycle.
"""

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from pipeline import config
from pipeline.confidence.cluster import ClusterThresholds
from pipeline.confidence.verifier import VerificationThresholds
from pipeline.ingestion.models import Station
from pipeline.orchestrator import SecondaryReferenceSource, Snapshot, run_cycle
from pipeline.reconcile import SnapshotDiff, diff_snapshots
from pipeline.streaming.history import HistoryBuffer

logger = logging.getLogger(__name__)


class MeshMonitor:
    """
    Holds the latest Snapshot and the rolling history behind it.

    Usage
    -----
    1.  monitor = MeshMonitor(stations, feed, secondary_reference)
    2.  monitor.seed_histories()        ← optional backfill
    3.  monitor.refresh()               ← on a timer or on demand
    4.  monitor.snapshot                ← latest complete Snapshot (or None)
    """

    def __init__(
        self,
        stations: Sequence[Station],
        feed,
        secondary_reference: SecondaryReferenceSource,
        window: int = config.HISTORY_WINDOW,
        cluster_thresholds: Optional[ClusterThresholds] = None,
        verification_thresholds: Optional[VerificationThresholds] = None,
    ):
        self.stations = list(stations)
        self._feed = feed
        self._secondary_reference = secondary_reference
        self._cluster_thresholds = cluster_thresholds
        self._verification_thresholds = verification_thresholds
        self.histories = HistoryBuffer(window=window)
        self._snapshot: Optional[Snapshot] = None
        self._last_diff = SnapshotDiff()
        self._lock = threading.Lock()
        self.cycles = 0

    @property
    def snapshot(self) -> Optional[Snapshot]:
        with self._lock:
            return self._snapshot

    @property
    def last_diff(self) -> SnapshotDiff:
        with self._lock:
            return self._last_diff

    def seed_histories(self, now: Optional[datetime] = None) -> None:
        """Backfill every sensor's history up to one hour before ``now``."""
        now = now or datetime.now(timezone.utc)
        backfill = max(0, self.histories.window - 1)
        with self._lock:
            for station in self.stations:
                self.histories.seed(
                    station.station_id,
                    self._feed.seed_history(station, now - timedelta(hours=1), backfill),
                )
        logger.info("History backfilled for %d sensors (%d points each)", len(self.stations), backfill)

    def refresh(self, now: Optional[datetime] = None) -> Optional[Snapshot]:
        """
        Run one refresh cycle and publish its Snapshot.

        A feed failure is logged and the previous Snapshot stays current.
        """
        now = now or datetime.now(timezone.utc)
        with self._lock:
            try:
                observations = self._feed.observe(now)
            except Exception as exc:
                logger.error("Feed failed, keeping previous snapshot: %s", exc)
                return self._snapshot

            snapshot = run_cycle(
                self.stations,
                observations,
                self._secondary_reference,
                histories=self.histories,
                now=now,
                cluster_thresholds=self._cluster_thresholds,
                verification_thresholds=self._verification_thresholds,
            )
            diff = diff_snapshots(self._snapshot, snapshot)
            self._snapshot = snapshot
            self._last_diff = diff
            self.cycles += 1

        logger.info(
            "Snapshot #%d published: %d added, %d updated, %d removed",
            self.cycles, len(diff.added), len(diff.updated), len(diff.removed),
        )
        return snapshot
