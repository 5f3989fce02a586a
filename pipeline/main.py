"""
MeshPulse — Pipeline Main Entry Point

Every REFRESH_INTERVAL_SECONDS an APScheduler job:
  1. Pulls one batch of observations from the feed
  2. Converts each reading to NAQI
  3. Aggregates every anchor's cluster
  4. Triangulates every community sensor
  5. Publishes the Snapshot and logs cluster verdicts

The main thread only waits for SIGINT/SIGTERM.
"""

import logging
import random
import signal
import sys
import time
from datetime import datetime, timezone

from pipeline import config

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [PIPELINE] %(levelname)s %(name)s — %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("pipeline.main")

# ── Graceful shutdown flag ─────────────────────────────────────────────────────
_running = True


def _shutdown(sig, frame):
    global _running
    logger.info("Shutdown signal (%s) — stopping scheduler.", sig)
    _running = False


def build_monitor():
    """Wire catalog, simulated feed and secondary reference into a MeshMonitor."""
    from pipeline.ingestion.catalog import load_catalog
    from pipeline.ingestion.simulator import SimulatedFeed
    from pipeline.monitor import MeshMonitor
    from pipeline.orchestrator import PerturbedAnchorReference

    stations = load_catalog()
    rng = random.Random(config.SIMULATION_SEED)
    feed = SimulatedFeed(stations, seed=config.SIMULATION_SEED)
    monitor = MeshMonitor(stations, feed, PerturbedAnchorReference(rng))
    monitor.seed_histories()
    return monitor


def _refresh_job(monitor) -> None:
    """APScheduler calls this every REFRESH_INTERVAL_SECONDS."""
    logger.info("── Refresh cycle starting ──")
    snapshot = monitor.refresh()
    if snapshot is None:
        logger.warning("No snapshot available yet")
        return

    for anchor_id, cluster in snapshot.clusters.items():
        if cluster.anomaly_detected:
            logger.warning("⚠  ANOMALY   cluster=%s %s", anchor_id, cluster)
        else:
            logger.info("✓  CLUSTER   cluster=%s %s", anchor_id, cluster)

    for sensor in snapshot.sensors.values():
        v = sensor.verification
        if v is None:
            continue
        if v.anomaly_detected:
            logger.warning(
                "🚨 DRIFT     sensor=%-6s aqi=%d category=%s score=%d",
                sensor.station_id, sensor.aqi, sensor.category.value, v.confidence,
            )
        elif v.hyperlocal_event:
            logger.warning(
                "⚠  SPIKE     sensor=%-6s aqi=%d pm25=%.1f anchor=%.1f",
                sensor.station_id, sensor.aqi, v.local, v.primary_ref,
            )
    logger.info("── Refresh cycle complete ──")


def main() -> None:
    from apscheduler.schedulers.background import BackgroundScheduler

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    monitor = build_monitor()

    scheduler = BackgroundScheduler()
    scheduler.add_job(
        func=_refresh_job,
        args=[monitor],
        trigger="interval",
        seconds=config.REFRESH_INTERVAL_SECONDS,
        next_run_time=datetime.now(timezone.utc),  # run immediately on start
        id="mesh_refresh",
        name="Mesh Refresh",
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info("Scheduler started — refreshing every %ds", config.REFRESH_INTERVAL_SECONDS)

    try:
        while _running:
            time.sleep(1)
    finally:
        logger.info("Stopping scheduler…")
        scheduler.shutdown(wait=False)
        logger.info("Pipeline stopped cleanly.")


if __name__ == "__main__":
    main()
