"""
Process-level MeshMonitor holder — the API's equivalent of a DB session.
"""
import threading
from typing import Optional

from fastapi import HTTPException, status

from pipeline.monitor import MeshMonitor
from pipeline.orchestrator import Snapshot

_monitor: Optional[MeshMonitor] = None
_monitor_lock = threading.Lock()


def set_monitor(monitor: Optional[MeshMonitor]) -> None:
    global _monitor
    with _monitor_lock:
        _monitor = monitor


def get_monitor() -> MeshMonitor:
    """FastAPI dependency — the running MeshMonitor."""
    with _monitor_lock:
        monitor = _monitor
    if monitor is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Monitor not initialised",
        )
    return monitor


def get_snapshot() -> Snapshot:
    """FastAPI dependency — the latest published Snapshot."""
    snapshot = get_monitor().snapshot
    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="No snapshot computed yet",
        )
    return snapshot
