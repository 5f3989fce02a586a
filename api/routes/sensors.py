"""
Sensor routes — list and detail.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.schemas import SensorDetailOut, SensorOut, sensor_out
from api.state import get_snapshot
from pipeline.orchestrator import Snapshot

router = APIRouter()


@router.get("/", response_model=List[SensorOut])
def list_sensors(
    official: Optional[bool] = Query(None, description="Filter by official flag"),
    anchor_id: Optional[str] = Query(None, description="Filter by anchor station"),
    snapshot: Snapshot = Depends(get_snapshot),
):
    """List every sensor in the latest snapshot."""
    sensors = sorted(snapshot.sensors.values(), key=lambda s: s.station_id)
    if official is not None:
        sensors = [s for s in sensors if s.is_official == official]
    if anchor_id:
        sensors = [s for s in sensors if s.anchor_id == anchor_id]
    return [sensor_out(s) for s in sensors]


@router.get("/{sensor_id}", response_model=SensorDetailOut)
def get_sensor(sensor_id: str, snapshot: Snapshot = Depends(get_snapshot)):
    """Get a single sensor, including its reading history."""
    sensor = snapshot.sensors.get(sensor_id)
    if sensor is None:
        raise HTTPException(status_code=404, detail=f"Sensor '{sensor_id}' not found")
    return sensor_out(sensor, with_history=True)

