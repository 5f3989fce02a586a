"""
Pydantic response models and converters from pipeline dataclasses.
"""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel

from pipeline.confidence.cluster import ClusterData
from pipeline.confidence.verifier import VerificationData
from pipeline.ingestion.models import Reading
from pipeline.orchestrator import SensorSnapshot


class ReadingOut(BaseModel):
    timestamp: datetime
    pm25: float
    pm10: float
    aqi: int
    category: str


class VerificationOut(BaseModel):
    local: float
    primary_ref: float
    secondary_ref: float
    is_verified: bool
    confidence: int
    tier: str
    status: str
    anomaly_detected: bool
    hyperlocal_event: bool
    anomaly_reason: Optional[str] = None


class SensorOut(BaseModel):
    id: str
    name: str
    coordinates: List[float]
    is_official: bool
    anchor_id: Optional[str] = None
    current_reading: ReadingOut
    verification: Optional[VerificationOut] = None


class SensorDetailOut(SensorOut):
    history: List[ReadingOut]


class MemberStatusOut(BaseModel):
    deviation: float
    is_anomaly: bool


class ClusterOut(BaseModel):
    anchor_id: str
    anchor_name: str
    mean_concentration: float
    confidence: str
    anomaly_detected: bool
    active_sensors: int
    calibration_factor: float
    member_status: Dict[str, MemberStatusOut]


class CategoryOut(BaseModel):
    label: str
    color: Optional[str] = None
    text_color: Optional[str] = None
    description: str = ""


def reading_out(r: Reading) -> ReadingOut:
    return ReadingOut(
        timestamp=r.timestamp,
        pm25=r.pm25,
        pm10=r.pm10,
        aqi=r.aqi,
        category=r.category.value,
    )


def verification_out(v: Optional[VerificationData]) -> Optional[VerificationOut]:
    if v is None:
        return None
    return VerificationOut(
        local=v.local,
        primary_ref=v.primary_ref,
        secondary_ref=v.secondary_ref,
        is_verified=v.is_verified,
        confidence=v.confidence,
        tier=v.tier.value,
        status=v.status,
        anomaly_detected=v.anomaly_detected,
        hyperlocal_event=v.hyperlocal_event,
        anomaly_reason=v.anomaly_reason,
    )


def sensor_out(s: SensorSnapshot, with_history: bool = False) -> SensorOut:
    fields = dict(
        id=s.station_id,
        name=s.name,
        coordinates=list(s.station.coordinates),
        is_official=s.is_official,
        anchor_id=s.anchor_id,
        current_reading=reading_out(s.reading),
        verification=verification_out(s.verification),
    )
    if with_history:
        return SensorDetailOut(history=[reading_out(r) for r in s.history], **fields)
    return SensorOut(**fields)


def cluster_out(anchor_id: str, c: ClusterData) -> ClusterOut:
    return ClusterOut(
        anchor_id=anchor_id,
        anchor_name=c.anchor_name,
        mean_concentration=round(c.mean_concentration, 2),
        confidence=c.confidence.value,
        anomaly_detected=c.anomaly_detected,
        active_sensors=c.active_sensors,
        calibration_factor=round(c.calibration_factor, 4),
        member_status={
            sid: MemberStatusOut(deviation=round(m.deviation, 4), is_anomaly=m.is_anomaly)
            for sid, m in c.member_status.items()
        },
    )
