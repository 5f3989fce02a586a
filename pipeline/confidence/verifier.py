"""
Triangulation Verifier.

Scores a single community sensor by comparing its reading against two
independent reference readings (the anchor station and a second
corroborating reference). Produces a trust tier (High / Medium / Low),
a 0-100 confidence score and a narrative status.

Pure function of its three numeric inputs. Never raises.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from pipeline import config
from pipeline.aqi.converter import round_half_up

logger = logging.getLogger(__name__)

STATUS_VERIFIED = "Verified Air Quality Truth"
STATUS_SPIKE = "Localized Pollution Spike detected"
STATUS_VARIANCE = "Moderate Spatial Variance"
STATUS_DRIFT = "Sensor Drift or High Local Interference"

DRIFT_REASON = (
    "Abnormal localized spike detected. "
    "Reading deviates significantly from cluster peers."
)
SPIKE_REASON = "Reading exceeds both reference stations, likely a hyperlocal pollution event."

LOW_SCORE_FLOOR = 10


class Tier(str, enum.Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


@dataclass(frozen=True)
class VerificationThresholds:
    """Relative-deviation cutoffs for the High and Medium tiers."""
    high: float = config.VERIFY_HIGH_THRESHOLD
    medium: float = config.VERIFY_MEDIUM_THRESHOLD


@dataclass(frozen=True)
class VerificationData:
    """Trust verdict for one sensor in one refresh cycle."""
    local: float
    primary_ref: float
    secondary_ref: float
    is_verified: bool
    confidence: int          # 0–100
    tier: Tier
    status: str
    anomaly_detected: bool
    hyperlocal_event: bool = False
    anomaly_reason: Optional[str] = None

    def __str__(self) -> str:
        return (
            f"[{self.tier.value}] local={self.local:.1f} "
            f"refs=({self.primary_ref:.1f}, {self.secondary_ref:.1f}) "
            f"score={self.confidence} status={self.status!r}"
        )


def _relative_deviation(local: float, reference: float) -> float:
    # A zero reference is floored to 1 so the ratio stays finite.
    return abs(local - reference) / (reference or 1)


def verify(
    local: float,
    primary_ref: float,
    secondary_ref: float,
    thresholds: Optional[VerificationThresholds] = None,
) -> VerificationData:
    """
    Triangulate a local reading against two reference readings.

    Args:
        local: The community sensor's PM2.5 concentration.
        primary_ref: The anchor station's PM2.5 concentration.
        secondary_ref: A second, independent reference concentration.
        thresholds: Optional override of the tier cutoffs.

    Returns:
        VerificationData. Tiers are decided first-match-wins:
          High   — both deviations within thresholds.high
          Medium — either deviation within thresholds.medium
          Low    — otherwise
    """
    t = thresholds or VerificationThresholds()
    delta_p = _relative_deviation(local, primary_ref)
    delta_s = _relative_deviation(local, secondary_ref)
    closest = min(delta_p, delta_s)

    hyperlocal = False
    reason = None

    if delta_p <= t.high and delta_s <= t.high:
        tier = Tier.HIGH
        score = round_half_up(100 - ((delta_p + delta_s) / 2) * 100)
        status = STATUS_VERIFIED
    elif delta_p <= t.medium or delta_s <= t.medium:
        tier = Tier.MEDIUM
        score = round_half_up(79 - closest * 40)
        if local > primary_ref and local > secondary_ref:
            hyperlocal = True
            status = STATUS_SPIKE
            reason = SPIKE_REASON
        else:
            status = STATUS_VARIANCE
    else:
        tier = Tier.LOW
        score = round_half_up(max(LOW_SCORE_FLOOR, 49 - closest * 20))
        status = STATUS_DRIFT
        reason = DRIFT_REASON

    result = VerificationData(
        local=local,
        primary_ref=primary_ref,
        secondary_ref=secondary_ref,
        is_verified=tier != Tier.LOW,
        confidence=max(0, min(100, score)),
        tier=tier,
        status=status,
        anomaly_detected=tier == Tier.LOW,
        hyperlocal_event=hyperlocal,
        anomaly_reason=reason,
    )

    if result.anomaly_detected:
        logger.warning("Sensor failed triangulation: %s", result)
    else:
        logger.debug("Triangulation: %s", result)
    return result
