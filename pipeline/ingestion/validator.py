"""
Validator for raw sensor Observations.

Validates:
- Required fields are present
- PM2.5 is a finite, non-negative number
- Timestamp is recent (within MAX_AGE_HOURS) and not in the future

Invalid observations never reach the scoring engine; the orchestrator
downgrades them to an inactive (0.0) reading.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone, timedelta
from typing import List, Optional

logger = logging.getLogger(__name__)

PM25_MIN = 0.0   # μg/m³; no upper bound, the converter caps at Severe

# Maximum age of an observation before it is considered stale
MAX_AGE_HOURS = 2
FUTURE_TOLERANCE_SECONDS = 300


@dataclass
class ValidationResult:
    """Result of validating a single Observation."""
    is_valid: bool
    reasons: List[str] = field(default_factory=list)

    def add_error(self, msg: str):
        self.reasons.append(msg)
        self.is_valid = False

    def __str__(self) -> str:
        if self.is_valid:
            return "Valid"
        return "Invalid: " + "; ".join(self.reasons)


def validate_observation(obs, now: Optional[datetime] = None) -> ValidationResult:
    """
    Validate an Observation (or any object with the same attributes).

    Args:
        obs: Object with station_id, pm25 and timestamp.
        now: Reference time for the staleness check (defaults to UTC now).

    Returns:
        ValidationResult with is_valid flag and list of failure reasons.
    """
    result = ValidationResult(is_valid=True)

    if not getattr(obs, "station_id", None):
        result.add_error("Missing required field: station_id")

    # 1. Timestamp must be present and recent
    ts = getattr(obs, "timestamp", None)
    if ts is None:
        result.add_error("Missing required field: timestamp")
    else:
        now_utc = now or datetime.now(timezone.utc)
        if now_utc.tzinfo is None:
            now_utc = now_utc.replace(tzinfo=timezone.utc)
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        age = now_utc - ts
        if age > timedelta(hours=MAX_AGE_HOURS):
            result.add_error(f"Timestamp too old: {age} (max {MAX_AGE_HOURS}h)")
        if age.total_seconds() < -FUTURE_TOLERANCE_SECONDS:
            result.add_error(f"Timestamp is in the future: {ts}")

    # 2. PM2.5 must be a finite, non-negative number
    value = getattr(obs, "pm25", None)
    if value is None:
        result.add_error("Missing required field: pm25")
    elif isinstance(value, bool) or not isinstance(value, (int, float)):
        result.add_error(f"pm25 must be numeric, got {type(value).__name__}")
    elif math.isnan(value) or math.isinf(value):
        result.add_error("pm25 is not a finite number")
    elif value < PM25_MIN:
        result.add_error(f"pm25={value} below physical minimum {PM25_MIN}")

    if not result.is_valid:
        logger.warning(
            "Validation failed for sensor %s: %s",
            getattr(obs, "station_id", "unknown"),
            result.reasons,
        )
    return result
