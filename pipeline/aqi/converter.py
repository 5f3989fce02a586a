"""
NAQI Converter.

Maps a PM2.5 concentration (μg/m³) to the Indian National Air Quality Index
and its severity category using the fixed CPCB breakpoint table.
Stateless — no side effects, never raises.
"""

import enum
import logging
import math
from dataclasses import dataclass
from typing import Tuple

logger = logging.getLogger(__name__)


class Category(str, enum.Enum):
    GOOD = "Good"
    SATISFACTORY = "Satisfactory"
    MODERATE = "Moderate"
    POOR = "Poor"
    VERY_POOR = "Very Poor"
    SEVERE = "Severe"


@dataclass(frozen=True)
class Breakpoint:
    """One row of the NAQI table: a concentration band and its index band."""
    category: Category
    min_concentration: float
    max_concentration: float
    min_index: int
    max_index: int

    def contains(self, concentration: float) -> bool:
        return self.min_concentration <= concentration <= self.max_concentration


# Ascending, immutable. The last row's ceiling is nominal: anything above it
# still maps to SEVERE.
NAQI_BREAKPOINTS: Tuple[Breakpoint, ...] = (
    Breakpoint(Category.GOOD,          0.0,  30.0,   0,  50),
    Breakpoint(Category.SATISFACTORY, 31.0,  60.0,  51, 100),
    Breakpoint(Category.MODERATE,     61.0,  90.0, 101, 200),
    Breakpoint(Category.POOR,         91.0, 120.0, 201, 300),
    Breakpoint(Category.VERY_POOR,   121.0, 250.0, 301, 400),
    Breakpoint(Category.SEVERE,      251.0, 999.0, 401, 500),
)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def find_breakpoint(concentration: float) -> Breakpoint:
    """
    Return the breakpoint that claims the given concentration.

    The published table leaves integer gaps between bands (30 → 31, 60 → 61 ...).
    A value inside a gap belongs to the band that starts below it, so every
    non-negative concentration is claimed by exactly one row. Values beyond
    the table fall back to the most severe row.
    """
    for bp in NAQI_BREAKPOINTS:
        if bp.contains(concentration):
            return bp

    claimed = NAQI_BREAKPOINTS[0]
    for bp in NAQI_BREAKPOINTS:
        if bp.min_concentration <= concentration:
            claimed = bp
    return claimed


def convert(concentration: float) -> Tuple[int, Category]:
    """
    Convert a PM2.5 concentration to (index, category).

    Args:
        concentration: PM2.5 in μg/m³. Negative values are treated as 0.

    Returns:
        Tuple of the rounded, linearly interpolated index (bounded to the
        matched breakpoint's index range) and its Category.
    """
    if concentration < 0:
        logger.debug("Negative concentration %.2f treated as 0", concentration)
        concentration = 0.0

    bp = find_breakpoint(concentration)
    span = bp.max_concentration - bp.min_concentration
    raw = (
        bp.min_index
        + (bp.max_index - bp.min_index) / span * (concentration - bp.min_concentration)
    )
    index = min(bp.max_index, max(bp.min_index, round_half_up(raw)))
    return index, bp.category
