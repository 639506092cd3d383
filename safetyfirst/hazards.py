"""Hazard categories and their base risk weights."""

from __future__ import annotations

import math
from enum import Enum
from typing import Dict, Mapping


class HazardCategory(str, Enum):
    NOISE = "noise"
    DUST = "dust"
    CHEMICALS = "chemicals"
    HEIGHTS = "heights"
    ELECTRICAL = "electrical"
    CONFINED = "confined"


# Points contributed by a full 8-hour exposure
HAZARD_BASE_RISK: Dict[str, int] = {
    HazardCategory.NOISE.value: 15,
    HazardCategory.DUST.value: 12,
    HazardCategory.CHEMICALS.value: 20,
    HazardCategory.HEIGHTS.value: 25,
    HazardCategory.ELECTRICAL.value: 22,
    HazardCategory.CONFINED.value: 18,
}

DEFAULT_HAZARD_RISK = 10

SHIFT_HOURS = 8


def base_risk(category: str) -> int:
    """Weight for a category; categories outside the table get DEFAULT_HAZARD_RISK."""
    return HAZARD_BASE_RISK.get(category, DEFAULT_HAZARD_RISK)


def normalize_exposures(raw: Mapping) -> Dict[str, float]:
    """
    Validate a category -> hours mapping.
    Raises ValueError for non-string keys and for hours that are not finite non-negative numbers.
    """
    exposures: Dict[str, float] = {}
    for category, hours in raw.items():
        if not isinstance(category, str) or not category.strip():
            raise ValueError(f"invalid hazard category: {category!r}")
        if isinstance(hours, bool) or not isinstance(hours, (int, float)):
            raise ValueError(f"hazard hours for {category} must be a number")
        if not math.isfinite(hours):
            raise ValueError(f"hazard hours for {category} must be finite")
        if hours < 0:
            raise ValueError(f"hazard hours for {category} must be >= 0")
        exposures[category] = float(hours)
    return exposures
