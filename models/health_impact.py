"""
Receptor health impact rating.

A concentration is rated against the safety threshold of the released
chemical's hazard class:

    below 0.1 x threshold   safe
    below 0.5 x threshold   low
    below threshold         moderate
    below 5 x threshold     high
    otherwise               critical

Unknown or missing hazard classes use the default threshold.
"""

from typing import Optional

from config import (
    DEFAULT_HAZARD_THRESHOLD_MG_M3,
    HAZARD_THRESHOLDS_MG_M3,
    IMPACT_BANDS,
    IMPACT_CRITICAL,
)
from models.units import require_non_negative

IMPACT_LEVELS = tuple(name for _, name in IMPACT_BANDS) + (IMPACT_CRITICAL,)


def safety_threshold(hazard_class: Optional[str]) -> float:
    """Safety threshold in mg/m^3 for a hazard class."""
    if hazard_class is None:
        return DEFAULT_HAZARD_THRESHOLD_MG_M3
    key = hazard_class.strip().lower()
    return HAZARD_THRESHOLDS_MG_M3.get(key, DEFAULT_HAZARD_THRESHOLD_MG_M3)


def impact_level(concentration_mg_m3: float, hazard_class: Optional[str] = None) -> str:
    """
    Rate a concentration for a chemical of the given hazard class.

    Raises:
        InvalidInputError: for a negative or non-finite concentration.
    """
    require_non_negative("concentration", concentration_mg_m3)
    threshold = safety_threshold(hazard_class)
    for factor, name in IMPACT_BANDS:
        if concentration_mg_m3 < factor * threshold:
            return name
    return IMPACT_CRITICAL


def worst_impact(levels) -> Optional[str]:
    """Most severe of a collection of impact levels, or None if empty."""
    ranked = [IMPACT_LEVELS.index(level) for level in levels if level is not None]
    return IMPACT_LEVELS[max(ranked)] if ranked else None
