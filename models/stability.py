"""
Pasquill-Gifford Stability Classification.

Maps a surface weather observation (wind speed, cloud cover, time of day)
to a stability class A (very unstable) through F (moderately stable).

Daytime classes come from wind speed crossed with an insolation category
inferred from cloud cover.  Night-time classes come from wind speed and
cloud cover alone.  Strong winds force neutral (D) at any hour.

The classifier never raises: incomplete or nonsensical inputs fall back to
class D, and missing cloud cover is treated as half cover.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Tuple

from config import (
    DAY_END_HOUR,
    DAY_START_HOUR,
    DAY_STABILITY_TABLE,
    DEFAULT_CLOUD_COVER,
    FALLBACK_STABILITY_CLASS,
    HIGH_WIND_NEUTRAL_MPS,
    MODERATE_INSOLATION_MAX_COVER,
    NIGHT_CLOUDY_MIN_COVER,
    NIGHT_OVERCAST_MIN_COVER,
    NIGHT_STABILITY_TABLE,
    SLIGHT_INSOLATION_MAX_COVER,
    STABILITY_WIND_BANDS,
    STRONG_INSOLATION_MAX_COVER,
)
from models.errors import InvalidInputError

STABILITY_CLASSES = ("A", "B", "C", "D", "E", "F")

_DESCRIPTIONS = {
    "A": "Very unstable",
    "B": "Moderately unstable",
    "C": "Slightly unstable",
    "D": "Neutral",
    "E": "Slightly stable",
    "F": "Moderately stable",
}


@dataclass
class StabilitySettings:
    """Thresholds and lookup tables for the classifier.

    Defaults reproduce the standard Pasquill-Gifford table; any field may be
    overridden to test alternative schemes in isolation.
    """

    day_start_hour: int = DAY_START_HOUR
    day_end_hour: int = DAY_END_HOUR
    default_cloud_cover: float = DEFAULT_CLOUD_COVER
    high_wind_neutral: float = HIGH_WIND_NEUTRAL_MPS
    strong_max_cover: float = STRONG_INSOLATION_MAX_COVER
    moderate_max_cover: float = MODERATE_INSOLATION_MAX_COVER
    slight_max_cover: float = SLIGHT_INSOLATION_MAX_COVER
    night_cloudy_min_cover: float = NIGHT_CLOUDY_MIN_COVER
    night_overcast_min_cover: float = NIGHT_OVERCAST_MIN_COVER
    wind_bands: Tuple[float, ...] = STABILITY_WIND_BANDS
    day_table: Dict[str, Tuple[str, ...]] = field(default_factory=lambda: dict(DAY_STABILITY_TABLE))
    night_table: Dict[str, Tuple[str, ...]] = field(default_factory=lambda: dict(NIGHT_STABILITY_TABLE))
    fallback: str = FALLBACK_STABILITY_CLASS


def is_daytime(timestamp: datetime, settings: Optional[StabilitySettings] = None) -> bool:
    """True if the timestamp's local hour falls inside the day window."""
    settings = settings or StabilitySettings()
    return settings.day_start_hour <= timestamp.hour < settings.day_end_hour


def insolation_category(cloud_cover: float, settings: Optional[StabilitySettings] = None) -> str:
    """Coarse daytime insolation proxy from cloud cover fraction."""
    settings = settings or StabilitySettings()
    if cloud_cover < settings.strong_max_cover:
        return "strong"
    if cloud_cover < settings.moderate_max_cover:
        return "moderate"
    if cloud_cover < settings.slight_max_cover:
        return "slight"
    return "overcast"


def night_sky_category(cloud_cover: float, settings: Optional[StabilitySettings] = None) -> str:
    settings = settings or StabilitySettings()
    if cloud_cover >= settings.night_overcast_min_cover:
        return "overcast"
    if cloud_cover >= settings.night_cloudy_min_cover:
        return "cloudy"
    return "clear"


def _wind_band(wind_speed: float, bands: Tuple[float, ...]) -> int:
    for i, upper in enumerate(bands):
        if wind_speed < upper:
            return i
    return len(bands) - 1


def _normalise_cloud_cover(cloud_cover: Optional[float], default: float) -> float:
    if cloud_cover is None:
        return default
    try:
        cover = float(cloud_cover)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(cover):
        return default
    return min(max(cover, 0.0), 1.0)


def classify_stability(
    wind_speed: Optional[float],
    cloud_cover: Optional[float],
    timestamp: Optional[datetime],
    settings: Optional[StabilitySettings] = None,
) -> str:
    """
    Determine the Pasquill-Gifford stability class.

    Args:
        wind_speed: Surface (10 m) wind speed in m/s.  Negative values are
                    clamped to 0.
        cloud_cover: Cloud cover as a fraction 0-1; out-of-range values
                     are clamped. Percent reports are converted at the
                     boundary by ``WeatherState.from_mapping``.
                     ``None`` means unknown and defaults to half cover.
        timestamp: Local observation time; its hour decides day or night.
        settings: Optional thresholds/tables; defaults from ``config``.

    Returns:
        Stability class letter "A"-"F".  Falls back to "D" (neutral) when
        wind speed or timestamp is missing.
    """
    settings = settings or StabilitySettings()

    if wind_speed is None or timestamp is None:
        return settings.fallback
    try:
        speed = float(wind_speed)
    except (TypeError, ValueError):
        return settings.fallback
    if not math.isfinite(speed):
        return settings.fallback
    speed = max(speed, 0.0)

    if speed >= settings.high_wind_neutral:
        return "D"

    cover = _normalise_cloud_cover(cloud_cover, settings.default_cloud_cover)
    band = _wind_band(speed, settings.wind_bands)

    if is_daytime(timestamp, settings):
        row = settings.day_table[insolation_category(cover, settings)]
    else:
        row = settings.night_table[night_sky_category(cover, settings)]
    return row[band]


def classify_weather(weather, settings: Optional[StabilitySettings] = None) -> str:
    """Classify a :class:`data.weather.WeatherState`."""
    return classify_stability(
        weather.wind_speed, weather.cloud_cover, weather.timestamp, settings
    )


def normalise_stability_class(stability_class: str) -> str:
    """Upper-case and validate a stability class letter.

    Raises:
        InvalidInputError: for anything other than A-F.
    """
    sc = str(stability_class).strip().upper()
    if sc not in STABILITY_CLASSES:
        raise InvalidInputError(f"Unknown stability class '{stability_class}'. Use A-F.")
    return sc


def stability_description(stability_class: str) -> str:
    """Human-readable label for a stability class."""
    return _DESCRIPTIONS[normalise_stability_class(stability_class)]
