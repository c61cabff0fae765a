"""
Iso-Concentration Contour Generator.

Sweeps rays around the source at fixed angular steps, samples the
concentration field along each ray at a fixed distance resolution, and
extracts for every requested level the distance at which concentration
drops below that level.  Crossing points are joined in angular order into a
closed (lat, lon) polygon per level.

The whole sector x distance grid is evaluated in one vectorised call, so
the cost is bounded by ``sectors * max_distance / resolution`` field
evaluations; all three are caller-supplied through ContourSettings.

Each ray's crossing is the OUTERMOST sample at or above the level,
linearly interpolated towards the next sample.  This gives the outer
boundary of the plume footprint (an elevated plume that has not yet
reached the ground near the stack still counts as inside), and it makes
the level ordering exact: a higher level can never cross further out than
a lower one on the same ray.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

import numpy as np

from config import (
    CONTOUR_MAX_DISTANCE_M,
    CONTOUR_RESOLUTION_M,
    CONTOUR_SECTORS,
    DEFAULT_CONTOUR_LEVELS,
    MAX_CONTOUR_SAMPLES,
    MG_PER_G,
    MIN_WIND_SPEED_MPS,
)
from models.errors import ContourOrderError, InvalidInputError
from models.gaussian_plume import check_wind_speed, plume_field, to_plume_coordinates
from models.results import ContourLevel
from models.stability import classify_weather
from models.units import offset_to_latlon, require_finite

logger = logging.getLogger(__name__)

# field_fn(downwind, crosswind, height) -> concentration in mg/m^3
FieldFunction = Callable[[np.ndarray, np.ndarray, float], np.ndarray]


@dataclass(frozen=True)
class ContourSettings:
    """Sampling configuration for contour generation.

    Args:
        sectors: Number of rays around the source (36 = 10 degree steps).
        resolution_m: Distance between samples along a ray (m).
        max_distance_m: Sweep radius (m).  Levels still exceeded here are
            truncated.
        receptor_height: Height at which the field is sampled (m).
    """

    sectors: int = CONTOUR_SECTORS
    resolution_m: float = CONTOUR_RESOLUTION_M
    max_distance_m: float = CONTOUR_MAX_DISTANCE_M
    receptor_height: float = 0.0

    def __post_init__(self):
        if int(self.sectors) != self.sectors or self.sectors < 3:
            raise InvalidInputError("sectors must be an integer >= 3")
        require_finite("resolution_m", self.resolution_m)
        require_finite("max_distance_m", self.max_distance_m)
        require_finite("receptor_height", self.receptor_height)
        if self.resolution_m <= 0:
            raise InvalidInputError("resolution_m must be > 0")
        if self.max_distance_m < self.resolution_m:
            raise InvalidInputError("max_distance_m must be >= resolution_m")
        if self.sectors * self.num_steps > MAX_CONTOUR_SAMPLES:
            raise InvalidInputError(
                f"Contour sweep of {self.sectors} x {self.num_steps} samples exceeds "
                f"the cap of {MAX_CONTOUR_SAMPLES}; coarsen resolution or reduce sectors"
            )

    @property
    def num_steps(self) -> int:
        return int(np.ceil(self.max_distance_m / self.resolution_m - 1e-9))

    def distances(self) -> np.ndarray:
        """Sample distances along a ray, ending exactly at max_distance_m."""
        d = np.arange(1, self.num_steps + 1, dtype=float) * self.resolution_m
        d[-1] = self.max_distance_m
        return d

    def bearings(self) -> np.ndarray:
        """Compass bearings (deg clockwise from north) of the rays."""
        return np.arange(self.sectors, dtype=float) * (360.0 / self.sectors)


def _validate_levels(levels: Sequence[float]) -> List[float]:
    levels = [float(v) for v in levels]
    if not levels:
        raise InvalidInputError("At least one contour level is required")
    for v in levels:
        if not np.isfinite(v) or v <= 0:
            raise InvalidInputError(f"Contour levels must be positive, got {v}")
    # Highest concentration (smallest footprint) first
    return sorted(set(levels), reverse=True)


def _crossing_radii(conc: np.ndarray, distances: np.ndarray, level: float):
    """
    Per-ray crossing distance for one level.

    Returns:
        (radii, reached, truncated) arrays over rays.
    """
    above = conc >= level
    reached = above.any(axis=1)
    n = distances.size

    # Index of the outermost sample at or above the level on each ray
    last = n - 1 - np.argmax(above[:, ::-1], axis=1)
    truncated = reached & (last == n - 1)

    radii = np.zeros(conc.shape[0], dtype=float)
    interior = reached & ~truncated
    if np.any(interior):
        rows = np.nonzero(interior)[0]
        i = last[rows]
        c0 = conc[rows, i]
        c1 = conc[rows, i + 1]
        frac = (c0 - level) / (c0 - c1)
        radii[rows] = distances[i] + frac * (distances[i + 1] - distances[i])
    radii[truncated] = distances[-1]
    return radii, reached, truncated


def sweep_contours(
    origin_lat: float,
    origin_lon: float,
    wind_direction: float,
    field_fn: FieldFunction,
    levels: Sequence[float] = DEFAULT_CONTOUR_LEVELS,
    settings: Optional[ContourSettings] = None,
) -> List[ContourLevel]:
    """
    Extract iso-concentration polygons from an arbitrary concentration field.

    Args:
        origin_lat, origin_lon: Source location (decimal degrees).
        wind_direction: Meteorological wind direction (deg, FROM).
        field_fn: ``field_fn(downwind, crosswind, height)`` returning mg/m^3
            for 2D (sectors x steps) arrays.
        levels: Thresholds in mg/m^3, any order.
        settings: Sweep configuration; defaults from ``config``.

    Returns:
        ContourLevel list ordered from highest to lowest level.  Levels not
        reached anywhere within the sweep are omitted.

    Raises:
        InvalidInputError: for non-positive levels or a field returning
            non-finite values.
        ContourOrderError: if a higher level ends up outside a lower one.
    """
    settings = settings or ContourSettings()
    ordered = _validate_levels(levels)

    distances = settings.distances()
    bearings = settings.bearings()
    b_rad = np.radians(bearings)

    dx = np.sin(b_rad)[:, None] * distances[None, :]
    dy = np.cos(b_rad)[:, None] * distances[None, :]
    downwind, crosswind = to_plume_coordinates(dx, dy, wind_direction)
    conc = np.asarray(field_fn(downwind, crosswind, settings.receptor_height), dtype=float)
    if not np.all(np.isfinite(conc)):
        raise InvalidInputError("Concentration field returned non-finite values")

    contours: List[ContourLevel] = []
    previous_radii = None
    for level in ordered:
        radii, reached, truncated = _crossing_radii(conc, distances, level)
        if not reached.any():
            logger.debug("Contour level %.4g mg/m3 not reached within %.0f m",
                         level, settings.max_distance_m)
            continue

        if previous_radii is not None and np.any(previous_radii > radii + 1e-9):
            raise ContourOrderError(f"Contour level {level} crosses a higher level")
        previous_radii = radii

        truncated_idx = tuple(int(i) for i in np.nonzero(truncated)[0])
        if truncated_idx:
            logger.info(
                "Contour level %.4g mg/m3 truncated at %.0f m on %d of %d sectors",
                level, settings.max_distance_m, len(truncated_idx), settings.sectors,
            )

        lat, lon = offset_to_latlon(
            origin_lat, origin_lon, radii * np.sin(b_rad), radii * np.cos(b_rad)
        )
        polygon = [(float(a), float(o)) for a, o in zip(lat, lon)]
        polygon.append(polygon[0])

        contours.append(ContourLevel(
            level=level,
            polygon=polygon,
            radii=tuple(float(r) for r in radii),
            bearings=tuple(float(b) for b in bearings),
            truncated_sectors=truncated_idx,
        ))

    return contours


def contours_for(
    source,
    effective_height: float,
    wind,
    levels: Sequence[float] = DEFAULT_CONTOUR_LEVELS,
    settings: Optional[ContourSettings] = None,
    stability_class: Optional[str] = None,
    table=None,
    min_wind_speed: float = MIN_WIND_SPEED_MPS,
) -> List[ContourLevel]:
    """
    Contours of the Gaussian plume for a release under given weather.

    Args:
        source: ReleaseSource (origin and source strength).
        effective_height: Effective release height (m).
        wind: WeatherState.
        levels: Thresholds in mg/m^3.
        settings: Sweep configuration.
        stability_class: Override; derived from ``wind`` when omitted.
        table: Dispersion coefficient table name or instance.
        min_wind_speed: Calm-air floor (m/s).

    Raises:
        DegenerateConditionError: wind speed below the floor.
    """
    check_wind_speed(wind.wind_speed, min_wind_speed)
    stability_class = stability_class or classify_weather(wind)
    q = source.source_strength()

    def field_fn(downwind, crosswind, height):
        return MG_PER_G * plume_field(
            downwind, crosswind, height, q, effective_height,
            wind.wind_speed, stability_class, table, min_wind_speed,
        )

    return sweep_contours(
        source.latitude, source.longitude, wind.wind_direction,
        field_fn, levels, settings,
    )
