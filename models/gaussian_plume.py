"""
Gaussian Plume Concentration Field.

Implements the steady-state Gaussian plume equation for a continuous point
source with a perfectly reflecting ground:

    C = (Q / (2*pi*u*sigma_y*sigma_z)) *
        exp(-0.5*(y/sigma_y)^2) *
        [exp(-0.5*((z-H)/sigma_z)^2) + exp(-0.5*((z+H)/sigma_z)^2)]

Convention:
  - Wind direction uses METEOROLOGICAL convention (direction wind comes FROM).
  - The plume travels the opposite way (FROM 0 = blowing South).
  - Plume-local axes: x downwind, y crosswind (positive to the left of the
    direction of travel), z up.
  - Source strength Q in g/s gives concentration in g/m^3.
"""

import numpy as np
from scipy.optimize import minimize_scalar

from config import MIN_WIND_SPEED_MPS, PEAK_SEARCH_MAX_DISTANCE_M
from models.dispersion_coefficients import compute_sigma
from models.errors import DegenerateConditionError, InvalidInputError
from models.units import (
    latlon_to_offset,
    offset_to_latlon,
    require_finite,
    require_non_negative,
)


def _wind_unit_vector(wind_direction_deg: float):
    """(east, north) unit vector of the direction the plume travels."""
    require_finite("wind_direction_deg", wind_direction_deg)
    wind_toward_rad = np.radians((wind_direction_deg + 180.0) % 360.0)
    return np.sin(wind_toward_rad), np.cos(wind_toward_rad)


def to_plume_coordinates(dx_east, dy_north, wind_direction_deg: float):
    """
    Rotate east/north offsets from the source into plume axes.

    Args:
        dx_east, dy_north: Offsets of the receptor from the source (m).
        wind_direction_deg: Meteorological wind direction (deg, FROM).

    Returns:
        (downwind, crosswind) in metres.
    """
    wind_ux, wind_uy = _wind_unit_vector(wind_direction_deg)
    dx = np.asarray(dx_east, dtype=float)
    dy = np.asarray(dy_north, dtype=float)

    downwind = dx * wind_ux + dy * wind_uy
    crosswind = -dx * wind_uy + dy * wind_ux
    if downwind.ndim == 0:
        return float(downwind), float(crosswind)
    return downwind, crosswind


def from_plume_coordinates(downwind, crosswind, wind_direction_deg: float):
    """Inverse of :func:`to_plume_coordinates`; returns (dx_east, dy_north)."""
    wind_ux, wind_uy = _wind_unit_vector(wind_direction_deg)
    x = np.asarray(downwind, dtype=float)
    y = np.asarray(crosswind, dtype=float)

    dx_east = x * wind_ux - y * wind_uy
    dy_north = x * wind_uy + y * wind_ux
    if dx_east.ndim == 0:
        return float(dx_east), float(dy_north)
    return dx_east, dy_north


def geographic_to_plume(
    source_lat: float,
    source_lon: float,
    receptor_lat,
    receptor_lon,
    wind_direction_deg: float,
):
    """Resolve geographic receptor(s) to (downwind, crosswind) metres."""
    require_finite("receptor_lat", receptor_lat)
    require_finite("receptor_lon", receptor_lon)
    dx, dy = latlon_to_offset(source_lat, source_lon, receptor_lat, receptor_lon)
    return to_plume_coordinates(dx, dy, wind_direction_deg)


def plume_to_geographic(
    source_lat: float,
    source_lon: float,
    downwind,
    crosswind,
    wind_direction_deg: float,
):
    """Plume-local (downwind, crosswind) metres to (lat, lon)."""
    dx, dy = from_plume_coordinates(downwind, crosswind, wind_direction_deg)
    lat, lon = offset_to_latlon(source_lat, source_lon, dx, dy)
    if np.ndim(lat) == 0:
        return float(lat), float(lon)
    return lat, lon


def check_wind_speed(wind_speed: float, min_wind_speed: float = MIN_WIND_SPEED_MPS) -> None:
    """
    Raises:
        InvalidInputError: negative or non-finite wind speed.
        DegenerateConditionError: wind speed below the calm-air floor.
    """
    require_non_negative("wind_speed", wind_speed)
    if wind_speed < min_wind_speed:
        raise DegenerateConditionError(wind_speed, min_wind_speed)


def concentration_at(
    x_downwind,
    y_crosswind,
    z_height,
    source_strength: float,
    effective_height: float,
    wind_speed: float,
    sigma_y,
    sigma_z,
    min_wind_speed: float = MIN_WIND_SPEED_MPS,
):
    """
    Concentration at receptor(s) in plume-local coordinates.

    Args:
        x_downwind: Downwind distance (m).  Receptors at x <= 0 get exactly 0.
        y_crosswind: Crosswind offset (m).
        z_height: Receptor height (m).
        source_strength: Emission rate Q (g/s).
        effective_height: Effective release height H (m).
        wind_speed: Transport wind speed u (m/s).
        sigma_y, sigma_z: Spread parameters at x (m); only read where x > 0.
        min_wind_speed: Calm-air floor (m/s).

    Returns:
        Concentration in g/m^3 (units of Q per m^3), scalar or array
        broadcast from the receptor inputs.

    Raises:
        DegenerateConditionError: wind speed below ``min_wind_speed``.
        InvalidInputError: negative Q or H, non-finite coordinates, or
            non-positive sigma at a downwind receptor.
    """
    check_wind_speed(wind_speed, min_wind_speed)
    require_non_negative("source_strength", source_strength)
    require_non_negative("effective_height", effective_height)

    x, y, z, sy, sz = np.broadcast_arrays(
        np.asarray(x_downwind, dtype=float),
        np.asarray(y_crosswind, dtype=float),
        np.asarray(z_height, dtype=float),
        np.asarray(sigma_y, dtype=float),
        np.asarray(sigma_z, dtype=float),
    )
    require_finite("x_downwind", x)
    require_finite("y_crosswind", y)
    require_finite("z_height", z)

    concentration = np.zeros(x.shape, dtype=float)

    # Only compute where receptor is downwind of source
    mask = x > 0
    if np.any(mask):
        sy_m = sy[mask]
        sz_m = sz[mask]
        if not (np.all(np.isfinite(sy_m)) and np.all(np.isfinite(sz_m))
                and np.all(sy_m > 0) and np.all(sz_m > 0)):
            raise InvalidInputError("sigma_y and sigma_z must be positive downwind")

        u = wind_speed
        H = effective_height

        # Normalization
        norm = source_strength / (2.0 * np.pi * u * sy_m * sz_m)

        # Lateral Gaussian
        lateral = np.exp(-0.5 * (y[mask] / sy_m) ** 2)

        # Vertical Gaussian with ground reflection (image source at -H)
        z_m = z[mask]
        vertical = np.exp(-0.5 * ((z_m - H) / sz_m) ** 2) + np.exp(
            -0.5 * ((z_m + H) / sz_m) ** 2
        )

        concentration[mask] = norm * lateral * vertical

    if concentration.ndim == 0:
        return float(concentration)
    return concentration


def plume_field(
    x_downwind,
    y_crosswind,
    z_height,
    source_strength: float,
    effective_height: float,
    wind_speed: float,
    stability_class: str,
    table=None,
    min_wind_speed: float = MIN_WIND_SPEED_MPS,
):
    """
    :func:`concentration_at` with sigmas looked up from a stability class.

    Sigmas are only evaluated at downwind receptors, so upwind points are
    valid input and return 0.
    """
    x = np.asarray(x_downwind, dtype=float)
    x_b, y_b, z_b = np.broadcast_arrays(
        x, np.asarray(y_crosswind, dtype=float), np.asarray(z_height, dtype=float)
    )
    require_finite("x_downwind", x_b)

    sy = np.ones(x_b.shape, dtype=float)
    sz = np.ones(x_b.shape, dtype=float)
    mask = x_b > 0
    if np.any(mask):
        sy_m, sz_m = compute_sigma(x_b[mask], stability_class, table)
        sy[mask] = sy_m
        sz[mask] = sz_m

    return concentration_at(
        x_b, y_b, z_b, source_strength, effective_height, wind_speed,
        sy, sz, min_wind_speed,
    )


def gaussian_plume(
    receptor_x,
    receptor_y,
    receptor_z: float,
    source_x: float,
    source_y: float,
    effective_height: float,
    source_strength: float,
    wind_speed: float,
    wind_direction_deg: float,
    stability_class: str,
    table=None,
    min_wind_speed: float = MIN_WIND_SPEED_MPS,
):
    """
    Concentration on an east/north grid from a single point source.

    Args:
        receptor_x, receptor_y: Receptor coordinates, East/North (m), can be 2D grids.
        receptor_z: Receptor height above ground (m).
        source_x, source_y: Source location (m).
        effective_height: Effective release height (m).
        source_strength: Emission rate Q (g/s).
        wind_speed: Wind speed (m/s).
        wind_direction_deg: Meteorological wind direction (deg, FROM).
        stability_class: Pasquill-Gifford class A-F.

    Returns:
        Concentration in g/m^3, same shape as receptor_x.
    """
    dx = np.asarray(receptor_x, dtype=float) - source_x
    dy = np.asarray(receptor_y, dtype=float) - source_y
    downwind, crosswind = to_plume_coordinates(dx, dy, wind_direction_deg)
    return plume_field(
        downwind, crosswind, receptor_z, source_strength, effective_height,
        wind_speed, stability_class, table, min_wind_speed,
    )


def centerline_concentration(
    distance,
    source_strength: float,
    effective_height: float,
    wind_speed: float,
    stability_class: str,
    receptor_height: float = 0.0,
    table=None,
    min_wind_speed: float = MIN_WIND_SPEED_MPS,
):
    """Plume centerline (y = 0) concentration at the given downwind distance(s)."""
    return plume_field(
        distance, 0.0, receptor_height, source_strength, effective_height,
        wind_speed, stability_class, table, min_wind_speed,
    )


def max_ground_concentration(
    source_strength: float,
    effective_height: float,
    wind_speed: float,
    stability_class: str,
    max_distance: float = PEAK_SEARCH_MAX_DISTANCE_M,
    min_distance: float = 1.0,
    table=None,
    min_wind_speed: float = MIN_WIND_SPEED_MPS,
):
    """
    Locate the peak ground-level centerline concentration.

    A coarse log-spaced scan brackets the peak, then a bounded scalar
    minimisation refines it.  For a ground-level source the peak sits at
    ``min_distance``.

    Returns:
        (distance_m, concentration_g_m3)
    """
    if not 0 < min_distance < max_distance:
        raise InvalidInputError("Need 0 < min_distance < max_distance")

    distances = np.geomspace(min_distance, max_distance, 200)
    conc = centerline_concentration(
        distances, source_strength, effective_height, wind_speed,
        stability_class, 0.0, table, min_wind_speed,
    )
    i = int(np.argmax(conc))
    if conc[i] <= 0:
        return float(distances[i]), 0.0

    lo = distances[max(i - 1, 0)]
    hi = distances[min(i + 1, len(distances) - 1)]
    if hi <= lo:
        return float(distances[i]), float(conc[i])

    def _negative(x):
        return -centerline_concentration(
            x, source_strength, effective_height, wind_speed,
            stability_class, 0.0, table, min_wind_speed,
        )

    res = minimize_scalar(_negative, bounds=(lo, hi), method="bounded")
    if -res.fun >= conc[i]:
        return float(res.x), float(-res.fun)
    return float(distances[i]), float(conc[i])
