"""
Unit conversion and local geographic helpers.

Offsets use a local tangent-plane approximation around the source
(east/north metres), which is accurate to well under 1% over the
10 km extents the engine works with.
"""

import math
import numpy as np

from config import (
    AIR_MOLAR_MASS,
    EARTH_RADIUS_M,
    GAS_CONSTANT,
    KELVIN_OFFSET,
    MG_PER_G,
    STANDARD_PRESSURE_HPA,
)
from models.errors import InvalidInputError


def require_finite(name: str, value) -> None:
    """Raise InvalidInputError if any element of *value* is NaN or infinite."""
    if not np.all(np.isfinite(value)):
        raise InvalidInputError(f"{name} must be finite, got {value!r}")


def require_non_negative(name: str, value) -> None:
    """Raise InvalidInputError if *value* is negative or not finite."""
    require_finite(name, value)
    if np.any(np.asarray(value) < 0):
        raise InvalidInputError(f"{name} must be >= 0, got {value!r}")


def celsius_to_kelvin(temperature_c: float) -> float:
    return temperature_c + KELVIN_OFFSET


def g_to_mg(value):
    return value * MG_PER_G


def gas_density(
    temperature_c: float,
    molecular_weight: float = AIR_MOLAR_MASS,
    pressure_hpa: float = STANDARD_PRESSURE_HPA,
) -> float:
    """
    Ideal-gas density in kg/m^3.

        rho = P * M / (R * T)

    Args:
        temperature_c: Gas temperature in deg C.
        molecular_weight: Molar mass in g/mol.
        pressure_hpa: Pressure in hPa.
    """
    temperature_k = celsius_to_kelvin(temperature_c)
    if temperature_k <= 0:
        raise InvalidInputError(f"Temperature below absolute zero: {temperature_c} C")
    return (pressure_hpa * 100.0) * (molecular_weight / 1000.0) / (GAS_CONSTANT * temperature_k)


def mg_m3_to_ppm(
    concentration_mg_m3,
    molecular_weight: float,
    temperature_c: float = 25.0,
    pressure_hpa: float = STANDARD_PRESSURE_HPA,
):
    """
    Convert a mass concentration (mg/m^3) to parts per million by volume.

        ppm = C * R * T / (M * P)

    with P in kPa, matching the usual 24.45 L/mol at 25 C and 1 atm.
    """
    if molecular_weight <= 0:
        raise InvalidInputError("molecular_weight must be > 0")
    temperature_k = celsius_to_kelvin(temperature_c)
    return concentration_mg_m3 * GAS_CONSTANT * temperature_k / (molecular_weight * pressure_hpa / 10.0)


def ppm_to_mg_m3(
    concentration_ppm,
    molecular_weight: float,
    temperature_c: float = 25.0,
    pressure_hpa: float = STANDARD_PRESSURE_HPA,
):
    """Inverse of :func:`mg_m3_to_ppm`."""
    if molecular_weight <= 0:
        raise InvalidInputError("molecular_weight must be > 0")
    temperature_k = celsius_to_kelvin(temperature_c)
    return concentration_ppm * molecular_weight * (pressure_hpa / 10.0) / (GAS_CONSTANT * temperature_k)


def offset_to_latlon(origin_lat: float, origin_lon: float, dx_east, dy_north):
    """
    Shift a geographic origin by east/north offsets in metres.

    Args:
        origin_lat, origin_lon: Origin in decimal degrees.
        dx_east, dy_north: Offsets in metres (scalars or arrays).

    Returns:
        (lat, lon) in decimal degrees, same shape as the offsets.
    """
    lat = origin_lat + np.degrees(np.asarray(dy_north, dtype=float) / EARTH_RADIUS_M)
    lon = origin_lon + np.degrees(
        np.asarray(dx_east, dtype=float) / (EARTH_RADIUS_M * math.cos(math.radians(origin_lat)))
    )
    return lat, lon


def latlon_to_offset(origin_lat: float, origin_lon: float, lat, lon):
    """
    East/north offsets in metres of (lat, lon) from a geographic origin.

    Inverse of :func:`offset_to_latlon`.
    """
    dy_north = np.radians(np.asarray(lat, dtype=float) - origin_lat) * EARTH_RADIUS_M
    dx_east = (
        np.radians(np.asarray(lon, dtype=float) - origin_lon)
        * EARTH_RADIUS_M
        * math.cos(math.radians(origin_lat))
    )
    return dx_east, dy_north


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in metres."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = (math.sin(dphi / 2) ** 2 +
         math.cos(phi1) * math.cos(phi2) *
         math.sin(dlambda / 2) ** 2)

    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(a), math.sqrt(1 - a))
