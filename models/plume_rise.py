"""
Buoyant Plume Rise (Briggs).

A release hotter than the surrounding air rises before it behaves as a
passive plume.  The effective release height is

    H = h_release + dh

with the Briggs buoyancy flux

    F = g * (V / pi) * (Ts - Ta) / Ts          [m^4/s^3]

and the final rise

    dh = 2.6 * (F / u^3)^(1/3)

When a downwind distance is given, the gradual "2/3-law" rise
1.6 * F^(1/3) * x^(2/3) / u is used instead, growing until the Briggs
distance to final rise

    x_f = 49 * F^(5/8)     for F < 55
    x_f = 119 * F^(2/5)    otherwise

and held at its x_f value beyond it.

Minimum wind policy: the rise formulas divide by wind speed, so wind speed
is floored at ``MIN_WIND_SPEED_MPS`` before use.  This is a deliberate
modelling decision, not a numerical guard: below the floor the steady plume
model is not applicable anyway, and an unfloored rise would grow without
bound as u -> 0.
"""

import math
from typing import Optional

from config import (
    AIR_MOLAR_MASS,
    FINAL_RISE_DISTANCE_STRONG,
    FINAL_RISE_DISTANCE_WEAK,
    FINAL_RISE_FLUX_BREAK,
    GRAVITY,
    MIN_WIND_SPEED_MPS,
    PLUME_RISE_COEFFICIENT,
    STANDARD_PRESSURE_HPA,
    TRANSITIONAL_RISE_COEFFICIENT,
)
from models.units import (
    celsius_to_kelvin,
    gas_density,
    require_finite,
    require_non_negative,
)


def volumetric_rate(
    release_rate: float,
    release_temperature: float,
    molecular_weight: float = AIR_MOLAR_MASS,
    pressure_hpa: float = STANDARD_PRESSURE_HPA,
) -> float:
    """
    Convert a mass release rate to a volumetric rate at release conditions.

    Args:
        release_rate: Mass rate in g/s.
        release_temperature: Release temperature in deg C.
        molecular_weight: Molar mass of the released gas (g/mol).
        pressure_hpa: Ambient pressure (hPa).

    Returns:
        Volumetric rate in m^3/s.
    """
    density = gas_density(release_temperature, molecular_weight, pressure_hpa)
    return (release_rate / 1000.0) / density


def buoyancy_flux(
    release_rate: float,
    release_temperature: float,
    ambient_temperature: float,
    molecular_weight: float = AIR_MOLAR_MASS,
    pressure_hpa: float = STANDARD_PRESSURE_HPA,
) -> float:
    """
    Briggs buoyancy flux F (m^4/s^3).  Zero when the release is not
    warmer than ambient air.
    """
    if release_temperature <= ambient_temperature or release_rate <= 0:
        return 0.0
    ts = celsius_to_kelvin(release_temperature)
    ta = celsius_to_kelvin(ambient_temperature)
    v = volumetric_rate(release_rate, release_temperature, molecular_weight, pressure_hpa)
    return GRAVITY * (v / math.pi) * (ts - ta) / ts


def final_rise(flux: float, wind_speed: float, min_wind_speed: float = MIN_WIND_SPEED_MPS) -> float:
    """Final buoyant rise dh = 2.6 * (F / u^3)^(1/3), u floored."""
    if flux <= 0:
        return 0.0
    u = max(wind_speed, min_wind_speed)
    return PLUME_RISE_COEFFICIENT * (flux / u ** 3) ** (1.0 / 3.0)


def transitional_rise(
    flux: float,
    wind_speed: float,
    distance: float,
    min_wind_speed: float = MIN_WIND_SPEED_MPS,
) -> float:
    """Gradual rise 1.6 * F^(1/3) * x^(2/3) / u at downwind distance x."""
    if flux <= 0 or distance <= 0:
        return 0.0
    u = max(wind_speed, min_wind_speed)
    return TRANSITIONAL_RISE_COEFFICIENT * flux ** (1.0 / 3.0) * distance ** (2.0 / 3.0) / u


def distance_to_final_rise(flux: float) -> float:
    """Downwind distance (m) at which a buoyant plume stops rising."""
    if flux <= 0:
        return 0.0
    a, b = FINAL_RISE_DISTANCE_WEAK if flux < FINAL_RISE_FLUX_BREAK else FINAL_RISE_DISTANCE_STRONG
    return a * flux ** b


def plume_rise(
    flux: float,
    wind_speed: float,
    distance: Optional[float] = None,
    min_wind_speed: float = MIN_WIND_SPEED_MPS,
) -> float:
    """Rise above the release point; gradual if a distance is supplied."""
    if distance is None:
        return final_rise(flux, wind_speed, min_wind_speed)
    x = min(distance, distance_to_final_rise(flux))
    return transitional_rise(flux, wind_speed, x, min_wind_speed)


def effective_height(
    release_height: float,
    release_temperature: Optional[float],
    ambient_temperature: float,
    release_rate: float,
    wind_speed: float,
    molecular_weight: float = AIR_MOLAR_MASS,
    pressure_hpa: float = STANDARD_PRESSURE_HPA,
    distance: Optional[float] = None,
    min_wind_speed: float = MIN_WIND_SPEED_MPS,
) -> float:
    """
    Effective (buoyancy-corrected) release height in metres.

    Args:
        release_height: Physical release height above ground (m).
        release_temperature: Release temperature (deg C); ``None`` means
            ambient, i.e. no buoyant rise.
        ambient_temperature: Air temperature (deg C).
        release_rate: Mass release rate (g/s).
        wind_speed: Wind speed (m/s); floored at ``min_wind_speed``.
        molecular_weight: Molar mass of the released gas (g/mol).
        pressure_hpa: Ambient pressure (hPa).
        distance: Optional downwind distance for gradual rise (m).
        min_wind_speed: Wind floor applied before dividing (m/s).

    Raises:
        InvalidInputError: for negative height or rate, or non-finite
            temperatures.
    """
    require_non_negative("release_height", release_height)
    require_non_negative("release_rate", release_rate)
    require_finite("ambient_temperature", ambient_temperature)
    if release_temperature is None or release_temperature <= ambient_temperature:
        return float(release_height)
    require_finite("release_temperature", release_temperature)

    flux = buoyancy_flux(
        release_rate, release_temperature, ambient_temperature,
        molecular_weight, pressure_hpa,
    )
    return float(release_height) + plume_rise(flux, wind_speed, distance, min_wind_speed)
