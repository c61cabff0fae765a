"""
Release source and receptor data models.

ReleaseSource describes what is released and where; EffectiveSource adds
the plume rise computed for one calculation; ReceptorPoint is a location at
which concentration is requested.
"""

from dataclasses import dataclass
from typing import Optional

from config import AIR_MOLAR_MASS, RECEPTOR_HEIGHT_M
from models.errors import InvalidInputError
from models.units import require_finite, require_non_negative

RELEASE_TYPES = ("continuous", "instantaneous", "puff")

# Instantaneous releases are treated as the whole mass emitted over this span
INSTANTANEOUS_RELEASE_S = 1.0


@dataclass
class ReleaseSource:
    """A chemical release.

    Args:
        latitude, longitude: Release origin (decimal degrees).
        release_rate: Mass release rate (g/s).
        release_duration: Duration of the release (s).
        total_mass: Total mass released (g).
        release_volume: Released liquid/gas volume (m^3), used with density.
        density: Density of the released material (kg/m^3).
        release_height: Height of the release point above ground (m).
        release_temperature: Release temperature (deg C); None = ambient.
        release_type: "continuous", "instantaneous" or "puff".
        molecular_weight: Molar mass of the chemical (g/mol).
        hazard_class: Hazard class of the chemical (e.g. "toxic",
            "corrosive"), used to rate receptor impact.
        name: Optional label (chemical or event name).
    """

    latitude: float
    longitude: float
    release_rate: Optional[float] = None
    release_duration: Optional[float] = None
    total_mass: Optional[float] = None
    release_volume: Optional[float] = None
    density: Optional[float] = None
    release_height: float = 0.0
    release_temperature: Optional[float] = None
    release_type: str = "continuous"
    molecular_weight: float = AIR_MOLAR_MASS
    hazard_class: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self):
        require_finite("latitude", self.latitude)
        require_finite("longitude", self.longitude)
        if not -90.0 <= self.latitude <= 90.0:
            raise InvalidInputError(f"latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise InvalidInputError(f"longitude out of range: {self.longitude}")

        for attr in ("release_rate", "release_duration", "total_mass",
                     "release_volume", "density"):
            value = getattr(self, attr)
            if value is not None:
                require_non_negative(attr, value)
        require_non_negative("release_height", self.release_height)
        if self.release_temperature is not None:
            require_finite("release_temperature", self.release_temperature)
        if self.molecular_weight <= 0:
            raise InvalidInputError("molecular_weight must be > 0")

        self.release_type = self.release_type.lower()
        if self.release_type not in RELEASE_TYPES:
            raise InvalidInputError(
                f"Unknown release type '{self.release_type}'. Use one of {RELEASE_TYPES}."
            )
        if self.release_rate is None and self.total_mass is None and self.release_volume is None:
            raise InvalidInputError(
                "At least one release parameter (rate, volume, or mass) must be specified"
            )
        if self.release_volume is not None and self.density is None and self.total_mass is None \
                and self.release_rate is None:
            raise InvalidInputError("release_volume requires density to resolve a mass")

    def resolved_total_mass(self) -> Optional[float]:
        """
        Total released mass in grams.

        Precedence: explicit total mass, then volume * density, then
        rate * duration.  ``None`` for an open-ended continuous release.
        """
        if self.total_mass is not None:
            return float(self.total_mass)
        if self.release_volume is not None and self.density is not None:
            return float(self.release_volume * self.density * 1000.0)
        if self.release_rate is not None and self.release_duration is not None:
            return float(self.release_rate * self.release_duration)
        return None

    def source_strength(self) -> float:
        """
        Emission rate Q in g/s used by the plume equation.

        Continuous releases use the rate, or total mass spread over the
        duration.  Instantaneous and puff releases emit their whole mass over
        a nominal one second.
        """
        if self.release_type == "continuous":
            if self.release_rate is not None:
                return float(self.release_rate)
            mass = self.resolved_total_mass()
            if mass is not None and self.release_duration:
                return mass / float(self.release_duration)
            raise InvalidInputError(
                "Continuous release needs a rate, or a mass with a positive duration"
            )

        mass = self.resolved_total_mass()
        if mass is None:
            # Instantaneous release specified only by rate
            return float(self.release_rate)
        return mass / INSTANTANEOUS_RELEASE_S


@dataclass(frozen=True)
class EffectiveSource:
    """A release source together with its computed plume rise.

    Lives for one calculation only.
    """

    source: ReleaseSource
    source_strength: float     # g/s
    effective_height: float    # m
    buoyancy_flux: float = 0.0
    plume_rise: float = 0.0


@dataclass
class ReceptorPoint:
    """A point where concentration is requested.

    Either plume-local coordinates (``downwind``, ``crosswind``) or
    geographic coordinates (``latitude``, ``longitude``) must be given.
    Geographic points are resolved against the source origin and wind
    direction at evaluation time.
    """

    downwind: Optional[float] = None
    crosswind: Optional[float] = None
    height: float = 0.0
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    name: Optional[str] = None

    def __post_init__(self):
        has_local = self.downwind is not None
        has_geo = self.latitude is not None and self.longitude is not None
        if has_local == has_geo:
            raise InvalidInputError(
                "ReceptorPoint needs either downwind/crosswind or latitude/longitude"
            )
        if has_local:
            if self.crosswind is None:
                self.crosswind = 0.0
            require_finite("downwind", self.downwind)
            require_finite("crosswind", self.crosswind)
        else:
            require_finite("latitude", self.latitude)
            require_finite("longitude", self.longitude)
        require_finite("height", self.height)

    @property
    def is_geographic(self) -> bool:
        return self.downwind is None

    @classmethod
    def at(cls, latitude: float, longitude: float, height: float = RECEPTOR_HEIGHT_M,
           name: Optional[str] = None) -> "ReceptorPoint":
        """Geographic receptor at breathing height by default."""
        return cls(latitude=latitude, longitude=longitude, height=height, name=name)

