"""
Computed outputs of the dispersion engine.

All result types are immutable; they are created fresh for each call and
handed back to the caller.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from models.health_impact import worst_impact
from models.source import EffectiveSource, ReceptorPoint


@dataclass(frozen=True)
class ConcentrationResult:
    """Concentration at one receptor for one (source, weather) pair.

    Attributes:
        concentration: mg/m^3, always >= 0.
        receptor: The receptor that was evaluated.
        downwind, crosswind: Plume-local coordinates of the receptor (m).
        stability_class: Pasquill-Gifford class used.
        effective_height: Effective release height used (m).
        sigma_y, sigma_z: Spread parameters at the receptor (m); None upwind.
        low_confidence: True when the downwind distance lies outside the
            fitted range of the dispersion curves.
        concentration_ppm: Concentration in ppm by volume at the ambient
            temperature and pressure.
        impact_level: Health impact rating ("safe" ... "critical") for the
            source's hazard class.
    """

    concentration: float
    receptor: ReceptorPoint
    downwind: float
    crosswind: float
    stability_class: str
    effective_height: float
    sigma_y: Optional[float] = None
    sigma_z: Optional[float] = None
    low_confidence: bool = False
    concentration_ppm: Optional[float] = None
    impact_level: Optional[str] = None


@dataclass(frozen=True)
class ContourLevel:
    """An iso-concentration boundary.

    Attributes:
        level: Threshold concentration (mg/m^3).
        polygon: Closed ring of (lat, lon) vertices in angular order.
        radii: Crossing distance (m) per sector, same order as the sweep.
        bearings: Compass bearing (deg) of each sector.
        truncated_sectors: Sector indices where the level was still
            exceeded at the maximum sweep distance.
    """

    level: float
    polygon: List[Tuple[float, float]]
    radii: Tuple[float, ...] = ()
    bearings: Tuple[float, ...] = ()
    truncated_sectors: Tuple[int, ...] = ()

    @property
    def truncated(self) -> bool:
        return bool(self.truncated_sectors)

    @property
    def max_radius(self) -> float:
        return max(self.radii) if self.radii else 0.0


@dataclass(frozen=True)
class ReceptorOutcome:
    """Per-item result of a batch evaluation.

    Exactly one of ``result`` or ``error`` is set.  ``error_kind`` is the
    exception class name (e.g. ``"DegenerateConditionError"``).
    """

    receptor: ReceptorPoint
    result: Optional[ConcentrationResult] = None
    error_kind: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.result is not None

    @property
    def impact_level(self) -> Optional[str]:
        return self.result.impact_level if self.ok else None


@dataclass(frozen=True)
class DispersionAssessment:
    """Everything one engine invocation produces for a (source, weather) pair."""

    stability_class: str
    wind_speed: float
    wind_direction: float
    effective_source: EffectiveSource
    receptors: List[ReceptorOutcome] = field(default_factory=list)
    contours: List[ContourLevel] = field(default_factory=list)
    peak_concentration: float = 0.0          # mg/m^3, ground-level centerline
    peak_distance: Optional[float] = None    # m downwind
    calm_floor_applied: bool = False

    @property
    def worst_impact(self) -> Optional[str]:
        """Most severe receptor impact level, None without successful receptors."""
        return worst_impact(o.impact_level for o in self.receptors)
