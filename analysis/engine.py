"""
Dispersion Engine.

Ties the pure model functions together for one (release, weather) pair:

    WeatherState -> stability class
    ReleaseSource + WeatherState -> effective source (plume rise)
    effective source + receptor -> concentration (mg/m^3)
    effective source -> iso-concentration contours

The engine keeps no state between calls; everything it needs is in its
EngineConfig or the arguments of each call.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Sequence, Tuple

from config import (
    CALM_POLICY,
    DEFAULT_CONTOUR_LEVELS,
    DEFAULT_DISPERSION_TABLE,
    MIN_WIND_SPEED_MPS,
    PEAK_SEARCH_MAX_DISTANCE_M,
)
from analysis.contours import ContourSettings, contours_for
from analysis.receptors import evaluate_receptors
from models.dispersion_coefficients import compute_sigma, get_table, within_validity
from models.errors import DegenerateConditionError, InvalidInputError
from models.gaussian_plume import (
    concentration_at,
    geographic_to_plume,
    max_ground_concentration,
)
from models.health_impact import impact_level
from models.plume_rise import buoyancy_flux, effective_height
from models.results import (
    ConcentrationResult,
    ContourLevel,
    DispersionAssessment,
    ReceptorOutcome,
)
from models.source import EffectiveSource, ReceptorPoint, ReleaseSource
from models.stability import StabilitySettings, classify_weather
from models.units import g_to_mg, mg_m3_to_ppm

logger = logging.getLogger(__name__)

CALM_POLICIES = ("reject", "floor")


@dataclass
class EngineConfig:
    """Explicit configuration for a DispersionEngine.

    Args:
        table: Dispersion coefficient table name.
        min_wind_speed: Calm-air floor (m/s).
        calm_policy: ``"reject"`` raises DegenerateConditionError below the
            floor; ``"floor"`` computes with the floor wind speed instead.
        stability: Classifier thresholds.
        contour: Contour sweep settings.
        levels: Default contour levels (mg/m^3).
        peak_search_max_distance: Downwind range searched for the peak
            ground concentration (m).
    """

    table: str = DEFAULT_DISPERSION_TABLE
    min_wind_speed: float = MIN_WIND_SPEED_MPS
    calm_policy: str = CALM_POLICY
    stability: StabilitySettings = field(default_factory=StabilitySettings)
    contour: ContourSettings = field(default_factory=ContourSettings)
    levels: Tuple[float, ...] = DEFAULT_CONTOUR_LEVELS
    peak_search_max_distance: float = PEAK_SEARCH_MAX_DISTANCE_M

    def __post_init__(self):
        get_table(self.table)
        if not self.min_wind_speed > 0:
            raise InvalidInputError("min_wind_speed must be > 0")
        if self.calm_policy not in CALM_POLICIES:
            raise InvalidInputError(
                f"Unknown calm policy '{self.calm_policy}'. Use one of {CALM_POLICIES}."
            )
        if not self.peak_search_max_distance > 1.0:
            raise InvalidInputError("peak_search_max_distance must be > 1 m")


class DispersionEngine:
    """Stateless dispersion calculator.

    Args:
        config: Engine configuration; defaults from ``config``.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def transport_wind_speed(self, weather) -> Tuple[float, bool]:
        """
        Wind speed used for transport, and whether the calm floor was applied.

        Raises:
            DegenerateConditionError: below the floor under the "reject" policy.
        """
        floor = self.config.min_wind_speed
        if weather.wind_speed >= floor:
            return float(weather.wind_speed), False
        if self.config.calm_policy == "reject":
            raise DegenerateConditionError(weather.wind_speed, floor)
        logger.warning(
            "Wind speed %.2f m/s below calm floor; computing with %.2f m/s",
            weather.wind_speed, floor,
        )
        return float(floor), True

    def stability_for(self, weather) -> str:
        return classify_weather(weather, self.config.stability)

    def effective_source(self, source: ReleaseSource, weather) -> EffectiveSource:
        """Source strength and plume-rise-corrected height for this weather."""
        u, _ = self.transport_wind_speed(weather)
        q = source.source_strength()
        flux = 0.0
        if source.release_temperature is not None:
            flux = buoyancy_flux(
                q, source.release_temperature, weather.temperature,
                source.molecular_weight, weather.pressure,
            )
        height = effective_height(
            source.release_height,
            source.release_temperature,
            weather.temperature,
            q,
            u,
            molecular_weight=source.molecular_weight,
            pressure_hpa=weather.pressure,
            min_wind_speed=self.config.min_wind_speed,
        )
        logger.debug(
            "Effective source: Q=%.4g g/s, H=%.2f m (release %.2f m, F=%.4g)",
            q, height, source.release_height, flux,
        )
        return EffectiveSource(
            source=source,
            source_strength=q,
            effective_height=height,
            buoyancy_flux=flux,
            plume_rise=height - source.release_height,
        )

    def _plume_coordinates(self, source: ReleaseSource, weather, receptor: ReceptorPoint):
        if receptor.is_geographic:
            return geographic_to_plume(
                source.latitude, source.longitude,
                receptor.latitude, receptor.longitude,
                weather.wind_direction,
            )
        return float(receptor.downwind), float(receptor.crosswind)

    def concentration_at_receptor(
        self,
        source: ReleaseSource,
        weather,
        receptor: ReceptorPoint,
        stability_class: Optional[str] = None,
        effective: Optional[EffectiveSource] = None,
    ) -> ConcentrationResult:
        """
        Concentration (mg/m^3) at one receptor.

        Args:
            source: The release.
            weather: Current WeatherState.
            receptor: Plume-local or geographic receptor.
            stability_class: Override; derived from ``weather`` when omitted.
            effective: Precomputed effective source, to share plume rise
                across receptors.

        Raises:
            DegenerateConditionError: calm air under the "reject" policy.
            InvalidInputError: malformed source or receptor.
        """
        u, _ = self.transport_wind_speed(weather)
        stability_class = stability_class or self.stability_for(weather)
        effective = effective or self.effective_source(source, weather)
        x, y = self._plume_coordinates(source, weather, receptor)

        if x <= 0:
            return ConcentrationResult(
                concentration=0.0,
                receptor=receptor,
                downwind=x,
                crosswind=y,
                stability_class=stability_class,
                effective_height=effective.effective_height,
                concentration_ppm=0.0,
                impact_level=impact_level(0.0, source.hazard_class),
            )

        sy, sz = compute_sigma(x, stability_class, self.config.table)
        conc = concentration_at(
            x, y, receptor.height, effective.source_strength,
            effective.effective_height, u, sy, sz, self.config.min_wind_speed,
        )
        low_confidence = not within_validity(x, self.config.table)
        if low_confidence:
            logger.debug("Receptor at %.1f m downwind is outside the fitted range", x)

        conc_mg = float(g_to_mg(conc))
        return ConcentrationResult(
            concentration=conc_mg,
            receptor=receptor,
            downwind=x,
            crosswind=y,
            stability_class=stability_class,
            effective_height=effective.effective_height,
            sigma_y=sy,
            sigma_z=sz,
            low_confidence=low_confidence,
            concentration_ppm=float(mg_m3_to_ppm(
                conc_mg, source.molecular_weight, weather.temperature, weather.pressure,
            )),
            impact_level=impact_level(conc_mg, source.hazard_class),
        )

    def evaluate_receptors(
        self,
        source: ReleaseSource,
        weather,
        receptors: Iterable[ReceptorPoint],
    ) -> List[ReceptorOutcome]:
        """Evaluate many receptors; failures are reported per item."""
        return evaluate_receptors(
            lambda receptor: self.concentration_at_receptor(source, weather, receptor),
            receptors,
        )

    def contours(
        self,
        source: ReleaseSource,
        weather,
        levels: Optional[Sequence[float]] = None,
        settings: Optional[ContourSettings] = None,
        stability_class: Optional[str] = None,
        effective: Optional[EffectiveSource] = None,
    ) -> List[ContourLevel]:
        """Iso-concentration contours (mg/m^3) for the release."""
        u, _ = self.transport_wind_speed(weather)
        stability_class = stability_class or self.stability_for(weather)
        effective = effective or self.effective_source(source, weather)
        return contours_for(
            source,
            effective.effective_height,
            replace(weather, wind_speed=u),
            levels=levels or self.config.levels,
            settings=settings or self.config.contour,
            stability_class=stability_class,
            table=self.config.table,
            min_wind_speed=self.config.min_wind_speed,
        )

    def assess(
        self,
        source: ReleaseSource,
        weather,
        receptors: Iterable[ReceptorPoint] = (),
        levels: Optional[Sequence[float]] = None,
        settings: Optional[ContourSettings] = None,
    ) -> DispersionAssessment:
        """
        Full assessment of one release under one weather observation.

        Raises:
            DegenerateConditionError: calm air under the "reject" policy.
        """
        u, floored = self.transport_wind_speed(weather)
        stability_class = self.stability_for(weather)
        effective = self.effective_source(source, weather)

        outcomes = evaluate_receptors(
            lambda receptor: self.concentration_at_receptor(
                source, weather, receptor, stability_class, effective
            ),
            receptors,
        )
        contour_levels = self.contours(
            source, weather, levels, settings, stability_class, effective
        )
        peak_distance, peak_g = max_ground_concentration(
            effective.source_strength,
            effective.effective_height,
            u,
            stability_class,
            max_distance=self.config.peak_search_max_distance,
            table=self.config.table,
            min_wind_speed=self.config.min_wind_speed,
        )

        logger.info(
            "Assessment: class %s, u=%.2f m/s, H=%.1f m, peak %.4g mg/m3 at %.0f m, "
            "%d contour levels",
            stability_class, u, effective.effective_height, g_to_mg(peak_g),
            peak_distance, len(contour_levels),
        )
        assessment = DispersionAssessment(
            stability_class=stability_class,
            wind_speed=u,
            wind_direction=weather.wind_direction,
            effective_source=effective,
            receptors=outcomes,
            contours=contour_levels,
            peak_concentration=g_to_mg(peak_g),
            peak_distance=peak_distance,
            calm_floor_applied=floored,
        )
        if assessment.worst_impact is not None:
            logger.info("Worst receptor impact for %s: %s",
                        source.name or "release", assessment.worst_impact)
        return assessment
