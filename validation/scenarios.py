"""
Reference scenarios for regression checks.

Each scenario function returns a dict with:
    - source: ReleaseSource
    - weather: WeatherState
    - receptor: ReceptorPoint evaluated by the scenario (if any)
    - expected: dict of expected outputs (class, bands, errors)
    - description: human-readable summary

``run_scenario`` evaluates a scenario with an engine and reports how the
computed values compare with the expectations.
"""

from datetime import datetime
from typing import Callable, Dict, List, Optional

from analysis.engine import DispersionEngine
from data.weather import WeatherState
from models.dispersion_coefficients import compute_sigma
from models.errors import DegenerateConditionError
from models.source import ReceptorPoint, ReleaseSource

_NOON = datetime(2024, 6, 15, 12, 0)
_ORIGIN = (29.7604, -95.3698)


def scenario_round_trip() -> dict:
    """Scenario A: daytime, light wind, nearly clear sky.

    3 m/s with 10% cloud at noon is strong insolation in the 3-5 m/s band,
    i.e. class B.  The sigmas reported at 500 m downwind must be exactly
    the class B table values.
    """
    return {
        "source": ReleaseSource(
            latitude=_ORIGIN[0], longitude=_ORIGIN[1],
            release_rate=100.0, release_height=10.0, name="Round trip",
        ),
        "weather": WeatherState(
            wind_speed=3.0, wind_direction=0.0, cloud_cover=0.1, timestamp=_NOON,
        ),
        "receptor": ReceptorPoint(downwind=500.0, crosswind=0.0, height=0.0),
        "expected": {
            "stability_class": "B",
            "sigma_y": compute_sigma(500.0, "B")[0],
            "sigma_z": compute_sigma(500.0, "B")[1],
        },
        "description": "3 m/s, 10% cloud, noon -> class B; sigma at 500 m from table",
    }


def scenario_end_to_end() -> dict:
    """Scenario B: neutral stability, elevated continuous release.

    100 g/s at an effective height of 10 m, 3 m/s wind from the north,
    overcast noon (class D), receptor on the ground 500 m due south on the
    centerline.  The Turner power-law curves give about 10.9 mg/m^3.
    """
    source = ReleaseSource(
        latitude=_ORIGIN[0], longitude=_ORIGIN[1],
        release_rate=100.0, release_height=10.0, name="End to end",
    )
    return {
        "source": source,
        "weather": WeatherState(
            wind_speed=3.0, wind_direction=0.0, cloud_cover=1.0, timestamp=_NOON,
        ),
        "receptor": ReceptorPoint(downwind=500.0, crosswind=0.0, height=0.0),
        "expected": {
            "stability_class": "D",
            "concentration_band": (10.0, 12.0),   # mg/m^3
            "reference_concentration": 10.94,     # mg/m^3, pasquill_gifford table
        },
        "description": "100 g/s, H=10 m, 3 m/s from N, class D, 500 m south at ground",
    }


def scenario_calm() -> dict:
    """Scenario C: near-calm air.

    0.2 m/s is below the calm-air floor; the engine must refuse rather
    than return an unbounded concentration.
    """
    return {
        "source": ReleaseSource(
            latitude=_ORIGIN[0], longitude=_ORIGIN[1], release_rate=100.0, name="Calm",
        ),
        "weather": WeatherState(
            wind_speed=0.2, wind_direction=90.0, cloud_cover=0.5, timestamp=_NOON,
        ),
        "receptor": ReceptorPoint(downwind=500.0),
        "expected": {"error": "DegenerateConditionError"},
        "description": "0.2 m/s wind -> DegenerateConditionError",
    }


def scenario_buoyant() -> dict:
    """Scenario D: warm ammonia vent at night.

    A 60 C release into 15 C air rises above its 15 m vent.  Clear
    night with 2.5 m/s wind is class F.
    """
    return {
        "source": ReleaseSource(
            latitude=_ORIGIN[0], longitude=_ORIGIN[1],
            release_rate=2000.0, release_height=15.0, release_temperature=60.0,
            molecular_weight=17.03, name="Ammonia vent",
        ),
        "weather": WeatherState(
            wind_speed=2.5, wind_direction=225.0, temperature=15.0, cloud_cover=0.1,
            timestamp=datetime(2024, 6, 15, 2, 0),
        ),
        "receptor": ReceptorPoint(downwind=1000.0),
        "expected": {"stability_class": "F", "min_plume_rise": 0.5},
        "description": "Warm ammonia vent, clear night -> class F, buoyant rise",
    }


SCENARIOS: Dict[str, Callable[[], dict]] = {
    "round_trip": scenario_round_trip,
    "end_to_end": scenario_end_to_end,
    "calm": scenario_calm,
    "buoyant": scenario_buoyant,
}


def run_scenario(scenario: dict, engine: Optional[DispersionEngine] = None) -> dict:
    """
    Evaluate a scenario and compare against its expectations.

    Returns:
        Dict with the computed values, a list of 'failures' (empty when
        every expectation holds) and 'passed'.
    """
    engine = engine or DispersionEngine()
    expected = scenario["expected"]
    outcome = {"description": scenario["description"], "failures": []}
    failures: List[str] = outcome["failures"]

    try:
        result = engine.concentration_at_receptor(
            scenario["source"], scenario["weather"], scenario["receptor"]
        )
    except DegenerateConditionError as exc:
        outcome["error"] = type(exc).__name__
        if expected.get("error") != outcome["error"]:
            failures.append(f"unexpected {outcome['error']}: {exc}")
        outcome["passed"] = not failures
        return outcome

    if "error" in expected:
        failures.append(f"expected {expected['error']}, got a result")

    outcome["stability_class"] = result.stability_class
    outcome["concentration"] = result.concentration
    outcome["sigma_y"] = result.sigma_y
    outcome["sigma_z"] = result.sigma_z
    outcome["effective_height"] = result.effective_height

    if "stability_class" in expected and result.stability_class != expected["stability_class"]:
        failures.append(
            f"class {result.stability_class} != expected {expected['stability_class']}"
        )
    for key in ("sigma_y", "sigma_z"):
        if key in expected and abs(outcome[key] - expected[key]) > 1e-9 * expected[key]:
            failures.append(f"{key} {outcome[key]:.4f} != table {expected[key]:.4f}")
    if "concentration_band" in expected:
        lo, hi = expected["concentration_band"]
        if not lo < result.concentration < hi:
            failures.append(
                f"concentration {result.concentration:.3g} outside ({lo}, {hi}) mg/m3"
            )
    if "min_plume_rise" in expected:
        rise = result.effective_height - scenario["source"].release_height
        if rise < expected["min_plume_rise"]:
            failures.append(f"plume rise {rise:.2f} m below {expected['min_plume_rise']} m")

    outcome["passed"] = not failures
    return outcome


def run_all(engine: Optional[DispersionEngine] = None) -> Dict[str, dict]:
    """Run every registered scenario."""
    return {name: run_scenario(factory(), engine) for name, factory in SCENARIOS.items()}
