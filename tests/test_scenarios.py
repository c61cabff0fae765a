"""Tests for the reference scenarios and sample data."""

import pytest

from data.sample_data import get_chemicals, get_sample_releases, receptor_ring, sample_release
from models.units import haversine_m
from validation.scenarios import (
    SCENARIOS,
    run_all,
    run_scenario,
    scenario_end_to_end,
    scenario_round_trip,
)


class TestScenarios:
    def test_all_pass(self):
        results = run_all()
        assert set(results) == set(SCENARIOS)
        failed = {name: r["failures"] for name, r in results.items() if not r["passed"]}
        assert failed == {}

    def test_round_trip(self):
        result = run_scenario(scenario_round_trip())
        assert result["stability_class"] == "B"

    def test_end_to_end_reference(self):
        scenario = scenario_end_to_end()
        result = run_scenario(scenario)
        assert result["concentration"] == pytest.approx(
            scenario["expected"]["reference_concentration"], rel=2e-3
        )

    def test_calm_reports_error(self):
        result = run_scenario(SCENARIOS["calm"]())
        assert result["error"] == "DegenerateConditionError"
        assert result["passed"]

    def test_wrong_expectation_fails(self):
        scenario = scenario_round_trip()
        scenario["expected"]["stability_class"] = "F"
        result = run_scenario(scenario)
        assert not result["passed"]
        assert result["failures"]


class TestSampleData:
    def test_chemicals(self):
        chemicals = get_chemicals()
        assert chemicals["Chlorine"]["molecular_weight"] == 70.9
        assert chemicals["Ammonia"]["molecular_weight"] == 17.03

    def test_sample_releases(self):
        releases = get_sample_releases()
        assert len(releases) == 3
        assert all(r.source_strength() > 0 for r in releases)
        assert releases[1].release_temperature == 60.0
        assert releases[0].hazard_class == "toxic_gas"
        assert releases[2].hazard_class == "carcinogen"

    def test_unknown_site(self):
        with pytest.raises(KeyError):
            sample_release(site="Nowhere")

    def test_receptor_ring(self):
        source = sample_release()
        ring = receptor_ring(source, count=4, start_distance=500.0, spacing=250.0)
        distances = [haversine_m(source.latitude, source.longitude, r.latitude, r.longitude)
                     for r in ring]
        assert distances == pytest.approx([500.0, 750.0, 1000.0, 1250.0], rel=1e-3)
        assert all(r.height == 1.5 for r in ring)
