"""Tests for Briggs buoyant plume rise."""

import math

import pytest

from models.errors import InvalidInputError
from models.plume_rise import (
    buoyancy_flux,
    distance_to_final_rise,
    effective_height,
    final_rise,
    plume_rise,
    transitional_rise,
    volumetric_rate,
)
from models.units import gas_density


class TestBuoyancyFlux:
    def test_zero_when_not_warmer(self):
        assert buoyancy_flux(100.0, 15.0, 15.0) == 0.0
        assert buoyancy_flux(100.0, 5.0, 15.0) == 0.0

    def test_zero_for_zero_rate(self):
        assert buoyancy_flux(0.0, 100.0, 15.0) == 0.0

    def test_briggs_formula(self):
        v = volumetric_rate(1000.0, 100.0)
        ts, ta = 373.15, 288.15
        expected = 9.81 * (v / math.pi) * (ts - ta) / ts
        assert buoyancy_flux(1000.0, 100.0, 15.0) == pytest.approx(expected)

    def test_volumetric_rate_uses_ideal_gas(self):
        # 1 kg/s of air at 15 C
        assert volumetric_rate(1000.0, 15.0) == pytest.approx(1.0 / gas_density(15.0))

    def test_hotter_release_has_more_flux(self):
        assert buoyancy_flux(1000.0, 200.0, 15.0) > buoyancy_flux(1000.0, 50.0, 15.0)


class TestRise:
    def test_final_rise_formula(self):
        # 2.6 * (1 / 2^3)^(1/3) = 1.3
        assert final_rise(1.0, 2.0) == pytest.approx(1.3)

    def test_wind_floor_applied(self):
        assert final_rise(1.0, 0.1) == pytest.approx(final_rise(1.0, 0.5))
        assert final_rise(1.0, 0.1, min_wind_speed=1.0) == pytest.approx(final_rise(1.0, 1.0))

    def test_stronger_wind_lowers_rise(self):
        assert final_rise(5.0, 8.0) < final_rise(5.0, 2.0)

    def test_transitional_formula(self):
        # 1.6 * 1 * 8^(2/3) / 2 = 3.2
        assert transitional_rise(1.0, 2.0, 8.0) == pytest.approx(3.2)

    def test_distance_to_final_rise(self):
        assert distance_to_final_rise(1.0) == pytest.approx(49.0)
        assert distance_to_final_rise(2.0) == pytest.approx(49.0 * 2.0 ** 0.625)
        assert distance_to_final_rise(100.0) == pytest.approx(119.0 * 100.0 ** 0.4)
        assert distance_to_final_rise(0.0) == 0.0

    def test_gradual_rise_grows_until_final_distance(self):
        x_f = distance_to_final_rise(2.0)
        near = plume_rise(2.0, 3.0, distance=10.0)
        mid = plume_rise(2.0, 3.0, distance=x_f / 2.0)
        at_final = plume_rise(2.0, 3.0, distance=x_f)
        assert near == pytest.approx(transitional_rise(2.0, 3.0, 10.0))
        assert near < mid < at_final
        assert plume_rise(2.0, 3.0, distance=1e6) == pytest.approx(at_final)
        assert plume_rise(2.0, 3.0, distance=10 * x_f) == pytest.approx(at_final)

    def test_no_distance_gives_final_rise(self):
        assert plume_rise(2.0, 3.0) == pytest.approx(final_rise(2.0, 3.0))


class TestEffectiveHeight:
    def test_ambient_release_unchanged(self):
        assert effective_height(10.0, None, 15.0, 100.0, 3.0) == 10.0
        assert effective_height(10.0, 15.0, 15.0, 100.0, 3.0) == 10.0
        assert effective_height(10.0, 0.0, 15.0, 100.0, 3.0) == 10.0

    def test_hot_release_rises(self):
        h = effective_height(10.0, 150.0, 15.0, 1000.0, 3.0)
        flux = buoyancy_flux(1000.0, 150.0, 15.0)
        assert h == pytest.approx(10.0 + final_rise(flux, 3.0))
        assert h > 10.0

    def test_heavier_gas_rises_less(self):
        light = effective_height(5.0, 100.0, 15.0, 1000.0, 3.0, molecular_weight=17.03)
        heavy = effective_height(5.0, 100.0, 15.0, 1000.0, 3.0, molecular_weight=70.9)
        assert light > heavy

    def test_negative_rate_raises(self):
        with pytest.raises(InvalidInputError):
            effective_height(10.0, 100.0, 15.0, -1.0, 3.0)

    def test_negative_height_raises(self):
        with pytest.raises(InvalidInputError):
            effective_height(-1.0, 100.0, 15.0, 100.0, 3.0)
