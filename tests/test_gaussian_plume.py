"""Tests for the Gaussian plume concentration field."""

import numpy as np
import pytest

from models.dispersion_coefficients import compute_sigma
from models.errors import DegenerateConditionError, InvalidInputError
from models.gaussian_plume import (
    centerline_concentration,
    concentration_at,
    from_plume_coordinates,
    gaussian_plume,
    geographic_to_plume,
    max_ground_concentration,
    plume_field,
    plume_to_geographic,
    to_plume_coordinates,
)
from models.units import offset_to_latlon


class TestCoordinates:
    """Meteorological wind direction rotated into plume axes."""

    def test_north_wind_blows_south(self):
        x, y = to_plume_coordinates(0.0, -500.0, 0.0)
        assert x == pytest.approx(500.0)
        assert y == pytest.approx(0.0, abs=1e-9)

    def test_west_wind_blows_east(self):
        x, y = to_plume_coordinates(100.0, 0.0, 270.0)
        assert x == pytest.approx(100.0)
        assert y == pytest.approx(0.0, abs=1e-9)

    def test_crosswind_positive_to_the_left(self):
        # Travelling east, north is to the left
        _, y = to_plume_coordinates(0.0, 100.0, 270.0)
        assert y == pytest.approx(100.0)

    def test_inverse(self):
        dx, dy = from_plume_coordinates(*to_plume_coordinates(120.0, -45.0, 33.0), 33.0)
        assert dx == pytest.approx(120.0)
        assert dy == pytest.approx(-45.0)

    def test_geographic(self):
        lat, lon = offset_to_latlon(29.76, -95.37, 0.0, -500.0)
        x, y = geographic_to_plume(29.76, -95.37, lat, lon, 0.0)
        assert x == pytest.approx(500.0, rel=1e-9)
        assert y == pytest.approx(0.0, abs=1e-6)

        lat2, lon2 = plume_to_geographic(29.76, -95.37, 500.0, 0.0, 0.0)
        assert lat2 == pytest.approx(float(lat))
        assert lon2 == pytest.approx(float(lon))


class TestConcentrationAt:
    """Tests for the closed-form plume equation."""

    def test_hand_computed_value(self):
        """100 g/s, H=10 m, 3 m/s, class D, ground level 500 m downwind."""
        sy, sz = compute_sigma(500.0, "D")
        expected = 100.0 / (np.pi * 3.0 * sy * sz) * np.exp(-0.5 * (10.0 / sz) ** 2)
        c = concentration_at(500.0, 0.0, 0.0, 100.0, 10.0, 3.0, sy, sz)
        assert c == pytest.approx(expected)
        assert c * 1000.0 == pytest.approx(10.94, rel=2e-3)

    def test_zero_upwind(self):
        assert concentration_at(-100.0, 0.0, 0.0, 100.0, 10.0, 3.0, 10.0, 5.0) == 0.0
        assert concentration_at(0.0, 0.0, 0.0, 100.0, 10.0, 3.0, 10.0, 5.0) == 0.0

    def test_upwind_sigmas_not_read(self):
        x = np.array([-50.0, 100.0])
        c = concentration_at(x, 0.0, 0.0, 100.0, 10.0, 3.0, np.array([0.0, 10.0]), np.array([0.0, 5.0]))
        assert c[0] == 0.0
        assert c[1] > 0.0

    def test_crosswind_symmetry(self):
        a = concentration_at(300.0, 25.0, 1.5, 50.0, 10.0, 3.0, 30.0, 15.0)
        b = concentration_at(300.0, -25.0, 1.5, 50.0, 10.0, 3.0, 30.0, 15.0)
        assert a == pytest.approx(b)

    def test_reflection_mirror_symmetry(self):
        """Receptor height and source height are interchangeable."""
        a = concentration_at(300.0, 10.0, 5.0, 50.0, 20.0, 3.0, 30.0, 15.0)
        b = concentration_at(300.0, 10.0, 20.0, 50.0, 5.0, 3.0, 30.0, 15.0)
        assert a == pytest.approx(b)

    def test_ground_source_doubles(self):
        """With H = 0 the ground reflection doubles the free-space value at z = 0."""
        sy, sz = 30.0, 15.0
        c = concentration_at(300.0, 0.0, 0.0, 50.0, 0.0, 3.0, sy, sz)
        assert c == pytest.approx(2.0 * 50.0 / (2.0 * np.pi * 3.0 * sy * sz))

    def test_calm_raises_degenerate(self):
        with pytest.raises(DegenerateConditionError) as exc_info:
            concentration_at(100.0, 0.0, 0.0, 100.0, 10.0, 0.2, 10.0, 5.0)
        assert exc_info.value.wind_speed == 0.2
        assert exc_info.value.min_wind_speed == 0.5

    def test_degenerate_is_not_invalid_input(self):
        with pytest.raises(DegenerateConditionError) as exc_info:
            concentration_at(100.0, 0.0, 0.0, 100.0, 10.0, 0.0, 10.0, 5.0)
        assert not isinstance(exc_info.value, InvalidInputError)

    def test_negative_wind_is_invalid(self):
        with pytest.raises(InvalidInputError):
            concentration_at(100.0, 0.0, 0.0, 100.0, 10.0, -1.0, 10.0, 5.0)

    def test_negative_source_strength_raises(self):
        with pytest.raises(InvalidInputError):
            concentration_at(100.0, 0.0, 0.0, -1.0, 10.0, 3.0, 10.0, 5.0)

    def test_non_positive_sigma_raises(self):
        with pytest.raises(InvalidInputError):
            concentration_at(100.0, 0.0, 0.0, 100.0, 10.0, 3.0, 0.0, 5.0)

    def test_inversely_proportional_to_wind(self):
        slow = concentration_at(300.0, 0.0, 0.0, 50.0, 10.0, 2.0, 30.0, 15.0)
        fast = concentration_at(300.0, 0.0, 0.0, 50.0, 10.0, 4.0, 30.0, 15.0)
        assert slow == pytest.approx(2.0 * fast)


class TestPlumeField:
    def test_grid_orientation(self, small_grid):
        X, Y = small_grid
        conc = gaussian_plume(X, Y, 1.5, 0.0, 0.0, 0.0, 0.5, 3.0, 270.0, "D")
        assert conc.shape == X.shape
        east = (X > 20) & (np.abs(Y) < 10)
        west = X < 0
        assert np.all(conc[east] > 0)
        assert np.all(conc[west] == 0)

    def test_matches_explicit_sigmas(self):
        x = np.array([150.0, 600.0])
        sy, sz = compute_sigma(x, "C")
        expected = concentration_at(x, 5.0, 1.0, 20.0, 8.0, 4.0, sy, sz)
        np.testing.assert_allclose(plume_field(x, 5.0, 1.0, 20.0, 8.0, 4.0, "C"), expected)


class TestCenterline:
    def test_decreasing_beyond_peak(self):
        peak_x, peak_c = max_ground_concentration(100.0, 30.0, 3.0, "D")
        assert peak_c > 0
        beyond = peak_x * np.array([1.5, 2.0, 4.0, 8.0])
        conc = centerline_concentration(beyond, 100.0, 30.0, 3.0, "D")
        assert np.all(np.diff(conc) < 0)
        assert conc[0] < peak_c

    def test_peak_is_maximum(self):
        peak_x, peak_c = max_ground_concentration(100.0, 30.0, 3.0, "D")
        distances = np.geomspace(1.0, 10000.0, 2000)
        conc = centerline_concentration(distances, 100.0, 30.0, 3.0, "D")
        assert peak_c >= conc.max() * (1 - 1e-6)

    def test_higher_stack_peaks_further(self):
        low_x, low_c = max_ground_concentration(100.0, 20.0, 3.0, "D")
        high_x, high_c = max_ground_concentration(100.0, 60.0, 3.0, "D")
        assert high_x > low_x
        assert high_c < low_c

    def test_ground_source_peaks_at_source(self):
        peak_x, _ = max_ground_concentration(100.0, 0.0, 3.0, "D")
        assert peak_x < 2.0

    def test_bad_search_range(self):
        with pytest.raises(InvalidInputError):
            max_ground_concentration(100.0, 10.0, 3.0, "D", max_distance=1.0, min_distance=5.0)
