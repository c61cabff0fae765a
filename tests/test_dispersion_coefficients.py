"""Tests for dispersion coefficient tables and sigma evaluation."""

import numpy as np
import pytest

from models.dispersion_coefficients import (
    BRIGGS_RURAL,
    DispersionTable,
    coefficients_for,
    compute_sigma,
    get_table,
    sigma_y,
    sigma_z,
    within_validity,
)
from models.errors import InvalidInputError


class TestCoefficients:
    def test_power_law_lookup(self):
        coeffs = coefficients_for("D")
        assert coeffs == {
            "sigma_y": {"a": 0.1471, "b": 0.9031},
            "sigma_z": {"c": 0.079, "d": 0.9031},
        }

    def test_briggs_lookup(self):
        coeffs = coefficients_for("D", "briggs_rural")
        assert coeffs["sigma_y"] == {"a": 0.08, "b": 0.0001, "c": -0.5}

    def test_lowercase_class_accepted(self):
        assert coefficients_for("b") == coefficients_for("B")

    def test_unknown_class_raises(self):
        with pytest.raises(ValueError, match="Unknown stability class"):
            coefficients_for("Z")

    def test_unknown_table_raises(self):
        with pytest.raises(InvalidInputError, match="Unknown dispersion table"):
            get_table("urban_mcelroy")

    def test_bad_form_rejected(self):
        with pytest.raises(InvalidInputError):
            DispersionTable(name="x", form="spline", coefficients={})


class TestComputeSigma:
    """Tests for dispersion parameter computation."""

    @pytest.mark.parametrize("table", ["pasquill_gifford", "briggs_rural"])
    def test_sigma_increases_with_distance(self, table):
        """Sigma_y and sigma_z should increase monotonically with downwind distance."""
        distances = np.array([10.0, 50.0, 100.0, 500.0, 1000.0, 5000.0, 10000.0])
        for stability in "ABCDEF":
            sy, sz = compute_sigma(distances, stability, table)
            assert np.all(np.diff(sy) > 0), f"sigma_y not monotonic for class {stability}"
            assert np.all(np.diff(sz) > 0), f"sigma_z not monotonic for class {stability}"

    def test_unstable_disperses_more_than_stable(self):
        """Class A (very unstable) should have larger sigmas than class F (very stable)."""
        sy_a, sz_a = compute_sigma(500.0, "A")
        sy_f, sz_f = compute_sigma(500.0, "F")
        assert sy_a > sy_f
        assert sz_a > sz_f

    def test_matches_power_law(self):
        sy, sz = compute_sigma(500.0, "B")
        assert sy == pytest.approx(0.2751 * 500.0 ** 0.9031)
        assert sz == pytest.approx(0.156 * 500.0 ** 1.0857)

    def test_matches_briggs_form(self):
        sy, sz = compute_sigma(1000.0, "D", BRIGGS_RURAL)
        assert sy == pytest.approx(0.08 * 1000.0 * (1.0 + 0.0001 * 1000.0) ** -0.5)
        assert sz == pytest.approx(0.06 * 1000.0 * (1.0 + 0.0015 * 1000.0) ** -0.5)

    def test_scalar_in_scalar_out(self):
        sy, sz = compute_sigma(100.0, "C")
        assert isinstance(sy, float)
        assert isinstance(sz, float)

    def test_single_axis_helpers(self):
        distances = np.array([200.0, 800.0])
        sy, sz = compute_sigma(distances, "E")
        np.testing.assert_allclose(sigma_y(distances, "E"), sy)
        np.testing.assert_allclose(sigma_z(distances, "E"), sz)

    @pytest.mark.parametrize("distance", [0.0, -50.0, float("nan"), float("inf")])
    def test_invalid_distance_raises(self, distance):
        with pytest.raises(InvalidInputError):
            compute_sigma(distance, "D")


class TestValidity:
    def test_range(self):
        assert not within_validity(50.0)
        assert within_validity(100.0)
        assert within_validity(10000.0)
        assert not within_validity(20000.0)

    def test_vectorised(self):
        inside = within_validity(np.array([10.0, 500.0]))
        assert inside.tolist() == [False, True]
