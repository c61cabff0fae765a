"""Tests for release source and receptor models."""

import pytest

from models.errors import InvalidInputError
from models.source import ReceptorPoint, ReleaseSource


def _source(**kwargs):
    return ReleaseSource(latitude=29.76, longitude=-95.37, **kwargs)


class TestReleaseSource:
    def test_rate_only_is_open_ended(self):
        s = _source(release_rate=50.0)
        assert s.source_strength() == 50.0
        assert s.resolved_total_mass() is None

    def test_rate_and_duration(self):
        assert _source(release_rate=50.0, release_duration=60.0).resolved_total_mass() == 3000.0

    def test_mass_precedence(self):
        s = _source(release_rate=1.0, release_duration=10.0, total_mass=500.0,
                    release_volume=2.0, density=1.5)
        assert s.resolved_total_mass() == 500.0

    def test_volume_density(self):
        s = _source(release_volume=2.0, density=1.5, release_duration=100.0)
        assert s.resolved_total_mass() == 3000.0
        assert s.source_strength() == 30.0

    def test_instantaneous_release(self):
        s = _source(total_mass=800.0, release_type="Instantaneous")
        assert s.release_type == "instantaneous"
        assert s.source_strength() == 800.0

    def test_continuous_mass_needs_duration(self):
        with pytest.raises(InvalidInputError):
            _source(total_mass=800.0).source_strength()

    def test_needs_some_release_parameter(self):
        with pytest.raises(InvalidInputError, match="release parameter"):
            _source()

    def test_volume_without_density(self):
        with pytest.raises(InvalidInputError, match="density"):
            _source(release_volume=2.0)

    @pytest.mark.parametrize("kwargs", [
        {"release_rate": -1.0},
        {"release_rate": 1.0, "release_height": -2.0},
        {"total_mass": float("nan")},
        {"release_rate": 1.0, "release_type": "burst"},
        {"release_rate": 1.0, "molecular_weight": 0.0},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(InvalidInputError):
            _source(**kwargs)

    def test_bad_coordinates(self):
        with pytest.raises(InvalidInputError):
            ReleaseSource(latitude=95.0, longitude=0.0, release_rate=1.0)
        with pytest.raises(InvalidInputError):
            ReleaseSource(latitude=float("nan"), longitude=0.0, release_rate=1.0)


class TestReceptorPoint:
    def test_local_defaults(self):
        r = ReceptorPoint(downwind=100.0)
        assert r.crosswind == 0.0
        assert r.height == 0.0
        assert not r.is_geographic

    def test_geographic_at_breathing_height(self):
        r = ReceptorPoint.at(29.77, -95.37, name="School")
        assert r.is_geographic
        assert r.height == 1.5
        assert r.name == "School"

    def test_needs_exactly_one_form(self):
        with pytest.raises(InvalidInputError):
            ReceptorPoint()
        with pytest.raises(InvalidInputError):
            ReceptorPoint(downwind=1.0, latitude=1.0, longitude=1.0)

    def test_non_finite_rejected(self):
        with pytest.raises(InvalidInputError):
            ReceptorPoint(downwind=float("inf"))

    def test_plume_axes_win_over_partial_geographic(self):
        """A stray latitude without longitude leaves the point in plume axes."""
        r = ReceptorPoint(downwind=500.0, latitude=29.77)
        assert not r.is_geographic
        assert r.crosswind == 0.0
