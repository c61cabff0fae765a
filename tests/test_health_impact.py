"""Tests for receptor health impact rating."""

import pytest

from models.errors import InvalidInputError
from models.health_impact import (
    IMPACT_LEVELS,
    impact_level,
    safety_threshold,
    worst_impact,
)


class TestSafetyThreshold:
    def test_known_classes(self):
        assert safety_threshold("highly_toxic") == 0.1
        assert safety_threshold("toxic") == 1.0
        assert safety_threshold("corrosive") == 5.0

    def test_catalogue_toxic_gas_is_toxic(self):
        assert safety_threshold("toxic_gas") == safety_threshold("toxic")

    def test_unknown_and_missing_use_default(self):
        assert safety_threshold(None) == 10.0
        assert safety_threshold("carcinogen") == 10.0

    def test_case_insensitive(self):
        assert safety_threshold(" Toxic ") == 1.0


class TestImpactLevel:
    @pytest.mark.parametrize("concentration, expected", [
        (0.0, "safe"),
        (0.099, "safe"),
        (0.1, "low"),
        (0.49, "low"),
        (0.5, "moderate"),
        (0.99, "moderate"),
        (1.0, "high"),
        (4.99, "high"),
        (5.0, "critical"),
        (1000.0, "critical"),
    ])
    def test_bands_for_toxic(self, concentration, expected):
        assert impact_level(concentration, "toxic") == expected

    def test_threshold_scales_bands(self):
        # 2 mg/m3 is high for a toxic chemical but only low by default
        assert impact_level(2.0, "toxic") == "high"
        assert impact_level(2.0, None) == "low"
        assert impact_level(2.0, "highly_toxic") == "critical"

    def test_negative_rejected(self):
        with pytest.raises(InvalidInputError):
            impact_level(-1.0, "toxic")


class TestWorstImpact:
    def test_most_severe_wins(self):
        assert worst_impact(["low", "critical", "safe"]) == "critical"
        assert worst_impact(["safe", None, "moderate"]) == "moderate"

    def test_empty(self):
        assert worst_impact([]) is None
        assert worst_impact([None]) is None

    def test_levels_ordered(self):
        assert IMPACT_LEVELS == ("safe", "low", "moderate", "high", "critical")
