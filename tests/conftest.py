"""Shared fixtures for the Chemical Release Dispersion Engine test suite."""

import sys
import os
from datetime import datetime

import pytest
import numpy as np

# Ensure project root is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

ORIGIN_LAT = 29.7604
ORIGIN_LON = -95.3698
NOON = datetime(2024, 6, 15, 12, 0)
NIGHT = datetime(2024, 6, 15, 2, 0)


@pytest.fixture
def small_grid():
    """A small 200m x 200m grid at 10m resolution for fast tests."""
    half = 100.0
    coords = np.arange(-half, half + 10, 10)
    X, Y = np.meshgrid(coords, coords)
    return X, Y


@pytest.fixture
def elevated_source():
    """100 g/s continuous release from 10 m, no buoyancy."""
    from models.source import ReleaseSource
    return ReleaseSource(
        latitude=ORIGIN_LAT,
        longitude=ORIGIN_LON,
        release_rate=100.0,
        release_height=10.0,
        name="Test Source",
    )


@pytest.fixture
def neutral_weather():
    """3 m/s from the north under overcast noon skies (class D)."""
    from data.weather import WeatherState
    return WeatherState(
        wind_speed=3.0,
        wind_direction=0.0,
        temperature=15.0,
        cloud_cover=1.0,
        timestamp=NOON,
    )


@pytest.fixture
def calm_weather():
    """0.2 m/s, below the calm-air floor."""
    from data.weather import WeatherState
    return WeatherState(wind_speed=0.2, wind_direction=90.0, cloud_cover=0.5, timestamp=NOON)


@pytest.fixture
def coarse_contours():
    """Coarse contour settings that keep engine tests fast."""
    from analysis.contours import ContourSettings
    return ContourSettings(sectors=12, resolution_m=100.0, max_distance_m=3000.0)


@pytest.fixture
def engine(coarse_contours):
    """Engine with default physics and coarse contours."""
    from analysis.engine import DispersionEngine, EngineConfig
    return DispersionEngine(EngineConfig(contour=coarse_contours))
