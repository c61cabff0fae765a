"""
Sample data for development and demonstration.

Provides a small chemical catalogue, release sites around the Houston ship
channel, representative release events, and receptor rings around a site.
Designed to be swapped out for real incident data.
"""

from typing import Dict, List, Optional

import numpy as np

from config import RECEPTOR_HEIGHT_M
from models.source import ReceptorPoint, ReleaseSource
from models.units import offset_to_latlon


def get_chemicals() -> Dict[str, dict]:
    """
    Return the chemical catalogue keyed by name.

    Returns:
        Dict of name -> properties with keys 'cas_number',
        'molecular_weight' (g/mol), 'boiling_point' (deg C), 'state'
        and 'hazard_class'.
    """
    return {
        "Chlorine": {
            "cas_number": "7782-50-5",
            "molecular_weight": 70.9,
            "boiling_point": -34.0,
            "state": "gas",
            "hazard_class": "toxic_gas",
        },
        "Ammonia": {
            "cas_number": "7664-41-7",
            "molecular_weight": 17.03,
            "boiling_point": -33.3,
            "state": "gas",
            "hazard_class": "toxic_gas",
        },
        "Sulfur Dioxide": {
            "cas_number": "7446-09-5",
            "molecular_weight": 64.1,
            "boiling_point": -10.0,
            "state": "gas",
            "hazard_class": "toxic_gas",
        },
        "Benzene": {
            "cas_number": "71-43-2",
            "molecular_weight": 78.1,
            "boiling_point": 80.1,
            "state": "liquid",
            "hazard_class": "carcinogen",
        },
        "Hydrogen Sulfide": {
            "cas_number": "7783-06-4",
            "molecular_weight": 34.1,
            "boiling_point": -60.0,
            "state": "gas",
            "hazard_class": "toxic_gas",
        },
    }


def get_sites() -> List[dict]:
    """
    Return release sites.

    Returns:
        List of dicts with keys 'name', 'latitude', 'longitude',
        'terrain_type'.
    """
    return [
        {"name": "Industrial Complex A", "latitude": 29.7604, "longitude": -95.3698,
         "terrain_type": "urban"},
        {"name": "Chemical Plant B", "latitude": 29.7204, "longitude": -95.4098,
         "terrain_type": "industrial"},
        {"name": "Storage Terminal C", "latitude": 29.8004, "longitude": -95.3298,
         "terrain_type": "flat"},
    ]


def _site(name: str) -> dict:
    for site in get_sites():
        if site["name"] == name:
            return site
    raise KeyError(name)


def sample_release(chemical: str = "Chlorine", site: str = "Industrial Complex A",
                   release_rate: float = 500.0, release_duration: Optional[float] = 3600.0,
                   release_height: float = 2.0,
                   release_temperature: Optional[float] = None) -> ReleaseSource:
    """Continuous release of a catalogue chemical at a named site."""
    props = get_chemicals()[chemical]
    loc = _site(site)
    return ReleaseSource(
        latitude=loc["latitude"],
        longitude=loc["longitude"],
        release_rate=release_rate,
        release_duration=release_duration,
        release_height=release_height,
        release_temperature=release_temperature,
        molecular_weight=props["molecular_weight"],
        hazard_class=props["hazard_class"],
        name=f"{chemical} at {site}",
    )


def get_sample_releases() -> List[ReleaseSource]:
    """
    Representative release events.

    Rates are in g/s, durations in seconds.
    """
    return [
        # Minor chlorine leak from a process line
        sample_release("Chlorine", "Industrial Complex A",
                       release_rate=500.0, release_duration=3600.0, release_height=2.0),
        # Ongoing ammonia release from a warm storage tank vent
        sample_release("Ammonia", "Chemical Plant B",
                       release_rate=2000.0, release_duration=None, release_height=15.0,
                       release_temperature=60.0),
        # Benzene vapour during tank loading
        sample_release("Benzene", "Industrial Complex A",
                       release_rate=100.0, release_duration=7200.0, release_height=5.0),
    ]


def receptor_ring(source: ReleaseSource, count: int = 5, start_distance: float = 500.0,
                  spacing: float = 300.0,
                  height: float = RECEPTOR_HEIGHT_M) -> List[ReceptorPoint]:
    """
    Geographic receptors spread evenly in bearing around a source.

    Receptor i sits at bearing ``i * 360 / count`` and distance
    ``start_distance + i * spacing``.
    """
    receptors = []
    for i in range(count):
        bearing = np.radians(i * 360.0 / count)
        distance = start_distance + i * spacing
        lat, lon = offset_to_latlon(
            source.latitude, source.longitude,
            distance * np.sin(bearing), distance * np.cos(bearing),
        )
        receptors.append(ReceptorPoint.at(
            float(lat), float(lon), height=height,
            name=f"Receptor {i + 1} ({distance:.0f} m, {np.degrees(bearing):.0f} deg)",
        ))
    return receptors
