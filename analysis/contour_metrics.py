"""
Geometry of iso-concentration contours.

Measures computed on a ContourLevel's (lat, lon) ring: area, bounding
box, centroid, extents relative to the source and the wind, point
containment, and a GeoJSON export for map clients.

Areas and extents are computed on local tangent-plane coordinates
(metres east/north of a reference point), the same approximation the
contour generator uses to place the vertices.
"""

from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from models.gaussian_plume import geographic_to_plume
from models.results import ContourLevel
from models.units import haversine_m, latlon_to_offset, offset_to_latlon

Ring = Sequence[Tuple[float, float]]


def _ring(contour: Union[ContourLevel, Ring]) -> List[Tuple[float, float]]:
    """Open ring of (lat, lon) vertices (closing vertex dropped)."""
    polygon = contour.polygon if isinstance(contour, ContourLevel) else contour
    ring = [(float(lat), float(lon)) for lat, lon in polygon]
    if len(ring) > 1 and ring[0] == ring[-1]:
        ring = ring[:-1]
    return ring


def _local_xy(ring, origin_lat: float, origin_lon: float):
    lats = np.array([p[0] for p in ring])
    lons = np.array([p[1] for p in ring])
    return latlon_to_offset(origin_lat, origin_lon, lats, lons)


def _signed_area(x: np.ndarray, y: np.ndarray) -> float:
    # Shoelace formula
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))


def polygon_area_m2(contour: Union[ContourLevel, Ring]) -> float:
    """Enclosed area in square metres."""
    ring = _ring(contour)
    if len(ring) < 3:
        return 0.0
    x, y = _local_xy(ring, *ring[0])
    return abs(_signed_area(x, y))


def contour_bounds(contour: Union[ContourLevel, Ring]) -> Optional[Dict[str, float]]:
    """Bounding box as ``{"min_lat", "max_lat", "min_lon", "max_lon"}``."""
    ring = _ring(contour)
    if not ring:
        return None
    lats = [p[0] for p in ring]
    lons = [p[1] for p in ring]
    return {
        "min_lat": min(lats),
        "max_lat": max(lats),
        "min_lon": min(lons),
        "max_lon": max(lons),
    }


def contour_centroid(contour: Union[ContourLevel, Ring]) -> Optional[Tuple[float, float]]:
    """
    Area-weighted centroid (lat, lon).

    Degenerate rings (zero area) fall back to the vertex mean.
    """
    ring = _ring(contour)
    if not ring:
        return None
    origin_lat, origin_lon = ring[0]
    x, y = _local_xy(ring, origin_lat, origin_lon)
    area = _signed_area(x, y) if len(ring) >= 3 else 0.0

    if abs(area) < 1e-9:
        lats = [p[0] for p in ring]
        lons = [p[1] for p in ring]
        return float(np.mean(lats)), float(np.mean(lons))

    x1, y1 = np.roll(x, -1), np.roll(y, -1)
    cross = x * y1 - x1 * y
    cx = float(np.sum((x + x1) * cross) / (6.0 * area))
    cy = float(np.sum((y + y1) * cross) / (6.0 * area))

    lat, lon = offset_to_latlon(origin_lat, origin_lon, cx, cy)
    return float(lat), float(lon)


def max_distance_from_source(
    contour: Union[ContourLevel, Ring],
    source_lat: float,
    source_lon: float,
) -> float:
    """Largest great-circle distance (m) from the source to a vertex."""
    ring = _ring(contour)
    if not ring:
        return 0.0
    return max(haversine_m(source_lat, source_lon, lat, lon) for lat, lon in ring)


def _plume_extent(contour, source_lat, source_lon, wind_direction):
    ring = _ring(contour)
    lats = np.array([p[0] for p in ring])
    lons = np.array([p[1] for p in ring])
    return geographic_to_plume(source_lat, source_lon, lats, lons, wind_direction)


def downwind_extent(
    contour: Union[ContourLevel, Ring],
    source_lat: float,
    source_lon: float,
    wind_direction: float,
) -> float:
    """Furthest downwind reach of the contour (m)."""
    if not _ring(contour):
        return 0.0
    x, _ = _plume_extent(contour, source_lat, source_lon, wind_direction)
    return max(float(np.max(x)), 0.0)


def crosswind_extent(
    contour: Union[ContourLevel, Ring],
    source_lat: float,
    source_lon: float,
    wind_direction: float,
) -> float:
    """Total crosswind width of the contour (m)."""
    if not _ring(contour):
        return 0.0
    _, y = _plume_extent(contour, source_lat, source_lon, wind_direction)
    return float(np.max(y) - np.min(y))


def contains_point(contour: Union[ContourLevel, Ring], lat: float, lon: float) -> bool:
    """Ray-casting point-in-polygon test."""
    ring = _ring(contour)
    if len(ring) < 3:
        return False

    inside = False
    j = len(ring) - 1
    for i in range(len(ring)):
        lat_i, lon_i = ring[i]
        lat_j, lon_j = ring[j]
        if (lat_i > lat) != (lat_j > lat):
            lon_cross = lon_i + (lat - lat_i) * (lon_j - lon_i) / (lat_j - lat_i)
            if lon < lon_cross:
                inside = not inside
        j = i
    return inside


def to_geojson(contour: ContourLevel, properties: Optional[dict] = None) -> dict:
    """GeoJSON Feature for a contour; coordinates are [lon, lat]."""
    ring = _ring(contour)
    coordinates = [[lon, lat] for lat, lon in ring]
    if coordinates:
        coordinates.append(coordinates[0])

    props = {
        "level": contour.level,
        "units": "mg/m3",
        "truncated": contour.truncated,
        "area_m2": polygon_area_m2(contour),
    }
    if properties:
        props.update(properties)

    return {
        "type": "Feature",
        "geometry": {"type": "Polygon", "coordinates": [coordinates]},
        "properties": props,
    }
