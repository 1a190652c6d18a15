"""RouteCast Geometry Utilities.

Distance helpers and GeoJSON conversion for route geometries. Spacing
decisions along a route use the haversine great-circle distance; labelling a
sample with its nearest waypoint uses plain planar distance in coordinate
space, which is good enough for picking a name.
"""

import logging
import math
from typing import Any, Optional, Sequence, Tuple

from shapely.geometry import LineString, Point

from routecast.models.geo import Coordinate, Waypoint

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates.

    Args:
        a: First coordinate
        b: Second coordinate

    Returns:
        Distance in kilometres
    """
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = lat2 - lat1
    dlng = math.radians(b.lng - a.lng)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    # Clamp guards against rounding pushing h marginally above 1
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, h)))


def planar_distance(a: Coordinate, b: Coordinate) -> float:
    """Euclidean distance in raw degrees."""
    return Point(a.lng, a.lat).distance(Point(b.lng, b.lat))


def nearest_waypoint(coord: Coordinate, waypoints: Sequence[Waypoint]) -> Optional[Waypoint]:
    """Find the waypoint closest to a coordinate by planar distance.

    Args:
        coord: Sampled point on the route
        waypoints: Named stops supplied by the caller

    Returns:
        Nearest waypoint, or None when there are no waypoints
    """
    if not waypoints:
        return None
    return min(waypoints, key=lambda wp: planar_distance(coord, wp.coordinates))


def route_length_km(coordinates: Sequence[Coordinate]) -> float:
    """Sum of consecutive segment lengths along a polyline."""
    return sum(haversine_km(a, b) for a, b in zip(coordinates, coordinates[1:]))


def geojson_to_coordinates(geojson_geom: Any) -> Tuple[Coordinate, ...]:
    """Convert a GeoJSON LineString (or bare list of pairs) to coordinates.

    Args:
        geojson_geom: GeoJSON geometry dict (type: LineString) or a list of
            ``[lng, lat]`` pairs

    Returns:
        Tuple of Coordinate in route order

    Raises:
        ValueError: If the geometry is not a LineString or a pair is invalid
    """
    if isinstance(geojson_geom, dict):
        if geojson_geom.get("type") != "LineString":
            raise ValueError(f"Expected LineString, got {geojson_geom.get('type')}")
        pairs = geojson_geom.get("coordinates") or []
    elif isinstance(geojson_geom, (list, tuple)):
        pairs = geojson_geom
    else:
        raise ValueError(f"Unsupported geometry type: {type(geojson_geom).__name__}")

    coordinates = []
    for pair in pairs:
        if isinstance(pair, Coordinate):
            coordinates.append(pair)
            continue
        if not isinstance(pair, (list, tuple)) or len(pair) < 2:
            raise ValueError(f"Invalid coordinate pair: {pair!r}")
        coordinates.append(Coordinate.from_pair(pair))
    return tuple(coordinates)


def coordinates_to_geojson(coordinates: Sequence[Coordinate]) -> dict:
    return {"type": "LineString", "coordinates": [c.as_list() for c in coordinates]}


def simplify_geometry(
    coordinates: Sequence[Coordinate], max_points: int = 100
) -> Tuple[Coordinate, ...]:
    """Simplify a polyline to have at most max_points.

    Args:
        coordinates: Route coordinates
        max_points: Maximum number of points

    Returns:
        Simplified coordinates (endpoints preserved)
    """
    if len(coordinates) <= max_points or len(coordinates) < 3:
        return tuple(coordinates)

    line = LineString([(c.lng, c.lat) for c in coordinates])
    if line.length == 0:
        return (coordinates[0], coordinates[-1])

    # Douglas-Peucker; widen tolerance until we fit
    tolerance = line.length / (max_points * 10)
    simplified = line.simplify(tolerance, preserve_topology=False)
    while len(simplified.coords) > max_points:
        tolerance *= 1.5
        simplified = line.simplify(tolerance, preserve_topology=False)

    return tuple(Coordinate(lng=x, lat=y) for x, y in simplified.coords)
