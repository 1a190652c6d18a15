"""Route and checkpoint models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from routecast.models.geo import Coordinate, Waypoint
from routecast.models.weather import WeatherDataPoint

RouteGeometry = Tuple[Coordinate, ...]


@dataclass(frozen=True)
class RouteResult:
    """A route as returned by the directions provider."""

    geometry: RouteGeometry
    distance_m: float
    duration_s: float
    waypoints: Tuple[Waypoint, ...] = ()

    def to_geojson(self) -> dict:
        return {"type": "LineString", "coordinates": [c.as_list() for c in self.geometry]}


@dataclass(frozen=True)
class Checkpoint:
    """A labelled weather sample at a point along the route."""

    location: str
    arrival_time: datetime
    coordinates: Coordinate
    weather: WeatherDataPoint


@dataclass(frozen=True)
class RouteWeatherSummary:
    """Aggregate view over a checkpoint sequence."""

    departure_time: Optional[datetime]
    arrival_time: Optional[datetime]
    checkpoint_count: int
    risky_count: int
    risk_reasons: List[str] = field(default_factory=list)
    min_temperature: Optional[int] = None
    max_temperature: Optional[int] = None
    synthetic_count: int = 0
