"""Domain models."""

from routecast.models.geo import Coordinate, Waypoint
from routecast.models.route import Checkpoint, RouteGeometry, RouteResult, RouteWeatherSummary
from routecast.models.weather import (
    IconCategory,
    RiskAssessment,
    RiskReason,
    WeatherDataPoint,
    WeatherReading,
)

__all__ = [
    "Coordinate",
    "Waypoint",
    "RouteGeometry",
    "RouteResult",
    "Checkpoint",
    "RouteWeatherSummary",
    "IconCategory",
    "RiskReason",
    "RiskAssessment",
    "WeatherReading",
    "WeatherDataPoint",
]
