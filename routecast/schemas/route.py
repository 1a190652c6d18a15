"""Route request/response schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from routecast.models.geo import Coordinate as CoordinateModel
from routecast.models.geo import Waypoint as WaypointModel
from routecast.models.route import Checkpoint, RouteResult, RouteWeatherSummary
from routecast.schemas.weather import WeatherDataPointResponse

# One week; longer trips are not planned as a single drive
MAX_TRIP_DURATION_S = 7 * 24 * 3600


class Coordinate(BaseModel):
    """Geographic coordinate."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class WaypointIn(Coordinate):
    """Named stop with known coordinates."""

    name: str = Field(..., min_length=1)

    def to_domain(self) -> WaypointModel:
        return WaypointModel(
            name=self.name, coordinates=CoordinateModel(lng=self.lng, lat=self.lat)
        )


class RouteWeatherRequest(BaseModel):
    """Request for a route with weather along it."""

    start: str = Field(..., min_length=1, description="Origin place name")
    end: str = Field(..., min_length=1, description="Destination place name")
    waypoints: List[str] = Field(default_factory=list, description="Intermediate place names")
    departure_time: Optional[datetime] = Field(
        None, description="Departure time (ISO format). Defaults to now."
    )


class CheckpointSamplingRequest(BaseModel):
    """Request to sample weather along an already computed route geometry."""

    geometry: Dict[str, Any] = Field(..., description="GeoJSON LineString, [lng, lat] order")
    departure_time: Optional[datetime] = Field(
        None, description="Departure time (ISO format). Defaults to now."
    )
    duration_s: float = Field(
        ...,
        ge=0,
        le=MAX_TRIP_DURATION_S,
        allow_inf_nan=False,
        description="Total trip duration in seconds",
    )
    waypoints: List[WaypointIn] = Field(default_factory=list)


class CheckpointResponse(BaseModel):
    """Weather checkpoint along a route."""

    location: str
    arrival_time: datetime
    coordinates: Coordinate
    weather: WeatherDataPointResponse

    @classmethod
    def from_domain(cls, checkpoint: Checkpoint) -> "CheckpointResponse":
        return cls(
            location=checkpoint.location,
            arrival_time=checkpoint.arrival_time,
            coordinates=Coordinate(lat=checkpoint.coordinates.lat, lng=checkpoint.coordinates.lng),
            weather=WeatherDataPointResponse.from_domain(checkpoint.weather),
        )


class RouteWeatherSummaryResponse(BaseModel):
    """Route weather statistics."""

    departure_time: Optional[datetime] = None
    arrival_time: Optional[datetime] = None
    checkpoint_count: int = 0
    risky_count: int = 0
    risk_reasons: List[str] = []
    min_temperature: Optional[int] = None
    max_temperature: Optional[int] = None
    synthetic_count: int = 0

    @classmethod
    def from_domain(cls, summary: RouteWeatherSummary) -> "RouteWeatherSummaryResponse":
        return cls(
            departure_time=summary.departure_time,
            arrival_time=summary.arrival_time,
            checkpoint_count=summary.checkpoint_count,
            risky_count=summary.risky_count,
            risk_reasons=list(summary.risk_reasons),
            min_temperature=summary.min_temperature,
            max_temperature=summary.max_temperature,
            synthetic_count=summary.synthetic_count,
        )


class RouteInfo(BaseModel):
    """Route returned by the directions provider."""

    distance_m: int
    duration_s: int
    geometry: Dict
    waypoints: List[WaypointIn] = []

    @classmethod
    def from_domain(cls, route: RouteResult, geometry: Dict) -> "RouteInfo":
        return cls(
            distance_m=int(round(route.distance_m)),
            duration_s=int(round(route.duration_s)),
            geometry=geometry,
            waypoints=[
                WaypointIn(name=wp.name, lat=wp.coordinates.lat, lng=wp.coordinates.lng)
                for wp in route.waypoints
            ],
        )


class CheckpointSamplingResponse(BaseModel):
    """Checkpoints for a caller-supplied geometry."""

    checkpoints: List[CheckpointResponse]
    summary: RouteWeatherSummaryResponse
    meta: Dict[str, Any]


class RouteWeatherResponse(CheckpointSamplingResponse):
    """Route plus the weather along it."""

    route: RouteInfo
