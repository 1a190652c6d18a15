"""Point weather API endpoints."""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from routecast.core.rate_limit import limiter, rate_limit_weather_lookup
from routecast.dependencies import get_weather_service
from routecast.models.geo import Coordinate
from routecast.schemas.weather import RiskAssessmentResponse, WeatherDataPointResponse
from routecast.services.weather_service import WeatherService
from routecast.utils.risk import assess_risk

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get(
    "",
    response_model=WeatherDataPointResponse,
    summary="Get weather at a point and time",
    description="""
    Returns the weather expected at a coordinate at a given time, with travel risk.

    Times within two hours of now use current conditions; later times use the
    closest 3-hourly forecast entry. Without a weather API key, or when the
    provider fails, a deterministic synthetic reading is returned instead
    (`source` is `synthetic`).
    """,
)
@limiter.limit(rate_limit_weather_lookup)
async def get_point_weather(
    request: Request,
    lat: float = Query(..., ge=-90, le=90, description="Latitude"),
    lng: float = Query(..., ge=-180, le=180, description="Longitude"),
    time: Optional[datetime] = Query(None, description="ISO timestamp; defaults to now"),
    weather_service: WeatherService = Depends(get_weather_service),
):
    """Weather with risk assessment for one place and time."""
    when = time or datetime.now(timezone.utc)
    data_point = await weather_service.get_weather(Coordinate(lng=lng, lat=lat), when)
    return WeatherDataPointResponse.from_domain(data_point)


@router.get(
    "/risk",
    response_model=RiskAssessmentResponse,
    summary="Assess travel risk for given conditions",
    description="""
    Classifies a weather reading as risky or not. Checks run in order and the
    first match wins: snow, ice (below 0°C), fog (humidity above 90%), high winds
    (above 30 km/h), heavy rain (rain with humidity above 80%), thunderstorm.
    """,
)
async def get_risk(
    temperature: int = Query(..., description="Degrees Celsius"),
    condition: str = Query(..., min_length=1, description="Condition label, e.g. 'Rain'"),
    wind_speed: int = Query(..., ge=0, description="Wind speed in km/h"),
    humidity: int = Query(..., ge=0, le=100, description="Relative humidity in percent"),
):
    """Risk assessment for explicit weather values."""
    return RiskAssessmentResponse.from_domain(
        assess_risk(temperature, condition, wind_speed, humidity)
    )
