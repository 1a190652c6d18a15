"""Pytest configuration and fixtures."""

import os
from datetime import datetime, timezone
from typing import Generator, List

import pytest
from fastapi.testclient import TestClient

# Set test environment before anything reads settings
os.environ["APP_ENV"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["OPENWEATHER_API_KEY"] = ""
os.environ["MAPBOX_ACCESS_TOKEN"] = ""
os.environ["REDIS_URL"] = "redis://localhost:6399/15"
os.environ["RATE_LIMIT_ENABLED"] = "false"  # Disable rate limiting in tests

from routecast.main import app
from routecast.models.geo import Coordinate, Waypoint
from routecast.models.weather import (
    SOURCE_FORECAST,
    IconCategory,
    RiskAssessment,
    WeatherDataPoint,
    WeatherReading,
)


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Test client; dependency overrides are cleared afterwards."""
    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def departure() -> datetime:
    return datetime(2025, 1, 15, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def london() -> Coordinate:
    return Coordinate(lng=-0.1276, lat=51.5072)


@pytest.fixture
def straight_route() -> List[Coordinate]:
    """Due-east line along the equator, one point every ~1.11 km for ~55 km."""
    return [Coordinate(lng=i * 0.01, lat=0.0) for i in range(51)]


@pytest.fixture
def route_waypoints() -> List[Waypoint]:
    return [
        Waypoint(name="Westville", coordinates=Coordinate(lng=0.0, lat=0.0)),
        Waypoint(name="Midtown", coordinates=Coordinate(lng=0.25, lat=0.0)),
        Waypoint(name="Eastport", coordinates=Coordinate(lng=0.5, lat=0.0)),
    ]


def make_data_point(
    coordinates: Coordinate,
    time: datetime,
    temperature: int = 10,
    condition: str = "Clear",
    humidity: int = 50,
    wind_speed: int = 10,
    risk: RiskAssessment = RiskAssessment(is_risky=False),
    source: str = SOURCE_FORECAST,
) -> WeatherDataPoint:
    """Build a data point with explicit values for tests."""
    return WeatherDataPoint(
        reading=WeatherReading(
            coordinates=coordinates,
            time=time,
            temperature=temperature,
            condition=condition,
            icon=IconCategory.SUN,
            humidity=humidity,
            wind_speed=wind_speed,
            source=source,
        ),
        risk=risk,
    )


@pytest.fixture
def data_point_factory():
    return make_data_point


@pytest.fixture
def openweather_current_payload() -> dict:
    """OpenWeather /weather response (metric units)."""
    return {
        "coord": {"lon": -0.1276, "lat": 51.5072},
        "weather": [
            {"id": 502, "main": "Rain", "description": "heavy intensity rain", "icon": "10d"}
        ],
        "main": {"temp": 6.6, "feels_like": 3.1, "humidity": 87, "pressure": 1004},
        "wind": {"speed": 9.5, "deg": 230},
        "dt": 1736928000,
        "name": "London",
    }


@pytest.fixture
def openweather_forecast_payload() -> dict:
    """OpenWeather /forecast response with three 3-hourly entries."""
    return {
        "cod": "200",
        "cnt": 3,
        "list": [
            {
                "dt": 1736935200,  # 2025-01-15 10:00 UTC
                "main": {"temp": 1.2, "humidity": 70},
                "weather": [
                    {"id": 800, "main": "Clear", "description": "clear sky", "icon": "01d"}
                ],
                "wind": {"speed": 2.0},
            },
            {
                "dt": 1736946000,  # 2025-01-15 13:00 UTC
                "main": {"temp": -1.6, "humidity": 90},
                "weather": [
                    {"id": 600, "main": "Snow", "description": "light snow", "icon": "13d"}
                ],
                "wind": {"speed": 4.0},
            },
            {
                "dt": 1736956800,  # 2025-01-15 16:00 UTC
                "main": {"temp": -3.0, "humidity": 85},
                "weather": [{"id": 804, "main": "Clouds", "description": "overcast clouds"}],
                "wind": {"speed": 5.5},
            },
        ],
    }


@pytest.fixture
def mapbox_geocode_payloads() -> dict:
    """Geocoding responses keyed by place name."""
    return {
        "London": {"features": [{"place_name": "London, UK", "center": [-0.1276, 51.5072]}]},
        "Oxford": {"features": [{"place_name": "Oxford, UK", "center": [-1.2577, 51.752]}]},
        "Reading": {"features": [{"place_name": "Reading, UK", "center": [-0.9781, 51.4543]}]},
        "Nowhere": {"features": []},
    }


@pytest.fixture
def mapbox_directions_payload() -> dict:
    """Mapbox directions response for London to Oxford."""
    return {
        "code": "Ok",
        "routes": [
            {
                "distance": 94000.0,
                "duration": 5400.0,
                "geometry": {
                    "type": "LineString",
                    "coordinates": [
                        [-0.1276, 51.5072],
                        [-0.3000, 51.5300],
                        [-0.5000, 51.5600],
                        [-0.7000, 51.6000],
                        [-0.9000, 51.6500],
                        [-1.1000, 51.7100],
                        [-1.2577, 51.7520],
                    ],
                },
            }
        ],
    }
