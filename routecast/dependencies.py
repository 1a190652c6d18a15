"""FastAPI dependencies."""

from typing import AsyncGenerator

from fastapi import Depends

from routecast.services.cache_service import WeatherCache
from routecast.services.route_weather_service import RouteWeatherService
from routecast.services.routing_service import RoutingService
from routecast.services.weather_service import WeatherService


def get_weather_service() -> WeatherService:
    """Weather service with a fresh cache; one cache per request."""
    return WeatherService(cache=WeatherCache())


async def get_routing_service() -> AsyncGenerator[RoutingService, None]:
    """Routing service whose Redis connection is closed after the request."""
    service = RoutingService()
    try:
        yield service
    finally:
        await service.close()


def get_route_weather_service(
    weather_service: WeatherService = Depends(get_weather_service),
) -> RouteWeatherService:
    return RouteWeatherService(weather_service=weather_service)
