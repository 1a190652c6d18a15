"""Route weather API endpoints."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, status

from routecast.core.exceptions import RouteCastException
from routecast.core.rate_limit import limiter, rate_limit_route_weather
from routecast.dependencies import get_route_weather_service, get_routing_service
from routecast.schemas.route import (
    CheckpointResponse,
    CheckpointSamplingRequest,
    CheckpointSamplingResponse,
    RouteInfo,
    RouteWeatherRequest,
    RouteWeatherResponse,
    RouteWeatherSummaryResponse,
)
from routecast.services.route_weather_service import RouteWeatherService, summarize_checkpoints
from routecast.services.routing_service import RoutingService
from routecast.utils.geometry import (
    coordinates_to_geojson,
    geojson_to_coordinates,
    simplify_geometry,
)

logger = logging.getLogger(__name__)
router = APIRouter()

# Response geometry only; sampling always uses the full polyline
RESPONSE_GEOMETRY_MAX_POINTS = 500


def _departure_or_now(departure_time):
    if departure_time is None:
        return datetime.now(timezone.utc)
    if departure_time.tzinfo is None:
        return departure_time.replace(tzinfo=timezone.utc)
    return departure_time


def _meta(service: RouteWeatherService) -> dict:
    weather_service = service.weather_service
    return {
        "weather_provider": "openweather" if weather_service.live_provider_enabled else "synthetic",
        "fallback_count": weather_service.fallback_count,
        "cache": {"hits": weather_service.cache.hits, "misses": weather_service.cache.misses},
    }


@router.post(
    "/weather",
    response_model=RouteWeatherResponse,
    summary="Plan a route and sample weather along it",
    description="""
    Geocodes the start, end and intermediate places, fetches a driving route
    from Mapbox and samples it into weather checkpoints.

    A checkpoint is placed every 15 minutes or 10 km of travel, whichever comes
    first, plus one at the start and one at the end. Each checkpoint carries the
    weather forecast for the time the traveller is expected to arrive there and a
    travel risk flag (snow, ice, fog, high winds, heavy rain or thunderstorm).

    Intermediate places that cannot be geocoded are skipped. When the weather
    provider is not configured or fails, synthetic weather is used instead.
    """,
    responses={
        404: {
            "description": "Start or end could not be geocoded, or no route exists",
            "content": {"application/json": {"example": {"detail": "No route found"}}},
        },
        503: {"description": "Directions provider not configured or unavailable"},
    },
)
@limiter.limit(rate_limit_route_weather)
async def get_route_weather(
    request: Request,
    body: RouteWeatherRequest,
    routing_service: RoutingService = Depends(get_routing_service),
    route_weather_service: RouteWeatherService = Depends(get_route_weather_service),
):
    """Plan a route between two named places with weather checkpoints."""
    try:
        route = await routing_service.calculate_route(body.start, body.end, body.waypoints)
    except RouteCastException as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    if route is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No route found")

    departure_time = _departure_or_now(body.departure_time)
    checkpoints = await route_weather_service.sample_route(
        route.to_geojson(),
        departure_time,
        route.duration_s,
        route.waypoints,
    )

    return RouteWeatherResponse(
        route=RouteInfo.from_domain(
            route,
            coordinates_to_geojson(
                simplify_geometry(route.geometry, max_points=RESPONSE_GEOMETRY_MAX_POINTS)
            ),
        ),
        checkpoints=[CheckpointResponse.from_domain(cp) for cp in checkpoints],
        summary=RouteWeatherSummaryResponse.from_domain(summarize_checkpoints(checkpoints)),
        meta=_meta(route_weather_service),
    )


@router.post(
    "/checkpoints",
    response_model=CheckpointSamplingResponse,
    summary="Sample weather along a route geometry",
    description="""
    Samples weather checkpoints along a caller-supplied GeoJSON LineString.

    Use this when the route has already been computed elsewhere. Named waypoints
    are used to label checkpoints by their nearest stop.
    """,
    responses={
        422: {"description": "Geometry is not a LineString or list of [lng, lat] pairs"},
    },
)
@limiter.limit(rate_limit_route_weather)
async def sample_checkpoints(
    request: Request,
    body: CheckpointSamplingRequest,
    route_weather_service: RouteWeatherService = Depends(get_route_weather_service),
):
    """Sample weather checkpoints for an existing route geometry."""
    try:
        coordinates = geojson_to_coordinates(body.geometry)
    except (ValueError, TypeError) as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    if not coordinates:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Route geometry has no coordinates",
        )

    checkpoints = await route_weather_service.sample_route(
        coordinates_to_geojson(coordinates),
        _departure_or_now(body.departure_time),
        body.duration_s,
        [wp.to_domain() for wp in body.waypoints],
    )

    return CheckpointSamplingResponse(
        checkpoints=[CheckpointResponse.from_domain(cp) for cp in checkpoints],
        summary=RouteWeatherSummaryResponse.from_domain(summarize_checkpoints(checkpoints)),
        meta=_meta(route_weather_service),
    )
