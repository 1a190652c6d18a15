"""Route weather service.

Samples a route geometry into checkpoints and attaches the weather expected
at each one when the traveller arrives.
"""

import asyncio
import logging
import math
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence

from routecast.config import get_settings
from routecast.models.geo import Waypoint
from routecast.models.route import Checkpoint, RouteWeatherSummary
from routecast.services.weather_service import WeatherService
from routecast.utils.geometry import geojson_to_coordinates
from routecast.utils.sampling import plan_checkpoints

logger = logging.getLogger(__name__)


class RouteWeatherService:
    """Builds the weather checkpoint sequence for a route."""

    def __init__(self, weather_service: Optional[WeatherService] = None):
        self.weather_service = weather_service or WeatherService()
        self.settings = get_settings()

    async def sample_route(
        self,
        route_geometry: Any,
        departure_time: datetime,
        total_duration_s: float,
        waypoints: Sequence[Waypoint] = (),
    ) -> List[Checkpoint]:
        """Sample weather along a route.

        Args:
            route_geometry: Coordinates in travel order, a GeoJSON LineString
                dict or a list of ``[lng, lat]`` pairs
            departure_time: Trip start (naive values are UTC)
            total_duration_s: Expected trip duration in seconds
            waypoints: Named stops; first is the origin, last the destination

        Returns:
            Checkpoints in route order; empty for empty or malformed geometry
        """
        try:
            coordinates = geojson_to_coordinates(route_geometry)
        except (ValueError, TypeError) as e:
            logger.warning(f"Invalid route geometry - {str(e)}")
            return []

        if not coordinates:
            logger.warning("Invalid route geometry - no coordinates")
            return []

        if (
            total_duration_s is None
            or not math.isfinite(total_duration_s)
            or total_duration_s < 0
        ):
            logger.warning(f"Invalid trip duration: {total_duration_s}")
            return []

        if departure_time.tzinfo is None:
            departure_time = departure_time.replace(tzinfo=timezone.utc)

        try:
            planned = plan_checkpoints(
                coordinates,
                departure_time,
                total_duration_s,
                waypoints,
                interval_minutes=self.settings.CHECKPOINT_INTERVAL_MINUTES,
                interval_km=self.settings.CHECKPOINT_INTERVAL_KM,
                merge_minutes=self.settings.END_MERGE_MINUTES,
                merge_km=self.settings.END_MERGE_KM,
            )
        except OverflowError:
            logger.warning(f"Trip duration out of range: {total_duration_s}")
            return []

        # Lookups are independent; gather preserves route order
        weather = await asyncio.gather(
            *(
                self.weather_service.get_weather(plan.coordinates, plan.arrival_time)
                for plan in planned
            )
        )

        checkpoints = [
            Checkpoint(
                location=plan.location,
                arrival_time=plan.arrival_time,
                coordinates=plan.coordinates,
                weather=data_point,
            )
            for plan, data_point in zip(planned, weather)
        ]

        risky = sum(1 for cp in checkpoints if cp.weather.is_risky)
        logger.info(f"Sampled {len(checkpoints)} checkpoints ({risky} risky)")
        return checkpoints


def summarize_checkpoints(checkpoints: Sequence[Checkpoint]) -> RouteWeatherSummary:
    """Aggregate risk and temperature range over a checkpoint sequence.

    Args:
        checkpoints: Output of sample_route

    Returns:
        Summary; time and temperature fields are None for an empty sequence
    """
    if not checkpoints:
        return RouteWeatherSummary(
            departure_time=None,
            arrival_time=None,
            checkpoint_count=0,
            risky_count=0,
        )

    reasons: List[str] = []
    for cp in checkpoints:
        reason = cp.weather.risk_reason
        if reason is not None and reason.value not in reasons:
            reasons.append(reason.value)

    temperatures = [cp.weather.temperature for cp in checkpoints]

    return RouteWeatherSummary(
        departure_time=checkpoints[0].arrival_time,
        arrival_time=checkpoints[-1].arrival_time,
        checkpoint_count=len(checkpoints),
        risky_count=sum(1 for cp in checkpoints if cp.weather.is_risky),
        risk_reasons=reasons,
        min_temperature=min(temperatures),
        max_temperature=max(temperatures),
        synthetic_count=sum(1 for cp in checkpoints if cp.weather.is_synthetic),
    )
