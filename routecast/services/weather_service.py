"""Weather source adapter.

Resolves weather for a (coordinates, time) pair. Lookups go through the
session cache first, then the live provider when a key is configured, and
finally the synthetic generator. ``get_weather`` never raises: falling back to
synthetic data is the expected degradation, and it is logged rather than
reported to the caller.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from routecast.core.exceptions import WeatherProviderError
from routecast.models.geo import Coordinate
from routecast.models.weather import WeatherDataPoint, WeatherReading
from routecast.services.cache_service import WeatherCache, make_weather_key
from routecast.services.openweather_client import OpenWeatherClient
from routecast.services.synthetic_weather import generate_synthetic_weather
from routecast.utils.risk import assess_risk

logger = logging.getLogger(__name__)


class WeatherService:
    """Weather lookups for one planning session."""

    def __init__(
        self,
        client: Optional[OpenWeatherClient] = None,
        cache: Optional[WeatherCache] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.client = client or OpenWeatherClient()
        self.cache = cache if cache is not None else WeatherCache()
        self._now = now or (lambda: datetime.now(timezone.utc))
        self.fallback_count = 0

    @property
    def live_provider_enabled(self) -> bool:
        return self.client.is_configured

    async def get_weather(self, coordinates: Coordinate, time: datetime) -> WeatherDataPoint:
        """Get weather with risk assessment for a place and time.

        Args:
            coordinates: Location of the lookup
            time: When the traveller will be there (naive values are UTC)

        Returns:
            WeatherDataPoint; synthetic when the provider is unavailable
        """
        if time.tzinfo is None:
            time = time.replace(tzinfo=timezone.utc)

        cache_key = make_weather_key(coordinates, time)
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        reading = await self._fetch_reading(coordinates, time)

        data_point = WeatherDataPoint(
            reading=reading,
            risk=assess_risk(
                reading.temperature,
                reading.condition,
                reading.wind_speed,
                reading.humidity,
            ),
        )
        self.cache.set(cache_key, data_point)
        return data_point

    async def _fetch_reading(self, coordinates: Coordinate, time: datetime) -> WeatherReading:
        if not self.live_provider_enabled:
            logger.debug(f"No weather key configured, using synthetic weather at {coordinates}")
            return generate_synthetic_weather(coordinates, time)

        try:
            return await self.client.fetch_reading(coordinates, time, now=self._now())
        except WeatherProviderError as e:
            reason = e.message
        except Exception as e:
            # Anything unexpected from the provider path still degrades
            logger.error(f"Unexpected weather provider error: {str(e)}", exc_info=True)
            reason = str(e)

        self.fallback_count += 1
        logger.warning(
            "Falling back to synthetic weather",
            extra={
                "extra_fields": {
                    "lat": coordinates.lat,
                    "lng": coordinates.lng,
                    "time": time.isoformat(),
                    "reason": reason,
                }
            },
        )
        return generate_synthetic_weather(coordinates, time)
