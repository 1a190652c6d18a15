"""OpenWeather API client.

Two endpoints are used:
- ``/weather`` for current conditions, when the requested time is close to now
- ``/forecast`` (5 day / 3 hour series) for anything further out, picking
  the entry closest to the requested time

Responses are parsed into ``CurrentConditions`` or ``ForecastSeries`` and
normalized into a ``WeatherReading``. Every failure is raised as
``WeatherProviderError``; callers decide how to degrade.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Union

import httpx

from routecast.config import get_settings
from routecast.core.exceptions import WeatherProviderError
from routecast.models.geo import Coordinate
from routecast.models.weather import SOURCE_CURRENT, SOURCE_FORECAST, WeatherReading
from routecast.utils.icons import icon_for_code, icon_for_condition_id

logger = logging.getLogger(__name__)

MS_TO_KMH = 3.6
RETRY_STATUS_CODES = (429, 500, 502, 503, 504)


@dataclass(frozen=True)
class Observation:
    """One set of values from either endpoint, in provider units."""

    timestamp: datetime
    temperature_c: float
    condition: str
    icon_code: Optional[str]
    condition_id: Optional[int]
    humidity: float
    wind_speed_ms: float


@dataclass(frozen=True)
class CurrentConditions:
    observation: Observation


@dataclass(frozen=True)
class ForecastSeries:
    entries: List[Observation]

    def closest_to(self, time: datetime) -> Observation:
        """Entry whose timestamp is nearest to the requested time."""
        if not self.entries:
            raise WeatherProviderError("Forecast series is empty")
        return min(self.entries, key=lambda entry: abs(entry.timestamp - time))


ProviderPayload = Union[CurrentConditions, ForecastSeries]


class OpenWeatherClient:
    """Client for the OpenWeather 2.5 API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
    ):
        settings = get_settings()
        self.api_key = settings.OPENWEATHER_API_KEY if api_key is None else api_key
        self.base_url = (base_url or settings.OPENWEATHER_API_URL).rstrip("/")
        self.timeout = timeout or settings.HTTP_TIMEOUT_S
        self.max_retries = max(1, max_retries or settings.HTTP_MAX_RETRIES)
        self.current_window = timedelta(hours=settings.CURRENT_WEATHER_WINDOW_HOURS)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    async def fetch_reading(
        self,
        coordinates: Coordinate,
        time: datetime,
        now: Optional[datetime] = None,
    ) -> WeatherReading:
        """Fetch weather for a place and time.

        Args:
            coordinates: Location to look up
            time: Time the traveller will be there (aware datetime)
            now: Reference "now" (defaults to the current UTC time)

        Returns:
            Normalized WeatherReading

        Raises:
            WeatherProviderError: Request failed or payload unusable
        """
        now = now or datetime.now(timezone.utc)

        if abs(time - now) <= self.current_window:
            payload: ProviderPayload = await self.get_current(coordinates)
        else:
            payload = await self.get_forecast(coordinates)

        if isinstance(payload, CurrentConditions):
            return self.to_reading(payload.observation, coordinates, time, SOURCE_CURRENT)
        return self.to_reading(payload.closest_to(time), coordinates, time, SOURCE_FORECAST)

    async def get_current(self, coordinates: Coordinate) -> CurrentConditions:
        data = await self._get("weather", coordinates)
        try:
            return CurrentConditions(observation=self._parse_observation(data))
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Malformed current weather payload: {str(e)}")
            raise WeatherProviderError(f"Malformed current weather payload: {str(e)}")

    async def get_forecast(self, coordinates: Coordinate) -> ForecastSeries:
        data = await self._get("forecast", coordinates)
        try:
            entries = [self._parse_observation(item) for item in data["list"]]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Malformed forecast payload: {str(e)}")
            raise WeatherProviderError(f"Malformed forecast payload: {str(e)}")

        if not entries:
            raise WeatherProviderError("Forecast series is empty")
        return ForecastSeries(entries=entries)

    async def _get(self, endpoint: str, coordinates: Coordinate) -> Dict[str, Any]:
        """GET an endpoint with retries on rate limits, 5xx and timeouts."""
        if not self.is_configured:
            raise WeatherProviderError("OpenWeather API key not configured")

        url = f"{self.base_url}/{endpoint}"
        params = {
            "lat": coordinates.lat,
            "lon": coordinates.lng,
            "appid": self.api_key,
            "units": "metric",
        }

        for attempt in range(self.max_retries):
            last_attempt = attempt == self.max_retries - 1
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, params=params)

                if response.status_code == 200:
                    data = response.json()
                    if not isinstance(data, dict):
                        raise WeatherProviderError("Unexpected OpenWeather response body")
                    return data

                if response.status_code in RETRY_STATUS_CODES and not last_attempt:
                    logger.warning(
                        f"OpenWeather {endpoint} returned {response.status_code} "
                        f"(attempt {attempt + 1}/{self.max_retries})"
                    )
                    await asyncio.sleep(2**attempt)
                    continue

                logger.error(f"OpenWeather error {response.status_code}: {response.text}")
                raise WeatherProviderError(f"OpenWeather returned HTTP {response.status_code}")

            except httpx.TimeoutException:
                logger.error(f"OpenWeather timeout (attempt {attempt + 1})")
                if not last_attempt:
                    await asyncio.sleep(2**attempt)
                    continue
                raise WeatherProviderError("OpenWeather timeout")

            except httpx.HTTPError as e:
                logger.error(f"Error contacting OpenWeather: {str(e)}")
                raise WeatherProviderError(f"OpenWeather request failed: {str(e)}")

            except ValueError as e:
                logger.error(f"OpenWeather returned invalid JSON: {str(e)}")
                raise WeatherProviderError("OpenWeather returned invalid JSON")

        raise WeatherProviderError("Failed to fetch weather after retries")

    def _parse_observation(self, item: Dict[str, Any]) -> Observation:
        main = item["main"]
        weather = (item.get("weather") or [{}])[0]
        wind = item.get("wind") or {}

        description = weather.get("description") or weather.get("main") or "Unknown"
        condition_id = weather.get("id")

        return Observation(
            timestamp=datetime.fromtimestamp(int(item["dt"]), tz=timezone.utc),
            temperature_c=float(main["temp"]),
            condition=description[:1].upper() + description[1:],
            icon_code=weather.get("icon"),
            condition_id=int(condition_id) if condition_id is not None else None,
            humidity=float(main.get("humidity", 0)),
            wind_speed_ms=float(wind.get("speed", 0)),
        )

    def to_reading(
        self,
        observation: Observation,
        coordinates: Coordinate,
        time: datetime,
        source: str,
    ) -> WeatherReading:
        """Convert provider units to a WeatherReading."""
        if observation.icon_code:
            icon = icon_for_code(observation.icon_code)
        else:
            icon = icon_for_condition_id(observation.condition_id)

        return WeatherReading(
            coordinates=coordinates,
            time=time,
            temperature=int(round(observation.temperature_c)),
            condition=observation.condition,
            icon=icon,
            humidity=int(min(100, max(0, round(observation.humidity)))),
            wind_speed=int(max(0, round(observation.wind_speed_ms * MS_TO_KMH))),
            source=source,
        )
