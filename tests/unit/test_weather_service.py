"""Unit tests for the weather service (cache, provider, synthetic fallback)."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from routecast.core.exceptions import WeatherProviderError
from routecast.models.geo import Coordinate
from routecast.models.weather import (
    SOURCE_FORECAST,
    SOURCE_SYNTHETIC,
    IconCategory,
    RiskReason,
    WeatherReading,
)
from routecast.services.cache_service import WeatherCache
from routecast.services.openweather_client import OpenWeatherClient
from routecast.services.synthetic_weather import generate_synthetic_weather
from routecast.services.weather_service import WeatherService


def configured_client(reading=None, error=None) -> OpenWeatherClient:
    client = OpenWeatherClient(api_key="test-key")
    client.fetch_reading = AsyncMock(return_value=reading, side_effect=error)
    return client


def snowy_reading(coordinates: Coordinate, time: datetime) -> WeatherReading:
    return WeatherReading(
        coordinates=coordinates,
        time=time,
        temperature=-3,
        condition="Light snow",
        icon=IconCategory.CLOUD_SNOW,
        humidity=88,
        wind_speed=12,
        source=SOURCE_FORECAST,
    )


@pytest.mark.asyncio
async def test_no_key_uses_synthetic(london, departure):
    service = WeatherService(client=OpenWeatherClient(api_key=""))

    data_point = await service.get_weather(london, departure)

    assert data_point.is_synthetic
    assert data_point.reading == generate_synthetic_weather(london, departure)
    assert service.fallback_count == 0


@pytest.mark.asyncio
async def test_provider_reading_gets_risk_assessment(london, departure):
    client = configured_client(reading=snowy_reading(london, departure))
    service = WeatherService(client=client, now=lambda: departure)

    data_point = await service.get_weather(london, departure)

    assert data_point.reading.source == SOURCE_FORECAST
    assert data_point.is_risky
    assert data_point.risk_reason == RiskReason.SNOW
    client.fetch_reading.assert_awaited_once_with(london, departure, now=departure)


@pytest.mark.asyncio
async def test_provider_failure_falls_back_to_synthetic(london, departure):
    client = configured_client(error=WeatherProviderError("OpenWeather returned HTTP 500"))
    service = WeatherService(client=client)

    data_point = await service.get_weather(london, departure)

    assert data_point.reading.source == SOURCE_SYNTHETIC
    assert service.fallback_count == 1


@pytest.mark.asyncio
async def test_unexpected_error_falls_back_to_synthetic(london, departure):
    client = configured_client(error=RuntimeError("boom"))
    service = WeatherService(client=client)

    data_point = await service.get_weather(london, departure)

    assert data_point.is_synthetic
    assert service.fallback_count == 1


@pytest.mark.asyncio
async def test_cache_hit_returns_same_object(london, departure):
    client = configured_client(reading=snowy_reading(london, departure))
    cache = WeatherCache()
    service = WeatherService(client=client, cache=cache)

    first = await service.get_weather(london, departure)
    # Same ~1 km cell, same hour
    nearby = Coordinate(lng=london.lng + 0.001, lat=london.lat)
    second = await service.get_weather(nearby, departure + timedelta(minutes=10))

    assert second is first
    assert client.fetch_reading.await_count == 1
    assert cache.hits == 1


@pytest.mark.asyncio
async def test_different_hour_misses_cache(london, departure):
    client = configured_client(reading=snowy_reading(london, departure))
    service = WeatherService(client=client)

    await service.get_weather(london, departure)
    await service.get_weather(london, departure + timedelta(hours=1))

    assert client.fetch_reading.await_count == 2
    assert len(service.cache) == 2


@pytest.mark.asyncio
async def test_fallback_results_are_cached(london, departure):
    client = configured_client(error=WeatherProviderError("down"))
    service = WeatherService(client=client)

    first = await service.get_weather(london, departure)
    second = await service.get_weather(london, departure)

    assert first is second
    assert client.fetch_reading.await_count == 1


@pytest.mark.asyncio
async def test_naive_time_treated_as_utc(london):
    service = WeatherService(client=OpenWeatherClient(api_key=""))

    naive = await service.get_weather(london, datetime(2025, 1, 15, 8, 0))
    aware = await service.get_weather(london, datetime(2025, 1, 15, 8, 0, tzinfo=timezone.utc))

    assert naive is aware


@pytest.mark.asyncio
async def test_separate_services_do_not_share_cache(london, departure):
    client = configured_client(reading=snowy_reading(london, departure))

    await WeatherService(client=client).get_weather(london, departure)
    await WeatherService(client=client).get_weather(london, departure)

    assert client.fetch_reading.await_count == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("lat", [-60.0, -20.0, 0.0, 20.0, 51.5])
async def test_same_bucket_same_weather_across_sessions(lat):
    """Two sessions without a weather key agree on any lookup in the same bucket."""
    point = Coordinate(lng=30.0, lat=lat)

    first = await WeatherService(client=OpenWeatherClient(api_key="")).get_weather(
        point, datetime(2025, 1, 15, 6, 0, tzinfo=timezone.utc)
    )
    second = await WeatherService(client=OpenWeatherClient(api_key="")).get_weather(
        Coordinate(lng=30.001, lat=lat + 0.001),
        datetime(2025, 1, 15, 6, 59, tzinfo=timezone.utc),
    )

    assert first.is_synthetic and second.is_synthetic
    assert first.temperature == second.temperature
    assert first.condition == second.condition
    assert first.risk == second.risk
