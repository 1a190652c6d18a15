"""Deterministic synthetic weather.

Used whenever no OpenWeather key is configured or the provider fails. Every
reading is computed from the cache bucket of the lookup (coordinates rounded
to 2 decimal degrees, time floored to the UTC hour) and a private PRNG seeded
with a hash of the cache key, so the same place and hour always produce the
same weather.

The numbers are plausible rather than accurate:
- temperature falls with latitude, follows the season of the hemisphere and
  peaks mid-afternoon local solar time
- conditions are biased toward fair weather
- early mornings are prone to fog, and precipitation below freezing tends to
  fall as snow
"""

import hashlib
import math
import random
from datetime import datetime, timezone
from typing import List, Tuple

from routecast.models.geo import Coordinate
from routecast.models.weather import SOURCE_SYNTHETIC, WeatherReading
from routecast.services.cache_service import make_weather_key
from routecast.utils.icons import icon_for_code

# (condition, OpenWeather icon code without the day/night suffix),
# ordered from fair to foul
CONDITIONS: List[Tuple[str, str]] = [
    ("Clear", "01"),
    ("Partly Cloudy", "02"),
    ("Cloudy", "03"),
    ("Overcast", "04"),
    ("Light Rain", "10"),
    ("Rain", "09"),
    ("Thunderstorm", "11"),
    ("Snow", "13"),
    ("Fog", "50"),
]

FAIR_WEATHER_BIAS = 1.5
SEASONAL_AMPLITUDE_C = 6.0
DIURNAL_AMPLITUDE_C = 5.0
NOISE_C = 3.0
FOG_CHANCE = 0.35
FREEZING_SNOW_CHANCE = 0.6
GUST_CHANCE = 0.3

# Day of year with the warmest weather in the northern hemisphere (mid-July)
NORTHERN_PEAK_DAY = 196

PRECIPITATION = ("Light Rain", "Rain", "Thunderstorm")


def _seed_for(key: str) -> int:
    digest = hashlib.sha256(key.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


def local_solar_hour(coordinates: Coordinate, time: datetime) -> float:
    """Approximate local hour from UTC time and longitude."""
    utc = time.astimezone(timezone.utc)
    return (utc.hour + utc.minute / 60 + coordinates.lng / 15) % 24


def _base_temperature(coordinates: Coordinate, time: datetime, local_hour: float) -> float:
    latitude_term = 25 - abs(coordinates.lat) / 2

    # Seasons matter less toward the equator
    day_of_year = time.astimezone(timezone.utc).timetuple().tm_yday
    season_phase = 2 * math.pi * (day_of_year - NORTHERN_PEAK_DAY) / 365
    hemisphere = 1 if coordinates.lat >= 0 else -1
    season_scale = min(abs(coordinates.lat) / 45, 1.0)
    seasonal = hemisphere * SEASONAL_AMPLITUDE_C * season_scale * math.cos(season_phase)

    diurnal = DIURNAL_AMPLITUDE_C * math.cos(2 * math.pi * (local_hour - 15) / 24)

    return latitude_term + seasonal + diurnal


def _bucket(coordinates: Coordinate, time: datetime) -> Tuple[Coordinate, datetime]:
    """Snap a lookup to its cache bucket: 2 dp coordinates, start of the UTC hour."""
    point = Coordinate(lng=round(coordinates.lng, 2) + 0.0, lat=round(coordinates.lat, 2) + 0.0)
    hour = time.astimezone(timezone.utc).replace(minute=0, second=0, microsecond=0)
    return point, hour


def generate_synthetic_weather(coordinates: Coordinate, time: datetime) -> WeatherReading:
    """Generate a repeatable weather reading for a place and time.

    Args:
        coordinates: Location of the reading
        time: Time of the reading (naive values are treated as UTC)

    Returns:
        WeatherReading with source "synthetic"
    """
    if time.tzinfo is None:
        time = time.replace(tzinfo=timezone.utc)

    # Every input below comes from the bucket so the whole bucket shares one reading
    point, hour = _bucket(coordinates, time)
    rng = random.Random(_seed_for(make_weather_key(point, hour)))
    local_hour = local_solar_hour(point, hour)
    is_day = 6 <= local_hour < 20

    temperature = round(
        _base_temperature(point, hour, local_hour) + rng.uniform(-NOISE_C, NOISE_C)
    )

    index = min(int(rng.random() ** FAIR_WEATHER_BIAS * len(CONDITIONS)), len(CONDITIONS) - 1)
    condition, code = CONDITIONS[index]

    if 4 <= local_hour < 9 and rng.random() < FOG_CHANCE:
        condition, code = "Fog", "50"

    if temperature < 0 and condition in PRECIPITATION and rng.random() < FREEZING_SNOW_CHANCE:
        condition, code = "Snow", "13"
    elif condition == "Snow" and temperature > 2:
        condition, code = "Rain", "09"

    if condition == "Fog":
        humidity = rng.randint(91, 100)
    elif condition in PRECIPITATION:
        humidity = rng.randint(75, 95)
    elif condition == "Snow":
        humidity = rng.randint(70, 95)
    else:
        humidity = rng.randint(40, 80)

    wind_speed = rng.randint(0, 30)
    if condition == "Thunderstorm" and rng.random() < GUST_CHANCE:
        wind_speed = rng.randint(31, 45)

    return WeatherReading(
        coordinates=coordinates,
        time=time,
        temperature=int(temperature),
        condition=condition,
        icon=icon_for_code(code + ("d" if is_day else "n")),
        humidity=humidity,
        wind_speed=wind_speed,
        source=SOURCE_SYNTHETIC,
    )
