"""Weather cache for a single planning session.

Keys round coordinates to 2 decimal degrees (roughly 1 km) and time to the
enclosing hour, so repeated lookups for the same place around the same time
return the identical object instead of fetching again. The cache is owned by
whoever creates it (one per API request or CLI run) and is never shared
across sessions.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from routecast.models.geo import Coordinate
from routecast.models.weather import WeatherDataPoint

logger = logging.getLogger(__name__)


def make_weather_key(coordinates: Coordinate, time: datetime) -> str:
    """Build a cache key from rounded coordinates and hour bucket.

    Args:
        coordinates: Location of the lookup
        time: Requested time (naive values are treated as UTC)

    Returns:
        Stable string key
    """
    if time.tzinfo is None:
        time = time.replace(tzinfo=timezone.utc)
    hour_bucket = time.astimezone(timezone.utc).strftime("%Y%m%d%H")
    # Adding 0.0 folds -0.00 into 0.00
    lat = round(coordinates.lat, 2) + 0.0
    lng = round(coordinates.lng, 2) + 0.0
    return f"weather:{lat:.2f}:{lng:.2f}:{hour_bucket}"


class WeatherCache:
    """Unbounded in-process cache of weather data points."""

    def __init__(self):
        self._storage: Dict[str, WeatherDataPoint] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[WeatherDataPoint]:
        """Retrieve a cached data point.

        Args:
            key: Key from make_weather_key

        Returns:
            Cached data point or None
        """
        cached = self._storage.get(key)
        if cached is None:
            self.misses += 1
            logger.debug(f"Cache MISS for {key}")
            return None
        self.hits += 1
        logger.debug(f"Cache HIT for {key}")
        return cached

    def set(self, key: str, value: WeatherDataPoint) -> None:
        # Last write wins when two lookups raced on the same key
        self._storage[key] = value

    def clear(self) -> None:
        self._storage.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._storage)

    def __contains__(self, key: str) -> bool:
        return key in self._storage
