"""Mapbox directions and geocoding client."""

import asyncio
import hashlib
import json
import logging
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

import httpx
import redis.asyncio as redis

from routecast.config import get_settings
from routecast.core.exceptions import ExternalServiceError, ProviderNotConfiguredError
from routecast.models.geo import Coordinate, Waypoint
from routecast.models.route import RouteResult
from routecast.utils.geometry import geojson_to_coordinates

logger = logging.getLogger(__name__)


class RoutingService:
    """Mapbox client with Redis caching of directions."""

    def __init__(self, access_token: Optional[str] = None, use_cache: bool = True):
        settings = get_settings()
        self.base_url = settings.MAPBOX_API_URL.rstrip("/")
        self.access_token = settings.MAPBOX_ACCESS_TOKEN if access_token is None else access_token
        self.profile = settings.MAPBOX_PROFILE
        self.redis_url = settings.REDIS_URL
        self.timeout = settings.HTTP_TIMEOUT_S
        self.max_retries = max(1, settings.HTTP_MAX_RETRIES)
        self.cache_ttl = settings.DIRECTIONS_CACHE_TTL_S
        self.use_cache = use_cache
        self._redis_client: Optional[redis.Redis] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.access_token and self.access_token.strip())

    async def _get_redis_client(self) -> Optional[redis.Redis]:
        """Get or create Redis client."""
        if not self.use_cache:
            return None
        if self._redis_client is None:
            try:
                self._redis_client = redis.from_url(
                    self.redis_url, encoding="utf-8", decode_responses=True
                )
                # Test connection
                await self._redis_client.ping()
                logger.info("Redis connection established for directions caching")
            except Exception as e:
                logger.warning(f"Redis connection failed: {str(e)}. Caching disabled.")
                self._redis_client = None
                self.use_cache = False
        return self._redis_client

    def _generate_cache_key(self, profile: str, coordinates: Sequence[Coordinate]) -> str:
        """Generate cache key for a directions request."""
        data = f"{profile}:{json.dumps([c.as_list() for c in coordinates])}"
        return f"directions:{hashlib.md5(data.encode()).hexdigest()}"

    async def _request_json(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """GET a Mapbox endpoint, retrying rate limits, 5xx and timeouts.

        Raises:
            ExternalServiceError: Mapbox unavailable or returned an error
        """
        for attempt in range(self.max_retries):
            last_attempt = attempt == self.max_retries - 1
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, params=params)

                if response.status_code == 200:
                    data = response.json()
                    if not isinstance(data, dict):
                        logger.error(f"Unexpected Mapbox payload type: {type(data).__name__}")
                        raise ExternalServiceError("Routing service returned invalid data")
                    return data

                elif response.status_code in (401, 403):
                    logger.error(f"Mapbox rejected the access token ({response.status_code})")
                    raise ExternalServiceError("Mapbox rejected the access token")

                elif response.status_code in (400, 404, 422):
                    logger.error(f"Invalid Mapbox request: {response.text}")
                    raise ExternalServiceError("Invalid routing request")

                elif response.status_code == 429:
                    logger.warning("Mapbox rate limit exceeded")
                    if not last_attempt:
                        await asyncio.sleep(2**attempt)
                        continue
                    raise ExternalServiceError("Rate limit exceeded")

                else:
                    logger.error(f"Mapbox error {response.status_code}: {response.text}")
                    if not last_attempt:
                        await asyncio.sleep(2**attempt)
                        continue
                    raise ExternalServiceError("Routing service unavailable")

            except httpx.TimeoutException:
                logger.error(f"Mapbox timeout (attempt {attempt + 1})")
                if not last_attempt:
                    await asyncio.sleep(2**attempt)
                    continue
                raise ExternalServiceError("Routing service timeout")

            except httpx.HTTPError as e:
                logger.error(f"Error contacting Mapbox: {str(e)}")
                raise ExternalServiceError(f"Routing error: {str(e)}")

            except ValueError as e:
                logger.error(f"Mapbox returned invalid JSON: {str(e)}")
                raise ExternalServiceError("Routing service returned invalid data")

        raise ExternalServiceError("Failed to reach Mapbox after retries")

    async def geocode(self, location: str) -> Optional[Coordinate]:
        """Resolve a place name to coordinates.

        Args:
            location: Free-text place name

        Returns:
            Best match coordinates, or None if nothing matched or Mapbox failed
        """
        if not self.is_configured:
            raise ProviderNotConfiguredError("Mapbox access token not configured")

        url = f"{self.base_url}/geocoding/v5/mapbox.places/{quote(location, safe='')}.json"
        params = {"access_token": self.access_token, "limit": 1}

        try:
            data = await self._request_json(url, params)
        except ExternalServiceError as e:
            logger.error(f"Geocoding failed for {location!r}: {e.message}")
            return None

        features = data.get("features") or []
        if not features:
            logger.info(f"No geocoding match for {location!r}")
            return None

        try:
            return Coordinate.from_pair(features[0]["center"])
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Unexpected geocoding payload for {location!r}: {str(e)}")
            return None

    async def get_directions(self, coordinates: Sequence[Coordinate]) -> Dict[str, Any]:
        """Get directions through the given coordinates.

        Args:
            coordinates: Origin, via points and destination in order

        Returns:
            Mapbox directions response (GeoJSON geometries)

        Raises:
            ExternalServiceError: Mapbox unavailable or error
        """
        if not self.is_configured:
            raise ProviderNotConfiguredError("Mapbox access token not configured")

        # Try to get from cache first
        cache_key = self._generate_cache_key(self.profile, coordinates)
        redis_client = await self._get_redis_client()

        if redis_client:
            try:
                cached = await redis_client.get(cache_key)
                if cached:
                    logger.info(f"Cache HIT for {cache_key}")
                    return json.loads(cached)
                logger.info(f"Cache MISS for {cache_key}")
            except Exception as e:
                logger.warning(f"Redis get error: {str(e)}")

        path = ";".join(f"{c.lng},{c.lat}" for c in coordinates)
        url = f"{self.base_url}/directions/v5/mapbox/{self.profile}/{path}"
        params = {
            "alternatives": "false",
            "geometries": "geojson",
            "steps": "false",
            "access_token": self.access_token,
        }

        data = await self._request_json(url, params)
        logger.info(f"Fetched {len(data.get('routes') or [])} routes from Mapbox")

        if redis_client and data.get("routes"):
            try:
                await redis_client.setex(cache_key, self.cache_ttl, json.dumps(data))
                logger.info(f"Cached directions response for {cache_key}")
            except Exception as e:
                logger.warning(f"Redis set error: {str(e)}")

        return data

    def extract_route(
        self, data: Dict[str, Any], waypoints: Sequence[Waypoint]
    ) -> Optional[RouteResult]:
        """Build a RouteResult from the first route of a directions response."""
        routes = data.get("routes") or []
        if not routes:
            return None

        route = routes[0]
        try:
            geometry = geojson_to_coordinates(route["geometry"])
        except (KeyError, ValueError, TypeError) as e:
            logger.error(f"Unexpected route geometry from Mapbox: {str(e)}")
            return None
        if not geometry:
            return None

        return RouteResult(
            geometry=geometry,
            distance_m=float(route.get("distance", 0)),
            duration_s=float(route.get("duration", 0)),
            waypoints=tuple(waypoints),
        )

    async def calculate_route(
        self,
        start: str,
        end: str,
        via: Sequence[str] = (),
    ) -> Optional[RouteResult]:
        """Geocode place names and route between them.

        Intermediate places that cannot be geocoded are skipped.

        Args:
            start: Origin place name
            end: Destination place name
            via: Intermediate place names in order

        Returns:
            RouteResult, or None when no route could be found

        Raises:
            ProviderNotConfiguredError: Mapbox access token missing
        """
        if not self.is_configured:
            raise ProviderNotConfiguredError("Mapbox access token not configured")

        start_coords = await self.geocode(start)
        end_coords = await self.geocode(end)
        if start_coords is None or end_coords is None:
            logger.error("Could not get coordinates for start or end location")
            return None

        waypoints: List[Waypoint] = [Waypoint(name=start, coordinates=start_coords)]
        for name in via:
            coords = await self.geocode(name)
            if coords is None:
                logger.warning(f"Skipping waypoint {name!r}: no geocoding match")
                continue
            waypoints.append(Waypoint(name=name, coordinates=coords))
        waypoints.append(Waypoint(name=end, coordinates=end_coords))

        try:
            data = await self.get_directions([wp.coordinates for wp in waypoints])
        except ProviderNotConfiguredError:
            raise
        except ExternalServiceError as e:
            logger.error(f"Directions request failed: {e.message}")
            return None

        result = self.extract_route(data, waypoints)
        if result is None:
            logger.error("No routes found")
        return result

    async def close(self):
        """Close Redis connection."""
        if self._redis_client:
            await self._redis_client.close()
            self._redis_client = None
