"""Unit tests for the Mapbox routing client."""

import json
from unittest.mock import AsyncMock, Mock, patch
from urllib.parse import unquote

import httpx
import pytest

from routecast.core.exceptions import ExternalServiceError, ProviderNotConfiguredError
from routecast.models.geo import Coordinate
from routecast.models.route import RouteResult
from routecast.services.routing_service import RoutingService


def mock_response(status_code: int = 200, payload=None):
    response = Mock()
    response.status_code = status_code
    response.json = Mock(return_value=payload)
    response.text = "error"
    return response


def mapbox_router(geocode_payloads, directions_payload):
    """Dispatch mocked GETs to geocoding or directions payloads by URL."""

    async def fake_get(url, params=None):
        if "/geocoding/" in url:
            place = unquote(url.rsplit("/", 1)[-1][: -len(".json")])
            return mock_response(payload=geocode_payloads.get(place, {"features": []}))
        return mock_response(payload=directions_payload)

    return fake_get


@pytest.fixture
def service() -> RoutingService:
    return RoutingService(access_token="pk.test", use_cache=False)


@pytest.mark.asyncio
async def test_geocode_returns_coordinates(service, mapbox_geocode_payloads):
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = mock_response(payload=mapbox_geocode_payloads["Oxford"])

        coords = await service.geocode("Oxford")

    assert coords == Coordinate(lng=-1.2577, lat=51.752)
    url = mock_get.call_args.args[0]
    assert url.endswith("/geocoding/v5/mapbox.places/Oxford.json")
    assert mock_get.call_args.kwargs["params"] == {"access_token": "pk.test", "limit": 1}


@pytest.mark.asyncio
async def test_geocode_no_match(service):
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = mock_response(payload={"features": []})

        assert await service.geocode("Nowhere") is None


@pytest.mark.asyncio
async def test_geocode_provider_error_returns_none(service):
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = mock_response(status_code=404)

        assert await service.geocode("Oxford") is None


@pytest.mark.asyncio
async def test_geocode_escapes_place_name(service):
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = mock_response(payload={"features": []})

        await service.geocode("St Albans/Herts")

    assert mock_get.call_args.args[0].endswith("/mapbox.places/St%20Albans%2FHerts.json")


@pytest.mark.asyncio
async def test_geocode_requires_token():
    service = RoutingService(access_token="", use_cache=False)

    with pytest.raises(ProviderNotConfiguredError):
        await service.geocode("Oxford")


@pytest.mark.asyncio
async def test_get_directions_request(service, mapbox_directions_payload):
    coords = [Coordinate(lng=-0.1276, lat=51.5072), Coordinate(lng=-1.2577, lat=51.752)]

    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = mock_response(payload=mapbox_directions_payload)

        data = await service.get_directions(coords)

    assert data == mapbox_directions_payload
    url = mock_get.call_args.args[0]
    assert url.endswith("/directions/v5/mapbox/driving/-0.1276,51.5072;-1.2577,51.752")
    params = mock_get.call_args.kwargs["params"]
    assert params["geometries"] == "geojson"
    assert params["access_token"] == "pk.test"


@pytest.mark.asyncio
async def test_get_directions_rate_limit_retried(service, mapbox_directions_payload):
    coords = [Coordinate(lng=0.0, lat=0.0), Coordinate(lng=0.1, lat=0.0)]

    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get, patch(
        "asyncio.sleep", new_callable=AsyncMock
    ):
        mock_get.side_effect = [
            mock_response(status_code=429),
            mock_response(payload=mapbox_directions_payload),
        ]

        data = await service.get_directions(coords)

    assert data == mapbox_directions_payload
    assert mock_get.call_count == 2


@pytest.mark.asyncio
async def test_get_directions_invalid_token(service):
    coords = [Coordinate(lng=0.0, lat=0.0), Coordinate(lng=0.1, lat=0.0)]

    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = mock_response(status_code=401)

        with pytest.raises(ExternalServiceError, match="access token"):
            await service.get_directions(coords)

    assert mock_get.call_count == 1


@pytest.mark.asyncio
async def test_get_directions_timeout(service):
    coords = [Coordinate(lng=0.0, lat=0.0), Coordinate(lng=0.1, lat=0.0)]

    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get, patch(
        "asyncio.sleep", new_callable=AsyncMock
    ):
        mock_get.side_effect = httpx.TimeoutException("timed out")

        with pytest.raises(ExternalServiceError, match="timeout"):
            await service.get_directions(coords)


@pytest.mark.asyncio
async def test_get_directions_uses_redis_cache(mapbox_directions_payload):
    """A cached response is served without calling Mapbox."""
    service = RoutingService(access_token="pk.test")
    coords = [Coordinate(lng=0.0, lat=0.0), Coordinate(lng=0.1, lat=0.0)]

    redis_client = AsyncMock()
    redis_client.get.return_value = json.dumps(mapbox_directions_payload)

    with patch.object(service, "_get_redis_client", AsyncMock(return_value=redis_client)), patch(
        "httpx.AsyncClient.get", new_callable=AsyncMock
    ) as mock_get:
        data = await service.get_directions(coords)

    assert data == mapbox_directions_payload
    mock_get.assert_not_called()
    redis_client.get.assert_awaited_once_with(service._generate_cache_key("driving", coords))


@pytest.mark.asyncio
async def test_get_directions_stores_in_redis(mapbox_directions_payload):
    service = RoutingService(access_token="pk.test")
    coords = [Coordinate(lng=0.0, lat=0.0), Coordinate(lng=0.1, lat=0.0)]

    redis_client = AsyncMock()
    redis_client.get.return_value = None

    with patch.object(service, "_get_redis_client", AsyncMock(return_value=redis_client)), patch(
        "httpx.AsyncClient.get", new_callable=AsyncMock
    ) as mock_get:
        mock_get.return_value = mock_response(payload=mapbox_directions_payload)
        await service.get_directions(coords)

    redis_client.setex.assert_awaited_once()
    key, ttl, body = redis_client.setex.await_args.args
    assert key.startswith("directions:")
    assert ttl == service.cache_ttl
    assert json.loads(body) == mapbox_directions_payload


def test_cache_key_depends_on_profile_and_coordinates():
    service = RoutingService(access_token="pk.test", use_cache=False)
    a = [Coordinate(lng=0.0, lat=0.0), Coordinate(lng=0.1, lat=0.0)]
    b = [Coordinate(lng=0.0, lat=0.0), Coordinate(lng=0.2, lat=0.0)]

    assert service._generate_cache_key("driving", a) == service._generate_cache_key("driving", a)
    assert service._generate_cache_key("driving", a) != service._generate_cache_key("driving", b)
    assert service._generate_cache_key("driving", a) != service._generate_cache_key("walking", a)


@pytest.mark.asyncio
async def test_calculate_route(service, mapbox_geocode_payloads, mapbox_directions_payload):
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.side_effect = mapbox_router(mapbox_geocode_payloads, mapbox_directions_payload)

        route = await service.calculate_route("London", "Oxford", ["Reading"])

    assert isinstance(route, RouteResult)
    assert route.distance_m == 94000.0
    assert route.duration_s == 5400.0
    assert len(route.geometry) == 7
    assert [wp.name for wp in route.waypoints] == ["London", "Reading", "Oxford"]
    # Three geocodes plus one directions request
    assert mock_get.call_count == 4


@pytest.mark.asyncio
async def test_calculate_route_skips_unknown_via(
    service, mapbox_geocode_payloads, mapbox_directions_payload
):
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.side_effect = mapbox_router(mapbox_geocode_payloads, mapbox_directions_payload)

        route = await service.calculate_route("London", "Oxford", ["Nowhere"])

    assert route is not None
    assert [wp.name for wp in route.waypoints] == ["London", "Oxford"]
    directions_url = mock_get.call_args_list[-1].args[0]
    assert directions_url.count(";") == 1


@pytest.mark.asyncio
async def test_calculate_route_unknown_start(
    service, mapbox_geocode_payloads, mapbox_directions_payload
):
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.side_effect = mapbox_router(mapbox_geocode_payloads, mapbox_directions_payload)

        assert await service.calculate_route("Nowhere", "Oxford") is None


@pytest.mark.asyncio
async def test_calculate_route_no_routes(service, mapbox_geocode_payloads):
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        no_routes = {"code": "NoRoute", "routes": []}
        mock_get.side_effect = mapbox_router(mapbox_geocode_payloads, no_routes)

        assert await service.calculate_route("London", "Oxford") is None


@pytest.mark.asyncio
async def test_calculate_route_requires_token():
    service = RoutingService(access_token="", use_cache=False)

    with pytest.raises(ProviderNotConfiguredError):
        await service.calculate_route("London", "Oxford")


def test_extract_route_bad_geometry(service):
    data = {"routes": [{"distance": 1, "duration": 1, "geometry": {"type": "Point"}}]}
    assert service.extract_route(data, []) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [None, [], ["routes"], "ok"])
async def test_get_directions_non_object_body(service, payload):
    coords = [Coordinate(lng=0.0, lat=0.0), Coordinate(lng=0.1, lat=0.0)]

    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = mock_response(payload=payload)

        with pytest.raises(ExternalServiceError, match="invalid data"):
            await service.get_directions(coords)


@pytest.mark.asyncio
async def test_calculate_route_non_object_directions_body(service, mapbox_geocode_payloads):
    """A directions body that is not a JSON object means no route."""
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.side_effect = mapbox_router(mapbox_geocode_payloads, [])

        assert await service.calculate_route("London", "Oxford") is None


@pytest.mark.asyncio
async def test_geocode_non_object_body_returns_none(service):
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = mock_response(payload=None)

        assert await service.geocode("Oxford") is None
