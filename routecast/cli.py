"""Command line interface for route weather planning."""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from routecast.core.exceptions import RouteCastException
from routecast.core.logging_config import setup_logging
from routecast.models.geo import Coordinate
from routecast.models.route import Checkpoint
from routecast.services.route_weather_service import RouteWeatherService, summarize_checkpoints
from routecast.services.routing_service import RoutingService
from routecast.services.weather_service import WeatherService

logger = logging.getLogger(__name__)


def parse_time(value: Optional[str]) -> datetime:
    """Parse an ISO timestamp; naive values are UTC, None means now."""
    if not value:
        return datetime.now(timezone.utc)
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid ISO timestamp: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_checkpoints(checkpoints: Sequence[Checkpoint]) -> List[str]:
    """Render checkpoints as fixed-width table rows."""
    lines = [f"{'Time (UTC)':<17} {'Location':<28} {'Condition':<16} {'Temp':>5} {'Wind':>5}  Risk"]
    for cp in checkpoints:
        weather = cp.weather
        risk = weather.risk_reason.value if weather.risk_reason else "-"
        lines.append(
            f"{cp.arrival_time.astimezone(timezone.utc).strftime('%Y-%m-%d %H:%M'):<17} "
            f"{cp.location[:28]:<28} {weather.condition[:16]:<16} "
            f"{weather.temperature:>4}C {weather.wind_speed:>5}  {risk}"
        )
    return lines


async def plan_route(
    start: str, end: str, via: Sequence[str], departure_time: datetime
) -> int:
    """Plan a route and print its weather checkpoints.

    Returns:
        Process exit code
    """
    routing_service = RoutingService()
    try:
        route = await routing_service.calculate_route(start, end, via)
    except RouteCastException as e:
        logger.error(e.message)
        return 1
    finally:
        await routing_service.close()

    if route is None:
        logger.error(f"No route found from {start!r} to {end!r}")
        return 1

    weather_service = WeatherService()
    service = RouteWeatherService(weather_service=weather_service)
    checkpoints = await service.sample_route(
        route.to_geojson(), departure_time, route.duration_s, route.waypoints
    )
    summary = summarize_checkpoints(checkpoints)

    print(f"{start} -> {end}: {route.distance_m / 1000:.1f} km, {route.duration_s / 60:.0f} min")
    for line in format_checkpoints(checkpoints):
        print(line)
    print()
    print(
        f"{summary.checkpoint_count} checkpoints, {summary.risky_count} risky"
        + (f" ({', '.join(summary.risk_reasons)})" if summary.risk_reasons else "")
    )
    if summary.synthetic_count:
        print(f"{summary.synthetic_count} readings are synthetic")
    return 0


async def point_weather(lat: float, lng: float, time: datetime) -> int:
    """Print the weather for one place and time."""
    try:
        coordinates = Coordinate(lng=lng, lat=lat)
    except ValueError as e:
        logger.error(str(e))
        return 1

    data_point = await WeatherService().get_weather(coordinates, time)
    risk = data_point.risk_reason.value if data_point.risk_reason else "none"
    print(
        f"{coordinates} at {time.astimezone(timezone.utc).isoformat()}: "
        f"{data_point.condition}, {data_point.temperature}C, "
        f"humidity {data_point.humidity}%, wind {data_point.wind_speed} km/h, "
        f"risk: {risk} [{data_point.reading.source}]"
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="routecast", description="Weather along a driving route")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    plan_parser = subparsers.add_parser("plan", help="Plan a route with weather checkpoints")
    plan_parser.add_argument("start", help="Origin place name")
    plan_parser.add_argument("end", help="Destination place name")
    plan_parser.add_argument(
        "--via", action="append", default=[], help="Intermediate place (repeatable)"
    )
    plan_parser.add_argument("--depart", type=parse_time, default=None, help="ISO departure time")

    weather_parser = subparsers.add_parser("weather", help="Weather at a point and time")
    weather_parser.add_argument("lat", type=float, help="Latitude")
    weather_parser.add_argument("lng", type=float, help="Longitude")
    weather_parser.add_argument("--time", type=parse_time, default=None, help="ISO time")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.log_level)

    try:
        if args.command == "plan":
            return asyncio.run(
                plan_route(args.start, args.end, args.via, args.depart or parse_time(None))
            )
        return asyncio.run(point_weather(args.lat, args.lng, args.time or parse_time(None)))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
