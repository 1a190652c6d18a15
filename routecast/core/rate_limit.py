"""Rate limiting for the public endpoints."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from routecast.config import get_settings

settings = get_settings()

limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.RATE_LIMIT_ENABLED,
)


def rate_limit_route_weather() -> str:
    """Route planning hits two providers, so it shares the base limit."""
    return f"{settings.RATE_LIMIT_PER_MINUTE}/minute"


def rate_limit_weather_lookup() -> str:
    """Single-point lookups are cheap; allow twice the base limit."""
    return f"{settings.RATE_LIMIT_PER_MINUTE * 2}/minute"
