"""RouteCast API - FastAPI application entry point.

Plans driving routes and samples the weather a traveller will meet along them,
flagging checkpoints where conditions make driving risky.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from routecast.api.v1 import routes, weather
from routecast.config import get_settings
from routecast.core.exceptions import RouteCastException
from routecast.core.logging_config import get_logger, setup_logging
from routecast.core.middleware import MetricsMiddleware, RequestLoggingMiddleware
from routecast.core.rate_limit import limiter

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan events."""
    settings = get_settings()
    setup_logging()
    logger.info(f"Starting RouteCast API in {settings.APP_ENV} mode")
    if not settings.weather_provider_configured:
        logger.warning("OPENWEATHER_API_KEY not set; all weather will be synthetic")
    if not settings.directions_provider_configured:
        logger.warning("MAPBOX_ACCESS_TOKEN not set; route planning is unavailable")
    yield
    logger.info("Shutting down RouteCast API")


app = FastAPI(
    title="RouteCast API",
    description="""RouteCast shows the weather you will drive through.

Routes come from Mapbox; weather comes from OpenWeather, matched to the time you
will reach each point along the route. Checkpoints are flagged when snow, ice,
fog, high winds, heavy rain or thunderstorms make the drive risky.

When no weather key is configured, deterministic synthetic weather is served so
the API stays usable in development.
    """,
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "health", "description": "Health and readiness checks"},
        {"name": "routes", "description": "Route planning with weather checkpoints"},
        {"name": "weather", "description": "Point weather and risk assessment"},
    ],
)

settings = get_settings()

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestLoggingMiddleware)

# Added last, runs first
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RouteCastException)
async def routecast_exception_handler(request: Request, exc: RouteCastException):
    """Handle RouteCast custom exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.__class__.__name__,
            "message": exc.message,
            "path": request.url.path,
        },
    )


@app.get("/health", tags=["health"])
async def health_check():
    """Basic liveness check."""
    return {"status": "ok"}


@app.get("/ready", tags=["health"])
async def readiness_check():
    """Readiness check reporting which providers are configured."""
    current = get_settings()
    return {
        "status": "ready",
        "providers": {
            "directions": "configured" if current.directions_provider_configured else "missing",
            "weather": "configured" if current.weather_provider_configured else "synthetic",
        },
    }


def _find_metrics_middleware(application: FastAPI):
    stack = application.middleware_stack
    while stack is not None:
        if isinstance(stack, MetricsMiddleware):
            return stack
        stack = getattr(stack, "app", None)
    return None


@app.get("/metrics", tags=["health"])
async def get_metrics(request: Request):
    """Request counts, response times and status codes."""
    middleware = _find_metrics_middleware(request.app)
    if middleware is None:
        return {"requests_total": 0}
    return middleware.get_metrics()


app.include_router(routes.router, prefix="/api/v1/routes", tags=["routes"])
app.include_router(weather.router, prefix="/api/v1/weather", tags=["weather"])
