"""Request logging and in-process metrics middleware."""

import time
from typing import Any, Callable, Dict

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from routecast.core.logging_config import clear_request_id, get_logger, set_request_id

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with timing and a correlation ID.

    An incoming X-Request-ID header is reused, otherwise a new ID is
    generated. The ID is echoed back on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
        started = time.perf_counter()

        logger.info(
            "Request started",
            extra={
                "extra_fields": {
                    "method": request.method,
                    "path": request.url.path,
                    "client_ip": request.client.host if request.client else None,
                }
            },
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={
                    "extra_fields": {
                        "method": request.method,
                        "path": request.url.path,
                        "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                        "error_type": type(e).__name__,
                    }
                },
                exc_info=True,
            )
            raise
        finally:
            clear_request_id()

        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.info(
            "Request completed",
            extra={
                "extra_fields": {
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                }
            },
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms}ms"
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Counts requests per endpoint and status code."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.requests_total = 0
        self.requests_in_progress = 0
        self.total_duration_s = 0.0
        self.by_endpoint: Dict[str, Dict[str, float]] = {}
        self.by_status: Dict[int, int] = {}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        self.requests_in_progress += 1
        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            self.requests_in_progress -= 1

        duration = time.perf_counter() - started
        endpoint = f"{request.method} {request.url.path}"

        self.requests_total += 1
        self.total_duration_s += duration
        stats = self.by_endpoint.setdefault(endpoint, {"count": 0, "total_duration": 0.0})
        stats["count"] += 1
        stats["total_duration"] += duration
        self.by_status[response.status_code] = self.by_status.get(response.status_code, 0) + 1

        return response

    def get_metrics(self) -> Dict[str, Any]:
        average = self.total_duration_s / self.requests_total if self.requests_total else 0.0
        return {
            "requests_total": self.requests_total,
            "requests_in_progress": self.requests_in_progress,
            "avg_duration_seconds": round(average, 4),
            "requests_by_endpoint": {
                endpoint: {
                    "count": int(stats["count"]),
                    "avg_duration_seconds": round(stats["total_duration"] / stats["count"], 4),
                }
                for endpoint, stats in self.by_endpoint.items()
            },
            "requests_by_status": dict(self.by_status),
        }
