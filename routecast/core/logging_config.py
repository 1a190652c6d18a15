"""Logging setup for RouteCast.

Production emits one JSON object per line; every other environment gets a
coloured single-line format. Both include the request ID of the current
context when one is set.
"""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from routecast.config import get_settings

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

NOISY_LOGGERS = ("uvicorn", "httpx", "httpcore", "redis")


class StructuredFormatter(logging.Formatter):
    """JSON log lines for aggregation."""

    def __init__(self, include_location: bool = False):
        super().__init__()
        self.include_location = include_location

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = request_id_var.get()
        if request_id:
            payload["request_id"] = request_id

        if record.exc_info and record.exc_info[0] is not None:
            payload["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            payload.update(extra_fields)

        if self.include_location:
            payload["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(payload, default=str)


class HumanReadableFormatter(logging.Formatter):
    """Coloured console output for local runs."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "") if self.use_color else ""
        reset = self.RESET if color else ""

        request_id = request_id_var.get()
        tag = f" [{request_id[:8]}]" if request_id else ""

        line = (
            f"{color}{datetime.now(timezone.utc).strftime('%H:%M:%S')} "
            f"{record.levelname:8}{reset} {record.name}:{record.lineno}{tag} - "
            f"{record.getMessage()}"
        )

        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict) and extra_fields:
            line += " " + " ".join(f"{k}={v}" for k, v in extra_fields.items())

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        return line


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger.

    Args:
        level: Overrides LOG_LEVEL from settings (the CLI passes --log-level)
    """
    settings = get_settings()
    level_name = (level or settings.LOG_LEVEL or "INFO").upper()
    log_level = getattr(logging, level_name, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if settings.APP_ENV == "production":
        formatter: logging.Formatter = StructuredFormatter(
            include_location=log_level <= logging.DEBUG
        )
    else:
        formatter = HumanReadableFormatter(use_color=sys.stderr.isatty())

    # stderr keeps CLI stdout clean for the route report
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        "Logging configured",
        extra={
            "extra_fields": {
                "environment": settings.APP_ENV,
                "log_level": level_name,
                "formatter": type(formatter).__name__,
            }
        },
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def set_request_id(request_id: Optional[str] = None) -> str:
    """Bind a request ID to the current context.

    Args:
        request_id: ID to bind, or None to generate one

    Returns:
        The bound request ID
    """
    if not request_id:
        request_id = str(uuid.uuid4())
    request_id_var.set(request_id)
    return request_id


def clear_request_id() -> None:
    request_id_var.set("")
