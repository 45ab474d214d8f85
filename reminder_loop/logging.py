import logging
import time
from logging.config import dictConfig
from typing import Any, Dict, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from reminder_loop.config import Settings, get_settings

# ---------------------------------------------------
# Logging Configuration
# ---------------------------------------------------
APP_LOGGERS = (
    "main",
    "routes",
    "database",
    "scheduler",
    "shared_store",
    "notification_center",
    "notification_push",
    "main_surface",
    "content_surface",
    "json_logger",
)


def build_logging_config(settings: Optional[Settings] = None) -> Dict[str, Any]:
    settings = settings or get_settings()
    level = "DEBUG" if settings.debug else settings.log_level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "color": {
                "()": "colorlog.ColoredFormatter",
                "format": "%(log_color)s%(asctime)s %(levelname)s [%(name)s] %(message)s",
                "log_colors": {
                    "DEBUG": "cyan",
                    "INFO": "green",
                    "WARNING": "yellow",
                    "ERROR": "red",
                    "CRITICAL": "bold_red",
                },
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "color",
            },
        },
        "loggers": {
            # Silence uvicorn and scheduler noise in console
            "uvicorn": {"level": "WARNING"},
            "uvicorn.error": {"level": "WARNING"},
            "uvicorn.access": {"level": "WARNING"},
            "apscheduler": {"level": "WARNING"},
            "sqlalchemy.engine": {"level": "WARNING"},
            "request": {"level": "INFO"},
            **{name: {"level": level} for name in APP_LOGGERS},
        },
        "root": {
            "level": level,
            "handlers": ["console"],
        },
    }


# ---------------------------------------------------
# Initialize Logging
# ---------------------------------------------------
def init_logging(settings: Optional[Settings] = None) -> None:
    dictConfig(build_logging_config(settings))


# ---------------------------------------------------
# Request Logging Middleware
# ---------------------------------------------------
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        logger = logging.getLogger("request")
        start_time = time.perf_counter()

        response = await call_next(request)

        duration = (time.perf_counter() - start_time) * 1000
        logger.info("%s %s → %s (%.2f ms)", request.method, request.url.path, response.status_code, duration)
        return response
