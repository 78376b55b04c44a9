"""Logging setup for the API process.

Console output always; when ``LOG_DIR`` is configured, a rotating
``combined.log`` for every level and an ``error.log`` for errors only.
"""

from __future__ import annotations
import logging
import logging.config
import time
from typing import Any

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .config import Settings

logger = logging.getLogger("padops.request")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def build_logging_config(settings: Settings) -> dict[str, Any]:
    level = settings.LOG_LEVEL.upper()
    if not isinstance(getattr(logging, level, None), int):
        raise ValueError(f"Invalid log level: {settings.LOG_LEVEL}")

    handlers: dict[str, dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "level": level,
        }
    }
    if settings.LOG_DIR is not None:
        settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
        handlers["combined"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "default",
            "filename": str(settings.LOG_DIR / "combined.log"),
            "maxBytes": 5 * 1024 * 1024,
            "backupCount": 3,
            "encoding": "utf-8",
            "level": level,
        }
        handlers["error"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "default",
            "filename": str(settings.LOG_DIR / "error.log"),
            "maxBytes": 5 * 1024 * 1024,
            "backupCount": 3,
            "encoding": "utf-8",
            "level": "ERROR",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": LOG_FORMAT}},
        "handlers": handlers,
        "loggers": {
            "padops": {"handlers": list(handlers), "level": level, "propagate": False},
        },
    }


def setup_logging(settings: Settings) -> None:
    logging.config.dictConfig(build_logging_config(settings))


class RequestLogMiddleware:
    """Logs method, path, status and duration once a request finishes.

    Plain ASGI so ``receive`` reaches the app untouched and handlers can
    still see ``http.disconnect``.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status = 500

        async def send_wrapper(message: Message) -> None:
            nonlocal status
            if message["type"] == "http.response.start":
                status = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            logger.info(
                "%s %s -> %s (%.0fms)",
                scope["method"],
                scope["path"],
                status,
                (time.perf_counter() - start) * 1000,
            )
