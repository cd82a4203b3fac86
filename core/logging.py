"""
Structured logging for the Issue Tracker.

Console output while developing, one JSON object per line otherwise. Every
entry carries the request id bound by RequestLoggingMiddleware.
"""

import logging
import os
import sys
import time
import uuid
from functools import lru_cache
from typing import Any

import structlog
from structlog.types import EventDict, Processor

APP_LOG_NAME = "issue_tracker"
REQUEST_ID_HEADER = b"x-request-id"


def _tag_app(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["app"] = APP_LOG_NAME
    return event_dict


def _renderers() -> list[Processor]:
    from .config import get_settings

    if get_settings().debug or os.getenv("ENV", "development") == "development":
        return [structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback)]
    return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]


def get_processors() -> list[Processor]:
    """Processor chain: context, level, timestamp, app tag, then rendering."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        _tag_app,
        *_renderers(),
    ]


@lru_cache(maxsize=1)
def configure_logging(level: str = "INFO") -> None:
    """Route stdlib logging to stdout and configure structlog. Runs once."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )
    structlog.configure(
        processors=get_processors(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(name)  # type: ignore[no-any-return]


class RequestLoggingMiddleware:
    """
    ASGI middleware that tags each HTTP request with an id and logs its outcome.

    The id comes from the X-Request-ID header when the client sends one and is
    echoed back on the response.
    """

    def __init__(self, app):
        self.app = app
        self.logger = get_logger("http")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = dict(scope.get("headers") or []).get(REQUEST_ID_HEADER, b"").decode(
            "latin-1"
        ) or uuid.uuid4().hex[:8]
        method, path = scope.get("method", ""), scope.get("path", "")
        status_code = 500
        started = time.perf_counter()

        structlog.contextvars.bind_contextvars(request_id=request_id)
        self.logger.info("request_started", method=method, path=path)

        async def send_with_request_id(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
                message["headers"] = [
                    *message.get("headers", []),
                    (REQUEST_ID_HEADER, request_id.encode("latin-1")),
                ]
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            if status_code >= 500:
                log = self.logger.error
            elif status_code >= 400:
                log = self.logger.warning
            else:
                log = self.logger.info
            log(
                "request_complete",
                method=method,
                path=path,
                status_code=status_code,
                duration_seconds=round(time.perf_counter() - started, 3),
            )
            structlog.contextvars.clear_contextvars()
