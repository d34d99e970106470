"""
Request logging middleware.

Each request gets a correlation id bound into structlog's context vars, so
every log line emitted while handling it carries ``request_id``. Completion
is logged with status and timing, and the id is echoed in ``X-Request-ID``.
"""

from __future__ import annotations

import time
import uuid

import structlog
from fastapi import FastAPI, Request

from shared.logging import get_logger

log = get_logger("authshop.request")

REQUEST_ID_HEADER = "X-Request-ID"


def generate_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


def log_request_end(method: str, path: str, status_code: int, duration_ms: int) -> None:
    if status_code >= 500:
        log_fn = log.error
    elif status_code >= 400:
        log_fn = log.warning
    else:
        log_fn = log.info

    log_fn(
        "request_completed",
        method=method,
        path=path,
        status_code=status_code,
        duration_ms=duration_ms,
    )


def setup_request_logging(app: FastAPI) -> None:
    """Register the request logging middleware on *app*."""

    @app.middleware("http")
    async def request_logging(request: Request, call_next):
        request_id = generate_request_id()
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = int((time.perf_counter() - start) * 1000)
            log_request_end(request.method, request.url.path, 500, duration_ms)
            raise
        duration_ms = int((time.perf_counter() - start) * 1000)

        log_request_end(
            request.method, request.url.path, response.status_code, duration_ms
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
