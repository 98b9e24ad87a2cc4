"""Middleware — request ids, request logging and error handling.

Every request gets an id (taken from an incoming ``X-Request-ID`` header or
generated) that is bound into the structlog context for the duration of
the request, so core log lines such as ``engine.decided`` can be traced
back to the HTTP call that caused them.
"""

from __future__ import annotations

import time
import uuid
from typing import Callable

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
_QUIET_PATHS = {"/health"}


# ── Request context + logging ─────────────────────────────────


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a request id, log method / path / status / duration."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        structlog.contextvars.bind_contextvars(request_id=request_id)
        start = time.monotonic()
        try:
            response = await call_next(request)
            duration_ms = round((time.monotonic() - start) * 1000, 1)
            response.headers[REQUEST_ID_HEADER] = request_id
            if request.url.path not in _QUIET_PATHS:
                logger.info(
                    "http.request",
                    method=request.method,
                    path=request.url.path,
                    status=response.status_code,
                    duration_ms=duration_ms,
                )
            return response
        finally:
            structlog.contextvars.unbind_contextvars("request_id")


# ── Global error handler ─────────────────────────────────────


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turn unhandled exceptions into a JSON 500 carrying the request id."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception("http.unhandled_error", path=request.url.path, error=str(exc))
            request_id = structlog.contextvars.get_contextvars().get("request_id")
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal server error.", "request_id": request_id},
            )


def setup_middleware(app: FastAPI) -> None:
    """Wire middleware into the application.

    Starlette runs the last-added middleware first, so the request context
    is bound before the error handler can log.
    """
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestContextMiddleware)
