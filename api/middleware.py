"""
Request middleware for the FuelEU Ledger API.

Every request gets a correlation ID (taken from X-Request-ID or generated),
one JSON access-log line, and, if something unexpected escapes the routers,
an opaque 500 that carries the ID so ledger writes can be traced.
"""
import time
import uuid
import logging
import json
from typing import Callable, Optional
from contextvars import ContextVar
from datetime import datetime, timezone

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response, JSONResponse
from fastapi import FastAPI

REQUEST_ID_HEADER = "X-Request-ID"

request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_request_id() -> Optional[str]:
    """Correlation ID of the request being served, if any."""
    return request_id_ctx.get()


class StructuredLogger:
    """Writes one JSON object per log line, tagged with the request ID."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def _log(self, level: int, message: str, **fields):
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": logging.getLevelName(level),
            "message": message,
            "service": "fueleu-ledger",
            "request_id": get_request_id(),
        }
        entry.update(fields)
        entry = {k: v for k, v in entry.items() if v is not None}
        self.logger.log(level, json.dumps(entry, default=str))

    def info(self, message: str, **fields):
        self._log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields):
        self._log(logging.WARNING, message, **fields)

    def error(self, message: str, **fields):
        self._log(logging.ERROR, message, **fields)


structured_logger = StructuredLogger("fueleu")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Correlation ID, access log and last-resort error handling in one pass.

    Domain errors are mapped to 4xx by the handlers in api.main and come
    back here as ordinary responses. Anything else is logged in full and
    answered with a 500 whose body names only the request ID, unless
    debug is on.
    """

    # Health checks are polled constantly; keep them out of the access log
    QUIET_PATHS = frozenset({"/api/health", "/api/health/live"})

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        token = request_id_ctx.set(request_id)
        started = time.perf_counter()

        try:
            try:
                response = await call_next(request)
            except Exception as e:
                structured_logger.error(
                    "Unhandled exception",
                    method=request.method,
                    path=request.url.path,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                response = JSONResponse(
                    status_code=500,
                    content={
                        "error": "Internal Server Error",
                        "detail": str(e) if self.debug else
                        "An internal error occurred. Please contact support with the request ID.",
                        "request_id": request_id,
                    },
                )

            response.headers[REQUEST_ID_HEADER] = request_id
            if request.url.path not in self.QUIET_PATHS:
                structured_logger.info(
                    "Request completed",
                    method=request.method,
                    path=request.url.path,
                    query=str(request.query_params) or None,
                    status_code=response.status_code,
                    duration_ms=round((time.perf_counter() - started) * 1000, 2),
                    client_ip=request.client.host if request.client else None,
                )
            return response
        finally:
            request_id_ctx.reset(token)


def setup_middleware(app: FastAPI, debug: bool = False):
    """Install request middleware. `debug` echoes exception text in 500 bodies."""
    app.add_middleware(RequestContextMiddleware, debug=debug)
