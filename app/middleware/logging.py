"""
Request logging middleware for FastAPI using Loguru.

Writes one REQUEST level record per HTTP request and tags the response
with an ``X-Request-ID`` header.
"""

import time
import uuid
from contextvars import ContextVar

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.core.logging import register_request_level

# Context variable to store request ID across async context
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def get_client_ip(request: Request) -> str:
    """Client address, preferring the first hop of X-Forwarded-For."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else "unknown"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status code and latency of every request."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        register_request_level()

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request_id_var.set(request_id)

        start_time = time.perf_counter()
        response = await call_next(request)
        process_time_ms = round((time.perf_counter() - start_time) * 1000, 2)

        response.headers["X-Request-ID"] = request_id

        logger.bind(
            request_id=request_id,
            client_ip=get_client_ip(request),
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            process_time_ms=process_time_ms,
        ).log(
            "REQUEST",
            f"{request.method} {request.url.path} {response.status_code} {process_time_ms}ms",
        )
        return response
