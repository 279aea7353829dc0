"""
Request logging with ledger context.

Every event logged while a request is in flight carries its request ID,
the organization from the URL and the Idempotency-Key when the client sent
one, so a retried posting can be traced from the route down to the store.
"""

import re
import time
import uuid
from collections.abc import Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from pharmstock.config import get_logger

logger = get_logger(__name__)

ORGANIZATION_PATH = re.compile(r"^/api/organizations/(\d+)(?:/|$)")

# Polled by orchestrators; logged at debug only
QUIET_PATHS = ("/health", "/api/health", "/api/health/db")


def request_context(request: Request) -> dict:
    """Context vars bound for the lifetime of one request."""
    context = {
        "request_id": request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8],
    }
    match = ORGANIZATION_PATH.match(request.url.path)
    if match:
        context["organization_id"] = int(match.group(1))
    idempotency_key = request.headers.get("Idempotency-Key")
    if idempotency_key:
        context["idempotency_key"] = idempotency_key
    return context


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request's outcome and timing and echoes the request ID."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        context = request_context(request)
        request.state.request_id = context["request_id"]
        structlog.contextvars.bind_contextvars(**context)

        log = logger.debug if request.url.path in QUIET_PATHS else logger.info
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            raise
        finally:
            structlog.contextvars.unbind_contextvars(*context)

        duration_ms = (time.perf_counter() - start) * 1000
        log(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round(duration_ms, 2),
            **context,
        )
        response.headers["X-Request-ID"] = context["request_id"]
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        return response
