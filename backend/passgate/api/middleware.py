"""
Per-request correlation for gate traffic.
"""

import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
import structlog

from passgate.core.logging import get_logger

logger = get_logger(__name__)

# Polled by load balancers and Prometheus
QUIET_PATHS = frozenset({"/health", "/metrics"})


class GateRequestMiddleware(BaseHTTPMiddleware):
    """
    Binds request_id (taken from X-Request-ID when the scanner sends one)
    and the scanning device (X-Gate-ID) into the structlog context, then
    logs one line per request at a level matching the response status.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        started = time.perf_counter()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        gate_id = request.headers.get("X-Gate-ID")
        if gate_id:
            structlog.contextvars.bind_contextvars(gate_id=gate_id)

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("request_failed", duration_ms=_elapsed_ms(started))
            raise

        elapsed = _elapsed_ms(started)
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{elapsed}ms"

        if request.url.path not in QUIET_PATHS:
            status = response.status_code
            log = logger.error if status >= 500 else logger.warning if status >= 400 else logger.info
            log("request_completed", status_code=status, duration_ms=elapsed)

        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
