"""Per-request access log and correlation id propagation."""

import logging
import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from muzikant.infrastructure.observability.logging import (
    get_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


# Hey future me, two lines per request: "→ GET /api/playlist/x" when it arrives and
# "✓ GET /api/playlist/x → 200 (812ms)" when it leaves. Everything logged in between
# (governor waits, Spotify calls, 429 backoff) shares the same correlation id, so grep
# for it to see one playlist fetch end to end. Unhandled errors are logged and re-raised.
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access log with duration; echoes the correlation id header."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        set_correlation_id(request.headers.get(CORRELATION_HEADER))
        method, path = request.method, request.url.path
        context = {"method": method, "path": path}

        logger.info(
            f"→ {method} {path}",
            extra={
                **context,
                "client_ip": request.client.host if request.client else "unknown",
            },
        )

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                f"Request failed: {method} {path}",
                extra={
                    **context,
                    "duration_ms": _elapsed_ms(started),
                    "error_type": type(e).__name__,
                },
            )
            raise

        duration_ms = _elapsed_ms(started)
        mark = "✓" if response.status_code < 400 else "✗"
        logger.info(
            f"{mark} {method} {path} → {response.status_code} ({duration_ms}ms)",
            extra={**context, "status_code": response.status_code, "duration_ms": duration_ms},
        )

        response.headers[CORRELATION_HEADER] = get_correlation_id()
        return response
