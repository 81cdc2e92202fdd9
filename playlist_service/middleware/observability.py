"""
Observability middleware for FastAPI/Starlette.

- Assigns a correlation id per request (from X-Request-ID / X-Correlation-ID or generated)
- Measures latency and records the status code
- Logs request start/end locally and forwards them with an http_request metric
  through services.observability

Sets X-Correlation-ID on every response. Mounted only when Settings.OBS_ENABLED.
"""

from __future__ import annotations

import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from playlist_service.core.logging import clear_correlation_id, get_logger, set_correlation_id
from playlist_service.services.observability import send_log, send_metric

logger = get_logger("playlist_service.middleware")


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Middleware to log and measure requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        cid = set_correlation_id(
            request.headers.get("X-Request-ID") or request.headers.get("X-Correlation-ID")
        )
        meta = {"method": request.method, "path": request.url.path}

        await send_log("INFO", "request.start", metadata=meta)

        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception as exc:
            logger.exception("request.exception", extra=meta)
            await send_log("ERROR", "request.exception", metadata={**meta, "error": str(exc)})
            clear_correlation_id()
            raise

        duration_ms = round((time.perf_counter() - start) * 1000.0, 2)
        logger.info("request.end", extra={**meta, "status_code": status_code, "duration_ms": duration_ms})
        await send_metric(
            name="http_request",
            metrics={"duration_ms": duration_ms, "status_code": status_code, "count": 1},
            metadata=meta,
        )
        await send_log("INFO", "request.end", metadata={**meta, "status_code": status_code, "duration_ms": duration_ms})
        clear_correlation_id()

        response.headers["X-Correlation-ID"] = cid
        return response
