"""
Logging Middleware for Correlation ID and Request Tracking

Generates or accepts a correlation ID for every request and binds it to the
structlog context, so every catalog search log line can be traced back to
its HTTP request.
"""

import time
import uuid
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars

logger = structlog.get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Inject correlation ID and request metadata into all logs.

    The correlation ID is taken from the X-Correlation-ID header when present
    and echoed back on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        clear_contextvars()

        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())

        bind_contextvars(
            correlation_id=correlation_id,
            request_method=request.method,
            request_path=request.url.path,
        )

        start_time = time.perf_counter()
        logger.info("request_started")

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=int((time.perf_counter() - start_time) * 1000),
                exc_info=True,
            )
            raise
        else:
            response.headers[CORRELATION_HEADER] = correlation_id
            logger.info(
                "request_completed",
                status_code=response.status_code,
                duration_ms=int((time.perf_counter() - start_time) * 1000),
            )
            return response
        finally:
            clear_contextvars()
