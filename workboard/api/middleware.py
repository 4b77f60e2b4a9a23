"""
API Middleware - Request Tracking, CORS

Middleware for the dashboard API:
- Request ID tracking (for debugging)
- CORS for browser front ends served from another origin
"""

import time
import uuid
from collections.abc import Callable, Sequence

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from workboard.core import get_logger

logger = get_logger(__name__)


# ============================================================
# Request ID Middleware
# ============================================================


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Add unique request ID to each request for tracing and debugging.

    Adds X-Request-ID header to both request and response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Add request ID to request and response."""

        # Generate or use existing request ID
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        logger.info(
            "API request",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "client_ip": request.client.host if request.client else "unknown",
            },
        )

        start_time = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000

        response.headers["X-Request-ID"] = request_id

        logger.info(
            "API response",
            extra={
                "request_id": request_id,
                "status_code": response.status_code,
                "x_cache": response.headers.get("x-cache"),
                "duration_ms": round(duration_ms, 2),
            },
        )

        return response


# ============================================================
# CORS Middleware
# ============================================================


def add_cors_middleware(app: FastAPI, allow_origins: Sequence[str]) -> bool:
    """
    Add CORS middleware for cross-origin requests.

    Nothing is added when allow_origins is empty. The API is read-only, so only
    GET is allowed.

    Returns:
        True if the middleware was added
    """
    if not allow_origins:
        return False

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(allow_origins),
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "x-cache"],
    )

    logger.info("CORS middleware enabled", extra={"origins": list(allow_origins)})
    return True
