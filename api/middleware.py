"""
Request timing and access log.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)

# Polled by load balancers; timed but not logged
QUIET_PATHS = frozenset({"/health"})


def register_middleware(app: FastAPI) -> None:
    """Stamp ``X-Process-Time`` on every response and log API requests."""

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"

        if request.url.path not in QUIET_PATHS:
            level = logging.WARNING if response.status_code >= 500 else logging.INFO
            logger.log(
                level,
                "%s %s -> %d (%.3fs)",
                request.method,
                request.url.path,
                response.status_code,
                elapsed,
            )
        return response
