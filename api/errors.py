"""
Exception handlers — domain errors and request validation to JSON.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.exceptions import MoveBudgetError
from utils.schemas import ApiResponse

logger = logging.getLogger(__name__)


def _error_body(message: str) -> dict:
    return ApiResponse.fail(message).model_dump()


def _describe(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Validation failed"


def register_exception_handlers(app: FastAPI) -> None:
    """Attach handlers that render errors as ``ApiResponse`` failures."""

    @app.exception_handler(MoveBudgetError)
    async def handle_domain_error(request: Request, exc: MoveBudgetError) -> JSONResponse:
        logger.debug("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body(_describe(exc)),
        )
