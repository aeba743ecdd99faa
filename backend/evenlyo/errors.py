# backend/evenlyo/errors.py
"""
Application-wide exception handlers.

Every failure is rendered in the same envelope as successful responses:
``{"success": false, "message", "code", "details"}``.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .core.exceptions import DomainException

logger = logging.getLogger(__name__)


def _title_from_status(status_code: int) -> str:
    mapping = {
        400: "Bad Request",
        401: "Unauthorized",
        403: "Forbidden",
        404: "Not Found",
        409: "Conflict",
        422: "Unprocessable Entity",
        500: "Internal Server Error",
    }
    return mapping.get(status_code, "Error")


def _envelope(
    message: str, code: Optional[str] = None, details: Optional[Any] = None
) -> Dict[str, Any]:
    return {
        "success": False,
        "message": message,
        "code": code,
        "details": jsonable_encoder(details) if details is not None else None,
    }


def _parse_detail(detail: Any, status_code: int) -> tuple[str, Optional[str], Optional[Any]]:
    if isinstance(detail, dict):
        code = detail.get("code") if isinstance(detail.get("code"), str) else None
        message = detail.get("message") or detail.get("detail")
        details = detail.get("details") or detail.get("errors")
        if isinstance(message, str):
            return message, code, details
        return _title_from_status(status_code), code, details
    if isinstance(detail, str):
        return detail, None, None
    if detail is None:
        return _title_from_status(status_code), None, None
    return str(detail), None, None


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        message, code, details = _parse_detail(exc.detail, exc.status_code)
        return JSONResponse(
            _envelope(message, code, details),
            status_code=exc.status_code,
            headers=exc.headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def starlette_http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        message, code, details = _parse_detail(exc.detail, exc.status_code)
        return JSONResponse(
            _envelope(message, code, details),
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        # Raised from dependencies, where routes cannot convert them
        status_code = exc.to_http_exception().status_code
        return JSONResponse(
            _envelope(exc.message, exc.code, exc.details or None),
            status_code=status_code,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = jsonable_encoder(exc.errors())
        first = errors[0] if errors else {}
        message = first.get("msg") if isinstance(first, dict) else None
        return JSONResponse(
            _envelope(message or "Request validation failed", "VALIDATION_ERROR", errors),
            status_code=400,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True
        )
        message = "Internal server error" if settings.is_production else str(exc)
        return JSONResponse(_envelope(message, "INTERNAL_ERROR"), status_code=500)
