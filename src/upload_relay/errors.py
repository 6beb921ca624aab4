"""Error envelope ``{"error": ..., "details"?: ...}`` and exception handlers."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from src.upload_relay.schemas.upload import ErrorResponse

logger = logging.getLogger(__name__)


class RelayHTTPError(Exception):
    """Raised by routers to answer with the error envelope."""

    def __init__(self, status_code: int, error: str, details: Optional[str] = None) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details


def error_response(
    status_code: int,
    error: str,
    details: Optional[str] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    body = ErrorResponse(error=error, details=details).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body, headers=headers)


async def _relay_error_handler(_request: Request, exc: RelayHTTPError) -> JSONResponse:
    return error_response(exc.status_code, exc.error, exc.details)


async def _http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(
        exc.status_code,
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def _validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    return error_response(
        422,
        "Request validation failed",
        details=problems or None,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RelayHTTPError, _relay_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
