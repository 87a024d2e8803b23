"""
JSON error envelope for every failing request.

All errors answer with::

    {"status_code": 404, "message": "Complaint not found", "error_type": "not_found"}

plus an optional ``details`` object (the offending field, validation errors,
or the id under which an unexpected failure was logged).
"""

import logging
import secrets
import traceback
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from civicpulse.services.errors import ReportError

logger = logging.getLogger(__name__)


def error_response(
    status_code: int,
    message: str,
    error_type: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    content: Dict[str, Any] = {
        "status_code": status_code,
        "message": message,
        "error_type": error_type,
    }
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _log_unexpected(request: Request, exc: BaseException) -> str:
    error_id = secrets.token_hex(4)
    trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    indented = "\n".join(f"  │ {line}" for line in trace.splitlines() if line.strip())
    logger.error(
        f"❌ ERROR#{error_id}: {request.method} {request.url.path} - "
        f"{exc.__class__.__name__}: {exc}\n{indented}"
    )
    return error_id


async def error_handler_middleware(request: Request, call_next):
    """
    Last line of defence for exceptions no handler claimed.

    The request session has already rolled back by the time this runs, and
    the client only sees a generic message plus the logged error id.
    """
    try:
        return await call_next(request)
    except Exception as exc:
        error_id = _log_unexpected(request, exc)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            exc.__class__.__name__,
            details={"error_id": error_id},
        )


async def report_error_handler(request: Request, exc: ReportError) -> JSONResponse:
    logger.warning(f"⚠️ {request.method} {request.url.path} - {exc.status_code} {exc.error_type}: {exc.message}")
    field = getattr(exc, "field", None)
    return error_response(
        exc.status_code,
        exc.message,
        exc.error_type,
        details={"field": field} if field else None,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path} - {exc.status_code}: {exc.detail}")
    else:
        logger.warning(f"⚠️ {request.method} {request.url.path} - {exc.status_code}: {exc.detail}")
    return error_response(
        exc.status_code,
        str(exc.detail),
        "http_exception",
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = jsonable_encoder(exc.errors())
    logger.warning(f"⚠️ {request.method} {request.url.path} - invalid request: {errors}")
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Invalid request data",
        "validation_error",
        details={"errors": errors},
    )


def setup_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ReportError, report_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
