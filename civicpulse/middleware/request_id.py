"""
Per-request correlation for log lines.

Every request gets an 8-hex-character id (or keeps the one a proxy forwarded
in ``X-Request-ID``). The id and, once the bearer token is verified, the
caller's email live in context variables that ``RequestIDFilter`` copies onto
each log record.
"""

import logging
import secrets
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

REQUEST_ID_HEADER = "X-Request-ID"

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_caller_email: ContextVar[Optional[str]] = ContextVar("caller_email", default=None)


def get_request_id() -> Optional[str]:
    return _request_id.get()


def bind_caller(email: str) -> None:
    """Tag the rest of the current request's log lines with the caller's email."""
    _caller_email.set(email)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns the request id and echoes it on the response."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or secrets.token_hex(4)
        id_token = _request_id.set(request_id)
        email_token = _caller_email.set(None)
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        finally:
            _request_id.reset(id_token)
            _caller_email.reset(email_token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class RequestIDFilter(logging.Filter):
    """Adds ``request_id`` and ``user_email`` attributes for the log format."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get() or "--------"
        record.user_email = _caller_email.get() or "-"
        return True
