"""
Application errors and the JSON error envelope.

Every failure leaves the API as:
    {"ok": false, "error": {"code": "...", "message": "..."}}

Services raise the exceptions below; the handlers registered in
app.main turn them (and FastAPI's own errors) into envelope responses.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base error: unclassified failures map to 500."""

    status_code = 500
    code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, code: Optional[str] = None, fields: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.fields = fields


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"


class AuthenticationError(AppError):
    status_code = 401
    code = "UNAUTHORIZED"


class ForbiddenError(AppError):
    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"


# ============================================================
# ENVELOPE HELPERS
# ============================================================

def ok(data: dict, status_code: int = 200) -> JSONResponse:
    """Success envelope."""
    return JSONResponse(status_code=status_code, content=jsonable_encoder({"ok": True, "data": data}))


def error_response(status_code: int, code: str, message: str, fields: Optional[dict] = None) -> JSONResponse:
    error = {"code": code, "message": message}
    if fields:
        error["fields"] = fields
    return JSONResponse(status_code=status_code, content={"ok": False, "error": error})


_HTTP_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    413: "PAYLOAD_TOO_LARGE",
}


# ============================================================
# HANDLERS
# ============================================================

async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("API error on %s %s: %s", request.method, request.url.path, exc.message)
    return error_response(exc.status_code, exc.code, exc.message, exc.fields)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = _HTTP_CODES.get(exc.status_code, "ERROR")
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return error_response(exc.status_code, code, message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = {}
    for err in exc.errors():
        # Drop the leading "body"/"query" location segment
        loc = [str(part) for part in err["loc"][1:]] or [str(err["loc"][0])]
        message = err["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        fields[".".join(loc)] = message
    first = next(iter(fields.values()), "Validation failed")
    return error_response(400, "VALIDATION_ERROR", first, fields)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Constraint violation on %s %s: %s", request.method, request.url.path, exc.orig)
    return error_response(409, "CONFLICT", "A resource with this information already exists")


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "INTERNAL_SERVER_ERROR", "An unexpected error occurred")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
