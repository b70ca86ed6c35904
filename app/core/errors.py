"""Error taxonomy and the handlers that turn it into response envelopes.

Services raise these; routes let them propagate. The handlers registered by
``register_exception_handlers`` are the only place an error becomes an HTTP
response.
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from app.core.responses import error_response

log = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"


class AuthenticationError(AppError):
    status_code = 401
    code = "NOT_AUTHENTICATED"


class AuthorizationError(AppError):
    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"


class TenantNotFoundError(NotFoundError):
    code = "TENANT_NOT_FOUND"

    def __init__(self, message: str = "Restaurant not found"):
        super().__init__(message)


class TenantInactiveError(AuthorizationError):
    code = "TENANT_INACTIVE"

    def __init__(self, message: str = "Restaurant is currently unavailable"):
        super().__init__(message)


class InvalidStatusTransitionError(ConflictError):
    code = "INVALID_STATUS_TRANSITION"


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        log.error("app error on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.message, code=exc.code),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        problems.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg", "invalid"))
    return JSONResponse(
        status_code=400,
        content=error_response("; ".join(problems) or "Invalid request", code=ValidationError.code),
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(str(exc.detail), code="HTTP_ERROR"),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    # Full cause goes to the log, never to the client
    log.exception("unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=error_response("Internal server error", code=AppError.code),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
