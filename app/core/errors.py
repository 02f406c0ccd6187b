"""
Error taxonomy shared by services and routers.

Every client-facing error is an HTTPException carrying a ``{code, message}``
detail, which ``http_error_handler`` turns into the standard error payload.
``DispatchFailure`` is internal to the notification dispatcher and never
reaches a caller.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

logger = logging.getLogger(__name__)


class AppError(HTTPException):
    """Base class for domain errors with a stable machine-readable code."""

    http_status: int = status.HTTP_400_BAD_REQUEST
    code: str = "bad_request"

    def __init__(self, message: str, errors: Optional[Any] = None):
        detail = {"code": self.code, "message": message}
        if errors is not None:
            detail["errors"] = errors
        super().__init__(status_code=self.http_status, detail=detail)
        self.message = message


class UnauthenticatedError(AppError):
    http_status = status.HTTP_401_UNAUTHORIZED
    code = "unauthenticated"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)
        self.headers = {"WWW-Authenticate": "Bearer"}


class ForbiddenError(AppError):
    http_status = status.HTTP_403_FORBIDDEN
    code = "forbidden"


class NotFoundError(AppError):
    http_status = status.HTTP_404_NOT_FOUND
    code = "not_found"


class ConflictError(AppError):
    http_status = status.HTTP_409_CONFLICT
    code = "conflict"


class InvalidInputError(AppError):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "validation_error"


class DispatchFailure(Exception):
    """A notification could not be persisted."""


# ----------------------------------------------------------------------
# Error payload rendering
# ----------------------------------------------------------------------

RETRIABLE_STATUSES = {408, 425, 429}


def _is_retriable(status_code: int) -> bool:
    return status_code in RETRIABLE_STATUSES or status_code >= 500


def error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    errors: Optional[Any] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Uniform ``{code, message, retriable, request_id[, errors]}`` body."""
    request_id = getattr(request.state, "request_id", "unknown")
    body = {
        "code": code,
        "message": message,
        "retriable": _is_retriable(status_code),
        "request_id": request_id,
    }
    if errors is not None:
        body["errors"] = errors
    return JSONResponse(
        status_code=status_code,
        content=body,
        headers={**(headers or {}), "X-Request-Id": request_id},
    )


async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, dict) else {"message": str(exc.detail)}
    return error_response(
        request,
        exc.status_code,
        code=str(detail.get("code") or f"http_{exc.status_code}"),
        message=str(detail.get("message") or "Request failed"),
        errors=detail.get("errors"),
        headers=exc.headers,
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        code=InvalidInputError.code,
        message="Request validation failed",
        errors=fields,
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return error_response(request, status.HTTP_429_TOO_MANY_REQUESTS, "rate_limited", "Too many requests")


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error", "Unexpected server error"
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
