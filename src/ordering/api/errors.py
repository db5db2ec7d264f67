"""Mapping of ordering failures to HTTP responses.

Every error response has the same body::

    {"error": <message>, "error_type": <exception class>, "detail": <{field: [messages]}>}
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers as register_protean_handlers

from ordering.errors import (
    AccessDenied,
    CannotCancelShippedOrDelivered,
    InsufficientStock,
    InvalidPaymentStatus,
    InvalidStatus,
    InvalidStatusTransition,
    NotFound,
    OrderingError,
    OrderNumberExhausted,
    ProductUnavailable,
    ValidationFailed,
)

logger = structlog.get_logger(__name__)

ERROR_STATUS_CODES = {
    NotFound: 404,
    ProductUnavailable: 409,
    InsufficientStock: 409,
    InvalidStatus: 400,
    InvalidPaymentStatus: 400,
    InvalidStatusTransition: 409,
    CannotCancelShippedOrDelivered: 409,
    ValidationFailed: 400,
    AccessDenied: 403,
    OrderNumberExhausted: 409,
}


def status_code_for(exc: Exception) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    if isinstance(exc, ObjectNotFoundError):
        return 404
    if isinstance(exc, ValidationError):
        return 400
    return 500


def error_body(exc: Exception) -> dict:
    messages = getattr(exc, "messages", None) or {}
    message = getattr(exc, "message", None)
    if message is None:
        message = "; ".join(f"{field}: {', '.join(map(str, errors))}" for field, errors in messages.items())
    return {"error": message or str(exc), "error_type": type(exc).__name__, "detail": messages}


async def ordering_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code = status_code_for(exc)
    logger.info(
        "Request rejected",
        path=request.url.path,
        status_code=status_code,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    return JSONResponse(status_code=status_code, content=error_body(exc))


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error while processing request", path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "error_type": "InternalError", "detail": {}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install Protean's handlers, then the ordering-specific ones on top."""
    register_protean_handlers(app)
    app.add_exception_handler(OrderingError, ordering_error_handler)
    app.add_exception_handler(ValidationError, ordering_error_handler)
    app.add_exception_handler(ObjectNotFoundError, ordering_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
