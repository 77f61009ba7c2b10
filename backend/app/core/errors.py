"""
Error responses.

Every error leaves the API as ``{"success": false, "error": ..., "timestamp": ...}``
plus optional detail fields.
"""
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from backend.app.core.config import settings
from backend.app.services.metrics import record_rebalance_error
from rebalancer.exceptions import (
    ExecutionFailedError,
    GatewayError,
    InvalidRequestError,
    PriceUnavailableError,
    RebalanceInProgressError,
    RebalancerError,
)

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    """Build the JSON error body."""
    content = {
        "success": False,
        "error": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    content.update({key: value for key, value in extra.items() if value is not None})
    return JSONResponse(status_code=status_code, content=content)


def status_for(exc: RebalancerError) -> int:
    """HTTP status for a rebalancer error."""
    if isinstance(exc, (InvalidRequestError, PriceUnavailableError)):
        return 400
    if isinstance(exc, RebalanceInProgressError):
        return 409
    return 500


async def rebalancer_error_handler(request: Request, exc: RebalancerError) -> JSONResponse:
    """Map rebalancer exceptions to JSON errors."""
    status_code = status_for(exc)
    record_rebalance_error(type(exc).__name__)

    if isinstance(exc, ExecutionFailedError):
        logger.error(f"Rebalance execution failed ({exc.stage}): {exc.message}")
        return error_response(
            status_code,
            exc.message,
            code=exc.error_code,
            stage=exc.stage,
            funds_redeemed=exc.funds_redeemed,
            details=exc.details,
        )

    if isinstance(exc, GatewayError):
        logger.error(f"Exchange error on {request.url.path}: {exc.message}")
        return error_response(status_code, exc.message, code=exc.error_code, details=exc.details)

    logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return error_response(status_code, exc.message, code=exc.error_code)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are client errors."""
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    logger.warning(f"{request.method} {request.url.path} invalid body: {details}")
    return error_response(400, "Invalid request parameters.", code="INVALID_REQUEST", details=details)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Unexpected errors never crash the process."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    record_rebalance_error(type(exc).__name__)

    if settings.SENTRY_ENABLED:
        import sentry_sdk
        with sentry_sdk.push_scope() as scope:
            scope.set_tag("endpoint", str(request.url))
            scope.set_context("request", {
                "method": request.method,
                "url": str(request.url),
            })
            sentry_sdk.capture_exception(exc)

    return error_response(500, str(exc) or "Internal server error", type=type(exc).__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers on an application."""
    app.add_exception_handler(RebalancerError, rebalancer_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
