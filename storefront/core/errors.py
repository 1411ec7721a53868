"""
Error types shared by the proxy routes and their logging helpers.
"""
from enum import Enum
from typing import Any, Dict, Optional

import structlog
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)


class ErrorSeverity(Enum):
    LOW = "low"           # 4xx from the backend, validation errors
    MEDIUM = "medium"     # 5xx, timeouts, unreachable backend
    HIGH = "high"         # auth failures, corrupted local state


class BackendError(Exception):
    """The external backend answered with an error or could not be reached."""

    def __init__(self, status_code: int, message: str, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.payload = payload


class StoreClosedError(Exception):
    """An order was submitted while the store is not accepting orders."""

    def __init__(self, next_open_label: str, reason: Optional[str] = None):
        super().__init__("Store is closed")
        self.next_open_label = next_open_label
        self.reason = reason


def _severity_for(error: Exception) -> ErrorSeverity:
    status_code = getattr(error, "status_code", None)
    if isinstance(error, (BackendError, HTTPException)) and status_code is not None:
        return ErrorSeverity.LOW if status_code < 500 else ErrorSeverity.MEDIUM
    if isinstance(error, PermissionError):
        return ErrorSeverity.HIGH
    return ErrorSeverity.MEDIUM


def log_error(error: Exception, context: Optional[Dict[str, Any]] = None,
              severity: Optional[ErrorSeverity] = None) -> ErrorSeverity:
    """Log an error with its severity; returns the severity used."""
    context = context or {}
    severity = severity or _severity_for(error)

    log = logger.warning if severity == ErrorSeverity.LOW else logger.error
    log(
        "error_occurred",
        error_type=type(error).__name__,
        error=str(error),
        severity=severity.value,
        **context,
    )
    return severity


async def backend_error_handler(request: Request, exc: BackendError) -> JSONResponse:
    log_error(exc, {"endpoint": request.url.path, "status_code": exc.status_code})
    return JSONResponse({"message": exc.message}, status_code=exc.status_code)


async def store_closed_handler(request: Request, exc: StoreClosedError) -> JSONResponse:
    logger.info("order_rejected_store_closed", next_open=exc.next_open_label)
    body = {"message": "Store is closed", "next_open_label": exc.next_open_label}
    if exc.reason:
        body["reason"] = exc.reason
    return JSONResponse(body, status_code=409)
