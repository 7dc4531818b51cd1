# app/errors.py
"""
Error taxonomy and the JSON error envelope.

Every error response is a JSON object with at least an ``error`` string.
Store and unexpected failures are logged with their traceback but answered
with a generic message only.
"""
import logging
from typing import List, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Internal server error"
ROUTE_NOT_FOUND = "Route not found"


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str = GENERIC_ERROR):
        super().__init__(message)
        self.message = message

    def body(self) -> dict:
        return {"error": self.message}


class ValidationFailed(ServiceError):
    status_code = 400

    def __init__(self, resource: str, violations: List[str]):
        super().__init__(f"{resource} validation failed: " + "; ".join(violations))
        self.violations = violations

    def body(self) -> dict:
        return {"error": self.message, "details": self.violations}


class ResourceNotFound(ServiceError):
    status_code = 404

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")


class DuplicateResource(ServiceError):
    status_code = 409

    def __init__(self, resource: str, field: Optional[str] = None):
        super().__init__(f"{resource} already exists")
        # kept for logs only; the body stays field-agnostic
        self.field = field


class StoreError(ServiceError):
    """Failure inside the document store or its driver."""

    def body(self) -> dict:
        # store detail stays in the logs
        return {"error": GENERIC_ERROR}


class InvalidIdentifier(StoreError):
    """Identifier does not match the store's id format (surfaces as 500)."""


# ---------------------------
# Exception handlers
# ---------------------------
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "%s %s failed: %s", request.method, request.url.path, exc,
            exc_info=exc.__cause__ or exc,
        )
    elif isinstance(exc, ValidationFailed):
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.body())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # 404/405 from the router mean no route matched the request
    if exc.status_code in (404, 405):
        return JSONResponse(status_code=404, content={"error": ROUTE_NOT_FOUND})
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        where = ".".join(loc) or "request"
        details.append(f"{where}: {err.get('msg', 'invalid value')}")
    logger.warning("%s %s bad request: %s", request.method, request.url.path, details)
    return JSONResponse(status_code=400, content={"error": "Invalid request", "details": details})


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": GENERIC_ERROR})


def setup_error_handling(app):
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, general_exception_handler)
