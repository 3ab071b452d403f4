"""Application-level exceptions and FastAPI exception handlers."""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: str | None = None):
        msg = f"{entity} not found" if not entity_id else f"{entity} '{entity_id}' not found"
        super().__init__(msg, status_code=404, code="NOT_FOUND")


class ConflictError(AppException):
    def __init__(self, message: str):
        super().__init__(message, status_code=409, code="CONFLICT")


class ValidationError(AppException):
    def __init__(self, message: str):
        super().__init__(message, status_code=422, code="VALIDATION_ERROR")


class PreconditionError(AppException):
    """Operation invoked on a domain whose status does not allow it."""

    def __init__(self, message: str):
        super().__init__(message, status_code=409, code="PRECONDITION_FAILED")


class InvalidTransitionError(PreconditionError):
    def __init__(self, current: str | None, event: str):
        self.current = current
        self.event = event
        super().__init__(f"Event '{event}' is not allowed from status '{current}'")


class StaleTransitionError(AppException):
    """The stored status changed between read and write; another caller won."""

    def __init__(self, domain_id: str, expected: str | None):
        self.domain_id = domain_id
        self.expected = expected
        super().__init__(
            f"Domain '{domain_id}' is no longer in status '{expected}'",
            status_code=409,
            code="STALE_TRANSITION",
        )


class ProviderError(AppException):
    """An external provider (hosting API, DNS resolver) failed or timed out."""

    def __init__(
        self,
        message: str,
        payload: Any = None,
        status: int | None = None,
        code: str = "PROVIDER_ERROR",
    ):
        self.payload = payload
        self.status = status
        super().__init__(message, status_code=502, code=code)


class ProviderNotConfiguredError(ProviderError):
    def __init__(self, message: str = "Hosting provider is not configured"):
        super().__init__(message, code="PROVIDER_NOT_CONFIGURED")


class DnsLookupError(ProviderError):
    def __init__(self, message: str, payload: Any = None):
        super().__init__(message, payload=payload, code="DNS_LOOKUP_ERROR")


class HostRegistrationError(ProviderError):
    """Registration was rejected; the failure is already recorded on the domain."""

    def __init__(self, message: str, payload: Any = None, status: int | None = None):
        super().__init__(message, payload=payload, status=status, code="REGISTRATION_FAILED")


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def _error_body(code: str, message: str) -> dict:
    return {"error": message, "code": code}


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.code, exc.message),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = first.get("msg", "Invalid request")
        if location:
            message = f"{location}: {message}"
        return JSONResponse(
            status_code=422,
            content=_error_body("VALIDATION_ERROR", message),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        code = "NOT_FOUND" if exc.status_code == 404 else "HTTP_ERROR"
        message = "Resource not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(code, message),
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=_error_body("INTERNAL_ERROR", "An unexpected error occurred"),
        )
