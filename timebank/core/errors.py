import logging
from typing import Any, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class IntegrationNotConfigured(Exception):
    """An optional integration is missing its environment variables."""

    def __init__(self, missing: List[str]):
        super().__init__(f"Missing environment variables: {', '.join(missing)}")
        self.missing = missing


class UpstreamError(Exception):
    """A storage or third-party call failed. Surfaced as-is, never retried."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code or status.HTTP_502_BAD_GATEWAY
        self.details = details


class FieldValidationError(ValueError):
    """Validation done outside FastAPI's request parsing. `errors` is already [{field, message}]."""

    def __init__(self, errors: List[dict]):
        super().__init__("Validation failed")
        self.errors = errors


def error_payload(error: str, details: Any = None) -> dict:
    payload = {"success": False, "error": error}
    if details is not None:
        payload["details"] = details
    return payload


def field_errors(errors) -> List[dict]:
    """Flatten pydantic error dicts to [{field, message}]"""
    flattened = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        flattened.append({"field": ".".join(loc) or "__root__", "message": err.get("msg", "Invalid value")})
    return flattened


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail if isinstance(exc.detail, str) else "Request failed"
    details = None if isinstance(exc.detail, str) else exc.detail
    return JSONResponse(
        error_payload(detail, details),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Caller mistakes, not server errors: no error-level logging
    return JSONResponse(
        error_payload("Validation failed", field_errors(exc.errors())),
        status_code=422,
    )


async def field_validation_exception_handler(request: Request, exc: FieldValidationError):
    return JSONResponse(error_payload("Validation failed", exc.errors), status_code=422)


async def upstream_exception_handler(request: Request, exc: UpstreamError):
    logger.error("Upstream failure on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(error_payload(exc.message, exc.details), status_code=exc.status_code)


async def catch_unhandled(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            error_payload("Internal server error"),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(FieldValidationError, field_validation_exception_handler)
    app.add_exception_handler(UpstreamError, upstream_exception_handler)
    app.middleware("http")(catch_unhandled)
