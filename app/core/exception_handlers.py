"""
Centralized exception handlers.

Register with register_exception_handlers(app). Every error leaves the API
in the {status, message, errors?} envelope; internal details are logged and
never returned to the client.
"""

from typing import Any, Iterable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import AppError, BadRequestError, FieldError, ValidationFailedError
from app.core.logging import get_logger

logger = get_logger(__name__)


def _field_name(loc: tuple[Any, ...]) -> str:
    """Turn a pydantic error location into a field name ('body', 'query' dropped)."""
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header")]
    return ".".join(parts) or "body"


def _format_validation_message(error: dict[str, Any]) -> str:
    err_type = error.get("type", "")
    ctx = error.get("ctx") or {}
    if err_type == "missing":
        return "This field is required"
    if err_type == "string_too_short":
        return f"Minimum length is {ctx.get('min_length')}"
    if err_type == "string_too_long":
        return f"Maximum length is {ctx.get('max_length')}"
    if err_type == "greater_than":
        return f"Must be greater than {ctx.get('gt')}"
    if err_type == "greater_than_equal":
        return f"Must be greater than or equal to {ctx.get('ge')}"
    if err_type == "less_than_equal":
        return f"Must be less than or equal to {ctx.get('le')}"
    if err_type in ("enum", "literal_error"):
        return f"Must be one of: {ctx.get('expected')}"
    if err_type == "value_error" and "email" in str(error.get("msg", "")).lower():
        return "Invalid email format"
    return str(error.get("msg", "Invalid value"))


def field_errors(raw_errors: Iterable[dict[str, Any]]) -> list[FieldError]:
    """Convert pydantic error dicts into client-facing field errors."""
    return [
        FieldError(field=_field_name(tuple(e.get("loc", ()))), message=_format_validation_message(e))
        for e in raw_errors
    ]


def _envelope(status_code: int, message: str, **extra: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"status": status_code, "message": message}
    body.update({k: v for k, v in extra.items() if v})
    return body


def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Return the envelope built from an AppError."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)


def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Map FastAPI request validation to 400 with field-level errors."""
    raw_errors = exc.errors()
    if any(e.get("type") == "json_invalid" for e in raw_errors):
        return _app_error_handler(request, BadRequestError("Invalid request body"))
    return _app_error_handler(request, ValidationFailedError(field_errors(raw_errors)))


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap framework HTTP errors (404 route, 405 method) in the envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(exc.status_code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500 without leaking the cause."""
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app."""
    app.add_exception_handler(AppError, _app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
