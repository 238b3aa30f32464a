"""
Error taxonomy and global exception handlers.

Every error leaves the API as ``{"error": ..., "success": false}``;
validation failures add a ``details`` list of ``{field, message}``.
Stack traces and database internals never reach the client.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


# ── Taxonomy ────────────────────────────────────────────────────────
class BulletinError(Exception):
    """Base for errors that map directly onto an HTTP response."""

    status_code: int = 500
    message: str = "Something went wrong on our end. Please try again."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_body(self) -> dict[str, Any]:
        return {"error": self.message, "success": False}


class ValidationFailed(BulletinError):
    status_code = 400
    message = "Please check your input"

    def __init__(
        self,
        message: str | None = None,
        details: list[dict[str, str]] | None = None,
    ) -> None:
        super().__init__(message)
        self.details = details or []

    def to_body(self) -> dict[str, Any]:
        body = super().to_body()
        body["details"] = self.details
        return body


class AuthRequired(BulletinError):
    status_code = 401
    message = "Please log in to continue"


class SessionExpired(BulletinError):
    status_code = 401
    message = "Your session has expired. Please log in again."


class InvalidCredentials(BulletinError):
    status_code = 401
    message = "The email or password you entered is incorrect"


class Forbidden(BulletinError):
    status_code = 403
    message = "You do not have permission to perform this action"


class SelfActionForbidden(BulletinError):
    status_code = 400
    message = "You cannot change your own role or deactivate yourself"


class NotFound(BulletinError):
    status_code = 404
    message = "Not found"


class Conflict(BulletinError):
    status_code = 400
    message = "This record conflicts with an existing one"


class UploadRejected(BulletinError):
    status_code = 400
    message = "Upload failed. Please try again."


class InvalidFileType(UploadRejected):
    message = "Only image files (JPEG, PNG, WebP) are allowed"


class FileTooLarge(UploadRejected):
    message = "File is too large"


class InternalError(BulletinError):
    status_code = 500


# ── Handlers ────────────────────────────────────────────────────────
def _field_path(loc: tuple[Any, ...]) -> str:
    # Drop the leading "body" / "query" / "path" segment
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts)


def _clean_message(msg: str) -> str:
    prefix = "Value error, "
    return msg[len(prefix):] if msg.startswith(prefix) else msg


async def _bulletin_error_handler(_request: Request, exc: BulletinError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Internal error: %s", exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def _request_validation_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = [
        {"field": _field_path(tuple(err.get("loc", ()))), "message": _clean_message(err.get("msg", ""))}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content=ValidationFailed(details=details).to_body())


async def _http_exception_handler(
    _request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = "Endpoint not found"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": message, "success": False},
        headers=getattr(exc, "headers", None),
    )


async def _rate_limit_handler(_request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Rate limit exceeded: %s", exc.detail)
    return JSONResponse(
        status_code=429,
        content={"error": "Too many attempts. Please wait and try again.", "success": False},
    )


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Database integrity error: %s", exc, exc_info=True)
    return JSONResponse(status_code=Conflict.status_code, content=Conflict().to_body())


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(status_code=500, content=InternalError().to_body())


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(status_code=500, content=InternalError().to_body())


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(BulletinError, _bulletin_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
