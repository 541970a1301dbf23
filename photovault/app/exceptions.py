# photovault/app/exceptions.py
"""Error taxonomy and the handlers that render it into the response envelope."""
import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings

logger = logging.getLogger(__name__)


class PhotoVaultError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, detail: Any = None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class ValidationError(PhotoVaultError):
    """Malformed input: empty title, bad token format, bad share target."""

    status_code = 400
    default_message = "Invalid request"


class Unauthenticated(PhotoVaultError):
    """Missing, malformed, expired or unverifiable bearer token."""

    status_code = 401
    default_message = "Authentication required"


class IncompleteIdentity(PhotoVaultError):
    """Token verified but the identity carries no email address."""

    status_code = 403
    default_message = "Email address required"


class PrivateProfile(PhotoVaultError):
    """Public profile requested for a user whose privacy preference is private."""

    status_code = 403
    default_message = "Profile is private"


class NotFoundOrForbidden(PhotoVaultError):
    """Resource missing or caller not entitled. The two are not distinguished."""

    status_code = 404
    default_message = "Not found"


class UpstreamUnavailable(PhotoVaultError):
    """Storage, identity provider or database failure."""

    status_code = 500
    default_message = "Upstream service unavailable"


def error_response(status_code: int, message: str, detail: Any = None) -> JSONResponse:
    content = {"success": False, "error": message}
    if detail is not None and not settings.is_production:
        content["detail"] = detail
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI):

    @app.exception_handler(PhotoVaultError)
    async def photovault_error_handler(request: Request, exc: PhotoVaultError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message} ({exc.detail})")
        else:
            logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        return error_response(exc.status_code, exc.message, exc.detail)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = "Invalid request"
        if errors:
            location = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
            message = f"{location}: {errors[0].get('msg')}" if location else errors[0].get("msg", message)
        return error_response(400, message, [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg")} for err in errors
        ])

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return error_response(500, "Internal server error", repr(exc))

    return app
