"""Error types and HTTP error handling for the conversion API."""

import logging
import re

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

# Regex to detect internal paths (Unix/Linux focus for container env)
_PATH_PATTERN = re.compile(r"(\/(?:app|home|var|tmp|usr|etc|opt|root|Users)\/[\w\-\.\/]+)")


class CaptionTitlesError(Exception):
    """Base class for errors raised by the file and HTTP collaborators."""


class UnrecognizedCaptionFormat(CaptionTitlesError):
    """Neither caption grammar produced a single cue."""

    def __init__(self, status_message: str = "Could not detect SRT or ITT"):
        super().__init__(status_message)
        self.status_message = status_message


class ReferenceNotFound(CaptionTitlesError):
    """A reference FCPXML path does not exist or holds no timeline document."""


def sanitize_message(msg: str) -> str:
    """
    Sanitize string messages to prevent leaking internal details.
    """
    if _PATH_PATTERN.search(msg):
        return _PATH_PATTERN.sub("[INTERNAL_PATH]", msg)
    return msg


def create_error_response(status_code: int, message: str, error_code: str | None = None) -> JSONResponse:
    content = {"detail": message}
    if error_code:
        content["code"] = error_code
    return JSONResponse(status_code=status_code, content=content)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Handle explicit HTTP exceptions (e.g. 404, 413).
    """
    return create_error_response(exc.status_code, sanitize_message(str(exc.detail)))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle request validation errors.
    """
    sanitized_errors = []
    for err in exc.errors():
        loc = ".".join([str(x) for x in err.get("loc", [])])
        msg = err.get("msg", "Invalid input")
        sanitized_errors.append(f"{loc}: {msg}")

    error_msg = "; ".join(sanitized_errors)
    return create_error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        f"Validation Error: {sanitize_message(error_msg)}",
    )


async def unrecognized_format_handler(request: Request, exc: UnrecognizedCaptionFormat):
    return create_error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        exc.status_message,
        "UNRECOGNIZED_FORMAT",
    )


async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch-all for unhandled exceptions.
    """
    logger.exception("Unhandled exception", extra={"data": {"path": request.url.path}})
    return create_error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An internal server error occurred.",
        "INTERNAL_ERROR",
    )


def register_exception_handlers(app: FastAPI):
    """
    Registrar for all exception handlers.
    """
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(UnrecognizedCaptionFormat, unrecognized_format_handler)
    app.add_exception_handler(Exception, global_exception_handler)
