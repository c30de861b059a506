"""
Error taxonomy and the FastAPI handlers that turn it into `{"error": "..."}` bodies.
Unexpected failures are logged here and reduced to a generic 500.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class VideoShareError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(VideoShareError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"


class AuthenticationError(VideoShareError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid email or password"


class AuthorizationError(VideoShareError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthorized"


class NotFoundError(VideoShareError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class ConfigurationError(VideoShareError):
    """Missing required configuration. Raised at startup, never while serving."""
    message = "Invalid configuration"


class UnexpectedError(VideoShareError):
    pass


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def videoshare_error_handler(request: Request, exc: VideoShareError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return _error_response(exc.status_code, exc.message)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid request")


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(VideoShareError, videoshare_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
