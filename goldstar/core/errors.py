"""
Error taxonomy shared by the services, and the handlers that turn it into
JSON responses.
"""

import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("goldstar")


class ServiceError(Exception):
    """Base class for failures that map onto an HTTP status."""
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Missing or malformed input."""
    status_code = 400


class ImageDecodeError(ServiceError):
    """The supplied bytes are not a decodable image."""
    status_code = 400


class NotFound(ServiceError):
    status_code = 404


class StorageUnavailable(ServiceError):
    """The database could not be read or written."""
    status_code = 500


class DeliverySubmissionError(ServiceError):
    """The mail transport refused or failed to accept a message."""
    status_code = 500


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
