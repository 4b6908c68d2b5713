"""
Logging setup for the API.

Installs a stdout handler on the ``goldstar`` logger and an HTTP middleware
that logs each incoming request and the status it was answered with.
"""

import logging
import sys
from fastapi import FastAPI, Request

logger = logging.getLogger("goldstar")


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the package logger.

    Safe to call more than once (the test suite builds several apps);
    the handler is only attached the first time.

    Args:
        level: Log level name, e.g. "INFO" or "DEBUG"

    Returns:
        The configured ``goldstar`` logger
    """
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            '[%(asctime)s] %(levelname)s in %(module)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(logging.getLevelName(level.upper()))

    # Prevent duplicate logs through the root logger (uvicorn configures it)
    logger.propagate = False

    return logger


def install_request_logging(app: FastAPI) -> None:
    """Log every request and the response status."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"Incoming request: {request.method} {request.url.path}")
        logger.debug(f"Request headers: {dict(request.headers)}")
        response = await call_next(request)
        logger.info(f"Response: {response.status_code} for {request.method} {request.url.path}")
        return response
