# planeta_agua/core/error_handlers.py

import logging
import time
import traceback
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from .exceptions import PlanetaAguaError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Erro interno do servidor."


def setup_error_handlers(app: FastAPI):
    """Set up global error handlers for the FastAPI application."""

    @app.exception_handler(PlanetaAguaError)
    async def planeta_agua_error_handler(request: Request, exc: PlanetaAguaError):
        """Handle errors raised by routes and services."""
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            f"{exc.code.value} on {request.method} {request.url.path}: {exc.message}",
            extra={"details": exc.details, "status_code": exc.status_code},
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle standard HTTP exceptions with the API's error format."""
        logger.warning(f"HTTP Exception {exc.status_code} on {request.method} {request.url.path}: {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other exceptions with proper logging."""
        logger.error(
            f"Unhandled exception: {type(exc).__name__}: {exc}",
            extra={
                "request_url": str(request.url),
                "request_method": request.method,
                "traceback": traceback.format_exc(),
            },
        )
        return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})


async def add_request_id_middleware(request: Request, call_next):
    """Tag each request with an id and log its outcome."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    started = time.perf_counter()

    response = await call_next(request)

    elapsed_ms = (time.perf_counter() - started) * 1000
    response.headers["X-Request-ID"] = request_id
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms) [{request_id}]")
    return response
