"""
Middleware and error handlers for the Code Gateway.

This module contains HTTP middleware for logging and request tracking,
as well as the exception handler that maps gateway errors to responses.
"""

import time
import uuid

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from code_gateway.exceptions import GatewayError, InternalError


async def logging_middleware(request: Request, call_next):
    """
    HTTP middleware that logs all requests and responses with timing information.

    Assigns a unique request ID to each request for tracing and logs the
    request method, path, status code, and latency. The request ID is also
    added to response headers as 'X-Request-ID' for debugging.

    Args:
        request: The incoming HTTP request
        call_next: Function to call the next middleware/endpoint

    Returns:
        Response from the endpoint with X-Request-ID header
    """
    request_id = str(uuid.uuid4())
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)

    start_time = time.time()
    try:
        response = await call_next(request)
        process_time = time.time() - start_time

        response.headers["X-Request-ID"] = request_id

        structlog.get_logger().info(
            "http_request",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            latency_s=process_time,
        )
        return response
    except Exception as e:
        process_time = time.time() - start_time
        structlog.get_logger().error(
            "request_failed",
            method=request.method,
            path=request.url.path,
            latency_s=process_time,
            error=str(e),
        )
        raise


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """
    Handler for all GatewayError exceptions.

    Each error class carries its own status code and client-facing detail,
    e.g. 401 for UnauthorizedError or 404 for CloudStorageUnavailableError.

    Args:
        request: The HTTP request that triggered the error
        exc: The GatewayError exception

    Returns:
        JSONResponse with the error's status code
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handler for exceptions raised outside the service layer, e.g. in a dependency.

    Logs the failure and returns the generic InternalError body without details.

    Args:
        request: The HTTP request that triggered the error
        exc: The unhandled exception

    Returns:
        JSONResponse with 500 status code
    """
    structlog.get_logger().error(
        "unhandled_exception",
        method=request.method,
        path=request.url.path,
        error=str(exc),
    )
    return JSONResponse(
        status_code=InternalError.status_code,
        content={"detail": InternalError.detail},
    )


def register_middleware(app: FastAPI) -> None:
    """
    Register all middleware with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.middleware("http")(logging_middleware)


def register_error_handlers(app: FastAPI) -> None:
    """
    Register all custom exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
