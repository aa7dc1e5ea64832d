"""
Main application module for the Code Gateway.

Contains the create_app factory function for configuring and initializing
the FastAPI application with all routers, middleware, and error handlers.
"""

from fastapi import FastAPI

from code_gateway import __version__
from code_gateway.api import code_router, health_router
from code_gateway.config import settings
from code_gateway.logging_config import configure_logging
from code_gateway.middleware import register_error_handlers, register_middleware


def create_app() -> FastAPI:
    """
    Creates and configures the FastAPI application instance.

    Sets up logging, middleware, error handlers, and API routers.

    Dependency injection is handled through code_gateway/dependencies.py using
    @lru_cache() for singleton management.

    Returns:
        Configured FastAPI application
    """
    configure_logging(settings.log_dir, settings.log_level)

    app = FastAPI(
        title="Code Gateway",
        description="Quota-gated code generation proxy with saved snippet history.",
        version=__version__,
    )

    register_error_handlers(app)
    register_middleware(app)

    app.include_router(health_router)
    app.include_router(code_router)

    return app


app = create_app()
