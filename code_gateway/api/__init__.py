"""
API routers for the Code Gateway.

This package contains all API endpoint routers organized by functionality.
"""

from code_gateway.api.code import router as code_router
from code_gateway.api.health import router as health_router

__all__ = ["health_router", "code_router"]
