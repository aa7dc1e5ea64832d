"""
Health check and root endpoint routes.
"""

from fastapi import APIRouter, Depends

from code_gateway import __version__
from code_gateway.dependencies import get_completion_client
from code_gateway.models import HealthResponse, RootResponse
from code_gateway.providers.base import CompletionClient

router = APIRouter(tags=["health"])


@router.get(
    "/",
    response_model=RootResponse,
    summary="Service information",
    description="Returns basic service information and API documentation links",
)
async def root() -> RootResponse:
    """Root endpoint with service information."""
    return RootResponse(
        message="Welcome to Code Gateway",
        version=__version__,
        docs={"swagger": "/docs", "redoc": "/redoc"},
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="""
    Check the health of the service.

    Returns 'healthy' if the upstream completion API credential is configured.
    Returns 'degraded' otherwise; history endpoints keep working but code
    generation answers 500.
    """,
)
async def health(client: CompletionClient = Depends(get_completion_client)) -> HealthResponse:
    return HealthResponse(
        status="healthy" if client.configured else "degraded",
        openai_configured=client.configured,
        version=__version__,
    )
