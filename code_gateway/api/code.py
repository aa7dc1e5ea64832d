"""
Code generation and snippet history routes.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Request

from code_gateway.auth import resolve_user_id
from code_gateway.dependencies import get_code_service
from code_gateway.models import (
    ChatMessage,
    ErrorResponse,
    TrialUsage,
    UsageRecord,
)
from code_gateway.services.code_service import CodeService

router = APIRouter(
    prefix="/api/code",
    tags=["code"],
    responses={
        401: {"model": ErrorResponse, "description": "Unauthorized - No caller identity"},
        500: {"model": ErrorResponse, "description": "Internal Error"},
    },
)


async def read_json_body(request: Request) -> Any:
    """
    Read the request body as raw JSON.

    A missing or unparseable body is returned as None; its fields are
    validated by the service once the caller is authenticated.
    """
    try:
        return await request.json()
    except ValueError:
        return None


def _field(body: Any, name: str) -> Any:
    return body.get(name) if isinstance(body, dict) else None


@router.post(
    "",
    response_model=ChatMessage,
    summary="Generate code",
    description="""
    Forward a conversation to the completion API and return the generated message.

    A fixed system instruction is prepended so that the model answers only in
    markdown code snippets. Callers without an active subscription consume one
    free generation per successful request.

    **Error Scenarios:**
    - 401: No caller identity
    - 500: OpenAI API key not configured, or the upstream call failed
    - 400: `messages` missing, empty or malformed
    - 403: Free trial expired and no active subscription
    """,
    responses={
        400: {"model": ErrorResponse, "description": "Bad Request - Messages are required"},
        403: {"model": ErrorResponse, "description": "Forbidden - Free trial expired"},
    },
)
async def generate_code(
    body: Any = Depends(read_json_body),
    user_id: Optional[str] = Depends(resolve_user_id),
    code_service: CodeService = Depends(get_code_service),
) -> ChatMessage:
    return await code_service.generate(user_id, _field(body, "messages"))


@router.get(
    "",
    response_model=list[UsageRecord],
    summary="List saved snippets",
    description="Return the caller's saved code snippets, newest first.",
    responses={
        404: {"model": ErrorResponse, "description": "Not Found - No cloud storage for free trial"},
    },
)
async def list_snippets(
    user_id: Optional[str] = Depends(resolve_user_id),
    code_service: CodeService = Depends(get_code_service),
) -> list[UsageRecord]:
    return await code_service.list_history(user_id)


@router.put(
    "",
    response_model=UsageRecord,
    summary="Save a snippet",
    description="Save a code snippet with a title for the caller and return the stored record.",
    responses={
        400: {"model": ErrorResponse, "description": "Bad Request - Content and title is required"},
        404: {"model": ErrorResponse, "description": "Not Found - No cloud storage for free trial"},
    },
)
async def save_snippet(
    body: Any = Depends(read_json_body),
    user_id: Optional[str] = Depends(resolve_user_id),
    code_service: CodeService = Depends(get_code_service),
) -> UsageRecord:
    return await code_service.create_history(user_id, _field(body, "title"), _field(body, "content"))


@router.get(
    "/usage",
    response_model=TrialUsage,
    summary="Free trial usage",
    description="Return how many free generations the caller has used and whether they are subscribed.",
)
async def trial_usage(
    user_id: Optional[str] = Depends(resolve_user_id),
    code_service: CodeService = Depends(get_code_service),
) -> TrialUsage:
    return await code_service.get_usage(user_id)
