from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

CODE_RECORD_TYPE = "code"


class ChatMessage(BaseModel):
    """A chat turn. Keys beyond role and content are kept and forwarded as sent."""

    role: Literal["system", "user", "assistant"]
    content: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class CodeRequest(BaseModel):
    """Request body for generating code.

    ``messages`` may be omitted; the service rejects a missing, empty or
    malformed list with a 400 once the caller is authenticated.
    """

    messages: Optional[list[ChatMessage]] = None


class HistoryCreateRequest(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None


class UsageRecord(BaseModel):
    """A stored code snippet, immutable once created."""

    id: str
    user_id: str
    type: str = CODE_RECORD_TYPE
    title: str
    content: str
    created_at: datetime

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class TrialUsage(BaseModel):
    """Free trial usage for the caller."""

    count: int
    max_free_counts: int
    is_pro: bool

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Response models for API endpoints


class RootResponse(BaseModel):
    """Response model for root endpoint."""

    message: str
    version: str
    docs: dict[str, str]


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: Literal["healthy", "degraded"]
    openai_configured: bool
    version: str


class ErrorResponse(BaseModel):
    """Body returned for every gateway error."""

    detail: str = Field(description="Client-facing error message")
