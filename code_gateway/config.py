from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SYSTEM_INSTRUCTION = (
    "You are a code generator. You must answer only in markdown code snippets. "
    "Use code comments for explanations."
)


class Settings(BaseSettings):
    env: str = "local"
    openai_api_key: SecretStr = SecretStr("")
    openai_api_model: str = "gpt-3.5-turbo"
    openai_timeout_s: float = 60.0

    # Free trial configuration
    max_free_counts: int = Field(default=5, gt=0, description="Free generations per user before a subscription is required")
    subscription_grace_period_s: int = Field(
        default=86400, ge=0, description="Seconds a subscription stays active after its period ends"
    )

    # Identity header set by the upstream auth proxy
    auth_header: str = "X-User-Id"

    log_dir: str = "logs"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @field_validator("openai_timeout_s")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("openai_timeout_s must be positive")
        return v

    @field_validator("auth_header")
    @classmethod
    def validate_auth_header(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("auth_header must not be empty")
        return v.strip()

    model_config = SettingsConfigDict(env_file=".env")


settings = Settings()
