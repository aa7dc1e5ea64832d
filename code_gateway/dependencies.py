"""
Centralized dependency injection for FastAPI.

This module provides singleton instances of core services using FastAPI's
dependency injection system with @lru_cache() for singleton management.

All dependencies can be overridden in tests using app.dependency_overrides.
"""

from functools import lru_cache

from fastapi import Depends

from code_gateway.config import Settings, settings
from code_gateway.providers.base import CompletionClient
from code_gateway.providers.openai import OpenAICompletionClient
from code_gateway.services.code_service import CodeService
from code_gateway.storage.base import MessageStore, QuotaOracle, SubscriptionOracle
from code_gateway.storage.memory import MemoryStore


@lru_cache()
def get_settings() -> Settings:
    """
    Get the application settings.

    Returns:
        Settings: Settings loaded from the environment and .env
    """
    return settings


@lru_cache()
def get_memory() -> MemoryStore:
    """
    Get singleton MemoryStore instance.

    Returns:
        MemoryStore: Shared store for snippets, trial usage and subscriptions
    """
    current = get_settings()
    return MemoryStore(
        max_free_counts=current.max_free_counts,
        grace_period_s=current.subscription_grace_period_s,
    )


def get_message_store(memory: MemoryStore = Depends(get_memory)) -> MessageStore:
    return memory


def get_quota_oracle(memory: MemoryStore = Depends(get_memory)) -> QuotaOracle:
    return memory


def get_subscription_oracle(memory: MemoryStore = Depends(get_memory)) -> SubscriptionOracle:
    return memory


@lru_cache()
def get_completion_client() -> CompletionClient:
    """
    Get singleton upstream completion client.

    Returns:
        CompletionClient: OpenAI client built from the current settings
    """
    current = get_settings()
    return OpenAICompletionClient(
        api_key=current.openai_api_key.get_secret_value(),
        model=current.openai_api_model,
        timeout_s=current.openai_timeout_s,
    )


def get_code_service(
    current: Settings = Depends(get_settings),
    messages: MessageStore = Depends(get_message_store),
    quota: QuotaOracle = Depends(get_quota_oracle),
    subscriptions: SubscriptionOracle = Depends(get_subscription_oracle),
    client: CompletionClient = Depends(get_completion_client),
) -> CodeService:
    """
    Build the CodeService from its (overridable) dependencies.

    Returns:
        CodeService: Request handling service
    """
    return CodeService(messages, quota, subscriptions, client, max_free_counts=current.max_free_counts)
