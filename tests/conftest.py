"""Shared test fixtures for all tests."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from code_gateway import dependencies
from code_gateway.exceptions import ProviderError
from code_gateway.main import create_app
from code_gateway.models import ChatMessage
from code_gateway.providers.base import CompletionClient
from code_gateway.services.code_service import CodeService
from code_gateway.storage.memory import MemoryStore


class FakeCompletionClient(CompletionClient):
    """Records every forwarded conversation and answers with a fixed message."""

    def __init__(self, configured: bool = True, fail: bool = False):
        super().__init__("fake")
        self._configured = configured
        self.fail = fail
        self.calls: list[list[ChatMessage]] = []
        self.reply = ChatMessage(role="assistant", content="```python\ndef f():\n    pass\n```")

    @property
    def configured(self) -> bool:
        return self._configured

    async def complete(self, messages: list[ChatMessage]) -> ChatMessage:
        self.calls.append(list(messages))
        if self.fail:
            raise ProviderError("upstream exploded", provider_name=self.name)
        return self.reply


class CountingStore(MemoryStore):
    """MemoryStore that counts every call made through the store interfaces."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.calls: list[str] = []

    async def has_remaining_trial(self, user_id):
        self.calls.append("has_remaining_trial")
        return await super().has_remaining_trial(user_id)

    async def increment_trial_usage(self, user_id):
        self.calls.append("increment_trial_usage")
        await super().increment_trial_usage(user_id)

    async def is_active(self, user_id):
        self.calls.append("is_active")
        return await super().is_active(user_id)

    async def list_by_user_and_type(self, user_id, record_type):
        self.calls.append("list_by_user_and_type")
        return await super().list_by_user_and_type(user_id, record_type)

    async def create(self, user_id, record_type, title, content):
        self.calls.append("create")
        return await super().create(user_id, record_type, title, content)


async def exhaust_trial(store: MemoryStore, user_id: str) -> None:
    for _ in range(store.max_free_counts):
        await store.increment_trial_usage(user_id)


async def subscribe(store: MemoryStore, user_id: str, days: int = 30) -> None:
    await store.set_subscription(user_id, "sub_123", store._clock() + days * 86400)


@pytest.fixture
def store():
    """
    Create a fresh store for each test, ensuring test independence.
    """
    return CountingStore(max_free_counts=5)


@pytest.fixture
def completion_client():
    return FakeCompletionClient()


@pytest.fixture
def code_service(store, completion_client):
    return CodeService(store, store, store, completion_client, max_free_counts=store.max_free_counts)


@pytest.fixture
def client(store, completion_client):
    """
    Create a TestClient with isolated test dependencies.

    This fixture overrides the app's dependency injection to use
    test-specific instances, ensuring each test runs in isolation.
    """
    app = create_app()

    app.dependency_overrides.update(
        {
            dependencies.get_memory: lambda: store,
            dependencies.get_completion_client: lambda: completion_client,
        }
    )

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def run():
    """Run a store coroutine from a sync test."""
    return asyncio.run
