"""
Code Service for quota-gated code generation and snippet history.

This module contains the CodeService class that authenticates the caller,
enforces the free trial / subscription gate, forwards conversations to the
upstream completion API and records free trial usage.
"""

import functools
from typing import Any, Optional

import structlog
from pydantic import ValidationError

from code_gateway.config import SYSTEM_INSTRUCTION
from code_gateway.exceptions import (
    BadRequestError,
    CloudStorageUnavailableError,
    FreeTrialExpiredError,
    GatewayError,
    InternalError,
    UnauthorizedError,
    UnconfiguredError,
)
from code_gateway.models import (
    CODE_RECORD_TYPE,
    ChatMessage,
    CodeRequest,
    HistoryCreateRequest,
    TrialUsage,
    UsageRecord,
)
from code_gateway.providers.base import CompletionClient
from code_gateway.storage.base import MessageStore, QuotaOracle, SubscriptionOracle

logger = structlog.get_logger()

INSTRUCTION_MESSAGE = ChatMessage(role="system", content=SYSTEM_INSTRUCTION)


def _guarded(operation: str):
    """
    Report any non-gateway failure of an entry point as InternalError.

    Upstream and store errors are logged with their details and surfaced
    to the caller only as a generic 500.
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, user_id: Optional[str], *args, **kwargs):
            try:
                return await func(self, user_id, *args, **kwargs)
            except GatewayError:
                raise
            except Exception as e:
                logger.error("code_request_failed", operation=operation, user_id=user_id, error=str(e))
                raise InternalError() from e

        return wrapper

    return decorator


class CodeService:
    """
    Orchestrates code generation requests and snippet history.

    Every entry point runs the same linear flow:
    1. Auth gate: reject callers without an identity (401)
    2. Input validation where the operation takes input (400)
    3. Quota gate: proceed if the caller has free trial left or is subscribed
    4. The primary action (upstream completion, list or create)
    5. Free trial usage increment, completion path only, non-subscribers only

    The completion path reports a failed quota gate as 403, the history
    paths report it as 404.
    """

    def __init__(
        self,
        messages: MessageStore,
        quota: QuotaOracle,
        subscriptions: SubscriptionOracle,
        client: CompletionClient,
        max_free_counts: int = 5,
    ):
        self.messages = messages
        self.quota = quota
        self.subscriptions = subscriptions
        self.client = client
        self.max_free_counts = max_free_counts

    @staticmethod
    def _require_user(user_id: Optional[str]) -> str:
        if not user_id:
            raise UnauthorizedError()
        return user_id

    async def _check_quota(self, user_id: str) -> tuple[bool, bool]:
        """
        Query both quota predicates.

        Returns:
            (allowed, is_pro): allowed is True if the caller has free trial
            left or an active subscription
        """
        free_trial = await self.quota.has_remaining_trial(user_id)
        is_pro = await self.subscriptions.is_active(user_id)
        return free_trial or is_pro, is_pro

    @_guarded("generate")
    async def generate(self, user_id: Optional[str], messages: Any) -> ChatMessage:
        """
        Forward a conversation to the completion API and return the first choice.

        Args:
            user_id: Caller identity, None if unauthenticated
            messages: Caller conversation as received, forwarded verbatim after the system instruction

        Returns:
            ChatMessage: The upstream's first completion choice

        Raises:
            UnauthorizedError: No caller identity (401)
            UnconfiguredError: Upstream API key missing (500)
            BadRequestError: Messages missing, empty or malformed (400)
            FreeTrialExpiredError: No free trial left and not subscribed (403)
            InternalError: Upstream or store failure (500)
        """
        user_id = self._require_user(user_id)

        if not self.client.configured:
            raise UnconfiguredError()

        if not messages:
            raise BadRequestError("Messages are required")
        try:
            messages = CodeRequest.model_validate({"messages": messages}).messages
        except ValidationError:
            raise BadRequestError("Messages must be a list of role and content objects")

        allowed, is_pro = await self._check_quota(user_id)
        if not allowed:
            logger.warning("free_trial_expired", user_id=user_id)
            raise FreeTrialExpiredError()

        completion = await self.client.complete([INSTRUCTION_MESSAGE, *messages])
        logger.info("completion_forwarded", user_id=user_id, provider=self.client.name, messages=len(messages))

        if not is_pro:
            await self.quota.increment_trial_usage(user_id)
            logger.info("trial_usage_incremented", user_id=user_id)

        return completion

    @_guarded("list_history")
    async def list_history(self, user_id: Optional[str]) -> list[UsageRecord]:
        """
        List the caller's saved code snippets, newest first.

        Raises:
            UnauthorizedError: No caller identity (401)
            CloudStorageUnavailableError: No free trial left and not subscribed (404)
        """
        user_id = self._require_user(user_id)

        allowed, _ = await self._check_quota(user_id)
        if not allowed:
            logger.warning("cloud_storage_denied", user_id=user_id, operation="list")
            raise CloudStorageUnavailableError()

        return await self.messages.list_by_user_and_type(user_id, CODE_RECORD_TYPE)

    @_guarded("create_history")
    async def create_history(self, user_id: Optional[str], title: Any, content: Any) -> UsageRecord:
        """
        Save a code snippet for the caller.

        Raises:
            UnauthorizedError: No caller identity (401)
            BadRequestError: Title or content missing, empty or not text (400)
            CloudStorageUnavailableError: No free trial left and not subscribed (404)
        """
        user_id = self._require_user(user_id)

        if not content or not title:
            raise BadRequestError("Content and title is required")
        try:
            snippet = HistoryCreateRequest.model_validate({"title": title, "content": content})
        except ValidationError:
            raise BadRequestError("Content and title must be text")

        allowed, _ = await self._check_quota(user_id)
        if not allowed:
            logger.warning("cloud_storage_denied", user_id=user_id, operation="create")
            raise CloudStorageUnavailableError()

        record = await self.messages.create(user_id, CODE_RECORD_TYPE, snippet.title, snippet.content)
        logger.info("history_created", user_id=user_id, record_id=record.id)
        return record

    @_guarded("get_usage")
    async def get_usage(self, user_id: Optional[str]) -> TrialUsage:
        """Return the caller's free trial usage and subscription flag."""
        user_id = self._require_user(user_id)

        count = await self.quota.get_trial_usage(user_id)
        is_pro = await self.subscriptions.is_active(user_id)
        return TrialUsage(count=count, max_free_counts=self.max_free_counts, is_pro=is_pro)
