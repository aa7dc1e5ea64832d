from abc import ABC, abstractmethod

from code_gateway.models import UsageRecord


class MessageStore(ABC):
    """
    Persistent store for code snippets saved by callers.
    """

    @abstractmethod
    async def list_by_user_and_type(self, user_id: str, record_type: str) -> list[UsageRecord]:
        """Return the caller's records of the given type, newest first."""

    @abstractmethod
    async def create(self, user_id: str, record_type: str, title: str, content: str) -> UsageRecord:
        """Persist a new record and return it."""


class QuotaOracle(ABC):
    """
    Free trial usage counter per caller.
    """

    @abstractmethod
    async def has_remaining_trial(self, user_id: str) -> bool:
        pass

    @abstractmethod
    async def increment_trial_usage(self, user_id: str) -> None:
        pass

    @abstractmethod
    async def get_trial_usage(self, user_id: str) -> int:
        pass


class SubscriptionOracle(ABC):
    """
    Subscription status per caller.
    """

    @abstractmethod
    async def is_active(self, user_id: str) -> bool:
        pass
