"""
In-memory storage for saved code snippets, free trial counters and subscriptions.

This module implements the reference store behind the gateway. A single
MemoryStore satisfies all three store interfaces (MessageStore, QuotaOracle,
SubscriptionOracle) so that one shared instance can back every dependency.

Thread Safety:
    All operations use an asyncio.Lock so that a read always reflects prior
    writes and the trial counter increment is atomic per caller.
"""

import asyncio
import time
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from code_gateway.models import UsageRecord
from code_gateway.storage.base import MessageStore, QuotaOracle, SubscriptionOracle


class MemoryStore(MessageStore, QuotaOracle, SubscriptionOracle):
    """
    Async-safe store for all caller state.

    State Categories:
        - Records: saved code snippets with a creation sequence number
        - Trial usage: number of free generations consumed per user_id
        - Subscriptions: subscription id and current period end per user_id

    Attributes:
        max_free_counts: Free generations allowed before a subscription is required
        grace_period_s: Seconds a subscription stays active after its period ends
        _lock: Instance-level lock for all state operations
    """

    def __init__(
        self,
        max_free_counts: int = 5,
        grace_period_s: int = 86400,
        clock: Callable[[], float] = time.time,
    ):
        self.max_free_counts = max_free_counts
        self.grace_period_s = grace_period_s
        self._clock = clock

        self._lock = asyncio.Lock()

        # Saved snippets, kept with their insertion sequence for stable ordering
        self._records: list[tuple[int, UsageRecord]] = []
        self._sequence = 0

        self._trial_usage: dict[str, int] = {}

        # user_id -> (subscription_id, current_period_end_ts)
        self._subscriptions: dict[str, tuple[Optional[str], float]] = {}

    async def reset(self) -> None:
        """
        Reset all state in the memory store to initial values.

        Primarily used for testing or system resets.
        """
        async with self._lock:
            self._records.clear()
            self._sequence = 0
            self._trial_usage.clear()
            self._subscriptions.clear()

    async def list_by_user_and_type(self, user_id: str, record_type: str) -> list[UsageRecord]:
        """
        Get all records of a type saved by a user.

        Args:
            user_id: Unique user identifier
            record_type: Record type, e.g. "code"

        Returns:
            list[UsageRecord]: Records ordered by creation time, newest first.
                               Records created in the same clock tick keep
                               reverse insertion order.
        """
        async with self._lock:
            matching = [
                (seq, record)
                for seq, record in self._records
                if record.user_id == user_id and record.type == record_type
            ]
        matching.sort(key=lambda item: (item[1].created_at, item[0]), reverse=True)
        return [record for _, record in matching]

    async def create(self, user_id: str, record_type: str, title: str, content: str) -> UsageRecord:
        """
        Save a new record for a user.

        Args:
            user_id: Unique user identifier
            record_type: Record type, e.g. "code"
            title: Record title
            content: Record content

        Returns:
            UsageRecord: The stored record with generated id and timestamp
        """
        record = UsageRecord(
            id=str(uuid.uuid4()),
            user_id=user_id,
            type=record_type,
            title=title,
            content=content,
            created_at=datetime.now(timezone.utc),
        )
        async with self._lock:
            self._sequence += 1
            self._records.append((self._sequence, record))
        return record

    async def has_remaining_trial(self, user_id: str) -> bool:
        async with self._lock:
            return self._trial_usage.get(user_id, 0) < self.max_free_counts

    async def increment_trial_usage(self, user_id: str) -> None:
        """
        Add one to a user's free trial usage, starting the counter at 1.

        Args:
            user_id: Unique user identifier
        """
        async with self._lock:
            self._trial_usage[user_id] = self._trial_usage.get(user_id, 0) + 1

    async def get_trial_usage(self, user_id: str) -> int:
        async with self._lock:
            return self._trial_usage.get(user_id, 0)

    async def set_subscription(self, user_id: str, subscription_id: Optional[str], current_period_end: float):
        """
        Record a user's subscription (for admin purposes and tests).

        Args:
            user_id: Unique user identifier
            subscription_id: Billing provider subscription id, None when cancelled
            current_period_end: Unix timestamp the paid period ends at
        """
        async with self._lock:
            self._subscriptions[user_id] = (subscription_id, current_period_end)

    async def is_active(self, user_id: str) -> bool:
        """
        Check whether a user has an active subscription.

        A subscription stays active for grace_period_s after its period ends.

        Args:
            user_id: Unique user identifier

        Returns:
            bool: True if the subscription id is set and the period (plus grace) has not ended
        """
        async with self._lock:
            subscription = self._subscriptions.get(user_id)
        if subscription is None:
            return False
        subscription_id, period_end = subscription
        if not subscription_id:
            return False
        return period_end + self.grace_period_s > self._clock()
