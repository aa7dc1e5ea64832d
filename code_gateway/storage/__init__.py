"""
Storage layer for the Code Gateway.
"""

from code_gateway.storage.base import MessageStore, QuotaOracle, SubscriptionOracle
from code_gateway.storage.memory import MemoryStore

__all__ = ["MessageStore", "QuotaOracle", "SubscriptionOracle", "MemoryStore"]
