from abc import ABC, abstractmethod

from code_gateway.models import ChatMessage


class CompletionClient(ABC):
    """
    Abstract base class for upstream completion APIs.
    """

    def __init__(self, name: str):
        self.name = name

    @property
    @abstractmethod
    def configured(self) -> bool:
        """True when the upstream credential is present."""

    @abstractmethod
    async def complete(self, messages: list[ChatMessage]) -> ChatMessage:
        pass
