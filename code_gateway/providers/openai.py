from openai import APIError, AsyncOpenAI

from code_gateway.exceptions import ProviderError
from code_gateway.models import ChatMessage
from code_gateway.providers.base import CompletionClient


class OpenAICompletionClient(CompletionClient):
    """
    OpenAI implementation of the CompletionClient.
    Handles communication with the OpenAI chat completions API.
    """

    def __init__(self, api_key: str, model: str, timeout_s: float = 60.0):
        super().__init__("openai")
        self.api_key = api_key
        self.model = model
        self.timeout_s = timeout_s
        self._client = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @property
    def client(self) -> AsyncOpenAI:
        # Built on first use
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key, timeout=self.timeout_s, max_retries=0)
        return self._client

    async def complete(self, messages: list[ChatMessage]) -> ChatMessage:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[message.model_dump(exclude_none=True) for message in messages],
                n=1,
            )
        except APIError as e:
            raise ProviderError(f"OpenAI API error: {str(e)}", provider_name=self.name)

        if not response.choices:
            raise ProviderError("OpenAI returned no choices", provider_name=self.name)

        return ChatMessage.model_validate(response.choices[0].message.model_dump(exclude_none=True))
