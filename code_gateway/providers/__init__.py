"""
Upstream completion clients for the Code Gateway.
"""

from code_gateway.providers.base import CompletionClient
from code_gateway.providers.openai import OpenAICompletionClient

__all__ = ["CompletionClient", "OpenAICompletionClient"]
