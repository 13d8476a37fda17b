"""Provider adapters, one per request/response variant."""

from model_relay.core.provider.adapters.anthropic import AnthropicAdapter, to_anthropic_payload
from model_relay.core.provider.adapters.base import PreparedRequest, ProviderAdapter
from model_relay.core.provider.adapters.cohere import CohereAdapter
from model_relay.core.provider.adapters.gemini import GeminiAdapter
from model_relay.core.provider.adapters.ollama import OllamaAdapter
from model_relay.core.provider.adapters.openai_compat import (
    GenericOpenAICompatibleAdapter,
    OpenAICompatibleAdapter,
)

__all__ = [
    "AnthropicAdapter",
    "CohereAdapter",
    "GeminiAdapter",
    "GenericOpenAICompatibleAdapter",
    "OllamaAdapter",
    "OpenAICompatibleAdapter",
    "PreparedRequest",
    "ProviderAdapter",
    "to_anthropic_payload",
]
