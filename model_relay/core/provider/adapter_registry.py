"""Adapter registry mapping provider tags to adapters."""

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from model_relay.core.models import ProviderKind
from model_relay.core.provider.adapters import (
    AnthropicAdapter,
    CohereAdapter,
    GeminiAdapter,
    GenericOpenAICompatibleAdapter,
    OllamaAdapter,
    OpenAICompatibleAdapter,
    ProviderAdapter,
)

logger = logging.getLogger(__name__)

# provider tag -> (endpoint, supports_tools, temperature)
OPENAI_COMPATIBLE_ENDPOINTS: dict[str, tuple[str, bool, float | None]] = {
    ProviderKind.GROQ.value: ("https://api.groq.com/openai/v1/chat/completions", True, 0.7),
    ProviderKind.OPENAI.value: ("https://api.openai.com/v1/chat/completions", True, 0.7),
    ProviderKind.DEEPSEEK.value: ("https://api.deepseek.com/chat/completions", True, None),
    ProviderKind.MISTRAL.value: ("https://api.mistral.ai/v1/chat/completions", True, None),
    ProviderKind.OPENROUTER.value: ("https://openrouter.ai/api/v1/chat/completions", True, None),
    ProviderKind.TOGETHER.value: ("https://api.together.xyz/v1/chat/completions", True, None),
    ProviderKind.PERPLEXITY.value: ("https://api.perplexity.ai/chat/completions", False, None),
    ProviderKind.FIREWORKS.value: (
        "https://api.fireworks.ai/inference/v1/chat/completions",
        True,
        None,
    ),
}


class AdapterRegistry:
    """Central registry of provider adapters.

    Responsibilities:
    - Store adapters by provider tag
    - Resolve unknown tags to the generic OpenAI-compatible adapter
    - Dispatch one chat call through the resolved adapter
    """

    def __init__(self, fallback: ProviderAdapter | None = None) -> None:
        self._adapters: dict[str, ProviderAdapter] = {}
        self._fallback = fallback or GenericOpenAICompatibleAdapter()

    def register(self, adapter: ProviderAdapter) -> None:
        """Register an adapter under its provider tag, replacing any previous one."""
        self._adapters[adapter.provider] = adapter

    def get(self, provider: str) -> ProviderAdapter:
        """Adapter for ``provider``; the generic one for unknown tags."""
        return self._adapters.get(provider, self._fallback)

    async def invoke(
        self,
        provider: str,
        model_name: str,
        credential: str,
        messages: Sequence[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        *,
        client: httpx.AsyncClient,
        base_url: str | None = None,
    ) -> str:
        """Call ``provider`` once and return the completion text.

        Raises:
            ProviderError: If the provider call fails.
        """
        adapter = self.get(provider)
        logger.debug(f"Invoking {provider} model {model_name} via {type(adapter).__name__}")
        return await adapter.invoke(
            client,
            model_name,
            credential,
            messages,
            tools,
            base_url=base_url,
            provider=provider,
        )


def build_default_registry(
    *,
    claude_max_tokens: int = 4096,
    ollama_base_url: str = "http://localhost:11434",
) -> AdapterRegistry:
    """Registry with a dedicated adapter for every provider with a fixed endpoint.

    ``OpenAICompatible``, ``Local`` and unknown tags resolve to the generic
    adapter, which needs the model's ``base_url``.
    """
    registry = AdapterRegistry()

    for provider, (endpoint, supports_tools, temperature) in OPENAI_COMPATIBLE_ENDPOINTS.items():
        registry.register(
            OpenAICompatibleAdapter(
                provider,
                endpoint,
                supports_tools=supports_tools,
                temperature=temperature,
            )
        )

    registry.register(AnthropicAdapter(max_tokens=claude_max_tokens))
    registry.register(GeminiAdapter())
    registry.register(CohereAdapter())
    registry.register(OllamaAdapter(base_url=ollama_base_url))

    return registry
