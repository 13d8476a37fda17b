"""Adapters for providers that speak the OpenAI Chat Completions format."""

from collections.abc import Sequence
from typing import Any

import httpx

from model_relay.core.provider.adapters.base import (
    Message,
    PreparedRequest,
    ProviderAdapter,
    bearer_headers,
)


class OpenAICompatibleAdapter(ProviderAdapter):
    """Bearer-token provider with an OpenAI-shaped request and response.

    Messages and tools are forwarded verbatim.
    """

    def __init__(
        self,
        provider: str,
        endpoint: str,
        *,
        supports_tools: bool = True,
        temperature: float | None = None,
    ) -> None:
        self.provider = provider
        self.endpoint = endpoint
        self.supports_tools = supports_tools
        self.temperature = temperature

    def endpoint_for(self, base_url: str | None) -> str:
        return self.endpoint

    def build_request(
        self,
        model_name: str,
        credential: str,
        messages: Sequence[Message],
        tools: list[dict[str, Any]] | None,
        base_url: str | None,
    ) -> PreparedRequest:
        payload: dict[str, Any] = {"model": model_name, "messages": list(messages)}
        if self.temperature is not None:
            payload["temperature"] = self.temperature
        if tools:
            payload["tools"] = tools

        return PreparedRequest(
            url=self.endpoint_for(base_url),
            payload=payload,
            headers=bearer_headers(credential),
        )

    def extract_text(self, data: Any) -> str | None:
        if not isinstance(data, dict):
            return None
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            return None
        first = choices[0]
        if not isinstance(first, dict):
            return None
        message = first.get("message")
        if not isinstance(message, dict):
            return None
        content = message.get("content")
        return content if isinstance(content, str) else None


class GenericOpenAICompatibleAdapter(OpenAICompatibleAdapter):
    """Fallback for provider tags without a dedicated adapter.

    Uses the model's ``base_url`` as the OpenAI-compatible root. Without one
    there is nothing to call, so a diagnostic string is returned instead of
    performing a request.
    """

    def __init__(self) -> None:
        super().__init__(provider="OpenAICompatible", endpoint="", supports_tools=True)

    def endpoint_for(self, base_url: str | None) -> str:
        if not base_url:
            raise ValueError("generic adapter requires a base_url")
        return f"{base_url.rstrip('/')}/chat/completions"

    async def invoke(
        self,
        client: httpx.AsyncClient,
        model_name: str,
        credential: str,
        messages: Sequence[Message],
        tools: list[dict[str, Any]] | None = None,
        *,
        base_url: str | None = None,
        provider: str | None = None,
    ) -> str:
        if not base_url:
            return f"Provider {provider or self.provider} not fully implemented yet."
        return await super().invoke(
            client,
            model_name,
            credential,
            messages,
            tools,
            base_url=base_url,
            provider=provider,
        )
