"""Local Ollama adapter (``/api/chat``, non-streaming)."""

from collections.abc import Sequence
from typing import Any

import httpx

from model_relay.core.provider.adapters.base import (
    Message,
    PreparedRequest,
    ProviderAdapter,
    bearer_headers,
)


class OllamaAdapter(ProviderAdapter):
    provider = "Ollama"

    def __init__(self, base_url: str = "http://localhost:11434") -> None:
        self.base_url = base_url.rstrip("/")

    def build_request(
        self,
        model_name: str,
        credential: str,
        messages: Sequence[Message],
        tools: list[dict[str, Any]] | None,
        base_url: str | None,
    ) -> PreparedRequest:
        root = (base_url or self.base_url).rstrip("/")
        return PreparedRequest(
            url=f"{root}/api/chat",
            payload={"model": model_name, "messages": list(messages), "stream": False},
            headers=bearer_headers(credential),
        )

    def extract_text(self, data: Any) -> str | None:
        if not isinstance(data, dict):
            return None
        message = data.get("message")
        if not isinstance(message, dict):
            return None
        content = message.get("content")
        return content if isinstance(content, str) else None

    def transport_error_message(self, error: httpx.HTTPError) -> str:
        return f"Local Ollama unreachable: {error}"
