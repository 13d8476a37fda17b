"""Cohere Chat v1 adapter.

Cohere takes the newest turn as ``message``, earlier turns as
``chat_history`` with upper-case role names, and the leading system prompt
as ``preamble``.
"""

from collections.abc import Sequence
from typing import Any

from model_relay.core.provider.adapters.base import (
    Message,
    PreparedRequest,
    ProviderAdapter,
    bearer_headers,
    content_to_text,
    split_leading_system,
)

COHERE_CHAT_URL = "https://api.cohere.ai/v1/chat"

COHERE_ROLES = {
    "user": "USER",
    "assistant": "CHATBOT",
    "system": "SYSTEM",
}


class CohereAdapter(ProviderAdapter):
    provider = "Cohere"

    def build_request(
        self,
        model_name: str,
        credential: str,
        messages: Sequence[Message],
        tools: list[dict[str, Any]] | None,
        base_url: str | None,
    ) -> PreparedRequest:
        preamble, rest = split_leading_system(messages)

        history = [
            {
                "role": COHERE_ROLES.get(str(m.get("role")), "USER"),
                "message": content_to_text(m.get("content")),
            }
            for m in rest[:-1]
        ]
        message = content_to_text(rest[-1].get("content")) if rest else ""

        payload: dict[str, Any] = {"model": model_name, "message": message}
        if history:
            payload["chat_history"] = history
        if preamble is not None:
            payload["preamble"] = preamble

        return PreparedRequest(
            url=COHERE_CHAT_URL,
            payload=payload,
            headers=bearer_headers(credential),
        )

    def extract_text(self, data: Any) -> str | None:
        if not isinstance(data, dict):
            return None
        text = data.get("text")
        return text if isinstance(text, str) else None
