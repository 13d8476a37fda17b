"""Google Generative Language (Gemini) adapter.

The API key travels as the ``key`` query parameter, the generic
``assistant`` role becomes ``model``, and a leading system message is
hoisted into ``systemInstruction``.
"""

from collections.abc import Sequence
from typing import Any

from model_relay.core.provider.adapters.base import (
    Message,
    PreparedRequest,
    ProviderAdapter,
    content_to_text,
    split_leading_system,
)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"


class GeminiAdapter(ProviderAdapter):
    provider = "Gemini"

    def build_request(
        self,
        model_name: str,
        credential: str,
        messages: Sequence[Message],
        tools: list[dict[str, Any]] | None,
        base_url: str | None,
    ) -> PreparedRequest:
        system_text, rest = split_leading_system(messages)

        contents = [
            {
                "role": "model" if m.get("role") == "assistant" else "user",
                "parts": [{"text": content_to_text(m.get("content"))}],
            }
            for m in rest
        ]
        payload: dict[str, Any] = {"contents": contents}
        if system_text is not None:
            payload["systemInstruction"] = {"parts": [{"text": system_text}]}

        return PreparedRequest(
            url=f"{GEMINI_BASE_URL}/{model_name}:generateContent",
            payload=payload,
            headers={"Content-Type": "application/json"},
            params={"key": credential},
        )

    def extract_text(self, data: Any) -> str | None:
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return None
        return text if isinstance(text, str) else None
