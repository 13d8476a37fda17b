"""Base infrastructure for provider adapters.

Each adapter turns a provider-agnostic list of ``{role, content}`` messages
into one provider-specific HTTP request and pulls the completion text back
out of the provider's response envelope.
"""

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import httpx

from model_relay.core.error_types import ErrorType
from model_relay.core.exceptions import ProviderError
from model_relay.core.provider.key_selector import NO_CREDENTIAL

logger = logging.getLogger(__name__)

Message = dict[str, Any]


@dataclass(frozen=True)
class PreparedRequest:
    """A provider request ready to be sent."""

    url: str
    payload: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, str] = field(default_factory=dict)


def bearer_headers(credential: str) -> dict[str, str]:
    """Authorization header for bearer-token providers.

    The anonymous sentinel is never sent upstream.
    """
    headers = {"Content-Type": "application/json"}
    if credential and credential != NO_CREDENTIAL:
        headers["Authorization"] = f"Bearer {credential}"
    return headers


def content_to_text(content: Any) -> str:
    """Flatten message content to plain text.

    Strings pass through, OpenAI-style part lists keep their text parts, and
    anything else is serialized as JSON.
    """
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = [
            str(part.get("text", ""))
            for part in content
            if isinstance(part, dict) and part.get("type") == "text"
        ]
        if parts:
            return "\n".join(parts)
    return json.dumps(content, ensure_ascii=False)


def split_leading_system(messages: Sequence[Message]) -> tuple[str | None, list[Message]]:
    """Separate a leading system message from the rest of the conversation."""
    if messages and messages[0].get("role") == "system":
        return content_to_text(messages[0].get("content")), list(messages[1:])
    return None, list(messages)


class ProviderAdapter(ABC):
    """Base class for all provider adapters.

    Subclasses implement ``build_request`` and ``extract_text``; ``invoke``
    owns the HTTP exchange and the error contract shared by every provider:
    non-2xx responses and transport failures become ProviderError, and an
    unrecognized success envelope is returned as raw JSON text.
    """

    provider: str = ""
    supports_tools: bool = False

    @abstractmethod
    def build_request(
        self,
        model_name: str,
        credential: str,
        messages: Sequence[Message],
        tools: list[dict[str, Any]] | None,
        base_url: str | None,
    ) -> PreparedRequest:
        """Build the provider request.

        ``tools`` is None unless the adapter declares ``supports_tools``.
        """

    @abstractmethod
    def extract_text(self, data: Any) -> str | None:
        """Return the completion text, or None if the envelope lacks it."""

    def transport_error_message(self, error: httpx.HTTPError) -> str:
        return f"{type(error).__name__}: {error}"

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
        """Send one chat request and return the completion text.

        Raises:
            ProviderError: On non-2xx status, timeout, transport failure or a
                request that cannot be built (bad base_url, unencodable key).
        """
        name = provider or self.provider
        try:
            request = self.build_request(
                model_name,
                credential,
                messages,
                tools if self.supports_tools else None,
                base_url,
            )
            response = await client.post(
                request.url,
                json=request.payload,
                headers=request.headers,
                params=request.params or None,
            )
        except httpx.TimeoutException as e:
            raise ProviderError(
                name, None, f"request timed out: {e}", error_type=ErrorType.UPSTREAM_TIMEOUT
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(name, None, self.transport_error_message(e)) from e
        except (httpx.InvalidURL, ValueError) as e:
            # Bad base_url or a key that cannot be encoded into a header
            raise ProviderError(name, None, f"invalid request: {type(e).__name__}: {e}") from e

        if not response.is_success:
            raise ProviderError(name, response.status_code, response.text)

        try:
            data = response.json()
        except ValueError:
            return response.text

        text = self.extract_text(data)
        if text is None:
            logger.debug(f"{name} response had no completion text, returning raw body")
            return json.dumps(data, ensure_ascii=False)
        return text
