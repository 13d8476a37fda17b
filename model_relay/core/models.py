"""Data model shared by the registry, the orchestrator and the call log."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEFAULT_PRIORITY = 99
DEFAULT_DAILY_LIMIT = 5000


class ProviderKind(str, Enum):
    """Provider tags with a dedicated adapter.

    Any other tag found in the registry is routed to the generic
    OpenAI-compatible adapter.
    """

    GROQ = "Groq"
    GEMINI = "Gemini"
    CLAUDE = "Claude"
    OPENAI = "OpenAI"
    DEEPSEEK = "DeepSeek"
    MISTRAL = "Mistral"
    OLLAMA = "Ollama"
    OPENROUTER = "OpenRouter"
    TOGETHER = "Together"
    PERPLEXITY = "Perplexity"
    FIREWORKS = "Fireworks"
    COHERE = "Cohere"
    OPENAI_COMPATIBLE = "OpenAICompatible"
    LOCAL = "Local"


# Providers that may be called without any credential
NO_AUTH_PROVIDERS = frozenset({ProviderKind.OLLAMA.value, ProviderKind.LOCAL.value})


def provider_requires_auth(provider: str) -> bool:
    return provider not in NO_AUTH_PROVIDERS


@dataclass(frozen=True)
class Model:
    """Snapshot of one registry entry.

    The core never caches these: a fresh snapshot is read at the start of
    every dispatch and only ``current_key_index``/``used_today`` are written
    back, through the registry store.
    """

    id: str
    provider: str
    api_keys: tuple[str, ...] = ()
    current_key_index: int = 0
    enabled: bool = True
    priority: int = DEFAULT_PRIORITY
    daily_limit: int = DEFAULT_DAILY_LIMIT
    used_today: int = 0
    status: str = "green"
    model_name: str | None = None
    base_url: str | None = None

    @property
    def provider_model_name(self) -> str:
        """Name sent to the provider; the id unless overridden."""
        return self.model_name or self.id

    @property
    def requires_auth(self) -> bool:
        return provider_requires_auth(self.provider)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Model | None:
        """Build a model from a stored document, or None if it has no usable id.

        Field values are coerced leniently: a bad value falls back to its
        default instead of rejecting the whole entry.
        """
        model_id = doc.get("id")
        if not isinstance(model_id, str) or not model_id:
            return None

        provider = doc.get("provider")
        if not isinstance(provider, str) or not provider:
            return None

        raw_keys = doc.get("apiKeys")
        api_keys: tuple[str, ...] = ()
        if isinstance(raw_keys, list):
            api_keys = tuple(k.strip() for k in raw_keys if isinstance(k, str) and k.strip())

        model_name = doc.get("modelName")
        base_url = doc.get("baseUrl")
        status = doc.get("status")

        return cls(
            id=model_id,
            provider=provider,
            api_keys=api_keys,
            current_key_index=_as_int(doc.get("currentKeyIndex"), 0),
            enabled=doc.get("enabled") is True,
            priority=_as_int(doc.get("priority"), DEFAULT_PRIORITY),
            daily_limit=_as_int(doc.get("dailyLimit"), DEFAULT_DAILY_LIMIT),
            used_today=_as_int(doc.get("usedToday"), 0),
            status=status if isinstance(status, str) else "green",
            model_name=model_name if isinstance(model_name, str) and model_name else None,
            base_url=base_url if isinstance(base_url, str) and base_url else None,
        )

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "id": self.id,
            "provider": self.provider,
            "apiKeys": list(self.api_keys),
            "currentKeyIndex": self.current_key_index,
            "enabled": self.enabled,
            "priority": self.priority,
            "dailyLimit": self.daily_limit,
            "usedToday": self.used_today,
            "status": self.status,
        }
        if self.model_name:
            doc["modelName"] = self.model_name
        if self.base_url:
            doc["baseUrl"] = self.base_url
        return doc


def _as_int(value: Any, default: int) -> int:
    # bool is an int subclass; a stored true/false is not a number here
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return default


def utc_now_iso() -> str:
    return dt.datetime.now(tz=dt.timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class CallRecord:
    """One provider attempt, appended to the call log."""

    model: str
    key_index: int
    success: bool
    feature: str
    time: str = field(default_factory=utc_now_iso)
    duration_ms: int | None = None
    error: str | None = None
    error_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "model": self.model,
            "keyIndex": self.key_index,
            "success": self.success,
            "time": self.time,
            "feature": self.feature,
        }
        if self.duration_ms is not None:
            out["duration"] = self.duration_ms
        if self.error is not None:
            out["error"] = self.error
        if self.error_type is not None:
            out["errorType"] = self.error_type
        return out
