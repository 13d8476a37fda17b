"""Dispatch engine: priority routing, key rotation and single-pass failover.

One ``dispatch`` walks the candidate list once:

    SELECTING -> ATTEMPTING(model) -> SUCCEEDED
                                   -> FAILED_OVER -> ATTEMPTING(next) ...
                                   -> EXHAUSTED

Rotation and usage are written back only after a confirmed success. When the
registry cannot be read, the same loop runs over a single candidate built
from the environment, with persistence and call logging turned off.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

import httpx

from model_relay.core.call_log import CallLogSink, build_call_log_sink
from model_relay.core.error_types import ErrorType
from model_relay.core.exceptions import (
    AllModelsFailed,
    InvalidInput,
    NoCandidates,
    ProviderError,
    RegistryUnavailable,
)
from model_relay.core.fallback import EnvFallback
from model_relay.core.logging import ConversationLogger
from model_relay.core.models import CallRecord, Model
from model_relay.core.provider import AdapterRegistry, advance, build_default_registry, select_key
from model_relay.core.registry import JsonFileRegistryStore, ModelRegistryAccessor, prioritize

if TYPE_CHECKING:
    from model_relay.core.config import Config

logger = logging.getLogger(__name__)


def validate_messages(messages: Any) -> list[dict[str, Any]]:
    """Check the inbound conversation and return it as a list of dicts.

    Raises:
        InvalidInput: If ``messages`` is empty or any entry is malformed.
    """
    if not isinstance(messages, Sequence) or isinstance(messages, (str, bytes)):
        raise InvalidInput("messages must be a non-empty array")
    if not messages:
        raise InvalidInput("messages must be a non-empty array")

    validated: list[dict[str, Any]] = []
    for i, message in enumerate(messages):
        if not isinstance(message, Mapping):
            raise InvalidInput(f"messages[{i}] must be an object")
        role = message.get("role")
        if not isinstance(role, str) or not role:
            raise InvalidInput(f"messages[{i}].role must be a non-empty string")
        content = message.get("content")
        if not isinstance(content, (str, list)):
            raise InvalidInput(f"messages[{i}].content must be a string or an array")
        validated.append(dict(message))
    return validated


class Orchestrator:
    """Routes one chat request across the configured models.

    Responsibilities:
    1. Validate the conversation
    2. Read candidates fresh from the registry (or the environment fallback)
    3. Try each candidate once with its next credential
    4. Persist rotation and usage after success
    5. Record every attempt in the call log
    """

    def __init__(
        self,
        accessor: ModelRegistryAccessor,
        sink: CallLogSink,
        adapters: AdapterRegistry,
        client: httpx.AsyncClient,
        *,
        timeout: float = 90.0,
        fallback: EnvFallback | None = None,
        default_feature: str = "general",
    ) -> None:
        self.accessor = accessor
        self.sink = sink
        self.adapters = adapters
        self.client = client
        self.timeout = timeout
        self.fallback = fallback
        self.default_feature = default_feature
        self.logger = logging.getLogger(f"{__name__}.Orchestrator")

    async def dispatch(
        self,
        messages: Any,
        feature: str | None = None,
        preferred_model: str | None = None,
        tools: list[dict[str, Any]] | None = None,
    ) -> str:
        """Return the first successful completion among the candidates.

        Args:
            messages: Ordered ``{role, content}`` conversation.
            feature: Routing tag; defaults to the configured default feature.
            preferred_model: Model id to try first when it is a candidate.
            tools: Tool definitions forwarded to providers that accept them.

        Raises:
            InvalidInput: Malformed request; no provider is contacted.
            NoCandidates: No enabled model is eligible for the feature.
            AllModelsFailed: Every attempted candidate failed.
            RegistryUnavailable: Registry unreadable and no fallback keys.
        """
        validated = validate_messages(messages)
        if feature is None:
            feature = self.default_feature
        if not isinstance(feature, str):
            raise InvalidInput("feature must be a string")
        if tools is not None and not isinstance(tools, list):
            raise InvalidInput("tools must be an array")

        dispatch_id = uuid.uuid4().hex
        with ConversationLogger.correlation_context(dispatch_id):
            candidates, degraded = await self._select_candidates(feature, preferred_model)
            if not candidates:
                raise NoCandidates(feature)

            self.logger.info(
                f"Dispatching feature '{feature}' across {len(candidates)} candidate(s): "
                f"{[m.id for m in candidates]}"
            )
            return await self._run(candidates, validated, feature, tools, degraded=degraded)

    async def _select_candidates(
        self, feature: str, preferred_model: str | None
    ) -> tuple[list[Model], bool]:
        try:
            candidates = await self.accessor.list_candidates(feature)
        except RegistryUnavailable as e:
            stand_in = self.fallback.synthesize() if self.fallback is not None else None
            if stand_in is None:
                self.logger.error(f"Model registry unavailable and no fallback keys: {e.message}")
                raise
            self.logger.warning(
                f"Model registry unavailable ({e.message}); "
                f"falling back to {stand_in.provider}/{stand_in.id}"
            )
            return [stand_in], True
        return prioritize(candidates, preferred_model), False

    async def _run(
        self,
        candidates: list[Model],
        messages: list[dict[str, Any]],
        feature: str,
        tools: list[dict[str, Any]] | None,
        *,
        degraded: bool,
    ) -> str:
        last_error: ProviderError | None = None

        for model in candidates:
            selection = select_key(model)
            if selection is None:
                self.logger.warning(f"Skipping model {model.id}: no API key configured")
                continue

            start = time.time()
            try:
                result = await self._attempt(model, selection.credential, messages, tools)
            except ProviderError as e:
                self.logger.warning(
                    f"Model {model.id} (key #{selection.index}) failed: {e.message}"
                )
                last_error = e
                if not degraded:
                    await self._record(
                        CallRecord(
                            model=model.id,
                            key_index=selection.index,
                            success=False,
                            feature=feature,
                            error=e.message,
                            error_type=e.error_type.value,
                        )
                    )
                continue

            duration_ms = int((time.time() - start) * 1000)
            self.logger.info(f"Model {model.id} (key #{selection.index}) succeeded in {duration_ms}ms")
            if not degraded:
                await self._persist_usage(model)
                await self._record(
                    CallRecord(
                        model=model.id,
                        key_index=selection.index,
                        success=True,
                        feature=feature,
                        duration_ms=duration_ms,
                    )
                )
            return result

        raise AllModelsFailed(last_error)

    async def _attempt(
        self,
        model: Model,
        credential: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None,
    ) -> str:
        try:
            return await asyncio.wait_for(
                self.adapters.invoke(
                    model.provider,
                    model.provider_model_name,
                    credential,
                    messages,
                    tools,
                    client=self.client,
                    base_url=model.base_url,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise ProviderError(
                model.provider,
                None,
                f"no response within {self.timeout:g}s",
                error_type=ErrorType.UPSTREAM_TIMEOUT,
            ) from e

    async def _persist_usage(self, model: Model) -> None:
        next_index = advance(model)
        try:
            await self.accessor.store.update_usage(model.id, next_index, model.used_today + 1)
        except RegistryUnavailable as e:
            self.logger.warning(f"Could not persist usage for {model.id}: {e.message}")

    async def _record(self, record: CallRecord) -> None:
        try:
            await self.sink.append(record)
        except Exception as e:
            self.logger.warning(f"Failed to write call record for {record.model}: {e}")

    async def aclose(self) -> None:
        await self.client.aclose()


def build_orchestrator(cfg: Config) -> Orchestrator:
    """Wire an orchestrator from configuration."""
    store = JsonFileRegistryStore(cfg.registry_path)
    client = httpx.AsyncClient(timeout=httpx.Timeout(cfg.request_timeout, connect=10.0))
    fallback = EnvFallback(
        provider=cfg.fallback_provider,
        model=cfg.fallback_model,
        api_keys=cfg.fallback_api_keys,
    )
    adapters = build_default_registry(
        claude_max_tokens=cfg.claude_max_tokens,
        ollama_base_url=cfg.ollama_base_url,
    )
    logger.debug(f"Registry at {store.path}, request timeout {cfg.request_timeout}s")
    return Orchestrator(
        ModelRegistryAccessor(store),
        build_call_log_sink(cfg.call_log_path),
        adapters,
        client,
        timeout=cfg.request_timeout,
        fallback=fallback if fallback.available else None,
        default_feature=cfg.default_feature,
    )
