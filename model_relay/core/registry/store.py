"""Model registry stores.

The store is the single owner of shared routing state: model records
(priority, enabled flag, key pool, rotation cursor, usage counter) and the
feature map. The core reads it fresh for every dispatch and writes back
only the cursor and the usage counter.

Document schema (camelCase, as written by the admin surface)::

    {
      "models": [{"id": "...", "provider": "Groq", "apiKeys": [...], ...}],
      "featureMap": {"general": ["model-a", "model-b"]}
    }
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from model_relay.core.exceptions import RegistryUnavailable
from model_relay.core.models import Model

logger = logging.getLogger(__name__)

FeatureMap = dict[str, list[str]]


class RegistryStore(ABC):
    """Backing configuration store for models and the feature map."""

    @abstractmethod
    async def list_models(self) -> list[Model]:
        """All models in storage order.

        Raises:
            RegistryUnavailable: If the store cannot be read.
        """

    @abstractmethod
    async def get_feature_map(self) -> FeatureMap:
        """Feature name -> allowed model ids.

        Raises:
            RegistryUnavailable: If the store cannot be read.
        """

    @abstractmethod
    async def update_usage(self, model_id: str, current_key_index: int, used_today: int) -> None:
        """Persist a model's rotation cursor and usage counter in one write."""

    @abstractmethod
    async def reset_usage(self) -> int:
        """Set every model's usage counter to zero; return how many changed."""


def parse_models(documents: Any) -> list[Model]:
    """Build models from raw documents, skipping the malformed ones."""
    if not isinstance(documents, list):
        return []
    models: list[Model] = []
    for doc in documents:
        model = Model.from_document(doc) if isinstance(doc, dict) else None
        if model is None:
            logger.warning(f"Skipping malformed model document: {doc!r}")
            continue
        models.append(model)
    return models


def parse_feature_map(raw: Any) -> FeatureMap:
    if not isinstance(raw, dict):
        return {}
    feature_map: FeatureMap = {}
    for feature, allowed in raw.items():
        if isinstance(allowed, list):
            feature_map[str(feature)] = [m for m in allowed if isinstance(m, str)]
    return feature_map


class InMemoryRegistryStore(RegistryStore):
    """Registry kept in process memory, for tests and embedding.

    Set ``available = False`` to simulate an unreachable store.
    """

    def __init__(
        self,
        models: Iterable[Model | dict[str, Any]] = (),
        feature_map: FeatureMap | None = None,
    ) -> None:
        self._documents: list[dict[str, Any]] = [
            m.to_document() if isinstance(m, Model) else copy.deepcopy(m) for m in models
        ]
        self._feature_map: FeatureMap = copy.deepcopy(feature_map or {})
        self.available = True
        self.update_calls: list[tuple[str, int, int]] = []

    def _check_available(self) -> None:
        if not self.available:
            raise RegistryUnavailable("In-memory registry marked unavailable")

    async def list_models(self) -> list[Model]:
        self._check_available()
        return parse_models(self._documents)

    async def get_feature_map(self) -> FeatureMap:
        self._check_available()
        return copy.deepcopy(self._feature_map)

    async def update_usage(self, model_id: str, current_key_index: int, used_today: int) -> None:
        self._check_available()
        self.update_calls.append((model_id, current_key_index, used_today))
        for doc in self._documents:
            if doc.get("id") == model_id:
                doc["currentKeyIndex"] = current_key_index
                doc["usedToday"] = used_today
                return
        logger.warning(f"Usage update for unknown model '{model_id}' ignored")

    async def reset_usage(self) -> int:
        self._check_available()
        changed = 0
        for doc in self._documents:
            if doc.get("usedToday"):
                changed += 1
            doc["usedToday"] = 0
        return changed

    def get_document(self, model_id: str) -> dict[str, Any] | None:
        for doc in self._documents:
            if doc.get("id") == model_id:
                return copy.deepcopy(doc)
        return None


class JsonFileRegistryStore(RegistryStore):
    """Registry persisted as a single JSON document on disk.

    A missing, unreadable or malformed file makes the registry unavailable,
    which lets the orchestrator fall back to degraded mode. Writes are
    read-modify-write under a lock and replace the file atomically.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def _read_payload(self) -> dict[str, Any]:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                payload = json.load(f)
        except FileNotFoundError as e:
            raise RegistryUnavailable(f"Model registry not found at {self.path}") from e
        except (OSError, json.JSONDecodeError) as e:
            raise RegistryUnavailable(f"Model registry at {self.path} is unreadable: {e}") from e

        if not isinstance(payload, dict):
            raise RegistryUnavailable(f"Model registry at {self.path} is not a JSON object")
        return payload

    def _write_payload(self, payload: dict[str, Any]) -> None:
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise RegistryUnavailable(f"Failed to write model registry at {self.path}: {e}") from e

    def _update_usage(self, model_id: str, current_key_index: int, used_today: int) -> None:
        with self._lock:
            payload = self._read_payload()
            documents = payload.get("models")
            if isinstance(documents, list):
                for doc in documents:
                    if isinstance(doc, dict) and doc.get("id") == model_id:
                        doc["currentKeyIndex"] = current_key_index
                        doc["usedToday"] = used_today
                        self._write_payload(payload)
                        return
            logger.warning(f"Usage update for unknown model '{model_id}' ignored")

    def _reset_usage(self) -> int:
        with self._lock:
            payload = self._read_payload()
            documents = payload.get("models")
            if not isinstance(documents, list):
                return 0
            changed = 0
            for doc in documents:
                if not isinstance(doc, dict):
                    continue
                if doc.get("usedToday"):
                    changed += 1
                doc["usedToday"] = 0
            self._write_payload(payload)
            return changed

    # Blocking file access runs in a worker thread

    async def list_models(self) -> list[Model]:
        payload = await asyncio.to_thread(self._read_payload)
        return parse_models(payload.get("models"))

    async def get_feature_map(self) -> FeatureMap:
        payload = await asyncio.to_thread(self._read_payload)
        return parse_feature_map(payload.get("featureMap"))

    async def update_usage(self, model_id: str, current_key_index: int, used_today: int) -> None:
        await asyncio.to_thread(self._update_usage, model_id, current_key_index, used_today)

    async def reset_usage(self) -> int:
        return await asyncio.to_thread(self._reset_usage)
