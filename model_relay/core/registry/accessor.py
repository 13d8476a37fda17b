"""Candidate selection over the model registry."""

import logging

from model_relay.core.models import Model
from model_relay.core.registry.store import RegistryStore

logger = logging.getLogger(__name__)


class ModelRegistryAccessor:
    """Reads enabled models in priority order and applies feature routing."""

    def __init__(self, store: RegistryStore) -> None:
        self.store = store

    async def list_candidates(self, feature: str | None) -> list[Model]:
        """Enabled models for ``feature``, ascending priority.

        Ties keep storage order. A non-empty feature-map entry restricts the
        result to the listed ids; an absent or empty entry means no
        restriction.

        Raises:
            RegistryUnavailable: If the backing store cannot be read.
        """
        models = await self.store.list_models()
        enabled = sorted((m for m in models if m.enabled), key=lambda m: m.priority)

        if not feature:
            return enabled

        feature_map = await self.store.get_feature_map()
        allowed = feature_map.get(feature)
        if not allowed:
            return enabled

        allowed_ids = set(allowed)
        candidates = [m for m in enabled if m.id in allowed_ids]
        logger.debug(
            f"Feature '{feature}' restricts candidates to {sorted(allowed_ids)}; "
            f"{len(candidates)} of {len(enabled)} enabled models match"
        )
        return candidates


def prioritize(candidates: list[Model], preferred_model: str | None) -> list[Model]:
    """Move ``preferred_model`` to the front if it is among the candidates.

    The relative order of the other candidates is preserved; an absent
    preferred model leaves the list unchanged.
    """
    if not preferred_model:
        return list(candidates)
    for i, model in enumerate(candidates):
        if model.id == preferred_model:
            return [model, *candidates[:i], *candidates[i + 1 :]]
    return list(candidates)
