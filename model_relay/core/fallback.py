"""Degraded-mode candidate synthesized from the process environment."""

import logging
import random
from collections.abc import Sequence

from model_relay.core.models import Model

logger = logging.getLogger(__name__)


class EnvFallback:
    """Single stand-in model used when the registry cannot be read.

    One key is drawn at random per dispatch. The synthesized model has a
    one-key pool, so rotation never applies to it.
    """

    def __init__(self, provider: str, model: str, api_keys: Sequence[str]) -> None:
        self.provider = provider
        self.model = model
        self.api_keys = tuple(k for k in api_keys if k)

    @property
    def available(self) -> bool:
        return bool(self.api_keys)

    def synthesize(self) -> Model | None:
        if not self.api_keys:
            return None
        key = random.choice(self.api_keys)
        logger.debug(
            f"Synthesized fallback model {self.provider}/{self.model} "
            f"from a pool of {len(self.api_keys)} key(s)"
        )
        return Model(id=self.model, provider=self.provider, api_keys=(key,))
