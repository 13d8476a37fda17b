"""API key selection with round-robin rotation.

Unlike an in-process rotator, the rotation cursor lives on the model record
in the registry. Selection is a pure function of the snapshot; the
orchestrator persists ``advance(model)`` after a successful call.
"""

from dataclasses import dataclass

from model_relay.core.models import Model

# Credential passed to providers that need no authentication
NO_CREDENTIAL = "LOCAL"


@dataclass(frozen=True)
class KeySelection:
    """The credential picked for one attempt and its index in the pool."""

    credential: str
    index: int

    @property
    def is_anonymous(self) -> bool:
        return self.credential == NO_CREDENTIAL


def select_key(model: Model) -> KeySelection | None:
    """Pick the credential to use next for ``model``.

    Args:
        model: Registry snapshot of the model.

    Returns:
        The selected key and its index, the anonymous sentinel for an empty
        pool on a provider that needs no auth, or None when the model has no
        usable credential and must be skipped.
    """
    if not model.api_keys:
        if not model.requires_auth:
            return KeySelection(credential=NO_CREDENTIAL, index=0)
        return None

    index = model.current_key_index % len(model.api_keys)
    return KeySelection(credential=model.api_keys[index], index=index)


def advance(model: Model) -> int:
    """Compute the cursor to persist after a successful call."""
    return (model.current_key_index + 1) % max(len(model.api_keys), 1)
