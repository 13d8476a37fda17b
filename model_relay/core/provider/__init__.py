"""Provider access: key selection and adapter dispatch.

- key_selector: picks the credential for one attempt and the next cursor
- adapters: one adapter per provider request/response variant
- adapter_registry: resolves a provider tag to its adapter
"""

from model_relay.core.provider.adapter_registry import AdapterRegistry, build_default_registry
from model_relay.core.provider.key_selector import (
    NO_CREDENTIAL,
    KeySelection,
    advance,
    select_key,
)

__all__ = [
    "AdapterRegistry",
    "KeySelection",
    "NO_CREDENTIAL",
    "advance",
    "build_default_registry",
    "select_key",
]
