"""Model registry: backing stores and the candidate accessor."""

from model_relay.core.registry.accessor import ModelRegistryAccessor, prioritize
from model_relay.core.registry.store import (
    FeatureMap,
    InMemoryRegistryStore,
    JsonFileRegistryStore,
    RegistryStore,
)

__all__ = [
    "FeatureMap",
    "InMemoryRegistryStore",
    "JsonFileRegistryStore",
    "ModelRegistryAccessor",
    "RegistryStore",
    "prioritize",
]
