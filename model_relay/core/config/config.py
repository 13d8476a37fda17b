"""Configuration singleton for Model Relay.

All values are loaded once at initialization time from environment
variables using the schema in ``schema.py``. Tests rebuild the singleton
with ``Config.reset_singleton()`` after changing the environment.
"""

import os
from pathlib import Path

from model_relay.core.config.schema import ConfigSchema
from model_relay.core.config.validation import _parse_tuple, load_env_var

# Legacy variable name for the degraded-mode keys
LEGACY_FALLBACK_KEYS_ENV = "GROQ_API_KEYS"


class Config:
    """Configuration singleton with direct property access to all settings."""

    def __init__(self) -> None:
        self._host: str = load_env_var(ConfigSchema.HOST)
        self._port: int = load_env_var(ConfigSchema.PORT)
        self._log_level: str = load_env_var(ConfigSchema.LOG_LEVEL)
        self._request_timeout: int = load_env_var(ConfigSchema.REQUEST_TIMEOUT)
        self._default_feature: str = load_env_var(ConfigSchema.DEFAULT_FEATURE)
        self._claude_max_tokens: int = load_env_var(ConfigSchema.CLAUDE_MAX_TOKENS)
        self._ollama_base_url: str = load_env_var(ConfigSchema.OLLAMA_BASE_URL)
        self._registry_path: str = load_env_var(ConfigSchema.REGISTRY_PATH)
        self._call_log_path: str | None = load_env_var(ConfigSchema.CALL_LOG_PATH)
        self._fallback_provider: str = load_env_var(ConfigSchema.FALLBACK_PROVIDER)
        self._fallback_model: str = load_env_var(ConfigSchema.FALLBACK_MODEL)
        self._fallback_api_keys: tuple[str, ...] = load_env_var(ConfigSchema.FALLBACK_API_KEYS)

    # Server settings
    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port

    @property
    def log_level(self) -> str:
        return self._log_level

    # Routing settings
    @property
    def request_timeout(self) -> int:
        return self._request_timeout

    @property
    def default_feature(self) -> str:
        return self._default_feature

    @property
    def claude_max_tokens(self) -> int:
        return self._claude_max_tokens

    @property
    def ollama_base_url(self) -> str:
        return self._ollama_base_url.rstrip("/")

    # Storage settings
    @property
    def registry_path(self) -> Path:
        return Path(self._registry_path).expanduser()

    @property
    def call_log_path(self) -> Path | None:
        if not self._call_log_path:
            return None
        return Path(self._call_log_path).expanduser()

    # Degraded mode settings
    @property
    def fallback_provider(self) -> str:
        return self._fallback_provider

    @property
    def fallback_model(self) -> str:
        return self._fallback_model

    @property
    def fallback_api_keys(self) -> tuple[str, ...]:
        if self._fallback_api_keys:
            return self._fallback_api_keys
        return _parse_tuple(os.environ.get(LEGACY_FALLBACK_KEYS_ENV, ""))

    @classmethod
    def reset_singleton(cls) -> "Config":
        """Reset the global config singleton for test isolation.

        WARNING: Never call this in production code!
        """
        global config
        config = cls()
        return config


# Module-level singleton
config = Config()


def get_config() -> Config:
    """Return the current singleton, following ``reset_singleton`` swaps."""
    return config
