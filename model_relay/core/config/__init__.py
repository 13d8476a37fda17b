"""Configuration package.

Use ``get_config()`` when the value must survive ``Config.reset_singleton()``.
"""

from model_relay.core.config.config import Config, config, get_config
from model_relay.core.config.validation import ConfigError

__all__ = ["Config", "ConfigError", "config", "get_config"]
