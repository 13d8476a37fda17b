"""Type coercion and validation utilities for configuration loading.

Errors are raised with clear messages to help users fix configuration issues.
"""

import os
from typing import Any

from model_relay.core.config.schema import ConfigSchema, EnvVarSpec


class ConfigError(Exception):
    """Configuration validation error.

    Attributes:
        env_var: The environment variable name
        value: The raw value that failed validation
        message: Human-readable error message
    """

    def __init__(self, env_var: str, value: str, message: str) -> None:
        self.env_var = env_var
        self.value = value
        self.message = message
        super().__init__(f"{env_var}={value}: {message}")


def _parse_tuple(value: str) -> tuple[str, ...]:
    """Parse comma-separated string to a tuple of non-empty strings."""
    if not value:
        return ()
    parts = [part.strip() for part in value.split(",")]
    return tuple(part for part in parts if part)


def load_env_var(spec: EnvVarSpec) -> Any:
    """Load and validate a single environment variable.

    Args:
        spec: Environment variable specification from ConfigSchema

    Returns:
        Validated and coerced value, or the spec default when unset

    Raises:
        ConfigError: If validation fails or type conversion is impossible
    """
    raw_value = os.environ.get(spec.name)

    if raw_value is None:
        return spec.default

    try:
        if spec.type_hint is int:
            value = int(raw_value)
        elif spec.type_hint is tuple:
            value = _parse_tuple(raw_value)
        else:
            value = raw_value
    except (ValueError, TypeError) as e:
        raise ConfigError(
            spec.name,
            raw_value,
            f"Cannot convert to {spec.type_hint.__name__}: {e}",
        ) from e

    if spec.validator is not None:
        try:
            if not spec.validator(value):
                raise ConfigError(
                    spec.name,
                    raw_value,
                    f"Validation failed for type {spec.type_hint.__name__}",
                )
        except (TypeError, IndexError) as e:
            raise ConfigError(
                spec.name,
                raw_value,
                f"Validation error: {e}",
            ) from e

    return value


def load_all_specs() -> dict[str, Any]:
    """Load all environment variables according to schema.

    Values that failed validation are returned as ConfigError instances so
    callers can report every problem at once.
    """
    result: dict[str, Any] = {}
    for name, spec in ConfigSchema.all_specs().items():
        try:
            result[name] = load_env_var(spec)
        except ConfigError as e:
            result[name] = e
    return result

