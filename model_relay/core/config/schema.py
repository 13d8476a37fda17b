"""Declarative schema for environment variable configuration.

This module provides a single source of truth for all environment variables,
including automatic type coercion, validation, and documentation generation.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class EnvVarSpec:
    """Specification for a single environment variable.

    Attributes:
        name: Environment variable name (e.g., "PORT", "LOG_LEVEL")
        default: Default value if env var not set
        type_hint: Type for validation (int, str, tuple)
        description: Human-readable description for docs
        validator: Optional custom validation function
    """

    name: str
    default: Any
    type_hint: type
    description: str
    validator: Callable[[Any], bool] | None = None


class ConfigSchema:
    """Registry of all configuration environment variables."""

    # === Server Settings ===

    HOST = EnvVarSpec(
        name="HOST",
        default="0.0.0.0",
        type_hint=str,
        description="Server host address to bind to",
    )

    PORT = EnvVarSpec(
        name="PORT",
        default=8082,
        type_hint=int,
        description="Server port number",
        validator=lambda x: 1 <= x <= 65535,
    )

    LOG_LEVEL = EnvVarSpec(
        name="LOG_LEVEL",
        default="INFO",
        type_hint=str,
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        validator=lambda x: x.split()[0].upper()
        in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )

    # === Routing Settings ===

    REQUEST_TIMEOUT = EnvVarSpec(
        name="REQUEST_TIMEOUT",
        default=90,
        type_hint=int,
        description="Timeout in seconds for a single provider attempt",
        validator=lambda x: x > 0,
    )

    DEFAULT_FEATURE = EnvVarSpec(
        name="DEFAULT_FEATURE",
        default="general",
        type_hint=str,
        description="Feature name used when a request does not name one",
        validator=lambda x: bool(x.strip()),
    )

    CLAUDE_MAX_TOKENS = EnvVarSpec(
        name="CLAUDE_MAX_TOKENS",
        default=4096,
        type_hint=int,
        description="max_tokens sent to the Anthropic Messages API",
        validator=lambda x: x > 0,
    )

    OLLAMA_BASE_URL = EnvVarSpec(
        name="OLLAMA_BASE_URL",
        default="http://localhost:11434",
        type_hint=str,
        description="Base URL of the local Ollama server",
    )

    # === Storage Settings ===

    REGISTRY_PATH = EnvVarSpec(
        name="REGISTRY_PATH",
        default="~/.config/model-relay/registry.json",
        type_hint=str,
        description="Path to the JSON model registry (models and feature map)",
    )

    CALL_LOG_PATH = EnvVarSpec(
        name="CALL_LOG_PATH",
        default=None,
        type_hint=str,
        description="JSON-lines file receiving one record per attempt (unset = log only)",
    )

    # === Degraded Mode Settings ===

    FALLBACK_PROVIDER = EnvVarSpec(
        name="FALLBACK_PROVIDER",
        default="Groq",
        type_hint=str,
        description="Provider used when the model registry is unreachable",
    )

    FALLBACK_MODEL = EnvVarSpec(
        name="FALLBACK_MODEL",
        default="llama-3.3-70b-versatile",
        type_hint=str,
        description="Model used when the model registry is unreachable",
    )

    FALLBACK_API_KEYS = EnvVarSpec(
        name="FALLBACK_API_KEYS",
        default=(),
        type_hint=tuple,
        description="Comma-separated API keys for the fallback provider",
    )

    @classmethod
    def all_specs(cls) -> dict[str, EnvVarSpec]:
        """Get all environment variable specifications.

        Returns:
            Dictionary mapping spec names to EnvVarSpec objects
        """
        return {
            name: getattr(cls, name)
            for name in dir(cls)
            if isinstance(getattr(cls, name), EnvVarSpec)
        }

    @classmethod
    def generate_markdown_docs(cls) -> str:
        """Generate Markdown documentation for all environment variables."""
        lines = ["# Configuration Options\n\n"]
        lines.extend(
            [
                "This document is auto-generated from `ConfigSchema`.\n\n",
                "## Environment Variables\n\n",
            ]
        )

        specs = cls.all_specs()
        for _name, spec in sorted(specs.items()):
            default_repr = f"`{spec.default}`" if spec.default is not None else "None"
            lines.extend(
                [
                    f"### `{spec.name}`\n\n",
                    f"- **Type**: `{spec.type_hint.__name__}`\n",
                    f"- **Default**: {default_repr}\n",
                    f"- **Description**: {spec.description}\n\n",
                ]
            )

        return "\n".join(lines)
