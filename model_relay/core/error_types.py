"""Error type enumeration for Model Relay.

Provides type-safe error categorization for call records and error responses.
"""

from enum import Enum


class ErrorType(str, Enum):
    """Error type categories for call records and error responses.

    When adding new error types:
    1. Add the enum value here
    2. Map it in the HTTP error response builder if it can reach a caller
    """

    # Request errors
    INVALID_INPUT = "invalid_input"  # Malformed request, no provider contacted
    NO_CANDIDATES = "no_candidates"  # No enabled model matches the feature
    ALL_MODELS_FAILED = "all_models_failed"  # Every candidate was exhausted

    # Registry errors
    REGISTRY_UNAVAILABLE = "registry_unavailable"  # Configuration store unreachable

    # Upstream errors, recorded per attempt
    UPSTREAM_TIMEOUT = "upstream_timeout"  # Provider did not answer in time
    UPSTREAM_HTTP_ERROR = "upstream_http_error"  # Provider answered non-2xx
    UPSTREAM_ERROR = "upstream_error"  # Transport failure talking to the provider

    # Catch-all
    UNEXPECTED_ERROR = "unexpected_error"  # Unhandled/unexpected error
