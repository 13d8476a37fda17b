"""Exceptions raised by the dispatch engine.

Only InvalidInput, NoCandidates, AllModelsFailed and an unrecoverable
RegistryUnavailable ever leave ``Orchestrator.dispatch``. ProviderError is
absorbed by the failover loop and LogSinkError by the sink wrappers.
"""

from model_relay.core.error_types import ErrorType


class RelayError(Exception):
    """Base class for all dispatch errors."""

    error_type: ErrorType = ErrorType.UNEXPECTED_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidInput(RelayError):
    """The request is malformed; no provider was contacted."""

    error_type = ErrorType.INVALID_INPUT


class RegistryUnavailable(RelayError):
    """The model registry could not be read or written."""

    error_type = ErrorType.REGISTRY_UNAVAILABLE


class NoCandidates(RelayError):
    """No enabled model is eligible for the requested feature."""

    error_type = ErrorType.NO_CANDIDATES

    def __init__(self, feature: str) -> None:
        self.feature = feature
        super().__init__(f"No active models found for feature: {feature}")


class ProviderError(RelayError):
    """A single provider call failed.

    Attributes:
        provider: Provider tag of the failing model.
        status: HTTP status, or None for transport failures and timeouts.
        body: Response body or transport error description.
    """

    def __init__(
        self,
        provider: str,
        status: int | None,
        body: str,
        error_type: ErrorType | None = None,
    ) -> None:
        self.provider = provider
        self.status = status
        self.body = body
        if error_type is None:
            error_type = (
                ErrorType.UPSTREAM_HTTP_ERROR if status is not None else ErrorType.UPSTREAM_ERROR
            )
        self.error_type = error_type
        if status is not None:
            message = f"{provider} Error {status}: {body}"
        else:
            message = f"{provider} Error: {body}"
        super().__init__(message)


class AllModelsFailed(RelayError):
    """Every candidate was tried and none succeeded."""

    error_type = ErrorType.ALL_MODELS_FAILED

    def __init__(self, last_error: ProviderError | None) -> None:
        self.last_error = last_error
        detail = last_error.message if last_error is not None else "no attempt was made"
        super().__init__(f"All AI models failed. Last error: {detail}")


class LogSinkError(RelayError):
    """Writing a call record failed. Never surfaced to callers."""
