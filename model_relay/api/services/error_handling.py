"""Error responses for the HTTP surface.

Every error body has the same shape::

    {"error": "<summary>", "detail": "<message>"}

``detail`` is omitted when there is nothing to add to the summary.
"""

import logging
from dataclasses import dataclass
from typing import Any

from fastapi.responses import JSONResponse

from model_relay.core.exceptions import (
    AllModelsFailed,
    InvalidInput,
    NoCandidates,
    RegistryUnavailable,
    RelayError,
)

logger = logging.getLogger(__name__)


def _error_content(error: str, detail: str | None = None) -> dict[str, Any]:
    content: dict[str, Any] = {"error": error}
    if detail is not None:
        content["detail"] = detail
    return content


@dataclass(frozen=True, slots=True)
class ErrorResponseBuilder:
    """Centralized builder for consistent error responses."""

    @staticmethod
    def invalid_input(message: str) -> JSONResponse:
        """Build a 400 Bad Request response for a malformed request body."""
        return JSONResponse(status_code=400, content=_error_content(message))

    @staticmethod
    def method_not_allowed() -> JSONResponse:
        return JSONResponse(
            status_code=405,
            content=_error_content("Method not allowed"),
            headers={"Allow": "POST, OPTIONS"},
        )

    @staticmethod
    def upstream_error(exception: AllModelsFailed) -> JSONResponse:
        """Build a 502 Bad Gateway response when every candidate failed.

        Args:
            exception: The exhaustion error carrying the last provider error

        Returns:
            JSONResponse with 502 status and the last provider error as detail
        """
        detail = exception.last_error.message if exception.last_error is not None else None
        return JSONResponse(
            status_code=502,
            content=_error_content("All AI models failed", detail),
        )

    @staticmethod
    def service_unavailable(message: str, detail: str | None = None) -> JSONResponse:
        """Build a 503 Service Unavailable response."""
        return JSONResponse(status_code=503, content=_error_content(message, detail))

    @staticmethod
    def internal_error(detail: str | None = None) -> JSONResponse:
        """Build a 500 Internal Server Error response."""
        return JSONResponse(
            status_code=500,
            content=_error_content("Internal Server Error", detail),
        )

    @classmethod
    def from_exception(cls, exception: Exception) -> JSONResponse:
        """Map a dispatch exception onto its HTTP response.

        Args:
            exception: Anything raised while serving the request

        Returns:
            JSONResponse with the status code for the exception's class
        """
        if isinstance(exception, InvalidInput):
            return cls.invalid_input(exception.message)
        if isinstance(exception, NoCandidates):
            return cls.service_unavailable("No models available", exception.message)
        if isinstance(exception, RegistryUnavailable):
            return cls.service_unavailable("Model registry unavailable", exception.message)
        if isinstance(exception, AllModelsFailed):
            return cls.upstream_error(exception)
        if isinstance(exception, RelayError):
            return cls.internal_error(exception.message)

        logger.exception("Unexpected error while dispatching")
        return cls.internal_error(str(exception))
