import logging
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar

NOISY_HTTP_LOGGERS = (
    "httpx",
    "httpcore",
    "httpcore.http11",
    "httpcore.connection",
)

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def normalize_log_level(raw_level: str) -> str:
    """Extract the first word of a level string and fall back to INFO."""
    parts = raw_level.split()
    level = parts[0].upper() if parts else "INFO"
    return level if level in VALID_LOG_LEVELS else "INFO"


def set_noisy_http_logger_levels(current_log_level: str) -> None:
    """Ensure HTTP client noise only surfaces at DEBUG level."""

    noisy_level = logging.DEBUG if current_log_level == "DEBUG" else logging.WARNING
    for logger_name in NOISY_HTTP_LOGGERS:
        logging.getLogger(logger_name).setLevel(noisy_level)


class ConversationLogger:
    """Logger with correlation ID support"""

    @staticmethod
    def get_logger() -> logging.Logger:
        return logging.getLogger("dispatch")

    @staticmethod
    @contextmanager
    def correlation_context(dispatch_id: str) -> Generator[None, None, None]:
        """Tag every record emitted inside the block with ``dispatch_id``."""
        token = _correlation_id.set(dispatch_id)
        try:
            yield
        finally:
            _correlation_id.reset(token)


class CorrelationIdFilter(logging.Filter):
    """Copy the active correlation id onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        correlation_id = _correlation_id.get()
        if correlation_id is not None:
            record.correlation_id = correlation_id
        return True


class CorrelationFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        if hasattr(record, "correlation_id"):
            original = record.msg
            record.msg = f"[{record.correlation_id[:8]}] {record.msg}"
            try:
                return super().format(record)
            finally:
                record.msg = original
        return super().format(record)


class HttpRequestLogDowngradeFilter(logging.Filter):
    """Downgrade noisy third-party HTTP logs to DEBUG."""

    def __init__(self, *prefixes: str) -> None:
        super().__init__()
        self.prefixes = prefixes

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno == logging.INFO:
            for prefix in self.prefixes:
                if record.name.startswith(prefix):
                    record.levelno = logging.DEBUG
                    record.levelname = logging.getLevelName(logging.DEBUG)
                    break
        return True


def configure_root_logging(raw_level: str) -> str:
    """Install the project handler on the root logger.

    Returns the normalized level name actually applied.
    """
    log_level = normalize_log_level(raw_level)

    handler = logging.StreamHandler()
    handler.addFilter(CorrelationIdFilter())
    handler.addFilter(HttpRequestLogDowngradeFilter(*NOISY_HTTP_LOGGERS))
    handler.setFormatter(
        CorrelationFormatter("%(asctime)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S")
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level))

    # Configure uvicorn to be quieter
    for uvicorn_logger in ["uvicorn", "uvicorn.access", "uvicorn.error"]:
        logging.getLogger(uvicorn_logger).setLevel(logging.WARNING)

    set_noisy_http_logger_levels(log_level)
    return log_level


conversation_logger = ConversationLogger.get_logger()
