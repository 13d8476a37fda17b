"""
Append-only call log.

Every provider attempt made by the orchestrator produces one CallRecord.
Sinks only append; nothing in the core ever reads them back.
"""

import asyncio
import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path

from model_relay.core.exceptions import LogSinkError
from model_relay.core.models import CallRecord

_logger = logging.getLogger(__name__)


class CallLogSink(ABC):
    """Destination for call records."""

    @abstractmethod
    async def append(self, record: CallRecord) -> None:
        """Append one record.

        Raises:
            LogSinkError: If the record could not be written
        """


class InMemoryCallLogSink(CallLogSink):
    """Keeps records in a list. Useful for tests and the CLI."""

    def __init__(self) -> None:
        self.records: list[CallRecord] = []

    async def append(self, record: CallRecord) -> None:
        self.records.append(record)

    @property
    def successes(self) -> list[CallRecord]:
        return [r for r in self.records if r.success]

    @property
    def failures(self) -> list[CallRecord]:
        return [r for r in self.records if not r.success]

    def __repr__(self) -> str:
        return f"InMemoryCallLogSink(records={len(self.records)})"


class JsonLinesCallLogSink(CallLogSink):
    """Appends one JSON object per line to a file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def _write_line(self, line: str) -> None:
        try:
            with self._lock:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.path, "a", encoding="utf-8") as f:
                    f.write(line + "\n")
        except OSError as e:
            raise LogSinkError(f"Cannot append to call log {self.path}: {e}") from e

    async def append(self, record: CallRecord) -> None:
        await asyncio.to_thread(self._write_line, json.dumps(record.to_dict(), ensure_ascii=False))


class LoggingCallLogSink(CallLogSink):
    """Emits each record through the standard logging system."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("model_relay.calls")

    async def append(self, record: CallRecord) -> None:
        self.logger.info(json.dumps(record.to_dict(), ensure_ascii=False))


def build_call_log_sink(path: Path | None) -> CallLogSink:
    """JSON-lines sink when a path is configured, the logging sink otherwise."""
    if path is None:
        return LoggingCallLogSink()
    _logger.info("Writing call log to %s", path)
    return JsonLinesCallLogSink(path)
