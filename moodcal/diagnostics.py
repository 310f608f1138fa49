"""Diagnostic sink collecting non-fatal resolution failures."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
import logging
from typing import Any

from moodcal.errors import TransportFailure
from moodcal.logging import get_logger
from moodcal.logging_events import log_event, now_ms

_logger = get_logger(__name__)


@dataclass(slots=True, frozen=True)
class FailureRecord:
    component: str
    error_type: str
    message: str
    at_ms: int


class DiagnosticSink:
    """Write failures to the error log and keep the most recent ones in memory."""

    def __init__(self, *, capacity: int = 50, logger: logging.Logger | None = None) -> None:
        self._logger = logger or _logger
        self._records: deque[FailureRecord] = deque(maxlen=max(1, capacity))

    @property
    def recent(self) -> list[FailureRecord]:
        return list(self._records)

    def report(self, component: str, error: BaseException, **fields: Any) -> FailureRecord:
        record = FailureRecord(
            component=component,
            error_type=type(error).__name__,
            message=str(error),
            at_ms=now_ms(),
        )
        self._records.append(record)
        status_code = error.status_code if isinstance(error, TransportFailure) else None
        log_event(
            self._logger,
            "diagnostic.failure",
            level=logging.ERROR,
            component=component,
            error=record.error_type,
            detail=record.message,
            status_code=status_code,
            **fields,
        )
        return record


__all__ = ["DiagnosticSink", "FailureRecord"]
