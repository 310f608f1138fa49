"""Structured log events for the calendar pipeline.

Every event is a single record whose message is the event name and whose
``extra`` carries ``event`` plus flat context fields. Field names must not
collide with the attributes :class:`logging.LogRecord` already defines.
"""

from __future__ import annotations

import logging
import time
from typing import Any

_FLAT_VALUES = (str, int, float, bool, type(None))

RESERVED_RECORD_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "event"}


def _check_field(name: str, value: Any) -> None:
    if name in RESERVED_RECORD_KEYS:
        raise ValueError(f"Field '{name}' clashes with a LogRecord attribute")
    if not isinstance(value, _FLAT_VALUES):
        raise TypeError(f"Field '{name}' must be a str, number, bool or None")


def log_event(
    logger: Any,
    event: str,
    /,
    *,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """Emit ``event`` at ``level`` with ``fields`` attached to the record."""

    if not isinstance(event, str) or not event.strip():
        raise ValueError("event must be a non-empty string")

    extra: dict[str, Any] = {"event": event}
    for name, value in fields.items():
        _check_field(name, value)
        extra[name] = value

    logger.log(level, event, extra=extra)


def event_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Return the context fields ``log_event`` attached to ``record``."""

    return {
        name: value
        for name, value in vars(record).items()
        if name not in RESERVED_RECORD_KEYS and not name.startswith("_")
    }


def now_ms() -> int:
    """Return the current UNIX timestamp in milliseconds."""

    return int(time.time() * 1000)
