"""Logging setup for the calendar CLI and callback server."""

from __future__ import annotations

import logging
import sys

from moodcal.config import LoggingConfig
from moodcal.logging_events import event_fields

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class EventFormatter(logging.Formatter):
    """Append ``log_event`` context to the line as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = event_fields(record)
        if not fields:
            return line
        context = " ".join(f"{name}={value}" for name, value in fields.items())
        return f"{line} {context}"


def configure_logging(config: LoggingConfig, *, level: str | None = None) -> None:
    """Route records to stderr and, when configured, to ``config.file``.

    ``level`` overrides ``config.level``. Stdout stays reserved for the
    rendered calendar.
    """

    formatter = EventFormatter(LOG_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.file:
        handlers.append(logging.FileHandler(config.file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)

    name = (level or config.level).upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        handlers=handlers,
        force=True,
    )
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
