"""Error taxonomy shared by the calendar pipeline components."""

from __future__ import annotations

from typing import Any


class MoodcalError(RuntimeError):
    """Base exception for moodcal specific failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TransportFailure(MoodcalError):
    """Raised when the backend could not be reached or answered with an error status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class MalformedResponse(MoodcalError):
    """Raised when a payload does not match the expected shape."""


class StaleResult(MoodcalError):
    """A completed resolution whose triggering input has been superseded.

    Never raised to callers; resolvers use it to describe discarded results.
    """

    def __init__(self, component: str, key: Any) -> None:
        super().__init__(f"{component} result for {key!r} is stale")
        self.component = component
        self.key = key


class NoSession(MoodcalError):
    """Raised when a session-bound operation is attempted without a token."""

    def __init__(self, message: str = "No session token is available.") -> None:
        super().__init__(message)


class UploadFailed(MoodcalError):
    """Raised to the caller when a file upload could not be completed."""


# Failures a resolver absorbs into its empty/unresolved value.
RESOLUTION_ERRORS: tuple[type[MoodcalError], ...] = (TransportFailure, MalformedResponse)


__all__ = [
    "MalformedResponse",
    "MoodcalError",
    "NoSession",
    "RESOLUTION_ERRORS",
    "StaleResult",
    "TransportFailure",
    "UploadFailed",
]
