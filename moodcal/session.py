"""Session token storage with durable persistence."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
import json
import os
from pathlib import Path
import tempfile
from threading import Lock
from typing import Any, Mapping, Protocol

from moodcal.logging import get_logger
from moodcal.logging_events import log_event
from moodcal.models import Session

__all__ = [
    "FsTokenStore",
    "MemoryTokenStore",
    "SessionListener",
    "SessionStore",
    "TokenStore",
]

_JSON_VERSION = 1

logger = get_logger(__name__)

SessionListener = Callable[[Session], None]


class TokenStore(Protocol):
    """Durable location of the access token across process restarts."""

    def read(self) -> str | None:
        """Return the stored token or ``None`` when nothing usable is stored."""

    def write(self, token: str) -> None:
        """Persist ``token`` replacing any previous value."""


class MemoryTokenStore:
    """Token store that lives only as long as the process."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token

    def read(self) -> str | None:
        return self._token

    def write(self, token: str) -> None:
        self._token = token


class FsTokenStore:
    """JSON file backed token store with atomic replacement."""

    def __init__(
        self,
        path: str | os.PathLike[str],
        *,
        now_fn: Callable[[], datetime] | None = None,
    ) -> None:
        self._path = Path(path)
        self._now = now_fn or (lambda: datetime.now(timezone.utc))

    @property
    def path(self) -> Path:
        return self._path

    def _write_file(self, payload: Mapping[str, Any]) -> None:
        directory = self._path.parent
        directory.mkdir(mode=0o700, parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=directory,
            prefix=f".{self._path.stem}.",
            suffix=".tmp",
        )
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, separators=(",", ":"), sort_keys=True)
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self._path)
        except Exception:
            try:
                tmp_path.unlink(missing_ok=True)
            finally:
                raise

    def read(self) -> str | None:
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(
                "Failed to read stored token; ignoring.",
                extra={"event": "session.token_file_unreadable", "path": str(self._path), "error": str(exc)},
            )
            return None
        if not isinstance(data, dict) or data.get("ver") != _JSON_VERSION:
            logger.warning(
                "Stored token has an unsupported format; ignoring.",
                extra={"event": "session.token_file_invalid", "path": str(self._path)},
            )
            return None
        token = data.get("token")
        if not isinstance(token, str) or not token.strip():
            return None
        return token

    def write(self, token: str) -> None:
        self._write_file(
            {
                "token": token,
                "saved_at": int(self._now().timestamp()),
                "ver": _JSON_VERSION,
            }
        )


class SessionStore:
    """Holds the current :class:`Session` and notifies subscribers on login.

    The token is set once at startup from the token store or once per
    successful authentication; there is no expiry, refresh or revoke.
    """

    def __init__(self, token_store: TokenStore | None = None) -> None:
        self._token_store: TokenStore = token_store or MemoryTokenStore()
        self._session = Session()
        self._listeners: list[SessionListener] = []
        self._lock = Lock()

    def get(self) -> Session:
        with self._lock:
            return self._session

    def load(self) -> Session:
        """Adopt a previously stored token, if any."""

        token = self._token_store.read()
        if token is None:
            log_event(logger, "session.loaded", authenticated=False)
            return self.get()
        self._apply(token)
        log_event(logger, "session.loaded", authenticated=True)
        return self.get()

    def set(self, token: str) -> Session:
        """Record the token delivered by a successful authentication."""

        cleaned = (token or "").strip()
        if not cleaned:
            raise ValueError("token must not be empty")
        self._token_store.write(cleaned)
        session = self._apply(cleaned)
        log_event(logger, "session.token_set")
        return session

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def _apply(self, token: str) -> Session:
        with self._lock:
            session = Session(token=token)
            self._session = session
            listeners = list(self._listeners)
        for listener in listeners:
            listener(session)
        return session
