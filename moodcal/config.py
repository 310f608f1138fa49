"""Application configuration utilities for moodcal."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import os
from pathlib import Path
from typing import Any

DEFAULT_API_BASE_URL = "http://127.0.0.1:8000"
DEFAULT_TOKEN_FILE = "~/.moodcal/token.json"
DEFAULT_HTTP_TIMEOUT_MS = 8_000
DEFAULT_OAUTH_CALLBACK_PORT = 8888

_RUNTIME_ENV_CACHE: dict[str, str] | None = None


def _load_env_file(path: Path) -> dict[str, str]:
    try:
        contents = path.read_text(encoding="utf-8")
    except OSError:
        return {}
    env_values: dict[str, str] = {}
    for line in contents.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        key, sep, value = stripped.partition("=")
        if not sep:
            continue
        env_values[key.strip()] = value.strip().strip('"').strip("'")
    return env_values


def load_runtime_env(
    *,
    env_file: str | os.PathLike[str] | None = None,
    base_env: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Load runtime environment values applying .env before explicit environment."""

    env: dict[str, str] = {}
    source = dict(base_env if base_env is not None else os.environ)

    path = Path(env_file) if env_file is not None else Path(".env")
    if path.exists() and path.is_file():
        env.update(_load_env_file(path))

    env.update({key: str(value) for key, value in source.items() if value is not None})
    return env


def get_runtime_env() -> Mapping[str, str]:
    """Return the cached runtime environment mapping."""

    global _RUNTIME_ENV_CACHE
    if _RUNTIME_ENV_CACHE is None:
        _RUNTIME_ENV_CACHE = load_runtime_env()
    return _RUNTIME_ENV_CACHE


def override_runtime_env(runtime_env: Mapping[str, str] | None) -> None:
    """Override the cached runtime environment (primarily for testing)."""

    global _RUNTIME_ENV_CACHE
    if runtime_env is None:
        _RUNTIME_ENV_CACHE = None
    else:
        _RUNTIME_ENV_CACHE = dict(runtime_env)


def _env_value(env: Mapping[str, Any], key: str) -> str | None:
    value = env.get(key)
    if value is None:
        return None
    return str(value)


def _as_bool(value: str | None, *, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _coerce_int(value: Any, *, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _bounded_int(
    value: Any,
    *,
    default: int,
    minimum: int | None = None,
    maximum: int | None = None,
) -> int:
    resolved = _coerce_int(value, default=default)
    if minimum is not None:
        resolved = max(minimum, resolved)
    if maximum is not None:
        resolved = min(maximum, resolved)
    return resolved


def _path_value(env: Mapping[str, Any], key: str, default: str) -> str:
    raw = (_env_value(env, key) or "").strip()
    if not raw:
        return default
    return raw if raw.startswith("/") else f"/{raw}"


@dataclass(slots=True, frozen=True)
class EndpointPaths:
    range: str = "/getRange"
    sentiment: str = "/getSentimentByMonth"
    last: str = "/getLast"
    tracks: str = "/getTracksByDay"
    playlist: str = "/getPlaylistByDay"
    upload: str = "/uploadFiles"


@dataclass(slots=True, frozen=True)
class ApiConfig:
    base_url: str
    timeout_ms: int
    paths: EndpointPaths


@dataclass(slots=True, frozen=True)
class SessionConfig:
    token_file: str


@dataclass(slots=True, frozen=True)
class OAuthConfig:
    callback_port: int


@dataclass(slots=True, frozen=True)
class LoggingConfig:
    level: str
    file: str | None


@dataclass(slots=True, frozen=True)
class AppConfig:
    api: ApiConfig
    session: SessionConfig
    oauth: OAuthConfig
    logging: LoggingConfig
    demo_mode: bool


def _load_paths(env: Mapping[str, Any]) -> EndpointPaths:
    defaults = EndpointPaths()
    return EndpointPaths(
        range=_path_value(env, "MOODCAL_RANGE_PATH", defaults.range),
        sentiment=_path_value(env, "MOODCAL_SENTIMENT_PATH", defaults.sentiment),
        last=_path_value(env, "MOODCAL_LAST_PATH", defaults.last),
        tracks=_path_value(env, "MOODCAL_TRACKS_PATH", defaults.tracks),
        playlist=_path_value(env, "MOODCAL_PLAYLIST_PATH", defaults.playlist),
        upload=_path_value(env, "MOODCAL_UPLOAD_PATH", defaults.upload),
    )


def load_config(runtime_env: Mapping[str, Any] | None = None) -> AppConfig:
    """Build the application configuration from the runtime environment."""

    env = runtime_env if runtime_env is not None else get_runtime_env()

    base_url = (_env_value(env, "MOODCAL_API_BASE_URL") or "").strip() or DEFAULT_API_BASE_URL
    timeout_ms = _bounded_int(
        _env_value(env, "MOODCAL_HTTP_TIMEOUT_MS"),
        default=DEFAULT_HTTP_TIMEOUT_MS,
        minimum=100,
        maximum=120_000,
    )
    token_file = (_env_value(env, "MOODCAL_TOKEN_FILE") or "").strip() or DEFAULT_TOKEN_FILE
    callback_port = _bounded_int(
        _env_value(env, "OAUTH_CALLBACK_PORT"),
        default=DEFAULT_OAUTH_CALLBACK_PORT,
        minimum=1,
        maximum=65535,
    )
    log_level = (_env_value(env, "LOG_LEVEL") or "INFO").strip().upper() or "INFO"
    log_file = (_env_value(env, "LOG_FILE") or "").strip() or None

    return AppConfig(
        api=ApiConfig(
            base_url=base_url.rstrip("/"),
            timeout_ms=timeout_ms,
            paths=_load_paths(env),
        ),
        session=SessionConfig(token_file=str(Path(token_file).expanduser())),
        oauth=OAuthConfig(callback_port=callback_port),
        logging=LoggingConfig(level=log_level, file=log_file),
        demo_mode=_as_bool(_env_value(env, "MOODCAL_DEMO"), default=False),
    )


__all__ = [
    "ApiConfig",
    "AppConfig",
    "EndpointPaths",
    "LoggingConfig",
    "OAuthConfig",
    "SessionConfig",
    "get_runtime_env",
    "load_config",
    "load_runtime_env",
    "override_runtime_env",
]
