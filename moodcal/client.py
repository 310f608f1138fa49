"""Async HTTP client for the mood calendar backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping

import httpx

from moodcal.config import ApiConfig, EndpointPaths
from moodcal.errors import MalformedResponse, NoSession, TransportFailure
from moodcal.logging import get_logger
from moodcal.models import ViewedMonth

logger = get_logger(__name__)


@dataclass(slots=True)
class CalendarApiClient:
    """HTTPX based client for the range, sentiment, track and upload endpoints.

    Every call is a single attempt; failures surface as
    :class:`TransportFailure` or :class:`MalformedResponse`.
    """

    base_url: str
    paths: EndpointPaths = field(default_factory=EndpointPaths)
    transport: httpx.AsyncBaseTransport | None = None
    timeout_ms: int = 8_000

    @classmethod
    def from_config(
        cls, config: ApiConfig, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> CalendarApiClient:
        return cls(
            base_url=config.base_url,
            paths=config.paths,
            transport=transport,
            timeout_ms=config.timeout_ms,
        )

    async def get_range(self, token: str | None) -> Any:
        return await self._get_json(self.paths.range, token=token)

    async def get_sentiment_by_month(self, token: str | None, month: ViewedMonth) -> Any:
        return await self._get_json(
            self.paths.sentiment, token=token, params={"month": month.as_param()}
        )

    async def get_last(self, token: str | None) -> Any:
        return await self._get_json(self.paths.last, token=token)

    async def get_tracks_by_day(self, token: str | None, day: date) -> Any:
        return await self._get_json(self.paths.tracks, token=token, params={"day": day.isoformat()})

    async def get_playlist_by_day(self, token: str | None, day: date) -> Any:
        return await self._get_json(
            self.paths.playlist, token=token, params={"day": day.isoformat()}
        )

    async def upload_file(
        self,
        token: str | None,
        filename: str,
        content: bytes,
        *,
        content_type: str = "application/octet-stream",
    ) -> Any:
        """Post ``content`` as a multipart ``files`` field and return the JSON reply."""

        response = await self._request(
            "POST",
            self.paths.upload,
            token=token,
            files={"files": (filename, content, content_type)},
        )
        return self._decode_json(response)

    async def _get_json(
        self,
        path: str,
        *,
        token: str | None,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        response = await self._request("GET", path, token=token, params=params)
        return self._decode_json(response)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        token: str | None,
        params: Mapping[str, Any] | None = None,
        files: Mapping[str, Any] | None = None,
    ) -> httpx.Response:
        if not token:
            raise NoSession()
        headers = {"Accept": "application/json", "Authorization": f"Bearer {token}"}
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url.rstrip("/"),
                timeout=self._build_timeout(self.timeout_ms),
                headers=headers,
                transport=self.transport,
            ) as client:
                response = await client.request(method, path, params=params, files=files)
        except httpx.TimeoutException as exc:
            raise TransportFailure(f"{method} {path} timed out") from exc
        except httpx.HTTPError as exc:
            raise TransportFailure(f"{method} {path} failed: {exc}") from exc

        if response.is_success:
            return response
        logger.debug("Backend answered %s for %s %s", response.status_code, method, path)
        raise TransportFailure(
            f"{method} {path} returned HTTP {response.status_code}",
            status_code=response.status_code,
            body=response.text[:200],
        )

    @staticmethod
    def _decode_json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponse("backend returned invalid JSON") from exc

    @staticmethod
    def _build_timeout(timeout_ms: int) -> httpx.Timeout:
        timeout_seconds = max(timeout_ms, 100) / 1000
        connect_timeout = min(timeout_seconds, 5.0)
        return httpx.Timeout(
            timeout_seconds,
            connect=connect_timeout,
            read=timeout_seconds,
            write=timeout_seconds,
        )


__all__ = ["CalendarApiClient"]
