from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any

from moodcal.errors import MalformedResponse
from moodcal.models import (
    DateInterval,
    SentimentEntry,
    SentimentTable,
    Session,
    Track,
    ViewedMonth,
)


class FakeSource:
    """In-memory data source whose calls can be held open and made to fail."""

    name = "fake"

    def __init__(
        self,
        *,
        requires_session: bool = True,
        interval: DateInterval | None = None,
        tables: Mapping[ViewedMonth, Iterable[SentimentEntry]] | None = None,
        tracks: Mapping[date, Iterable[Track]] | None = None,
        playlists: Mapping[date, str] | None = None,
        recently_played: str | None = None,
        upload_interval: DateInterval | None = None,
    ) -> None:
        self.requires_session = requires_session
        self.interval = interval
        self.tables = {month: list(entries) for month, entries in (tables or {}).items()}
        self.tracks = {day: tuple(items) for day, items in (tracks or {}).items()}
        self.playlists = dict(playlists or {})
        self.recently_played = recently_played
        self.upload_interval = upload_interval
        self.calls: list[tuple[str, Any]] = []
        self.failures: dict[str, Exception] = {}
        self._gates: dict[tuple[str, Any], asyncio.Event] = {}

    def hold(self, operation: str, key: Any) -> asyncio.Event:
        event = asyncio.Event()
        self._gates[(operation, key)] = event
        return event

    def fail(self, operation: str, error: Exception) -> None:
        self.failures[operation] = error

    def calls_for(self, operation: str) -> list[Any]:
        return [key for name, key in self.calls if name == operation]

    async def _enter(self, operation: str, key: Any) -> None:
        self.calls.append((operation, key))
        gate = self._gates.get((operation, key))
        if gate is not None:
            await gate.wait()
        failure = self.failures.get(operation)
        if failure is not None:
            raise failure

    async def fetch_range(self, session: Session) -> DateInterval:
        await self._enter("range", session.token)
        if self.interval is None:
            raise MalformedResponse("no range configured")
        return self.interval

    async def fetch_sentiments(self, session: Session, month: ViewedMonth) -> SentimentTable:
        await self._enter("sentiment", month)
        return SentimentTable.from_entries(month, self.tables.get(month, []))

    async def fetch_tracks(self, session: Session, day: date) -> tuple[Track, ...]:
        await self._enter("tracks", day)
        return self.tracks.get(day, ())

    async def fetch_playlist_id(self, session: Session, day: date) -> str | None:
        await self._enter("playlist", day)
        return self.playlists.get(day)

    async def fetch_recently_played(self, session: Session) -> str | None:
        await self._enter("last", session.token)
        return self.recently_played

    async def upload(self, session: Session, filename: str, content: bytes) -> DateInterval:
        await self._enter("upload", filename)
        if self.upload_interval is None:
            raise MalformedResponse("no upload interval configured")
        return self.upload_interval
