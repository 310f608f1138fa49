"""Data sources feeding the calendar resolvers.

Both implementations satisfy :class:`CalendarDataSource`; the pipeline picks
one at construction time and never branches on demo mode afterwards.
"""

from __future__ import annotations

from datetime import date
import random
from typing import Protocol

from moodcal.client import CalendarApiClient
from moodcal.errors import NoSession
from moodcal.models import (
    DateInterval,
    DistributionSentiment,
    SentimentLabel,
    SentimentTable,
    Session,
    Track,
    ViewedMonth,
)
from moodcal.payloads import (
    parse_playlist_id,
    parse_range,
    parse_recently_played,
    parse_sentiments,
    parse_tracks,
)

DEMO_INTERVAL = DateInterval(min=date(1990, 1, 1), max=date(2049, 12, 31))


class CalendarDataSource(Protocol):
    """Interface implemented by every calendar data source."""

    name: str
    requires_session: bool

    async def fetch_range(self, session: Session) -> DateInterval:
        """Return the interval of days that carry data."""

    async def fetch_sentiments(self, session: Session, month: ViewedMonth) -> SentimentTable:
        """Return the sentiment table for exactly ``month``."""

    async def fetch_tracks(self, session: Session, day: date) -> tuple[Track, ...]:
        """Return the tracks listened to on ``day``."""

    async def fetch_playlist_id(self, session: Session, day: date) -> str | None:
        """Return the shareable playlist created for ``day``."""

    async def fetch_recently_played(self, session: Session) -> str | None:
        """Return a description of the most recently played item."""

    async def upload(self, session: Session, filename: str, content: bytes) -> DateInterval:
        """Upload a listening history export and return the interval it covers."""


def _require_token(session: Session) -> str:
    if not session.token:
        raise NoSession()
    return session.token


class RemoteDataSource:
    """Source backed by the HTTP backend."""

    name = "remote"
    requires_session = True

    def __init__(self, client: CalendarApiClient) -> None:
        self._client = client

    async def fetch_range(self, session: Session) -> DateInterval:
        payload = await self._client.get_range(_require_token(session))
        return parse_range(payload)

    async def fetch_sentiments(self, session: Session, month: ViewedMonth) -> SentimentTable:
        payload = await self._client.get_sentiment_by_month(_require_token(session), month)
        return parse_sentiments(payload, month)

    async def fetch_tracks(self, session: Session, day: date) -> tuple[Track, ...]:
        payload = await self._client.get_tracks_by_day(_require_token(session), day)
        return parse_tracks(payload)

    async def fetch_playlist_id(self, session: Session, day: date) -> str | None:
        payload = await self._client.get_playlist_by_day(_require_token(session), day)
        return parse_playlist_id(payload)

    async def fetch_recently_played(self, session: Session) -> str | None:
        payload = await self._client.get_last(_require_token(session))
        return parse_recently_played(payload)

    async def upload(self, session: Session, filename: str, content: bytes) -> DateInterval:
        payload = await self._client.upload_file(_require_token(session), filename, content)
        return parse_range(payload)


class DemoDataSource:
    """Synthetic source used to showcase the calendar without a backend.

    Sentiments are seeded per day, so the same month always renders the same
    way.
    """

    name = "demo"
    requires_session = False

    def __init__(self, *, interval: DateInterval = DEMO_INTERVAL, seed: str = "moodcal") -> None:
        self._interval = interval
        self._seed = seed

    async def fetch_range(self, session: Session) -> DateInterval:
        return self._interval

    async def fetch_sentiments(self, session: Session, month: ViewedMonth) -> SentimentTable:
        entries = [
            self._synthetic_entry(day) for day in month.days() if self._interval.contains(day)
        ]
        return SentimentTable.from_entries(month, entries)

    async def fetch_tracks(self, session: Session, day: date) -> tuple[Track, ...]:
        return ()

    async def fetch_playlist_id(self, session: Session, day: date) -> str | None:
        return None

    async def fetch_recently_played(self, session: Session) -> str | None:
        return None

    async def upload(self, session: Session, filename: str, content: bytes) -> DateInterval:
        return self._interval

    def _synthetic_entry(self, day: date) -> DistributionSentiment:
        rng = random.Random(f"{self._seed}:{day.isoformat()}")
        raw = {label.value: rng.random() for label in SentimentLabel}
        total = sum(raw.values()) or 1.0
        return DistributionSentiment(
            date=day,
            weights={name: round(value / total, 4) for name, value in raw.items()},
        )


__all__ = [
    "CalendarDataSource",
    "DEMO_INTERVAL",
    "DemoDataSource",
    "RemoteDataSource",
]
