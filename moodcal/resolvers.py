"""Generation-stamped resolvers for the asynchronous calendar inputs.

Every resolution is issued a :class:`Ticket` carrying the input tuple that
triggered it. A completion is applied only while its ticket is still the
latest one issued for the slot; anything older is discarded on arrival.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import date
import logging
from typing import Any, Generic, TypeVar

from moodcal.diagnostics import DiagnosticSink
from moodcal.errors import RESOLUTION_ERRORS, NoSession, StaleResult
from moodcal.logging import get_logger
from moodcal.logging_events import log_event
from moodcal.models import (
    DateInterval,
    DayDetail,
    DetailState,
    SentimentTable,
    Session,
    ViewedMonth,
)
from moodcal.sources import CalendarDataSource

K = TypeVar("K")
V = TypeVar("V")

logger = get_logger(__name__)

_MISSING: Any = object()


@dataclass(slots=True, frozen=True)
class Ticket(Generic[K]):
    key: K
    generation: int


class StampedSlot(Generic[K, V]):
    """Holds the latest value of one view-model slice."""

    def __init__(self, component: str, initial: V) -> None:
        self._component = component
        self._value = initial
        self._key: K | None = None
        self._generation = 0

    @property
    def value(self) -> V:
        return self._value

    @property
    def key(self) -> K | None:
        return self._key

    @property
    def generation(self) -> int:
        return self._generation

    def issue(self, key: K, *, placeholder: V = _MISSING) -> Ticket[K]:
        """Start a new generation for ``key``, superseding all earlier tickets."""

        self._generation += 1
        self._key = key
        if placeholder is not _MISSING:
            self._value = placeholder
        return Ticket(key=key, generation=self._generation)

    def is_current(self, ticket: Ticket[K]) -> bool:
        return ticket.generation == self._generation

    def commit(self, ticket: Ticket[K], value: V) -> bool:
        """Replace the value if ``ticket`` is current; report whether it was applied."""

        if not self.is_current(ticket):
            stale = StaleResult(self._component, ticket.key)
            log_event(
                logger,
                "resolver.stale_discarded",
                level=logging.DEBUG,
                component=self._component,
                generation=ticket.generation,
                current_generation=self._generation,
                detail=stale.message,
            )
            return False
        self._value = value
        return True


def _log_skip(component: str, reason: str) -> None:
    log_event(logger, "resolver.skipped", level=logging.DEBUG, component=component, reason=reason)


class RangeProvider:
    """Resolves the interval of days for which data exists.

    A failed lookup keeps the previous interval.
    """

    component = "range"

    def __init__(self, source: CalendarDataSource, sink: DiagnosticSink) -> None:
        self._source = source
        self._sink = sink
        self._slot: StampedSlot[tuple[Any, ...], DateInterval | None] = StampedSlot(
            self.component, None
        )

    @property
    def interval(self) -> DateInterval | None:
        return self._slot.value

    async def resolve(self, session: Session) -> DateInterval | None:
        if self._source.requires_session and not session.is_authenticated:
            _log_skip(self.component, "no_session")
            return self.interval
        ticket = self._slot.issue(("fetch", session.token))
        try:
            interval = await self._source.fetch_range(session)
        except NoSession:
            _log_skip(self.component, "no_session")
            return self.interval
        except RESOLUTION_ERRORS as exc:
            self._sink.report(self.component, exc, source=self._source.name)
            return self.interval
        if self._slot.commit(ticket, interval):
            log_event(
                logger,
                "range.resolved",
                source=self._source.name,
                min=interval.min.isoformat(),
                max=interval.max.isoformat(),
            )
        return self.interval

    def seed(self, interval: DateInterval) -> None:
        """Install an interval obtained out of band, superseding in-flight lookups."""

        ticket = self._slot.issue(("seed", interval))
        self._slot.commit(ticket, interval)
        log_event(
            logger,
            "range.resolved",
            source="seed",
            min=interval.min.isoformat(),
            max=interval.max.isoformat(),
        )


class SentimentTableResolver:
    """Resolves the sentiment table of the viewed month.

    Switching months resets the held table to the empty table of the new
    month straight away; a failure also leaves the empty table.
    """

    component = "sentiment"

    def __init__(self, source: CalendarDataSource, sink: DiagnosticSink) -> None:
        self._source = source
        self._sink = sink
        self._slot: StampedSlot[tuple[str | None, ViewedMonth], SentimentTable | None] = (
            StampedSlot(self.component, None)
        )

    @property
    def table(self) -> SentimentTable | None:
        return self._slot.value

    def _placeholder(self, month: ViewedMonth) -> SentimentTable:
        current = self._slot.value
        if current is not None and current.month == month:
            return current
        return SentimentTable.empty(month)

    async def resolve(self, session: Session, month: ViewedMonth) -> SentimentTable | None:
        ticket = self._slot.issue((session.token, month), placeholder=self._placeholder(month))
        if self._source.requires_session and not session.is_authenticated:
            _log_skip(self.component, "no_session")
            return self.table
        try:
            table = await self._source.fetch_sentiments(session, month)
        except NoSession:
            _log_skip(self.component, "no_session")
            return self.table
        except RESOLUTION_ERRORS as exc:
            self._sink.report(self.component, exc, source=self._source.name, month=month.as_param())
            self._slot.commit(ticket, SentimentTable.empty(month))
            return self.table
        if table.month != month:
            table = SentimentTable.from_entries(month, table.entries.values())
        if self._slot.commit(ticket, table):
            log_event(
                logger,
                "sentiment.resolved",
                source=self._source.name,
                month=month.as_param(),
                entries=len(table),
            )
        return self.table


class DayDetailResolver:
    """Resolves tracks and playlist for the selected day."""

    component = "detail"

    def __init__(self, source: CalendarDataSource, sink: DiagnosticSink) -> None:
        self._source = source
        self._sink = sink
        self._slot: StampedSlot[tuple[str | None, date] | None, DayDetail] = StampedSlot(
            self.component, DayDetail.none_selected()
        )

    @property
    def detail(self) -> DayDetail:
        return self._slot.value

    def select(self, session: Session, day: date) -> Ticket[tuple[str | None, date] | None]:
        """Move to ``loading`` for ``day``; earlier resolutions become stale."""

        return self._slot.issue((session.token, day), placeholder=DayDetail.loading(day))

    def clear(self) -> None:
        self._slot.issue(None, placeholder=DayDetail.none_selected())

    async def resolve(
        self,
        session: Session,
        day: date,
        *,
        interval: DateInterval | None,
        ticket: Ticket[tuple[str | None, date] | None] | None = None,
    ) -> DayDetail:
        if ticket is None:
            ticket = self.select(session, day)
        if interval is None or not interval.contains(day):
            self._slot.commit(ticket, DayDetail.empty(day))
            return self.detail
        if self._source.requires_session and not session.is_authenticated:
            _log_skip(self.component, "no_session")
            return self.detail

        tracks_result, playlist_result = await asyncio.gather(
            self._source.fetch_tracks(session, day),
            self._source.fetch_playlist_id(session, day),
            return_exceptions=True,
        )
        tracks, tracks_failed = self._unwrap("tracks", day, tracks_result)
        playlist_id, playlist_failed = self._unwrap("playlist", day, playlist_result)

        state = DetailState.FAILED if tracks_failed and playlist_failed else DetailState.LOADED
        detail = DayDetail(day=day, state=state, tracks=tracks, playlist_id=playlist_id)
        if self._slot.commit(ticket, detail):
            log_event(
                logger,
                "detail.resolved",
                day=day.isoformat(),
                state=state.value,
                tracks=len(tracks) if tracks is not None else None,
                has_playlist=playlist_id is not None,
            )
        return self.detail

    def _unwrap(self, part: str, day: date, result: Any) -> tuple[Any, bool]:
        if isinstance(result, RESOLUTION_ERRORS + (NoSession,)):
            self._sink.report(
                self.component, result, part=part, day=day.isoformat(), source=self._source.name
            )
            return None, True
        if isinstance(result, BaseException):
            raise result
        return result, False


class RecentlyPlayedResolver:
    """Resolves the "recently played" line shown next to the calendar."""

    component = "recently_played"

    def __init__(self, source: CalendarDataSource, sink: DiagnosticSink) -> None:
        self._source = source
        self._sink = sink
        self._slot: StampedSlot[str | None, str | None] = StampedSlot(self.component, None)

    @property
    def value(self) -> str | None:
        return self._slot.value

    async def resolve(self, session: Session) -> str | None:
        if self._source.requires_session and not session.is_authenticated:
            _log_skip(self.component, "no_session")
            return self.value
        ticket = self._slot.issue(session.token)
        try:
            value = await self._source.fetch_recently_played(session)
        except NoSession:
            _log_skip(self.component, "no_session")
            return self.value
        except RESOLUTION_ERRORS as exc:
            self._sink.report(self.component, exc, source=self._source.name)
            return self.value
        self._slot.commit(ticket, value)
        return self.value


__all__ = [
    "DayDetailResolver",
    "RangeProvider",
    "RecentlyPlayedResolver",
    "SentimentTableResolver",
    "StampedSlot",
    "Ticket",
]
