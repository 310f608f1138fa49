"""Reactive controller combining session, range, sentiment and selection state."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from datetime import date
from typing import Any

from moodcal.calendar_view import build_calendar_view
from moodcal.diagnostics import DiagnosticSink
from moodcal.errors import RESOLUTION_ERRORS, NoSession, UploadFailed
from moodcal.models import (
    CalendarView,
    DateInterval,
    DayDetail,
    SentimentTable,
    Session,
    ViewedMonth,
)
from moodcal.resolvers import (
    DayDetailResolver,
    RangeProvider,
    RecentlyPlayedResolver,
    SentimentTableResolver,
)
from moodcal.session import SessionStore
from moodcal.sources import CalendarDataSource


class CalendarPipeline:
    """Owns the viewed month and selected day and keeps derived state current.

    Input changes schedule resolutions on the running event loop; the
    calendar view itself is rebuilt on every access from the latest resolved
    values.
    """

    def __init__(
        self,
        source: CalendarDataSource,
        *,
        session_store: SessionStore | None = None,
        sink: DiagnosticSink | None = None,
        month: ViewedMonth | None = None,
        today_fn: Callable[[], date] | None = None,
    ) -> None:
        self._source = source
        self._store = session_store or SessionStore()
        self._sink = sink or DiagnosticSink()
        today = (today_fn or date.today)()
        self._month = month or ViewedMonth.from_date(today)
        self._selected_day: date | None = None
        self._range = RangeProvider(source, self._sink)
        self._sentiment = SentimentTableResolver(source, self._sink)
        self._detail = DayDetailResolver(source, self._sink)
        self._recent = RecentlyPlayedResolver(source, self._sink)
        self._tasks: set[asyncio.Task[Any]] = set()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._unsubscribe: Callable[[], None] | None = None

    # -- lifecycle -----------------------------------------------------

    async def start(self) -> Session:
        """Adopt the stored token and schedule the initial resolutions."""

        if self._loop is not None:
            raise RuntimeError("pipeline already started")
        self._loop = asyncio.get_running_loop()
        self._unsubscribe = self._store.subscribe(self._on_session)
        session = self._store.load()
        if not session.is_authenticated and not self._source.requires_session:
            self._refresh_session_inputs()
        return session

    async def settle(self) -> None:
        """Wait until every scheduled resolution has completed."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def aclose(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        pending = list(self._tasks)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    # -- inputs --------------------------------------------------------

    def authenticate(self, token: str) -> Session:
        return self._store.set(token)

    def refresh(self) -> None:
        """Re-run every session-dependent resolution for the current inputs."""

        self._require_started()
        self._refresh_session_inputs()

    def show_month(self, month: ViewedMonth) -> None:
        self._require_started()
        if month == self._month:
            return
        self._month = month
        self._schedule(self._sentiment.resolve(self.session, month))

    def next_month(self) -> None:
        self.show_month(self._month.next())

    def previous_month(self) -> None:
        self.show_month(self._month.previous())

    def select_day(self, day: date) -> None:
        self._require_started()
        self._selected_day = day
        self._resolve_selected_detail()

    def clear_selection(self) -> None:
        self._selected_day = None
        self._detail.clear()

    async def upload(self, filename: str, content: bytes) -> DateInterval:
        """Upload a listening history file and seed the range from the reply.

        Unlike the other inputs, a failure here is raised to the caller.
        """

        self._require_started()
        try:
            interval = await self._source.upload(self.session, filename, content)
        except (NoSession, *RESOLUTION_ERRORS) as exc:
            self._sink.report("upload", exc, upload_name=filename)
            raise UploadFailed(f"Upload of {filename} failed: {exc}") from exc
        self._range.seed(interval)
        self._schedule(self._sentiment.resolve(self.session, self._month))
        self._resolve_selected_detail()
        return interval

    # -- derived state -------------------------------------------------

    @property
    def session(self) -> Session:
        return self._store.get()

    @property
    def session_store(self) -> SessionStore:
        return self._store

    @property
    def sink(self) -> DiagnosticSink:
        return self._sink

    @property
    def viewed_month(self) -> ViewedMonth:
        return self._month

    @property
    def selected_day(self) -> date | None:
        return self._selected_day

    @property
    def interval(self) -> DateInterval | None:
        return self._range.interval

    @property
    def sentiment_table(self) -> SentimentTable | None:
        return self._sentiment.table

    @property
    def recently_played(self) -> str | None:
        return self._recent.value

    @property
    def day_detail(self) -> DayDetail:
        return self._detail.detail

    @property
    def calendar_view(self) -> CalendarView:
        return build_calendar_view(self._month, self._range.interval, self._sentiment.table)

    # -- scheduling ----------------------------------------------------

    def _require_started(self) -> None:
        if self._loop is None:
            raise RuntimeError("pipeline has not been started")

    def _schedule(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        if self._loop is None:
            coro.close()
            raise RuntimeError("pipeline has not been started")
        task = self._loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _on_session(self, session: Session) -> None:
        loop = self._loop
        if loop is None:
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            self._refresh_session_inputs()
        else:
            loop.call_soon_threadsafe(self._refresh_session_inputs)

    def _refresh_session_inputs(self) -> None:
        session = self.session
        self._schedule(self._resolve_range(session))
        self._schedule(self._sentiment.resolve(session, self._month))
        self._schedule(self._recent.resolve(session))
        self._resolve_selected_detail()

    async def _resolve_range(self, session: Session) -> None:
        before = self._range.interval
        after = await self._range.resolve(session)
        if after != before:
            self._resolve_selected_detail()

    def _resolve_selected_detail(self) -> None:
        day = self._selected_day
        if day is None:
            return
        session = self.session
        ticket = self._detail.select(session, day)
        self._schedule(
            self._detail.resolve(session, day, interval=self._range.interval, ticket=ticket)
        )


__all__ = ["CalendarPipeline"]
