"""Domain models for the mood calendar view-models."""

from __future__ import annotations

import calendar
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Literal


@dataclass(slots=True, frozen=True)
class Session:
    """Process wide authentication state; ``token`` is ``None`` until login."""

    token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)


@dataclass(slots=True, frozen=True, order=True)
class ViewedMonth:
    """A calendar month identified by year and month number."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be within 1..12, got {self.month}")
        if not 1 <= self.year <= 9999:
            raise ValueError(f"year must be within 1..9999, got {self.year}")

    @classmethod
    def from_date(cls, value: date) -> ViewedMonth:
        return cls(value.year, value.month)

    @classmethod
    def parse(cls, value: str) -> ViewedMonth:
        """Parse the ``YYYY-MM`` form used on the wire and the command line."""

        year_text, sep, month_text = value.strip().partition("-")
        if not sep:
            raise ValueError(f"expected YYYY-MM, got {value!r}")
        try:
            return cls(int(year_text), int(month_text))
        except ValueError as exc:
            raise ValueError(f"expected YYYY-MM, got {value!r}") from exc

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    def day(self, ordinal: int) -> date:
        return date(self.year, self.month, ordinal)

    def days(self) -> Iterator[date]:
        for ordinal in range(1, self.days_in_month + 1):
            yield self.day(ordinal)

    def contains(self, value: date) -> bool:
        return value.year == self.year and value.month == self.month

    def next(self) -> ViewedMonth:
        if self.month == 12:
            return ViewedMonth(self.year + 1, 1)
        return ViewedMonth(self.year, self.month + 1)

    def previous(self) -> ViewedMonth:
        if self.month == 1:
            return ViewedMonth(self.year - 1, 12)
        return ViewedMonth(self.year, self.month - 1)

    def as_param(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def __str__(self) -> str:
        return self.as_param()


@dataclass(slots=True, frozen=True)
class DateInterval:
    """Inclusive range of days for which the backend holds data."""

    min: date
    max: date

    def __post_init__(self) -> None:
        if self.min > self.max:
            raise ValueError(f"interval min {self.min} is after max {self.max}")

    def contains(self, value: date) -> bool:
        return self.min <= value <= self.max


class SentimentLabel(str, Enum):
    """Closed set of sentiment classifications.

    Declaration order is also the tie-break priority used when two labels
    share the maximal weight.
    """

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    MIXED = "mixed"

    @classmethod
    def coerce(cls, raw: str) -> SentimentLabel | None:
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


@dataclass(slots=True, frozen=True)
class LabelSentiment:
    """Single label reported for a day."""

    date: date
    label: str
    kind: Literal["label"] = field(default="label", init=False)


@dataclass(slots=True, frozen=True)
class DistributionSentiment:
    """Per-label weights reported for a day, in payload order."""

    date: date
    weights: Mapping[str, float]
    kind: Literal["distribution"] = field(default="distribution", init=False)


SentimentEntry = LabelSentiment | DistributionSentiment


@dataclass(slots=True, frozen=True)
class SentimentTable:
    """Sentiment entries for the days of exactly one month.

    Entries dated outside ``month`` are dropped on construction; when two
    entries share a date the later one wins.
    """

    month: ViewedMonth
    entries: Mapping[date, SentimentEntry] = field(default_factory=dict)

    @classmethod
    def empty(cls, month: ViewedMonth) -> SentimentTable:
        return cls(month=month)

    @classmethod
    def from_entries(cls, month: ViewedMonth, entries: Iterable[SentimentEntry]) -> SentimentTable:
        scoped: dict[date, SentimentEntry] = {}
        for entry in entries:
            if month.contains(entry.date):
                scoped[entry.date] = entry
        return cls(month=month, entries=scoped)

    def lookup(self, day: date) -> SentimentEntry | None:
        if not self.month.contains(day):
            return None
        return self.entries.get(day)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(slots=True, frozen=True)
class DayCell:
    ordinal: int
    date: date
    is_visible: bool
    label: SentimentLabel | str | None = None
    emoticon: str | None = None


CalendarView = tuple[DayCell, ...]


@dataclass(slots=True, frozen=True)
class Track:
    title: str
    artist: str
    image_url: str | None = None


class DetailState(str, Enum):
    NO_SELECTION = "no_selection"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(slots=True, frozen=True)
class DayDetail:
    """Track list and playlist for the selected day.

    ``tracks`` is ``None`` when the tracks could not be resolved, which is
    distinct from an empty tuple (the day has no tracks).
    """

    day: date | None
    state: DetailState
    tracks: tuple[Track, ...] | None = None
    playlist_id: str | None = None

    @classmethod
    def none_selected(cls) -> DayDetail:
        return cls(day=None, state=DetailState.NO_SELECTION)

    @classmethod
    def loading(cls, day: date) -> DayDetail:
        return cls(day=day, state=DetailState.LOADING)

    @classmethod
    def empty(cls, day: date) -> DayDetail:
        return cls(day=day, state=DetailState.LOADED, tracks=(), playlist_id=None)


__all__ = [
    "CalendarView",
    "DateInterval",
    "DayCell",
    "DayDetail",
    "DetailState",
    "DistributionSentiment",
    "LabelSentiment",
    "SentimentEntry",
    "SentimentLabel",
    "SentimentTable",
    "Session",
    "Track",
    "ViewedMonth",
]
