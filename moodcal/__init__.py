"""Reactive state pipeline for the mood calendar."""

from moodcal.calendar_view import build_calendar_view
from moodcal.models import (
    DateInterval,
    DayCell,
    DayDetail,
    DetailState,
    SentimentLabel,
    SentimentTable,
    Session,
    Track,
    ViewedMonth,
)
from moodcal.pipeline import CalendarPipeline
from moodcal.session import FsTokenStore, MemoryTokenStore, SessionStore
from moodcal.sources import DemoDataSource, RemoteDataSource

__all__ = [
    "CalendarPipeline",
    "DateInterval",
    "DayCell",
    "DayDetail",
    "DemoDataSource",
    "DetailState",
    "FsTokenStore",
    "MemoryTokenStore",
    "RemoteDataSource",
    "SentimentLabel",
    "SentimentTable",
    "Session",
    "SessionStore",
    "Track",
    "ViewedMonth",
    "build_calendar_view",
]
