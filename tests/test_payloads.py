from __future__ import annotations

from datetime import date

import pytest

from moodcal.errors import MalformedResponse
from moodcal.models import DistributionSentiment, LabelSentiment, Track, ViewedMonth
from moodcal.payloads import (
    parse_playlist_id,
    parse_range,
    parse_recently_played,
    parse_sentiments,
    parse_tracks,
)

JANUARY = ViewedMonth(2024, 1)


def test_range_accepts_dates_and_datetimes() -> None:
    interval = parse_range({"min": "2024-01-10", "max": "2024-03-01T12:30:00Z"})
    assert interval.min == date(2024, 1, 10)
    assert interval.max == date(2024, 3, 1)


@pytest.mark.parametrize(
    "payload",
    [
        {"min": "", "max": ""},
        {"min": "2024-02-01", "max": "2024-01-01"},
        {"max": "2024-01-01"},
        ["2024-01-01", "2024-01-02"],
    ],
)
def test_range_rejects_malformed_payloads(payload: object) -> None:
    with pytest.raises(MalformedResponse):
        parse_range(payload)


def test_sentiments_accept_flat_label_list() -> None:
    table = parse_sentiments(
        [
            {"date": "2024-01-15", "sentiment": "positive"},
            {"date": "2024-01-16", "label": "negative"},
        ],
        JANUARY,
    )
    entry = table.lookup(date(2024, 1, 15))
    assert isinstance(entry, LabelSentiment)
    assert entry.label == "positive"
    assert len(table) == 2


def test_sentiments_accept_weighted_distribution() -> None:
    table = parse_sentiments(
        [{"date": "2024-01-15", "sentiment": {"positive": 0.4, "neutral": 0.4, "negative": 0.2}}],
        JANUARY,
    )
    entry = table.lookup(date(2024, 1, 15))
    assert isinstance(entry, DistributionSentiment)
    assert list(entry.weights) == ["positive", "neutral", "negative"]


def test_sentiments_accept_date_keyed_mapping() -> None:
    table = parse_sentiments(
        {"2024-01-03": "neutral", "2024-01-04": {"mixed": 1.0}}, JANUARY
    )
    assert isinstance(table.lookup(date(2024, 1, 3)), LabelSentiment)
    assert isinstance(table.lookup(date(2024, 1, 4)), DistributionSentiment)


def test_sentiments_are_scoped_to_requested_month() -> None:
    table = parse_sentiments(
        [
            {"date": "2024-01-31", "sentiment": "positive"},
            {"date": "2024-02-01", "sentiment": "negative"},
        ],
        JANUARY,
    )
    assert table.month == JANUARY
    assert len(table) == 1


@pytest.mark.parametrize(
    "payload",
    [
        [{"date": "2024-01-15", "sentiment": {"positive": 1.5}}],
        [{"date": "not-a-date", "sentiment": "positive"}],
        [{"sentiment": "positive"}],
        "positive",
    ],
)
def test_sentiments_reject_malformed_payloads(payload: object) -> None:
    with pytest.raises(MalformedResponse):
        parse_sentiments(payload, JANUARY)


def test_tracks_accept_list_and_wrapped_forms() -> None:
    raw = [
        {"name": "Song", "artists": ["A", "B"], "imageUrl": "http://img/1"},
        {"title": "Other", "artist": "C", "image": ""},
    ]
    expected = (
        Track(title="Song", artist="A, B", image_url="http://img/1"),
        Track(title="Other", artist="C", image_url=None),
    )
    assert parse_tracks(raw) == expected
    assert parse_tracks({"tracks": raw}) == expected
    assert parse_tracks([]) == ()


def test_tracks_reject_missing_list() -> None:
    with pytest.raises(MalformedResponse):
        parse_tracks({"items": []})


def test_playlist_id_blank_is_absent() -> None:
    assert parse_playlist_id({"playlist_id": "37i9dQZF"}) == "37i9dQZF"
    assert parse_playlist_id({"playlistId": "abc"}) == "abc"
    assert parse_playlist_id({"playlist_id": ""}) is None
    assert parse_playlist_id({"playlist_id": None}) is None
    with pytest.raises(MalformedResponse):
        parse_playlist_id("37i9dQZF")


def test_recently_played() -> None:
    assert parse_recently_played({"recently_played": "Song - Artist"}) == "Song - Artist"
    assert parse_recently_played({}) is None
