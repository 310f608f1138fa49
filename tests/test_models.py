from __future__ import annotations

from datetime import date

import pytest

from moodcal.models import (
    DateInterval,
    DayDetail,
    DetailState,
    LabelSentiment,
    SentimentLabel,
    SentimentTable,
    ViewedMonth,
)


@pytest.mark.parametrize(
    ("month", "expected"),
    [
        (ViewedMonth(2024, 2), 29),
        (ViewedMonth(2023, 2), 28),
        (ViewedMonth(1900, 2), 28),
        (ViewedMonth(2000, 2), 29),
        (ViewedMonth(2024, 4), 30),
        (ViewedMonth(2024, 12), 31),
    ],
)
def test_days_in_month_honours_leap_years(month: ViewedMonth, expected: int) -> None:
    assert month.days_in_month == expected


def test_month_navigation_wraps_years() -> None:
    assert ViewedMonth(2023, 12).next() == ViewedMonth(2024, 1)
    assert ViewedMonth(2024, 1).previous() == ViewedMonth(2023, 12)
    assert ViewedMonth(2024, 5).next().previous() == ViewedMonth(2024, 5)


def test_month_parse_and_param_form() -> None:
    month = ViewedMonth.parse("2024-03")
    assert month == ViewedMonth(2024, 3)
    assert month.as_param() == "2024-03"
    with pytest.raises(ValueError):
        ViewedMonth.parse("March 2024")
    with pytest.raises(ValueError):
        ViewedMonth.parse("2024-13")


def test_interval_rejects_inverted_bounds() -> None:
    with pytest.raises(ValueError):
        DateInterval(min=date(2024, 2, 1), max=date(2024, 1, 1))


def test_interval_contains_is_inclusive() -> None:
    interval = DateInterval(min=date(2024, 1, 10), max=date(2024, 1, 20))
    assert interval.contains(date(2024, 1, 10))
    assert interval.contains(date(2024, 1, 20))
    assert not interval.contains(date(2024, 1, 9))
    assert not interval.contains(date(2024, 1, 21))


def test_table_drops_entries_from_other_months() -> None:
    january = ViewedMonth(2024, 1)
    table = SentimentTable.from_entries(
        january,
        [
            LabelSentiment(date=date(2024, 1, 15), label="positive"),
            LabelSentiment(date=date(2024, 2, 15), label="negative"),
            LabelSentiment(date=date(2023, 1, 15), label="negative"),
        ],
    )

    assert len(table) == 1
    assert table.lookup(date(2024, 1, 15)) is not None
    assert table.lookup(date(2024, 2, 15)) is None
    assert table.lookup(date(2023, 1, 15)) is None


def test_table_keeps_latest_entry_for_duplicate_day() -> None:
    month = ViewedMonth(2024, 1)
    table = SentimentTable.from_entries(
        month,
        [
            LabelSentiment(date=date(2024, 1, 3), label="negative"),
            LabelSentiment(date=date(2024, 1, 3), label="positive"),
        ],
    )
    entry = table.lookup(date(2024, 1, 3))
    assert isinstance(entry, LabelSentiment)
    assert entry.label == "positive"


def test_label_coercion_is_case_insensitive() -> None:
    assert SentimentLabel.coerce(" Mixed ") is SentimentLabel.MIXED
    assert SentimentLabel.coerce("ecstatic") is None


def test_detail_factories() -> None:
    day = date(2024, 1, 1)
    assert DayDetail.none_selected().state is DetailState.NO_SELECTION
    assert DayDetail.loading(day).tracks is None
    empty = DayDetail.empty(day)
    assert empty.state is DetailState.LOADED
    assert empty.tracks == ()
