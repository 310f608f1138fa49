"""Pure construction of the month grid rendered by the calendar."""

from __future__ import annotations

from moodcal.models import CalendarView, DateInterval, DayCell, SentimentTable, ViewedMonth
from moodcal.sentiment import dominant_label, emoticon_for


def build_calendar_view(
    month: ViewedMonth,
    interval: DateInterval | None,
    table: SentimentTable | None,
) -> CalendarView:
    """Return one :class:`DayCell` per day of ``month`` in ordinal order.

    Days outside ``interval`` (or every day when the interval is unresolved)
    are invisible and carry no emoticon. A table resolved for another month
    contributes nothing.
    """

    scoped = table if table is not None and table.month == month else None
    cells: list[DayCell] = []
    for ordinal in range(1, month.days_in_month + 1):
        day = month.day(ordinal)
        if interval is None or not interval.contains(day):
            cells.append(DayCell(ordinal=ordinal, date=day, is_visible=False))
            continue
        entry = scoped.lookup(day) if scoped is not None else None
        label = dominant_label(entry) if entry is not None else None
        cells.append(
            DayCell(
                ordinal=ordinal,
                date=day,
                is_visible=True,
                label=label,
                emoticon=emoticon_for(label),
            )
        )
    return tuple(cells)


__all__ = ["build_calendar_view"]
