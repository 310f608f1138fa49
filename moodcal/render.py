"""Plain-text rendering of the calendar and day detail view-models."""

from __future__ import annotations

import calendar

from moodcal.models import CalendarView, DayCell, DayDetail, DetailState, ViewedMonth

_WEEKDAY_HEADER = " ".join(f"{name[:2]:>4}" for name in calendar.day_abbr)
_BLANK = " " * 4


def _cell_text(cell: DayCell) -> str:
    if not cell.is_visible:
        return f"{cell.ordinal:>3} "
    return f"{cell.ordinal:>3}{cell.emoticon or ''}"


def render_calendar(month: ViewedMonth, view: CalendarView) -> str:
    """Render ``view`` as a Monday-first grid; inactive days carry no glyph."""

    title = f"{calendar.month_name[month.month]} {month.year}"
    lines = [title.center(len(_WEEKDAY_HEADER)).rstrip(), _WEEKDAY_HEADER]
    week: list[str] = [_BLANK] * month.first_day.weekday()
    for cell in view:
        week.append(_cell_text(cell))
        if len(week) == 7:
            lines.append(" ".join(week).rstrip())
            week = []
    if week:
        lines.append(" ".join(week).rstrip())
    return "\n".join(lines)


def render_detail(detail: DayDetail) -> str:
    if detail.state is DetailState.NO_SELECTION or detail.day is None:
        return "No day selected."
    header = detail.day.isoformat()
    if detail.state is DetailState.LOADING:
        return f"{header}: loading..."
    lines = [header]
    if detail.tracks is None:
        lines.append("  tracks unavailable")
    elif not detail.tracks:
        lines.append("  no tracks")
    else:
        for index, track in enumerate(detail.tracks, start=1):
            artist = f" - {track.artist}" if track.artist else ""
            lines.append(f"  {index:>2}. {track.title}{artist}")
    if detail.playlist_id:
        lines.append(f"  playlist: {detail.playlist_id}")
    return "\n".join(lines)


__all__ = ["render_calendar", "render_detail"]
