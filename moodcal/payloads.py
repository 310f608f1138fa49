"""Pydantic models for the backend JSON payloads.

Each ``parse_*`` helper validates a decoded JSON document and converts it
into domain models, raising :class:`MalformedResponse` on any mismatch.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Mapping
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from moodcal.errors import MalformedResponse
from moodcal.models import (
    DateInterval,
    DistributionSentiment,
    LabelSentiment,
    SentimentEntry,
    SentimentTable,
    Track,
    ViewedMonth,
)


def _coerce_day(value: Any) -> Any:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, str):
        text = value.strip()
        if "T" in text or " " in text:
            return dt.datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        return dt.date.fromisoformat(text)
    return value


class RangePayload(BaseModel):
    """Valid date interval as returned by ``/getRange`` and ``/uploadFiles``."""

    model_config = ConfigDict(frozen=True)

    min: dt.date
    max: dt.date

    @field_validator("min", "max", mode="before")
    @classmethod
    def _parse_day(cls, value: Any) -> Any:
        return _coerce_day(value)

    @model_validator(mode="after")
    def _ensure_order(self) -> RangePayload:
        if self.min > self.max:
            raise ValueError("min must not be after max")
        return self

    def to_interval(self) -> DateInterval:
        return DateInterval(min=self.min, max=self.max)


class SentimentRecord(BaseModel):
    """One day of sentiment data, either a flat label or a weight mapping."""

    model_config = ConfigDict(frozen=True)

    day: dt.date = Field(validation_alias=AliasChoices("date", "day"))
    value: str | dict[str, float] = Field(
        validation_alias=AliasChoices("sentiment", "label", "distribution", "weights")
    )

    @field_validator("day", mode="before")
    @classmethod
    def _parse_day(cls, value: Any) -> Any:
        return _coerce_day(value)

    @field_validator("value")
    @classmethod
    def _check_weights(cls, value: str | dict[str, float]) -> str | dict[str, float]:
        if isinstance(value, dict):
            for name, weight in value.items():
                if not 0.0 <= weight <= 1.0:
                    raise ValueError(f"weight for {name!r} must be within [0, 1]")
        return value

    def to_entry(self) -> SentimentEntry:
        if isinstance(self.value, str):
            return LabelSentiment(date=self.day, label=self.value)
        return DistributionSentiment(date=self.day, weights=dict(self.value))


class TrackPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = Field(validation_alias=AliasChoices("title", "name", "track"))
    artist: str = Field(default="", validation_alias=AliasChoices("artist", "artists"))
    image_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("image_url", "imageUrl", "image", "cover"),
    )

    @field_validator("artist", mode="before")
    @classmethod
    def _join_artists(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return ", ".join(str(item) for item in value if item)
        if value is None:
            return ""
        return value

    @field_validator("image_url", mode="before")
    @classmethod
    def _blank_image(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_track(self) -> Track:
        return Track(title=self.title, artist=self.artist, image_url=self.image_url)


class PlaylistPayload(BaseModel):
    playlist_id: str | None = Field(
        default=None, validation_alias=AliasChoices("playlist_id", "playlistId")
    )


class RecentlyPlayedPayload(BaseModel):
    recently_played: str | None = Field(
        default=None, validation_alias=AliasChoices("recently_played", "recentlyPlayed")
    )


_SENTIMENT_LIST = TypeAdapter(list[SentimentRecord])
_TRACK_LIST = TypeAdapter(list[TrackPayload])


def _malformed(what: str, exc: Exception) -> MalformedResponse:
    return MalformedResponse(f"invalid {what} payload: {exc}")


def parse_range(payload: Any) -> DateInterval:
    try:
        return RangePayload.model_validate(payload).to_interval()
    except ValidationError as exc:
        raise _malformed("range", exc) from exc


def parse_sentiments(payload: Any, month: ViewedMonth) -> SentimentTable:
    """Build the table for ``month``; records dated in other months are dropped."""

    if isinstance(payload, Mapping):
        nested = payload.get("sentiments")
        if isinstance(nested, list):
            payload = nested
        else:
            payload = [{"date": key, "sentiment": value} for key, value in payload.items()]
    try:
        records = _SENTIMENT_LIST.validate_python(payload)
    except ValidationError as exc:
        raise _malformed("sentiment", exc) from exc
    return SentimentTable.from_entries(month, (record.to_entry() for record in records))


def parse_tracks(payload: Any) -> tuple[Track, ...]:
    if isinstance(payload, Mapping):
        payload = payload.get("tracks")
    try:
        records = _TRACK_LIST.validate_python(payload)
    except ValidationError as exc:
        raise _malformed("tracks", exc) from exc
    return tuple(record.to_track() for record in records)


def parse_playlist_id(payload: Any) -> str | None:
    try:
        record = PlaylistPayload.model_validate(payload)
    except ValidationError as exc:
        raise _malformed("playlist", exc) from exc
    value = (record.playlist_id or "").strip()
    return value or None


def parse_recently_played(payload: Any) -> str | None:
    try:
        record = RecentlyPlayedPayload.model_validate(payload)
    except ValidationError as exc:
        raise _malformed("recently played", exc) from exc
    return record.recently_played


__all__ = [
    "PlaylistPayload",
    "RangePayload",
    "RecentlyPlayedPayload",
    "SentimentRecord",
    "TrackPayload",
    "parse_playlist_id",
    "parse_range",
    "parse_recently_played",
    "parse_sentiments",
    "parse_tracks",
]
