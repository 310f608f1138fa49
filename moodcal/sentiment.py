"""Dominant sentiment resolution and emoticon mapping."""

from __future__ import annotations

from collections.abc import Mapping

from moodcal.models import (
    DistributionSentiment,
    LabelSentiment,
    SentimentEntry,
    SentimentLabel,
)

EMOTICONS: Mapping[SentimentLabel, str] = {
    SentimentLabel.POSITIVE: "😊",
    SentimentLabel.NEGATIVE: "☹️",
    SentimentLabel.NEUTRAL: "😐",
    SentimentLabel.MIXED: "😕",
}
NO_DATA_GLYPH = "·"
UNRECOGNIZED_GLYPH = "?"

_PRIORITY: tuple[str, ...] = tuple(label.value for label in SentimentLabel)


def _ordered_weights(weights: Mapping[str, float]) -> list[tuple[str, float]]:
    """Return weights with recognised labels first in priority order.

    Unrecognised keys follow in their payload order.
    """

    normalised: dict[str, float] = {}
    for key, weight in weights.items():
        name = key.strip().lower()
        if name not in normalised:
            normalised[name] = float(weight)
    known = [(name, normalised[name]) for name in _PRIORITY if name in normalised]
    unknown = [(name, weight) for name, weight in normalised.items() if name not in _PRIORITY]
    return known + unknown


def dominant_label(entry: SentimentEntry) -> SentimentLabel | str | None:
    """Return the dominant classification for ``entry``.

    A distribution resolves to the key with strictly maximal weight; equal
    weights resolve to the earlier key in ``positive, negative, neutral,
    mixed`` order, then unrecognised keys in payload order. The result is a
    :class:`SentimentLabel`, the raw string when the label is not recognised,
    or ``None`` when the entry carries nothing to classify.
    """

    if isinstance(entry, LabelSentiment):
        raw = entry.label.strip()
        if not raw:
            return None
        return SentimentLabel.coerce(raw) or raw

    if isinstance(entry, DistributionSentiment):
        best: tuple[str, float] | None = None
        for name, weight in _ordered_weights(entry.weights):
            if best is None or weight > best[1]:
                best = (name, weight)
        if best is None:
            return None
        return SentimentLabel.coerce(best[0]) or best[0]

    raise TypeError(f"unsupported sentiment entry: {type(entry).__name__}")


def emoticon_for(label: SentimentLabel | str | None) -> str:
    """Map a classification to its glyph, with fallbacks for missing and unknown labels."""

    if label is None:
        return NO_DATA_GLYPH
    if isinstance(label, SentimentLabel):
        return EMOTICONS[label]
    return UNRECOGNIZED_GLYPH


__all__ = [
    "EMOTICONS",
    "NO_DATA_GLYPH",
    "UNRECOGNIZED_GLYPH",
    "dominant_label",
    "emoticon_for",
]
