"""Sentiment breakdown clean-up.

The analysis prompt asks the model for ``{"positive", "neutral",
"negative"}`` percentages. Models return floats, strings, or totals that do
not add up; ``normalize_sentiment`` rescales whatever came back into integer
percentages that sum to exactly 100.
"""
from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any, Dict, Optional

from school_eval.reporting.models import Sentiment

_logger = logging.getLogger(__name__)


class SentimentLabel(str, Enum):
    """Enumeration of supported sentiment classes."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


def _coerce(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip().rstrip("%"))
        except ValueError:
            return 0.0
    else:
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return max(0.0, number)


def normalize_sentiment(raw: Any) -> Optional[Sentiment]:
    """Return a :class:`Sentiment` summing to 100, or *None* if unusable.

    Uses largest-remainder rounding so the three integers always add up.
    """

    if not isinstance(raw, dict):
        return None

    values: Dict[SentimentLabel, float] = {
        label: _coerce(raw.get(label.value)) for label in SentimentLabel
    }
    total = sum(values.values())
    if total <= 0 or not math.isfinite(total):
        _logger.debug("Discarding unusable sentiment payload: %r", raw)
        return None

    scaled = {label: value / total * 100 for label, value in values.items()}
    floors = {label: math.floor(value) for label, value in scaled.items()}
    remainder = 100 - sum(floors.values())

    by_fraction = sorted(
        SentimentLabel, key=lambda label: scaled[label] - floors[label], reverse=True
    )
    for label in by_fraction[:remainder]:
        floors[label] += 1

    return Sentiment(
        positive=floors[SentimentLabel.POSITIVE],
        neutral=floors[SentimentLabel.NEUTRAL],
        negative=floors[SentimentLabel.NEGATIVE],
    )
