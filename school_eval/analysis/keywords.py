"""Keyword, theme and recommendation clean-up for model output.

The model returns word counts and theme lists in loosely followed shapes.
These helpers coerce them into bounded lists; ``count_keywords`` produces a
local word-frequency list when no model output is available.
"""
from __future__ import annotations

import math
import re
from collections import Counter
from typing import Any, Dict, Iterable, List

from school_eval.reporting import config
from school_eval.reporting.models import WordCount

_WORD_RE = re.compile(r"[A-Za-z가-힣][A-Za-z0-9가-힣'\-]*")

# Common Korean particles/fillers and English stop words
_STOPWORDS = {
    "그리고",
    "그런데",
    "하지만",
    "그래서",
    "너무",
    "정말",
    "매우",
    "조금",
    "있습니다",
    "없습니다",
    "합니다",
    "같습니다",
    "있어요",
    "좋겠습니다",
    "the",
    "and",
    "for",
    "with",
    "that",
    "this",
    "are",
    "was",
    "but",
    "not",
}

# Trailing particles stripped from Hangul tokens before counting
_PARTICLES = ("에서", "으로", "에게", "까지", "부터", "은", "는", "이", "가", "을", "를", "의", "에", "도", "로", "와", "과")


def _coerce_count(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return None
    if not isinstance(value, float) or not math.isfinite(value) or value < 0:
        return None
    return int(value)


def normalize_word_cloud(raw: Any, limit: int = config.MAX_WORDS) -> List[WordCount]:
    """Return at most *limit* :class:`WordCount` items sorted by count.

    Accepts ``{"word", "count"}`` entries (``text``/``value`` also work).
    Malformed entries are dropped and duplicate words merged; ties keep
    first-appearance order.
    """

    if not isinstance(raw, list):
        return []

    totals: Dict[str, int] = {}
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        word = entry.get("word", entry.get("text"))
        count = _coerce_count(entry.get("count", entry.get("value")))
        if not isinstance(word, str) or not word.strip() or count is None:
            continue
        key = word.strip()
        totals[key] = totals.get(key, 0) + count

    ordered = sorted(totals.items(), key=lambda item: -item[1])
    return [WordCount(word=word, count=count) for word, count in ordered[:limit]]


def normalize_string_list(raw: Any, limit: int) -> List[str]:
    """Return the non-empty strings of *raw*, deduplicated, capped at *limit*."""

    if not isinstance(raw, list):
        return []

    seen: List[str] = []
    for item in raw:
        if not isinstance(item, str):
            continue
        text = item.strip()
        if text and text not in seen:
            seen.append(text)
    return seen[:limit]


def _strip_particle(token: str) -> str:
    for particle in _PARTICLES:
        if token.endswith(particle) and len(token) - len(particle) >= 2:
            return token[: -len(particle)]
    return token


def count_keywords(texts: Iterable[str], limit: int = config.MAX_WORDS) -> List[WordCount]:
    """Count frequent words across *texts* without calling the model."""

    counts: Counter[str] = Counter()
    for text in texts:
        for match in _WORD_RE.finditer(text):
            token = _strip_particle(match.group(0).lower())
            if len(token) < 2 or token in _STOPWORDS:
                continue
            counts[token] += 1

    # most_common keeps insertion order for equal counts
    return [WordCount(word=w, count=c) for w, c in counts.most_common(limit)]
