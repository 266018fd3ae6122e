"""Convert 5-point survey averages into a 4-level evaluation grade.

Scale: 1 (strongly disagree) .. 5 (strongly agree).

    excellent  average >= 4.2
    good       3.4 <= average < 4.2
    average    2.6 <= average < 3.4
    poor       average < 2.6

Bins are closed at the lower bound and checked from the top, so a value on a
threshold gets the higher grade.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable

GRADE_THRESHOLDS: Dict[str, float] = {
    "excellent": 4.2,
    "good": 3.4,
    "average": 2.6,
}


class GradeLevel(str, Enum):
    """Ordinal grade levels (``poor < average < good < excellent``)."""

    POOR = "poor"
    AVERAGE = "average"
    GOOD = "good"
    EXCELLENT = "excellent"

    @property
    def rank(self) -> int:
        return _ORDER.index(self)

    def __lt__(self, other: object) -> bool:  # type: ignore[override]
        if not isinstance(other, GradeLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:  # type: ignore[override]
        if not isinstance(other, GradeLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:  # type: ignore[override]
        if not isinstance(other, GradeLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:  # type: ignore[override]
        if not isinstance(other, GradeLevel):
            return NotImplemented
        return self.rank >= other.rank


_ORDER = [GradeLevel.POOR, GradeLevel.AVERAGE, GradeLevel.GOOD, GradeLevel.EXCELLENT]


@dataclass(frozen=True)
class GradeInfo:
    level: GradeLevel
    label: str
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level.value,
            "label": self.label,
            "description": self.description,
        }


GRADE_INFO: Dict[GradeLevel, GradeInfo] = {
    GradeLevel.EXCELLENT: GradeInfo(GradeLevel.EXCELLENT, "우수", "목표 달성이 우수함"),
    GradeLevel.GOOD: GradeInfo(GradeLevel.GOOD, "양호", "목표에 근접함"),
    GradeLevel.AVERAGE: GradeInfo(GradeLevel.AVERAGE, "보통", "개선 필요"),
    GradeLevel.POOR: GradeInfo(GradeLevel.POOR, "미흡", "즉각적인 개선 필요"),
}


def convert_to_grade(average: float) -> GradeInfo:
    """Return the :class:`GradeInfo` for a 5-point *average*.

    *average* must be a finite number; rejecting NaN is the caller's job.
    """

    if average >= GRADE_THRESHOLDS["excellent"]:
        return GRADE_INFO[GradeLevel.EXCELLENT]
    if average >= GRADE_THRESHOLDS["good"]:
        return GRADE_INFO[GradeLevel.GOOD]
    if average >= GRADE_THRESHOLDS["average"]:
        return GRADE_INFO[GradeLevel.AVERAGE]
    return GRADE_INFO[GradeLevel.POOR]


def calculate_average(values: Iterable[str]) -> float:
    """Average the entries of *values* that parse as integers in ``[1, 5]``.

    Returns ``0`` when nothing qualifies.
    """

    numeric = []
    for raw in values:
        try:
            parsed = int(str(raw).strip())
        except ValueError:
            continue
        if 1 <= parsed <= 5:
            numeric.append(parsed)

    if not numeric:
        return 0.0
    return sum(numeric) / len(numeric)


def grade_distribution(scores: Iterable[float]) -> Dict[str, int]:
    """Count how many *scores* fall into each grade (all levels present)."""

    distribution = {level.value: 0 for level in reversed(_ORDER)}
    for score in scores:
        distribution[convert_to_grade(score).level.value] += 1
    return distribution
