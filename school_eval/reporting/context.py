"""Context dataclass for rendering evaluation reports.

This module defines `ReportContext`, a typed container that holds all
values expected by the Jinja2 templates in `school_eval/reporting/templates/`.
Building the context is separate from rendering so the formatting rules
(dates, labels, numbering) can be tested without template strings.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime as _dt
from typing import Any, Dict, List, Optional

from school_eval.reporting.models import Report

__all__ = [
    "EMPTY_SECTIONS_NOTICE",
    "ReportContext",
    "SectionContext",
    "build_report_context",
]

EMPTY_SECTIONS_NOTICE = "생성된 보고서 본문이 없습니다. 보고서를 다시 생성해 주세요."


@dataclass(slots=True)
class SectionContext:
    id: str
    title: str
    content: str


@dataclass(slots=True)
class ReportContext:
    """Container with all fields used by the report templates."""

    # Header & meta
    title: str
    date: str  # generation date, YYYY-MM-DD
    school_name: str
    year: Optional[int]

    # Statistics
    total_responses: int
    average_rating: str
    completion_rate: int
    grade_label: str
    grade_description: str

    sections: List[SectionContext] = field(default_factory=list)
    is_fallback: bool = False
    empty_notice: str = EMPTY_SECTIONS_NOTICE

    def to_dict(self) -> Dict[str, Any]:  # noqa: D401 – simple helper
        """Return a *plain* ``dict`` (recursively) for Jinja rendering."""
        return asdict(self)

    # Alias for convenience (e.g. template kwargs)
    __call__ = to_dict


def _format_date(iso_timestamp: str) -> str:
    try:
        return _dt.fromisoformat(iso_timestamp).strftime("%Y-%m-%d")
    except ValueError:
        return iso_timestamp


def build_report_context(
    report: Report, school_name: str = "", year: Optional[int] = None
) -> ReportContext:
    """Convert a :class:`Report` into a :class:`ReportContext`.

    The function is *pure*; it does not mutate *report*.
    """

    return ReportContext(
        title=report.title,
        date=_format_date(report.generated_at),
        school_name=school_name or "학교",
        year=year,
        total_responses=report.statistics.total_responses,
        average_rating=f"{report.statistics.average_rating:.2f}",
        completion_rate=report.statistics.completion_rate,
        grade_label=report.grade.label,
        grade_description=report.grade.description,
        sections=[
            SectionContext(id=str(idx), title=s.title, content=s.content.strip())
            for idx, s in enumerate(report.sections, start=1)
        ],
        is_fallback=report.is_fallback,
    )
