"""Unit tests for ReportContext dataclass."""
from __future__ import annotations

from school_eval.grading import convert_to_grade
from school_eval.reporting.context import ReportContext, build_report_context
from school_eval.reporting.models import Report, ReportSection, ReportStatistics


def _sample_report() -> Report:
    return Report(
        title="한빛초등학교 학교 평가 보고서",
        generated_at="2025-06-12T08:30:00+00:00",
        sections=[
            ReportSection("요약", "  전반적으로 양호합니다.\n"),
            ReportSection("제언", "소통 강화"),
        ],
        statistics=ReportStatistics(
            total_responses=42, average_rating=3.71428, completion_rate=35
        ),
        grade=convert_to_grade(3.71428),
    )


def test_build_report_context():
    ctx = build_report_context(_sample_report(), "한빛초등학교", 2025)

    assert ctx.date == "2025-06-12"
    assert ctx.average_rating == "3.71"
    assert ctx.grade_label == "양호"
    assert [s.id for s in ctx.sections] == ["1", "2"]
    assert ctx.sections[0].content == "전반적으로 양호합니다."
    assert ctx.year == 2025


def test_to_dict_roundtrip() -> None:
    """`to_dict` should faithfully convert to nested dict and alias __call__."""
    ctx = build_report_context(_sample_report(), "한빛초등학교", 2025)
    as_dict = ctx.to_dict()

    assert as_dict["title"] == ctx.title
    assert as_dict["sections"][1] == {"id": "2", "title": "제언", "content": "소통 강화"}
    assert ctx() == as_dict


def test_defaults():
    ctx = ReportContext(
        title="t",
        date="2025-01-01",
        school_name="학교",
        year=None,
        total_responses=0,
        average_rating="0.00",
        completion_rate=0,
        grade_label="미흡",
        grade_description="",
    )
    assert ctx.sections == []
    assert ctx.is_fallback is False
    assert ctx.to_dict()["sections"] == []


def test_unparsable_date_passed_through():
    report = _sample_report()
    report.generated_at = "yesterday"
    assert build_report_context(report).date == "yesterday"
    assert build_report_context(report).school_name == "학교"
