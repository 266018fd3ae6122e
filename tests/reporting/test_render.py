"""Unit tests for report rendering helpers."""
from __future__ import annotations

import pytest

from school_eval.exceptions import InvalidArgumentError
from school_eval.models import Project, School
from school_eval.reporting.aggregator import aggregate
from school_eval.reporting.assembler import assemble_report
from school_eval.reporting.context import EMPTY_SECTIONS_NOTICE
from school_eval.reporting.models import Report, ReportSection
from school_eval.reporting.render import render_report, report_filename


def _fallback_report() -> Report:
    project = Project(id="p1", school_id="s1", title="2025 학교평가", year=2025)
    school = School(id="s1", school_code="A1", school_name="한빛초등학교")
    return assemble_report(project, school, aggregate([], []), None)


@pytest.fixture()
def report() -> Report:
    return _fallback_report()


def test_render_markdown(report: Report):
    out = render_report(report, school_name="한빛초등학교", year=2025)

    assert out.startswith("# 한빛초등학교 학교 평가 보고서")
    assert "> **평가년도:** 2025년" in out
    assert out.count("\n## ") == 6
    assert "기본 보고서가 표시됩니다" in out
    assert "| 종합 등급 | 미흡" in out


def test_render_text(report: Report):
    out = render_report(report, school_name="한빛초등학교", year=2025, fmt="text")

    assert "=" * 50 in out
    assert "학교: 한빛초등학교" in out
    assert "#" not in out.splitlines()[0]
    for section in report.sections:
        assert section.title in out


def test_render_preserves_markdown_content(report: Report):
    report.sections = [ReportSection("요약", "**굵게** & <태그>")]
    report.is_fallback = False
    out = render_report(report)

    assert "**굵게** & <태그>" in out
    assert "기본 보고서" not in out


def test_render_notes_empty_body(report: Report):
    report.sections = []
    report.is_fallback = False

    markdown = render_report(report, school_name="한빛초등학교")
    text = render_report(report, school_name="한빛초등학교", fmt="text")

    assert EMPTY_SECTIONS_NOTICE in markdown
    assert "\n## " not in markdown
    assert EMPTY_SECTIONS_NOTICE in text


def test_render_unknown_format(report: Report):
    with pytest.raises(InvalidArgumentError):
        render_report(report, fmt="pdf")


def test_report_filename():
    assert report_filename("한빛초", 2025) == "한빛초_2025년_평가보고서.md"
    assert report_filename("", None, "text") == "학교_년_평가보고서.txt"
    with pytest.raises(InvalidArgumentError):
        report_filename("x", 2025, "docx")
