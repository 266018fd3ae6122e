"""Merge model output with computed statistics into final result objects.

When generation failed (``structured is None``) both assemblers return
fixed placeholder content that says live generation is unavailable, so the
caller always gets a usable object.
"""
from __future__ import annotations

import logging
from datetime import datetime as _dt
from datetime import timezone as _tz
from typing import Any, Dict, List, Optional, Sequence

from school_eval.analysis.keywords import (
    count_keywords,
    normalize_string_list,
    normalize_word_cloud,
)
from school_eval.analysis.sentiment import normalize_sentiment
from school_eval.grading import convert_to_grade
from school_eval.models import Project, School, respondent_label
from school_eval.reporting import config
from school_eval.reporting.aggregator import overall_question_average
from school_eval.reporting.models import (
    AggregatedStatistics,
    AnalysisResult,
    AnalysisStatistics,
    QuestionStat,
    Report,
    ReportSection,
    ReportStatistics,
)

logger = logging.getLogger(__name__)

__all__ = [
    "FALLBACK_SECTION_TITLES",
    "UNAVAILABLE_NOTICE",
    "assemble_analysis",
    "assemble_report",
    "default_title",
    "estimate_completion_rate",
]

UNAVAILABLE_NOTICE = "현재 AI 분석을 사용할 수 없어 기본 내용이 표시됩니다 (live analysis unavailable)."

FALLBACK_SECTION_TITLES = (
    "1. 요약 (Executive Summary)",
    "2. 조사 개요 (Survey Overview)",
    "3. 주요 발견사항 (Key Findings)",
    "4. 영역별 분석 (Domain Analysis)",
    "5. 강점과 개선점 (Strengths & Improvements)",
    "6. 제언 및 결론 (Recommendations)",
)


def default_title(school: Optional[School]) -> str:
    name = school.school_name if school else ""
    return f"{name} 학교 평가 보고서".strip()


def estimate_completion_rate(
    total_responses: int,
    total_questions: int,
    expected_respondents: int = config.EXPECTED_RESPONDENTS,
) -> int:
    """Approximate project completion as a percentage.

    Assumes *expected_respondents* answers per question; this is an
    estimate, not a measured response rate.
    """

    expected = total_questions * max(expected_respondents, 1)
    if expected <= 0:
        return 0
    return round(total_responses / expected * 100)


def _fallback_sections(
    project: Project, stats: AggregatedStatistics, average: float
) -> List[ReportSection]:
    type_lines = "\n".join(
        f"- {respondent_label(rtype)}: {count}건"
        for rtype, count in stats.responses_by_type.items()
    ) or "- 응답 없음"
    grade = convert_to_grade(average)
    average_line = (
        f"평균 평점은 {average:.2f}점({grade.label})입니다."
        if stats.has_ratings()
        else "평점 응답이 없어 평균을 계산할 수 없습니다."
    )

    contents = (
        f"{UNAVAILABLE_NOTICE}\n본 보고서는 '{project.title}' 설문조사 결과를 요약한 기본 보고서입니다. "
        "AI 생성이 가능해지면 다시 생성하여 실제 분석 보고서를 받을 수 있습니다.",
        f"평가년도: {project.year}년\n총 문항 수: {stats.total_questions}\n"
        f"총 응답 수: {stats.total_responses}\n\n대상별 응답:\n{type_lines}",
        f"{UNAVAILABLE_NOTICE}\n{average_line}",
        f"{UNAVAILABLE_NOTICE}\n영역별 상세 분석은 AI 생성이 가능할 때 제공됩니다.",
        f"{UNAVAILABLE_NOTICE}\n강점과 개선점은 AI 생성이 가능할 때 도출됩니다.",
        f"{UNAVAILABLE_NOTICE}\n맞춤형 제언은 AI 생성이 가능할 때 제공됩니다.",
    )
    return [
        ReportSection(title=title, content=content)
        for title, content in zip(FALLBACK_SECTION_TITLES, contents)
    ]


def _parse_sections(raw: Any) -> List[ReportSection]:
    if not isinstance(raw, list):
        return []
    sections = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        title = entry.get("title")
        content = entry.get("content")
        if not isinstance(title, str) or not isinstance(content, str):
            logger.debug("Skipping malformed report section: %r", entry)
            continue
        sections.append(ReportSection(title=title, content=content))
    return sections


def assemble_report(
    project: Project,
    school: Optional[School],
    stats: AggregatedStatistics,
    structured: Optional[Dict[str, Any]],
    *,
    question_stats: Optional[Sequence[QuestionStat]] = None,
    expected_respondents: int = config.EXPECTED_RESPONDENTS,
) -> Report:
    """Build the final :class:`Report`.

    *structured* is the parsed model payload (``{"title", "sections"}``) or
    *None* when generation failed, in which case the six placeholder sections
    are used.
    """

    if question_stats is not None:
        average = overall_question_average(question_stats)
    else:
        average = stats.average_rating

    if structured is not None:
        title = structured.get("title")
        if not isinstance(title, str) or not title.strip():
            title = default_title(school)
        sections = _parse_sections(structured.get("sections"))
        if not sections:
            logger.warning(
                "Model report for project %s has no usable sections", project.id
            )
        is_fallback = False
    else:
        title = default_title(school)
        sections = _fallback_sections(project, stats, average)
        is_fallback = True

    return Report(
        title=title,
        generated_at=_dt.now(tz=_tz.utc).isoformat(),
        sections=sections,
        statistics=ReportStatistics(
            total_responses=stats.total_responses,
            average_rating=average,
            completion_rate=estimate_completion_rate(
                stats.total_responses, stats.total_questions, expected_respondents
            ),
        ),
        grade=convert_to_grade(average),
        is_fallback=is_fallback,
    )


def assemble_analysis(
    stats: AggregatedStatistics,
    text_responses: Sequence[str],
    structured: Optional[Dict[str, Any]],
) -> AnalysisResult:
    """Build the :class:`AnalysisResult` for free-text responses.

    Without *structured* output the summary carries the unavailable notice
    and the word cloud is counted locally; themes, recommendations and
    sentiment stay empty.
    """

    statistics = AnalysisStatistics(
        total_responses=stats.total_responses,
        text_responses=len(text_responses),
        rating_responses=stats.rating_responses,
        average_rating=round(stats.average_rating, 1),
    )

    if structured is None:
        return AnalysisResult(
            summary=f"{UNAVAILABLE_NOTICE} 텍스트 응답 {len(text_responses)}건의 빈도 분석 결과만 제공합니다.",
            statistics=statistics,
            word_cloud=count_keywords(text_responses, config.MAX_WORDS),
            is_fallback=True,
        )

    summary = structured.get("summary")
    return AnalysisResult(
        summary=summary.strip() if isinstance(summary, str) else "",
        statistics=statistics,
        themes=normalize_string_list(structured.get("themes"), config.MAX_THEMES),
        recommendations=normalize_string_list(
            structured.get("recommendations"), config.MAX_RECOMMENDATIONS
        ),
        sentiment=normalize_sentiment(structured.get("sentiment")),
        word_cloud=normalize_word_cloud(structured.get("wordCloud"), config.MAX_WORDS),
    )
