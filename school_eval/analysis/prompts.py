"""Build generation requests for response analysis and report writing.

Builders only render text. Sending the request, and bounding it with a
timeout, is done by the pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from school_eval.models import Project, School, respondent_label
from school_eval.reporting import config
from school_eval.reporting.models import AggregatedStatistics, QuestionStat

ANALYSIS_KEYS: Tuple[str, ...] = (
    "summary",
    "themes",
    "recommendations",
    "sentiment",
    "wordCloud",
)
REPORT_KEYS: Tuple[str, ...] = ("title", "sections")

REPORT_SECTION_TITLES: Tuple[str, ...] = (
    "요약 (Executive Summary)",
    "조사 개요",
    "주요 발견사항",
    "영역별 분석",
    "강점과 개선점",
    "제언 및 결론",
)


@dataclass(frozen=True)
class GenerationRequest:
    """Chat messages plus the JSON keys the answer is expected to carry."""

    messages: List[Dict[str, str]]
    expected_keys: Tuple[str, ...] = ()
    timeout: float = config.ANALYSIS_TIMEOUT_SECONDS
    temperature: float = 0.4
    metadata: Dict[str, int] = field(default_factory=dict)

    @property
    def prompt(self) -> str:
        """The user message text."""
        return self.messages[-1]["content"]


_ANALYSIS_SYSTEM = (
    "당신은 학교 평가 설문 분석 전문가입니다. "
    "응답은 반드시 요청된 JSON 객체 하나만 포함해야 합니다."
)

_ANALYSIS_SCHEMA = """{
  "summary": "전체 요약 내용",
  "themes": ["주제1", "주제2", "주제3", "주제4", "주제5"],
  "recommendations": ["추천1", "추천2", "추천3"],
  "sentiment": { "positive": 60, "neutral": 30, "negative": 10 },
  "wordCloud": [{"word": "단어", "count": 10}]
}"""


def build_analysis_prompt(
    text_responses: Sequence[str], limit: int = config.ANALYSIS_TEXT_LIMIT
) -> GenerationRequest:
    """Render free-text *text_responses* into an analysis request.

    Only the first *limit* responses are embedded; the rest are dropped
    silently to bound the request size.
    """

    excerpts = list(text_responses)[: max(limit, 0)]
    user_prompt = (
        f"다음 설문 응답 데이터를 분석해주세요.\n\n"
        f"## 텍스트 응답 ({len(text_responses)}개):\n"
        + "\n---\n".join(excerpts)
        + "\n\n## 분석 요청:\n"
        "1. 전체 요약 (3-5문장)\n"
        f"2. 주요 주제 {config.MAX_THEMES}가지 (키워드 형태)\n"
        f"3. 개선 추천사항 {config.MAX_RECOMMENDATIONS}가지\n"
        "4. 감성 분석 (긍정/중립/부정 비율, 합계 100)\n"
        f"5. 자주 언급되는 단어 TOP {config.MAX_WORDS}\n\n"
        "JSON 형식으로 응답해주세요:\n" + _ANALYSIS_SCHEMA
    )
    return GenerationRequest(
        messages=[
            {"role": "system", "content": _ANALYSIS_SYSTEM},
            {"role": "user", "content": user_prompt},
        ],
        expected_keys=ANALYSIS_KEYS,
        timeout=config.ANALYSIS_TIMEOUT_SECONDS,
        metadata={"embedded": len(excerpts), "total": len(text_responses)},
    )


_REPORT_SYSTEM = (
    "당신은 학교 평가 보고서 작성 전문가입니다. "
    "응답은 반드시 요청된 JSON 객체 하나만 포함해야 합니다."
)


def _format_question_line(stat: QuestionStat) -> str:
    average = stat.average_rating if stat.average_rating is not None else "N/A"
    return f"- {stat.question}: 응답 {stat.response_count}개, 평균 {average}점"


def build_report_prompt(
    project: Project,
    school: Optional[School],
    stats: AggregatedStatistics,
    question_stats: Sequence[QuestionStat],
    text_responses: Sequence[Tuple[str, str]],
    *,
    question_limit: int = config.REPORT_QUESTION_LIMIT,
    text_limit: int = config.REPORT_TEXT_LIMIT,
) -> GenerationRequest:
    """Render aggregated data into a report-writing request.

    *text_responses* holds ``(respondent_type, text)`` pairs; each excerpt is
    tagged with its respondent type.
    """

    type_lines = "\n".join(
        f"- {respondent_label(rtype)}: {count}명"
        for rtype, count in stats.responses_by_type.items()
    )
    question_lines = "\n".join(
        _format_question_line(s) for s in list(question_stats)[:question_limit]
    )
    excerpts = [f"[{rtype}] {text}" for rtype, text in list(text_responses)[:text_limit]]
    section_lines = "\n".join(
        f"{idx}. {title}" for idx, title in enumerate(REPORT_SECTION_TITLES, start=1)
    )

    user_prompt = (
        "다음 데이터를 바탕으로 종합 평가 보고서를 작성해주세요.\n\n"
        "## 프로젝트 정보\n"
        f"- 프로젝트명: {project.title or '학교 평가'}\n"
        f"- 학교명: {school.school_name if school else '미지정'}\n"
        f"- 총 응답 수: {stats.total_responses}\n\n"
        "## 응답자 유형별 통계\n"
        f"{type_lines or '(응답 없음)'}\n\n"
        "## 질문별 통계\n"
        f"{question_lines or '(질문 없음)'}\n\n"
        f"## 주요 텍스트 응답 (최대 {text_limit}개)\n"
        + ("\n---\n".join(excerpts) or "(텍스트 응답 없음)")
        + "\n\n## 보고서 작성 요청:\n"
        "다음 섹션을 포함한 종합 평가 보고서를 작성해주세요:\n"
        f"{section_lines}\n\n"
        "JSON 형식으로 응답해주세요:\n"
        "{\n"
        '  "title": "보고서 제목",\n'
        '  "sections": [\n'
        '    {"title": "섹션 제목", "content": "마크다운 형식의 내용"}\n'
        "  ]\n"
        "}"
    )
    return GenerationRequest(
        messages=[
            {"role": "system", "content": _REPORT_SYSTEM},
            {"role": "user", "content": user_prompt},
        ],
        expected_keys=REPORT_KEYS,
        timeout=config.REPORT_TIMEOUT_SECONDS,
        metadata={
            "questions": min(len(question_stats), question_limit),
            "embedded": len(excerpts),
        },
    )
