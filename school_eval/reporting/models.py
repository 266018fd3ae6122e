"""Data structures for reporting pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from school_eval.grading import GradeInfo


@dataclass(slots=True)
class AggregatedStatistics:
    """Counts and averages derived from one snapshot of a project's data."""

    total_questions: int
    total_responses: int
    questions_by_type: Dict[str, int]
    responses_by_type: Dict[str, int]
    average_rating: float
    rating_responses: int
    completion_rate: Dict[str, int]

    def has_ratings(self) -> bool:
        """``average_rating == 0`` is ambiguous; check the count instead."""
        return self.rating_responses > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalQuestions": self.total_questions,
            "totalResponses": self.total_responses,
            "responsesByType": dict(self.responses_by_type),
            "averageRating": self.average_rating,
            "completionRate": dict(self.completion_rate),
        }


@dataclass(slots=True)
class QuestionStat:
    question: str
    response_count: int
    average_rating: Optional[float] = None


@dataclass(slots=True)
class ReportSection:
    title: str
    content: str

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "content": self.content}


@dataclass(slots=True)
class ReportStatistics:
    total_responses: int
    average_rating: float
    completion_rate: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalResponses": self.total_responses,
            "averageRating": self.average_rating,
            "completionRate": self.completion_rate,
        }


@dataclass(slots=True)
class Report:
    """Final evaluation report handed to the presentation layer."""

    title: str
    generated_at: str  # ISO-8601 timestamp (UTC)
    sections: List[ReportSection]
    statistics: ReportStatistics
    grade: GradeInfo
    is_fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "generatedAt": self.generated_at,
            "sections": [section.to_dict() for section in self.sections],
            "statistics": self.statistics.to_dict(),
            "grade": self.grade.to_dict(),
            "isFallback": self.is_fallback,
        }


@dataclass(slots=True)
class WordCount:
    word: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"word": self.word, "count": self.count}


@dataclass(slots=True)
class Sentiment:
    """Percentages of positive / neutral / negative text (sum is 100)."""

    positive: int
    neutral: int
    negative: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "positive": self.positive,
            "neutral": self.neutral,
            "negative": self.negative,
        }


@dataclass(slots=True)
class AnalysisStatistics:
    total_responses: int
    text_responses: int
    rating_responses: int
    average_rating: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalResponses": self.total_responses,
            "textResponses": self.text_responses,
            "ratingResponses": self.rating_responses,
            "averageRating": self.average_rating,
        }


@dataclass(slots=True)
class AnalysisResult:
    """Free-text analysis of a project's responses."""

    summary: str
    statistics: AnalysisStatistics
    themes: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    sentiment: Optional[Sentiment] = None
    word_cloud: List[WordCount] = field(default_factory=list)
    is_fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary,
            "themes": list(self.themes),
            "recommendations": list(self.recommendations),
            "sentiment": self.sentiment.to_dict() if self.sentiment else None,
            "wordCloud": [item.to_dict() for item in self.word_cloud],
            "statistics": self.statistics.to_dict(),
            "isFallback": self.is_fallback,
        }
