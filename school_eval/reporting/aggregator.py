"""Aggregate raw survey responses into :class:`AggregatedStatistics`."""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from typing import Dict, List, Optional, Sequence

from school_eval.models import Question, Response
from school_eval.reporting.models import AggregatedStatistics, QuestionStat

logger = logging.getLogger(__name__)


def rating_values(responses: Sequence[Response]) -> List[int]:
    """Return every rating in ``[1, 5]`` found in *responses*."""
    values = []
    for response in responses:
        rating = response.rating()
        if rating is not None:
            values.append(rating)
    return values


def text_values(responses: Sequence[Response]) -> List[str]:
    """Return the non-empty free-text answers in *responses*."""
    texts = []
    for response in responses:
        text = response.text_value()
        if text is not None:
            texts.append(text)
    return texts


def _mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def aggregate(
    questions: Sequence[Question], responses: Sequence[Response]
) -> AggregatedStatistics:
    """Reduce *questions* and *responses* to per-type and overall statistics.

    The function is read-only; it does not mutate its inputs and returns the
    same result for the same snapshot.

    Responses whose respondent type has no questions in *questions* (for
    example after a question was deleted) still count toward
    ``responses_by_type`` but get no completion rate.
    """

    questions_by_type: Counter[str] = Counter(q.respondent_type for q in questions)
    responses_by_type: Counter[str] = Counter(r.respondent_type for r in responses)

    ratings = rating_values(responses)

    completion_rate: Dict[str, int] = {}
    for respondent_type, question_count in questions_by_type.items():
        responded = responses_by_type.get(respondent_type, 0)
        completion_rate[respondent_type] = round(
            responded / max(question_count, 1) * 100
        )

    orphaned = set(responses_by_type) - set(questions_by_type)
    if orphaned:
        logger.debug(
            "Responses for respondent types without questions: %s", sorted(orphaned)
        )

    return AggregatedStatistics(
        total_questions=len(questions),
        total_responses=len(responses),
        questions_by_type=dict(questions_by_type),
        responses_by_type=dict(responses_by_type),
        average_rating=_mean(ratings),
        rating_responses=len(ratings),
        completion_rate=completion_rate,
    )


def question_stats(
    questions: Sequence[Question], responses: Sequence[Response]
) -> List[QuestionStat]:
    """Return response count and rating average per question, in question order.

    Averages are rounded to one decimal; questions without ratings get
    ``None``.
    """

    by_question: Dict[str, List[Response]] = defaultdict(list)
    for response in responses:
        by_question[response.question_id].append(response)

    out: List[QuestionStat] = []
    for question in questions:
        answered = by_question.get(question.id, [])
        ratings = rating_values(answered)
        average: Optional[float] = round(_mean(ratings), 1) if ratings else None
        out.append(
            QuestionStat(
                question=question.text,
                response_count=len(answered),
                average_rating=average,
            )
        )
    return out


def overall_question_average(stats: Sequence[QuestionStat]) -> float:
    """Mean of the per-question averages that exist (``0`` if none)."""
    return _mean([s.average_rating for s in stats if s.average_rating is not None])


def average_by_type(responses: Sequence[Response]) -> Dict[str, float]:
    """Return the rating average for each respondent type that has ratings."""
    per_type: Dict[str, List[int]] = defaultdict(list)
    for response in responses:
        rating = response.rating()
        if rating is not None:
            per_type[response.respondent_type].append(rating)
    return {rtype: _mean(values) for rtype, values in per_type.items()}
