"""Unit tests for the survey domain types."""
from __future__ import annotations

import json

import pytest

from school_eval.exceptions import InvalidArgumentError
from school_eval.models import (
    PriorityItem,
    PriorityRanking,
    Question,
    RespondentType,
    Response,
    respondent_label,
)


def _response(value, respondent_type="teacher") -> Response:
    return Response(
        id="r1",
        question_id="q1",
        project_id="p1",
        respondent_type=respondent_type,
        value=value,
        session_id="sess",
    )


def test_priority_ranking_from_json_orders_by_rank():
    raw = json.dumps(
        [
            {"id": "a", "text": "시설 개선", "rank": 2},
            {"id": "b", "text": "행정업무 경감", "rank": 1},
        ]
    )
    ranking = PriorityRanking.from_json(raw)

    assert ranking.texts() == ["행정업무 경감", "시설 개선"]
    assert len(ranking) == 2
    assert json.loads(ranking.to_json())[0] == {
        "id": "b",
        "text": "행정업무 경감",
        "rank": 1,
    }


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        '{"id": "a"}',
        '[{"id": "a", "text": "x"}]',
        '[{"id": "a", "text": "x", "rank": 1}, {"id": "b", "text": "y", "rank": 1}]',
        '[{"id": "a", "text": "x", "rank": 2}]',
        '["plain"]',
    ],
)
def test_priority_ranking_rejects_bad_input(raw):
    with pytest.raises(InvalidArgumentError):
        PriorityRanking.from_json(raw)


def test_priority_ranking_empty_is_valid():
    assert len(PriorityRanking.from_json("[]")) == 0


def test_priority_ranking_direct_construction_validates():
    with pytest.raises(InvalidArgumentError):
        PriorityRanking(items=(PriorityItem("a", "x", 3),))


@pytest.mark.parametrize(
    "value, expected",
    [("5", 5), ("1", 1), (" 3 ", 3), ("0", None), ("6", None), ("좋아요", None), ("", None)],
)
def test_response_rating(value, expected):
    assert _response(value).rating() == expected


def test_response_text_value():
    assert _response("소통이 잘 됩니다").text_value() == "소통이 잘 됩니다"
    assert _response("4").text_value() is None
    assert _response("   ").text_value() is None
    ranking = PriorityRanking.from_json('[{"id": "a", "text": "x", "rank": 1}]')
    priority = _response(ranking)
    assert priority.text_value() is None
    assert priority.rating() is None


def test_response_from_dict_decodes_priority():
    data = {
        "id": "r9",
        "question_id": "q9",
        "project_id": "p1",
        "respondent_type": "parent",
        "response_value": [{"id": "a", "text": "급식", "rank": 1}],
        "session_id": "s",
        "created_at": "2025-03-01T09:00:00+00:00",
    }
    response = Response.from_dict(data, question_type="priority")

    assert isinstance(response.value, PriorityRanking)
    assert response.value.texts() == ["급식"]
    assert response.created_at.year == 2025


def test_question_from_dict_accepts_question_text():
    question = Question.from_dict(
        {
            "id": "q1",
            "project_id": "p1",
            "respondent_type": "student",
            "question_type": "rating",
            "question_text": "수업이 재미있나요?",
            "order_index": 3,
        }
    )
    assert question.text == "수업이 재미있나요?"
    assert question.order_index == 3
    assert question.is_required is False


def test_respondent_labels():
    assert RespondentType.TEACHER.label == "교원"
    assert respondent_label("parent") == "학부모"
    assert respondent_label("unknown") == "unknown"
