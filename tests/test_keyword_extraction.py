"""Unit tests for keyword, theme and word-cloud clean-up."""
import json
from typing import List

import pytest

from school_eval.analysis.keywords import (
    count_keywords,
    normalize_string_list,
    normalize_word_cloud,
)
from school_eval.reporting.models import WordCount


def test_word_cloud_sorted_and_capped():
    raw = [{"word": f"w{i}", "count": i} for i in range(15)]
    cloud: List[WordCount] = normalize_word_cloud(raw, limit=10)

    assert len(cloud) == 10
    assert cloud[0] == WordCount("w14", 14)
    assert [c.count for c in cloud] == sorted((c.count for c in cloud), reverse=True)


def test_word_cloud_merges_and_drops_bad_entries():
    raw = [
        {"word": "소통", "count": 3},
        {"text": "소통", "value": "2"},
        {"word": "", "count": 5},
        {"word": "급식", "count": -1},
        {"word": "시설"},
        "loose string",
        {"word": "수업", "count": 4.0},
    ]
    cloud = normalize_word_cloud(raw)

    assert cloud == [WordCount("소통", 5), WordCount("수업", 4)]


def test_word_cloud_ties_keep_first_appearance():
    raw = [{"word": "b", "count": 2}, {"word": "a", "count": 2}]
    assert [c.word for c in normalize_word_cloud(raw)] == ["b", "a"]


def test_word_cloud_non_list():
    assert normalize_word_cloud({"word": "x"}) == []
    assert normalize_word_cloud(None) == []


def test_string_list_dedupes_and_caps():
    raw = ["소통", " 소통 ", "", 3, "시설", "안전", "급식", "수업", "연수"]
    assert normalize_string_list(raw, 5) == ["소통", "시설", "안전", "급식", "수업"]
    assert normalize_string_list("소통", 5) == []


def test_count_keywords_local():
    texts = [
        "선생님들의 소통이 좋습니다",
        "소통 방식이 개선되면 좋겠습니다",
        "급식이 맛있어요. 급식 최고",
    ]
    cloud = count_keywords(texts, limit=3)

    assert cloud[0] == WordCount("소통", 2)
    assert WordCount("급식", 2) in cloud
    assert len(cloud) == 3


def test_count_keywords_empty():
    assert count_keywords([]) == []


@pytest.mark.parametrize(
    "count",
    [json.loads("1e999"), "inf", "-inf", "nan", float("nan"), -3],
)
def test_word_cloud_drops_non_finite_counts(count):
    raw = [{"word": "소통", "count": count}, {"word": "급식", "count": "2.0"}]
    cloud = normalize_word_cloud(raw)

    assert [(w.word, w.count) for w in cloud] == [("급식", 2)]
