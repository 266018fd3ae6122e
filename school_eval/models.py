"""Domain types for survey questions, responses and evaluation projects."""
from __future__ import annotations

import datetime
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from school_eval.exceptions import InvalidArgumentError


class RespondentType(str, Enum):
    """Survey populations; each one sees its own question set."""

    TEACHER = "teacher"
    STAFF = "staff"
    PARENT = "parent"
    STUDENT = "student"

    @property
    def label(self) -> str:
        return _RESPONDENT_LABELS[self]


_RESPONDENT_LABELS = {
    RespondentType.TEACHER: "교원",
    RespondentType.STAFF: "직원",
    RespondentType.PARENT: "학부모",
    RespondentType.STUDENT: "학생",
}


def respondent_label(value: str) -> str:
    """Return the Korean display label for *value*, or *value* itself."""
    try:
        return RespondentType(value).label
    except ValueError:
        return value


class QuestionType(str, Enum):
    RATING = "rating"
    TEXT = "text"
    MULTIPLE_CHOICE = "multiple_choice"
    PRIORITY = "priority"


@dataclass(frozen=True)
class PriorityItem:
    """One ranked choice inside a priority-voting answer."""

    id: str
    text: str
    rank: int

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "text": self.text, "rank": self.rank}


@dataclass(frozen=True)
class PriorityRanking:
    """Ordered list of :class:`PriorityItem` with ranks ``1..n``.

    Priority answers travel as JSON text (``[{"id", "text", "rank"}]``);
    decode them once with :meth:`from_json` and pass the typed value around.
    """

    items: tuple = ()

    def __post_init__(self) -> None:
        ranks = sorted(item.rank for item in self.items)
        if ranks != list(range(1, len(ranks) + 1)):
            raise InvalidArgumentError(
                f"Priority ranks must be unique and contiguous from 1, got {ranks}"
            )
        # keep items ordered by rank regardless of input order
        object.__setattr__(
            self, "items", tuple(sorted(self.items, key=lambda item: item.rank))
        )

    @classmethod
    def from_json(cls, raw: str) -> "PriorityRanking":
        try:
            data = json.loads(raw)
        except (TypeError, json.JSONDecodeError) as exc:
            raise InvalidArgumentError("Priority value is not valid JSON") from exc

        if not isinstance(data, list):
            raise InvalidArgumentError("Priority value must be a JSON array")

        items = []
        for entry in data:
            if not isinstance(entry, dict):
                raise InvalidArgumentError("Priority entries must be objects")
            try:
                items.append(
                    PriorityItem(
                        id=str(entry["id"]),
                        text=str(entry["text"]),
                        rank=int(entry["rank"]),
                    )
                )
            except (KeyError, TypeError, ValueError) as exc:
                raise InvalidArgumentError(
                    f"Invalid priority entry: {entry!r}"
                ) from exc
        return cls(items=tuple(items))

    def to_json(self) -> str:
        return json.dumps([item.to_dict() for item in self.items], ensure_ascii=False)

    def texts(self) -> List[str]:
        return [item.text for item in self.items]

    def __len__(self) -> int:
        return len(self.items)


ResponseValue = Union[str, PriorityRanking]


@dataclass(frozen=True)
class Question:
    """A survey question scoped to one respondent type."""

    id: str
    project_id: str
    respondent_type: str
    question_type: str
    text: str
    is_required: bool = False
    order_index: int = 0
    section_name: Optional[str] = None
    description: Optional[str] = None
    options: Optional[List[str]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Question":
        return cls(
            id=str(data["id"]),
            project_id=str(data["project_id"]),
            respondent_type=data["respondent_type"],
            question_type=data.get("question_type", QuestionType.RATING.value),
            text=data.get("text") or data.get("question_text", ""),
            is_required=bool(data.get("is_required", False)),
            order_index=int(data.get("order_index", 0)),
            section_name=data.get("section_name"),
            description=data.get("description"),
            options=data.get("options"),
        )


@dataclass(frozen=True)
class Response:
    """A single answer given by one respondent session to one question."""

    id: str
    question_id: str
    project_id: str
    respondent_type: str
    value: ResponseValue
    session_id: str = ""
    created_at: datetime.datetime = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )

    def rating(self) -> Optional[int]:
        """Return the value as a rating in ``[1, 5]`` or *None*."""
        if not isinstance(self.value, str):
            return None
        try:
            parsed = int(self.value.strip())
        except ValueError:
            return None
        if 1 <= parsed <= 5:
            return parsed
        return None

    def text_value(self) -> Optional[str]:
        """Return free text for non-rating answers, *None* otherwise."""
        if not isinstance(self.value, str) or self.rating() is not None:
            return None
        stripped = self.value.strip()
        return stripped or None

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], question_type: Optional[str] = None
    ) -> "Response":
        """Build a response, decoding priority answers into :class:`PriorityRanking`."""
        raw_value = data.get("value", data.get("response_value", ""))
        value: ResponseValue
        if question_type == QuestionType.PRIORITY.value:
            if isinstance(raw_value, list):
                raw_value = json.dumps(raw_value)
            value = PriorityRanking.from_json(raw_value)
        else:
            value = "" if raw_value is None else str(raw_value)

        created_raw = data.get("created_at")
        created_at = (
            datetime.datetime.fromisoformat(created_raw)
            if isinstance(created_raw, str)
            else datetime.datetime.now(datetime.timezone.utc)
        )
        return cls(
            id=str(data["id"]),
            question_id=str(data["question_id"]),
            project_id=str(data["project_id"]),
            respondent_type=data["respondent_type"],
            value=value,
            session_id=str(data.get("session_id", "")),
            created_at=created_at,
        )


@dataclass(frozen=True)
class School:
    id: str
    school_code: str
    school_name: str
    region: Optional[str] = None
    school_type: Optional[str] = None


@dataclass(frozen=True)
class Project:
    id: str
    school_id: str
    title: str
    year: int
    status: str = "active"
    description: Optional[str] = None


@dataclass(frozen=True)
class EvaluationContext:
    """Caller-supplied session details for one pipeline invocation.

    Pipeline code never reads the current school from global state; it is
    passed in here instead.
    """

    school_id: str
    school_name: str
    session_id: Optional[str] = None
