import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

from school_eval.exceptions import InvalidArgumentError
from school_eval.models import Project, Question, Response, School


class SurveyStore(Protocol):
    """Read surface the pipeline needs from the survey database."""

    def get_project(self, project_id: str) -> Optional[Project]: ...

    def get_school(self, school_id: str) -> Optional[School]: ...

    def get_questions(
        self, project_id: str, respondent_type: Optional[str] = None
    ) -> List[Question]: ...

    def get_responses(self, project_id: str) -> List[Response]: ...


class InMemorySurveyStore:
    """A thread-safe in-memory survey store.

    Readers always receive list snapshots, so callers can aggregate without
    holding the lock while writers keep adding responses.
    """

    def __init__(self) -> None:
        self._schools: Dict[str, School] = {}
        self._projects: Dict[str, Project] = {}
        self._questions: Dict[str, Question] = {}
        self._responses: List[Response] = []
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add_school(self, school: School) -> None:
        with self._lock:
            self._schools[school.id] = school

    def add_project(self, project: Project) -> None:
        """
        Adds a project to the store.
        Raises InvalidArgumentError if a project with the same ID already exists.
        """
        with self._lock:
            if project.id in self._projects:
                raise InvalidArgumentError(f"Project with ID {project.id} already exists.")
            self._projects[project.id] = project

    def add_question(self, question: Question) -> None:
        with self._lock:
            if question.project_id not in self._projects:
                raise InvalidArgumentError(
                    f"Project {question.project_id} not found for question {question.id}."
                )
            self._questions[question.id] = question

    def delete_question(self, question_id: str) -> Optional[Question]:
        """Remove a question. Its responses are kept."""
        with self._lock:
            return self._questions.pop(question_id, None)

    def add_response(self, response: Response) -> None:
        """Store *response*.

        Raises
        ------
        InvalidArgumentError
            If the response's respondent type differs from its question's.
        """
        with self._lock:
            question = self._questions.get(response.question_id)
            if question is not None and question.respondent_type != response.respondent_type:
                raise InvalidArgumentError(
                    f"Response {response.id} is for {response.respondent_type} but "
                    f"question {question.id} targets {question.respondent_type}."
                )
            self._responses.append(response)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_project(self, project_id: str) -> Optional[Project]:
        with self._lock:
            return self._projects.get(project_id)

    def get_school(self, school_id: str) -> Optional[School]:
        with self._lock:
            return self._schools.get(school_id)

    def get_questions(
        self, project_id: str, respondent_type: Optional[str] = None
    ) -> List[Question]:
        """Return the project's questions ordered by ``order_index``."""
        with self._lock:
            questions = [
                q
                for q in self._questions.values()
                if q.project_id == project_id
                and (respondent_type is None or q.respondent_type == respondent_type)
            ]
        return sorted(questions, key=lambda q: q.order_index)

    def get_responses(self, project_id: str) -> List[Response]:
        with self._lock:
            return [r for r in self._responses if r.project_id == project_id]

    def question_type_of(self, question_id: str) -> Optional[str]:
        with self._lock:
            question = self._questions.get(question_id)
        return question.question_type if question else None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InMemorySurveyStore":
        """Build a store from ``{"schools", "projects", "questions", "responses"}``."""
        store = cls()
        for raw in data.get("schools", []):
            store.add_school(School(**raw))
        for raw in data.get("projects", []):
            store.add_project(Project(**raw))
        for raw in data.get("questions", []):
            store.add_question(Question.from_dict(raw))
        for raw in data.get("responses", []):
            question_type = store.question_type_of(str(raw.get("question_id", "")))
            store.add_response(Response.from_dict(raw, question_type=question_type))
        store._logger.debug(
            "Loaded %d projects, %d questions, %d responses",
            len(store._projects),
            len(store._questions),
            len(store._responses),
        )
        return store

    @classmethod
    def load_json(cls, path: Union[str, Path]) -> "InMemorySurveyStore":
        with open(path, encoding="utf-8") as fh:
            return cls.from_dict(json.load(fh))
