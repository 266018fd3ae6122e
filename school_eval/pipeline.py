"""End-to-end analysis and report pipeline.

Each call walks the states

    IDLE -> FETCHING -> AGGREGATING -> PROMPTING -> AWAITING_MODEL
         -> PARSING -> ASSEMBLED

Fetch problems (missing id, unknown project, nothing to analyze) and
unexpected aggregation errors end in FAILED and are raised. Anything that
goes wrong with the model (timeout, transport error, unparsable output) is
logged and the call still reaches ASSEMBLED with fallback content.

There is exactly one generation attempt per call; regenerating is up to the
caller.
"""
from __future__ import annotations

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from school_eval.analysis.parser import Malformed, extract_structured_output
from school_eval.analysis.prompts import (
    GenerationRequest,
    build_analysis_prompt,
    build_report_prompt,
)
from school_eval.exceptions import (
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    UpstreamUnavailableError,
)
from school_eval.grading import GradeInfo, convert_to_grade
from school_eval.models import EvaluationContext, Project, Question, Response, School
from school_eval.openai_client import generate_text
from school_eval.reporting import config
from school_eval.reporting.aggregator import aggregate, question_stats, text_values
from school_eval.reporting.assembler import assemble_analysis, assemble_report
from school_eval.reporting.models import (
    AggregatedStatistics,
    AnalysisResult,
    QuestionStat,
    Report,
)
from school_eval.survey_store import SurveyStore

logger = logging.getLogger(__name__)

Generator = Callable[[GenerationRequest], str]
T = TypeVar("T")


class PipelineState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    AGGREGATING = "aggregating"
    PROMPTING = "prompting"
    AWAITING_MODEL = "awaiting_model"
    PARSING = "parsing"
    ASSEMBLED = "assembled"
    FAILED = "failed"


@dataclass
class PipelineRun:
    """State history of one invocation."""

    state: PipelineState = PipelineState.IDLE
    history: List[PipelineState] = field(default_factory=lambda: [PipelineState.IDLE])
    failure: Optional[str] = None
    degraded: Optional[str] = None  # why fallback content was used
    raw_output: Optional[str] = None

    def advance(self, state: PipelineState) -> None:
        logger.debug("Pipeline %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def fail(self, reason: str) -> None:
        self.failure = reason
        self.advance(PipelineState.FAILED)


@dataclass
class _Snapshot:
    project: Project
    school: Optional[School]
    questions: List[Question]
    responses: List[Response]


class ReportPipeline:
    """Runs analyses and reports for projects held in a :class:`SurveyStore`."""

    def __init__(
        self,
        store: SurveyStore,
        generator: Generator = generate_text,
        *,
        executor: Optional[Executor] = None,
        expected_respondents: int = config.EXPECTED_RESPONDENTS,
    ) -> None:
        self._store = store
        self._generator = generator
        self._executor = executor or ThreadPoolExecutor(max_workers=4)
        self._expected_respondents = expected_respondents

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _fetch(
        self,
        context: EvaluationContext,
        project_id: str,
        run: PipelineRun,
        *,
        require_responses: bool,
    ) -> _Snapshot:
        run.advance(PipelineState.FETCHING)
        if not project_id:
            run.fail("missing project id")
            raise InvalidArgumentError("프로젝트 ID가 필요합니다.")

        project = self._store.get_project(project_id)
        if project is None or project.school_id != context.school_id:
            run.fail("project not found")
            raise NotFoundError("프로젝트를 찾을 수 없습니다.")

        responses = self._store.get_responses(project_id)
        if require_responses and not responses:
            run.fail("no responses")
            raise NotFoundError("분석할 응답이 없습니다.")

        return _Snapshot(
            project=project,
            school=self._store.get_school(project.school_id),
            questions=self._store.get_questions(project_id),
            responses=responses,
        )

    def _aggregate(
        self, snapshot: _Snapshot, run: PipelineRun
    ) -> Tuple[AggregatedStatistics, List[QuestionStat]]:
        run.advance(PipelineState.AGGREGATING)
        try:
            stats = aggregate(snapshot.questions, snapshot.responses)
            per_question = question_stats(snapshot.questions, snapshot.responses)
        except Exception as exc:
            run.fail(f"aggregation error: {exc}")
            logger.error(
                "Aggregation failed for project %s: %s",
                snapshot.project.id,
                exc,
                exc_info=True,
            )
            raise InternalError(f"Aggregation failed: {exc}") from exc
        return stats, per_question

    def _generate(
        self, request: GenerationRequest, run: PipelineRun
    ) -> Optional[Dict[str, Any]]:
        """Call the model once and return the parsed payload or *None*."""

        run.advance(PipelineState.AWAITING_MODEL)
        future = self._executor.submit(self._generator, request)
        try:
            raw = future.result(timeout=request.timeout)
        except FutureTimeoutError:
            future.cancel()
            run.degraded = f"generation timed out after {request.timeout}s"
            logger.warning("Model call exceeded %ss; using fallback", request.timeout)
            return None
        except UpstreamUnavailableError as exc:
            run.degraded = str(exc)
            logger.warning("Model unavailable; using fallback: %s", exc, exc_info=True)
            return None
        except Exception as exc:  # noqa: BLE001 – any generator failure degrades
            run.degraded = f"generation failed: {exc}"
            logger.warning("Model call failed; using fallback: %s", exc, exc_info=True)
            return None

        run.advance(PipelineState.PARSING)
        run.raw_output = raw
        outcome = extract_structured_output(raw)
        if isinstance(outcome, Malformed):
            run.degraded = outcome.reason
            logger.warning("Model output unusable (%s); using fallback", outcome.reason)
            logger.debug("Raw model output: %r", outcome.raw)
            return None

        missing = [key for key in request.expected_keys if key not in outcome.payload]
        if missing:
            logger.info("Model output missing keys %s", missing)
        return outcome.payload

    def _assemble(
        self,
        run: PipelineRun,
        structured: Optional[Dict[str, Any]],
        build: Callable[[Optional[Dict[str, Any]]], T],
    ) -> T:
        """Build the result, retrying with fallback content if *structured* breaks it."""

        if structured is None:
            return build(None)
        try:
            return build(structured)
        except Exception as exc:  # noqa: BLE001 – payload shape is untrusted
            run.degraded = f"model payload rejected: {exc}"
            logger.warning(
                "Model payload could not be assembled; using fallback: %s",
                exc,
                exc_info=True,
            )
            return build(None)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def statistics(
        self, context: EvaluationContext, project_id: str
    ) -> Tuple[AggregatedStatistics, GradeInfo]:
        """Return current statistics and overall grade without calling the model."""
        run = PipelineRun()
        snapshot = self._fetch(context, project_id, run, require_responses=False)
        stats, _ = self._aggregate(snapshot, run)
        run.advance(PipelineState.ASSEMBLED)
        return stats, convert_to_grade(stats.average_rating)

    def analyze_responses(
        self,
        context: EvaluationContext,
        project_id: str,
        *,
        run: Optional[PipelineRun] = None,
    ) -> AnalysisResult:
        """Analyze the project's free-text responses."""
        run = run or PipelineRun()
        snapshot = self._fetch(context, project_id, run, require_responses=True)
        stats, _ = self._aggregate(snapshot, run)
        texts = text_values(snapshot.responses)

        run.advance(PipelineState.PROMPTING)
        request = build_analysis_prompt(texts, config.ANALYSIS_TEXT_LIMIT)
        structured = self._generate(request, run)

        result = self._assemble(
            run, structured, lambda payload: assemble_analysis(stats, texts, payload)
        )
        run.advance(PipelineState.ASSEMBLED)
        logger.info(
            "Analysis for project %s assembled (fallback=%s)",
            project_id,
            result.is_fallback,
        )
        return result

    def generate_report(
        self,
        context: EvaluationContext,
        project_id: str,
        *,
        run: Optional[PipelineRun] = None,
    ) -> Report:
        """Write the evaluation report for *project_id*."""
        run = run or PipelineRun()
        snapshot = self._fetch(context, project_id, run, require_responses=True)
        stats, per_question = self._aggregate(snapshot, run)

        school = snapshot.school or School(
            id=context.school_id, school_code="", school_name=context.school_name
        )
        tagged_texts = []
        for response in snapshot.responses:
            text = response.text_value()
            if text is not None:
                tagged_texts.append((response.respondent_type, text))

        run.advance(PipelineState.PROMPTING)
        request = build_report_prompt(
            snapshot.project, school, stats, per_question, tagged_texts
        )
        structured = self._generate(request, run)

        report = self._assemble(
            run,
            structured,
            lambda payload: assemble_report(
                snapshot.project,
                school,
                stats,
                payload,
                question_stats=per_question,
                expected_respondents=self._expected_respondents,
            ),
        )
        run.advance(PipelineState.ASSEMBLED)
        logger.info(
            "Report for project %s assembled (fallback=%s, sections=%d)",
            project_id,
            report.is_fallback,
            len(report.sections),
        )
        return report

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False)
