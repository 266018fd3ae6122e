import atexit
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from dotenv import load_dotenv

from school_eval.pipeline import Generator, ReportPipeline
from school_eval.openai_client import generate_text
from school_eval.survey_store import SurveyStore

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging from ``SCHOOL_EVAL_LOG_LEVEL`` (default INFO)."""
    logging_level = level or os.environ.get("SCHOOL_EVAL_LOG_LEVEL", "INFO")
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging_level,
    )


# Resolve worker count for generation calls (optional override)
def _get_max_workers_from_env() -> int:  # noqa: WPS430 – tiny helper
    raw_val = os.getenv("SCHOOL_EVAL_MAX_WORKERS")
    if not raw_val:
        return 4
    try:
        parsed = int(raw_val)
        if parsed <= 0:
            logger.warning(
                "Ignoring SCHOOL_EVAL_MAX_WORKERS=%s (must be positive int)", raw_val
            )
            return 4
        return parsed
    except ValueError:
        logger.warning(
            "Invalid SCHOOL_EVAL_MAX_WORKERS value '%s'; must be integer.", raw_val
        )
        return 4


# A single thread pool shared by all pipelines for model calls
executor = ThreadPoolExecutor(max_workers=_get_max_workers_from_env())


def build_pipeline(
    store: SurveyStore, generator: Generator = generate_text
) -> ReportPipeline:
    """Return a :class:`ReportPipeline` bound to the shared executor."""
    return ReportPipeline(store, generator, executor=executor)


def shutdown_executor() -> None:
    """Shut down the shared executor without waiting for stuck model calls."""
    logger.debug("Shutting down generation executor")
    executor.shutdown(wait=False, cancel_futures=True)


atexit.register(shutdown_executor)
