"""OpenAI access for report and analysis generation.

One ``openai.OpenAI`` client is built on first use from ``OPENAI_API_KEY``
(and ``OPENAI_ORG`` when set) and shared by every pipeline:

    from school_eval.openai_client import generate_text
"""
from __future__ import annotations

import importlib
import logging
import os
import threading
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from school_eval.exceptions import UpstreamUnavailableError

if TYPE_CHECKING:  # pragma: no cover
    from school_eval.analysis.prompts import GenerationRequest

logger = logging.getLogger(__name__)


class OpenAIClientError(UpstreamUnavailableError):
    """Raised when client configuration is invalid (e.g., missing API key)."""


_DEFAULT_MODEL = "gpt-4.1"

_client: Optional[Any] = None
_client_lock = threading.Lock()


def _api_key() -> str:
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise OpenAIClientError("OPENAI_API_KEY environment variable is not set.")
    return api_key


def get_openai_client() -> Any:
    """Return the shared ``openai.OpenAI`` client, creating it on first call.

    ``openai`` is imported here rather than at module import so tests can
    place a stub in ``sys.modules`` first.

    Raises
    ------
    OpenAIClientError
        If ``OPENAI_API_KEY`` is missing or empty.
    """

    global _client
    with _client_lock:
        if _client is None:
            openai = importlib.import_module("openai")
            _client = openai.OpenAI(
                api_key=_api_key(), organization=os.getenv("OPENAI_ORG") or None
            )
            logger.debug("Created OpenAI client")
        return _client


def reset_client() -> None:
    """Drop the cached client so the next call re-reads the environment."""
    global _client
    with _client_lock:
        _client = None


def default_model() -> str:
    return os.getenv("OPENAI_MODEL", _DEFAULT_MODEL)


def chat_completion(
    messages: List[Dict[str, str]],
    *,
    model: str | None = None,
    **kwargs: Any,
) -> str:
    """Run one chat completion and return the first choice's text.

    *kwargs* (``temperature``, ``timeout`` …) are forwarded to
    ``client.chat.completions.create``.
    """

    client = get_openai_client()
    completion = client.chat.completions.create(
        model=model or default_model(), messages=messages, **kwargs
    )
    try:
        content = completion.choices[0].message.content
    except (AttributeError, IndexError, TypeError) as exc:
        raise UpstreamUnavailableError("Model response missing expected fields") from exc

    if not isinstance(content, str):
        raise UpstreamUnavailableError("Model response content was empty")
    return content


def generate_text(request: "GenerationRequest") -> str:
    """Send *request* to the model and return the raw text of the first choice.

    Raises
    ------
    UpstreamUnavailableError
        On configuration, transport or response-shape problems.
    """

    try:
        return chat_completion(
            request.messages,
            temperature=request.temperature,
            timeout=request.timeout,
        )
    except UpstreamUnavailableError:
        raise
    except Exception as exc:  # noqa: BLE001 – any client failure means unavailable
        raise UpstreamUnavailableError(f"OpenAI request failed: {exc}") from exc
