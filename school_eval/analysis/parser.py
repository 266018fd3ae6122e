"""Pull the JSON payload out of free-form model output.

The model is asked to answer with a JSON object but usually wraps it in
prose or a Markdown fence. Extraction takes the *widest* brace span (first
``{`` to last ``}``), which tolerates leading and trailing text. If the
model emits two separate JSON objects the span covers both and decoding
fails; that case is reported as malformed, not repaired.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Union

from school_eval.exceptions import MalformedOutputError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Parsed:
    payload: Dict[str, Any]


@dataclass(frozen=True)
class Malformed:
    """Output that could not be decoded; *raw* is kept for diagnosis."""

    raw: str
    reason: str


ParseOutcome = Union[Parsed, Malformed]


def extract_structured_output(raw: str) -> ParseOutcome:
    """Return :class:`Parsed` with the decoded object or :class:`Malformed`."""

    if not isinstance(raw, str):
        return Malformed(raw=repr(raw), reason="Model output is not text")

    start = raw.find("{")
    end = raw.rfind("}")
    if start == -1 or end < start:
        return Malformed(raw=raw, reason="Model output did not contain a JSON object")

    try:
        payload: Any = json.loads(raw[start : end + 1])
    except json.JSONDecodeError as exc:
        return Malformed(raw=raw, reason=f"Failed to parse JSON from model output: {exc}")

    if not isinstance(payload, dict):
        return Malformed(raw=raw, reason="JSON payload was not an object")

    return Parsed(payload=payload)


def parse_structured_output(raw: str) -> Dict[str, Any]:
    """Return the JSON object embedded in *raw*.

    Raises
    ------
    MalformedOutputError
        If no ``{...}`` span exists or it does not decode to an object.
    """

    outcome = extract_structured_output(raw)
    if isinstance(outcome, Malformed):
        _logger.debug("Unparsable model output: %r", outcome.raw)
        raise MalformedOutputError(outcome.reason, raw=outcome.raw)
    return outcome.payload
