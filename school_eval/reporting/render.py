"""Render evaluation reports using Jinja2 templates."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader

from school_eval.exceptions import InvalidArgumentError
from school_eval.reporting.context import build_report_context
from school_eval.reporting.models import Report

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).parent / "templates"

# Markdown/plain-text output must not be HTML-escaped.
_env = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
)

_TEMPLATES = {
    "markdown": ("report.md.j2", "md"),
    "text": ("report.txt.j2", "txt"),
}


def render_report(
    report: Report,
    *,
    school_name: str = "",
    year: Optional[int] = None,
    fmt: str = "markdown",
) -> str:
    """Render *report* as Markdown (default) or plain text."""

    try:
        template_name, _ = _TEMPLATES[fmt]
    except KeyError:
        raise InvalidArgumentError(f"Unsupported report format: {fmt}") from None

    context = build_report_context(report, school_name, year)
    rendered = _env.get_template(template_name).render(**context.to_dict())
    logger.debug("Rendered %s report len=%d", fmt, len(rendered))
    return rendered


def report_filename(school_name: str, year: Optional[int], fmt: str = "markdown") -> str:
    """Return the download file name, e.g. ``한빛초_2025년_평가보고서.md``."""

    try:
        _, extension = _TEMPLATES[fmt]
    except KeyError:
        raise InvalidArgumentError(f"Unsupported report format: {fmt}") from None
    return f"{school_name or '학교'}_{year or ''}년_평가보고서.{extension}"
