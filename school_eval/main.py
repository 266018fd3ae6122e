"""Command-line entry point.

Loads a JSON snapshot of schools, projects, questions and responses, runs
the pipeline for one project and prints the result:

    python -m school_eval.main report data.json --project-id p1 --school-id s1
"""
from __future__ import annotations

import argparse
import json
import sys
from contextlib import suppress
from typing import List, Optional

from school_eval.app import build_pipeline, configure_logging, logger, shutdown_executor
from school_eval.exceptions import SchoolEvalError
from school_eval.models import EvaluationContext
from school_eval.reporting.render import render_report
from school_eval.survey_store import InMemorySurveyStore


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="school-eval")
    parser.add_argument("command", choices=["report", "analyze", "stats"])
    parser.add_argument("data", help="JSON snapshot file")
    parser.add_argument("--project-id", required=True)
    parser.add_argument("--school-id", required=True)
    parser.add_argument("--school-name", default="")
    parser.add_argument(
        "--format", choices=["markdown", "text", "json"], default="markdown"
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()
    args = _parse_args(argv)

    try:
        store = InMemorySurveyStore.load_json(args.data)
        school = store.get_school(args.school_id)
        context = EvaluationContext(
            school_id=args.school_id,
            school_name=args.school_name or (school.school_name if school else ""),
        )
        pipeline = build_pipeline(store)

        if args.command == "stats":
            stats, grade = pipeline.statistics(context, args.project_id)
            output = json.dumps(
                {**stats.to_dict(), "grade": grade.to_dict()}, ensure_ascii=False, indent=2
            )
        elif args.command == "analyze":
            analysis = pipeline.analyze_responses(context, args.project_id)
            output = json.dumps(analysis.to_dict(), ensure_ascii=False, indent=2)
        else:
            report = pipeline.generate_report(context, args.project_id)
            if args.format == "json":
                output = json.dumps(report.to_dict(), ensure_ascii=False, indent=2)
            else:
                project = store.get_project(args.project_id)
                output = render_report(
                    report,
                    school_name=context.school_name,
                    year=project.year if project else None,
                    fmt=args.format,
                )
    except (SchoolEvalError, OSError, ValueError) as exc:
        logger.error("%s", exc)
        return 1
    finally:
        with suppress(Exception):
            shutdown_executor()

    sys.stdout.write(output + "\n")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
