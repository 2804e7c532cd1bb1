#!/usr/bin/env python3

"""
Production reflow command-line entrypoint.

  reflow run SCENARIO.json [--output OUT.json] [--gantt CHART.png] [--summary]
  reflow SCENARIO.json                      (same as ``run``)
  reflow generate OUT.json [--orders N] [--seed S]

The output bundle goes to stdout as JSON; logs and the optional text
summary go to stderr. Any fatal error prints one line to stderr and exits
with status 1.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Sequence

from reflow.scenario import dump_result, load_scenario, save_result, save_scenario
from reflow.scheduler_logic.orchestrator import build_text_summary, try_reflow
from reflow.settings import load_settings
from reflow.shared.documents import split_documents
from reflow.shared.errors import ReflowError
from reflow.shared.models import ReflowFailure

logger = logging.getLogger(__name__)

_COMMANDS = {"run", "generate"}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reflow",
        description="Reschedule work orders around dependencies, shifts and maintenance.",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    run_p = sub.add_parser("run", help="Reflow a scenario file and print the result")
    run_p.add_argument("scenario", help="Path to a JSON array of documents")
    run_p.add_argument("--output", help="Write the JSON bundle here instead of stdout")
    run_p.add_argument("--gantt", help="Write a Gantt chart PNG here")
    run_p.add_argument("--summary", action="store_true", help="Print a text summary to stderr")

    gen_p = sub.add_parser("generate", help="Write a synthetic scenario file")
    gen_p.add_argument("out", help="Destination JSON file")
    gen_p.add_argument("--orders", type=int, default=100)
    gen_p.add_argument("--seed", type=int, default=42)

    return parser


def _fail(message: str) -> int:
    print(f"Reflow failed: {message}", file=sys.stderr)
    return 1


def _run(args: argparse.Namespace, settings) -> int:
    try:
        documents = load_scenario(args.scenario)
    except (OSError, json.JSONDecodeError, ReflowError) as exc:
        return _fail(str(exc))

    outcome = try_reflow(documents, limits=settings.limits)
    if isinstance(outcome, ReflowFailure):
        return _fail(f"[{outcome.kind.value}] {outcome.message}")

    if args.output:
        save_result(outcome, args.output)
    else:
        print(dump_result(outcome))

    if args.summary:
        print(build_text_summary(outcome), file=sys.stderr)

    if args.gantt:
        from reflow.scheduler_logic.gantt import generate_gantt_image

        _, work_centers = split_documents(documents)
        with open(args.gantt, "wb") as f:
            f.write(generate_gantt_image(outcome, list(work_centers.values())))
        logger.info("Gantt chart written to %s", args.gantt)

    return 0


def _generate(args: argparse.Namespace) -> int:
    from reflow.sample_data import generate_scenario

    try:
        save_scenario(generate_scenario(num_orders=args.orders, seed=args.seed), args.out)
    except (OSError, ReflowError) as exc:
        return _fail(str(exc))
    print(f"Wrote scenario to {args.out}", file=sys.stderr)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    if argv and argv[0] not in _COMMANDS and not argv[0].startswith("-"):
        argv.insert(0, "run")

    args = _build_parser().parse_args(argv)

    try:
        settings = load_settings()
    except ValueError as exc:
        return _fail(str(exc))

    logging.basicConfig(
        level=settings.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "generate":
        return _generate(args)
    return _run(args, settings)


if __name__ == "__main__":
    sys.exit(main())
