#!/usr/bin/env python3
"""Fill in assessments with random answers and report what the engine does.

Two modes:

  - local (default): loads the seed assessments from ``seeds/assessments/``
    and drives a :class:`RuntimeSession` directly, with an in-memory
    submitter that records what would have been sent.
  - client (``--base-url``): fetches the assessment from a running server,
    fills it in with the engine, then POSTs the response to
    ``/api/v1/assessments/{job_id}/submit`` over httpx.

Every run first submits an empty form to check the required-field gate,
then answers the visible questions one by one (new questions can appear
as predicates become true) and submits again.

Usage::

    # All seeds, one run each
    uv run python scripts/fill_assessment.py

    # One seed, 5 runs, show every answer
    uv run python scripts/fill_assessment.py -j job-data-analyst -n 5 -v

    # Against a live server
    uv run python scripts/fill_assessment.py --base-url http://localhost:8080 -j job-data-analyst

    # Reproducible run
    uv run python scripts/fill_assessment.py --seed 42
"""

from __future__ import annotations

import argparse
import asyncio
import random
import string
import sys
from dataclasses import dataclass, field
from typing import Any

import httpx
from rich.console import Console
from rich.table import Table

from assessment_engine import (
    Assessment,
    CollaboratorError,
    ResponseDocument,
    ResponseSubmitter,
    RuntimeSession,
    SeedStore,
)
from assessment_engine.coercion import bound_or_none
from assessment_engine.constants import QUESTION_TYPE_LABELS
from assessment_engine.models.question import Question

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Pool of free-text answers
FREE_TEXT_POOL = [
    "Yes, in my previous role.",
    "I led the migration to a new stack.",
    "Mostly through documentation and pairing.",
    "Not yet, but I am learning.",
    "I prefer small, incremental releases.",
]

# Chance that an optional question is left empty
SKIP_OPTIONAL_PROBABILITY = 0.3


# ---------------------------------------------------------------------------
# Submitters
# ---------------------------------------------------------------------------

class RecordingSubmitter(ResponseSubmitter):
    """Keeps submitted responses in memory."""

    def __init__(self) -> None:
        self.responses: list[tuple[str, ResponseDocument]] = []

    async def submit_response(self, job_id: str, response: ResponseDocument) -> None:
        self.responses.append((job_id, response))


class HttpSubmitter(ResponseSubmitter):
    """Posts responses to a running assessment server."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def submit_response(self, job_id: str, response: ResponseDocument) -> None:
        try:
            resp = await self._client.post(
                f"/api/v1/assessments/{job_id}/submit", json=response.to_document(),
            )
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise CollaboratorError(f"submit failed for job_id={job_id}: {exc}") from exc


# ---------------------------------------------------------------------------
# AnswerGenerator: random valid answers per question type
# ---------------------------------------------------------------------------

class AnswerGenerator:
    """Produces a random answer that satisfies a question's rules."""

    def __init__(self, rng: random.Random):
        self.rng = rng

    def answer(self, q: Question) -> Any:
        if not q.required and self.rng.random() < SKIP_OPTIONAL_PROBABILITY:
            return None

        if q.type == "single":
            return self.rng.choice(q.choices) if q.choices else None
        if q.type == "multi":
            if not q.choices:
                return None
            k = self.rng.randint(1, len(q.choices))
            return self.rng.sample(q.choices, k)
        if q.type == "number":
            lo = bound_or_none(q.min)
            hi = bound_or_none(q.max)
            lo = 0 if lo is None else int(lo)
            hi = lo + 100 if hi is None else int(hi)
            return self.rng.randint(lo, max(lo, hi))
        if q.type in ("short", "long"):
            text = self.rng.choice(FREE_TEXT_POOL)
            limit = bound_or_none(q.max_length)
            return text[: int(limit)] if limit else text
        if q.type == "file":
            stem = "".join(self.rng.choices(string.ascii_lowercase, k=8))
            return f"{stem}.pdf"
        return None


# ---------------------------------------------------------------------------
# Run result tracking
# ---------------------------------------------------------------------------

@dataclass
class RunResult:
    job_id: str
    run_index: int
    blocked_focus: str | None = None
    answered: int = 0
    status: str = "incomplete"
    errors: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

async def fill_once(
    assessment: Assessment,
    submitter: ResponseSubmitter,
    gen: AnswerGenerator,
    console: Console,
    run_index: int,
    verbosity: int,
) -> RunResult:
    result = RunResult(job_id=assessment.job_id, run_index=run_index)

    # --- Empty submit on a scratch session: blocked iff something visible is required ---
    scratch = RuntimeSession(assessment.job_id, RecordingSubmitter())
    scratch.start(assessment)
    first = await scratch.submit()
    if first.status == "invalid":
        result.blocked_focus = first.focus_qid
        if verbosity:
            console.print(f"    [dim]empty submit blocked, focus → {first.focus_qid}[/]")
    elif verbosity:
        console.print("    [dim]empty submit accepted, nothing visible is required[/]")

    session = RuntimeSession(assessment.job_id, submitter)
    session.start(assessment)

    # --- Answer visible questions until no new ones appear ---
    answered: set[str] = set()
    while True:
        pending = [
            q for q in assessment.iter_questions()
            if session.visibility.get(q.id) and q.id not in answered
        ]
        if not pending:
            break
        for q in pending:
            value = gen.answer(q)
            answered.add(q.id)
            if value is None:
                continue
            session.set_answer(q.id, value)
            session.touch(q.id)
            result.answered += 1
            if verbosity:
                console.print(
                    f"    [dim]{q.id}[/] {q.label} [{QUESTION_TYPE_LABELS[q.type]}] → {value!r}"
                )

    outcome = await session.submit()
    result.status = outcome.status
    if outcome.status == "invalid":
        result.errors.append(f"still invalid: {outcome.invalid_ids}")
    elif outcome.status == "failed":
        result.errors.append(outcome.error or "submission failed")
    return result


async def load_remote(client: httpx.AsyncClient, job_id: str) -> Assessment:
    resp = await client.get(f"/api/v1/assessments/{job_id}")
    resp.raise_for_status()
    return Assessment.from_document(resp.json())


async def run(args: argparse.Namespace) -> int:
    console = Console()
    rng = random.Random(args.seed)
    gen = AnswerGenerator(rng)
    results: list[RunResult] = []

    if args.base_url:
        if not args.job_id:
            console.print("[red]--job-id is required with --base-url[/]")
            return 2
        async with httpx.AsyncClient(base_url=args.base_url, timeout=30.0) as client:
            assessment = await load_remote(client, args.job_id)
            submitter = HttpSubmitter(client)
            for i in range(args.runs):
                console.print(f"[bold]{assessment.job_id}[/] run {i + 1}")
                results.append(
                    await fill_once(assessment, submitter, gen, console, i + 1, args.verbose)
                )
    else:
        seeds = SeedStore(args.seed_dir)
        seeds.load()
        job_ids = [args.job_id] if args.job_id else seeds.job_ids()
        submitter = RecordingSubmitter()
        for job_id in job_ids:
            assessment = seeds.get(job_id)
            for i in range(args.runs):
                console.print(f"[bold]{job_id}[/] run {i + 1}")
                results.append(
                    await fill_once(assessment, submitter, gen, console, i + 1, args.verbose)
                )

    print_summary(console, results)
    return 0 if all(r.status == "submitted" for r in results) else 1


def print_summary(console: Console, results: list[RunResult]) -> None:
    console.print()
    console.rule("[bold]Run Summary")
    table = Table(show_header=True, header_style="bold")
    table.add_column("Job")
    table.add_column("Run", justify="right")
    table.add_column("Empty-submit focus")
    table.add_column("Answered", justify="right")
    table.add_column("Status")
    for r in results:
        colour = "green" if r.status == "submitted" else "red"
        table.add_row(
            r.job_id,
            str(r.run_index),
            r.blocked_focus or "-",
            str(r.answered),
            f"[{colour}]{r.status}[/]",
        )
    console.print(table)
    for r in results:
        for err in r.errors:
            console.print(f"  [red]ERROR[/] {r.job_id} run {r.run_index}: {err}")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Fill in assessments with random answers through the runtime session.",
    )
    parser.add_argument("-j", "--job-id", help="Only run this job's assessment")
    parser.add_argument("-n", "--runs", type=int, default=1, help="Runs per assessment (default: 1)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible runs")
    parser.add_argument("--seed-dir", default=None, help="Seed directory (default: seeds/assessments/)")
    parser.add_argument(
        "--base-url",
        default=None,
        help="Run against a live server instead of the local seeds",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Show every answer")
    args = parser.parse_args()

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
