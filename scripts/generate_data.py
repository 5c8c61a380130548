"""
Sample data generator for the task query engine.

Implements deterministic pseudo-random task generation, JSON emission, and
optional loading into the configured store through the import path (so the
generated ids are renumbered by the merge allocator like any other import).
"""

from __future__ import annotations

import json
import random
import sys
import time
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List

import typer

from taskcore.config import get_settings
from taskcore.infrastructure.store import build_store
from taskcore.service import TaskService
from taskcore.utils.logging import configure_logging
from taskcore.utils.time import to_utc_z

app = typer.Typer(help="Generate synthetic tasks as JSON and optionally load them into the store.")

_VERBS = ["Buy", "Write", "Review", "Call", "Fix", "Plan", "Read", "Clean", "Book", "Send"]
_OBJECTS = ["groceries", "report", "pull request", "dentist", "bike", "trip", "chapter 3", "kitchen", "flights", "invoice"]
_PRIORITIES = ["low", "medium", "high"]


def _generate_tasks(rows: int, seed: int, now: datetime) -> List[Dict[str, Any]]:
    """
    Build `rows` task records in export format.

    Roughly a third are completed and about half carry a due date within two
    weeks either side of `now`. The same seed and `now` give the same output.
    """
    rng = random.Random(seed)
    tasks: List[Dict[str, Any]] = []
    for i in range(rows):
        created = now - timedelta(days=rng.randint(0, 30), minutes=rng.randint(0, 1439))
        completed = rng.random() < 0.33
        task: Dict[str, Any] = {
            "id": i + 1,
            "title": f"{rng.choice(_VERBS)} {rng.choice(_OBJECTS)}",
            "priority": rng.choice(_PRIORITIES),
            "completed": completed,
            "createdAt": to_utc_z(created),
        }
        if completed:
            task["completedAt"] = to_utc_z(created + timedelta(hours=rng.randint(1, 72)))
        if rng.random() < 0.5:
            task["dueDate"] = to_utc_z(now + timedelta(days=rng.randint(-14, 14), hours=rng.randint(0, 23)))
        tasks.append(task)
    return tasks


def _write_json(path: Path, tasks: List[Dict[str, Any]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(tasks, f, indent=2)


@app.command()
def main(
    rows: int = typer.Option(
        50,
        "--rows",
        "-r",
        help="Number of tasks to generate.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    output: Path = typer.Option(
        Path("data/sample_tasks.json"),
        "--output",
        "-o",
        help="JSON output path.",
    ),
    load: bool = typer.Option(
        False,
        "--load",
        help="Also merge the generated tasks into the configured store.",
    ),
) -> None:
    """
    Generate synthetic tasks and optionally import them into the store.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json, force=False)
    start = time.perf_counter()

    typer.echo(f"Generating {rows:,} tasks -> {output} (seed={seed})")
    tasks = _generate_tasks(rows, seed=seed, now=datetime.now(UTC))
    _write_json(output, tasks)
    typer.echo(f"Generation completed in {time.perf_counter() - start:.2f}s")

    if not load:
        return

    status, body = TaskService(build_store(settings)).import_tasks(tasks)
    if status >= 400:
        typer.echo(f"Load failed: {body['error']['message']}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Loaded {body['data']['merged']} task(s) into the {settings.store_backend} store.")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
