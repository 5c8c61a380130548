from __future__ import annotations

import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import typer

from taskcore.config import get_settings
from taskcore.infrastructure.store import build_store
from taskcore.reporter import print_error, print_stats, print_task, print_tasks
from taskcore.service import Response, TaskService
from taskcore.utils.logging import configure_logging

app = typer.Typer(help="Task query engine CLI.")

_JSON_OPTION = typer.Option(False, "--json", help="Print the raw response envelope as JSON.")


def _service() -> TaskService:
    settings = get_settings()
    return TaskService(build_store(settings), clock=lambda: datetime.now(settings.tzinfo))


def _emit(response: Response, as_json: bool, render: Optional[Callable[[Dict[str, Any]], None]] = None) -> None:
    status, body = response
    if as_json:
        typer.echo(json.dumps(body, indent=2, ensure_ascii=False))
    elif status >= 400:
        print_error(body, status)
    elif render is not None:
        render(body)
    if status >= 400:
        raise typer.Exit(code=1)


@app.callback()
def _configure() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json, force=False)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    location = (
        f"{settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name}"
        if settings.store_backend == "postgres"
        else str(settings.data_file)
    )
    typer.echo(f"store={settings.store_backend} ({location}) | tz={settings.app_timezone} | env={settings.app_env}")


@app.command()
def add(
    title: str = typer.Argument(..., help="Task title (1-200 characters)."),
    priority: str = typer.Option("medium", "--priority", "-p", help="low, medium or high."),
    due: Optional[str] = typer.Option(None, "--due", "-d", help="Due date/time (ISO 8601)."),
    as_json: bool = _JSON_OPTION,
) -> None:
    """Add a new task."""
    body: Dict[str, Any] = {"title": title, "priority": priority}
    if due:
        body["dueDate"] = due
    _emit(
        _service().create_task(body),
        as_json,
        lambda b: typer.echo(f"Task added: \"{b['data']['title']}\" (ID: {b['data']['id']})"),
    )


@app.command("list")
def list_tasks(
    done: Optional[str] = typer.Option(None, "--done", help="Filter by status: true, false, 1 or 0."),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Case-insensitive title search."),
    priority: Optional[str] = typer.Option(None, "--priority", "-p", help="Filter by priority."),
    page: Optional[str] = typer.Option(None, "--page", help="Page number (requires --limit)."),
    limit: Optional[str] = typer.Option(None, "--limit", "-l", help="Page size, 1-100."),
    order: str = typer.Option("newest", "--order", "-o", help="newest, oldest, insertion, due or priority."),
    as_json: bool = _JSON_OPTION,
) -> None:
    """
    List tasks with optional filters and pagination.
    """
    params = {
        "done": done,
        "search": search,
        "priority": priority,
        "page": page,
        "limit": limit,
        "order": order,
    }
    params = {k: v for k, v in params.items() if v is not None}
    _emit(_service().list_tasks(params), as_json, print_tasks)


@app.command()
def show(task_id: str = typer.Argument(...), as_json: bool = _JSON_OPTION) -> None:
    """Show a single task."""
    _emit(_service().get_task(task_id), as_json, lambda b: print_task(b["data"]))


@app.command("done")
def complete(task_id: str = typer.Argument(...), as_json: bool = _JSON_OPTION) -> None:
    """Mark a task as completed."""
    _emit(
        _service().update_status(task_id, True),
        as_json,
        lambda b: typer.echo(f"Task {b['data']['id']} marked as completed"),
    )


@app.command("undo")
def reopen(task_id: str = typer.Argument(...), as_json: bool = _JSON_OPTION) -> None:
    """Reopen a completed task."""
    _emit(
        _service().update_status(task_id, False),
        as_json,
        lambda b: typer.echo(f"Task {b['data']['id']} reopened"),
    )


@app.command()
def edit(
    task_id: str = typer.Argument(...),
    title: Optional[str] = typer.Option(None, "--title", "-t"),
    priority: Optional[str] = typer.Option(None, "--priority", "-p"),
    due: Optional[str] = typer.Option(None, "--due", "-d", help="New due date (ISO 8601)."),
    clear_due: bool = typer.Option(False, "--clear-due", help="Remove the due date."),
    as_json: bool = _JSON_OPTION,
) -> None:
    """Edit a task's title, priority or due date."""
    body: Dict[str, Any] = {"title": title, "priority": priority}
    if clear_due:
        body["dueDate"] = None
    elif due:
        body["dueDate"] = due
    _emit(
        _service().update_task(task_id, body),
        as_json,
        lambda b: typer.echo(f"Task {b['data']['id']} updated"),
    )


@app.command()
def delete(task_id: str = typer.Argument(...), as_json: bool = _JSON_OPTION) -> None:
    """Delete a task."""
    _emit(_service().delete_task(task_id), as_json, lambda b: typer.echo(f"Task {task_id} deleted"))


@app.command()
def stats(as_json: bool = _JSON_OPTION) -> None:
    """Show task statistics."""
    _emit(_service().stats(), as_json, lambda b: print_stats(b["data"]))


@app.command()
def due(
    window: str = typer.Argument("today", help="today, week or overdue."),
    as_json: bool = _JSON_OPTION,
) -> None:
    """List tasks due today, due this week, or overdue."""
    titles = {"today": "Due Today", "week": "Due This Week", "overdue": "Overdue"}
    _emit(
        _service().due(window),
        as_json,
        lambda b: print_tasks(b, title=titles.get(window, "Tasks")),
    )


@app.command("import")
def import_(path: Path = typer.Argument(..., help="JSON file to merge in."), as_json: bool = _JSON_OPTION) -> None:
    """Merge tasks from an export file under fresh ids."""
    _emit(
        _service().import_file(path),
        as_json,
        lambda b: typer.echo(f"{b['data']['merged']} task(s) imported from {path}"),
    )


@app.command()
def export(path: Path = typer.Argument(..., help="Destination JSON file."), as_json: bool = _JSON_OPTION) -> None:
    """Export all tasks to a JSON file."""
    _emit(
        _service().export_file(path),
        as_json,
        lambda b: typer.echo(f"{b['data']['exported']} task(s) exported to {path}"),
    )


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
