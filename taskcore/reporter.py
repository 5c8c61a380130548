from __future__ import annotations

from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from taskcore.utils.time import parse_optional_instant

_PRIORITY_STYLE = {"high": "bold red", "medium": "yellow", "low": "green"}


def _short_date(value: Optional[str]) -> str:
    instant = parse_optional_instant(value)
    return instant.strftime("%Y-%m-%d") if instant else "-"


def _due_cell(value: Optional[str]) -> str:
    instant = parse_optional_instant(value)
    return instant.strftime("%Y-%m-%d %H:%M") if instant else "-"


def build_task_table(tasks: List[Dict[str, Any]], title: str) -> Table:
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("ID", justify="right", style="cyan", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Priority", justify="center")
    table.add_column("Status", justify="center")
    table.add_column("Due", justify="right", style="magenta")
    table.add_column("Created", justify="right", style="dim")

    for task in tasks:
        priority = task.get("priority", "medium")
        status = "[green]✓ Done[/green]" if task.get("completed") else "○ Pending"
        table.add_row(
            str(task["id"]),
            escape(task["title"]),
            f"[{_PRIORITY_STYLE.get(priority, 'white')}]{priority}[/]",
            status,
            _due_cell(task.get("dueDate")),
            _short_date(task.get("createdAt")),
        )
    return table


def print_tasks(body: Dict[str, Any], title: str = "Tasks", console: Optional[Console] = None) -> None:
    """
    Render a list envelope as a rich table followed by count/pagination lines.
    """
    console = console or Console()
    tasks = body.get("data", [])
    if not tasks:
        console.print("[yellow]No tasks found.[/yellow]")
        return

    filters = body.get("filters")
    if filters:
        applied = ", ".join(f"{k}={v}" for k, v in filters.items())
        title = f"{title}\n[dim]Filters: {applied}[/dim]"
    console.print(build_task_table(tasks, title))

    total = body.get("total", len(tasks))
    console.print(f"Showing {len(tasks)} of {total} task(s)")
    pagination = body.get("pagination")
    if pagination:
        console.print(
            f"Page {pagination['page']}/{pagination['totalPages']} "
            f"(limit {pagination['limit']})"
            + (" · next page available" if pagination["hasNext"] else "")
        )


def print_task(task: Dict[str, Any], console: Optional[Console] = None) -> None:
    console = console or Console()
    console.print(build_task_table([task], f"Task {task['id']}"))
    if task.get("completedAt"):
        console.print(f"Completed: {_due_cell(task['completedAt'])}")


def print_stats(stats: Dict[str, Any], console: Optional[Console] = None) -> None:
    console = console or Console()
    table = Table(title="📊 Task Statistics", box=box.ROUNDED, show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right", style="bold")

    table.add_row("Total Tasks", str(stats["total"]))
    table.add_row("Completed", str(stats["completed"]))
    table.add_row("Pending", str(stats["pending"]))
    if "overdue" in stats:
        table.add_row("Overdue", f"[red]{stats['overdue']}[/red]")
    table.add_section()
    for level in ("high", "medium", "low"):
        table.add_row(
            f"Priority: [{_PRIORITY_STYLE[level]}]{level}[/]",
            str(stats["byPriority"][level]),
        )
    console.print(table)


def print_error(body: Dict[str, Any], status: int, console: Optional[Console] = None) -> None:
    console = console or Console(stderr=True)
    error = body.get("error", {})
    detail = escape(f"[{error.get('code', 'UNKNOWN')}] {error.get('message', '')}")
    console.print(f"[bold red]Error {status}[/bold red] {detail}")
