"""
Service layer: the transport-facing surface over the core and a store.

Usage (example from CLI):
    from taskcore.infrastructure import build_store
    from taskcore.service import TaskService

    service = TaskService(build_store())
    status, body = service.list_tasks({"done": "false", "limit": "10", "page": "1"})

Every method returns `(status_code, envelope)`:
- success: `{"success": True, "count", "total", "data", "filters"?, "pagination"?}`
- failure: `{"success": False, "error": {"message", "code"}}`

Mutations run as load -> mutate -> save cycles serialized by a per-service
lock. Writers in other processes are not coordinated (last writer wins).
"""

from __future__ import annotations

import functools
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, TypeVar

from pydantic import ValidationError

from taskcore.core.filters import FilterOptions
from taskcore.core.lifecycle import KEEP, MutationResult, create_task, delete_task, get_task, set_completed, update_task
from taskcore.core.merge import merge_tasks
from taskcore.core.pagination import PaginationOptions, parse_positive_int
from taskcore.core.query import Ordering, query
from taskcore.core.stats import compute_stats
from taskcore.core.windows import due_this_week, due_today, overdue
from taskcore.domain.errors import CoreError, ErrorCode, StoreError, validation_error
from taskcore.domain.models import TaskCollection
from taskcore.infrastructure.store import TaskStore, export_tasks, read_import_file
from taskcore.utils.logging import get_logger
from taskcore.utils.time import parse_instant, utc_now

log = get_logger(__name__)

Response = Tuple[int, Dict[str, Any]]
Clock = Callable[[], datetime]
F = TypeVar("F", bound=Callable[..., Response])

DONE_VALUES: Dict[str, bool] = {"true": True, "1": True, "false": False, "0": False}
LIST_PARAMS = frozenset({"done", "search", "priority", "page", "limit", "order"})

_WINDOWS: Dict[str, Callable[[TaskCollection, datetime], list]] = {
    "today": due_today,
    "week": due_this_week,
    "overdue": overdue,
}


def error_response(error: CoreError) -> Response:
    return error.status_code, error.to_envelope()


def parse_done(value: Any) -> Optional[bool]:
    """Map a `done` query value onto a bool; raises ValueError for anything unrecognized."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    key = str(value).strip().lower()
    if not key:
        return None
    if key not in DONE_VALUES:
        raise ValueError("done must be one of true, false, 1, 0")
    return DONE_VALUES[key]


def parse_list_params(params: Mapping[str, Any]) -> Tuple[FilterOptions, PaginationOptions, Ordering] | CoreError:
    """Translate raw request parameters into core options."""
    ignored = sorted(set(params) - LIST_PARAMS)
    if ignored:
        log.debug("Ignoring unrecognized query parameters", extra={"ignored": ignored})
    try:
        filters = FilterOptions(
            done=parse_done(params.get("done")),
            search=params.get("search"),
            priority=params.get("priority") or None,
        )
    except (ValueError, ValidationError) as exc:
        message = exc.errors()[0]["msg"] if isinstance(exc, ValidationError) else str(exc)
        return validation_error(ErrorCode.VALIDATION_ERROR, message)
    try:
        order = Ordering(params.get("order") or Ordering.NEWEST_FIRST.value)
    except ValueError:
        allowed = ", ".join(o.value for o in Ordering)
        return validation_error(ErrorCode.VALIDATION_ERROR, f"order must be one of {allowed}")
    pagination = PaginationOptions(page=params.get("page"), limit=params.get("limit"))
    return filters, pagination, order


def _store_guard(func: F) -> F:
    """Turn StoreError into a logged 500 response instead of letting it escape."""

    @functools.wraps(func)
    def wrapper(self: "TaskService", *args: Any, **kwargs: Any) -> Response:
        try:
            return func(self, *args, **kwargs)
        except StoreError as exc:
            log.error(
                f"[STORE FAILED] {func.__name__}",
                exc_info=exc,
                extra={"operation": exc.operation, "backend": exc.backend},
            )
            return error_response(exc.to_core_error())

    return wrapper  # type: ignore[return-value]


class TaskService:
    def __init__(self, store: TaskStore, clock: Optional[Clock] = None) -> None:
        self.store = store
        self._clock = clock or utc_now
        self._lock = threading.Lock()

    def now(self) -> datetime:
        return self._clock()

    def _mutate(self, operation: Callable[[TaskCollection], MutationResult]) -> MutationResult:
        with self._lock:
            result = operation(self.store.load_all())
            if result.ok and result.changed:
                self.store.save_all(result.collection)
            return result

    def _parse_id(self, task_id: Any) -> int | CoreError:
        parsed = parse_positive_int(task_id)
        if parsed is None:
            return validation_error(ErrorCode.VALIDATION_ERROR, f"Invalid task id: {task_id!r}")
        return parsed

    def _parse_due(self, value: Any) -> Optional[datetime] | CoreError:
        if value is None or isinstance(value, datetime):
            return value
        try:
            return parse_instant(str(value), assume=self.now().tzinfo)
        except ValueError:
            return validation_error(ErrorCode.VALIDATION_ERROR, f"Invalid dueDate: {value!r}")

    # -------------------- reads --------------------
    @_store_guard
    def list_tasks(self, params: Optional[Mapping[str, Any]] = None) -> Response:
        parsed = parse_list_params(params or {})
        if isinstance(parsed, CoreError):
            return error_response(parsed)
        filters, pagination, order = parsed

        result = query(self.store.load_all(), filters, pagination, order)
        if result.error is not None:
            return error_response(result.error)

        body: Dict[str, Any] = {
            "success": True,
            "count": len(result.records),
            "total": result.total,
            "data": [t.to_wire() for t in result.records],
        }
        applied = filters.applied()
        if applied:
            body["filters"] = applied
        if result.pagination is not None:
            body["pagination"] = result.pagination.to_wire()
        return 200, body

    @_store_guard
    def get_task(self, task_id: Any) -> Response:
        parsed = self._parse_id(task_id)
        if isinstance(parsed, CoreError):
            return error_response(parsed)
        result = get_task(self.store.load_all(), parsed)
        if result.error is not None:
            return error_response(result.error)
        return 200, {"success": True, "data": result.task.to_wire()}

    @_store_guard
    def stats(self) -> Response:
        stats = compute_stats(self.store.load_all(), now=self.now())
        return 200, {"success": True, "data": stats.to_wire()}

    @_store_guard
    def due(self, window: str) -> Response:
        finder = _WINDOWS.get(window)
        if finder is None:
            return error_response(
                validation_error(
                    ErrorCode.VALIDATION_ERROR, f"window must be one of {', '.join(_WINDOWS)}"
                )
            )
        tasks = finder(self.store.load_all(), self.now())
        return 200, {"success": True, "count": len(tasks), "data": [t.to_wire() for t in tasks]}

    # -------------------- mutations --------------------
    @_store_guard
    def create_task(self, body: Mapping[str, Any]) -> Response:
        due = self._parse_due(body.get("dueDate"))
        if isinstance(due, CoreError):
            return error_response(due)
        title = body.get("title", body.get("task"))
        result = self._mutate(
            lambda c: create_task(c, title, body.get("priority"), now=self.now(), due_date=due)
        )
        if result.error is not None:
            return error_response(result.error)
        log.info(f"[TASK CREATED] {result.task.id}", extra={"task_id": result.task.id})
        return 201, {"success": True, "data": result.task.to_wire()}

    @_store_guard
    def update_status(self, task_id: Any, done: Any) -> Response:
        parsed = self._parse_id(task_id)
        if isinstance(parsed, CoreError):
            return error_response(parsed)
        if done is None:
            return error_response(validation_error(ErrorCode.VALIDATION_ERROR, "done field is required"))
        if not isinstance(done, bool) and done not in (0, 1):
            return error_response(validation_error(ErrorCode.VALIDATION_ERROR, "done must be boolean or 0/1"))

        result = self._mutate(lambda c: set_completed(c, parsed, bool(done), now=self.now()))
        if result.error is not None:
            return error_response(result.error)
        if result.changed:
            log.info(
                f"[TASK {'COMPLETED' if done else 'REOPENED'}] {parsed}",
                extra={"task_id": parsed},
            )
        return 200, {"success": True, "data": result.task.to_wire()}

    @_store_guard
    def update_task(self, task_id: Any, body: Mapping[str, Any]) -> Response:
        parsed = self._parse_id(task_id)
        if isinstance(parsed, CoreError):
            return error_response(parsed)
        due: Any = KEEP
        if "dueDate" in body:
            due = self._parse_due(body["dueDate"])
            if isinstance(due, CoreError):
                return error_response(due)

        result = self._mutate(
            lambda c: update_task(
                c,
                parsed,
                now=self.now(),
                title=body.get("title", body.get("task")),
                priority=body.get("priority"),
                due_date=due,
            )
        )
        if result.error is not None:
            return error_response(result.error)
        return 200, {"success": True, "data": result.task.to_wire()}

    @_store_guard
    def delete_task(self, task_id: Any) -> Response:
        parsed = self._parse_id(task_id)
        if isinstance(parsed, CoreError):
            return error_response(parsed)
        result = self._mutate(lambda c: delete_task(c, parsed))
        if result.error is not None:
            return error_response(result.error)
        log.info(f"[TASK DELETED] {parsed}", extra={"task_id": parsed})
        return 204, {}

    @_store_guard
    def import_tasks(self, records: Optional[Any]) -> Response:
        if isinstance(records, Mapping):
            records = records.get("tasks")
        if records is not None and not isinstance(records, (list, tuple)):
            return error_response(
                validation_error(ErrorCode.VALIDATION_ERROR, "Import payload must be a list of tasks")
            )
        with self._lock:
            result = merge_tasks(self.store.load_all(), records, now=self.now())
            if result.error is not None:
                return error_response(result.error)
            if result.merged:
                self.store.save_all(result.collection)
        if result.merged:
            log.info(
                f"[IMPORT] {result.merged} task(s) merged",
                extra={"merged": result.merged, "next_id": result.next_id},
            )
        else:
            log.warning("No tasks to import")
        return 200, {"success": True, "data": {"merged": result.merged, "nextId": result.next_id}}

    @_store_guard
    def import_file(self, path: Path | str) -> Response:
        return self.import_tasks(read_import_file(path))

    @_store_guard
    def export_file(self, path: Path | str) -> Response:
        exported = export_tasks(path, self.store.load_all())
        log.info(f"[EXPORT] {exported} task(s) -> {path}", extra={"exported": exported})
        return 200, {"success": True, "data": {"exported": exported, "path": str(path)}}


__all__ = [
    "DONE_VALUES",
    "Response",
    "TaskService",
    "error_response",
    "parse_done",
    "parse_list_params",
]
