"""
Filter predicate builder.

`FilterOptions` is a closed set of recognized options; unknown keys are a
validation error rather than being silently ignored. Each present option
contributes one independent term and the terms are AND-ed, so a new filter
means one new field plus one entry in `_TERM_BUILDERS`.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from taskcore.domain.models import Priority, Task

Predicate = Callable[[Task], bool]


class FilterOptions(BaseModel):
    """
    Recognized filters. `None` means "no constraint on this dimension".
    """

    done: Optional[bool] = Field(None, description="Exact match on `completed`.")
    search: Optional[str] = Field(None, description="Case-insensitive title substring.")
    priority: Optional[Priority] = Field(None, description="Exact match on `priority`.")

    model_config = {"frozen": True, "extra": "forbid"}

    @field_validator("search", mode="before")
    @classmethod
    def _blank_search_is_absent(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("priority", mode="before")
    @classmethod
    def _strict_priority(cls, value: Any) -> Any:
        # Unlike task input, a filter on an unknown priority must not widen to MEDIUM.
        return value.strip().lower() if isinstance(value, str) else value

    def applied(self) -> Dict[str, Any]:
        """The filters actually in effect, as echoed back to callers."""
        return self.model_dump(mode="json", exclude_none=True)


def _done_term(value: bool) -> Predicate:
    return lambda task: task.completed is value


def _search_term(value: str) -> Predicate:
    needle = value.casefold()
    return lambda task: needle in task.title.casefold()


def _priority_term(value: Priority) -> Predicate:
    return lambda task: task.priority is value


_TERM_BUILDERS: Dict[str, Callable[[Any], Predicate]] = {
    "done": _done_term,
    "search": _search_term,
    "priority": _priority_term,
}


def build_terms(options: FilterOptions) -> List[Predicate]:
    return [
        build(getattr(options, name))
        for name, build in _TERM_BUILDERS.items()
        if getattr(options, name) is not None
    ]


def build_predicate(options: Optional[FilterOptions] = None) -> Predicate:
    """Compose the present options into one predicate; no options matches everything."""
    terms = build_terms(options or FilterOptions())

    def predicate(task: Task) -> bool:
        return all(term(task) for term in terms)

    return predicate


__all__ = ["FilterOptions", "Predicate", "build_predicate", "build_terms"]
