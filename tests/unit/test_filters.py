from __future__ import annotations

import pytest
from pydantic import ValidationError

from taskcore.core.filters import FilterOptions, build_predicate, build_terms
from taskcore.domain.models import Priority


def test_no_options_match_everything(make_task):
    predicate = build_predicate()
    assert predicate(make_task(1)) is True
    assert predicate(make_task(2, completed=True)) is True


@pytest.mark.parametrize("done, expected_ids", [(True, [2]), (False, [1, 3])])
def test_done_is_exact_match(make_task, done: bool, expected_ids: list[int]):
    tasks = [make_task(1), make_task(2, completed=True), make_task(3)]
    predicate = build_predicate(FilterOptions(done=done))
    assert [t.id for t in tasks if predicate(t)] == expected_ids


def test_search_is_case_insensitive_substring(make_task):
    tasks = [make_task(1, "Buy MILK"), make_task(2, "Write report"), make_task(3, "buy bread")]
    predicate = build_predicate(FilterOptions(search="  buy "))
    assert [t.id for t in tasks if predicate(t)] == [1, 3]


@pytest.mark.parametrize("blank", ["", "   ", "\t\n"])
def test_blank_search_is_absent(blank: str):
    options = FilterOptions(search=blank)
    assert options.search is None
    assert build_terms(options) == []
    assert options.applied() == {}


def test_terms_are_anded(make_task):
    tasks = [
        make_task(1, "Buy milk", completed=True),
        make_task(2, "Buy bread"),
        make_task(3, "Sell bike", completed=True),
    ]
    predicate = build_predicate(FilterOptions(done=True, search="buy"))
    assert [t.id for t in tasks if predicate(t)] == [1]


def test_priority_extension_term(make_task):
    tasks = [make_task(1, priority="high"), make_task(2, priority="low"), make_task(3, priority="HIGH")]
    predicate = build_predicate(FilterOptions(priority="High"))
    assert [t.id for t in tasks if predicate(t)] == [1, 3]


def test_unknown_priority_is_rejected_not_widened():
    with pytest.raises(ValidationError):
        FilterOptions(priority="urgent")


def test_unrecognized_option_is_rejected():
    with pytest.raises(ValidationError):
        FilterOptions(category="work")


def test_applied_reports_only_present_options():
    options = FilterOptions(done=False, search=" milk ", priority=Priority.LOW)
    assert options.applied() == {"done": False, "search": "milk", "priority": "low"}
