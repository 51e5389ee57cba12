"""Tests for conditional predicate evaluation."""

from __future__ import annotations

import itertools

import pytest

from core.jsonrender.conditions import MISSING, OPERATORS, compare, evaluate, resolve_path

pytestmark = pytest.mark.unit

DATA = {
    "project": {"profit": -500, "code": "P-101", "tags": ["demo", "urgent"], "closed": False},
    "count": 3,
    "text_number": "12.5",
    "nothing": None,
    "flag": True,
}


def test_resolve_path_follows_mappings_and_list_indices() -> None:
    assert resolve_path(DATA, "project.profit") == -500
    assert resolve_path(DATA, "project.tags.1") == "urgent"


@pytest.mark.parametrize(
    "path",
    ["missing", "project.missing", "project.profit.deeper", "project.tags.5", "project.tags.x", "project.code.0", ""],
)
def test_resolve_path_returns_missing_for_unfollowable_paths(path: str) -> None:
    assert resolve_path(DATA, path) is MISSING


def test_resolve_path_handles_absent_data() -> None:
    assert resolve_path(None, "project") is MISSING


@pytest.mark.parametrize(
    ("path", "operator", "literal", "expected"),
    [
        ("project.profit", "lt", 0, True),
        ("project.profit", "gte", 0, False),
        ("project.profit", "lte", -500, True),
        ("count", "gt", "2", True),
        ("text_number", "gt", 12, True),
        ("project.code", "eq", "P-101", True),
        ("project.code", "neq", "P-102", True),
        ("count", "eq", 3.0, True),
        ("flag", "eq", 1, False),
        ("flag", "eq", True, True),
        ("project.closed", "eq", 0, False),
        ("project.closed", "exists", None, True),
        ("nothing", "exists", None, False),
        ("nothing", "notExists", None, True),
        ("missing", "notExists", None, True),
        ("missing", "neq", 1, True),
        ("missing", "eq", None, False),
        ("project.code", "gt", 1, False),
        ("missing", "lt", 0, False),
        ("count", "lt", None, False),
    ],
)
def test_evaluate_operators(path: str, operator: str, literal: object, expected: bool) -> None:
    assert evaluate(path, operator, literal, DATA) is expected


def test_unknown_operator_is_false() -> None:
    assert evaluate("count", "between", 3, DATA) is False


def test_evaluation_is_total() -> None:
    """Every operator returns a bool for every combination of odd inputs."""

    values = [MISSING, None, True, False, 0, -1, 1e308, 10**400, float("nan"), "5", "abc", "", [], {}, [1], {"a": 1}]
    for value, operator, literal in itertools.product(values, (*OPERATORS, "bogus"), values):
        assert isinstance(compare(value, operator, literal), bool)
