"""Predicate evaluation for `conditional` nodes.

A predicate is a `(path, operator, literal)` triple. The path is resolved
against the dashboard data bag one dot-separated segment at a time; anything
that cannot be followed resolves to `MISSING`. Evaluation is total: every
operator returns a bool for every input and nothing raises, so a bad
predicate can only pick a branch, never break a render.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any, Final


class _Missing:
    """Sentinel type for values that could not be resolved."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing()

OPERATORS: Final[tuple[str, ...]] = ("exists", "notExists", "eq", "neq", "gt", "gte", "lt", "lte")


def resolve_path(data: Mapping[str, Any] | None, path: str) -> Any:
    """Resolve a dot-separated path against a data bag.

    Segments index into mappings by key and into lists by integer position.

    Args:
        data: Data bag (may be None).
        path: Path such as `project.profit` or `invoices.0.amount`.

    Returns:
        The resolved value, or `MISSING` when any segment cannot be followed.
    """

    if data is None or not isinstance(path, str) or not path:
        return MISSING

    current: Any = data
    for segment in path.split("."):
        if isinstance(current, Mapping):
            if segment not in current:
                return MISSING
            current = current[segment]
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
            try:
                index = int(segment)
            except ValueError:
                return MISSING
            if index < 0 or index >= len(current):
                return MISSING
            current = current[index]
        else:
            return MISSING
    return current


def evaluate(path: str, operator: str, literal: Any, data: Mapping[str, Any] | None) -> bool:
    """Evaluate a predicate against a data bag.

    Args:
        path: Dot-separated data path.
        operator: One of `OPERATORS`; anything else evaluates to False.
        literal: Comparison literal (ignored by exists/notExists).
        data: Data bag to resolve `path` against.

    Returns:
        True when the predicate holds.
    """

    value = resolve_path(data, path)
    return compare(value, operator, literal)


def compare(value: Any, operator: str, literal: Any) -> bool:
    """Apply an operator to an already-resolved value."""

    if operator == "exists":
        return value is not MISSING and value is not None
    if operator == "notExists":
        return value is MISSING or value is None
    if operator == "eq":
        return value is not MISSING and _strict_equal(value, literal)
    if operator == "neq":
        return value is MISSING or not _strict_equal(value, literal)

    left = _as_number(value)
    right = _as_number(literal)
    if left is None or right is None:
        return False
    if operator == "gt":
        return left > right
    if operator == "gte":
        return left >= right
    if operator == "lt":
        return left < right
    if operator == "lte":
        return left <= right
    return False


def _strict_equal(value: Any, literal: Any) -> bool:
    """Equality that does not treat booleans as numbers."""

    if isinstance(value, bool) or isinstance(literal, bool):
        return isinstance(value, bool) and isinstance(literal, bool) and value is literal
    if isinstance(value, (int, float)) and isinstance(literal, (int, float)):
        return value == literal
    if type(value) is not type(literal) and not (
        isinstance(value, Mapping) and isinstance(literal, Mapping)
    ):
        return False
    return bool(value == literal)


def _as_number(value: Any) -> float | None:
    """Coerce numbers and numeric strings; anything else is not comparable."""

    if value is MISSING or value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (OverflowError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number
