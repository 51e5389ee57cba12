"""Prop-shape declarations used by the component catalog.

Each catalog entry lists its props as `PropField` values. A field pairs the
wire name (camelCase, as generators emit it) with a shape that knows how to
check and convert a raw JSON value. Checking never raises; it returns the
converted value plus any field-level problems.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class Shape(Protocol):
    """Something that can check a raw JSON value."""

    label: str

    def check(self, value: object, *, path: str) -> tuple[Any, list[str]]:
        """Return the converted value and problems found at `path`."""
        ...


@dataclass(frozen=True, slots=True)
class ScalarShape:
    """Strings, numbers, integers and booleans, with optional numeric bounds."""

    label: str
    types: tuple[type, ...]
    integer: bool = False
    minimum: float | None = None
    maximum: float | None = None

    def check(self, value: object, *, path: str) -> tuple[Any, list[str]]:
        # bool is an int subclass; JSON true is never a number here.
        if isinstance(value, bool) and bool not in self.types:
            return None, [f"{path} must be {self.label}, got boolean."]
        if not isinstance(value, self.types):
            return None, [f"{path} must be {self.label}, got {_json_type(value)}."]
        if isinstance(value, float) and not math.isfinite(value):
            return None, [f"{path} must be a finite number, got {value!r}."]
        if self.integer and isinstance(value, float):
            if not value.is_integer():
                return None, [f"{path} must be an integer, got {value!r}."]
            value = int(value)
        if self.minimum is not None and value < self.minimum:  # type: ignore[operator]
            return None, [f"{path} must be >= {self.minimum:g}, got {value!r}."]
        if self.maximum is not None and value > self.maximum:  # type: ignore[operator]
            return None, [f"{path} must be <= {self.maximum:g}, got {value!r}."]
        return value, []


@dataclass(frozen=True, slots=True)
class EnumShape:
    """One of a fixed set of string values."""

    choices: tuple[str, ...]

    @property
    def label(self) -> str:
        return " | ".join(self.choices)

    def check(self, value: object, *, path: str) -> tuple[Any, list[str]]:
        if not isinstance(value, str) or value not in self.choices:
            return None, [f"{path} must be one of {list(self.choices)}, got {value!r}."]
        return value, []


@dataclass(frozen=True, slots=True)
class AnyShape:
    """Accept any JSON value unchanged."""

    label: str = "any value"

    def check(self, value: object, *, path: str) -> tuple[Any, list[str]]:
        return value, []


@dataclass(frozen=True, slots=True)
class RecordShape:
    """A free-form JSON object with string keys (table rows, chart points)."""

    label: str = "an object"

    def check(self, value: object, *, path: str) -> tuple[Any, list[str]]:
        if not isinstance(value, Mapping):
            return None, [f"{path} must be an object, got {_json_type(value)}."]
        return dict(value), []


@dataclass(frozen=True, slots=True)
class ListOf:
    """A JSON array whose items all satisfy `item`."""

    item: Shape

    @property
    def label(self) -> str:
        return f"a list of {self.item.label}"

    def check(self, value: object, *, path: str) -> tuple[Any, list[str]]:
        if not isinstance(value, list):
            return None, [f"{path} must be a list, got {_json_type(value)}."]
        items: list[Any] = []
        problems: list[str] = []
        for idx, raw in enumerate(value):
            converted, item_problems = self.item.check(raw, path=f"{path}[{idx}]")
            problems.extend(item_problems)
            items.append(converted)
        if problems:
            return None, problems
        return tuple(items), []


@dataclass(frozen=True, slots=True)
class ObjectOf:
    """A nested JSON object converted into the `target` dataclass."""

    fields: tuple["PropField", ...]
    target: type

    @property
    def label(self) -> str:
        return "an object"

    def check(self, value: object, *, path: str) -> tuple[Any, list[str]]:
        if not isinstance(value, Mapping):
            return None, [f"{path} must be an object, got {_json_type(value)}."]
        kwargs, problems = check_fields(self.fields, value, path=path)
        if problems:
            return None, problems
        return self.target(**kwargs), []


@dataclass(frozen=True, slots=True)
class PropField:
    """One declared prop of a component kind.

    Args:
        name: Wire name as it appears in the JSON document.
        shape: Shape used to check and convert the raw value.
        required: Whether the prop must be present.
        default: Value used when an optional prop is absent (or null).
        description: Short hint included in the generator catalog.
    """

    name: str
    shape: Shape
    required: bool = True
    default: Any = None
    description: str | None = None

    @property
    def attr(self) -> str:
        """Python attribute name on the props dataclass."""

        return _CAMEL_BOUNDARY.sub("_", self.name).lower()


STRING = ScalarShape(label="a string", types=(str,))
NUMBER = ScalarShape(label="a number", types=(int, float))
INTEGER = ScalarShape(label="an integer", types=(int, float), integer=True)
BOOLEAN = ScalarShape(label="a boolean", types=(bool,))
ANY = AnyShape()
RECORD = RecordShape()


def enum(*choices: str) -> EnumShape:
    """Return a shape accepting exactly the given strings."""

    return EnumShape(choices=tuple(choices))


def optional(name: str, shape: Shape, default: Any = None, description: str | None = None) -> PropField:
    """Shorthand for an optional PropField."""

    return PropField(name=name, shape=shape, required=False, default=default, description=description)


def check_fields(
    fields: tuple[PropField, ...],
    raw: Mapping[str, Any],
    *,
    path: str,
) -> tuple[dict[str, Any], list[str]]:
    """Check a raw JSON object against declared fields.

    Unknown keys are ignored. Optional fields that are absent or null take
    their declared default.

    Args:
        fields: Declared fields for the object.
        raw: Raw JSON object.
        path: Location of `raw` used in problem messages.

    Returns:
        Keyword arguments for the target dataclass and a list of problems.
    """

    kwargs: dict[str, Any] = {}
    problems: list[str] = []
    for spec in fields:
        value = raw.get(spec.name)
        if value is None and (spec.name not in raw or not spec.required):
            if spec.required:
                problems.append(f"{path}.{spec.name} is required.")
            else:
                kwargs[spec.attr] = spec.default
            continue
        converted, field_problems = spec.shape.check(value, path=f"{path}.{spec.name}")
        problems.extend(field_problems)
        kwargs[spec.attr] = converted
    return kwargs, problems


def _json_type(value: object) -> str:
    """Name a Python value by its JSON type for problem messages."""

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__
