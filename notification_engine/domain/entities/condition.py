"""Typed condition trees attached to notification rules.

Rules store their conditions as JSON. The JSON is parsed into the closed set of
node types below when a rule is created or updated, so evaluation only ever sees
well-formed trees.

JSON shapes::

    {"field": "data.amount", "op": "gte", "value": 1000}
    {"and": [<node>, ...]}
    {"or": [<node>, ...]}
    {"not": <node>}
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

COMPARISON_OPERATORS: frozenset[str] = frozenset(
    {"eq", "neq", "gt", "gte", "lt", "lte", "in", "not_in", "contains"}
)
_MEMBERSHIP_OPERATORS = frozenset({"in", "not_in"})


class InvalidConditionError(ValueError):
    """Raised when a rule condition tree cannot be parsed."""


@dataclass(frozen=True)
class Comparison:
    """Leaf comparing the value at ``field`` (a dotted path) with ``value``."""

    field: str
    op: str
    value: Any = None


@dataclass(frozen=True)
class And:
    children: tuple["ConditionNode", ...] = ()


@dataclass(frozen=True)
class Or:
    children: tuple["ConditionNode", ...] = ()


@dataclass(frozen=True)
class Not:
    child: "ConditionNode"


ConditionNode = Union[Comparison, And, Or, Not]


def parse_condition(raw: Any, *, path: str = "conditions") -> ConditionNode:
    """Parse the JSON representation ``raw`` into a :data:`ConditionNode`."""

    if isinstance(raw, (Comparison, And, Or, Not)):
        return raw
    if not isinstance(raw, Mapping):
        raise InvalidConditionError(f"{path}: expected an object, got {type(raw).__name__}")

    if "and" in raw or "or" in raw:
        key = "and" if "and" in raw else "or"
        if len(raw) != 1:
            raise InvalidConditionError(f"{path}: '{key}' cannot be combined with other keys")
        children = raw[key]
        if not isinstance(children, Sequence) or isinstance(children, (str, bytes)):
            raise InvalidConditionError(f"{path}.{key}: expected a list of conditions")
        parsed = tuple(
            parse_condition(child, path=f"{path}.{key}[{index}]")
            for index, child in enumerate(children)
        )
        return And(parsed) if key == "and" else Or(parsed)

    if "not" in raw:
        if len(raw) != 1:
            raise InvalidConditionError(f"{path}: 'not' cannot be combined with other keys")
        return Not(parse_condition(raw["not"], path=f"{path}.not"))

    field_path = raw.get("field")
    if not isinstance(field_path, str) or not field_path.strip():
        raise InvalidConditionError(f"{path}: comparison requires a non-empty 'field'")
    op = raw.get("op")
    if op not in COMPARISON_OPERATORS:
        allowed = ", ".join(sorted(COMPARISON_OPERATORS))
        raise InvalidConditionError(f"{path}: unsupported operator {op!r} (allowed: {allowed})")
    unexpected = set(raw) - {"field", "op", "value"}
    if unexpected:
        raise InvalidConditionError(
            f"{path}: unexpected keys {', '.join(sorted(unexpected))}"
        )
    value = raw.get("value")
    if op in _MEMBERSHIP_OPERATORS:
        if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
            raise InvalidConditionError(f"{path}: '{op}' requires a list value")
        value = tuple(value)
    return Comparison(field=field_path.strip(), op=op, value=value)


def condition_to_dict(node: ConditionNode) -> dict[str, Any]:
    """Return the JSON representation of ``node``."""

    if isinstance(node, Comparison):
        value = list(node.value) if isinstance(node.value, tuple) else node.value
        return {"field": node.field, "op": node.op, "value": value}
    if isinstance(node, And):
        return {"and": [condition_to_dict(child) for child in node.children]}
    if isinstance(node, Or):
        return {"or": [condition_to_dict(child) for child in node.children]}
    return {"not": condition_to_dict(node.child)}


__all__ = [
    "COMPARISON_OPERATORS",
    "And",
    "Comparison",
    "ConditionNode",
    "InvalidConditionError",
    "Not",
    "Or",
    "condition_to_dict",
    "parse_condition",
]
