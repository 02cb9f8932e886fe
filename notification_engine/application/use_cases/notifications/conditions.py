"""Evaluate rule condition trees against event payloads."""

from __future__ import annotations

import logging
from collections import ChainMap
from collections.abc import Mapping, Sequence
from numbers import Real
from typing import Any

from notification_engine.domain.entities import (
    And,
    Comparison,
    ConditionNode,
    Not,
    NotificationEvent,
    Or,
)

logger = logging.getLogger(__name__)

MISSING = object()


def event_scope(event: NotificationEvent) -> Mapping[str, Any]:
    """Return the mapping conditions see for ``event``.

    Envelope keys (``type``, ``category``, ``priority``, ``triggered_by`` and
    ``data``) resolve first; any other leading segment is looked up inside
    ``event.data`` so ``data.amount`` and ``amount`` address the same value.
    """

    return ChainMap(event.envelope(), event.data or {})


def lookup(payload: Any, path: str) -> Any:
    """Resolve the dotted ``path`` inside ``payload``.

    Mapping keys are matched by name and integer segments index into lists.
    Returns the ``MISSING`` sentinel when any segment is absent.
    """

    current = payload
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


def evaluate(node: ConditionNode | None, payload: Mapping[str, Any]) -> bool:
    """Return whether ``payload`` satisfies ``node``.

    ``None`` means the rule carries no conditions and always matches. The
    evaluation never raises: unexpected shapes or types simply do not match.
    """

    if node is None:
        return True
    if isinstance(node, Comparison):
        return _compare(node, lookup(payload, node.field))
    if isinstance(node, And):
        return all(evaluate(child, payload) for child in node.children)
    if isinstance(node, Or):
        return any(evaluate(child, payload) for child in node.children)
    if isinstance(node, Not):
        return not evaluate(node.child, payload)
    logger.warning("Unsupported condition node %r", node)
    return False


def _compare(node: Comparison, actual: Any) -> bool:
    op = node.op
    expected = node.value

    if actual is MISSING:
        return op in ("neq", "not_in")

    try:
        if op == "eq":
            return _same_kind(actual, expected) and actual == expected
        if op == "neq":
            return _same_kind(actual, expected) and actual != expected
        if op in ("gt", "gte", "lt", "lte"):
            return _ordered(op, actual, expected)
        if op in ("in", "not_in"):
            if not isinstance(expected, (list, tuple, set, frozenset)):
                return False
            candidates = [item for item in expected if _same_kind(actual, item)]
            found = any(actual == item for item in candidates)
            if op == "in":
                return found
            return bool(candidates) and not found
        if op == "contains":
            return _contains(actual, expected)
    except (TypeError, ValueError):
        logger.debug("Condition %s on %s could not be evaluated", op, node.field)
        return False

    logger.warning("Unsupported condition operator %r", op)
    return False


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _same_kind(left: Any, right: Any) -> bool:
    if _is_number(left) and _is_number(right):
        return True
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool)
    return isinstance(left, type(right)) or isinstance(right, type(left))


def _ordered(op: str, actual: Any, expected: Any) -> bool:
    comparable = (_is_number(actual) and _is_number(expected)) or (
        isinstance(actual, str) and isinstance(expected, str)
    )
    if not comparable:
        return False
    if op == "gt":
        return actual > expected
    if op == "gte":
        return actual >= expected
    if op == "lt":
        return actual < expected
    return actual <= expected


def _contains(actual: Any, expected: Any) -> bool:
    if isinstance(actual, str):
        return isinstance(expected, str) and expected in actual
    if isinstance(actual, Mapping):
        return isinstance(expected, str) and expected in actual
    if isinstance(actual, Sequence) and not isinstance(actual, bytes):
        return any(_same_kind(item, expected) and item == expected for item in actual)
    return False


__all__ = ["MISSING", "evaluate", "event_scope", "lookup"]
