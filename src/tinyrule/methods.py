"""Built-in comparison methods.

A method is any callable ``(lhs, rhs) -> bool`` over two ``Value`` objects.
Failures are reported by raising ``OperatorError``; each method checks its
own operand types.
"""

from __future__ import annotations

import operator
from typing import Callable, Final

from .errors import TypeMismatchError, UnsupportedOperationError
from .values import Value, ValueType

Operator = Callable[[Value, Value], bool]

_ORDERED_TYPES: Final = (ValueType.INT, ValueType.FLOAT, ValueType.STRING)


def _ensure_same_type(lhs: Value, rhs: Value) -> None:
    if lhs.type is not rhs.type:
        raise TypeMismatchError(lhs.tag, rhs.tag)


def _comparison(name: str, compare: Callable[[object, object], bool]) -> Operator:
    def method(lhs: Value, rhs: Value) -> bool:
        _ensure_same_type(lhs, rhs)
        if lhs.type not in _ORDERED_TYPES:
            raise UnsupportedOperationError(name, lhs.tag)
        return bool(compare(lhs.payload, rhs.payload))

    method.__name__ = f"method_{name}"
    method.__qualname__ = method.__name__
    return method


def method_contains(lhs: Value, rhs: Value) -> bool:
    if lhs.type is not ValueType.STRING:
        raise UnsupportedOperationError("contains", lhs.tag)
    _ensure_same_type(lhs, rhs)
    return rhs.payload in lhs.payload


def method_in(lhs: Value, rhs: Value) -> bool:
    if rhs.type is ValueType.STRING:
        _ensure_same_type(lhs, rhs)
        return lhs.payload in rhs.payload
    if rhs.type is ValueType.ARRAY:
        return any(item.type is lhs.type and item.payload == lhs.payload for item in rhs.payload)
    raise UnsupportedOperationError("in", rhs.tag)


BUILTIN_METHODS: Final[dict[str, Operator]] = {
    "eq": _comparison("eq", operator.eq),
    "neq": _comparison("neq", operator.ne),
    "gt": _comparison("gt", operator.gt),
    "gte": _comparison("gte", operator.ge),
    "lt": _comparison("lt", operator.lt),
    "lte": _comparison("lte", operator.le),
    "contains": method_contains,
    "in": method_in,
}
