"""tinyrule public API."""

from .errors import (
    OperatorError,
    ResolutionError,
    RuleError,
    RuleSyntaxError,
    TypeMismatchError,
    UnsupportedOperationError,
)
from .evaluator import EvalResult, RuleChecker
from .lookup import FastStringLookup
from .methods import BUILTIN_METHODS, Operator
from .values import Value, ValueType, array_value, float_value, int_value, string_value, to_value

__all__ = [
    "RuleChecker",
    "EvalResult",
    "FastStringLookup",
    "BUILTIN_METHODS",
    "Operator",
    "Value",
    "ValueType",
    "int_value",
    "float_value",
    "string_value",
    "array_value",
    "to_value",
    "RuleError",
    "RuleSyntaxError",
    "ResolutionError",
    "OperatorError",
    "TypeMismatchError",
    "UnsupportedOperationError",
]
