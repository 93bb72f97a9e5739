"""Rule checker: variable store, method registry, and the eval entry point."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import RuleError
from .lookup import FastStringLookup
from .methods import BUILTIN_METHODS, Operator
from .parser import evaluate_rule
from .values import Value, float_value, int_value, string_value, to_value

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvalResult:
    """Outcome of one evaluation; ``result`` is meaningless when ``error`` is set."""

    result: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class RuleChecker:
    """Evaluates ``var.method(value)`` rules against registered variables.

    Expressions are re-read on every call; nothing is cached between calls.
    Stores may be changed between evaluations but not during one.
    """

    def __init__(self, default_methods: bool = True) -> None:
        self._variables: FastStringLookup[Value] = FastStringLookup()
        self._methods: FastStringLookup[Operator] = FastStringLookup()
        if default_methods:
            self.init_methods()

    def clear_variables(self) -> None:
        logger.debug("clearing %d variables", len(self._variables))
        self._variables.clear()

    def set_variable(self, name: str, value: object) -> None:
        self._variables.set(name, to_value(value, where=f"variable {name!r}"))

    def set_int(self, name: str, value: int) -> None:
        self._variables.set(name, int_value(value))

    def set_float(self, name: str, value: float) -> None:
        self._variables.set(name, float_value(value))

    def set_string(self, name: str, value: str) -> None:
        self._variables.set(name, string_value(value))

    def get_variable(self, name: str) -> Value | None:
        return self._variables.get(name)

    def clear_methods(self) -> None:
        logger.debug("clearing %d methods", len(self._methods))
        self._methods.clear()

    def init_methods(self) -> None:
        logger.debug("registering built-in methods: %s", ", ".join(BUILTIN_METHODS))
        for name, method in BUILTIN_METHODS.items():
            self._methods.set(name, method)

    def set_method(self, name: str, method: Operator) -> None:
        if not callable(method):
            raise TypeError(f"method {name!r} must be callable")
        self._methods.set(name, method)

    def get_method(self, name: str) -> Operator | None:
        return self._methods.get(name)

    def check(self, text: str) -> bool:
        """Evaluate ``text``, raising the ``RuleError`` subclass on failure."""
        return evaluate_rule(text, self._variables, self._methods)

    def evaluate(self, text: str) -> EvalResult:
        try:
            result = evaluate_rule(text, self._variables, self._methods)
        except RuleError as err:
            logger.debug("rule %r failed: %s", text, err.message)
            return EvalResult(error=err.message)
        return EvalResult(result=result)

    eval = evaluate
