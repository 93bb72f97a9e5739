"""Structured error types for rule parsing, resolution and method dispatch."""

from __future__ import annotations


class RuleError(Exception):
    """Base class for every failure surfaced by a rule evaluation."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class RuleSyntaxError(RuleError):
    """Malformed rule text, positioned at the offending lexeme."""

    def __init__(self, message: str, start: int, end: int, found: str | None = None) -> None:
        super().__init__(message)
        self.start = start
        self.end = end
        self.found = found

    def describe(self) -> str:
        found = ""
        if self.found is not None:
            found = f"; found {self.found}"
        return f"{self.message} at span [{self.start}, {self.end}){found}"


class ResolutionError(RuleError):
    """A variable or method name is not registered."""

    def __init__(self, message: str, name: str) -> None:
        super().__init__(message)
        self.name = name

    @classmethod
    def variable(cls, name: str) -> "ResolutionError":
        return cls(f"variable '{name}' not found", name)

    @classmethod
    def method(cls, name: str) -> "ResolutionError":
        return cls(f"unknown method '{name}'", name)


class OperatorError(RuleError):
    """Raised by a method operator; the message reaches the caller verbatim."""


class TypeMismatchError(OperatorError):
    def __init__(self, lhs_tag: str, rhs_tag: str) -> None:
        super().__init__(f"type mismatch: type {lhs_tag} vs {rhs_tag}")
        self.lhs_tag = lhs_tag
        self.rhs_tag = rhs_tag


class UnsupportedOperationError(OperatorError):
    def __init__(self, method: str, tag: str) -> None:
        super().__init__(f"unsupported operation '{method}' with type '{tag}'")
        self.method = method
        self.tag = tag
