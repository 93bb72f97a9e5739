"""Single-pass parser that evaluates rule expressions as it reads them.

Grammar::

    expr      -> '(' expr ')' [boolop expr]
               | statement [boolop expr]
    statement -> id '.' id '(' value ')'
               | '!' statement
    value     -> id | int | float | string | array
    array     -> '[' [value (',' value)*] ']'
    boolop    -> '&&' | '||'

Each production returns its boolean value directly; no tree is built.
A chain of ``boolop`` operands is read in a loop and folded from the right,
so mixed chains group to the right with no precedence between ``&&`` and
``||``. Every operand is evaluated before any are combined. Runs of ``!``
are counted rather than recursed into; only parentheses nest.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, NoReturn

from .errors import ResolutionError, RuleSyntaxError
from .lexer import AND, COMMA, DOT, EOF, FLOAT, ID, INT, LBRACK, LPAREN, NOT, OR, RBRACK, RPAREN, STRING, UNTERMINATED, Lexeme, describe, next_lexeme
from .lookup import FastStringLookup
from .methods import Operator
from .values import Value, ValueType, string_value

_ESCAPES: Final[dict[str, str]] = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "0": "\0",
    "\\": "\\",
    "'": "'",
    '"': '"',
}


def unescape(raw: str) -> str:
    """Resolve backslash escapes; unknown escapes keep the escaped character."""
    out: list[str] = []
    i = 0
    while i < len(raw):
        ch = raw[i]
        if ch == "\\":
            if i + 1 < len(raw):
                escaped = raw[i + 1]
                out.append(_ESCAPES.get(escaped, escaped))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


@dataclass
class _Parser:
    source: str
    variables: FastStringLookup[Value]
    methods: FastStringLookup[Operator]
    pos: int = 0
    lexeme: Lexeme | None = None

    def evaluate(self) -> bool:
        try:
            result = self._parse_expr()
        except RecursionError:
            at = self.lexeme if self.lexeme is not None else next_lexeme(self.source, self.pos)
            raise RuleSyntaxError("expression too deeply nested", at.start, at.end, found=describe(at)) from None
        trailing = self._peek()
        if trailing.kind != EOF:
            self._error(f"unexpected token '{trailing.text}'", trailing)
        return result

    def _peek(self) -> Lexeme:
        self.lexeme = next_lexeme(self.source, self.pos)
        return self.lexeme

    def _advance(self) -> Lexeme:
        lexeme = self._peek()
        self.pos = lexeme.end
        return lexeme

    def _expect(self, kind: str, message: str) -> Lexeme:
        lexeme = self._advance()
        if lexeme.kind != kind:
            self._error(message, lexeme)
        return lexeme

    def _error(self, message: str, lexeme: Lexeme) -> NoReturn:
        raise RuleSyntaxError(message, lexeme.start, lexeme.end, found=describe(lexeme))

    def _parse_expr(self) -> bool:
        # a chain is read iteratively, then folded from the right
        operands = [self._parse_operand()]
        boolops: list[str] = []
        while True:
            boolop = self._peek()
            if boolop.kind not in (AND, OR):
                break
            self._advance()
            boolops.append(boolop.kind)
            operands.append(self._parse_operand())

        result = operands.pop()
        while boolops:
            lhs = operands.pop()
            if boolops.pop() == AND:
                result = lhs and result
            else:
                result = lhs or result
        return result

    def _parse_operand(self) -> bool:
        lexeme = self._peek()
        if lexeme.kind == EOF:
            self._error("expecting expression", lexeme)
        if lexeme.kind != LPAREN:
            return self._parse_statement()
        self._advance()
        result = self._parse_expr()
        self._expect(RPAREN, "expecting ')'")
        return result

    def _parse_statement(self) -> bool:
        negations = 0
        lexeme = self._advance()
        while lexeme.kind == NOT:
            negations += 1
            lexeme = self._advance()
        if lexeme.kind == EOF:
            self._error("expecting statement", lexeme)
        result = self._parse_call(lexeme)
        return result if negations % 2 == 0 else not result

    def _parse_call(self, lexeme: Lexeme) -> bool:
        if lexeme.kind != ID:
            self._error("expecting identifier", lexeme)

        subject = lexeme.text
        self._expect(DOT, "expecting '.'")
        method_name = self._expect(ID, "expecting identifier").text
        self._expect(LPAREN, "expecting '('")
        argument = self._parse_value()
        self._expect(RPAREN, "expecting ')'")

        lhs = self.variables.get(subject)
        if lhs is None:
            raise ResolutionError.variable(subject)
        method = self.methods.get(method_name)
        if method is None:
            raise ResolutionError.method(method_name)
        return bool(method(lhs, argument))

    def _parse_value(self) -> Value:
        lexeme = self._advance()
        kind = lexeme.kind
        if kind == INT:
            return Value(ValueType.INT, lexeme.value)
        if kind == FLOAT:
            return Value(ValueType.FLOAT, lexeme.value)
        if kind == STRING:
            return string_value(unescape(lexeme.text) if lexeme.escaped else lexeme.text)
        if kind == UNTERMINATED:
            self._error("unterminated string", lexeme)
        if kind == ID:
            value = self.variables.get(lexeme.text)
            if value is None:
                raise ResolutionError.variable(lexeme.text)
            return value
        if kind == LBRACK:
            return self._parse_array()
        self._error("expecting value", lexeme)

    def _parse_array(self) -> Value:
        items: list[Value] = []
        if self._peek().kind == RBRACK:
            self._advance()
            return Value(ValueType.ARRAY, ())

        while True:
            items.append(self._parse_value())
            separator = self._advance()
            if separator.kind == RBRACK:
                return Value(ValueType.ARRAY, tuple(items))
            if separator.kind == EOF:
                self._error("expecting ']'", separator)
            if separator.kind != COMMA:
                self._error("expecting ','", separator)


def evaluate_rule(source: str, variables: FastStringLookup[Value], methods: FastStringLookup[Operator]) -> bool:
    """Evaluate ``source`` against the given stores, raising ``RuleError`` on failure."""
    return _Parser(source, variables, methods).evaluate()
