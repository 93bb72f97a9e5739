"""Cursor-driven lexer for rule expressions.

No token list is built: ``next_lexeme(source, pos)`` classifies the lexeme
starting at (or after whitespace following) ``pos`` and reports where the
next one begins. Peeking is simply calling it again without keeping ``end``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Iterator

from .values import float32_from_parts, wrap_int32

ID: Final = "ID"
INT: Final = "INT"
FLOAT: Final = "FLOAT"
STRING: Final = "STRING"
UNTERMINATED: Final = "UNTERMINATED"
LPAREN: Final = "LPAREN"
RPAREN: Final = "RPAREN"
LBRACK: Final = "LBRACK"
RBRACK: Final = "RBRACK"
DOT: Final = "DOT"
COMMA: Final = "COMMA"
NOT: Final = "NOT"
AND: Final = "AND"
OR: Final = "OR"
EOF: Final = "EOF"
UNKNOWN: Final = "UNKNOWN"

_SPACE: Final = "SPACE"
_QUOTE: Final = "QUOTE"
_NUMBER: Final = "NUMBER"
_NUL: Final = "\0"


@dataclass(frozen=True)
class Lexeme:
    kind: str
    text: str
    start: int
    end: int
    value: int | float | None = None
    escaped: bool = False


def _build_lexeme_table() -> tuple[str, ...]:
    table = []
    for code in range(256):
        ch = chr(code)
        if code == 0:
            kind = EOF
        elif ch in " \t\r\n":
            kind = _SPACE
        elif ch == "_" or (ch.isascii() and ch.isalpha()):
            kind = ID
        elif ch in "\"'":
            kind = _QUOTE
        elif ch in "+-" or "0" <= ch <= "9":
            kind = _NUMBER
        else:
            kind = {
                "(": LPAREN,
                ")": RPAREN,
                "[": LBRACK,
                "]": RBRACK,
                ".": DOT,
                ",": COMMA,
                "!": NOT,
                "&": AND,
                "|": OR,
            }.get(ch, UNKNOWN)
        table.append(kind)
    return tuple(table)


def _build_ident_table() -> tuple[bool, ...]:
    return tuple(chr(code) == "_" or (chr(code).isascii() and chr(code).isalnum()) for code in range(256))


_LEXEME_TABLE: Final[tuple[str, ...]] = _build_lexeme_table()
_IDENT_TABLE: Final[tuple[bool, ...]] = _build_ident_table()


def _char_at(source: str, i: int) -> str:
    return source[i] if i < len(source) else _NUL


def _classify(ch: str) -> str:
    code = ord(ch)
    return _LEXEME_TABLE[code] if code < 256 else UNKNOWN


def _continues_ident(ch: str) -> bool:
    code = ord(ch)
    return code < 256 and _IDENT_TABLE[code]


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _scan_number(source: str, start: int) -> Lexeme:
    """Lex an int32 or float32 literal, computing its value as digits are read.

    A leading ``-`` negates the whole literal, fraction included, so ``-1.5``
    is -1.5. Implementations that negate only the integer part before adding
    the fraction read it as -0.5; this lexer does not.
    """
    first = source[start]
    negative = first == "-"
    acc = ord(first) - 48 if _is_digit(first) else 0
    i = start + 1
    while _is_digit(_char_at(source, i)):
        acc = acc * 10 + ord(source[i]) - 48
        i += 1

    if _char_at(source, i) != ".":
        whole = wrap_int32(-acc if negative else acc)
        return Lexeme(INT, source[start:i], start, i, whole)

    i += 1
    frac_start = i
    fraction = 0
    while _is_digit(_char_at(source, i)):
        fraction = fraction * 10 + ord(source[i]) - 48
        i += 1
    value = float32_from_parts(wrap_int32(acc), fraction, i - frac_start, negative=negative)
    return Lexeme(FLOAT, source[start:i], start, i, value)


def _scan_quoted(source: str, start: int) -> Lexeme:
    quote = source[start]
    i = start + 1
    escaped = False
    while True:
        ch = _char_at(source, i)
        if ch == _NUL:
            return Lexeme(UNTERMINATED, source[start + 1 : i], start, i)
        if ch == quote:
            return Lexeme(STRING, source[start + 1 : i], start, i + 1, escaped=escaped)
        if ch == "\\":
            escaped = True
            if _char_at(source, i + 1) == _NUL:
                return Lexeme(UNTERMINATED, source[start + 1 : i + 1], start, i + 1)
            i += 1
        i += 1


def next_lexeme(source: str, pos: int) -> Lexeme:
    """Return the lexeme at ``pos``; its ``end`` is the cursor for the next call."""
    i = pos
    ch = _char_at(source, i)
    kind = _classify(ch)
    while kind == _SPACE:
        i += 1
        ch = _char_at(source, i)
        kind = _classify(ch)

    if kind == EOF:
        return Lexeme(EOF, "", i, i)

    if kind == ID:
        end = i + 1
        while _continues_ident(_char_at(source, end)):
            end += 1
        return Lexeme(ID, source[i:end], i, end)

    if kind == _NUMBER:
        return _scan_number(source, i)

    if kind == _QUOTE:
        return _scan_quoted(source, i)

    if kind in (AND, OR):
        if _char_at(source, i + 1) == ch:
            return Lexeme(kind, source[i : i + 2], i, i + 2)
        return Lexeme(UNKNOWN, ch, i, i + 1)

    return Lexeme(kind, ch, i, i + 1)


def iter_lexemes(source: str) -> Iterator[Lexeme]:
    """Yield every lexeme up to and excluding end of input."""
    pos = 0
    while True:
        lexeme = next_lexeme(source, pos)
        if lexeme.kind == EOF:
            return
        yield lexeme
        pos = lexeme.end


def describe(lexeme: Lexeme) -> str:
    if lexeme.kind == EOF:
        return "EOF"
    if lexeme.kind in (INT, FLOAT):
        return repr(lexeme.value)
    if lexeme.kind == STRING:
        return f"string '{lexeme.text}'"
    if lexeme.kind == UNTERMINATED:
        return f"unterminated string ({lexeme.text})"
    return f"'{lexeme.text}'"
