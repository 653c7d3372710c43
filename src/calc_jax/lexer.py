"""Tokenization for single-line arithmetic expressions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import FatalError, InvalidCharacterError


class AddOperator(str, Enum):
    ADD = "+"
    SUB = "-"


class MulOperator(str, Enum):
    MUL = "*"
    DIV = "/"
    MOD = "%"


class ExpOperator(str, Enum):
    POWER = "**"
    ROOT = "//"


@dataclass(frozen=True)
class Token:
    """A lexed token; ``start`` and ``end`` are inclusive character offsets."""

    kind: str
    text: str
    start: int
    end: int
    value: float | str | Enum | None = None


_WHITESPACE = {" ", "\t", "\n", "\r"}

_SINGLE_TOKENS = {
    "(": ("LPAREN", None),
    ")": ("RPAREN", None),
    "+": ("ADD_OP", AddOperator.ADD),
    "-": ("ADD_OP", AddOperator.SUB),
    "=": ("EQUALS", None),
    "$": ("LAST_RESULT", None),
    "%": ("MUL_OP", MulOperator.MOD),
}

# `*` and `/` double up into the exponent operators.
_DOUBLED_TOKENS = {
    "*": (("EXP_OP", ExpOperator.POWER), ("MUL_OP", MulOperator.MUL)),
    "/": (("EXP_OP", ExpOperator.ROOT), ("MUL_OP", MulOperator.DIV)),
}

_KEYWORDS = {"let": "LET"}
_DIGITS = set("0123456789")


def _is_ident_start(ch: str) -> bool:
    return ch == "_" or (ch.isascii() and ch.isalpha())


def _is_ident_continue(ch: str) -> bool:
    return ch == "_" or (ch.isascii() and ch.isalnum())


def _scan_number(source: str, start: int) -> int:
    i = start
    seen_point = False
    while i < len(source):
        ch = source[i]
        if ch in _DIGITS:
            i += 1
            continue
        if ch == "." and not seen_point:
            seen_point = True
            i += 1
            continue
        break
    return i


def _parse_number_text(text: str) -> float:
    try:
        return float(text)
    except ValueError as exc:
        raise FatalError("Cannot parse number!") from exc


def tokenize(source: str) -> tuple[Token, ...]:
    tokens: list[Token] = []
    i = 0

    while i < len(source):
        ch = source[i]

        if ch in _WHITESPACE:
            i += 1
            continue

        if ch in _SINGLE_TOKENS:
            kind, value = _SINGLE_TOKENS[ch]
            tokens.append(Token(kind, ch, i, i, value))
            i += 1
            continue

        if ch in _DOUBLED_TOKENS:
            doubled, single = _DOUBLED_TOKENS[ch]
            if source.startswith(ch * 2, i):
                tokens.append(Token(doubled[0], ch * 2, i, i + 1, doubled[1]))
                i += 2
            else:
                tokens.append(Token(single[0], ch, i, i, single[1]))
                i += 1
            continue

        if ch in _DIGITS:
            end = _scan_number(source, i)
            text = source[i:end]
            tokens.append(Token("NUMBER", text, i, end - 1, _parse_number_text(text)))
            i = end
            continue

        if _is_ident_start(ch):
            start = i
            i += 1
            while i < len(source) and _is_ident_continue(source[i]):
                i += 1
            ident = source[start:i]
            if ident in _KEYWORDS:
                tokens.append(Token(_KEYWORDS[ident], ident, start, i - 1))
            else:
                tokens.append(Token("IDENT", ident, start, i - 1, ident))
            continue

        raise InvalidCharacterError(ch, i)

    tokens.append(Token("EOF", "EOF", len(source), len(source)))
    return tuple(tokens)
