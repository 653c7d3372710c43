"""Forward-only cursor over a lexed token sequence."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .errors import UnexpectedEndOfInputError, UnexpectedTokenError
from .lexer import AddOperator, ExpOperator, MulOperator, Token


@dataclass
class Cursor:
    """Read pointer over tokens terminated by an ``EOF`` token.

    The pointer only moves forward; it never advances past the final ``EOF``.
    The ``try_take_*`` helpers consume a token only when its category matches,
    which is how the grammar expresses optional repetition.
    """

    tokens: Sequence[Token]
    index: int = 0

    def __post_init__(self) -> None:
        if not self.tokens or self.tokens[-1].kind != "EOF":
            raise ValueError("token sequence must end with an EOF token")

    @property
    def at_end(self) -> bool:
        return self.current().kind == "EOF"

    def current(self) -> Token:
        return self.tokens[self.index]

    def next(self) -> Token:
        return self.tokens[min(self.index + 1, len(self.tokens) - 1)]

    def consume(self) -> Token:
        tok = self.tokens[self.index]
        if self.index < len(self.tokens) - 1:
            self.index += 1
        return tok

    def expect(self, kind: str) -> Token:
        tok = self.current()
        if tok.kind == kind:
            return self.consume()
        if tok.kind == "EOF":
            raise UnexpectedEndOfInputError()
        raise UnexpectedTokenError(tok.text, tok.start, tok.end)

    def _try_take(self, kind: str):
        if self.current().kind != kind:
            return None
        return self.consume().value

    def try_take_add_op(self) -> AddOperator | None:
        return self._try_take("ADD_OP")

    def try_take_mul_op(self) -> MulOperator | None:
        return self._try_take("MUL_OP")

    def try_take_exp_op(self) -> ExpOperator | None:
        return self._try_take("EXP_OP")
