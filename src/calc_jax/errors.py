"""Structured error types for lexing, parsing and evaluation."""

from __future__ import annotations


class CalcError(Exception):
    """Base class for structured calc-jax errors."""

    @property
    def span(self) -> tuple[int, int] | None:
        """Inclusive ``(start, end)`` character offsets into the source, if known."""
        return None


class InvalidCharacterError(CalcError):
    def __init__(self, char: str, position: int) -> None:
        super().__init__(char, position)
        self.char = char
        self.position = position

    @property
    def span(self) -> tuple[int, int]:
        return (self.position, self.position)

    def __str__(self) -> str:
        return f"Invalid character `{self.char}` found!"


class UnexpectedTokenError(CalcError):
    def __init__(self, token: str, start: int, end: int) -> None:
        super().__init__(token, start, end)
        self.token = token
        self.start = start
        self.end = end

    @property
    def span(self) -> tuple[int, int]:
        return (self.start, self.end)

    def __str__(self) -> str:
        return f"Unexpected token `{self.token}` found!"


class UnexpectedEndOfInputError(CalcError):
    """The parser needed another token but the input was exhausted."""

    def __str__(self) -> str:
        return "Unexpected end of input!"


class VariableNotFoundError(CalcError):
    def __init__(self, name: str, start: int, end: int) -> None:
        super().__init__(name, start, end)
        self.name = name
        self.start = start
        self.end = end

    @property
    def span(self) -> tuple[int, int]:
        return (self.start, self.end)

    def __str__(self) -> str:
        return f"Variable `{self.name}` not found!"


class CalcRuntimeError(CalcError):
    """Arithmetic domain failure or an error reported by a native function."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class FatalError(CalcError):
    """A state the grammar should make unreachable."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message
