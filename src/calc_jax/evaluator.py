"""Recursive-descent evaluator for arithmetic expressions on top of JAX."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Callable, Final

import jax
import jax.numpy as jnp

from .cursor import Cursor
from .environment import Constant, CustomFunction, Environment, UnaryFunction
from .errors import CalcError, CalcRuntimeError, FatalError, UnexpectedEndOfInputError, UnexpectedTokenError, VariableNotFoundError
from .handlers import ArgumentSource
from .lexer import AddOperator, ExpOperator, MulOperator, Token, tokenize
from .values import as_scalar, to_float

logger = logging.getLogger(__name__)

_USE_JITTED_OPS: Final[bool] = os.environ.get("CALC_JAX_DISABLE_JITTED_OPS", "0") != "1"
_TOKEN_CACHE_MAX: Final[int] = max(1, int(os.environ.get("CALC_JAX_TOKEN_CACHE_MAX", "256")))

_DIVISION_BY_ZERO: Final[str] = "division by zero"


@lru_cache(maxsize=_TOKEN_CACHE_MAX)
def _tokenize_cached(source: str) -> tuple[Token, ...]:
    return tokenize(source)


_BASE_BINARY_OPS: Final[dict[object, Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]]] = {
    AddOperator.ADD: lambda l, r: l + r,
    AddOperator.SUB: lambda l, r: l - r,
    MulOperator.MUL: lambda l, r: l * r,
    MulOperator.DIV: lambda l, r: l / r,
    MulOperator.MOD: lambda l, r: jnp.fmod(l, r),
    ExpOperator.POWER: lambda l, r: jnp.power(l, r),
    ExpOperator.ROOT: lambda l, r: jnp.power(l, 1.0 / r),
}

# Operators whose right operand must be checked for zero before applying.
_ZERO_GUARDED: Final[frozenset[object]] = frozenset({MulOperator.DIV, MulOperator.MOD, ExpOperator.ROOT})

_JITTED_BINARY_OPS: dict[object, Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]] = {}


def _jitted_binary_kernel(op: object) -> Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]:
    fn = _JITTED_BINARY_OPS.get(op)
    if fn is None:
        fn = jax.jit(_BASE_BINARY_OPS[op])
        _JITTED_BINARY_OPS[op] = fn
    return fn


def _apply_binary(op: object, left: jnp.ndarray, right: jnp.ndarray) -> jnp.ndarray:
    if op in _ZERO_GUARDED and float(right) == 0.0:
        raise CalcRuntimeError(_DIVISION_BY_ZERO)
    if _USE_JITTED_OPS:
        return _jitted_binary_kernel(op)(left, right)
    return _BASE_BINARY_OPS[op](left, right)


@dataclass
class Evaluator(ArgumentSource):
    """Parses one statement from ``cursor`` and evaluates it against ``env``.

    The evaluator is also the :class:`ArgumentSource` handed to custom
    functions: ``get_next_operand`` parses a single ``atomic``.
    """

    cursor: Cursor
    env: Environment

    def evaluate(self) -> float:
        if self.cursor.at_end:
            raise UnexpectedEndOfInputError()
        result = to_float(self._evaluate_statement())
        self.cursor.expect("EOF")
        return self.env.set_last_result(result)

    def get_next_operand(self) -> float:
        return to_float(self._evaluate_atomic())

    def _evaluate_statement(self) -> jnp.ndarray:
        if self.cursor.current().kind == "LET":
            return self._evaluate_assignment()
        return self._evaluate_additive()

    def _evaluate_assignment(self) -> jnp.ndarray:
        self.cursor.expect("LET")
        name = self.cursor.expect("IDENT").text
        self.cursor.expect("EQUALS")
        value = self._evaluate_statement()
        return as_scalar(self.env.assign_constant(name, value))

    def _evaluate_additive(self) -> jnp.ndarray:
        left = self._evaluate_multiplicative()
        while (op := self.cursor.try_take_add_op()) is not None:
            right = self._evaluate_multiplicative()
            left = _apply_binary(op, left, right)
        return left

    def _evaluate_multiplicative(self) -> jnp.ndarray:
        left = self._evaluate_exponential()
        while (op := self.cursor.try_take_mul_op()) is not None:
            right = self._evaluate_exponential()
            left = _apply_binary(op, left, right)
        return left

    def _evaluate_exponential(self) -> jnp.ndarray:
        # Chains fold left to right: 2 ** 3 ** 2 == (2 ** 3) ** 2.
        left = self._evaluate_atomic()
        while (op := self.cursor.try_take_exp_op()) is not None:
            right = self._evaluate_atomic()
            left = _apply_binary(op, left, right)
        return left

    def _evaluate_atomic(self) -> jnp.ndarray:
        tok = self.cursor.consume()
        kind = tok.kind

        if kind == "NUMBER":
            if not isinstance(tok.value, float):
                raise FatalError("Cannot parse number!")
            return as_scalar(tok.value)

        if kind == "IDENT":
            return self._evaluate_name(tok)

        if kind == "LAST_RESULT":
            last = self.env.get_last_result()
            if last is None:
                raise VariableNotFoundError(tok.text, tok.start, tok.end)
            return as_scalar(last)

        if kind == "ADD_OP":
            operand = self._evaluate_atomic()
            if tok.value == AddOperator.SUB:
                return -operand
            return operand

        if kind == "LPAREN":
            value = self._evaluate_additive()
            self.cursor.expect("RPAREN")
            return value

        if kind == "EOF":
            raise UnexpectedEndOfInputError()

        raise UnexpectedTokenError(tok.text, tok.start, tok.end)

    def _evaluate_name(self, tok: Token) -> jnp.ndarray:
        var = self.env.get(tok.text)
        if var is None:
            raise VariableNotFoundError(tok.text, tok.start, tok.end)
        if isinstance(var, Constant):
            return as_scalar(var.value)
        if isinstance(var, UnaryFunction):
            return as_scalar(var.fn(self._evaluate_atomic()))
        if isinstance(var, CustomFunction):
            return as_scalar(var.handler.invoke(self))
        raise FatalError(f"Unknown binding type {type(var).__name__} for `{tok.text}`")


def evaluate_tokens(tokens: tuple[Token, ...] | list[Token], env: Environment) -> float:
    """Evaluate an already-lexed token sequence."""
    return Evaluator(Cursor(tokens), env).evaluate()


def evaluate(source: str, env: Environment) -> float:
    """Tokenize, parse and evaluate one line of input.

    On success the result is stored as ``env``'s last result. Any
    :class:`CalcError` aborts the whole evaluation and leaves the last result
    untouched.
    """
    try:
        return evaluate_tokens(_tokenize_cached(source), env)
    except CalcError as exc:
        logger.debug("evaluation of %r failed: %s", source, exc)
        raise


@dataclass
class Calculator:
    """Callable wrapper that evaluates source in a persistent environment."""

    env: Environment = field(default_factory=Environment)

    def __post_init__(self) -> None:
        if self.env is None:
            self.env = Environment()

    def __call__(self, source: str) -> float:
        return self.calculate(source)

    def calculate(self, source: str) -> float:
        return evaluate(source, self.env)

    def init_builtins(self) -> None:
        self.env.init_builtins()

    def add_constant(self, name: str, value: float) -> float:
        return self.env.assign_constant(name, value)

    def add_function(self, name: str, fn: Callable[..., object], arity: int | None = None) -> None:
        """Register ``fn``; this replaces any binding of ``name`` without warning."""
        self.env.register_function(name, fn, arity)

    @property
    def last_result(self) -> float | None:
        return self.env.get_last_result()
