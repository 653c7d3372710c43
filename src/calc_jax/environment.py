"""Name bindings and last-result memory shared across evaluations."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Callable, Union

import jax.numpy as jnp

from .handlers import NativeHandler, make_handler
from .values import to_float, validate_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Constant:
    value: float


@dataclass(frozen=True)
class UnaryFunction:
    """Pure, infallible built-in applied to exactly one atomic operand."""

    fn: Callable[[jnp.ndarray], jnp.ndarray]


@dataclass(frozen=True)
class CustomFunction:
    handler: NativeHandler


Variable = Union[Constant, UnaryFunction, CustomFunction]


def _radians_to_degrees(x: jnp.ndarray) -> jnp.ndarray:
    return (x * 180.0) / jnp.pi


def _degrees_to_radians(x: jnp.ndarray) -> jnp.ndarray:
    return (x * jnp.pi) / 180.0


_BUILTIN_CONSTANTS: dict[str, float] = {
    "pi": math.pi,
    "e": math.e,
}

_BUILTIN_UNARY: dict[str, Callable[[jnp.ndarray], jnp.ndarray]] = {
    "sin": jnp.sin,
    "asin": jnp.arcsin,
    "cos": jnp.cos,
    "acos": jnp.arccos,
    "tan": jnp.tan,
    "atan": jnp.arctan,
    "r2d": _radians_to_degrees,
    "d2r": _degrees_to_radians,
}


class Environment(Mapping[str, Variable]):
    """Persistent namespace for repeated ``evaluate()`` calls.

    Each name maps to exactly one :data:`Variable`; assigning a name again
    replaces whatever was bound before. The mapping interface is read-only,
    use the ``assign_*``/``register_function`` methods to mutate.
    """

    def __init__(self, constants: Mapping[str, float] | None = None) -> None:
        self._bindings: dict[str, Variable] = {}
        self._last_result: float | None = None
        for name, value in (constants or {}).items():
            self.assign_constant(name, value)

    def __getitem__(self, key: str) -> Variable:
        return self._bindings[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        return f"Environment(names={sorted(self._bindings)!r}, last_result={self._last_result!r})"

    def assign_constant(self, name: str, value: float) -> float:
        stored = validate_number(value, where=f"constant {name!r}")
        self._bindings[name] = Constant(stored)
        logger.debug("bound constant %s = %r", name, stored)
        return stored

    def assign_unary(self, name: str, fn: Callable[[jnp.ndarray], jnp.ndarray]) -> None:
        self._bindings[name] = UnaryFunction(fn)
        logger.debug("bound unary function %s", name)

    def assign_function(self, name: str, handler: NativeHandler) -> None:
        if not isinstance(handler, NativeHandler):
            raise TypeError(f"expected a NativeHandler, got {type(handler).__name__}")
        self._bindings[name] = CustomFunction(handler)
        logger.debug("bound native function %s (arity %d)", name, handler.arity)

    def register_function(self, name: str, fn: Callable[..., object], arity: int | None = None) -> None:
        """Bind a host callable taking 1 to 3 floats.

        The callable's arity is resolved here, once, from ``arity`` or its
        signature.
        """
        self.assign_function(name, make_handler(fn, arity))

    def get(self, name: str, default: Variable | None = None) -> Variable | None:
        return self._bindings.get(name, default)

    def get_last_result(self) -> float | None:
        return self._last_result

    def set_last_result(self, value: float) -> float:
        self._last_result = to_float(value)
        return self._last_result

    def init_builtins(self) -> None:
        for name, value in _BUILTIN_CONSTANTS.items():
            self.assign_constant(name, value)
        for name, fn in _BUILTIN_UNARY.items():
            self.assign_unary(name, fn)
