"""Native function handlers and the pull-based argument source they read from.

The grammar has no call syntax and no notion of arity: when the evaluator meets
a custom function name it hands itself to the function's handler, and the
handler pulls exactly as many operands as the wrapped Python callable takes.
Each operand is one full ``atomic`` parse, so ``double 4 + 2`` is
``double(4) + 2``.

Host callables receive Python floats and may

* return a real number,
* return a :class:`~calc_jax.errors.CalcError` instance, which is raised, or
* raise a :class:`~calc_jax.errors.CalcError` directly; `ArithmeticError` and
  `ValueError` from the callable surface as `CalcRuntimeError`.

The arity is resolved once, by :func:`make_handler`, when the function is
registered.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Callable, ClassVar, Protocol, runtime_checkable

from .errors import CalcError, CalcRuntimeError, FatalError
from .values import is_number, to_float

MAX_ARITY = 3


@runtime_checkable
class ArgumentSource(Protocol):
    def get_next_operand(self) -> float:
        """Parse the next atomic expression and return its value."""
        ...


def _into_result(result: object, name: str) -> float:
    if isinstance(result, CalcError):
        raise result
    if not is_number(result):
        raise FatalError(f"Function `{name}` returned a non-numeric value!")
    return to_float(result)


def _callable_name(fn: Callable[..., object]) -> str:
    return getattr(fn, "__name__", type(fn).__name__)


@dataclass(frozen=True)
class NativeHandler:
    fn: Callable[..., object]
    arity: ClassVar[int] = 0

    @property
    def name(self) -> str:
        return _callable_name(self.fn)

    def invoke(self, source: ArgumentSource) -> float:
        args = [source.get_next_operand() for _ in range(self.arity)]
        try:
            result = self.fn(*args)
        except (ArithmeticError, ValueError) as exc:
            raise CalcRuntimeError(str(exc)) from exc
        return _into_result(result, self.name)


@dataclass(frozen=True)
class Handler1(NativeHandler):
    arity: ClassVar[int] = 1


@dataclass(frozen=True)
class Handler2(NativeHandler):
    arity: ClassVar[int] = 2


@dataclass(frozen=True)
class Handler3(NativeHandler):
    arity: ClassVar[int] = 3


_HANDLERS_BY_ARITY: dict[int, type[NativeHandler]] = {
    1: Handler1,
    2: Handler2,
    3: Handler3,
}


def infer_arity(fn: Callable[..., object]) -> int:
    """Count the positional parameters ``fn`` requires."""
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError) as exc:
        raise TypeError(f"cannot infer arity of {_callable_name(fn)!r}; pass arity= explicitly") from exc

    positional = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    required = 0
    for param in signature.parameters.values():
        if param.kind == inspect.Parameter.VAR_POSITIONAL:
            raise TypeError(f"{_callable_name(fn)!r} takes *args; pass arity= explicitly")
        if param.kind in positional and param.default is inspect.Parameter.empty:
            required += 1
        elif param.kind == inspect.Parameter.KEYWORD_ONLY and param.default is inspect.Parameter.empty:
            raise TypeError(f"{_callable_name(fn)!r} has required keyword-only parameter {param.name!r}")
    return required


def make_handler(fn: Callable[..., object], arity: int | None = None) -> NativeHandler:
    if isinstance(fn, NativeHandler):
        if arity is not None and arity != fn.arity:
            raise ValueError(f"handler has arity {fn.arity}, not {arity}")
        return fn
    if not callable(fn):
        raise TypeError(f"native function must be callable, got {type(fn).__name__}")

    resolved = infer_arity(fn) if arity is None else arity
    handler_cls = _HANDLERS_BY_ARITY.get(resolved)
    if handler_cls is None:
        raise ValueError(f"native functions take 1 to {MAX_ARITY} operands, got {resolved}")
    return handler_cls(fn)
