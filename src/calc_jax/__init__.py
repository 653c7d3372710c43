"""calc-jax public API."""

from .cursor import Cursor
from .errors import (
    CalcError,
    CalcRuntimeError,
    FatalError,
    InvalidCharacterError,
    UnexpectedEndOfInputError,
    UnexpectedTokenError,
    VariableNotFoundError,
)
from .lexer import AddOperator, ExpOperator, MulOperator, Token, tokenize
from .handlers import ArgumentSource, Handler1, Handler2, Handler3, NativeHandler, make_handler
from .environment import Constant, CustomFunction, Environment, UnaryFunction, Variable
from .evaluator import Calculator, Evaluator, evaluate, evaluate_tokens

__all__ = [
    "tokenize",
    "Token",
    "AddOperator",
    "MulOperator",
    "ExpOperator",
    "Cursor",
    "evaluate",
    "evaluate_tokens",
    "Evaluator",
    "Calculator",
    "Environment",
    "Variable",
    "Constant",
    "UnaryFunction",
    "CustomFunction",
    "ArgumentSource",
    "NativeHandler",
    "Handler1",
    "Handler2",
    "Handler3",
    "make_handler",
    "CalcError",
    "InvalidCharacterError",
    "UnexpectedTokenError",
    "UnexpectedEndOfInputError",
    "VariableNotFoundError",
    "CalcRuntimeError",
    "FatalError",
]
