"""Scalar value model: every number the calculator handles is a float32."""

from __future__ import annotations

import numbers

import jax.numpy as jnp

DTYPE = jnp.float32


def is_number(value: object) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, numbers.Real):
        return True
    if isinstance(value, jnp.ndarray) and value.ndim == 0:
        return bool(jnp.issubdtype(value.dtype, jnp.floating) or jnp.issubdtype(value.dtype, jnp.integer))
    return False


def as_scalar(value: object) -> jnp.ndarray:
    """Return ``value`` as a 0-d float32 JAX array."""
    if isinstance(value, jnp.ndarray) and value.dtype == DTYPE:
        return value
    return jnp.asarray(value, dtype=DTYPE)


def to_float(value: object) -> float:
    """Round ``value`` to float32 precision and return it as a Python float."""
    return float(as_scalar(value))


def validate_number(value: object, *, where: str = "value") -> float:
    if not is_number(value):
        raise TypeError(f"{where} has unsupported runtime type {type(value).__name__}")
    return to_float(value)
