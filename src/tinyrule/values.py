"""Runtime value model for rule variables and literals."""

from __future__ import annotations

import numbers
import os
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Final, Union

import jax.numpy as jnp

_INT32_SPAN = 1 << 32
_INT32_MIN = -(1 << 31)

# float32 cannot represent powers of ten past 1e38.
MAX_FRACTION_DIGITS = 38
_FLOAT_LITERAL_CACHE_MAX: Final[int] = max(1, int(os.environ.get("TINYRULE_FLOAT_LITERAL_CACHE_MAX", "1024")))


class ValueType(str, Enum):
    INT = "i"
    FLOAT = "f"
    STRING = "s"
    ARRAY = "a"


Payload = Union[int, float, str, tuple["Value", ...]]


@dataclass(frozen=True)
class Value:
    type: ValueType
    payload: Payload

    @property
    def tag(self) -> str:
        return self.type.value

    def to_python(self):
        if self.type is ValueType.ARRAY:
            return [item.to_python() for item in self.payload]
        return self.payload


def wrap_int32(value: int) -> int:
    return ((int(value) - _INT32_MIN) % _INT32_SPAN) + _INT32_MIN


def round_float32(value: float) -> float:
    return float(jnp.asarray(value, dtype=jnp.float32))


@lru_cache(maxsize=_FLOAT_LITERAL_CACHE_MAX)
def float32_from_parts(whole: int, fraction: int, digits: int, *, negative: bool = False) -> float:
    """Combine an integer part and ``fraction / 10**digits`` in float32 arithmetic."""
    result = jnp.asarray(float(whole), dtype=jnp.float32)
    if digits:
        if digits > MAX_FRACTION_DIGITS:
            fraction //= 10 ** (digits - MAX_FRACTION_DIGITS)
            digits = MAX_FRACTION_DIGITS
        numerator = jnp.asarray(float(fraction), dtype=jnp.float32)
        divisor = jnp.asarray(10.0**digits, dtype=jnp.float32)
        result = result + numerator / divisor
    if negative:
        result = -result
    return float(result)


def int_value(value: int) -> Value:
    return Value(ValueType.INT, wrap_int32(value))


def float_value(value: float) -> Value:
    return Value(ValueType.FLOAT, round_float32(value))


def string_value(value: str) -> Value:
    return Value(ValueType.STRING, str(value))


def array_value(items) -> Value:
    return Value(ValueType.ARRAY, tuple(to_value(item, where=f"array[{idx}]") for idx, item in enumerate(items)))


def to_value(obj: object, *, where: str = "value") -> Value:
    """Convert a Python or jax scalar, string, or sequence into a ``Value``."""
    if isinstance(obj, Value):
        return obj
    if isinstance(obj, bool):
        raise TypeError(f"{where} is a bool; rules have no boolean values")
    if isinstance(obj, str):
        return string_value(obj)
    if isinstance(obj, jnp.ndarray):
        if obj.ndim != 0:
            raise TypeError(f"{where} must be a scalar array, got shape {tuple(obj.shape)}")
        if jnp.issubdtype(obj.dtype, jnp.integer):
            return int_value(int(obj))
        if jnp.issubdtype(obj.dtype, jnp.floating):
            return float_value(float(obj))
        raise TypeError(f"{where} has unsupported dtype {obj.dtype}")
    if isinstance(obj, numbers.Integral):
        return int_value(int(obj))
    if isinstance(obj, numbers.Real):
        return float_value(float(obj))
    if isinstance(obj, (list, tuple)):
        return array_value(obj)
    raise TypeError(f"{where} has unsupported runtime type {type(obj).__name__}")
