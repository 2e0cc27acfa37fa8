"""Numeric value objects.

Arithmetic accepts bare numbers or other numeric value objects and
returns a new instance of the receiver's class, so the result is checked
against the same constraints:

    price = PositiveNumberValue.create(10)
    price.multiply(1.2).round(2)     # PositiveNumberValue(value=12.0)
    price.subtract(20)               # ValidationError: must be > 0
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import FiniteFloat, StrictInt

from domainkit.core.errors import DomainError
from domainkit.value_objects.base import PrimitiveValue
from domainkit.value_objects.primitives import (
    IntegerNumber,
    NonNegativeNumber,
    PercentageNumber,
    PositiveNumber,
)


def _raw(other: Any) -> Any:
    return other.value if isinstance(other, PrimitiveValue) else other


def _scaled(value: float, decimals: int, rounding: Any) -> int | float:
    if decimals == 0:
        return int(rounding(value))
    factor = 10**decimals
    return rounding(value * factor) / factor


def _half_up(value: float) -> int:
    return math.floor(value + 0.5)


class NumberValue(PrimitiveValue):
    """Immutable finite number with arithmetic and formatting."""

    value: StrictInt | FiniteFloat

    # --- arithmetic ---
    def add(self, other: Any) -> Any:
        return self._derive(self.value + _raw(other))

    def subtract(self, other: Any) -> Any:
        return self._derive(self.value - _raw(other))

    def multiply(self, factor: Any) -> Any:
        return self._derive(self.value * _raw(factor))

    def divide(self, divisor: Any) -> Any:
        """Raises DomainError when ``divisor`` is zero."""
        divisor = _raw(divisor)
        if divisor == 0:
            raise DomainError(
                "Cannot divide by zero", context={"object_type": type(self).__name__}
            )
        return self._derive(self.value / divisor)

    def increment(self, amount: Any = 1) -> Any:
        return self.add(amount)

    def decrement(self, amount: Any = 1) -> Any:
        return self.subtract(amount)

    def abs(self) -> Any:
        return self._derive(abs(self.value))

    def pow(self, exponent: Any) -> Any:
        result = self.value ** _raw(exponent)
        if isinstance(result, complex):
            raise DomainError(
                f"{self.value} ** {_raw(exponent)} has no real result",
                context={"object_type": type(self).__name__},
            )
        return self._derive(result)

    def sqrt(self) -> Any:
        """Raises DomainError for negative values."""
        if self.value < 0:
            raise DomainError(
                "Cannot calculate square root of negative number",
                context={"object_type": type(self).__name__},
            )
        return self._derive(math.sqrt(self.value))

    # --- rounding (halves round up, towards +inf) ---
    def round(self, decimals: int = 0) -> Any:
        return self._derive(_scaled(self.value, decimals, _half_up))

    def floor(self, decimals: int = 0) -> Any:
        return self._derive(_scaled(self.value, decimals, math.floor))

    def ceil(self, decimals: int = 0) -> Any:
        return self._derive(_scaled(self.value, decimals, math.ceil))

    # --- queries ---
    def is_zero(self) -> bool:
        return self.value == 0

    def is_positive(self) -> bool:
        return self.value > 0

    def is_negative(self) -> bool:
        return self.value < 0

    def is_integer(self) -> bool:
        return isinstance(self.value, int) or float(self.value).is_integer()

    # --- formatting ---
    def format(self, spec: str = ",") -> str:
        """Format with a ``format()`` spec, thousands separators by default."""
        return format(self.value, spec)

    def to_percentage(self, decimals: int = 0) -> str:
        return f"{self.value * 100:.{decimals}f}%"

    def __format__(self, spec: str) -> str:
        return format(self.value, spec)

    def __float__(self) -> float:
        return float(self.value)


class PositiveNumberValue(NumberValue):
    value: PositiveNumber


class NonNegativeNumberValue(NumberValue):
    value: NonNegativeNumber


class IntegerNumberValue(NumberValue):
    value: IntegerNumber


class PercentageNumberValue(NumberValue):
    """Fraction between 0 and 1; ``0.25`` formats as ``25%``."""

    value: PercentageNumber
