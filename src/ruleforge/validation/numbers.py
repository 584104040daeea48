"""Numeric values for range rules.

Inputs arrive as ints of any width, floats, Decimals or numeric strings.
Instead of squashing all of them into a float, they are tagged:

- IntegerValue: exact, unbounded Python int
- FloatValue: IEEE-754 double
- DecimalValue: exact decimal (numeric strings and Decimal inputs)

Comparisons between any pair are exact. Python compares int/float and
Decimal/float by their true mathematical value, and int/Decimal is exact,
so no pair silently loses precision. The one documented approximation is
``is_integral`` on a FloatValue: floats above 2**53 cannot carry a
fractional part, so every such float reports as integral.
"""

import json
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Union

FLOAT_EXACT_LIMIT = 2**53


@dataclass(frozen=True)
class IntegerValue:
    value: int

    def is_integral(self) -> bool:
        return True

    def fractional_digits(self) -> int:
        return 0


@dataclass(frozen=True)
class FloatValue:
    value: float

    def is_integral(self) -> bool:
        return self.value.is_integer()

    def fractional_digits(self) -> int:
        # repr gives the shortest round-tripping form, e.g. 0.1 -> "0.1"
        return _fractional_digits(Decimal(repr(self.value)))


@dataclass(frozen=True)
class DecimalValue:
    value: Decimal

    def is_integral(self) -> bool:
        return self.value == self.value.to_integral_value()

    def fractional_digits(self) -> int:
        return _fractional_digits(self.value)


NumericValue = Union[IntegerValue, FloatValue, DecimalValue]


class JsonNumber(Decimal):
    """A numeric literal exactly as it appeared in JSON text.

    Produced when decoding with ``loads_tagged``. Being a Decimal, it
    compares and orders like any number, but format checkers can tell it
    apart from an int or float decoded natively.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return f"JsonNumber('{self}')"


def loads_tagged(text: str | bytes) -> Any:
    """Decode JSON, tagging every numeric literal as JsonNumber."""
    return json.loads(text, parse_float=JsonNumber, parse_int=JsonNumber)


def _fractional_digits(value: Decimal) -> int:
    exponent = value.as_tuple().exponent
    if not isinstance(exponent, int) or exponent >= 0:
        return 0
    return -exponent


def to_numeric(value: Any) -> NumericValue | None:
    """Tag a numeric-like value.

    Returns:
        The tagged value, or None if ``value`` is not numeric. Booleans are
        not numeric; neither are NaN or infinite values.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return IntegerValue(value)
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return FloatValue(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            return None
        return DecimalValue(value)
    if isinstance(value, str):
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation:
            return None
        if not parsed.is_finite():
            return None
        return DecimalValue(parsed)
    return None


def compare(left: NumericValue, right: NumericValue) -> int:
    """Three-way exact comparison: -1, 0 or 1."""
    a, b = left.value, right.value
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def format_bound(bound: NumericValue) -> str:
    """Render a bound for messages (``18`` rather than ``18.0``)."""
    if isinstance(bound, FloatValue) and bound.value.is_integer() and abs(bound.value) < FLOAT_EXACT_LIMIT:
        return str(int(bound.value))
    return str(bound.value)
