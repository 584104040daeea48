"""Format validators and the process-wide format registry.

A format validator is a named predicate ``is_format(value) -> bool``. Schema
validation consults them for ``"format": "<name>"`` keywords.

Built-in formats:
- date_time: time, time with offset, date, RFC3339, RFC3339 with
  nanoseconds, or ISO8601 with milliseconds (tried in that order)
- iso_8601_date: exactly YYYY-MM-DD and a real calendar date
- strong_name: starts with a letter, then letters, digits, '_' or '-'
- text_match / text_match_with_number: letters, '_' and spaces; the latter
  also allows the digits 1-9 (zero is not allowed)
- json_number: JsonNumber literals only, not decoded ints or floats
- decimal / decimal_by_factor_of_8: finite Decimal values; the latter with
  at most 8 fractional digits
- empty_string: exactly ""
- string: any str

FormatRegistry wraps a single ``jsonschema.FormatChecker`` shared by the
whole process. Format names therefore form one namespace: registering a
different predicate under an existing name replaces it for every
SchemaValidator. Register formats once at startup.
"""

import logging
import re
import threading
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Protocol

from jsonschema import FormatChecker

from ruleforge.validation import timefmt
from ruleforge.validation.numbers import JsonNumber

logger = logging.getLogger(__name__)


class FormatValidator(Protocol):
    """A named format predicate."""

    name: str

    def is_format(self, value: Any) -> bool:
        ...


@dataclass(frozen=True)
class FunctionFormat:
    """FormatValidator backed by a plain function."""

    name: str
    func: Callable[[Any], bool]

    def is_format(self, value: Any) -> bool:
        return bool(self.func(value))


# =============================================================================
# Built-in Checkers
# =============================================================================

STRONG_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")
TEXT_MATCH_PATTERN = re.compile(r"^[a-zA-Z_ ]*$")
# Digit 0 is excluded on purpose; existing data depends on it
TEXT_MATCH_WITH_NUMBER_PATTERN = re.compile(r"^[a-zA-Z1-9_ ]*$")

_DATE_TIME_PARSERS = (
    timefmt.parse_time,
    timefmt.parse_time_with_offset,
    timefmt.parse_date,
    timefmt.parse_rfc3339,
    timefmt.parse_rfc3339_nano,
    timefmt.parse_iso8601_millis,
)


def is_date_time(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    for parse in _DATE_TIME_PARSERS:
        try:
            parse(value)
        except ValueError:
            continue
        return True
    return False


def is_iso_8601_date(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        timefmt.parse_date(value)
    except ValueError:
        return False
    return True


def is_strong_name(value: Any) -> bool:
    return isinstance(value, str) and bool(STRONG_NAME_PATTERN.fullmatch(value))


def is_text_match(value: Any) -> bool:
    return isinstance(value, str) and bool(TEXT_MATCH_PATTERN.fullmatch(value))


def is_text_match_with_number(value: Any) -> bool:
    return isinstance(value, str) and bool(TEXT_MATCH_WITH_NUMBER_PATTERN.fullmatch(value))


def is_json_number(value: Any) -> bool:
    return isinstance(value, JsonNumber)


def is_decimal(value: Any) -> bool:
    return isinstance(value, Decimal) and value.is_finite()


def is_decimal_by_factor_of_8(value: Any) -> bool:
    if not is_decimal(value):
        return False
    exponent = value.as_tuple().exponent
    return exponent >= -8


def is_empty_string(value: Any) -> bool:
    return isinstance(value, str) and value == ""


def is_string(value: Any) -> bool:
    return isinstance(value, str)


BUILTIN_FORMATS: dict[str, FormatValidator] = {
    name: FunctionFormat(name, func)
    for name, func in (
        ("date_time", is_date_time),
        ("iso_8601_date", is_iso_8601_date),
        ("text_match", is_text_match),
        ("text_match_with_number", is_text_match_with_number),
        ("strong_name", is_strong_name),
        ("json_number", is_json_number),
        ("decimal", is_decimal),
        ("decimal_by_factor_of_8", is_decimal_by_factor_of_8),
        ("empty_string", is_empty_string),
        ("string", is_string),
    )
}


# =============================================================================
# Format Registry
# =============================================================================


class FormatRegistry:
    """Process-wide registry of format validators.

    Holds the ``jsonschema.FormatChecker`` that schema validation uses.
    Besides the formats registered here, the checker keeps the jsonschema
    built-ins (email, ipv4, ...).

    Example:
        registry = FormatRegistry.default()
        registry.register(FunctionFormat("sku", lambda v: str(v).startswith("SKU-")))
    """

    _default: "FormatRegistry | None" = None
    _default_lock = threading.Lock()

    def __init__(self):
        self._lock = threading.Lock()
        self._validators: dict[str, FormatValidator] = {}
        self.checker = FormatChecker()

    @classmethod
    def default(cls) -> "FormatRegistry":
        """Return the process-wide registry, creating it on first use."""
        if cls._default is None:
            with cls._default_lock:
                if cls._default is None:
                    cls._default = cls()
        return cls._default

    @classmethod
    def reset_default(cls) -> None:
        """Drop the process-wide registry. Primarily for testing."""
        with cls._default_lock:
            cls._default = None

    def register(self, validator: FormatValidator) -> None:
        """Register ``validator`` under its name, replacing any previous one."""
        with self._lock:
            previous = self._validators.get(validator.name)
            if previous is not None and previous != validator:
                logger.warning(
                    "Format '%s' re-registered; the previous validator is replaced process-wide",
                    validator.name,
                )
            self._validators[validator.name] = validator
            self.checker.checks(validator.name)(validator.is_format)
        logger.debug("Registered format '%s'", validator.name)

    def get(self, name: str) -> FormatValidator | None:
        return self._validators.get(name)

    def is_registered(self, name: str) -> bool:
        return name in self._validators

    def list_registered(self) -> list[str]:
        return sorted(self._validators)

    def conforms(self, value: Any, name: str) -> bool:
        """Check ``value`` against a format known to the checker.

        Unknown formats conform, matching JSON Schema semantics.
        """
        return self.checker.conforms(value, name)
