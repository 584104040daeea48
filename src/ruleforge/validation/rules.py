"""Built-in validation rules.

Each rule checks one concern and returns a field-agnostic failure; the
caller attaches field context. Rules are immutable after construction:

- RequiredRule: value must be present and non-empty
- MinLengthRule / MaxLengthRule: string length bounds (code points)
- PatternRule: regular expression search
- EmailRule / URLRule / UUIDRule: standard-parser format checks
- MinValueRule / MaxValueRule: numeric bounds
- DateTimeFormatRule: date/time layout check
- CustomRule: wraps a caller-supplied function
- CompositeRule: ordered, fail-fast combination of rules
"""

import re
import uuid
from email.utils import parseaddr
from typing import Any, Callable
from urllib.parse import urlparse

from ruleforge.validation.numbers import compare, format_bound, to_numeric
from ruleforge.validation.timefmt import parse_layout
from ruleforge.validation.types import (
    Rule,
    ValidationContext,
    ValidationError,
    type_error,
)

RuleFunc = Callable[[ValidationContext | None, Any], ValidationError | None]


# =============================================================================
# Format Patterns
# =============================================================================

# Email: Basic RFC 5322 compliant pattern
EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
)

URL_SCHEMES = frozenset({"http", "https", "ftp", "ftps", "ws", "wss"})


class BaseRule:
    """Base class holding the immutable name and message of a rule."""

    __slots__ = ("name", "message")

    def __init__(self, name: str, message: str):
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "message", message)

    def __setattr__(self, key: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def fail(self, value: Any, code: str | None = None, message: str | None = None) -> ValidationError:
        return ValidationError(
            message=message or self.message,
            code=code or self.name,
            value=value,
        )

    def validate(self, ctx: ValidationContext | None, value: Any) -> ValidationError | None:
        raise NotImplementedError("Subclasses must implement validate()")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


def _set(rule: BaseRule, **attrs: Any) -> None:
    for key, value in attrs.items():
        object.__setattr__(rule, key, value)


def is_empty(value: Any) -> bool:
    """Check if a value is considered empty for the required check."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, set, frozenset, dict, bytes, bytearray)):
        return len(value) == 0
    return False


# =============================================================================
# Presence
# =============================================================================


class RequiredRule(BaseRule):
    """Fails for None, blank strings and empty collections. Zero is present."""

    __slots__ = ()

    def __init__(self):
        super().__init__("required", "value is required")

    def validate(self, ctx, value):
        if is_empty(value):
            return self.fail(value)
        return None


# =============================================================================
# String Rules
# =============================================================================


class MinLengthRule(BaseRule):
    __slots__ = ("min",)

    def __init__(self, min: int):
        super().__init__("min_length", f"minimum length is {min} characters")
        _set(self, min=min)

    def validate(self, ctx, value):
        if not isinstance(value, str):
            return type_error("a string", value)
        if len(value) < self.min:
            return self.fail(value)
        return None


class MaxLengthRule(BaseRule):
    __slots__ = ("max",)

    def __init__(self, max: int):
        super().__init__("max_length", f"maximum length is {max} characters")
        _set(self, max=max)

    def validate(self, ctx, value):
        if not isinstance(value, str):
            return type_error("a string", value)
        if len(value) > self.max:
            return self.fail(value)
        return None


class PatternRule(BaseRule):
    """Searches the value with a regular expression.

    A pattern that does not compile is kept and the rule fails every value
    with "invalid pattern: ...", so the misconfiguration shows up at
    validation time instead of at construction.
    """

    __slots__ = ("pattern", "regex")

    def __init__(self, pattern: str):
        super().__init__("pattern", f"value does not match pattern {pattern}")
        try:
            regex = re.compile(pattern)
        except re.error:
            regex = None
        _set(self, pattern=pattern, regex=regex)

    def validate(self, ctx, value):
        if self.regex is None:
            return self.fail(value, code="invalid_pattern", message=f"invalid pattern: {self.pattern}")
        if not isinstance(value, str):
            return type_error("a string", value)
        if not self.regex.search(value):
            return self.fail(value)
        return None


class EmailRule(BaseRule):
    __slots__ = ()

    def __init__(self):
        super().__init__("email", "invalid email format")

    def validate(self, ctx, value):
        if not isinstance(value, str):
            return type_error("a string", value)
        _, address = parseaddr(value)
        if not address or address != value or not EMAIL_PATTERN.fullmatch(address):
            return self.fail(value)
        return None


class URLRule(BaseRule):
    __slots__ = ()

    def __init__(self):
        super().__init__("url", "invalid URL format")

    def validate(self, ctx, value):
        if not isinstance(value, str):
            return type_error("a string", value)
        try:
            parsed = urlparse(value)
        except ValueError:
            return self.fail(value)
        if parsed.scheme.lower() not in URL_SCHEMES or not parsed.netloc or any(c.isspace() for c in value):
            return self.fail(value)
        return None


class UUIDRule(BaseRule):
    """Accepts anything ``uuid.UUID`` parses, including the hyphenless form."""

    __slots__ = ()

    def __init__(self):
        super().__init__("uuid", "invalid UUID format")

    def validate(self, ctx, value):
        if not isinstance(value, str):
            return type_error("a string", value)
        try:
            uuid.UUID(value)
        except ValueError:
            return self.fail(value)
        return None


# =============================================================================
# Numeric Rules
# =============================================================================


class MinValueRule(BaseRule):
    __slots__ = ("min", "exclusive", "_bound")

    def __init__(self, min: int | float | Any, exclusive: bool = False):
        bound = to_numeric(min)
        if bound is None:
            raise ValueError(f"minimum must be numeric, got {min!r}")
        if exclusive:
            message = f"value must be greater than {format_bound(bound)}"
        else:
            message = f"minimum value is {format_bound(bound)}"
        super().__init__("min_value", message)
        _set(self, min=min, exclusive=exclusive, _bound=bound)

    def validate(self, ctx, value):
        number = to_numeric(value)
        if number is None:
            return type_error("numeric", value)
        cmp = compare(number, self._bound)
        if cmp < 0 or (self.exclusive and cmp == 0):
            return self.fail(value)
        return None


class MaxValueRule(BaseRule):
    __slots__ = ("max", "exclusive", "_bound")

    def __init__(self, max: int | float | Any, exclusive: bool = False):
        bound = to_numeric(max)
        if bound is None:
            raise ValueError(f"maximum must be numeric, got {max!r}")
        if exclusive:
            message = f"value must be less than {format_bound(bound)}"
        else:
            message = f"maximum value is {format_bound(bound)}"
        super().__init__("max_value", message)
        _set(self, max=max, exclusive=exclusive, _bound=bound)

    def validate(self, ctx, value):
        number = to_numeric(value)
        if number is None:
            return type_error("numeric", value)
        cmp = compare(number, self._bound)
        if cmp > 0 or (self.exclusive and cmp == 0):
            return self.fail(value)
        return None


# =============================================================================
# Date/Time Rules
# =============================================================================


class DateTimeFormatRule(BaseRule):
    """Parses the value against a single layout (see ``timefmt``)."""

    __slots__ = ("format",)

    def __init__(self, format: str):
        super().__init__("datetime_format", f"invalid format, expected: {format}")
        _set(self, format=format)

    def validate(self, ctx, value):
        if not isinstance(value, str):
            return type_error("a string", value)
        try:
            parse_layout(value, self.format)
        except ValueError:
            return self.fail(value)
        return None


# =============================================================================
# Custom and Composite Rules
# =============================================================================


class CustomRule(BaseRule):
    """Delegates to ``func(ctx, value)``, which returns None or a failure."""

    __slots__ = ("func",)

    def __init__(self, name: str, message: str, func: RuleFunc):
        super().__init__(name, message)
        _set(self, func=func)

    def validate(self, ctx, value):
        return self.func(ctx, value)


class CompositeRule(BaseRule):
    """Runs rules in declaration order and returns the first failure."""

    __slots__ = ("rules",)

    def __init__(self, *rules: Rule):
        super().__init__("composite", "composite validation failed")
        _set(self, rules=tuple(rules))

    def validate(self, ctx, value):
        for rule in self.rules:
            error = rule.validate(ctx, value)
            if error is not None:
                return error
        return None

    def __len__(self) -> int:
        return len(self.rules)


def always_pass() -> CustomRule:
    return CustomRule("empty", "no validation rules", lambda ctx, value: None)
