"""Fluent rule builders.

Usage:
    rule = (
        RuleBuilder()
        .required()
        .string()
        .min_length(5)
        .max_length(10)
        .build()
    )
    error = rule.validate(None, "hello")

Builders are two-phase: each builder accumulates rules in its own list and
``build()`` returns a new immutable rule. A sub-builder (string, number,
date/time) takes a snapshot of the root builder's rules when it is created,
so building from it never mutates the root.

Sub-builders only expose the methods that make sense for their value kind;
``RuleBuilder().number().email()`` is an AttributeError.
"""

from typing import Any, Callable

from ruleforge.validation.numbers import to_numeric
from ruleforge.validation.rules import (
    CompositeRule,
    CustomRule,
    DateTimeFormatRule,
    EmailRule,
    MaxLengthRule,
    MaxValueRule,
    MinLengthRule,
    MinValueRule,
    PatternRule,
    RequiredRule,
    URLRule,
    UUIDRule,
    always_pass,
)
from ruleforge.validation.timefmt import ISO8601, RFC3339, parse_rfc3339
from ruleforge.validation.types import (
    ContractViolation,
    Rule,
    ValidationError,
    type_error,
)


def _combine(rules: tuple[Rule, ...] | list[Rule]) -> Rule:
    if not rules:
        return always_pass()
    if len(rules) == 1:
        return rules[0]
    return CompositeRule(*rules)


# =============================================================================
# Root Builder
# =============================================================================


class RuleBuilder:
    """Root builder: presence rules, custom rules and sub-builder entry points."""

    def __init__(self):
        self._rules: list[Rule] = []
        self.is_required = False

    def required(self) -> "RuleBuilder":
        self.is_required = True
        self._rules.append(RequiredRule())
        return self

    def optional(self) -> "RuleBuilder":
        """Mark the value optional (the default). Does not remove rules."""
        self.is_required = False
        return self

    def custom(self, rule: Rule) -> "RuleBuilder":
        self._rules.append(rule)
        return self

    def string(self) -> "StringRuleBuilder":
        return StringRuleBuilder(tuple(self._rules))

    def number(self) -> "NumberRuleBuilder":
        return NumberRuleBuilder(tuple(self._rules))

    def date_time(self) -> "DateTimeRuleBuilder":
        return DateTimeRuleBuilder(tuple(self._rules))

    def build(self) -> Rule:
        """Build the final rule.

        Returns:
            An always-passing rule when nothing was added, the single rule
            when exactly one was added, otherwise a CompositeRule.
        """
        return _combine(tuple(self._rules))


class _SubBuilder:
    def __init__(self, base: tuple[Rule, ...]):
        self._base = base
        self._rules: list[Rule] = []

    def _add(self, rule: Rule):
        self._rules.append(rule)
        return self

    def build(self) -> Rule:
        return _combine(self._base + tuple(self._rules))


# =============================================================================
# String Builder
# =============================================================================


class StringRuleBuilder(_SubBuilder):
    def min_length(self, min: int) -> "StringRuleBuilder":
        return self._add(MinLengthRule(min))

    def max_length(self, max: int) -> "StringRuleBuilder":
        return self._add(MaxLengthRule(max))

    def pattern(self, pattern: str) -> "StringRuleBuilder":
        return self._add(PatternRule(pattern))

    def email(self) -> "StringRuleBuilder":
        return self._add(EmailRule())

    def url(self) -> "StringRuleBuilder":
        return self._add(URLRule())

    def uuid(self) -> "StringRuleBuilder":
        return self._add(UUIDRule())

    def custom(self, validator: Callable[[str], ValidationError | None]) -> "StringRuleBuilder":
        def check(ctx, value):
            if not isinstance(value, str):
                return type_error("a string", value)
            return validator(value)

        return self._add(CustomRule("custom_string", "custom validation failed", check))


# =============================================================================
# Number Builder
# =============================================================================


class NumberRuleBuilder(_SubBuilder):
    def min(self, min: Any) -> "NumberRuleBuilder":
        return self._add(MinValueRule(min))

    def max(self, max: Any) -> "NumberRuleBuilder":
        return self._add(MaxValueRule(max))

    def range(self, min: Any, max: Any) -> "NumberRuleBuilder":
        self._add(MinValueRule(min))
        return self._add(MaxValueRule(max))

    def positive(self) -> "NumberRuleBuilder":
        return self._add(MinValueRule(0, exclusive=True))

    def non_negative(self) -> "NumberRuleBuilder":
        return self._add(MinValueRule(0))

    def integer(self) -> "NumberRuleBuilder":
        """Require a value without fractional part.

        Exact for ints, Decimals and numeric strings. Floats are checked with
        ``float.is_integer``; above 2**53 a float cannot hold a fraction, so
        every such float passes.
        """

        def check(ctx, value):
            number = to_numeric(value)
            if number is None:
                return type_error("numeric", value)
            if not number.is_integral():
                return ValidationError(
                    message="value must be an integer",
                    code="integer_error",
                    value=value,
                )
            return None

        return self._add(CustomRule("integer", "value must be an integer", check))

    def decimal(self, precision: int) -> "NumberRuleBuilder":
        """Allow at most ``precision`` digits after the decimal point."""
        message = f"value must have at most {precision} decimal places"

        def check(ctx, value):
            number = to_numeric(value)
            if number is None:
                return type_error("numeric", value)
            if number.fractional_digits() > precision:
                return ValidationError(message=message, code="decimal_error", value=value)
            return None

        return self._add(CustomRule("decimal", message, check))

    def custom(self, validator: Callable[[Any], ValidationError | None]) -> "NumberRuleBuilder":
        def check(ctx, value):
            number = to_numeric(value)
            if number is None:
                return type_error("numeric", value)
            return validator(number.value)

        return self._add(CustomRule("custom_number", "custom validation failed", check))


# =============================================================================
# Date/Time Builder
# =============================================================================


def _parse_error(value: Any, text: str) -> ContractViolation:
    return ContractViolation(
        message=f"cannot parse {text!r} as RFC3339",
        code="parse_error",
        value=value,
    )


def _boundary_rule(name: str, boundary: str, passes: Callable[[Any, Any], bool]) -> CustomRule:
    message = f"date must be {name} {boundary}"

    def check(ctx, value):
        if not isinstance(value, str):
            return type_error("a string", value)
        try:
            candidate = parse_rfc3339(value)
        except ValueError:
            return _parse_error(value, value)
        try:
            limit = parse_rfc3339(boundary)
        except ValueError:
            return _parse_error(value, boundary)
        if not passes(candidate, limit):
            return ValidationError(message=message, code=f"{name}_error", value=value)
        return None

    return CustomRule(name, message, check)


class DateTimeRuleBuilder(_SubBuilder):
    def format(self, format: str) -> "DateTimeRuleBuilder":
        return self._add(DateTimeFormatRule(format))

    def rfc3339(self) -> "DateTimeRuleBuilder":
        return self._add(DateTimeFormatRule(RFC3339))

    def iso8601(self) -> "DateTimeRuleBuilder":
        return self._add(DateTimeFormatRule(ISO8601))

    def before(self, date: str) -> "DateTimeRuleBuilder":
        """Require a strictly earlier timestamp. Both sides are parsed as RFC3339."""
        return self._add(_boundary_rule("before", date, lambda candidate, limit: candidate < limit))

    def after(self, date: str) -> "DateTimeRuleBuilder":
        """Require a strictly later timestamp. Both sides are parsed as RFC3339."""
        return self._add(_boundary_rule("after", date, lambda candidate, limit: candidate > limit))

    def range(self, start: str, end: str) -> "DateTimeRuleBuilder":
        self.after(start)
        return self.before(end)

    def custom(self, validator: Callable[[str], ValidationError | None]) -> "DateTimeRuleBuilder":
        def check(ctx, value):
            if not isinstance(value, str):
                return type_error("a string", value)
            return validator(value)

        return self._add(CustomRule("custom_datetime", "custom validation failed", check))

