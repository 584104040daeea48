"""Tests for the built-in validation rules."""

from decimal import Decimal

import pytest

from ruleforge.validation.rules import (
    EMAIL_PATTERN,
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
)
from ruleforge.validation.types import ContractViolation, ValidationContext, ValidationError


def assert_passes(rule, values):
    for value in values:
        assert rule.validate(None, value) is None, f"{value!r} should pass {rule!r}"


def assert_fails(rule, values):
    for value in values:
        error = rule.validate(None, value)
        assert error is not None, f"{value!r} should fail {rule!r}"
        assert not error.is_contract_violation, f"{value!r} should be a validation failure"


# =============================================================================
# Required
# =============================================================================


class TestRequiredRule:
    def test_present_values_pass(self):
        assert_passes(RequiredRule(), ["x", "  a ", 0, False, [1], {"a": 1}, Decimal("0")])

    def test_empty_values_fail(self):
        assert_fails(RequiredRule(), [None, "", "   ", [], {}, ()])

    def test_error_shape(self):
        error = RequiredRule().validate(None, None)
        assert error.code == "required"
        assert error.message == "value is required"
        assert error.field == ""


# =============================================================================
# String Rules
# =============================================================================


class TestLengthRules:
    def test_min_length(self):
        rule = MinLengthRule(3)
        assert_passes(rule, ["abc", "abcd"])
        assert_fails(rule, ["", "ab"])
        assert rule.validate(None, "ab").message == "minimum length is 3 characters"

    def test_max_length(self):
        rule = MaxLengthRule(5)
        assert_passes(rule, ["", "hello"])
        assert_fails(rule, ["hello!"])
        assert rule.validate(None, "hello!").message == "maximum length is 5 characters"

    def test_length_counts_code_points(self):
        assert MaxLengthRule(4).validate(None, "ção!") is None
        assert MinLengthRule(2).validate(None, "日本") is None

    def test_non_string_is_contract_violation(self):
        error = MinLengthRule(2).validate(None, 42)
        assert isinstance(error, ContractViolation)
        assert error.is_contract_violation
        assert error.code == "type_error"
        assert MaxLengthRule(2).validate(None, ["a"]).is_contract_violation


class TestPatternRule:
    def test_search_semantics(self):
        rule = PatternRule(r"\d{3}")
        assert_passes(rule, ["123", "abc123def"])
        assert_fails(rule, ["12", "abc"])

    def test_anchored_pattern(self):
        rule = PatternRule(r"^[A-Z]{2}$")
        assert_passes(rule, ["AB"])
        assert_fails(rule, ["ABC", "xAB"])

    def test_invalid_pattern_always_fails(self):
        """A pattern that does not compile degrades to always-invalid."""
        rule = PatternRule("[unclosed")
        for value in ["", "anything", "[unclosed", 12, None]:
            error = rule.validate(None, value)
            assert error is not None
            assert error.code == "invalid_pattern"
            assert error.message == "invalid pattern: [unclosed"


class TestEmailRule:
    def test_pattern_valid(self):
        for email in ["test@example.com", "user.name@domain.co.uk", "user+tag@example.org"]:
            assert EMAIL_PATTERN.match(email), f"{email} should be valid"

    def test_valid(self):
        assert_passes(EmailRule(), ["test@example.com", "user+tag@example.org"])

    def test_invalid(self):
        assert_fails(
            EmailRule(),
            ["not-an-email", "@example.com", "user@", "user@.com", "user name@example.com", "Joe <joe@x.com>"],
        )

    def test_message(self):
        assert EmailRule().validate(None, "nope").message == "invalid email format"


class TestURLRule:
    def test_valid(self):
        assert_passes(URLRule(), ["https://example.com", "http://localhost:8080/path?q=1", "ftp://files.example.org"])

    def test_invalid(self):
        assert_fails(URLRule(), ["example.com", "https://", "mailto:a@b.co", "http://exa mple.com", ""])


class TestUUIDRule:
    def test_valid(self):
        assert_passes(
            UUIDRule(),
            ["123e4567-e89b-12d3-a456-426614174000", "123E4567-E89B-12D3-A456-426614174000"],
        )

    def test_invalid(self):
        assert_fails(UUIDRule(), ["not-a-uuid", "123e4567-e89b-12d3-a456", ""])
        assert UUIDRule().validate(None, "x").message == "invalid UUID format"


# =============================================================================
# Numeric Rules
# =============================================================================


class TestValueRules:
    def test_min_value(self):
        rule = MinValueRule(18)
        assert_passes(rule, [18, 18.0, 100, Decimal("18"), "18.5"])
        assert_fails(rule, [17, 17.99, Decimal("17.999"), "-1"])
        assert rule.validate(None, 17).message == "minimum value is 18"

    def test_max_value(self):
        rule = MaxValueRule(10.5)
        assert_passes(rule, [10, 10.5, Decimal("10.5")])
        assert_fails(rule, [11, Decimal("10.500001")])
        assert rule.validate(None, 11).message == "maximum value is 10.5"

    def test_exclusive_bounds(self):
        assert MinValueRule(0, exclusive=True).validate(None, 0) is not None
        assert MinValueRule(0, exclusive=True).validate(None, 1e-9) is None
        assert MaxValueRule(0, exclusive=True).validate(None, 0) is not None
        assert MinValueRule(0, exclusive=True).message == "value must be greater than 0"

    def test_large_integers_compare_exactly(self):
        """2**53 + 1 is not representable as a float; the comparison stays exact."""
        rule = MaxValueRule(2**53)
        assert rule.validate(None, 2**53) is None
        assert rule.validate(None, 2**53 + 1) is not None

    def test_decimal_and_float_compare_exactly(self):
        # 0.1 as a float is slightly above Decimal("0.1")
        assert MaxValueRule(Decimal("0.1")).validate(None, 0.1) is not None
        assert MinValueRule(Decimal("0.1")).validate(None, 0.1) is None

    def test_non_numeric_is_contract_violation(self):
        for value in ["abc", None, True, [1], float("nan")]:
            error = MinValueRule(1).validate(None, value)
            assert error.is_contract_violation, f"{value!r} should be a contract violation"

    def test_non_numeric_bound_rejected(self):
        with pytest.raises(ValueError):
            MinValueRule("ten")


# =============================================================================
# Date/Time Format
# =============================================================================


class TestDateTimeFormatRule:
    def test_rfc3339(self):
        rule = DateTimeFormatRule("RFC3339")
        assert_passes(rule, ["2024-01-15T10:30:00Z", "2024-01-15T10:30:00.123456789+02:00"])
        assert_fails(rule, ["2024-01-15", "2024-01-15 10:30:00", "2024-02-30T10:30:00Z"])

    def test_strptime_layout(self):
        rule = DateTimeFormatRule("%d/%m/%Y")
        assert_passes(rule, ["15/01/2024"])
        assert_fails(rule, ["2024-01-15", "31/02/2024"])
        assert rule.validate(None, "x").message == "invalid format, expected: %d/%m/%Y"

    def test_date_only_layout(self):
        rule = DateTimeFormatRule("%Y-%m-%d")
        assert_passes(rule, ["2024-02-29"])
        assert_fails(rule, ["2023-02-29", "2024-2-1"])

    @pytest.mark.parametrize("layout", ["RFC3339", "RFC3339Nano", "ISO8601", "%Y-%m-%d", "%H:%M:%S"])
    def test_trailing_text_is_rejected(self, layout):
        rule = DateTimeFormatRule(layout)
        assert_fails(
            rule,
            [
                "2024-01-01T00:00:00.123Z\n",
                "2024-01-01T00:00:00.123Z extra",
                "2024-01-01\n",
                "10:30:00\n",
            ],
        )

    def test_rfc3339_trailing_newline(self):
        rule = DateTimeFormatRule("RFC3339")
        assert rule.validate(None, "2024-01-01T00:00:00Z") is None
        assert rule.validate(None, "2024-01-01T00:00:00Z\n") is not None


class TestTrailingWhitespace:
    def test_email_with_newline(self):
        assert_fails(EmailRule(), ["test@example.com\n", " test@example.com"])

    def test_url_with_newline(self):
        assert_fails(URLRule(), ["https://example.com\n", "https://exa\tmple.com"])


# =============================================================================
# Custom and Composite
# =============================================================================


class TestCustomRule:
    def test_delegates_to_function(self):
        def even(ctx, value):
            if value % 2:
                return ValidationError(message="must be even", code="even", value=value)
            return None

        rule = CustomRule("even", "must be even", even)
        assert rule.validate(None, 4) is None
        assert rule.validate(None, 3).code == "even"

    def test_receives_context(self):
        seen = []
        rule = CustomRule("spy", "spy", lambda ctx, value: seen.append(ctx.field))
        rule.validate(ValidationContext(field="name"), "x")
        assert seen == ["name"]


class TestCompositeRule:
    def test_fail_fast(self):
        """Only the first failing rule's error is observed."""
        rule = CompositeRule(MinLengthRule(5), PatternRule(r"^\d+$"))
        error = rule.validate(None, "ab")
        assert error.code == "min_length"

    def test_all_pass(self):
        rule = CompositeRule(RequiredRule(), MinLengthRule(2), MaxLengthRule(4))
        assert rule.validate(None, "abc") is None
        assert len(rule) == 3

    def test_order_is_preserved(self):
        rule = CompositeRule(PatternRule(r"^\d+$"), MinLengthRule(5))
        assert rule.validate(None, "ab").code == "pattern"


class TestImmutability:
    def test_rules_cannot_be_mutated(self):
        rule = MinLengthRule(3)
        with pytest.raises(AttributeError):
            rule.min = 1
        with pytest.raises(AttributeError):
            rule.message = "changed"
        assert rule.min == 3
