"""Tests for Validator: scalar and record validation."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

import pytest

from ruleforge.validation.directives import validated
from ruleforge.validation.rules import (
    EmailRule,
    MaxLengthRule,
    MaxValueRule,
    MinLengthRule,
    MinValueRule,
    RequiredRule,
)
from ruleforge.validation.validator import NOT_A_RECORD, Validator, ValidatorBuilder


# =============================================================================
# Test Records
# =============================================================================


@dataclass
class User:
    name: str = validated("required,min=2,max=50")
    email: str = validated("required,email")
    age: int = validated("required,min=18")


@dataclass
class Product:
    price: Decimal = validated("min=1,max=1000")
    sku: Optional[str] = validated("min=3")
    note: str = ""


@dataclass
class Loose:
    value: Any = validated("min=3")


def make_user(**overrides) -> User:
    """Helper to create a valid User, with overrides."""
    values = {"name": "John Doe", "email": "john@example.com", "age": 30}
    values.update(overrides)
    return User(**values)


# =============================================================================
# Scalar Validation
# =============================================================================


class TestValidate:
    def test_no_rules_is_valid(self):
        assert Validator().validate(None, "anything").valid

    def test_collects_every_failure(self):
        """Unlike CompositeRule, every rule runs."""
        validator = Validator().add_rule(MinLengthRule(5)).add_rule(MaxLengthRule(2))
        result = validator.validate(None, "abc")
        assert not result.valid
        assert result.global_errors == [
            "minimum length is 5 characters",
            "maximum length is 2 characters",
        ]
        assert result.errors == {}

    def test_passing_value(self):
        validator = Validator().add_rule(RequiredRule()).add_rule(MinLengthRule(2))
        assert validator.validate(None, "ok").valid


# =============================================================================
# Record Validation
# =============================================================================


class TestValidateStruct:
    def test_valid_record(self):
        result = Validator().validate_struct(None, make_user())
        assert result.valid, result.all_errors()

    def test_independent_field_failures(self):
        result = Validator().validate_struct(None, make_user(name="J", email="not-an-email"))
        assert not result.valid
        assert "name" in result.errors
        assert "email" in result.errors
        assert "age" not in result.errors

    def test_numeric_min_is_value_bound(self):
        result = Validator().validate_struct(None, make_user(age=17))
        assert "minimum value" in result.errors["age"][0]
        assert Validator().validate_struct(None, make_user(age=18)).valid

    def test_string_min_is_length_bound(self):
        result = Validator().validate_struct(None, make_user(name="a"))
        assert "minimum length" in result.errors["name"][0]
        assert Validator().validate_struct(None, make_user(name="ab")).valid

    def test_required_field_reports_missing(self):
        result = Validator().validate_struct(None, make_user(name=""))
        assert result.errors["name"][0] == "value is required"

    def test_required_none_reports_presence_only(self):
        result = Validator().validate_struct(None, make_user(name=None, age=None))
        assert result.errors == {
            "name": ["value is required"],
            "age": ["value is required"],
        }
        assert not result.global_errors

    def test_required_none_skips_registered_rules(self):
        validator = Validator().add_field_rule("email", MaxLengthRule(5))
        result = validator.validate_struct(None, make_user(email=None))
        assert result.errors == {"email": ["value is required"]}

    def test_mapping_none_with_registered_required(self):
        validator = Validator().add_field_rule("name", RequiredRule()).add_field_rule("name", MinLengthRule(2))
        result = validator.validate_struct(None, {"name": None})
        assert result.errors == {"name": ["value is required"]}

    def test_optional_none_is_skipped(self):
        result = Validator().validate_struct(None, Product(price=Decimal("10"), sku=None))
        assert result.valid

    def test_optional_hint_keeps_kind(self):
        result = Validator().validate_struct(None, Product(price=Decimal("10"), sku="ab"))
        assert result.errors == {"sku": ["minimum length is 3 characters"]}

    def test_decimal_field_is_numeric(self):
        result = Validator().validate_struct(None, Product(price=Decimal("1000.01"), sku="abc"))
        assert result.errors == {"price": ["maximum value is 1000"]}

    def test_any_field_decides_per_value(self):
        assert "minimum value" in Validator().validate_struct(None, Loose(value=2)).errors["value"][0]
        assert "minimum length" in Validator().validate_struct(None, Loose(value="ab")).errors["value"][0]
        assert Validator().validate_struct(None, Loose(value=3)).valid

    def test_registered_field_rules_combine_with_directives(self):
        validator = Validator().add_field_rule("name", MaxLengthRule(3))
        result = validator.validate_struct(None, make_user(name="Johnny"))
        assert result.errors["name"] == ["maximum length is 3 characters"]

    def test_field_rules_on_undirected_field(self):
        validator = Validator().add_field_rule("note", MinLengthRule(2))
        result = validator.validate_struct(None, Product(price=Decimal("10"), sku="abc", note="x"))
        assert result.errors == {"note": ["minimum length is 2 characters"]}

    def test_mapping_uses_registered_rules(self):
        validator = Validator().add_field_rule("name", MinLengthRule(2)).add_field_rule("age", MinValueRule(18))
        result = validator.validate_struct(None, {"name": "J", "age": 20, "other": 1})
        assert result.errors == {"name": ["minimum length is 2 characters"]}

    def test_plain_object_uses_registered_rules(self):
        class Account:
            def __init__(self):
                self.balance = -5

        validator = Validator().add_field_rule("balance", MinValueRule(0))
        result = validator.validate_struct(None, Account())
        assert result.errors == {"balance": ["minimum value is 0"]}

    @pytest.mark.parametrize("value", [42, "string", None, User])
    def test_non_record_is_global_error(self, value):
        result = Validator().validate_struct(None, value)
        assert not result.valid
        assert result.global_errors == [NOT_A_RECORD]


# =============================================================================
# ValidatorBuilder
# =============================================================================


class TestValidatorBuilder:
    def test_builds_field_rules(self):
        validator = (
            ValidatorBuilder()
            .field("name", MinLengthRule(2), MaxLengthRule(50))
            .field("email", EmailRule())
            .build()
        )
        assert validator.validate_struct(None, {"name": "Jo", "email": "jo@example.com"}).valid
        result = validator.validate_struct(None, {"name": "J", "email": "bad"})
        assert set(result.errors) == {"name", "email"}

    def test_builds_global_rules(self):
        validator = ValidatorBuilder().rule(MinValueRule(0), MaxValueRule(10)).build()
        assert validator.validate(None, 5).valid
        assert validator.validate(None, 11).global_errors == ["maximum value is 10"]
