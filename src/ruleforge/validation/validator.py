"""Scalar and record validation.

Validator runs global rules against a single value, or resolves per-field
rules for a record and validates each field. Unlike CompositeRule, it never
stops at the first failure: every rule runs and every failure is recorded.

Usage:
    validator = (
        ValidatorBuilder()
        .field("name", MinLengthRule(2), MaxLengthRule(50))
        .field("email", EmailRule())
        .build()
    )
    result = validator.validate_struct(None, {"name": "Jo", "email": "jo@example.com"})

Rule registration is not synchronized. Register everything up front, then
share the validator between threads freely.
"""

import dataclasses
from collections.abc import Mapping
from typing import Any

from ruleforge.validation.directives import KIND_DYNAMIC, FieldSpec, resolve_record_schema
from ruleforge.validation.rules import RequiredRule
from ruleforge.validation.types import (
    Rule,
    ValidationContext,
    ValidationError,
    ValidationResult,
)

NOT_A_RECORD = "value must be a record"


class Validator:
    """Applies global rules to values and field rules to records."""

    def __init__(self):
        self.rules: list[Rule] = []
        self.field_rules: dict[str, list[Rule]] = {}

    def add_rule(self, rule: Rule) -> "Validator":
        self.rules.append(rule)
        return self

    def add_field_rule(self, field: str, rule: Rule) -> "Validator":
        self.field_rules.setdefault(field, []).append(rule)
        return self

    def validate(self, ctx: ValidationContext | None, value: Any) -> ValidationResult:
        """Run every global rule against ``value``.

        Every failure is collected into ``global_errors``.
        """
        result = ValidationResult()
        for rule in self.rules:
            error = rule.validate(ctx, value)
            if error is not None:
                result.add_global_error(error.message)
        return result

    def validate_struct(self, ctx: ValidationContext | None, record: Any) -> ValidationResult:
        """Validate each field of a record and merge the per-field results.

        Dataclass records contribute their field directives plus any rules
        registered with ``add_field_rule``. Mappings and plain objects only
        use registered field rules.

        Args:
            ctx: Validation context (may be None)
            record: Dataclass instance, mapping, or object with ``__dict__``

        Returns:
            ValidationResult with errors keyed by field name
        """
        ctx = ctx or ValidationContext()
        result = ValidationResult()

        if dataclasses.is_dataclass(record) and not isinstance(record, type):
            schema = resolve_record_schema(type(record))
            for spec in schema.fields:
                extra = self.field_rules.get(spec.name, [])
                if not spec.rules and not extra:
                    continue
                value = getattr(record, spec.name, None)
                result.merge(self._validate_field(ctx, record, spec, extra, value))
            return result

        if isinstance(record, Mapping):
            values = record
        elif hasattr(record, "__dict__") and not isinstance(record, type):
            values = vars(record)
        else:
            result.add_global_error(NOT_A_RECORD)
            return result

        for name, rules in self.field_rules.items():
            if name.startswith("_") or name not in values:
                continue
            spec = FieldSpec(name=name, kind=KIND_DYNAMIC, required=False, rules=())
            result.merge(self._validate_field(ctx, record, spec, rules, values[name]))
        return result

    def _validate_field(
        self,
        ctx: ValidationContext,
        record: Any,
        spec: FieldSpec,
        extra: list[Rule],
        value: Any,
    ) -> ValidationResult:
        result = ValidationResult()
        rules: tuple[Rule, ...] = (*spec.rules, *extra)

        # Missing value: only presence is checked, and only if required
        if value is None:
            presence = [rule for rule in rules if isinstance(rule, RequiredRule)]
            if not presence:
                return result
            rules = (presence[0],)

        field_ctx = ctx.for_field(spec.name, record)
        for rule in rules:
            error: ValidationError | None = rule.validate(field_ctx, value)
            if error is not None:
                result.add_error(spec.name, error.message)
        return result


class ValidatorBuilder:
    """Fluent construction of a Validator."""

    def __init__(self):
        self._rules: list[Rule] = []
        self._fields: list[tuple[str, tuple[Rule, ...]]] = []

    def rule(self, *rules: Rule) -> "ValidatorBuilder":
        self._rules.extend(rules)
        return self

    def field(self, name: str, *rules: Rule) -> "ValidatorBuilder":
        self._fields.append((name, rules))
        return self

    def build(self) -> Validator:
        validator = Validator()
        for rule in self._rules:
            validator.add_rule(rule)
        for name, rules in self._fields:
            for rule in rules:
                validator.add_field_rule(name, rule)
        return validator
