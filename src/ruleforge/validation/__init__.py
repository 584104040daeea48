"""Ruleforge validation engine.

This package provides three validation layers:
- Rules: immutable single-value checks, combined with fluent builders
- Validator: scalar and record validation driven by field directives
- SchemaValidator: JSON Schema validation with pluggable format checkers

Usage:
    from ruleforge.validation import RuleBuilder, SchemaValidator, Validator

    rule = RuleBuilder().required().string().min_length(3).email().build()
    error = rule.validate(None, "a@b.co")
"""

from ruleforge.validation.builders import (
    DateTimeRuleBuilder,
    NumberRuleBuilder,
    RuleBuilder,
    StringRuleBuilder,
)
from ruleforge.validation.directives import (
    FieldSpec,
    RecordSchema,
    resolve_record_schema,
    validated,
)
from ruleforge.validation.errors import (
    DirectiveError,
    DomainValidationError,
    RuleforgeError,
    SchemaLoadError,
)
from ruleforge.validation.formats import (
    BUILTIN_FORMATS,
    FormatRegistry,
    FormatValidator,
    FunctionFormat,
)
from ruleforge.validation.numbers import JsonNumber, loads_tagged
from ruleforge.validation.rules import (
    BaseRule,
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
from ruleforge.validation.schema import ERROR_CODES, SchemaValidator
from ruleforge.validation.types import (
    ContractViolation,
    Rule,
    ValidationContext,
    ValidationError,
    ValidationResult,
)
from ruleforge.validation.validator import Validator, ValidatorBuilder

__all__ = [
    # Types
    "ContractViolation",
    "Rule",
    "ValidationContext",
    "ValidationError",
    "ValidationResult",
    # Rules
    "BaseRule",
    "CompositeRule",
    "CustomRule",
    "DateTimeFormatRule",
    "EmailRule",
    "MaxLengthRule",
    "MaxValueRule",
    "MinLengthRule",
    "MinValueRule",
    "PatternRule",
    "RequiredRule",
    "URLRule",
    "UUIDRule",
    # Builders
    "DateTimeRuleBuilder",
    "NumberRuleBuilder",
    "RuleBuilder",
    "StringRuleBuilder",
    # Records
    "FieldSpec",
    "RecordSchema",
    "resolve_record_schema",
    "validated",
    "Validator",
    "ValidatorBuilder",
    # Schemas
    "BUILTIN_FORMATS",
    "ERROR_CODES",
    "FormatRegistry",
    "FormatValidator",
    "FunctionFormat",
    "JsonNumber",
    "loads_tagged",
    "SchemaValidator",
    # Errors
    "DirectiveError",
    "DomainValidationError",
    "RuleforgeError",
    "SchemaLoadError",
]
