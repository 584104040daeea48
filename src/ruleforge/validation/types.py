"""Core types for the ruleforge validation engine.

This module defines the types shared by every validation layer:
- ValidationError: the failure returned by a single rule
- ContractViolation: a rule applied to a value of the wrong kind
- ValidationContext: per-call context threaded through rule execution
- Rule: the protocol every rule implements
- ValidationResult: aggregated outcome of one validation call
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class ValidationError:
    """A single rule failure.

    Attributes:
        message: Human-readable, field-agnostic message
        code: Machine-readable error code (e.g., "min_length")
        field: Field name this error relates to, or "" when unknown
        value: The offending value, kept for diagnostics
    """

    message: str
    code: str
    field: str = ""
    value: Any = None

    @property
    def is_contract_violation(self) -> bool:
        return False

    def with_field(self, field_name: str) -> "ValidationError":
        """Return a copy of this error attached to ``field_name``."""
        return type(self)(
            message=self.message,
            code=self.code,
            field=field_name,
            value=self.value,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "field": self.field,
        }

    def __str__(self) -> str:
        if self.field:
            return f"{self.field}: {self.message}"
        return self.message


@dataclass(frozen=True)
class ContractViolation(ValidationError):
    """A rule was applied to a value it cannot handle.

    Returned (not raised) when e.g. a length rule receives an integer, or a
    date boundary cannot be parsed. These indicate a misconfigured rule, not
    invalid user input.
    """

    @property
    def is_contract_violation(self) -> bool:
        return True


def type_error(expected: str, value: Any) -> ContractViolation:
    return ContractViolation(
        message=f"value must be {expected}",
        code="type_error",
        value=value,
    )


@dataclass
class ValidationContext:
    """Context passed to rules during validation.

    Attributes:
        field: Name of the field being validated, if any
        record: The record the field belongs to, if any
        extras: Free-form values for custom rules
    """

    field: str | None = None
    record: Any = None
    extras: dict[str, Any] = dataclasses.field(default_factory=dict)

    def for_field(self, field_name: str, record: Any = None) -> "ValidationContext":
        return ValidationContext(field=field_name, record=record, extras=self.extras)


class Rule(Protocol):
    """Protocol that all rules implement.

    Rules are immutable once constructed and may be shared between threads.
    """

    name: str
    message: str

    def validate(self, ctx: ValidationContext | None, value: Any) -> ValidationError | None:
        """Validate a single value.

        Args:
            ctx: Validation context (may be None)
            value: The value to check

        Returns:
            None when the value passes, otherwise the failure.
        """
        ...


@dataclass
class ValidationResult:
    """Result of one validation call.

    Attributes:
        valid: True if there are no field or global errors (warnings don't count)
        errors: Field name -> ordered error messages
        global_errors: Errors not tied to a field
        warnings: Field name -> ordered warning messages
    """

    valid: bool = True
    errors: dict[str, list[str]] = field(default_factory=dict)
    global_errors: list[str] = field(default_factory=list)
    warnings: dict[str, list[str]] = field(default_factory=dict)

    def add_error(self, field_name: str, message: str) -> None:
        self.errors.setdefault(field_name, []).append(message)
        self.valid = False

    def add_global_error(self, message: str) -> None:
        self.global_errors.append(message)
        self.valid = False

    def add_warning(self, field_name: str, message: str) -> None:
        self.warnings.setdefault(field_name, []).append(message)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """Fold ``other`` into this result, keeping insertion order.

        Returns:
            self, to allow chaining
        """
        for field_name, messages in other.errors.items():
            self.errors.setdefault(field_name, []).extend(messages)
        self.global_errors.extend(other.global_errors)
        for field_name, messages in other.warnings.items():
            self.warnings.setdefault(field_name, []).extend(messages)
        if not other.valid:
            self.valid = False
        return self

    def error_count(self) -> int:
        return sum(len(m) for m in self.errors.values()) + len(self.global_errors)

    def has_errors(self) -> bool:
        return not self.valid

    def has_warnings(self) -> bool:
        return any(self.warnings.values())

    def first_error(self) -> str:
        """Return the first error message, field errors before global ones."""
        for messages in self.errors.values():
            if messages:
                return messages[0]
        if self.global_errors:
            return self.global_errors[0]
        return ""

    def all_errors(self) -> list[str]:
        """Flatten every error as ``"field: message"`` followed by global errors."""
        flat = [
            f"{field_name}: {message}"
            for field_name, messages in self.errors.items()
            for message in messages
        ]
        flat.extend(self.global_errors)
        return flat

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": {k: list(v) for k, v in self.errors.items()},
            "global_errors": list(self.global_errors),
            "warnings": {k: list(v) for k, v in self.warnings.items()},
            "error_count": self.error_count(),
        }

    def __str__(self) -> str:
        if self.valid:
            return "validation passed"
        return "validation failed: " + "; ".join(self.all_errors())
