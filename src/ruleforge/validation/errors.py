"""Exceptions raised by ruleforge.

Invalid input never raises; it is reported through ValidationResult. The
exceptions here cover misconfiguration and the error-as-value form used at
service boundaries.
"""

from typing import Any

GLOBAL_FIELD = "_global"


class RuleforgeError(Exception):
    """Base class for ruleforge errors."""
    pass


class DirectiveError(RuleforgeError):
    """A field carries a validation directive that cannot be parsed."""
    pass


class SchemaLoadError(RuleforgeError):
    """A schema file could not be read or decoded."""
    pass


class DomainValidationError(RuleforgeError):
    """Structured validation error for service boundaries.

    Holds a mapping of field name -> messages. Errors not tied to a field
    live under the ``_global`` key.

    Example:
        err = DomainValidationError("User registration failed")
        err.add_field("email", "invalid format")
        err.field_errors("email")  # ["invalid format"]
    """

    def __init__(self, message: str, fields: dict[str, list[str]] | None = None):
        super().__init__(message)
        self.message = message
        self._fields: dict[str, list[str]] = {
            name: list(messages) for name, messages in (fields or {}).items()
        }

    def add_field(self, field: str, message: str) -> "DomainValidationError":
        self._fields.setdefault(field, []).append(message)
        return self

    def fields(self) -> dict[str, list[str]]:
        return {name: list(messages) for name, messages in self._fields.items()}

    def has_field(self, field: str) -> bool:
        return field in self._fields

    def field_errors(self, field: str) -> list[str]:
        return list(self._fields.get(field, []))

    def error_count(self) -> int:
        return sum(len(messages) for messages in self._fields.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "code": "VALIDATION_ERROR",
            "fields": self.fields(),
        }

    def __str__(self) -> str:
        if not self._fields:
            return self.message
        parts = [
            f"{name}: {', '.join(messages)}" for name, messages in self._fields.items()
        ]
        return f"{self.message} ({'; '.join(parts)})"
