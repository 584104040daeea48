"""JSON Schema validation with stable error codes.

Wraps ``jsonschema`` and maps its errors into a ValidationResult:

- Each engine error becomes a field error. The field is the dot-joined
  instance path, or ``(root)`` for errors on the document itself.
- A missing required property at the root, or one rejected by
  ``additionalProperties: false``, is reported under the property name
  rather than ``(root)``.
- The recorded message is an opaque code from a fixed table keyed by the
  failed keyword (see ERROR_CODES), never the engine's own wording.
  Engine messages are logged at debug level.
- A schema that cannot be decoded or is not a valid schema produces a
  single global error instead of an exception.

Instances given as ``str`` or ``bytes`` are decoded with ``loads_tagged``,
so every JSON number reaches format checkers as a JsonNumber. Schemas
without ``$schema`` use the configured default draft (2020-12).

Usage:
    validator = SchemaValidator()
    result = validator.validate_schema(None, '{"d": "2024-02-29"}', schema)
    if not result.valid:
        raise validator.to_domain_error(result)
"""

import json
import logging
import re
import threading
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable

import yaml
from jsonschema import validators
from jsonschema.exceptions import SchemaError
from jsonschema.exceptions import ValidationError as EngineError
from referencing import Registry, Resource
from referencing.exceptions import Unresolvable
from referencing.jsonschema import DRAFT202012

from ruleforge.config import ValidationConfig
from ruleforge.validation.errors import (
    GLOBAL_FIELD,
    DomainValidationError,
    SchemaLoadError,
)
from ruleforge.validation.formats import (
    BUILTIN_FORMATS,
    FormatRegistry,
    FormatValidator,
    FunctionFormat,
)
from ruleforge.validation.numbers import loads_tagged
from ruleforge.validation.types import ValidationContext, ValidationResult

logger = logging.getLogger(__name__)

ROOT_FIELD = "(root)"
FALLBACK_CODE = "VALIDATION_ERROR"

# Failed keyword -> stable error code
ERROR_CODES: dict[str, str] = {
    "required": "REQUIRED_ATTRIBUTE_MISSING",
    "type": "INVALID_DATA_TYPE",
    "invalid_type": "INVALID_DATA_TYPE",
    "enum": "INVALID_VALUE",
    "const": "INVALID_VALUE",
    "format": "INVALID_FORMAT",
    "minLength": "INVALID_LENGTH",
    "maxLength": "INVALID_LENGTH",
    "string_gte": "INVALID_LENGTH",
    "string_lte": "INVALID_LENGTH",
}

SCHEMA_SUFFIXES = {".json", ".yaml", ".yml"}


def error_code(keyword: str | None) -> str:
    return ERROR_CODES.get(keyword or "", FALLBACK_CODE)


# =============================================================================
# Engine Extension
# =============================================================================


@lru_cache(maxsize=None)
def engine_class(base: type) -> type:
    """Extend a jsonschema validator class for tagged JSON numbers.

    - ``integer`` accepts integral Decimals (and so JsonNumber)
    - ``multipleOf`` uses exact Decimal arithmetic for Decimal instances
    """
    base_checker = base.TYPE_CHECKER

    def is_integer(checker, instance):
        if isinstance(instance, Decimal):
            return instance.is_finite() and instance == instance.to_integral_value()
        return base_checker.is_type(instance, "integer")

    type_checker = base_checker.redefine("integer", is_integer)
    base_multiple_of = base.VALIDATORS.get("multipleOf")
    if base_multiple_of is None:
        return validators.extend(base, type_checker=type_checker)

    def multiple_of(validator, multiple, instance, schema):
        if not isinstance(instance, Decimal) or isinstance(multiple, bool):
            yield from base_multiple_of(validator, multiple, instance, schema)
            return
        if not instance.is_finite():
            return
        quotient = instance / Decimal(str(multiple))
        if quotient != quotient.to_integral_value():
            yield EngineError(f"{instance} is not a multiple of {multiple}")

    return validators.extend(
        base,
        validators={"multipleOf": multiple_of},
        type_checker=type_checker,
    )


# =============================================================================
# Error Mapping
# =============================================================================


def _missing_property(error: EngineError) -> str | None:
    """Name of the property a ``required`` error complains about."""
    if error.validator != "required" or not isinstance(error.instance, dict):
        return None
    for name in error.validator_value or ():
        if name not in error.instance and error.message.startswith(repr(name)):
            return name
    return None


def _unexpected_property(error: EngineError) -> str | None:
    """First property rejected by ``additionalProperties: false``."""
    if error.validator != "additionalProperties" or not isinstance(error.instance, dict):
        return None
    declared = error.schema.get("properties", {})
    patterns = error.schema.get("patternProperties", {})
    for name in error.instance:
        if name in declared or any(re.search(p, name) for p in patterns):
            continue
        return name
    return None


def error_field(error: EngineError) -> str:
    """Field name for an engine error: dot path, property name, or (root)."""
    path = ".".join(str(part) for part in error.absolute_path)
    if path:
        return path
    return _missing_property(error) or _unexpected_property(error) or ROOT_FIELD


def _decode_instance(instance: Any) -> Any:
    if isinstance(instance, (bytes, bytearray)):
        try:
            instance = bytes(instance).decode("utf-8")
        except UnicodeDecodeError:
            return instance
    if isinstance(instance, str):
        try:
            return loads_tagged(instance)
        except ValueError:
            # Not JSON text: validate the raw string
            return instance
    return instance


def _decode_schema(document: Any) -> Any:
    if isinstance(document, (bytes, bytearray, str)):
        return json.loads(document)
    return document


# =============================================================================
# Schema Validator
# =============================================================================


class SchemaValidator:
    """Validates JSON documents against JSON Schemas.

    Format validators are registered both on this instance and on the
    process-wide FormatRegistry, whose checker the engine consults. Named
    schemas can be compiled once with ``cache_schema`` and reused.

    Safe for concurrent use after setup. Registration and caching are
    guarded by a lock.
    """

    def __init__(
        self,
        config: ValidationConfig | None = None,
        registry: Registry | None = None,
        format_registry: FormatRegistry | None = None,
    ):
        self.config = config or ValidationConfig()
        self._lock = threading.RLock()
        self._registry: Registry = registry if registry is not None else Registry()
        self._format_registry = format_registry or FormatRegistry.default()
        self._formats: dict[str, FormatValidator] = {}
        self._cached: dict[str, Any] = {}

        if self.config.builtin_formats:
            for validator in BUILTIN_FORMATS.values():
                self.add_custom_format(validator.name, validator)

    # -------------------------------------------------------------------------
    # Formats
    # -------------------------------------------------------------------------

    def register_format_validator(self, name: str, predicate: Callable[[Any], bool]) -> None:
        """Register a plain predicate as format ``name``."""
        self.add_custom_format(name, FunctionFormat(name, predicate))

    def add_custom_format(self, name: str, validator: FormatValidator) -> None:
        """Register ``validator`` as format ``name``.

        The format becomes visible to every SchemaValidator in the process.
        """
        if validator.name != name:
            validator = FunctionFormat(name, validator.is_format)
        with self._lock:
            self._formats[name] = validator
            self._format_registry.register(validator)

    def format_validators(self) -> dict[str, FormatValidator]:
        with self._lock:
            return dict(self._formats)

    def has_format(self, name: str) -> bool:
        with self._lock:
            return name in self._formats

    # -------------------------------------------------------------------------
    # References
    # -------------------------------------------------------------------------

    def add_resource(self, uri: str, schema: dict[str, Any]) -> None:
        """Make ``schema`` resolvable by ``$ref`` under ``uri``."""
        resource = Resource.from_contents(schema, default_specification=DRAFT202012)
        with self._lock:
            self._registry = self._registry.with_resource(uri, resource)

    # -------------------------------------------------------------------------
    # Compilation
    # -------------------------------------------------------------------------

    def compile(self, schema_document: Any):
        """Build an engine validator for a schema document.

        Args:
            schema_document: JSON text, bytes, or an already-decoded schema

        Raises:
            SchemaLoadError: if the document is not JSON or not a valid schema
        """
        try:
            schema = _decode_schema(schema_document)
        except ValueError as e:
            raise SchemaLoadError(f"invalid schema document: {e}") from e

        base = self.config.validator_class
        if isinstance(schema, dict):
            base = validators.validator_for(schema, default=base)
        try:
            base.check_schema(schema)
        except SchemaError as e:
            raise SchemaLoadError(f"invalid schema: {e.message}") from e

        with self._lock:
            registry = self._registry
        return engine_class(base)(
            schema,
            registry=registry,
            format_checker=self._format_registry.checker,
        )

    def cache_schema(self, name: str, schema_document: Any) -> None:
        """Compile and store a schema under ``name``.

        Raises:
            SchemaLoadError: if the schema is invalid
        """
        compiled = self.compile(schema_document)
        with self._lock:
            self._cached[name] = compiled
        logger.debug("Cached schema '%s'", name)

    def cached_schemas(self) -> list[str]:
        with self._lock:
            return sorted(self._cached)

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate_schema(
        self,
        ctx: ValidationContext | None,
        instance: Any,
        schema_document: Any,
    ) -> ValidationResult:
        """Validate ``instance`` against ``schema_document``.

        A malformed schema yields a result with a single global error.
        """
        try:
            compiled = self.compile(schema_document)
        except SchemaLoadError as e:
            logger.warning("Schema rejected: %s", e)
            result = ValidationResult()
            result.add_global_error(str(e))
            return result
        return self._run(compiled, instance)

    def validate_cached(self, ctx: ValidationContext | None, instance: Any, name: str) -> ValidationResult:
        """Validate ``instance`` against a schema stored with ``cache_schema``."""
        with self._lock:
            compiled = self._cached.get(name)
        if compiled is None:
            result = ValidationResult()
            result.add_global_error(f"schema '{name}' is not cached")
            return result
        return self._run(compiled, instance)

    def validate_schema_file(
        self,
        ctx: ValidationContext | None,
        instance: Any,
        path: str | Path,
    ) -> ValidationResult:
        """Validate ``instance`` against a JSON or YAML schema file."""
        try:
            schema = self.load_schema_file(path)
        except SchemaLoadError as e:
            logger.warning("Schema file rejected: %s", e)
            result = ValidationResult()
            result.add_global_error(str(e))
            return result
        return self.validate_schema(ctx, instance, schema)

    def load_schema_file(self, path: str | Path) -> Any:
        """Load a schema from a .json, .yaml or .yml file.

        Relative paths resolve against ``config.schema_dir`` when set.

        Raises:
            SchemaLoadError: if the file is missing, unsupported or malformed
        """
        path = self.config.resolve_schema_path(Path(path))
        if path.suffix.lower() not in SCHEMA_SUFFIXES:
            raise SchemaLoadError(f"unsupported schema file type: {path}")
        try:
            with open(path, encoding="utf-8") as f:
                if path.suffix.lower() == ".json":
                    return json.load(f)
                return yaml.safe_load(f)
        except OSError as e:
            raise SchemaLoadError(f"cannot read schema file {path}: {e}") from e
        except (ValueError, yaml.YAMLError) as e:
            raise SchemaLoadError(f"cannot parse schema file {path}: {e}") from e

    def _run(self, compiled, instance: Any) -> ValidationResult:
        result = ValidationResult()
        document = _decode_instance(instance)
        try:
            errors = sorted(
                compiled.iter_errors(document),
                key=lambda e: [str(part) for part in e.absolute_path],
            )
        except Unresolvable as e:
            result.add_global_error(f"unresolvable schema reference: {e}")
            return result

        for error in errors:
            code = error_code(error.validator)
            field = error_field(error)
            logger.debug("Schema violation at %s (%s): %s", field, error.validator, error.message)
            result.add_error(field, code)
        return result

    # -------------------------------------------------------------------------
    # Domain Errors
    # -------------------------------------------------------------------------

    @staticmethod
    def to_domain_error(
        result: ValidationResult,
        message: str = "validation failed",
    ) -> DomainValidationError | None:
        """Convert a failed result into a DomainValidationError.

        Field errors keep their field names. Global errors are listed under
        ``_global``. Returns None for a valid result.
        """
        if result.valid:
            return None
        error = DomainValidationError(message)
        for field, messages in result.errors.items():
            for msg in messages:
                error.add_field(field, msg)
        for msg in result.global_errors:
            error.add_field(GLOBAL_FIELD, msg)
        return error
