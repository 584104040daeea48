"""Field directives for record validation.

Dataclass fields carry their constraints as a comma-separated directive
string under the ``validate`` metadata key:

    @dataclass
    class User:
        name: str = validated("required,min=2,max=50")
        age: int = validated("required,min=18")
        email: str = validated("required,email")

Supported tokens: ``required``, ``min=<int>``, ``max=<int>``, ``email``,
``pattern=<regex>``. The string is split on every comma, so a pattern
cannot itself contain a comma.

Translation is type-aware: ``min``/``max`` become value bounds on numeric
fields (int, float, Decimal; bool is not numeric) and length bounds
otherwise. Fields annotated as ``Any`` (or with unresolvable hints) decide
per value.

Each record type is resolved once into a RecordSchema and cached.
"""

import dataclasses
import logging
import types
import typing
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from typing import Any, Union

from ruleforge.validation.errors import DirectiveError
from ruleforge.validation.rules import (
    CustomRule,
    EmailRule,
    MaxLengthRule,
    MaxValueRule,
    MinLengthRule,
    MinValueRule,
    PatternRule,
    RequiredRule,
)
from ruleforge.validation.types import Rule

logger = logging.getLogger(__name__)

DIRECTIVE_KEY = "validate"

KIND_STRING = "string"
KIND_NUMERIC = "numeric"
KIND_DYNAMIC = "dynamic"
KIND_OTHER = "other"

_NUMERIC_TYPES = (int, float, Decimal)


def validated(directives: str, **kwargs: Any) -> Any:
    """Declare a dataclass field with validation directives.

    Extra keyword arguments go to ``dataclasses.field`` (default,
    default_factory, ...). Existing metadata is preserved.
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[DIRECTIVE_KEY] = directives
    return dataclasses.field(metadata=metadata, **kwargs)


@dataclass(frozen=True)
class FieldSpec:
    """Pre-resolved validation for one record field."""

    name: str
    kind: str
    required: bool
    rules: tuple[Rule, ...]


@dataclass(frozen=True)
class RecordSchema:
    """Pre-resolved validation for one record type."""

    record_type: type
    fields: tuple[FieldSpec, ...]

    def get(self, name: str) -> FieldSpec | None:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None


# =============================================================================
# Type Classification
# =============================================================================


def classify(hint: Any) -> str:
    """Classify a type hint as string, numeric, dynamic or other.

    Optional[X] classifies as X. A union of several kinds is dynamic.
    """
    origin = typing.get_origin(hint)
    if origin is typing.Annotated:
        return classify(typing.get_args(hint)[0])
    if origin is Union or isinstance(hint, types.UnionType):
        kinds = {classify(a) for a in typing.get_args(hint) if a is not type(None)}
        return kinds.pop() if len(kinds) == 1 else KIND_DYNAMIC
    if origin is not None:
        hint = origin
    if hint is Any or isinstance(hint, str):
        return KIND_DYNAMIC
    if not isinstance(hint, type):
        return KIND_OTHER
    if issubclass(hint, bool):
        return KIND_OTHER
    if issubclass(hint, str):
        return KIND_STRING
    if issubclass(hint, _NUMERIC_TYPES):
        return KIND_NUMERIC
    return KIND_OTHER


def _is_numeric_value(value: Any) -> bool:
    return isinstance(value, _NUMERIC_TYPES) and not isinstance(value, bool)


def _dynamic_bound(name: str, value_rule: Rule, length_rule: Rule) -> Rule:
    def check(ctx, value):
        if _is_numeric_value(value):
            return value_rule.validate(ctx, value)
        return length_rule.validate(ctx, value)

    return CustomRule(name, value_rule.message, check)


# =============================================================================
# Directive Parsing
# =============================================================================


def _parse_int(token: str, raw: str, field_name: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise DirectiveError(
            f"Invalid directive '{token}' on field '{field_name}': expected an integer"
        ) from None


def _bound_rule(key: str, bound: int, kind: str) -> Rule:
    if key == "min":
        value_rule, length_rule = MinValueRule(bound), MinLengthRule(bound)
    else:
        value_rule, length_rule = MaxValueRule(bound), MaxLengthRule(bound)
    if kind == KIND_NUMERIC:
        return value_rule
    if kind == KIND_DYNAMIC:
        return _dynamic_bound(key, value_rule, length_rule)
    return length_rule


def parse_directives(directives: str, kind: str, field_name: str = "") -> tuple[bool, tuple[Rule, ...]]:
    """Translate a directive string into rules.

    Args:
        directives: Comma-separated directive tokens
        kind: Field kind from ``classify``
        field_name: Used in error and log messages only

    Returns:
        (required, rules) in token order

    Raises:
        DirectiveError: if ``min``/``max`` carry a non-integer bound
    """
    required = False
    rules: list[Rule] = []

    for token in directives.split(","):
        token = token.strip()
        if not token:
            continue
        key, _, raw = token.partition("=")

        if key == "required":
            required = True
            rules.append(RequiredRule())
        elif key in ("min", "max"):
            rules.append(_bound_rule(key, _parse_int(token, raw, field_name), kind))
        elif key == "email":
            rules.append(EmailRule())
        elif key == "pattern":
            rules.append(PatternRule(raw))
        else:
            logger.warning("Ignoring unknown directive '%s' on field '%s'", token, field_name)

    return required, tuple(rules)


# =============================================================================
# Record Schema Resolution
# =============================================================================


def _type_hints(record_type: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(record_type, include_extras=True)
    except Exception:
        # Forward references that cannot be resolved; fall back to raw annotations
        logger.debug("Could not resolve type hints for %s", record_type.__name__)
        return {}


@lru_cache(maxsize=None)
def resolve_record_schema(record_type: type) -> RecordSchema:
    """Resolve the directives of a dataclass type into a RecordSchema.

    Private fields (leading underscore) are skipped. Fields without
    directives are listed with no rules so registered field rules can
    still find their declared kind.
    """
    hints = _type_hints(record_type)
    specs = []
    for f in dataclasses.fields(record_type):
        if f.name.startswith("_"):
            continue
        kind = classify(hints.get(f.name, f.type))
        directives = f.metadata.get(DIRECTIVE_KEY, "")
        required, rules = parse_directives(directives, kind, f.name)
        specs.append(FieldSpec(name=f.name, kind=kind, required=required, rules=rules))

    logger.debug("Resolved record schema for %s (%d fields)", record_type.__name__, len(specs))
    return RecordSchema(record_type=record_type, fields=tuple(specs))
