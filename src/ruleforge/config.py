"""Validation configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from jsonschema import (
    Draft4Validator,
    Draft6Validator,
    Draft7Validator,
    Draft201909Validator,
    Draft202012Validator,
)

# Accepted spellings for RULEFORGE_SCHEMA_DRAFT
DRAFTS: dict[str, type] = {
    "4": Draft4Validator,
    "6": Draft6Validator,
    "7": Draft7Validator,
    "2019-09": Draft201909Validator,
    "2020-12": Draft202012Validator,
}

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class ValidationConfig:
    """Schema validation settings.

    Attributes:
        schema_draft: Draft used when a schema has no ``$schema`` keyword
        builtin_formats: Pre-register the built-in format validators
        schema_dir: Directory relative schema paths are resolved against (CLI)
    """

    schema_draft: str = "2020-12"
    builtin_formats: bool = True
    schema_dir: Path | None = None

    def __post_init__(self):
        draft = self.schema_draft.lower().removeprefix("draft").lstrip("-")
        if draft not in DRAFTS:
            raise ValueError(
                f"Unsupported schema draft '{self.schema_draft}'. "
                "Available drafts: " + ", ".join(DRAFTS)
            )
        self.schema_draft = draft

    @classmethod
    def from_env(cls) -> ValidationConfig:
        """Create config from environment variables.

        - RULEFORGE_SCHEMA_DRAFT: default draft (default: 2020-12)
        - RULEFORGE_BUILTIN_FORMATS: "0"/"false"/"no"/"off" disables built-in formats
        - RULEFORGE_SCHEMA_DIR: base directory for schema files
        """
        schema_dir = os.environ.get("RULEFORGE_SCHEMA_DIR")
        builtin = os.environ.get("RULEFORGE_BUILTIN_FORMATS", "1").strip().lower()
        return cls(
            schema_draft=os.environ.get("RULEFORGE_SCHEMA_DRAFT", "2020-12"),
            builtin_formats=builtin not in _FALSE_VALUES,
            schema_dir=Path(schema_dir) if schema_dir else None,
        )

    @property
    def validator_class(self) -> type:
        return DRAFTS[self.schema_draft]

    def resolve_schema_path(self, path: Path) -> Path:
        if self.schema_dir is not None and not path.is_absolute():
            return self.schema_dir / path
        return path
