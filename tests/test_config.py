"""Tests for ValidationConfig."""

from pathlib import Path

import pytest
from jsonschema import Draft7Validator, Draft202012Validator

from ruleforge.config import ValidationConfig


class TestValidationConfig:
    def test_defaults(self):
        config = ValidationConfig()
        assert config.schema_draft == "2020-12"
        assert config.builtin_formats is True
        assert config.schema_dir is None
        assert config.validator_class is Draft202012Validator

    @pytest.mark.parametrize("spelling", ["7", "draft7", "Draft-7", "DRAFT7"])
    def test_draft_spellings(self, spelling):
        assert ValidationConfig(schema_draft=spelling).validator_class is Draft7Validator

    def test_unknown_draft_rejected(self):
        with pytest.raises(ValueError, match="Unsupported schema draft"):
            ValidationConfig(schema_draft="2030-01")

    def test_resolve_schema_path(self, tmp_path):
        config = ValidationConfig(schema_dir=tmp_path)
        assert config.resolve_schema_path(Path("a.json")) == tmp_path / "a.json"
        absolute = tmp_path / "b.json"
        assert config.resolve_schema_path(absolute) == absolute
        assert ValidationConfig().resolve_schema_path(Path("a.json")) == Path("a.json")


class TestFromEnv:
    def test_from_env_defaults(self, monkeypatch):
        for name in ("RULEFORGE_SCHEMA_DRAFT", "RULEFORGE_BUILTIN_FORMATS", "RULEFORGE_SCHEMA_DIR"):
            monkeypatch.delenv(name, raising=False)
        config = ValidationConfig.from_env()
        assert config == ValidationConfig()

    def test_from_env_values(self, monkeypatch, tmp_path):
        monkeypatch.setenv("RULEFORGE_SCHEMA_DRAFT", "2019-09")
        monkeypatch.setenv("RULEFORGE_BUILTIN_FORMATS", "false")
        monkeypatch.setenv("RULEFORGE_SCHEMA_DIR", str(tmp_path))
        config = ValidationConfig.from_env()
        assert config.schema_draft == "2019-09"
        assert config.builtin_formats is False
        assert config.schema_dir == tmp_path

    @pytest.mark.parametrize("value", ["1", "true", "yes", "on", ""])
    def test_builtin_formats_enabled(self, monkeypatch, value):
        monkeypatch.setenv("RULEFORGE_BUILTIN_FORMATS", value)
        assert ValidationConfig.from_env().builtin_formats is True
