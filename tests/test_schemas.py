"""Tests for the JSON Schema contracts (crpml.schemas)."""

from __future__ import annotations

import copy

import pytest

from crpml.schemas import (
    CONFIG_SCHEMA,
    CUSTOM_RESULT_SCHEMA,
    TEMPLATE_SCHEMA,
    SchemaValidator,
    validate,
)

from tests.conftest import LIBRARY_DEFINITION

pytestmark = pytest.mark.unit


class TestTemplateSchema:
    def test_library_definition_is_valid(self):
        validator = SchemaValidator(TEMPLATE_SCHEMA)
        assert validator.validate(LIBRARY_DEFINITION) is True
        assert validator.errors == []

    def test_missing_display_name(self):
        definition = copy.deepcopy(LIBRARY_DEFINITION)
        del definition["displayName"]
        ok, errors = validate(TEMPLATE_SCHEMA, definition)
        assert ok is False
        assert any("'displayName' is a required property" in e for e in errors)

    def test_no_variants_rejected(self):
        ok, errors = validate(TEMPLATE_SCHEMA, {"displayName": "Empty", "variants": {}})
        assert ok is False
        assert errors[0].startswith("variants:")

    def test_variant_without_files_rejected(self):
        definition = {"displayName": "T", "variants": {"a": {"displayName": "A"}}}
        ok, errors = validate(TEMPLATE_SCHEMA, definition)
        assert ok is False
        assert errors == ["variants.a: 'files' is a required property"]

    def test_variant_with_empty_files_rejected(self):
        definition = {"displayName": "T", "variants": {"a": {"displayName": "A", "files": []}}}
        ok, _ = validate(TEMPLATE_SCHEMA, definition)
        assert ok is False

    def test_every_violation_reported(self):
        definition = {
            "displayName": 3,
            "variants": {"a": {"displayName": "A", "files": ["x"], "required": "yes"}},
        }
        ok, errors = validate(TEMPLATE_SCHEMA, definition)
        assert ok is False
        assert len(errors) == 2
        assert errors[0].startswith("displayName:")
        assert errors[1].startswith("variants.a.required:")

    @pytest.mark.parametrize("method", ["json", "json-shallow", "last", "custom:mergers/readme.py"])
    def test_known_merge_methods(self, method: str):
        definition = copy.deepcopy(LIBRARY_DEFINITION)
        definition["files"]["README.md"] = {"mergeMethod": method}
        assert validate(TEMPLATE_SCHEMA, definition)[0] is True

    @pytest.mark.parametrize("method", ["yaml", "custom:", "JSON", 1])
    def test_unknown_merge_methods(self, method):
        definition = copy.deepcopy(LIBRARY_DEFINITION)
        definition["files"]["README.md"] = {"mergeMethod": method}
        ok, errors = validate(TEMPLATE_SCHEMA, definition)
        assert ok is False
        assert errors[0].startswith("files.README.md.mergeMethod:")

    def test_file_config_without_method_is_valid(self):
        definition = copy.deepcopy(LIBRARY_DEFINITION)
        definition["files"]["src/index.ts"] = {}
        assert validate(TEMPLATE_SCHEMA, definition)[0] is True


class TestCustomResultSchema:
    def test_plain_string(self):
        assert validate(CUSTOM_RESULT_SCHEMA, "merged")[0] is True

    def test_object_result(self):
        result = {"sourceText": "merged", "contributingVariants": ["a"]}
        assert validate(CUSTOM_RESULT_SCHEMA, result)[0] is True

    @pytest.mark.parametrize(
        "result",
        [
            None,
            42,
            ["a"],
            {"sourceText": "merged"},
            {"contributingVariants": ["a"]},
            {"sourceText": 1, "contributingVariants": ["a"]},
            {"sourceText": "merged", "contributingVariants": [1]},
        ],
    )
    def test_malformed_results(self, result):
        validator = SchemaValidator(CUSTOM_RESULT_SCHEMA)
        assert validator.validate(result) is False
        assert validator.errors


class TestConfigSchema:
    def test_empty_config(self):
        assert validate(CONFIG_SCHEMA, {})[0] is True

    def test_scope_must_start_with_at(self):
        ok, errors = validate(CONFIG_SCHEMA, {"scope": "acme"})
        assert ok is False
        assert errors[0].startswith("scope:")

    def test_out_dir_must_be_string(self):
        assert validate(CONFIG_SCHEMA, {"outDir": 5})[0] is False


class TestSchemaValidator:
    def test_errors_reset_between_runs(self):
        validator = SchemaValidator(CONFIG_SCHEMA)
        assert validator.validate({"scope": "bad"}) is False
        assert validator.errors
        assert validator.validate({"scope": "@good"}) is True
        assert validator.errors == []

    def test_root_errors_labelled(self):
        validator = SchemaValidator(CONFIG_SCHEMA)
        validator.validate("not an object")
        assert validator.errors[0].startswith("(root):")
