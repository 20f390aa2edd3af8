"""JSON Schema contracts and validation for crpml documents.

Provides:
- CONFIG_SCHEMA: ``.crpml/config.json`` workspace settings
- TEMPLATE_SCHEMA: per-template ``template.json`` definitions
- CUSTOM_RESULT_SCHEMA: the value a custom merger may return
- SchemaValidator: ``validate(value) -> bool`` with an ``errors`` accessor
"""

from __future__ import annotations

from typing import Any

import jsonschema


# --- Workspace configuration ---

CONFIG_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "crpml workspace configuration",
    "type": "object",
    "properties": {
        "outDir": {
            "type": "string",
            "description": "The directory that any packages will be placed in, relative to the workspace root",
        },
        "scope": {
            "type": "string",
            "description": "The scope of any packages. This value is not included in the output directory.",
            "pattern": "^@",
        },
    },
}


# --- Template definition ---

_MERGE_METHOD_SCHEMA: dict[str, Any] = {
    "description": "Specifies how to merge multiple versions of the file from each variant",
    "oneOf": [
        {
            "type": "string",
            "const": "json",
            "description": "Deeply merges the files, assuming they are JSON",
        },
        {
            "type": "string",
            "const": "json-shallow",
            "description": "Shallowly merges the files, assuming they are JSON",
        },
        {
            "type": "string",
            "const": "last",
            "description": "Uses the last version of the file",
        },
        {
            "type": "string",
            "pattern": "^custom:.+",
            "description": "Uses a Python module, relative to the template directory, whose "
            "`merge` function receives every source and returns the output text",
        },
    ],
}

_VARIANT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["displayName", "files"],
    "properties": {
        "displayName": {
            "type": "string",
            "description": "The name that this variant will be given in the CLI",
        },
        "description": {
            "type": "string",
            "description": "A short description to display beside the display name",
        },
        "required": {
            "type": "boolean",
            "description": "If this value is `true`, the user will not be able to disable this variant",
        },
        "scripts": {
            "type": "array",
            "items": {"type": "string"},
            "description": "A list of scripts that this variant adds to the package.json",
        },
        "files": {
            "type": "array",
            "items": {"type": "string"},
            "minItems": 1,
            "description": "Files to copy, relative to this variant's directory",
        },
    },
}

TEMPLATE_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "crpml template",
    "type": "object",
    "required": ["displayName", "variants"],
    "properties": {
        "displayName": {
            "type": "string",
            "description": "The name that this template will be given in the CLI",
        },
        "description": {
            "type": "string",
            "description": "A short description to display beside the display name",
        },
        "variants": {
            "type": "object",
            "minProperties": 1,
            "additionalProperties": _VARIANT_SCHEMA,
            "description": "Any variants that the user can pick from to build the package",
        },
        "files": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "properties": {"mergeMethod": _MERGE_METHOD_SCHEMA},
            },
            "description": "Configuration for each output file",
        },
    },
}


# --- Custom merger result ---

CUSTOM_RESULT_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "crpml custom merger result",
    "anyOf": [
        {"type": "string"},
        {
            "type": "object",
            "required": ["sourceText", "contributingVariants"],
            "properties": {
                "sourceText": {"type": "string"},
                "contributingVariants": {
                    "type": "array",
                    "items": {"type": "string"},
                },
            },
        },
    ],
}


class SchemaValidator:
    """Checks values against one fixed schema and keeps the last run's messages.

    The messages are prefixed with the dotted location of the offending value,
    or ``(root)`` for the document itself.
    """

    def __init__(self, schema: dict[str, Any]) -> None:
        jsonschema.Draft7Validator.check_schema(schema)
        self.schema = schema
        self._validator = jsonschema.Draft7Validator(schema)
        self._errors: list[str] = []

    @property
    def errors(self) -> list[str]:
        """Messages from the most recent :meth:`validate` call."""
        return list(self._errors)

    def validate(self, value: Any) -> bool:
        raw_errors = sorted(
            self._validator.iter_errors(value), key=lambda e: [str(p) for p in e.absolute_path]
        )
        self._errors = [_format_error(err) for err in raw_errors]
        return not self._errors


def validate(schema: dict[str, Any], value: Any) -> tuple[bool, list[str]]:
    """One-shot validation returning ``(is_valid, messages)``."""
    validator = SchemaValidator(schema)
    return validator.validate(value), validator.errors


def _format_error(err: jsonschema.ValidationError) -> str:
    path = ".".join(str(p) for p in err.absolute_path) if err.absolute_path else "(root)"
    return f"{path}: {err.message}"
