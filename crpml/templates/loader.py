"""Template loading.

Reads every template under a ``templates/`` directory, validates each
``template.json``, checks display-name uniqueness, reads all variant files into
memory and resolves the declared merge strategies.  Any problem aborts the
whole load; there are no partial catalogs.

Layout::

    templates/
        <template-id>/
            template.json
            <variant-id>/
                <files listed by the variant>
            <custom merger modules>
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from crpml.errors import ConfigError, TemplateDefinitionError
from crpml.merge.strategies import MergeStrategy, parse_merge_method
from crpml.schemas import TEMPLATE_SCHEMA, SchemaValidator
from crpml.templates.models import LoadedTemplate, Template, Variant

logger = logging.getLogger(__name__)

TEMPLATE_FILE = "template.json"


class TemplateLoader:
    """Loads a directory of templates into :class:`LoadedTemplate` objects.

    Display names are checked across every template this loader has seen, so
    one loader should be used per run.
    """

    def __init__(self, templates_dir: str | Path) -> None:
        self.templates_dir = Path(templates_dir)
        self._validator = SchemaValidator(TEMPLATE_SCHEMA)
        self._used_display_names: set[str] = set()

    async def load_all(self) -> dict[str, LoadedTemplate]:
        """Load every template, keyed by template ID (directory name)."""
        if not self.templates_dir.is_dir():
            raise ConfigError(
                "templates directory is missing in create-rpm-library configuration"
            )

        templates: dict[str, LoadedTemplate] = {}
        for entry in sorted(self.templates_dir.iterdir(), key=lambda p: p.name):
            templates[entry.name] = await self.load(entry.name)
        return templates

    async def load(self, template_id: str) -> LoadedTemplate:
        """Load a single template by its directory name."""
        logger.debug("Loading template %s", template_id)
        template_dir = (self.templates_dir / template_id).resolve()

        if not template_dir.is_dir():
            raise TemplateDefinitionError(template_id, "not a directory")

        definition = self._read_definition(template_id, template_dir)

        if definition.display_name in self._used_display_names:
            raise TemplateDefinitionError(template_id, "duplicate display name")
        self._used_display_names.add(definition.display_name)

        variant_files: dict[str, dict[str, str]] = {}
        used_variant_names: set[str] = set()

        for variant_id, variant in definition.variants.items():
            logger.debug("Loading variant %s for template %s", variant_id, template_id)
            if variant.display_name in used_variant_names:
                raise TemplateDefinitionError(
                    template_id,
                    "the display name is already being used",
                    variant_id=variant_id,
                )
            used_variant_names.add(variant.display_name)

            variant_files[variant_id] = await self._read_variant_files(
                template_id, template_dir, variant_id, variant
            )

        strategies = self._resolve_strategies(definition, template_dir)

        return LoadedTemplate(
            **definition.model_dump(),
            id=template_id,
            directory=template_dir,
            variant_files=variant_files,
            strategies=strategies,
        )

    # -- Internals ---------------------------------------------------------

    def _read_definition(self, template_id: str, template_dir: Path) -> Template:
        config_path = template_dir / TEMPLATE_FILE
        if not config_path.is_file():
            raise TemplateDefinitionError(template_id, f"{TEMPLATE_FILE} does not exist")

        try:
            raw: Any = json.loads(config_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise TemplateDefinitionError(
                template_id, f"{TEMPLATE_FILE} is not valid JSON ({exc})"
            ) from exc

        if not self._validator.validate(raw):
            errors = self._validator.errors
            raise TemplateDefinitionError(
                template_id,
                f"invalid configuration: {', '.join(errors)}",
                errors=errors,
            )

        return Template.model_validate(raw)

    async def _read_variant_files(
        self,
        template_id: str,
        template_dir: Path,
        variant_id: str,
        variant: Variant,
    ) -> dict[str, str]:
        variant_dir = template_dir / variant_id
        if not variant_dir.exists():
            raise TemplateDefinitionError(
                template_id, "its directory does not exist", variant_id=variant_id
            )
        if not variant_dir.is_dir():
            raise TemplateDefinitionError(
                template_id, "its directory is not a directory", variant_id=variant_id
            )

        for relative in variant.files:
            if not (variant_dir / relative).is_file():
                raise TemplateDefinitionError(
                    template_id, f"the file {relative} doesn't exist", variant_id=variant_id
                )

        contents = await asyncio.gather(
            *(
                asyncio.to_thread((variant_dir / relative).read_text, encoding="utf-8")
                for relative in variant.files
            )
        )
        return dict(zip(variant.files, contents))

    def _resolve_strategies(
        self, definition: Template, template_dir: Path
    ) -> dict[str, MergeStrategy]:
        strategies: dict[str, MergeStrategy] = {}
        for path, file_config in definition.files.items():
            if file_config.merge_method is None:
                continue
            strategies[path] = parse_merge_method(path, file_config.merge_method, template_dir)
        return strategies


async def load_templates(templates_dir: str | Path) -> dict[str, LoadedTemplate]:
    """Convenience wrapper: load every template under *templates_dir*."""
    return await TemplateLoader(templates_dir).load_all()
