"""Variant activation: which variants take part in a run."""

from __future__ import annotations

from typing import Iterable

from crpml.errors import TemplateDefinitionError
from crpml.templates.models import Template


def resolve_active_variants(
    template: Template, chosen: Iterable[str], *, template_id: str = ""
) -> list[str]:
    """Return the chosen variant IDs followed by every required variant.

    The result is de-duplicated and keeps first-seen order, so a required
    variant the user also picked stays where the user put it.

    Raises:
        TemplateDefinitionError: If a chosen ID is not defined by the template.
    """
    active: list[str] = []
    for variant_id in [*chosen, *template.required_variants]:
        if variant_id not in template.variants:
            raise TemplateDefinitionError(
                template_id or template.display_name,
                "it is not defined by the template",
                variant_id=variant_id,
            )
        if variant_id not in active:
            active.append(variant_id)
    return active


def variants_in_definition_order(template: Template, active: Iterable[str]) -> list[str]:
    """Filter the template's variant IDs down to *active*, in template order."""
    wanted = set(active)
    return [variant_id for variant_id in template.variants if variant_id in wanted]


def get_scripts(template: Template, active: Iterable[str]) -> list[str]:
    """Scripts contributed by the active variants, flattened in template order."""
    return [
        script
        for variant_id in variants_in_definition_order(template, active)
        for script in template.variants[variant_id].scripts
    ]
