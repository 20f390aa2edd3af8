"""Template definitions: models, loading and variant activation.

Quick usage::

    from crpml.templates import TemplateLoader, resolve_active_variants

    templates = await TemplateLoader(".crpml/templates").load_all()
    template = templates["library"]
    active = resolve_active_variants(template, ["eslint"])
"""

from crpml.templates.activation import get_scripts, resolve_active_variants
from crpml.templates.loader import TemplateLoader, load_templates
from crpml.templates.models import FileMergeConfig, LoadedTemplate, Template, Variant

__all__ = [
    "FileMergeConfig",
    "LoadedTemplate",
    "Template",
    "TemplateLoader",
    "Variant",
    "get_scripts",
    "load_templates",
    "resolve_active_variants",
]
