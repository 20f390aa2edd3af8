"""Pydantic v2 models for template definitions.

``template.json`` is validated against :data:`crpml.schemas.TEMPLATE_SCHEMA`
first; these models then give the rest of the code typed, read-only access to
the same document.  Field aliases follow the camelCase keys used on disk.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from crpml.merge.strategies import MergeStrategy


class Variant(BaseModel):
    """A slice of a template contributing a fixed list of files."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    display_name: str = Field(..., alias="displayName")
    description: Optional[str] = Field(default=None)
    required: bool = Field(default=False, description="Always active, cannot be deselected")
    scripts: list[str] = Field(default_factory=list, description="package.json scripts it adds")
    files: list[str] = Field(..., min_length=1, description="Paths relative to the variant directory")

    @property
    def label(self) -> str:
        """Display name with the description appended, as shown in prompts."""
        if self.description:
            return f"{self.display_name} - {self.description}"
        return self.display_name


class FileMergeConfig(BaseModel):
    """Per-output-path settings."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    merge_method: Optional[str] = Field(default=None, alias="mergeMethod")


class Template(BaseModel):
    """The contents of one ``template.json``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    display_name: str = Field(..., alias="displayName")
    description: Optional[str] = Field(default=None)
    variants: dict[str, Variant] = Field(..., min_length=1)
    files: dict[str, FileMergeConfig] = Field(default_factory=dict)

    @property
    def label(self) -> str:
        if self.description:
            return f"{self.display_name} - {self.description}"
        return self.display_name

    @property
    def required_variants(self) -> list[str]:
        """IDs of variants flagged ``required``, in definition order."""
        return [variant_id for variant_id, variant in self.variants.items() if variant.required]


class LoadedTemplate(Template):
    """A validated template with every variant file read into memory.

    Attributes:
        id: Name of the template's directory.
        directory: Absolute path of the template's directory.
        variant_files: ``{variant_id: {relative_path: text}}``, in declaration order.
        strategies: Ready merge strategies keyed by output path.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, arbitrary_types_allowed=True)

    id: str
    directory: Path
    variant_files: dict[str, dict[str, str]] = Field(default_factory=dict)
    strategies: dict[str, MergeStrategy] = Field(default_factory=dict)
