"""Scaffold run orchestration.

Ties the pieces together for one generated package:

1. check that the output directory does not exist yet
2. resolve the active variants
3. collect and merge every output path (nothing is written until all merges succeed)
4. write the files, then optional run configurations and dependency install
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from crpml.config import LoadedConfig
from crpml.errors import AnswerError, DestinationExistsError
from crpml.installer import install_dependencies
from crpml.merge import PACKAGE_JSON, MergedFile, collect_contributions, merge_all, write_output
from crpml.run_configs import RunConfigurationWriter
from crpml.templates import LoadedTemplate, get_scripts, resolve_active_variants
from crpml.tree import TreeItem

logger = logging.getLogger(__name__)


class Answers(BaseModel):
    """Choices made by the user (interactively or on the command line)."""

    package_name: str = Field(..., description="Unscoped package name, also the directory name")
    template_id: str
    variant_ids: list[str] = Field(default_factory=list, description="Explicitly chosen variants")
    package_manager: Optional[str] = Field(
        default=None, description="Executable to run `install` with; None skips installing"
    )
    create_run_configurations: bool = False
    save_location_ok: bool = True


class ScaffoldResult(BaseModel):
    """What a run produced."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    output_dir: Path
    template_id: str
    active_variants: list[str] = Field(default_factory=list)
    files: dict[str, MergedFile] = Field(default_factory=dict)
    scripts: list[str] = Field(default_factory=list)
    run_configurations: list[Path] = Field(default_factory=list)
    installed: bool = False

    @property
    def has_package_json(self) -> bool:
        return PACKAGE_JSON in self.files

    def tree_items(self) -> list[TreeItem]:
        """One tree item per written file, using its absolute path."""
        return [
            TreeItem.from_path((self.output_dir / path).as_posix(), merged.contributing_variants)
            for path, merged in self.files.items()
        ]


class Scaffolder:
    """Generates packages from the templates of one workspace."""

    def __init__(self, config: LoadedConfig, *, cwd: Path | None = None) -> None:
        self.config = config
        self.cwd = cwd

    def template(self, template_id: str) -> LoadedTemplate:
        try:
            return self.config.templates[template_id]
        except KeyError:
            raise AnswerError(f"Unknown template `{template_id}`") from None

    def output_directory(self, package_name: str) -> Path:
        return self.config.output_directory(package_name, self.cwd)

    def merge(self, answers: Answers) -> tuple[list[str], dict[str, MergedFile]]:
        """Resolve the active variants and merge every output path, without writing."""
        template = self.template(answers.template_id)
        active = resolve_active_variants(
            template, answers.variant_ids, template_id=template.id
        )
        contributions = collect_contributions(
            template, active, self.config.full_name(answers.package_name)
        )
        return active, merge_all(template, contributions)

    async def run(self, answers: Answers) -> ScaffoldResult | None:
        """Generate the package described by *answers*.

        Returns ``None`` without touching the disk when the user declined the
        save location.

        Raises:
            DestinationExistsError: If the output directory already exists.
            CrpmlError: For any template or merge configuration problem.
        """
        if not answers.save_location_ok:
            logger.debug("Save location declined, nothing to do")
            return None

        output_dir = self.output_directory(answers.package_name)
        if output_dir.exists():
            raise DestinationExistsError(str(output_dir))

        template = self.template(answers.template_id)
        active, files = self.merge(answers)
        await write_output(output_dir, files)

        result = ScaffoldResult(
            output_dir=output_dir,
            template_id=template.id,
            active_variants=active,
            files=files,
            scripts=get_scripts(template, active),
        )

        if answers.create_run_configurations and result.scripts:
            writer = RunConfigurationWriter(self.config.idea_dir)
            project_dir = os.path.relpath(output_dir, self.config.directory)
            result.run_configurations = await writer.write(
                answers.package_name, project_dir, result.scripts
            )

        if answers.package_manager and result.has_package_json:
            await install_dependencies(answers.package_manager, output_dir)
            result.installed = True

        return result
