"""crpml workspace configuration.

A workspace is any directory holding a ``.crpml`` directory::

    .crpml/
        config.json      # optional outDir / scope settings
        templates/       # one directory per template

Settings use Pydantic v2 models so they are validated at construction time.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from crpml.errors import ConfigError
from crpml.schemas import CONFIG_SCHEMA, SchemaValidator
from crpml.templates.loader import TemplateLoader
from crpml.templates.models import LoadedTemplate

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".crpml"
CONFIG_FILE = "config.json"
TEMPLATES_DIR = "templates"


class Settings(BaseModel):
    """The contents of ``.crpml/config.json``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    out_dir: Optional[str] = Field(
        default=None,
        alias="outDir",
        description="Where packages are placed, relative to the workspace root",
    )
    scope: Optional[str] = Field(
        default=None,
        pattern=r"^@",
        description="npm scope prepended to package names, e.g. '@acme'",
    )

    def full_name(self, package_name: str) -> str:
        """The package name including the scope, if one is configured."""
        if self.scope:
            return f"{self.scope}/{package_name}"
        return package_name

    def output_directory(
        self, workspace_root: Path, package_name: str, cwd: Path | None = None
    ) -> Path:
        """Absolute directory a package called *package_name* is written to.

        Without ``outDir`` packages land in the current directory.  The scope
        is never part of the directory name.
        """
        base = self.out_dir if self.out_dir is not None else (cwd or Path.cwd())
        return (workspace_root / base / package_name).resolve()


class LoadedConfig(BaseModel):
    """Everything discovered about the workspace for one run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    directory: Path = Field(..., description="Workspace root (parent of .crpml)")
    settings: Settings = Field(default_factory=Settings)
    templates: dict[str, LoadedTemplate] = Field(default_factory=dict)

    @property
    def idea_dir(self) -> Path:
        """JetBrains project directory of the workspace."""
        return self.directory / ".idea"

    def full_name(self, package_name: str) -> str:
        return self.settings.full_name(package_name)

    def output_directory(self, package_name: str, cwd: Path | None = None) -> Path:
        return self.settings.output_directory(self.directory, package_name, cwd)


def find_config_dir(start: str | Path | None = None) -> Path:
    """Walk up from *start* (default: the current directory) to the nearest ``.crpml``.

    Raises:
        ConfigError: If ``.crpml`` is found but is not a directory, or if no
            ancestor has one.
    """
    directory = Path(start or os.getcwd()).resolve()

    for candidate in (directory, *directory.parents):
        config_dir = candidate / CONFIG_DIR_NAME
        if config_dir.exists():
            if not config_dir.is_dir():
                raise ConfigError(f"Found .crpml that is not a directory, in {candidate}")
            return config_dir

    raise ConfigError("Could not find create-rpm-library configuration")


def read_settings(path: str | Path) -> Settings:
    """Read and validate ``config.json``.

    Raises:
        ConfigError: If the file is missing, is not JSON, or fails the schema.
    """
    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigError(f"{CONFIG_FILE} is missing in create-rpm-library configuration")

    try:
        raw: Any = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc

    validator = SchemaValidator(CONFIG_SCHEMA)
    if not validator.validate(raw):
        raise ConfigError(
            f"Invalid configuration: {', '.join(validator.errors)}",
            errors=validator.errors,
        )
    return Settings.model_validate(raw)


async def load_config(start: str | Path | None = None) -> LoadedConfig:
    """Discover the workspace and load its settings and templates."""
    config_dir = find_config_dir(start)
    logger.debug("Discovered workspace root at %s", config_dir)

    settings = read_settings(config_dir / CONFIG_FILE)
    templates = await TemplateLoader(config_dir / TEMPLATES_DIR).load_all()

    return LoadedConfig(directory=config_dir.parent, settings=settings, templates=templates)
