"""JetBrains run configurations for the scripts of a generated package.

Renders ``assets/run_configuration.xml.j2`` once per script into
``<workspace>/.idea/runConfigurations/``.
"""

from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path
from typing import Any, Iterable

from jinja2 import Environment, FileSystemLoader, select_autoescape

from crpml.utils import write_file

logger = logging.getLogger(__name__)

_DEFAULT_ASSET_DIR = Path(__file__).parent / "assets"
RUN_CONFIGURATION_TEMPLATE = "run_configuration.xml.j2"


def run_configuration_name(package_name: str, script: str) -> str:
    """Display name of the run configuration for *script*."""
    return f"{package_name}:{script}"


def run_configuration_filename(name: str) -> str:
    """File name for a run configuration: every non-alphanumeric run becomes ``_``."""
    return re.sub(r"[^a-zA-Z0-9]+", "_", name) + ".xml"


class RunConfigurationWriter:
    """Writes npm run configurations into a workspace's ``.idea`` directory."""

    def __init__(self, idea_dir: str | Path, asset_dir: str | Path | None = None) -> None:
        self.idea_dir = Path(idea_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(asset_dir or _DEFAULT_ASSET_DIR)),
            autoescape=select_autoescape(["xml", "xml.j2"]),
            keep_trailing_newline=False,
        )

    @property
    def output_dir(self) -> Path:
        return self.idea_dir / "runConfigurations"

    def render(self, context: dict[str, Any]) -> str:
        """Render the run configuration XML for one script."""
        template = self.env.get_template(RUN_CONFIGURATION_TEMPLATE)
        return template.render(**context)

    async def write(
        self, package_name: str, project_dir: str, scripts: Iterable[str]
    ) -> list[Path]:
        """Write one configuration per script.

        Args:
            package_name: Unscoped package name, used in configuration names.
            project_dir: Package directory relative to the workspace root.
            scripts: Script names from the package's ``package.json``.

        Returns:
            The written file paths.
        """
        written: list[Path] = []
        for script in scripts:
            logger.debug("Creating JetBrains run configuration for %s", script)
            name = run_configuration_name(package_name, script)
            content = self.render(
                {"name": name, "project_dir": Path(project_dir).as_posix(), "script": script}
            )
            path = self.output_dir / run_configuration_filename(name)
            await asyncio.to_thread(write_file, path, content)
            written.append(path)
        return written
