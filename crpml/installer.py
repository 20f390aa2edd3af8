"""Dependency installation for a freshly generated package."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from crpml.errors import InstallError
from crpml.utils import get_short_path_name, run_command

logger = logging.getLogger(__name__)

KNOWN_PACKAGE_MANAGERS: tuple[str, ...] = ("pnpm", "npm", "yarn")


def current_package_manager() -> str | None:
    """The package manager executable that launched us, if it can be found.

    npm, pnpm and yarn all export ``npm_execpath`` to the scripts they run.
    """
    exec_path = os.environ.get("npm_execpath")
    logger.debug("npm_execpath is %s", exec_path)
    if exec_path and Path(exec_path).exists():
        return exec_path
    return None


def package_manager_choices() -> list[tuple[str, str | None]]:
    """``(label, value)`` pairs offered to the user; ``None`` means skip installing."""
    choices: list[tuple[str, str | None]] = [(name, name) for name in KNOWN_PACKAGE_MANAGERS]
    current = current_package_manager()
    if current:
        choices.insert(0, (f"Current ({get_short_path_name(current)})", current))
    choices.append(("Don't install the dependencies for me", None))
    return choices


async def install_dependencies(package_manager: str, cwd: str | Path) -> None:
    """Run ``<package_manager> install`` in *cwd* with inherited output.

    Raises:
        InstallError: If the package manager exits with a non-zero status.
    """
    logger.debug("Installing dependencies using %s...", package_manager)
    returncode, _, _ = await run_command(
        [package_manager, "install"], cwd=cwd, timeout=None, capture=False
    )
    if returncode != 0:
        raise InstallError(package_manager, returncode)
