"""Shared pytest fixtures for the crpml test suite.

Provides reusable fixtures for:
- On-disk ``.crpml`` workspaces with templates and variant files
- A representative "library" template definition
- Mock subprocess helpers
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest


# ---------------------------------------------------------------------------
# Workspace builders
# ---------------------------------------------------------------------------

def write_template(
    templates_dir: Path,
    template_id: str,
    definition: dict[str, Any],
    variant_files: dict[str, dict[str, str]],
    extra_files: dict[str, str] | None = None,
) -> Path:
    """Create ``templates_dir/<template_id>`` with its definition and files.

    Args:
        definition: Written verbatim as ``template.json``.
        variant_files: ``{variant_id: {relative_path: text}}``.
        extra_files: Files relative to the template directory (custom mergers).
    """
    template_dir = templates_dir / template_id
    template_dir.mkdir(parents=True)
    (template_dir / "template.json").write_text(json.dumps(definition), encoding="utf-8")

    for variant_id, files in variant_files.items():
        variant_dir = template_dir / variant_id
        variant_dir.mkdir(parents=True, exist_ok=True)
        for relative, text in files.items():
            target = variant_dir / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")

    for relative, text in (extra_files or {}).items():
        target = template_dir / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")

    return template_dir


LIBRARY_DEFINITION: dict[str, Any] = {
    "displayName": "Library",
    "description": "A TypeScript library",
    "variants": {
        "base": {
            "displayName": "Base",
            "required": True,
            "scripts": ["build"],
            "files": ["package.json", "src/index.ts", "README.md"],
        },
        "eslint": {
            "displayName": "ESLint",
            "description": "Linting with ESLint",
            "scripts": ["lint"],
            "files": ["package.json", ".eslintrc.json"],
        },
        "jest": {
            "displayName": "Jest",
            "scripts": ["test"],
            "files": ["package.json", "README.md", "src/index.test.ts"],
        },
    },
    "files": {
        "package.json": {"mergeMethod": "json"},
        "README.md": {"mergeMethod": "last"},
    },
}

LIBRARY_FILES: dict[str, dict[str, str]] = {
    "base": {
        "package.json": json.dumps({
            "main": "dist/index.js",
            "scripts": {"build": "tsc"},
            "devDependencies": {"typescript": "^5.0.0"},
        }),
        "src/index.ts": "export const answer = 42;\n",
        "README.md": "# Base readme\n",
    },
    "eslint": {
        "package.json": json.dumps({
            "scripts": {"lint": "eslint ."},
            "devDependencies": {"eslint": "^8.0.0", "@types/node": "^20.0.0"},
        }),
        ".eslintrc.json": '{"root": true}\n',
    },
    "jest": {
        "package.json": json.dumps({
            "scripts": {"test": "jest"},
            "devDependencies": {"jest": "^29.0.0"},
        }),
        "README.md": "# Jest readme\n",
        "src/index.test.ts": "test('answer', () => {});\n",
    },
}


@pytest.fixture
def make_workspace(tmp_path: Path) -> Callable[..., Path]:
    """Factory creating a ``.crpml`` workspace under ``tmp_path``.

    Usage:
        def test_something(make_workspace):
            root = make_workspace(settings={"scope": "@acme"})
    """
    def factory(
        settings: dict[str, Any] | None = None,
        templates: dict[str, tuple[dict[str, Any], dict[str, dict[str, str]]]] | None = None,
        root: Path | None = None,
    ) -> Path:
        workspace = root or (tmp_path / "workspace")
        config_dir = workspace / ".crpml"
        templates_dir = config_dir / "templates"
        templates_dir.mkdir(parents=True)
        (config_dir / "config.json").write_text(
            json.dumps(settings if settings is not None else {}), encoding="utf-8"
        )
        for template_id, (definition, files) in (templates or {}).items():
            write_template(templates_dir, template_id, definition, files)
        return workspace

    return factory


@pytest.fixture
def library_workspace(make_workspace) -> Path:
    """Workspace with the "library" template and ``outDir`` set to ``packages``."""
    return make_workspace(
        settings={"outDir": "packages"},
        templates={"library": (LIBRARY_DEFINITION, LIBRARY_FILES)},
    )


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    """An empty ``templates`` directory."""
    directory = tmp_path / "templates"
    directory.mkdir()
    return directory


# ---------------------------------------------------------------------------
# Subprocess mocks
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory
