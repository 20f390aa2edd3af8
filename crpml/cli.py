"""Command-line entry point.

Usage::

    crpml
    crpml --name my-lib --template library --variant eslint --package-manager none --yes
    python -m crpml --verbose
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich.logging import RichHandler

from crpml.config import load_config
from crpml.errors import CrpmlError
from crpml.prompts import NO_INSTALL, collect_answers
from crpml.scaffold import Scaffolder, ScaffoldResult
from crpml.tree import print_tree
from crpml.utils import console, print_error, print_success, print_warning

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crpml",
        description="Create a new package from the templates of the current workspace",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  crpml\n"
            "  crpml --name my-lib --template library --variant eslint\n"
            "  crpml -n my-lib -t library --package-manager none --yes\n"
        ),
    )
    parser.add_argument("--name", "-n", default=None, help="Package name (without scope)")
    parser.add_argument("--template", "-t", default=None, help="Template ID to use")
    parser.add_argument(
        "--variant", "-V",
        action="append",
        dest="variants",
        default=None,
        help="Variant ID to apply (repeatable); required variants are always applied",
    )
    parser.add_argument(
        "--package-manager", "-p",
        default=None,
        help=f"Package manager to install dependencies with, or '{NO_INSTALL}'",
    )
    parser.add_argument(
        "--run-configs",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Create JetBrains run configurations for the package scripts",
    )
    parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Do not ask for confirmation of the save location",
    )
    parser.add_argument(
        "--cwd",
        default=None,
        help="Directory to start the workspace search from (default: current directory)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug logging")
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


async def run(args: argparse.Namespace) -> ScaffoldResult | None:
    cwd = Path(args.cwd).resolve() if args.cwd else None
    config = await load_config(cwd)

    answers = collect_answers(
        config,
        package_name=args.name,
        template_id=args.template,
        variant_ids=args.variants,
        package_manager=args.package_manager,
        create_run_configurations=args.run_configs,
        assume_yes=args.yes,
        cwd=cwd,
    )

    return await Scaffolder(config, cwd=cwd).run(answers)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``crpml`` and ``python -m crpml``."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        result = asyncio.run(run(args))
    except CrpmlError as exc:
        logger.debug("Scaffold failed", exc_info=True)
        print_error(str(exc))
        sys.exit(1)

    if result is None:
        print_warning("Cancelled, nothing was written")
        return

    console.print("\n\n[bold]Generated file tree:[/bold]")
    print_tree(result.tree_items(), console)
    print_success(f"Created {result.output_dir}")


if __name__ == "__main__":
    main()
