"""Interactive questions asked before a scaffold run.

Every question can be answered up front (from command-line options); only the
missing answers are asked for, using ``rich.prompt``.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from urllib.parse import quote

from rich.console import Console
from rich.prompt import Confirm, Prompt

from crpml.config import LoadedConfig
from crpml.errors import AnswerError
from crpml.installer import package_manager_choices
from crpml.scaffold import Answers
from crpml.templates import LoadedTemplate, get_scripts, resolve_active_variants
from crpml.utils import console as default_console

NO_INSTALL = "none"

# ---------------------------------------------------------------------------
# Package name validation (rules for new npm packages)
# ---------------------------------------------------------------------------

MAX_PACKAGE_NAME_LENGTH = 214

_BLACKLISTED_NAMES = frozenset({"node_modules", "favicon.ico"})

_NODE_BUILTINS = frozenset({
    "assert", "async_hooks", "buffer", "child_process", "cluster", "console",
    "constants", "crypto", "dgram", "diagnostics_channel", "dns", "domain",
    "events", "fs", "http", "http2", "https", "inspector", "module", "net",
    "os", "path", "perf_hooks", "process", "punycode", "querystring",
    "readline", "repl", "stream", "string_decoder", "sys", "timers", "tls",
    "trace_events", "tty", "url", "util", "v8", "vm", "wasi", "worker_threads",
    "zlib",
})

_SCOPED_NAME = re.compile(r"^(?:@([^/]+?)/)?([^/]+?)$")


def validate_package_name(name: str) -> list[str]:
    """Return the reasons *name* cannot be used for a new npm package.

    An empty list means the name is valid.
    """
    errors: list[str] = []

    if not name:
        return ["name length must be greater than zero"]
    if name.startswith("."):
        errors.append("name cannot start with a period")
    if name.startswith("_"):
        errors.append("name cannot start with an underscore")
    if name.strip() != name:
        errors.append("name cannot contain leading or trailing spaces")
    if name.lower() in _BLACKLISTED_NAMES:
        errors.append(f"{name} is a blacklisted name")
    if name.lower() in _NODE_BUILTINS:
        errors.append(f"{name} is a core module name")
    if len(name) > MAX_PACKAGE_NAME_LENGTH:
        errors.append(
            f"name can no longer contain more than {MAX_PACKAGE_NAME_LENGTH} characters"
        )
    if name.lower() != name:
        errors.append("name can no longer contain capital letters")
    if re.search(r"[~'!()*]", name.split("/")[-1]):
        errors.append("name can no longer contain special characters (\"~'!()*\")")

    if quote(name, safe="~'!()*") != name:
        match = _SCOPED_NAME.match(name)
        scoped_ok = bool(
            match
            and match.group(1)
            and quote(match.group(1), safe="~'!()*") == match.group(1)
            and quote(match.group(2), safe="~'!()*") == match.group(2)
        )
        if not scoped_ok:
            errors.append("name can only contain URL-friendly characters")

    return errors


def check_package_name(config: LoadedConfig, package_name: str, cwd: Path | None = None) -> list[str]:
    """Validate the scoped name and make sure the output directory is free."""
    errors = validate_package_name(config.full_name(package_name))
    if errors:
        return errors
    if config.output_directory(package_name, cwd).exists():
        return ["Output directory already exists"]
    return []


# ---------------------------------------------------------------------------
# Individual questions
# ---------------------------------------------------------------------------


def ask_package_name(config: LoadedConfig, console: Console, cwd: Path | None = None) -> str:
    while True:
        package_name = Prompt.ask("What should the package be called?", console=console)
        errors = check_package_name(config, package_name, cwd)
        if not errors:
            return package_name
        console.print(f"[red]{', '.join(errors)}[/red]")


def ask_template(config: LoadedConfig, console: Console) -> str:
    templates = list(config.templates.values())
    if not templates:
        raise AnswerError("No templates are defined in this workspace")

    for number, template in enumerate(templates, start=1):
        console.print(f"  [bold]{number}[/bold]. {template.label}")
    choice = Prompt.ask(
        "Which template should the library be based on?",
        choices=[str(n) for n in range(1, len(templates) + 1)],
        console=console,
    )
    return templates[int(choice) - 1].id


def ask_variants(template: LoadedTemplate, console: Console) -> list[str]:
    """Ask which optional variants to apply; required ones are always on."""
    optional = [vid for vid, variant in template.variants.items() if not variant.required]

    console.print(f"Variants of [bold]{template.display_name}[/bold]:")
    for variant_id, variant in template.variants.items():
        if variant.required:
            console.print(f"   [dim]-. {variant.label} (Required)[/dim]")
        else:
            console.print(f"  [bold]{optional.index(variant_id) + 1}[/bold]. {variant.label}")

    if not optional:
        return []

    while True:
        raw = Prompt.ask(
            f"Select the variants you wish to apply to {template.display_name} "
            "(comma-separated numbers)",
            default="",
            show_default=False,
            console=console,
        )
        try:
            picked = [int(part) for part in raw.replace(" ", "").split(",") if part]
        except ValueError:
            console.print("[red]Please enter numbers separated by commas[/red]")
            continue
        if all(1 <= number <= len(optional) for number in picked):
            return list(dict.fromkeys(optional[number - 1] for number in picked))
        console.print(f"[red]Numbers must be between 1 and {len(optional)}[/red]")


def ask_package_manager(console: Console) -> str | None:
    choices = package_manager_choices()
    for number, (label, _) in enumerate(choices, start=1):
        console.print(f"  [bold]{number}[/bold]. {label}")
    choice = Prompt.ask(
        "Select the package manager to use to install the dependencies",
        choices=[str(n) for n in range(1, len(choices) + 1)],
        default="1",
        console=console,
    )
    return choices[int(choice) - 1][1]


def save_location_label(config: LoadedConfig, output_dir: Path) -> str:
    """Output directory relative to the directory containing the workspace."""
    return os.path.relpath(output_dir, config.directory.parent)


# ---------------------------------------------------------------------------
# Full question flow
# ---------------------------------------------------------------------------


def collect_answers(
    config: LoadedConfig,
    *,
    package_name: str | None = None,
    template_id: str | None = None,
    variant_ids: list[str] | None = None,
    package_manager: str | None = None,
    create_run_configurations: bool | None = None,
    assume_yes: bool = False,
    console: Console | None = None,
    cwd: Path | None = None,
) -> Answers:
    """Ask for every answer not supplied as an argument.

    ``package_manager`` may be ``"none"`` to skip installation without asking.

    Raises:
        AnswerError: If a supplied answer is invalid.
    """
    console = console or default_console

    if package_name is None:
        package_name = ask_package_name(config, console, cwd)
    else:
        errors = check_package_name(config, package_name, cwd)
        if errors:
            raise AnswerError(f"Invalid package name `{package_name}`: {', '.join(errors)}")

    if template_id is None:
        template_id = ask_template(config, console)
    if template_id not in config.templates:
        raise AnswerError(f"Unknown template `{template_id}`")
    template = config.templates[template_id]

    if variant_ids is None:
        variant_ids = ask_variants(template, console)
    active = resolve_active_variants(template, variant_ids, template_id=template_id)

    if package_manager is None:
        package_manager = ask_package_manager(console)
    elif package_manager == NO_INSTALL:
        package_manager = None

    scripts = get_scripts(template, active)
    if not scripts or not config.idea_dir.exists():
        create_run_configurations = False
    elif create_run_configurations is None:
        create_run_configurations = Confirm.ask(
            "Create JetBrains run configurations?", default=True, console=console
        )

    output_dir = config.output_directory(package_name, cwd)
    save_location_ok = assume_yes or Confirm.ask(
        f"Save to {save_location_label(config, output_dir)}?", default=True, console=console
    )

    return Answers(
        package_name=package_name,
        template_id=template_id,
        variant_ids=variant_ids,
        package_manager=package_manager,
        create_run_configurations=bool(create_run_configurations),
        save_location_ok=save_location_ok,
    )
