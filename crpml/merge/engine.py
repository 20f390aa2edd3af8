"""File merge engine.

Turns the files of the active variants into the final output file set:

1. ``collect_contributions`` groups every (variant, path, text) triple by
   output path, keeping variant definition order.  ``package.json`` gets a
   synthetic ``internal.node`` contribution (name + version) in front.
2. ``merge_file`` reconciles the contributions for one path using the
   strategy declared in the template.
3. ``write_output`` creates the destination directory and writes the result.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Iterator, Mapping

from crpml.errors import DestinationExistsError, MergeConfigurationError
from crpml.merge.strategies import MergedFile, SourceContribution
from crpml.merge.values import dump_json
from crpml.utils import write_file

if TYPE_CHECKING:
    from crpml.templates.models import LoadedTemplate

logger = logging.getLogger(__name__)

PACKAGE_JSON = "package.json"
INTERNAL_VARIANT = "internal.node"
INITIAL_VERSION = "0.1.0"
DEPENDENCY_KEYS: tuple[str, ...] = (
    "dependencies",
    "devDependencies",
    "peerDependencies",
    "optionalDependencies",
)

Contributions = Mapping[str, tuple[SourceContribution, ...]]


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------


def iter_contributions(
    template: LoadedTemplate, active_variants: Iterable[str]
) -> Iterator[tuple[str, SourceContribution]]:
    """Yield ``(path, contribution)`` for every file of every active variant.

    Variants are visited in template definition order, files in the order
    each variant lists them.
    """
    active = set(active_variants)
    for variant_id, files in template.variant_files.items():
        if variant_id not in active:
            continue
        for path, text in files.items():
            yield path, SourceContribution(variant=variant_id, source_text=text)


def package_seed(package_name: str) -> SourceContribution:
    """The synthetic first contribution every ``package.json`` receives."""
    return SourceContribution(
        variant=INTERNAL_VARIANT,
        source_text=json.dumps({"name": package_name, "version": INITIAL_VERSION}),
    )


def collect_contributions(
    template: LoadedTemplate, active_variants: Iterable[str], package_name: str
) -> dict[str, tuple[SourceContribution, ...]]:
    """Group contributions by output path, preserving first-seen path order.

    ``package.json`` is always present and always comes first, seeded with
    the package name and initial version even when no variant supplies it.
    """
    grouped: dict[str, list[SourceContribution]] = {PACKAGE_JSON: [package_seed(package_name)]}
    for path, contribution in iter_contributions(template, active_variants):
        grouped.setdefault(path, []).append(contribution)

    return {path: tuple(sources) for path, sources in grouped.items()}


# ---------------------------------------------------------------------------
# Merging
# ---------------------------------------------------------------------------


def merge_file(
    template: LoadedTemplate, path: str, sources: tuple[SourceContribution, ...]
) -> MergedFile:
    """Merge the contributions for a single output path.

    A single contribution is passed through verbatim without looking at the
    template's merge configuration.

    Raises:
        MergeConfigurationError: If several variants contribute *path* and the
            template declares no merge method for it.
    """
    if not sources:
        raise RuntimeError(f"No sources were collected for {path}")

    if len(sources) == 1:
        return MergedFile(
            source_text=sources[0].source_text,
            contributing_variants=[sources[0].variant],
        )

    strategy = template.strategies.get(path)
    if strategy is None:
        raise MergeConfigurationError(path, f"Missing merge method for `{path}`")

    logger.debug("Merging %d sources for %s using %s", len(sources), path, strategy.method)
    return strategy.merge(path, sources)


def sort_dependencies(source_text: str) -> str:
    """Re-serialise a ``package.json`` with each dependency map sorted by name."""
    try:
        manifest = json.loads(source_text)
    except json.JSONDecodeError as exc:
        raise MergeConfigurationError(
            PACKAGE_JSON, f"The merged `{PACKAGE_JSON}` is not valid JSON ({exc})"
        ) from exc
    if not isinstance(manifest, dict):
        raise MergeConfigurationError(
            PACKAGE_JSON, f"The merged `{PACKAGE_JSON}` is not a JSON object"
        )
    for key in DEPENDENCY_KEYS:
        dependencies = manifest.get(key)
        if isinstance(dependencies, dict):
            manifest[key] = {name: dependencies[name] for name in sorted(dependencies)}
    return dump_json(manifest)


def merge_all(template: LoadedTemplate, contributions: Contributions) -> dict[str, MergedFile]:
    """Merge every collected path, in collection order."""
    merged: dict[str, MergedFile] = {}
    for path, sources in contributions.items():
        result = merge_file(template, path, sources)
        if path == PACKAGE_JSON:
            result = result.model_copy(
                update={"source_text": sort_dependencies(result.source_text)}
            )
        merged[path] = result
    return merged


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


async def write_output(output_dir: str | Path, files: Mapping[str, MergedFile]) -> list[Path]:
    """Create *output_dir* and write every merged file beneath it.

    Writes are not transactional: a failure part-way through leaves the files
    written so far in place.

    Raises:
        DestinationExistsError: If *output_dir* already exists; nothing is written.
    """
    root = Path(output_dir)
    if root.exists():
        raise DestinationExistsError(str(root))

    logger.debug("Creating output directory %s", root)
    await asyncio.to_thread(root.mkdir, parents=True)

    written: list[Path] = []
    for path, merged in files.items():
        target = root / path
        logger.debug("Creating %s", path)
        await asyncio.to_thread(write_file, target, merged.source_text)
        written.append(target)
    return written
