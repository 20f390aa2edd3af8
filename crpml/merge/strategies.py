"""Merge strategies for output paths with more than one contributing variant.

A template's ``files`` section names a ``mergeMethod`` per output path.  Each
method string is turned into a :class:`MergeStrategy` once, when the template
is loaded, so that a broken custom merger is reported before any prompt is
shown.
"""

from __future__ import annotations

import hashlib
import importlib.util
import json
import logging
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Sequence

from pydantic import BaseModel, ConfigDict, Field

from crpml.errors import CustomMergerError, MergeConfigurationError
from crpml.merge.values import deep_merge_all, dump_json, kind_of, shallow_merge_all, ValueKind
from crpml.schemas import CUSTOM_RESULT_SCHEMA, SchemaValidator

logger = logging.getLogger(__name__)

CUSTOM_PREFIX = "custom:"
CUSTOM_MERGER_FUNCTION = "merge"


# ---------------------------------------------------------------------------
# Contributions and results
# ---------------------------------------------------------------------------


class SourceContribution(BaseModel):
    """One variant's raw text for one output path."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    variant: str = Field(..., description="Variant ID that supplied the text")
    source_text: str = Field(..., alias="sourceText", description="Raw file contents")


class MergedFile(BaseModel):
    """Final text for one output path plus the variants credited for it."""

    model_config = ConfigDict(populate_by_name=True)

    source_text: str = Field(..., alias="sourceText")
    contributing_variants: list[str] = Field(
        default_factory=list, alias="contributingVariants"
    )


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


class MergeStrategy(ABC):
    """Reconciles two or more contributions for a single output path."""

    method: str = ""

    @abstractmethod
    def merge(self, path: str, sources: Sequence[SourceContribution]) -> MergedFile:
        """Merge *sources* (in contribution order) into one file."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.method!r})"


class JsonMerge(MergeStrategy):
    """Recursive merge of JSON documents; later sources win on conflicts."""

    method = "json"

    def merge(self, path: str, sources: Sequence[SourceContribution]) -> MergedFile:
        values = [_parse_json(path, source) for source in sources]
        return MergedFile(
            source_text=dump_json(deep_merge_all(values)),
            contributing_variants=[source.variant for source in sources],
        )


class ShallowJsonMerge(MergeStrategy):
    """Top-level key union of JSON objects; nested values are replaced wholesale."""

    method = "json-shallow"

    def merge(self, path: str, sources: Sequence[SourceContribution]) -> MergedFile:
        objects = []
        for source in sources:
            value = _parse_json(path, source)
            if kind_of(value) is not ValueKind.OBJECT:
                raise MergeConfigurationError(
                    path,
                    f"Cannot shallow-merge `{path}`: the source from variant "
                    f"`{source.variant}` is not a JSON object",
                )
            objects.append(value)
        return MergedFile(
            source_text=dump_json(shallow_merge_all(objects)),
            contributing_variants=[source.variant for source in sources],
        )


class LastMerge(MergeStrategy):
    """Keeps only the final contribution."""

    method = "last"

    def merge(self, path: str, sources: Sequence[SourceContribution]) -> MergedFile:
        source = sources[-1]
        return MergedFile(
            source_text=source.source_text,
            contributing_variants=[source.variant],
        )


class CustomMerge(MergeStrategy):
    """Delegates to a ``merge`` function loaded from the template directory.

    The function receives a list of ``{"variant": ..., "sourceText": ...}``
    dicts and returns either the merged text, or a dict with ``sourceText`` and
    ``contributingVariants``.  Exceptions raised by the function propagate
    unchanged.
    """

    def __init__(self, reference: str, function: Callable[[list[dict[str, str]]], Any]) -> None:
        self.reference = reference
        self.function = function
        self.method = f"{CUSTOM_PREFIX}{reference}"
        self._validator = SchemaValidator(CUSTOM_RESULT_SCHEMA)

    def merge(self, path: str, sources: Sequence[SourceContribution]) -> MergedFile:
        payload = [source.model_dump(by_alias=True) for source in sources]
        logger.debug("Calling custom merger %s for %s", self.reference, path)
        result = self.function(payload)

        if not self._validator.validate(result):
            errors = self._validator.errors
            raise CustomMergerError(
                self.reference,
                f"invalid result: {', '.join(errors)}",
                path=path,
                errors=errors,
            )

        if isinstance(result, str):
            return MergedFile(
                source_text=result,
                contributing_variants=[source.variant for source in sources],
            )
        # Attribution is taken as declared, even when it names a subset.
        return MergedFile(
            source_text=result["sourceText"],
            contributing_variants=list(result["contributingVariants"]),
        )


# ---------------------------------------------------------------------------
# Method parsing
# ---------------------------------------------------------------------------

_BUILTIN_STRATEGIES: dict[str, type[MergeStrategy]] = {
    JsonMerge.method: JsonMerge,
    ShallowJsonMerge.method: ShallowJsonMerge,
    LastMerge.method: LastMerge,
}


def parse_merge_method(path: str, method: str, template_dir: Path) -> MergeStrategy:
    """Turn a ``mergeMethod`` string into a ready-to-use strategy.

    Args:
        path: Output path the method is declared for (used in messages).
        method: ``json``, ``json-shallow``, ``last`` or ``custom:<reference>``.
        template_dir: Directory custom merger references are relative to.

    Raises:
        MergeConfigurationError: If the method string is not recognised.
        CustomMergerError: If a custom merger cannot be loaded.
    """
    builtin = _BUILTIN_STRATEGIES.get(method)
    if builtin is not None:
        return builtin()

    if method.startswith(CUSTOM_PREFIX) and len(method) > len(CUSTOM_PREFIX):
        reference = method[len(CUSTOM_PREFIX):]
        return CustomMerge(reference, load_custom_merger(reference, template_dir, path=path))

    raise MergeConfigurationError(path, f"Invalid merge method `{method}` for `{path}`")


def load_custom_merger(
    reference: str, template_dir: Path, *, path: str = ""
) -> Callable[[list[dict[str, str]]], Any]:
    """Import the module at *reference* and return its ``merge`` callable.

    A reference without a suffix is looked up as ``<reference>.py``.
    """
    module_path = (template_dir / reference).resolve()
    if not module_path.suffix:
        module_path = module_path.with_suffix(".py")
    if not module_path.is_file():
        raise CustomMergerError(reference, f"{module_path} does not exist", path=path)

    digest = hashlib.sha1(str(module_path).encode("utf-8")).hexdigest()[:12]
    module_name = f"_crpml_merger_{module_path.stem}_{digest}"
    spec = importlib.util.spec_from_file_location(module_name, module_path)
    if spec is None or spec.loader is None:
        raise CustomMergerError(reference, f"{module_path} cannot be imported", path=path)

    logger.debug("Loading custom merger %s", module_path)
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)

    function = getattr(module, CUSTOM_MERGER_FUNCTION, None)
    if not callable(function):
        raise CustomMergerError(
            reference,
            f"`{CUSTOM_MERGER_FUNCTION}` is not a function",
            path=path,
        )
    return function


def _parse_json(path: str, source: SourceContribution) -> Any:
    try:
        return json.loads(source.source_text)
    except json.JSONDecodeError as exc:
        raise MergeConfigurationError(
            path,
            f"Cannot merge `{path}`: the source from variant `{source.variant}` "
            f"is not valid JSON ({exc})",
        ) from exc
