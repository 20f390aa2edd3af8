"""Merging of variant contributions into the final output file set."""

from crpml.merge.engine import (
    INTERNAL_VARIANT,
    PACKAGE_JSON,
    collect_contributions,
    merge_all,
    merge_file,
    sort_dependencies,
    write_output,
)
from crpml.merge.strategies import (
    CustomMerge,
    JsonMerge,
    LastMerge,
    MergedFile,
    MergeStrategy,
    ShallowJsonMerge,
    SourceContribution,
    parse_merge_method,
)

__all__ = [
    "INTERNAL_VARIANT",
    "PACKAGE_JSON",
    "CustomMerge",
    "JsonMerge",
    "LastMerge",
    "MergeStrategy",
    "MergedFile",
    "ShallowJsonMerge",
    "SourceContribution",
    "collect_contributions",
    "merge_all",
    "merge_file",
    "parse_merge_method",
    "sort_dependencies",
    "write_output",
]
