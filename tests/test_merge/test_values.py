"""Tests for JSON value merging (crpml.merge.values)."""

from __future__ import annotations

import pytest

from crpml.merge.values import (
    ValueKind,
    deep_merge,
    deep_merge_all,
    dump_json,
    kind_of,
    shallow_merge_all,
)

pytestmark = pytest.mark.unit


class TestKindOf:
    @pytest.mark.parametrize(
        "value, kind",
        [
            ({}, ValueKind.OBJECT),
            ([], ValueKind.ARRAY),
            ("x", ValueKind.SCALAR),
            (1, ValueKind.SCALAR),
            (None, ValueKind.SCALAR),
            (True, ValueKind.SCALAR),
        ],
    )
    def test_kinds(self, value, kind):
        assert kind_of(value) is kind


class TestDeepMerge:
    def test_nested_objects_combined(self):
        assert deep_merge({"a": {"x": 1}}, {"a": {"y": 2}}) == {"a": {"x": 1, "y": 2}}

    def test_conflicting_leaf_later_wins(self):
        assert deep_merge({"a": 1}, {"a": 2}) == {"a": 2}

    def test_arrays_replaced(self):
        assert deep_merge({"files": ["a", "b"]}, {"files": ["c"]}) == {"files": ["c"]}

    def test_object_replaced_by_scalar(self):
        assert deep_merge({"a": {"x": 1}}, {"a": None}) == {"a": None}

    def test_scalar_replaced_by_object(self):
        assert deep_merge({"a": 1}, {"a": {"x": 1}}) == {"a": {"x": 1}}

    def test_inputs_not_modified(self):
        base = {"a": {"x": [1]}}
        override = {"a": {"y": [2]}}
        merged = deep_merge(base, override)
        merged["a"]["x"].append(3)
        merged["a"]["y"].append(4)
        assert base == {"a": {"x": [1]}}
        assert override == {"a": {"y": [2]}}

    def test_key_order_first_seen(self):
        merged = deep_merge({"b": 1, "a": 1}, {"c": 1, "b": 2})
        assert list(merged) == ["b", "a", "c"]

    def test_fold_over_many(self):
        merged = deep_merge_all([
            {"scripts": {"build": "tsc"}},
            {"scripts": {"lint": "eslint"}},
            {"scripts": {"build": "tsup"}},
        ])
        assert merged == {"scripts": {"build": "tsup", "lint": "eslint"}}

    def test_fold_is_associative_on_disjoint_keys(self):
        a, b, c = {"a": {"x": 1}}, {"a": {"y": 2}}, {"a": {"z": 3}}
        assert deep_merge(deep_merge(a, b), c) == deep_merge(a, deep_merge(b, c))


class TestShallowMerge:
    def test_nested_object_replaced_wholesale(self):
        assert shallow_merge_all([{"a": {"x": 1}}, {"a": {"y": 2}}]) == {"a": {"y": 2}}

    def test_union_of_keys(self):
        assert shallow_merge_all([{"a": 1}, {"b": 2}, {"a": 3}]) == {"a": 3, "b": 2}


class TestDumpJson:
    def test_two_space_indent(self):
        assert dump_json({"a": {"b": 1}}) == '{\n  "a": {\n    "b": 1\n  }\n}'

    def test_unicode_kept(self):
        assert dump_json({"author": "Zoë"}) == '{\n  "author": "Zoë"\n}'
