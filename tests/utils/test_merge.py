# tests/utils/test_merge.py
"""Tests for deep_merge()."""

from provider_resolver.utils.merge import deep_merge


class TestDeepMerge:
    def test_later_values_win(self):
        assert deep_merge({"a": 1, "b": 2}, {"b": 3}) == {"a": 1, "b": 3}

    def test_nested_mappings_merge(self):
        base = {"headers": {"X-Title": "app", "A": "1"}}
        override = {"headers": {"A": "2"}}
        assert deep_merge(base, override) == {"headers": {"X-Title": "app", "A": "2"}}

    def test_lists_are_replaced(self):
        assert deep_merge({"x": [1, 2]}, {"x": [3]}) == {"x": [3]}

    def test_inputs_not_mutated(self):
        base = {"headers": {"A": "1"}}
        deep_merge(base, {"headers": {"B": "2"}})
        assert base == {"headers": {"A": "1"}}

    def test_multiple_overrides(self):
        assert deep_merge({"a": 1}, {"b": 2}, {"a": 3}) == {"a": 3, "b": 2}
