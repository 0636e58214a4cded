"""Tests for the Memory session backend."""

import pytest

from gitlearn.kv.memory import Memory


class TestMemoryBasic:
    def test_apply_get(self):
        m = Memory()
        m.apply({"k": b"v"})
        assert m.get("k") == b"v"

    def test_get_missing(self):
        m = Memory()
        assert m.get("nope") is None

    def test_contains(self):
        m = Memory()
        m.apply({"k": b"v"})
        assert "k" in m
        assert "nope" not in m

    def test_keys(self):
        m = Memory()
        m.apply({"a": b"1", "b": b"2"})
        assert set(m.keys()) == {"a", "b"}

    def test_get_many(self):
        m = Memory()
        m.apply({"a": b"1", "b": b"2", "c": b"3"})
        assert m.get_many("a", "c", "missing") == {"a": b"1", "c": b"3"}

    def test_clear(self):
        m = Memory()
        m.apply({"a": b"1"})
        m.clear()
        assert list(m.keys()) == []


class TestMemoryApply:
    def test_apply_merges_by_default(self):
        m = Memory()
        m.apply({"a": b"1"})
        m.apply({"b": b"2"})
        assert m.get_many("a", "b") == {"a": b"1", "b": b"2"}

    def test_apply_replace_drops_old_keys(self):
        m = Memory()
        m.apply({"a": b"1", "b": b"2"})
        m.apply({"c": b"3"}, replace=True)
        assert set(m.keys()) == {"c"}

    def test_type_error_writes_nothing(self):
        m = Memory()
        with pytest.raises(TypeError, match="Expected bytes"):
            m.apply({"a": b"1", "b": "not bytes"})  # type: ignore[dict-item]
        assert list(m.keys()) == []
