"""Tests for the key-value substrates."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from moodinsights.storage import JsonFileKeyValueStore, MemoryKeyValueStore


class TestMemoryKeyValueStore:
    def test_get_missing_is_none(self) -> None:
        assert MemoryKeyValueStore().get("nope") is None

    def test_values_are_copies(self) -> None:
        store = MemoryKeyValueStore()
        value = {"a": [1, 2]}
        store.set("k", value)
        value["a"].append(3)
        assert store.get("k") == {"a": [1, 2]}

    def test_rejects_unserialisable(self) -> None:
        with pytest.raises(TypeError):
            MemoryKeyValueStore().set("k", object())

    def test_keys_by_prefix(self) -> None:
        store = MemoryKeyValueStore({"mood_1": 1, "mood_2": 2, "other": 3})
        assert sorted(store.keys("mood_")) == ["mood_1", "mood_2"]

    def test_delete(self) -> None:
        store = MemoryKeyValueStore({"k": 1})
        store.delete("k")
        store.delete("k")
        assert store.get("k") is None


class TestJsonFileKeyValueStore:
    def test_persists_across_instances(self, tmp_path) -> None:
        path = str(tmp_path / "store.json")
        JsonFileKeyValueStore(path).set("k", {"v": 1})
        assert JsonFileKeyValueStore(path).get("k") == {"v": 1}

    def test_missing_file_starts_empty(self, tmp_path) -> None:
        store = JsonFileKeyValueStore(str(tmp_path / "absent.json"))
        assert list(store.keys()) == []

    def test_corrupt_file_starts_empty(self, tmp_path) -> None:
        path = tmp_path / "store.json"
        path.write_text("{not json", encoding="utf-8")
        assert JsonFileKeyValueStore(str(path)).get("k") is None

    def test_non_object_file_starts_empty(self, tmp_path) -> None:
        path = tmp_path / "store.json"
        path.write_text(json.dumps([1, 2]), encoding="utf-8")
        assert list(JsonFileKeyValueStore(str(path)).keys()) == []

    def test_failed_write_rolls_back(self, tmp_path) -> None:
        store = JsonFileKeyValueStore(str(tmp_path / "store.json"))
        store.set("k", 1)
        with patch("moodinsights.storage.os.replace", side_effect=OSError("full")):
            with pytest.raises(OSError):
                store.set("k", 2)
            with pytest.raises(OSError):
                store.set("new", 3)
        assert store.get("k") == 1
        assert store.get("new") is None
        assert not list(tmp_path.glob(".moodinsights-*.tmp"))

    def test_delete_persists(self, tmp_path) -> None:
        path = str(tmp_path / "store.json")
        store = JsonFileKeyValueStore(path)
        store.set("k", 1)
        store.delete("k")
        assert JsonFileKeyValueStore(path).get("k") is None
