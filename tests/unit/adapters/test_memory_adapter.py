"""Tests for adapters/memory.py and the StorageAdapter protocol."""

from __future__ import annotations

import pytest

from leakybucket.adapters import LocalAdapter, MemoryAdapter, RedisAdapter, SQLAdapter, StorageAdapter
from leakybucket.errors import AdapterError, BucketNotFoundError


class TestProtocol:
    @pytest.mark.parametrize("cls", [MemoryAdapter, LocalAdapter, SQLAdapter, RedisAdapter])
    def test_shipped_adapters_define_contract(self, cls):
        for method in ("exists", "save", "read", "delete"):
            assert callable(getattr(cls, method))

    def test_memory_adapter_is_storage_adapter(self):
        assert isinstance(MemoryAdapter(), StorageAdapter)

    def test_plain_object_is_not(self):
        assert not isinstance(object(), StorageAdapter)


class TestMemoryAdapter:
    def test_save_read_exists(self):
        adapter = MemoryAdapter()
        assert adapter.exists("a") is False
        adapter.save("a", "payload")
        assert adapter.exists("a") is True
        assert adapter.read("a") == "payload"

    def test_save_overwrites(self):
        adapter = MemoryAdapter()
        adapter.save("a", "one")
        adapter.save("a", "two")
        assert adapter.read("a") == "two"

    def test_uses_supplied_mapping(self):
        records = {"pre": "x"}
        adapter = MemoryAdapter(records)
        adapter.save("b", "y")
        assert records == {"pre": "x", "b": "y"}

    def test_read_missing(self):
        with pytest.raises(BucketNotFoundError) as exc_info:
            MemoryAdapter().read("ghost")
        assert exc_info.value.context == {"bucket_id": "ghost", "operation": "read", "adapter": "memory"}

    def test_delete(self):
        adapter = MemoryAdapter({"a": "x"})
        adapter.delete("a")
        assert adapter.exists("a") is False

    def test_delete_missing(self):
        with pytest.raises(AdapterError):
            MemoryAdapter().delete("ghost")
