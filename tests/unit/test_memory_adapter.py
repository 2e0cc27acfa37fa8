"""Test the in-memory repository adapter."""

import pytest

from domainkit.core.errors import ConfigurationError
from domainkit.repositories import InMemoryAdapter, RepositoryAdapter
from domainkit.specifications import property_equals


class TestInMemoryAdapter:
    def test_requires_identity(self):
        with pytest.raises(ConfigurationError):
            InMemoryAdapter(identity="")

    def test_satisfies_protocol(self):
        assert isinstance(InMemoryAdapter(identity="id"), RepositoryAdapter)

    def test_initial_data(self):
        adapter = InMemoryAdapter(identity="id", initial_data=[{"id": "a"}, {"id": "b"}, {"name": "no id"}])
        assert adapter.size() == 2

    async def test_save_and_find(self):
        adapter = InMemoryAdapter(identity="id")
        await adapter.save({"id": "a", "tags": ["x"]})
        assert await adapter.find_by_id("a") == {"id": "a", "tags": ["x"]}
        assert await adapter.find_by_id("b") is None

    async def test_isolation(self):
        record = {"id": "a", "tags": ["x"]}
        adapter = InMemoryAdapter(identity="id")
        await adapter.save(record)
        record["tags"].append("mutated")
        found = await adapter.find_by_id("a")
        found["tags"].append("also mutated")
        assert await adapter.find_by_id("a") == {"id": "a", "tags": ["x"]}

    async def test_save_requires_identity(self):
        with pytest.raises(ValueError, match="identity"):
            await InMemoryAdapter(identity="id").save({"name": "x"})

    async def test_find_all_filter_and_count(self):
        adapter = InMemoryAdapter(identity="id")
        await adapter.save_all([{"id": "a", "s": 1}, {"id": "b", "s": 2}, {"id": "c", "s": 1}])
        assert len(await adapter.find_all()) == 3
        assert [r["id"] for r in await adapter.find_all({"s": 1})] == ["a", "c"]
        assert await adapter.count({"s": 2}) == 1

    async def test_find_by_ids(self):
        adapter = InMemoryAdapter(identity="id", initial_data=[{"id": "a"}])
        assert await adapter.find_by_ids(["a", "b"]) == {"a": {"id": "a"}}

    async def test_find_by_specification(self):
        adapter = InMemoryAdapter(identity="id", initial_data=[{"id": "a", "s": 1}, {"id": "b", "s": 2}])
        assert await adapter.find_by_specification(property_equals("s", 2)) == [{"id": "b", "s": 2}]
        assert await adapter.find_by_specification(lambda r: r.s == 1) == [{"id": "a", "s": 1}]

    async def test_delete_and_clear(self):
        adapter = InMemoryAdapter(identity="id", initial_data=[{"id": "a"}, {"id": "b"}])
        await adapter.delete("a")
        await adapter.delete("missing")
        assert adapter.size() == 1
        adapter.clear()
        assert adapter.size() == 0
