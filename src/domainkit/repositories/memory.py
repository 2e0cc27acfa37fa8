"""In-memory repository adapter for tests and prototyping.

Records are stored and returned as deep copies, so nothing a caller holds
can alter the store.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from typing import Any

from domainkit.core.errors import ConfigurationError
from domainkit.specifications.base import as_specification


class _Record(dict):
    """Stored record readable by key or by attribute."""

    def __getattr__(self, item: str) -> Any:
        try:
            return self[item]
        except KeyError:
            raise AttributeError(item) from None


class InMemoryAdapter:
    """Dict-backed ``RepositoryAdapter`` keyed by the identity field."""

    def __init__(self, identity: str, initial_data: Iterable[Mapping[str, Any]] = ()) -> None:
        if not identity:
            raise ConfigurationError("Identity field is required")
        self._identity = identity
        self._store: dict[Any, dict[str, Any]] = {}
        for item in initial_data:
            if item.get(identity) is not None:
                self._store[item[identity]] = copy.deepcopy(dict(item))

    async def find_by_id(self, id: Any) -> dict[str, Any] | None:
        record = self._store.get(id)
        return None if record is None else copy.deepcopy(record)

    async def find_by_ids(self, ids: Iterable[Any]) -> dict[Any, dict[str, Any]]:
        return {id: copy.deepcopy(self._store[id]) for id in ids if id in self._store}

    async def find_all(self, filter: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """Records whose fields equal every key of ``filter``."""
        records = list(self._store.values())
        if filter:
            records = [r for r in records if all(r.get(k) == v for k, v in filter.items())]
        return copy.deepcopy(records)

    async def find_by_specification(self, spec: Any) -> list[dict[str, Any]]:
        specification = as_specification(spec)
        return copy.deepcopy(
            [r for r in self._store.values() if specification.is_satisfied_by(_Record(r))]
        )

    async def count(self, filter: Mapping[str, Any] | None = None) -> int:
        return len(await self.find_all(filter))

    async def save(self, data: Mapping[str, Any]) -> None:
        id = data.get(self._identity)
        if id is None:
            raise ValueError(f"Record missing identity field: {self._identity}")
        self._store[id] = copy.deepcopy(dict(data))

    async def save_all(self, records: Iterable[Mapping[str, Any]]) -> None:
        for data in records:
            await self.save(data)

    async def delete(self, id: Any) -> None:
        self._store.pop(id, None)

    def clear(self) -> None:
        self._store.clear()

    def size(self) -> int:
        return len(self._store)
