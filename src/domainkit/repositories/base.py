"""Repository facade over a storage adapter.

The repository speaks aggregates; the adapter speaks plain dicts.  Loaded
records are re-validated through the aggregate factory (schema and
invariants), so a repository never hands out an invalid instance.

On ``save`` the aggregate's pending domain events are published through
the event bus and then cleared (both configurable, see
``Settings.repository``).
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

from domainkit.aggregates.base import AggregateFactory
from domainkit.aggregates.event_sourced import EventSourced, with_events
from domainkit.core.config import get_settings
from domainkit.core.errors import ConfigurationError, RepositoryError
from domainkit.entities.base import Entity
from domainkit.events.bus import EventBus, event_bus
from domainkit.specifications.base import Specification, as_specification

logger = logging.getLogger(__name__)

REQUIRED_ADAPTER_METHODS = ("find_by_id", "find_all", "save", "delete")


@runtime_checkable
class RepositoryAdapter(Protocol):
    """Storage backend working on plain dicts.

    ``find_by_ids``, ``save_all``, ``count`` and ``find_by_specification``
    are optional; the repository falls back to the required methods.
    """

    async def find_by_id(self, id: Any) -> dict[str, Any] | None: ...

    async def find_all(self, filter: Mapping[str, Any] | None = None) -> list[dict[str, Any]]: ...

    async def save(self, data: dict[str, Any]) -> None: ...

    async def delete(self, id: Any) -> None: ...


async def _resolve(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


def _missing_id(id: Any) -> bool:
    return id is None or id == ""


class Repository:
    """Async persistence facade for one aggregate kind.

    Parameters
    ----------
    aggregate:
        Factory used to rebuild instances from stored data.
    adapter:
        Storage backend (see ``RepositoryAdapter``).
    bus:
        Event bus receiving domain events on save.  Defaults to the
        module-level ``event_bus``.
    publish_on_save, clear_after_publish:
        ``None`` uses ``Settings.repository``.
    """

    def __init__(
        self,
        aggregate: AggregateFactory,
        adapter: Any,
        bus: EventBus | None = None,
        publish_on_save: bool | None = None,
        clear_after_publish: bool | None = None,
    ) -> None:
        if aggregate is None:
            raise ConfigurationError("Repository requires an aggregate factory")
        if adapter is None:
            raise ConfigurationError("Repository requires an adapter")
        for method in REQUIRED_ADAPTER_METHODS:
            if not callable(getattr(adapter, method, None)):
                raise ConfigurationError(f"Adapter is missing required method: {method}")
        if not aggregate.identity:
            raise ConfigurationError("Aggregate must have an identity field")

        settings = get_settings().repository
        self._aggregate = aggregate
        self._adapter = adapter
        self._bus = bus if bus is not None else event_bus
        self._publish_on_save = (
            settings.publish_on_save if publish_on_save is None else publish_on_save
        )
        self._clear_after_publish = (
            settings.clear_after_publish if clear_after_publish is None else clear_after_publish
        )

    def __repr__(self) -> str:
        return f"Repository(aggregate={self._aggregate.name!r}, adapter={type(self._adapter).__name__})"

    @property
    def aggregate(self) -> AggregateFactory:
        return self._aggregate

    @property
    def adapter(self) -> Any:
        return self._adapter

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def find_by_id(self, id: Any) -> EventSourced | None:
        """Load one aggregate, or ``None`` when it does not exist."""
        if _missing_id(id):
            raise RepositoryError("ID is required")
        try:
            data = await _resolve(self._adapter.find_by_id(id))
            return None if data is None else self._hydrate(data)
        except Exception as exc:
            raise self._error(f"Failed to find {self.name} with ID {id}", exc, id=id) from exc

    async def find_by_ids(self, ids: Iterable[Any]) -> dict[Any, EventSourced]:
        """Load several aggregates; missing ids are left out of the result."""
        if isinstance(ids, (str, bytes)) or not isinstance(ids, Iterable):
            raise RepositoryError("IDs must be a sequence")
        ids = list(ids)
        if not ids:
            return {}
        try:
            bulk = getattr(self._adapter, "find_by_ids", None)
            if callable(bulk):
                found = await _resolve(bulk(ids))
                return {key: self._hydrate(data) for key, data in found.items()}

            result: dict[Any, EventSourced] = {}
            for id in ids:
                data = await _resolve(self._adapter.find_by_id(id))
                if data is not None:
                    result[id] = self._hydrate(data)
            return result
        except Exception as exc:
            joined = ", ".join(str(i) for i in ids)
            raise self._error(f"Failed to find {self.name} with IDs {joined}", exc, ids=ids) from exc

    async def exists(self, id: Any) -> bool:
        if _missing_id(id):
            raise RepositoryError("ID is required")
        try:
            return (await _resolve(self._adapter.find_by_id(id))) is not None
        except Exception as exc:
            raise self._error(
                f"Failed to check if {self.name} exists with ID {id}", exc, id=id
            ) from exc

    async def find_all(self, filter: Mapping[str, Any] | None = None) -> list[EventSourced]:
        """Load every aggregate matching the equality ``filter``."""
        try:
            rows = await _resolve(self._adapter.find_all(dict(filter) if filter else None))
            return [self._hydrate(data) for data in rows]
        except Exception as exc:
            raise self._error(f"Failed to find {self.name} with filter", exc, filter=filter) from exc

    async def find_one(self, filter: Mapping[str, Any]) -> EventSourced | None:
        if not filter:
            raise RepositoryError("Filter is required for find_one")
        results = await self.find_all(filter)
        return results[0] if results else None

    async def find_by_specification(self, spec: Any) -> list[EventSourced]:
        """Load every aggregate satisfying ``spec``.

        ``Specification`` objects are handed to the adapter when it offers
        ``find_by_specification``; plain predicates always run against the
        loaded aggregates.
        """
        if spec is None:
            raise RepositoryError("Specification is required")
        try:
            specification = as_specification(spec)
        except ConfigurationError as exc:
            raise RepositoryError(
                "Invalid specification: must have is_satisfied_by or be callable",
                cause=exc,
                context={"aggregate_type": self.name},
            ) from exc

        try:
            native = getattr(self._adapter, "find_by_specification", None)
            if isinstance(spec, Specification) and callable(native):
                rows = await _resolve(native(specification))
                return [self._hydrate(data) for data in rows]

            rows = await _resolve(self._adapter.find_all(None))
            instances = [self._hydrate(data) for data in rows]
            return [i for i in instances if specification.is_satisfied_by(i)]
        except Exception as exc:
            raise self._error(
                f"Failed to find {self.name} with specification", exc, specification=specification.name
            ) from exc

    async def count(self, filter: Mapping[str, Any] | None = None) -> int:
        try:
            native = getattr(self._adapter, "count", None)
            if callable(native):
                return int(await _resolve(native(dict(filter) if filter else None)))
            rows = await _resolve(self._adapter.find_all(dict(filter) if filter else None))
            return len(rows)
        except Exception as exc:
            raise self._error(f"Failed to count {self.name} with filter", exc, filter=filter) from exc

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def save(self, instance: Entity) -> None:
        """Persist ``instance`` and publish its pending domain events."""
        if not isinstance(instance, Entity):
            raise RepositoryError("Aggregate is required", context={"aggregate_type": self.name})
        try:
            await _resolve(self._adapter.save(instance.to_dict()))
            if self._publish_on_save:
                await self._publish([instance])
        except Exception as exc:
            raise self._error(
                f"Failed to save {self.name} with ID {instance.identity_value}",
                exc,
                id=instance.identity_value,
            ) from exc
        logger.debug("Saved %s", instance)

    async def save_all(self, instances: Iterable[Entity]) -> None:
        """Persist several aggregates, then publish their events in order."""
        if isinstance(instances, (str, bytes, Mapping)) or not isinstance(instances, Iterable):
            raise RepositoryError("Aggregates must be a sequence")
        instances = list(instances)
        if not instances:
            return
        for instance in instances:
            if not isinstance(instance, Entity):
                raise RepositoryError("Aggregate is required", context={"aggregate_type": self.name})

        try:
            bulk = getattr(self._adapter, "save_all", None)
            if callable(bulk):
                await _resolve(bulk([i.to_dict() for i in instances]))
            else:
                for instance in instances:
                    await _resolve(self._adapter.save(instance.to_dict()))
            if self._publish_on_save:
                await self._publish(instances)
        except Exception as exc:
            raise self._error(
                f"Failed to save multiple {self.name} aggregates", exc, count=len(instances)
            ) from exc

    async def delete(self, id: Any) -> None:
        if _missing_id(id):
            raise RepositoryError("ID is required")
        try:
            await _resolve(self._adapter.delete(id))
        except Exception as exc:
            raise self._error(f"Failed to delete {self.name} with ID {id}", exc, id=id) from exc

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._aggregate.name

    def _hydrate(self, data: Mapping[str, Any]) -> EventSourced:
        return with_events(self._aggregate.create(data))

    async def _publish(self, instances: list[Entity]) -> None:
        sourced = [i for i in instances if isinstance(i, EventSourced) and i.domain_events]
        events = [e for i in sourced for e in i.domain_events]
        if not events:
            return
        await self._bus.publish_all(events)
        logger.debug("Published %d event(s) for %s", len(events), self.name)
        if self._clear_after_publish:
            for instance in sourced:
                instance.clear_domain_events()

    def _error(self, message: str, cause: Exception, **context: Any) -> RepositoryError:
        return RepositoryError(
            message, cause=cause, context={"aggregate_type": self.name, **context}
        )


def repository(
    *,
    aggregate: AggregateFactory,
    adapter: Any,
    bus: EventBus | None = None,
    publish_on_save: bool | None = None,
    clear_after_publish: bool | None = None,
) -> Repository:
    """Keyword builder for ``Repository``."""
    return Repository(
        aggregate,
        adapter,
        bus=bus,
        publish_on_save=publish_on_save,
        clear_after_publish=clear_after_publish,
    )
