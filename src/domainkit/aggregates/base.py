"""Aggregate engine: entities with invariants, behavior and domain events.

An aggregate factory wraps an ``EntityFactory`` and adds three things:

* an ``InvariantSet`` checked against every complete candidate state,
* domain methods, produced by ``methods_factory(factory)`` and bound to
  each instance so that ``self`` is the instance,
* an event log, carried across updates.

Domain methods never mutate; they return ``factory.update(self, ...)``,
optionally chained with ``.emit_event(...)``.

    def order_methods(factory):
        def place(self):
            if not self.items:
                raise DomainError("Cannot place an empty order")
            return factory.update(self, {"status": "PLACED"}).emit_event(
                "OrderPlaced", {"order_id": self.id}
            )
        return {"place": place}

    Order = aggregate(name="Order", schema=OrderSchema, identity="id",
                      methods_factory=order_methods)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from domainkit.aggregates.event_sourced import EventSourced, update_with_events, with_events
from domainkit.core.clock import DEFAULT_CLOCK, IClock
from domainkit.core.errors import ConfigurationError
from domainkit.entities.base import Entity, EntityFactory, Method, check_method_names
from domainkit.validation.invariants import Invariant, InvariantSet

logger = logging.getLogger(__name__)

MethodsFactory = Callable[["AggregateFactory"], Mapping[str, Method]]
InvariantLike = Invariant | Mapping[str, Any]


@dataclass(frozen=True)
class AggregateConfig:
    """Frozen configuration of one aggregate kind."""

    name: str
    schema: type[BaseModel]
    identity: str
    methods_factory: MethodsFactory
    invariants: InvariantSet = field(default_factory=InvariantSet)
    historize: bool | None = None
    clock: IClock = DEFAULT_CLOCK


class AggregateFactory:
    """Creates, updates and extends aggregate instances of one kind."""

    def __init__(self, config: AggregateConfig) -> None:
        if not config.name:
            raise ConfigurationError("Aggregate name is required")
        if config.schema is None:
            raise ConfigurationError(f"Aggregate {config.name}: schema is required")
        if not config.identity:
            raise ConfigurationError(f"Aggregate {config.name}: identity field is required")
        if not callable(config.methods_factory):
            raise ConfigurationError(
                f"Aggregate {config.name}: methods_factory must be callable"
            )
        if not isinstance(config.invariants, InvariantSet):
            raise ConfigurationError(
                f"Aggregate {config.name}: invariants must be an InvariantSet"
            )

        self._entities = EntityFactory(
            name=config.name,
            schema=config.schema,
            identity=config.identity,
            historize=config.historize,
            clock=config.clock,
        )
        self._config = config

    def __repr__(self) -> str:
        return (
            f"AggregateFactory(name={self.name!r}, identity={self.identity!r}, "
            f"invariants={list(self._config.invariants.names)!r})"
        )

    @property
    def config(self) -> AggregateConfig:
        return self._config

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def schema(self) -> type[BaseModel]:
        return self._config.schema

    @property
    def identity(self) -> str:
        return self._config.identity

    @property
    def invariants(self) -> InvariantSet:
        return self._config.invariants

    @property
    def historize(self) -> bool:
        return self._entities.historize

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create(self, data: Mapping[str, Any] | BaseModel | Entity) -> EventSourced:
        """Validate ``data``, check invariants and build a new aggregate.

        Raises:
            ValidationError: ``data`` does not satisfy the schema.
            InvariantViolationError: the new state breaks an invariant.
        """
        candidate = self._entities.create(data)
        self._config.invariants.validate(self.name, candidate)
        instance = self._assemble(candidate)
        logger.debug("Created %s", instance)
        return instance

    def update(
        self,
        instance: Entity | Mapping[str, Any],
        patch: Mapping[str, Any] | BaseModel,
    ) -> EventSourced:
        """Apply ``patch`` to ``instance`` and return the new state.

        Pending events of ``instance`` are carried over.  ``instance``
        itself is left untouched.

        Raises:
            DomainError: ``patch`` would change the identity.
            ValidationError: the merged data does not satisfy the schema.
            InvariantViolationError: the new state breaks an invariant.
        """
        candidate = self._entities.update(instance, patch)
        self._config.invariants.validate(self.name, candidate)
        updated = self._assemble(candidate)
        if isinstance(instance, Entity):
            return update_with_events(instance, updated)
        return updated

    def extend(
        self,
        name: str,
        methods_factory: MethodsFactory,
        schema: Callable[[type[BaseModel]], type[BaseModel]] | None = None,
        identity: str | None = None,
        invariants: Iterable[InvariantLike] = (),
        historize: bool | None = None,
    ) -> AggregateFactory:
        """Derive a new aggregate kind from this one.

        The derived kind checks this kind's invariants first, then its own.
        Its instances carry this kind's methods plus the new ones (new ones
        win on a name clash); every method is built with the derived factory.
        """
        if not name:
            raise ConfigurationError("Extended aggregate name is required")
        if not callable(methods_factory):
            raise ConfigurationError(
                f"Aggregate {name}: methods_factory must be callable"
            )

        parent_methods = self._config.methods_factory

        def combined_methods(factory: AggregateFactory) -> Mapping[str, Method]:
            return {**parent_methods(factory), **methods_factory(factory)}

        config = AggregateConfig(
            name=name,
            schema=schema(self._config.schema) if schema else self._config.schema,
            identity=identity or self._config.identity,
            methods_factory=combined_methods,
            invariants=self._config.invariants.extended(invariants),
            historize=self.historize if historize is None else historize,
            clock=self._config.clock,
        )
        logger.debug("Extended aggregate %s into %s", self.name, name)
        return AggregateFactory(config)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _methods(self) -> Mapping[str, Method]:
        methods = self._config.methods_factory(self)
        if methods is None:
            return {}
        if not isinstance(methods, Mapping):
            raise ConfigurationError(
                f"Aggregate {self.name}: methods_factory must return a mapping, "
                f"got {type(methods).__name__}"
            )
        check_method_names(self.name, methods, self._entities.schema.model_fields)
        return methods

    def _assemble(self, candidate: Entity) -> EventSourced:
        bound = candidate._with_methods(self._methods())
        return with_events(bound, self._config.clock)


def aggregate(
    *,
    name: str,
    schema: type[BaseModel],
    identity: str,
    methods_factory: MethodsFactory,
    invariants: Iterable[InvariantLike] = (),
    historize: bool | None = None,
    clock: IClock | None = None,
) -> AggregateFactory:
    """Keyword builder for ``AggregateFactory``.

    Raises:
        ConfigurationError: the configuration is incomplete or invalid.
    """
    return AggregateFactory(
        AggregateConfig(
            name=name,
            schema=schema,
            identity=identity,
            methods_factory=methods_factory,
            invariants=InvariantSet(invariants),
            historize=historize,
            clock=clock or DEFAULT_CLOCK,
        )
    )
