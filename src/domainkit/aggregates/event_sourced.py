"""Event-sourcing overlay for entities.

An ``EventSourced`` instance is an ``Entity`` that also owns an
``EventLog``: the domain events raised by its methods and not yet
published.  The entity data stays frozen; only the log is appendable.

``update_with_events`` carries the log of the previous state over to the
new one, so events survive the replace-on-update lifecycle until someone
explicitly clears them (typically the repository after publishing).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from domainkit.core.clock import DEFAULT_CLOCK, IClock
from domainkit.core.errors import InvalidEventError
from domainkit.entities.base import Entity, Method
from domainkit.entities.history import HistoryEntry
from domainkit.events.base import DomainEvent, event_type_of

logger = logging.getLogger(__name__)


class EventLog:
    """Ordered buffer of pending domain events."""

    __slots__ = ("_events", "_clock")

    def __init__(self, clock: IClock | None = None) -> None:
        self._events: list[DomainEvent] = []
        self._clock = clock or DEFAULT_CLOCK

    @property
    def clock(self) -> IClock:
        return self._clock

    def append(self, event: Any) -> None:
        self._events.append(event)

    def snapshot(self) -> tuple[DomainEvent, ...]:
        return tuple(self._events)

    def clear(self) -> None:
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)

    def __repr__(self) -> str:
        return f"EventLog(events={[event_type_of(e) for e in self._events]})"


class EventSourced(Entity):
    """Entity carrying a private log of pending domain events."""

    __slots__ = ("_event_log",)

    def __init__(
        self,
        name: str,
        identity: str,
        model: BaseModel,
        history: tuple[HistoryEntry, ...] | None = None,
        methods: Mapping[str, Method] | None = None,
        event_log: EventLog | None = None,
    ) -> None:
        super().__init__(name, identity, model, history, methods)
        object.__setattr__(self, "_event_log", event_log if event_log is not None else EventLog())

    def emit_event(self, event: Any, payload: Mapping[str, Any] | None = None) -> EventSourced:
        """Record a domain event and return this same instance.

        ``event`` is either an event type name or an event factory (any
        object with a callable ``create``).  A factory may return a
        ``DomainEvent`` or any event carrying a non-empty ``type``,
        including a mapping.  Nothing is recorded when this raises.

        Raises:
            InvalidEventError: the event type is missing or invalid, the
                payload is not a mapping, or the factory rejected the
                payload or returned something that is not an event.
        """
        if payload is not None and not isinstance(payload, Mapping):
            raise InvalidEventError(
                f"Event payload must be a mapping, got {type(payload).__name__}",
                context={"aggregate": self._name, "event": repr(event)},
            )

        if isinstance(event, str) and event:
            built = DomainEvent.of(event, payload, timestamp=self._event_log.clock.now())
        elif event is not None and not isinstance(event, str) and callable(getattr(event, "create", None)):
            try:
                built = event.create(dict(payload or {}))
            except Exception as exc:
                raise InvalidEventError(
                    f"Failed to create event for {self._name}: {exc}",
                    cause=exc,
                    context={"aggregate": self._name, "payload": dict(payload or {})},
                ) from exc
        else:
            raise InvalidEventError(
                "Event type must be a non-empty string or an event factory",
                context={"aggregate": self._name, "event": repr(event)},
            )

        event_type = event_type_of(built)
        if not event_type or not isinstance(event_type, str):
            raise InvalidEventError(
                f"Event factory for {self._name} returned {type(built).__name__} without a type",
                context={"aggregate": self._name, "event": repr(built)},
            )

        self._event_log.append(built)
        logger.debug("%s emitted %s", self, event_type)
        return self

    def get_domain_events(self) -> list[DomainEvent]:
        """Pending events, as a new list."""
        return list(self._event_log.snapshot())

    @property
    def domain_events(self) -> tuple[DomainEvent, ...]:
        return self._event_log.snapshot()

    def clear_domain_events(self) -> EventSourced:
        """Drop all pending events and return this same instance."""
        self._event_log.clear()
        return self


def with_events(instance: Entity, clock: IClock | None = None) -> EventSourced:
    """Give ``instance`` an empty event log.

    An instance that already has one is returned unchanged.
    """
    if isinstance(instance, EventSourced):
        return instance
    if not isinstance(instance, Entity):
        raise TypeError(f"with_events expects an Entity, got {type(instance).__name__}")
    name, identity, model, history, methods = instance._state()
    return EventSourced(name, identity, model, history, methods, EventLog(clock))


def update_with_events(original: Entity, updated: Entity) -> EventSourced:
    """Carry the pending events of ``original`` over to ``updated``.

    The very same event objects are replayed in order, so their ids and
    timestamps are preserved.
    """
    clock = original._event_log.clock if isinstance(original, EventSourced) else None
    result = with_events(updated, clock)
    if isinstance(original, EventSourced) and result is not original:
        for event in original.domain_events:
            result._event_log.append(event)
    return result
