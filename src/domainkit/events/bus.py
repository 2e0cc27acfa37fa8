"""In-process event bus for domain events.

Handlers are called in subscription order for every published event.
Handlers may be plain functions or coroutine functions.  A handler that
raises is logged and the remaining handlers still run.

An adapter (any object with ``publish`` and ``subscribe``) can replace the
in-memory dispatch, e.g. to forward events to a broker.

Published events are kept in a bounded history (``history_limit``, from
``Settings.events.history_limit`` by default) for inspection.
"""

from __future__ import annotations

import inspect
import logging
from collections import defaultdict, deque
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel

from domainkit.core.config import get_settings
from domainkit.core.errors import EventBusError
from domainkit.events.base import event_type_of

logger = logging.getLogger(__name__)

Handler = Callable[[Any], Any]


@runtime_checkable
class EventBusAdapter(Protocol):
    """External transport the bus delegates to once set."""

    async def publish(self, event: Any) -> None: ...

    def subscribe(self, event_type: str, handler: Handler) -> Callable[[], None]: ...


@dataclass(frozen=True)
class Subscription:
    """Handle returned by ``on``/``once``."""

    event_type: str
    unsubscribe: Callable[[], None] = field(repr=False)


@dataclass(eq=False)
class _Entry:
    handler: Handler
    once: bool


class EventBus:
    """Publish/subscribe hub for domain events."""

    def __init__(
        self,
        adapter: EventBusAdapter | None = None,
        history_limit: int | None = None,
    ) -> None:
        if history_limit is None:
            history_limit = get_settings().events.history_limit
        if history_limit < 0:
            raise EventBusError(
                "history_limit must be >= 0", context={"history_limit": history_limit}
            )
        # event type -> handlers in subscription order
        self._handlers: dict[str, list[_Entry]] = defaultdict(list)
        self._pending: list[Any] = []
        # newest events only; maxlen 0 records nothing
        self._history: deque[Any] = deque(maxlen=history_limit)
        self._adapter = adapter

    @property
    def adapter(self) -> EventBusAdapter | None:
        return self._adapter

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    async def publish(self, event: Any) -> None:
        """Deliver ``event`` to every handler subscribed to its type.

        Raises:
            EventBusError: the event is malformed, or the adapter failed.
        """
        event_type = self._require_event(event)

        if self._adapter is not None:
            try:
                await self._adapter.publish(event)
            except Exception as exc:
                raise EventBusError(
                    f'Failed to publish event "{event_type}" using adapter',
                    cause=exc,
                    context={"event_type": event_type},
                ) from exc
            self._history.append(event)
            return

        self._history.append(event)
        entries = list(self._handlers.get(event_type, ()))
        for entry in entries:
            if entry.once:
                self._remove(event_type, entry)

        for entry in entries:
            try:
                result = entry.handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(
                    "Handler error on event=%s handler=%s",
                    event_type,
                    getattr(entry.handler, "__name__", repr(entry.handler)),
                )

    async def publish_all(self, events: Iterable[Any]) -> None:
        """Publish ``events`` one after the other, in order."""
        if isinstance(events, (str, bytes, Mapping, BaseModel)) or not isinstance(events, Iterable):
            raise EventBusError(
                "Events must be a sequence", context={"events": repr(events)}
            )
        for event in list(events):
            await self.publish(event)

    # ------------------------------------------------------------------
    # Subscribing
    # ------------------------------------------------------------------

    def on(self, event_type: Any, handler: Handler, once: bool = False) -> Subscription:
        """Subscribe ``handler`` to an event type name or event factory."""
        if not callable(handler):
            raise EventBusError("Event handler must be callable")

        name = event_type if isinstance(event_type, str) else getattr(event_type, "type", None)
        if not name or not isinstance(name, str):
            raise EventBusError(
                "Invalid event type or factory",
                context={"event_type": repr(event_type)},
            )

        if self._adapter is not None:
            try:
                unsubscribe = self._adapter.subscribe(name, handler)
            except Exception as exc:
                raise EventBusError(
                    f'Failed to subscribe to event "{name}" using adapter',
                    cause=exc,
                    context={"event_type": name},
                ) from exc
            return Subscription(event_type=name, unsubscribe=unsubscribe)

        entry = _Entry(handler=handler, once=once)
        self._handlers[name].append(entry)
        logger.debug("Subscribed %s to %s (once=%s)", handler, name, once)
        return Subscription(event_type=name, unsubscribe=lambda: self._remove(name, entry))

    def once(self, event_type: Any, handler: Handler) -> Subscription:
        """Subscribe ``handler`` for a single delivery."""
        return self.on(event_type, handler, once=True)

    def handler_count(self, event_type: str) -> int:
        return len(self._handlers.get(event_type, ()))

    # ------------------------------------------------------------------
    # Pending queue
    # ------------------------------------------------------------------

    def add_pending_event(self, event: Any) -> None:
        """Queue ``event`` for a later ``publish_pending_events``."""
        self._require_event(event)
        self._pending.append(event)

    def clear_pending_events(self) -> list[Any]:
        """Empty the pending queue and return what it held."""
        drained = self._pending[:]
        self._pending.clear()
        return drained

    async def publish_pending_events(self) -> None:
        await self.publish_all(self.clear_pending_events())

    @property
    def pending_events(self) -> list[Any]:
        return list(self._pending)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def set_adapter(self, adapter: Any) -> None:
        """Route publish/subscribe through ``adapter`` from now on."""
        if not callable(getattr(adapter, "publish", None)) or not callable(
            getattr(adapter, "subscribe", None)
        ):
            raise EventBusError(
                "Adapter must have publish and subscribe methods",
                context={"adapter": repr(adapter)},
            )
        self._adapter = adapter

    def reset(self) -> None:
        """Drop every handler, pending event and recorded event."""
        self._handlers.clear()
        self._pending.clear()
        self._history.clear()

    def get_history(self, event_type: str | None = None) -> list[Any]:
        """Most recent published events, optionally filtered by type."""
        if event_type is None:
            return list(self._history)
        return [e for e in self._history if event_type_of(e) == event_type]

    def clear_history(self) -> None:
        """Clear published-event history. For testing."""
        self._history.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _remove(self, event_type: str, entry: _Entry) -> None:
        entries = self._handlers.get(event_type)
        if not entries:
            return
        for i, candidate in enumerate(entries):
            if candidate is entry:
                del entries[i]
                break
        if not entries:
            del self._handlers[event_type]

    @staticmethod
    def _require_event(event: Any) -> str:
        if event is None or isinstance(event, (str, bytes, int, float, bool)):
            raise EventBusError("Invalid event object", context={"event": repr(event)})
        event_type = event_type_of(event)
        if not event_type:
            raise EventBusError("Event type is required", context={"event": repr(event)})
        return event_type


event_bus = EventBus()
