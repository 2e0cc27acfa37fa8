"""Domain events and the in-process event bus."""

from domainkit.events.base import (
    ENVELOPE_FIELDS,
    DomainEvent,
    DomainEventFactory,
    domain_event,
    event_type_of,
)
from domainkit.events.bus import EventBus, EventBusAdapter, Subscription, event_bus

__all__ = [
    "DomainEvent",
    "DomainEventFactory",
    "ENVELOPE_FIELDS",
    "EventBus",
    "EventBusAdapter",
    "Subscription",
    "domain_event",
    "event_bus",
    "event_type_of",
]
