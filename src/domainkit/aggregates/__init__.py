"""Aggregates: entities with invariants, domain methods and events."""

from domainkit.aggregates.base import AggregateConfig, AggregateFactory, aggregate
from domainkit.aggregates.event_sourced import (
    EventLog,
    EventSourced,
    update_with_events,
    with_events,
)

__all__ = [
    "AggregateConfig",
    "AggregateFactory",
    "EventLog",
    "EventSourced",
    "aggregate",
    "update_with_events",
    "with_events",
]
