"""domainkit: Domain-Driven Design building blocks for Python.

Public API
----------
Entities:
    entity, EntityFactory, Entity, HistoryEntry, FieldChange

Aggregates:
    aggregate, AggregateFactory, AggregateConfig, EventSourced,
    with_events, update_with_events

Invariants and schemas:
    Invariant, InvariantSet, SchemaValidator, SchemaResult

Events:
    domain_event, DomainEventFactory, DomainEvent, EventBus, event_bus

Value objects:
    ValueObject, NonEmptyString, TrimmedString, Identifier,
    PositiveNumber, NonNegativeNumber, IntegerNumber, PercentageNumber,
    StringValue, NumberValue, IdentifierValue and their narrower kinds

Domain services:
    domain_service, DomainServiceFactory, DomainService

Specifications:
    Specification, specification, parameterized_specification and the
    ``property_*`` helpers in ``domainkit.specifications``

Repositories:
    Repository, repository, RepositoryAdapter, InMemoryAdapter

Errors:
    DomainError and its subclasses in ``domainkit.core.errors``
"""

from domainkit.aggregates import (
    AggregateConfig,
    AggregateFactory,
    EventLog,
    EventSourced,
    aggregate,
    update_with_events,
    with_events,
)
from domainkit.core.clock import SimClock, WallClock
from domainkit.core.config import Settings, get_settings, load_settings, reset_settings
from domainkit.core.errors import (
    ConfigurationError,
    DomainError,
    DomainServiceError,
    EventBusError,
    InvalidEventError,
    InvariantViolationError,
    RepositoryError,
    ValidationError,
)
from domainkit.entities import Entity, EntityFactory, FieldChange, HistoryEntry, entity
from domainkit.events import (
    DomainEvent,
    DomainEventFactory,
    EventBus,
    domain_event,
    event_bus,
)
from domainkit.repositories import InMemoryAdapter, Repository, RepositoryAdapter, repository
from domainkit.services import DomainService, DomainServiceFactory, domain_service
from domainkit.specifications import (
    Specification,
    parameterized_specification,
    specification,
)
from domainkit.validation import Invariant, InvariantSet, SchemaResult, SchemaValidator
from domainkit.value_objects import (
    Identifier,
    IdentifierValue,
    IntegerNumber,
    NonEmptyString,
    NonNegativeNumber,
    NumberValue,
    PercentageNumber,
    PositiveNumber,
    StringValue,
    TrimmedString,
    ValueObject,
)

__version__ = "0.1.0"

__all__ = [
    "AggregateConfig",
    "AggregateFactory",
    "ConfigurationError",
    "DomainError",
    "DomainEvent",
    "DomainEventFactory",
    "DomainService",
    "DomainServiceError",
    "DomainServiceFactory",
    "Entity",
    "EntityFactory",
    "EventBus",
    "EventBusError",
    "EventLog",
    "EventSourced",
    "FieldChange",
    "HistoryEntry",
    "Identifier",
    "IdentifierValue",
    "InMemoryAdapter",
    "IntegerNumber",
    "InvalidEventError",
    "Invariant",
    "InvariantSet",
    "InvariantViolationError",
    "NonEmptyString",
    "NonNegativeNumber",
    "NumberValue",
    "PercentageNumber",
    "PositiveNumber",
    "Repository",
    "RepositoryAdapter",
    "RepositoryError",
    "SchemaResult",
    "SchemaValidator",
    "Settings",
    "SimClock",
    "Specification",
    "StringValue",
    "TrimmedString",
    "ValidationError",
    "ValueObject",
    "WallClock",
    "aggregate",
    "domain_event",
    "domain_service",
    "entity",
    "event_bus",
    "get_settings",
    "load_settings",
    "parameterized_specification",
    "repository",
    "reset_settings",
    "specification",
    "update_with_events",
    "with_events",
]
