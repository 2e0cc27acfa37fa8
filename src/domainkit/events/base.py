"""Domain events and event factories.

Design invariants
-----------------
1.  Every event is **immutable** (frozen Pydantic model).
2.  ``type`` names what happened (past tense: ``OrderPlaced``).
3.  ``timestamp`` is a UTC datetime fixed at creation; replaying an event
    never re-stamps it.
4.  ``event_id`` is a UUID4 generated at creation time; it serves as the
    idempotency / dedup key for subscribers.

Payload fields sit beside the envelope fields as plain attributes
(``event.order_id``).
"""

from __future__ import annotations

import copy
import json
from collections.abc import Callable, Mapping
from datetime import datetime
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from domainkit.core.clock import DEFAULT_CLOCK, IClock
from domainkit.core.errors import ConfigurationError, InvalidEventError
from domainkit.core.ids import new_id, utc_now
from domainkit.validation.schema import SchemaValidator


ENVELOPE_FIELDS = frozenset({"type", "timestamp", "event_id", "payload"})


def event_type_of(event: Any) -> str | None:
    """Type name of an event object or an event mapping."""
    if isinstance(event, Mapping):
        return event.get("type")
    return getattr(event, "type", None)


class DomainEvent(BaseModel):
    """Immutable record of something that happened to an aggregate."""

    model_config = ConfigDict(frozen=True, extra="allow")

    type: str
    timestamp: datetime = Field(default_factory=utc_now)
    event_id: str = Field(default_factory=new_id)

    @classmethod
    def of(
        cls,
        event_type: str,
        payload: Mapping[str, Any] | None = None,
        timestamp: datetime | None = None,
    ) -> DomainEvent:
        """Build an event from a bare type name and a payload mapping.

        Raises:
            InvalidEventError: the type is empty, or the payload is not a
                mapping with string keys, or it uses a reserved key.
        """
        if not event_type:
            raise InvalidEventError("Event type is required")
        if payload is not None and not isinstance(payload, Mapping):
            raise InvalidEventError(
                f"Event payload must be a mapping, got {type(payload).__name__}",
                context={"event_type": event_type},
            )
        payload = dict(payload or {})
        bad_keys = sorted(repr(k) for k in payload if not isinstance(k, str))
        if bad_keys:
            raise InvalidEventError(
                f"Event payload keys must be strings: {', '.join(bad_keys)}",
                context={"event_type": event_type},
            )
        reserved = sorted(set(payload) & ENVELOPE_FIELDS)
        if reserved:
            raise InvalidEventError(
                f"Event payload uses reserved keys: {', '.join(reserved)}",
                context={"event_type": event_type},
            )
        envelope: dict[str, Any] = {"type": event_type}
        if timestamp is not None:
            envelope["timestamp"] = timestamp
        try:
            return cls(**envelope, **payload)
        except (TypeError, ValueError) as exc:
            raise InvalidEventError(
                f"Invalid {event_type} event: {exc}",
                cause=exc,
                context={"event_type": event_type},
            ) from exc

    @property
    def payload(self) -> dict[str, Any]:
        """Copy of the payload fields (everything but the envelope)."""
        return copy.deepcopy(dict(self.model_extra or {}))

    def __str__(self) -> str:
        body = json.dumps(self.model_dump(mode="json"), sort_keys=True)
        return f"{self.type}({body})"


class DomainEventFactory:
    """Creates validated ``DomainEvent`` instances of one type.

    Parameters
    ----------
    name:
        Event type name, copied onto every event.
    schema:
        Pydantic model class validating the payload.  A ``timestamp``
        field on the schema, if declared, becomes the event timestamp.
    metadata:
        Free-form description of the event (owner, version, ...).
    """

    def __init__(
        self,
        name: str,
        schema: type[BaseModel],
        metadata: Mapping[str, Any] | None = None,
        clock: IClock | None = None,
    ) -> None:
        if not name:
            raise ConfigurationError("Event name is required")
        if schema is None:
            raise ConfigurationError("Event schema is required")
        self._validator = SchemaValidator(schema, name, context_key="event_type")
        clashes = sorted(set(self._validator.field_names) & (ENVELOPE_FIELDS - {"timestamp"}))
        if clashes:
            raise ConfigurationError(
                f"Event {name}: schema fields {', '.join(clashes)} are reserved"
            )
        self._name = name
        self._schema = schema
        self._metadata = MappingProxyType(dict(metadata or {}))
        self._clock = clock or DEFAULT_CLOCK

    def __repr__(self) -> str:
        return f"DomainEventFactory(type={self._name!r})"

    @property
    def type(self) -> str:
        return self._name

    @property
    def schema(self) -> type[BaseModel]:
        return self._schema

    @property
    def metadata(self) -> Mapping[str, Any]:
        return self._metadata

    def create(self, payload: Mapping[str, Any] | None = None) -> DomainEvent:
        """Validate ``payload`` and build the event.

        Raises:
            ValidationError: the payload does not satisfy the schema.
        """
        data = dict(payload or {})
        timestamp = None
        if "timestamp" not in self._validator.field_names:
            timestamp = data.pop("timestamp", None)

        fields = self._validator.parse(data).model_dump()
        if "timestamp" in fields:
            timestamp = fields.pop("timestamp")

        return DomainEvent(
            type=self._name,
            timestamp=timestamp or self._clock.now(),
            **fields,
        )

    def extend(
        self,
        name: str,
        schema: Callable[[type[BaseModel]], type[BaseModel]] | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> DomainEventFactory:
        """Derive a new event type from this one.

        Metadata is merged and records the parent under ``parent_event``.
        """
        if not name:
            raise ConfigurationError("Extended event name is required")
        return DomainEventFactory(
            name=name,
            schema=schema(self._schema) if schema else self._schema,
            metadata={**self._metadata, **(metadata or {}), "parent_event": self._name},
            clock=self._clock,
        )


def domain_event(
    *,
    name: str,
    schema: type[BaseModel],
    metadata: Mapping[str, Any] | None = None,
    clock: IClock | None = None,
) -> DomainEventFactory:
    """Keyword builder for ``DomainEventFactory``."""
    return DomainEventFactory(name=name, schema=schema, metadata=metadata, clock=clock)
