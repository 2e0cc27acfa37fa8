"""Entity engine: immutable, identity-compared domain objects.

Entities in Domain-Driven Design are:

1. Defined by their identity, not their attributes.
2. Changed over time, here by *replacement*: ``update`` returns a new
   instance carrying the same identity, the old one is never touched.
3. Validated on every construction through their schema.

``EntityFactory`` holds the configuration (name, schema, identity field,
optional methods, historization) and produces ``Entity`` instances.
"""

from __future__ import annotations

import copy
import logging
import types
from collections.abc import Callable, Mapping
from dataclasses import FrozenInstanceError
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from domainkit.core.clock import DEFAULT_CLOCK, IClock
from domainkit.core.config import get_settings
from domainkit.core.errors import ConfigurationError, DomainError, ValidationError
from domainkit.entities.history import HistoryEntry, diff_fields
from domainkit.validation.schema import SchemaValidator

logger = logging.getLogger(__name__)

# Attribute names owned by the instance API (entity + event overlay).
# Schema fields and domain methods may not shadow them.
RESERVED_NAMES = frozenset(
    {
        "equals",
        "to_dict",
        "change_history",
        "entity_name",
        "identity_field",
        "identity_value",
        "emit_event",
        "get_domain_events",
        "clear_domain_events",
        "domain_events",
    }
)

_IMMUTABLE_TYPES = (
    str, bytes, int, float, complex, bool, type(None),
    Decimal, datetime, date, time, timedelta, UUID, Enum, frozenset,
)

_MISSING: Any = object()

Method = Callable[..., Any]


def _detach(value: Any) -> Any:
    """Hand out immutable values as-is and everything else as a deep copy."""
    if isinstance(value, _IMMUTABLE_TYPES):
        return value
    # Frozen models still hold mutable lists and dicts, so models are copied too.
    return copy.deepcopy(value)


def identity_of(candidate: Any, identity: str) -> Any:
    """Read ``identity`` from an entity, a plain object or a mapping."""
    if isinstance(candidate, Mapping):
        return candidate.get(identity, _MISSING)
    return getattr(candidate, identity, _MISSING)


def check_reserved(kind: str, owner: str, names: Any) -> None:
    clashes = sorted(set(names) & RESERVED_NAMES)
    if clashes:
        raise ConfigurationError(
            f"{owner}: {kind} {', '.join(clashes)} shadow the instance API"
        )


def check_method_names(
    owner: str, methods: Mapping[str, Method], field_names: Any
) -> None:
    """Reject methods that are not callable, reserved, or named like a field."""
    for method_name, fn in methods.items():
        if not callable(fn):
            raise ConfigurationError(f"{owner}: method '{method_name}' is not callable")
    check_reserved("methods", owner, methods)
    clashes = sorted(set(methods) & set(field_names))
    if clashes:
        raise ConfigurationError(
            f"{owner}: methods {', '.join(clashes)} clash with schema fields"
        )


class Entity:
    """A frozen, validated record compared by its identity field.

    Field values are read as attributes.  Mutable values (lists, dicts,
    nested models, frozen or not) are returned as copies, so nothing handed
    out can alter the instance.  Domain methods are bound on access, with
    the instance itself as ``self``.
    """

    __slots__ = ("_name", "_identity", "_model", "_history", "_methods")

    def __init__(
        self,
        name: str,
        identity: str,
        model: BaseModel,
        history: tuple[HistoryEntry, ...] | None = None,
        methods: Mapping[str, Method] | None = None,
    ) -> None:
        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_identity", identity)
        object.__setattr__(self, "_model", model)
        object.__setattr__(self, "_history", history)
        object.__setattr__(self, "_methods", types.MappingProxyType(dict(methods or {})))

    # ------------------------------------------------------------------
    # Attribute access
    # ------------------------------------------------------------------

    def __getattr__(self, item: str) -> Any:
        if item.startswith("_"):
            raise AttributeError(item)
        model = self._model
        if item in type(model).model_fields or item in (model.model_extra or {}):
            return _detach(getattr(model, item))
        method = self._methods.get(item)
        if method is not None:
            return types.MethodType(method, self)
        raise AttributeError(f"{self._name} has no attribute '{item}'")

    def __setattr__(self, key: str, value: Any) -> None:
        raise FrozenInstanceError(f"cannot assign to field '{key}' of {self._name}")

    def __delattr__(self, key: str) -> None:
        raise FrozenInstanceError(f"cannot delete field '{key}' of {self._name}")

    def __dir__(self) -> list[str]:
        return sorted({*super().__dir__(), *self.to_dict(), *self._methods})

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def entity_name(self) -> str:
        return self._name

    @property
    def identity_field(self) -> str:
        return self._identity

    @property
    def identity_value(self) -> Any:
        return getattr(self._model, self._identity)

    def equals(self, other: Any) -> bool:
        """Entities are equal when they have the same identity value."""
        if other is None:
            return False
        if other is self:
            return True
        theirs = identity_of(other, self._identity)
        if theirs is _MISSING:
            return False
        return bool(theirs == self.identity_value)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Entity):
            return self.equals(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.identity_value)

    def __str__(self) -> str:
        return f"{self._name}({self.identity_value})"

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in self._model)
        return f"{self._name}({fields})"

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------

    def to_dict(self, mode: str = "python") -> dict[str, Any]:
        """Return a fresh copy of the validated raw data."""
        return self._model.model_dump(mode=mode)

    @property
    def change_history(self) -> tuple[HistoryEntry, ...] | None:
        """Recorded updates, or ``None`` when the factory does not historize."""
        return self._history

    def _state(self) -> tuple[str, str, BaseModel, tuple[HistoryEntry, ...] | None, Mapping[str, Method]]:
        return self._name, self._identity, self._model, self._history, self._methods

    def _with_methods(self, methods: Mapping[str, Method]) -> Entity:
        return Entity(self._name, self._identity, self._model, self._history, methods)


class EntityFactory:
    """Creates and updates ``Entity`` instances of one kind.

    Parameters
    ----------
    name:
        Entity name, used in messages and ``str(instance)``.
    schema:
        Pydantic model class validating the entity's data.
    identity:
        Name of the schema field holding the identity.
    methods:
        Optional ``name -> function(self, ...)`` mapping bound onto instances.
    historize:
        Record a change history on ``update``.  ``None`` uses
        ``Settings.entities.historize``.
    clock:
        Clock used to stamp history entries.
    """

    def __init__(
        self,
        name: str,
        schema: type[BaseModel],
        identity: str,
        methods: Mapping[str, Method] | None = None,
        historize: bool | None = None,
        clock: IClock | None = None,
    ) -> None:
        if not name:
            raise ConfigurationError("Entity name is required")
        if schema is None:
            raise ConfigurationError("Entity schema is required")
        if not identity:
            raise ConfigurationError("Entity identity field is required")

        self._validator = SchemaValidator(schema, name)
        if identity not in self._validator.field_names:
            raise ConfigurationError(
                f"Identity field '{identity}' is not defined on the {name} schema"
            )
        check_reserved("fields", name, self._validator.field_names)

        methods = dict(methods or {})
        check_method_names(name, methods, self._validator.field_names)

        self._name = name
        self._schema = schema
        self._identity = identity
        self._methods = types.MappingProxyType(methods)
        self._historize = (
            get_settings().entities.historize if historize is None else historize
        )
        self._clock = clock or DEFAULT_CLOCK

    def __repr__(self) -> str:
        return f"EntityFactory(name={self._name!r}, identity={self._identity!r})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def schema(self) -> type[BaseModel]:
        return self._schema

    @property
    def identity(self) -> str:
        return self._identity

    @property
    def methods(self) -> Mapping[str, Method]:
        return self._methods

    @property
    def historize(self) -> bool:
        return self._historize

    @property
    def clock(self) -> IClock:
        return self._clock

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create(self, data: Mapping[str, Any] | BaseModel | Entity) -> Entity:
        """Validate ``data`` and build a new frozen instance.

        Raises:
            ValidationError: ``data`` does not satisfy the schema.
        """
        model = self._parse(data)
        history: tuple[HistoryEntry, ...] | None = () if self._historize else None
        return self._build(model, history)

    def update(
        self,
        instance: Entity | Mapping[str, Any],
        updates: Mapping[str, Any] | BaseModel,
    ) -> Entity:
        """Return a new instance with ``updates`` merged onto ``instance``.

        The merged data is validated as a whole.  ``instance`` is never
        modified.  An identity value in ``updates`` is coerced to the
        identity field's type before it is compared, so ``{"id": "1"}``
        does not change an ``int`` identity of ``1``.

        Raises:
            DomainError: ``updates`` would change the identity.
            ValidationError: the merged data does not satisfy the schema.
        """
        if isinstance(updates, BaseModel):
            updates = updates.model_dump(exclude_unset=True)
        if not isinstance(updates, Mapping):
            raise DomainError(
                f"Updates for {self._name} must be a mapping, got {type(updates).__name__}",
                context={"object_type": self._name},
            )

        if isinstance(instance, Entity):
            current = instance.to_dict()
            previous_history = instance.change_history
        elif isinstance(instance, Mapping):
            current = dict(instance)
            previous_history = None
        else:
            raise DomainError(
                f"Cannot update {self._name}: expected an entity, got {type(instance).__name__}",
                context={"object_type": self._name},
            )

        current_id = current.get(self._identity)
        if self._identity in updates and self._validator.coerce_field(
            self._identity, updates[self._identity]
        ) != self._validator.coerce_field(self._identity, current_id):
            raise DomainError(
                f'Cannot change identity of {self._name} from "{current_id}" '
                f'to "{updates[self._identity]}"',
                context={"object_type": self._name, "updates": dict(updates)},
            )

        model = self._parse({**current, **updates})

        history: tuple[HistoryEntry, ...] | None = None
        if self._historize:
            history = tuple(previous_history or ())
            now = self._clock.now()
            changes = diff_fields(current, model.model_dump(), now)
            if changes:
                history = (*history, HistoryEntry(timestamp=now, changes=changes))

        return self._build(model, history)

    def extend(
        self,
        name: str,
        schema: Callable[[type[BaseModel]], type[BaseModel]] | None = None,
        methods: Mapping[str, Method] | None = None,
        identity: str | None = None,
        historize: bool | None = None,
    ) -> EntityFactory:
        """Derive a new, independent factory.

        ``schema`` transforms the base schema; parent methods are merged
        with ``methods`` (the new ones win); identity and historization
        default to this factory's settings.
        """
        if not name:
            raise ConfigurationError("Extended entity name is required")

        return EntityFactory(
            name=name,
            schema=schema(self._schema) if schema else self._schema,
            identity=identity or self._identity,
            methods={**self._methods, **(methods or {})},
            historize=self._historize if historize is None else historize,
            clock=self._clock,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _parse(self, data: Any) -> BaseModel:
        if isinstance(data, Entity):
            data = data.to_dict()
        model = self._validator.parse(data)
        if getattr(model, self._identity, None) is None:
            raise ValidationError(
                f'Invalid {self._name}: identity field "{self._identity}" is required',
                context={"object_type": self._name, "input": data},
                errors=[{"field": self._identity, "message": "Identity value is required", "type": "missing"}],
            )
        return model

    def _build(
        self, model: BaseModel, history: tuple[HistoryEntry, ...] | None
    ) -> Entity:
        return Entity(self._name, self._identity, model, history, self._methods)


def entity(
    *,
    name: str,
    schema: type[BaseModel],
    identity: str,
    methods: Mapping[str, Method] | None = None,
    historize: bool | None = None,
    clock: IClock | None = None,
) -> EntityFactory:
    """Keyword builder for ``EntityFactory``."""
    return EntityFactory(
        name=name,
        schema=schema,
        identity=identity,
        methods=methods,
        historize=historize,
        clock=clock,
    )
