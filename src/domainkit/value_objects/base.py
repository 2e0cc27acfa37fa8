"""Value objects: immutable, attribute-compared domain values."""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from domainkit.core.errors import ConfigurationError
from domainkit.validation.schema import SchemaValidator


class ValueObject(BaseModel):
    """Base class for value objects.

    Value objects have no identity: two instances are equal when all of
    their fields are equal.  They are frozen, so a "change" is a new
    instance built with ``replace``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def create(cls, data: Any = None, **fields: Any) -> ValueObject:
        """Validate ``data`` (or keyword fields) into a new instance.

        Raises:
            ValidationError: the data does not satisfy the model.
        """
        raw = fields if data is None else data
        return SchemaValidator(cls, cls.__name__).parse(raw)

    @classmethod
    def extend(
        cls,
        name: str,
        methods: Mapping[str, Callable[..., Any]] | None = None,
        **fields: Any,
    ) -> type[ValueObject]:
        """Derive a value object class named ``name``.

        ``fields`` adds or narrows fields, each given as an annotation or
        as ``(annotation, default)``.  ``methods`` adds operations; on a
        name clash the new ones win.

            Email = StringValue.extend(
                "Email",
                value=Annotated[str, StringConstraints(to_lower=True, pattern=r"@")],
            )

        Raises:
            ConfigurationError: missing name, or a method that is not
                callable or is named like a field.
        """
        if not name:
            raise ConfigurationError("Extended value object name is required")

        annotations: dict[str, Any] = {}
        namespace: dict[str, Any] = {"__module__": cls.__module__, "__qualname__": name}
        for field_name, spec in fields.items():
            if isinstance(spec, tuple):
                annotations[field_name], namespace[field_name] = spec
            else:
                annotations[field_name] = spec

        for method_name, fn in (methods or {}).items():
            if not callable(fn):
                raise ConfigurationError(f"{name}: method '{method_name}' is not callable")
            if method_name in annotations or method_name in cls.model_fields:
                raise ConfigurationError(f"{name}: method '{method_name}' clashes with a field")
            namespace[method_name] = fn

        namespace["__annotations__"] = annotations
        return type(cls)(name, (cls,), namespace)

    def equals(self, other: Any) -> bool:
        if other is None:
            return False
        return self == other

    def replace(self, **changes: Any) -> ValueObject:
        """Return a validated copy with ``changes`` applied."""
        cls = type(self)
        return SchemaValidator(cls, cls.__name__).parse({**self.model_dump(), **changes})

    def __str__(self) -> str:
        body = json.dumps(self.model_dump(mode="json"), sort_keys=True)
        return f"{type(self).__name__}({body})"


class PrimitiveValue(ValueObject):
    """Value object wrapping one validated scalar in ``value``.

    ``create`` takes the bare scalar.  Operations return new instances of
    the same class, so a subclass's constraints hold for every result.
    """

    value: Any

    @classmethod
    def create(cls, data: Any = None, **fields: Any) -> PrimitiveValue:
        if isinstance(data, PrimitiveValue):
            data = data.value
        if data is not None and not isinstance(data, Mapping):
            data = {"value": data}
        return super().create(data, **fields)

    def equals(self, other: Any) -> bool:
        """Compare by wrapped value, against another wrapper or a bare scalar."""
        if other is None:
            return False
        if isinstance(other, PrimitiveValue):
            return bool(self.value == other.value)
        return bool(self.value == other)

    def _derive(self, value: Any) -> Any:
        return type(self).create(value)

    def __str__(self) -> str:
        return str(self.value)
