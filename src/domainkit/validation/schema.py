"""Structural schema validation.

Hard fail: if raw data doesn't match the declared shape, no entity or
aggregate instance is built.

Schemas are Pydantic model classes.  ``SchemaValidator.validate`` never
raises and reports the outcome as a ``SchemaResult``; ``parse`` raises
``ValidationError`` carrying the offending field paths.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from domainkit.core.errors import ConfigurationError, ValidationError

logger = logging.getLogger(__name__)


def is_schema(candidate: Any) -> bool:
    """True for Pydantic model classes."""
    return isinstance(candidate, type) and issubclass(candidate, BaseModel)


@dataclass(frozen=True)
class SchemaResult:
    """Outcome of a validation run.  Exactly one of data/error is set."""

    success: bool
    data: BaseModel | None = None
    error: ValidationError | None = None


@dataclass(frozen=True)
class SchemaValidator:
    """Validates raw mappings against a Pydantic model class.

    Parameters
    ----------
    schema:
        The Pydantic model class describing the valid shape.
    name:
        Object type reported in error messages (entity or event name).
    """

    schema: type[BaseModel]
    name: str
    context_key: str = field(default="object_type")

    def __post_init__(self) -> None:
        if not is_schema(self.schema):
            raise ConfigurationError(
                f"Schema for {self.name} must be a pydantic model class, "
                f"got {self.schema!r}"
            )

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(self.schema.model_fields)

    def coerce_field(self, name: str, value: Any) -> Any:
        """Coerce ``value`` to the declared type of field ``name``.

        Values the field type rejects are returned unchanged; full
        validation of the record reports them.
        """
        info = self.schema.model_fields.get(name)
        if info is None:
            return value
        try:
            return TypeAdapter(info.annotation).validate_python(value)
        except PydanticValidationError:
            return value

    def validate(self, raw: Any) -> SchemaResult:
        """Run schema validation.  Returns a result, never raises."""
        if isinstance(raw, BaseModel):
            raw = raw.model_dump()
        elif isinstance(raw, Mapping):
            raw = dict(raw)

        try:
            model = self.schema.model_validate(raw)
        except PydanticValidationError as exc:
            return SchemaResult(success=False, error=self._to_error(exc, raw))
        return SchemaResult(success=True, data=model)

    def parse(self, raw: Any) -> BaseModel:
        """Validate ``raw`` and return the model, raising on failure."""
        result = self.validate(raw)
        if not result.success:
            assert result.error is not None
            raise result.error from result.error.cause
        assert result.data is not None
        return result.data

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _to_error(self, exc: PydanticValidationError, raw: Any) -> ValidationError:
        errors = [
            {
                "field": ".".join(str(part) for part in err["loc"]),
                "message": err["msg"],
                "type": err["type"],
            }
            for err in exc.errors()
        ]
        summary = ", ".join(
            f"{e['field']}: {e['message']}" if e["field"] else e["message"]
            for e in errors
        )
        logger.debug("Schema validation failed for %s: %s", self.name, summary)
        return ValidationError(
            f"Invalid {self.name}: {summary}",
            exc,
            {self.context_key: self.name, "input": raw},
            errors=errors,
        )
