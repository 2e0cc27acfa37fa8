"""Custom exception hierarchy for domainkit.

Every error raised by the library derives from ``DomainError`` so callers
can translate failures with a single ``except`` clause.  Each error carries
an optional underlying ``cause`` and a free-form ``context`` dict.
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base exception for all domain errors.

    Also raised directly for structural misuse, most notably an attempt to
    change an entity's identity through ``update``.
    """

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.cause = cause
        self.context: dict[str, Any] = dict(context or {})
        super().__init__(message)

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        """Serializable summary (used for logging and API error bodies)."""
        data: dict[str, Any] = {"name": self.name, "message": self.message}
        if self.cause is not None:
            data["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        if self.context:
            data["context"] = {k: repr(v) for k, v in self.context.items()}
        return data


# --- Configuration ---
class ConfigurationError(DomainError):
    """Missing or invalid factory configuration."""


# --- Validation ---
class ValidationError(DomainError):
    """Raw data failed schema validation.

    ``fields`` lists the dotted paths of the offending fields and
    ``errors`` the per-field details reported by the schema validator.
    """

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        context: dict[str, Any] | None = None,
        *,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message, cause, context)
        self.errors: list[dict[str, Any]] = list(errors or [])

    @property
    def fields(self) -> list[str]:
        return [e["field"] for e in self.errors if e.get("field")]


class InvariantViolationError(DomainError):
    """Candidate aggregate state broke a named business rule."""

    def __init__(
        self,
        message: str,
        invariant_name: str,
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause, context)
        self.invariant_name = invariant_name

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["invariant_name"] = self.invariant_name
        return data


# --- Events ---
class InvalidEventError(DomainError):
    """Malformed ``emit_event`` arguments or a failing event factory."""


class EventBusError(DomainError):
    """Event bus publish/subscribe failure."""


# --- Persistence ---
class RepositoryError(DomainError):
    """Repository operation failure."""


# --- Services ---
class DomainServiceError(DomainError):
    """Domain service could not be built, e.g. a dependency is missing."""
