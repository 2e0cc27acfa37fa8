"""Named business-rule invariants for aggregates.

An invariant is data (name + predicate + optional message), not a method
on the aggregate.  This keeps rule sets auditable and lets ``extend``
concatenate them: a derived aggregate checks its parent's invariants
first, then its own, and can never drop an inherited rule.

Invariants always see the complete candidate state (post-create or
post-update), never a partially applied patch.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from domainkit.core.errors import ConfigurationError, InvariantViolationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Invariant:
    """A single business rule.

    ``check`` receives the candidate instance and returns True when the
    rule holds.
    """

    name: str
    check: Callable[[Any], bool]
    message: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ConfigurationError("Invariant name is required")
        if not callable(self.check):
            raise ConfigurationError(
                f"Invariant '{self.name}' check must be callable"
            )

    @classmethod
    def coerce(cls, value: Invariant | Mapping[str, Any]) -> Invariant:
        """Accept an ``Invariant`` or a ``{"name", "check", "message"}`` mapping."""
        if isinstance(value, Invariant):
            return value
        if isinstance(value, Mapping):
            return cls(
                name=value.get("name", ""),
                check=value.get("check"),  # type: ignore[arg-type]
                message=value.get("message"),
            )
        raise ConfigurationError(f"Invalid invariant definition: {value!r}")

    def describe_violation(self, aggregate_name: str) -> str:
        return self.message or f"Invariant '{self.name}' violated in {aggregate_name}"


class InvariantSet:
    """Immutable, ordered collection of invariants with unique names."""

    __slots__ = ("_invariants",)

    def __init__(
        self, invariants: Iterable[Invariant | Mapping[str, Any]] = ()
    ) -> None:
        coerced = tuple(Invariant.coerce(inv) for inv in invariants)
        seen: set[str] = set()
        for inv in coerced:
            if inv.name in seen:
                raise ConfigurationError(f"Duplicate invariant name: '{inv.name}'")
            seen.add(inv.name)
        self._invariants = coerced

    def __iter__(self) -> Iterator[Invariant]:
        return iter(self._invariants)

    def __len__(self) -> int:
        return len(self._invariants)

    def __repr__(self) -> str:
        return f"InvariantSet({list(self.names)!r})"

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(inv.name for inv in self._invariants)

    def extended(
        self, more: Iterable[Invariant | Mapping[str, Any]]
    ) -> InvariantSet:
        """Return these invariants followed by ``more``."""
        return InvariantSet((*self._invariants, *more))

    def validate(self, aggregate_name: str, candidate: Any) -> None:
        """Check every invariant in order; raise on the first violation."""
        for invariant in self._invariants:
            cause: BaseException | None = None
            try:
                satisfied = bool(invariant.check(candidate))
            except Exception as exc:
                satisfied = False
                cause = exc

            if satisfied:
                continue

            logger.debug(
                "Invariant '%s' violated in %s", invariant.name, aggregate_name
            )
            raise InvariantViolationError(
                invariant.describe_violation(aggregate_name),
                invariant.name,
                {"aggregate": aggregate_name, "data": _snapshot(candidate)},
                cause,
            ) from cause


def _snapshot(candidate: Any) -> Any:
    to_dict = getattr(candidate, "to_dict", None)
    return to_dict() if callable(to_dict) else candidate
