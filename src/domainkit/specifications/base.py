"""Composable business-rule predicates (Specification pattern).

A specification names a predicate over candidates (aggregates, entities,
plain mappings) so that selection rules can be combined and reused:

    active = property_equals("status", "ACTIVE")
    big = property_greater_than("total", 1000)
    spec = active & ~big

Plain callables are accepted wherever a specification is expected.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from domainkit.core.errors import ConfigurationError

Predicate = Callable[[Any], bool]


class Specification:
    """A named predicate that can be combined with ``&``, ``|`` and ``~``."""

    __slots__ = ("_name", "_predicate")

    def __init__(self, name: str, predicate: Predicate) -> None:
        if not name:
            raise ConfigurationError("Specification name is required")
        if not callable(predicate):
            raise ConfigurationError(
                f"Specification '{name}' must have a callable predicate"
            )
        self._name = name
        self._predicate = predicate

    @property
    def name(self) -> str:
        return self._name

    def is_satisfied_by(self, candidate: Any) -> bool:
        return bool(self._predicate(candidate))

    def __call__(self, candidate: Any) -> bool:
        return self.is_satisfied_by(candidate)

    def __repr__(self) -> str:
        return f"Specification({self._name!r})"

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def and_(self, other: Specification | Predicate) -> Specification:
        right = as_specification(other)
        return Specification(
            f"{self._name} AND {right.name}",
            lambda c: self.is_satisfied_by(c) and right.is_satisfied_by(c),
        )

    def or_(self, other: Specification | Predicate) -> Specification:
        right = as_specification(other)
        return Specification(
            f"{self._name} OR {right.name}",
            lambda c: self.is_satisfied_by(c) or right.is_satisfied_by(c),
        )

    def not_(self) -> Specification:
        return Specification(f"NOT {self._name}", lambda c: not self.is_satisfied_by(c))

    __and__ = and_
    __or__ = or_

    def __invert__(self) -> Specification:
        return self.not_()


def as_specification(candidate: Any) -> Specification:
    """Coerce a specification-like object (or a plain callable)."""
    if isinstance(candidate, Specification):
        return candidate
    is_satisfied_by = getattr(candidate, "is_satisfied_by", None)
    if callable(is_satisfied_by):
        name = getattr(candidate, "name", None) or type(candidate).__name__
        return Specification(name, is_satisfied_by)
    if callable(candidate):
        return Specification(getattr(candidate, "__name__", None) or "predicate", candidate)
    raise ConfigurationError(f"Not a specification: {candidate!r}")


def specification(*, name: str, is_satisfied_by: Predicate) -> Specification:
    """Keyword builder for ``Specification``."""
    return Specification(name, is_satisfied_by)
