"""Ready-made property specifications.

Properties are looked up on mappings by key and on other objects by
attribute; dotted names (``"customer.country"``) walk nested values.  A
missing property never satisfies a comparison.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Collection, Mapping
from typing import Any

from domainkit.core.errors import ConfigurationError
from domainkit.specifications.base import Predicate, Specification

_MISSING: Any = object()


def get_property(candidate: Any, path: str) -> Any:
    """Read a (dotted) property, or ``_MISSING`` when absent."""
    value = candidate
    for part in path.split("."):
        if value is None or value is _MISSING:
            return _MISSING
        if isinstance(value, Mapping):
            value = value.get(part, _MISSING)
        else:
            value = getattr(value, part, _MISSING)
    return value


def _compare(path: str, name: str, test: Callable[[Any], bool]) -> Specification:
    def predicate(candidate: Any) -> bool:
        if candidate is None:
            return False
        value = get_property(candidate, path)
        if value is _MISSING:
            return False
        try:
            return bool(test(value))
        except TypeError:
            return False

    return Specification(name, predicate)


def property_equals(path: str, expected: Any, name: str | None = None) -> Specification:
    return _compare(path, name or f"Property {path} Equals {expected}", lambda v: v == expected)


def property_contains(path: str, item: Any, name: str | None = None) -> Specification:
    """Substring test on strings, membership test on collections."""

    def test(value: Any) -> bool:
        if isinstance(value, str):
            return isinstance(item, str) and item in value
        if isinstance(value, Collection) and not isinstance(value, Mapping):
            return item in value
        return False

    return _compare(path, name or f"Property {path} Contains {item}", test)


def property_matches(path: str, pattern: str | re.Pattern[str], name: str | None = None) -> Specification:
    compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
    return _compare(
        path,
        name or f"Property {path} Matches {compiled.pattern}",
        lambda v: isinstance(v, str) and compiled.search(v) is not None,
    )


def property_greater_than(path: str, bound: Any, name: str | None = None) -> Specification:
    return _compare(path, name or f"Property {path} > {bound}", lambda v: v is not None and v > bound)


def property_less_than(path: str, bound: Any, name: str | None = None) -> Specification:
    return _compare(path, name or f"Property {path} < {bound}", lambda v: v is not None and v < bound)


def property_between(path: str, low: Any, high: Any, name: str | None = None) -> Specification:
    """Inclusive range check."""
    return _compare(
        path,
        name or f"Property {path} Between {low} and {high}",
        lambda v: v is not None and low <= v <= high,
    )


def property_in(path: str, values: Collection[Any], name: str | None = None) -> Specification:
    allowed = list(values)
    label = ", ".join(str(v) for v in allowed)
    return _compare(path, name or f"Property {path} In [{label}]", lambda v: v in allowed)


def property_is_null(path: str, name: str | None = None) -> Specification:
    """Satisfied when the property is ``None`` or absent."""

    def predicate(candidate: Any) -> bool:
        if candidate is None:
            return False
        value = get_property(candidate, path)
        return value is None or value is _MISSING

    return Specification(name or f"Property {path} Is Null", predicate)


def property_is_not_null(path: str, name: str | None = None) -> Specification:
    return _compare(path, name or f"Property {path} Is Not Null", lambda v: v is not None)


def always_true() -> Specification:
    return Specification("Always True", lambda _: True)


def always_false() -> Specification:
    return Specification("Always False", lambda _: False)


def parameterized_specification(
    *,
    name: str | Callable[[Any], str],
    create_predicate: Callable[[Any], Predicate],
) -> Callable[[Any], Specification]:
    """Build a specification factory taking one parameter object.

        min_total = parameterized_specification(
            name=lambda p: f"Total at least {p}",
            create_predicate=lambda p: lambda order: order.total >= p,
        )
        spec = min_total(100)
    """
    if not name or not callable(create_predicate):
        raise ConfigurationError(
            "Parameterized specification requires a name and create_predicate"
        )

    def build(params: Any) -> Specification:
        final_name = name(params) if callable(name) else name
        return Specification(final_name, create_predicate(params))

    return build
