"""Specifications: named, composable predicates for selecting instances."""

from domainkit.specifications.base import Specification, as_specification, specification
from domainkit.specifications.common import (
    always_false,
    always_true,
    get_property,
    parameterized_specification,
    property_between,
    property_contains,
    property_equals,
    property_greater_than,
    property_in,
    property_is_not_null,
    property_is_null,
    property_less_than,
    property_matches,
)

__all__ = [
    "Specification",
    "always_false",
    "always_true",
    "as_specification",
    "get_property",
    "parameterized_specification",
    "property_between",
    "property_contains",
    "property_equals",
    "property_greater_than",
    "property_in",
    "property_is_not_null",
    "property_is_null",
    "property_less_than",
    "property_matches",
    "specification",
]
