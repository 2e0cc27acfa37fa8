"""Validation layer: schema checks and business-rule invariants.

Public API
----------
Schema:
    SchemaValidator, SchemaResult, is_schema

Invariants:
    Invariant, InvariantSet
"""

from domainkit.validation.invariants import Invariant, InvariantSet
from domainkit.validation.schema import SchemaResult, SchemaValidator, is_schema

__all__ = [
    "Invariant",
    "InvariantSet",
    "SchemaResult",
    "SchemaValidator",
    "is_schema",
]
