"""Value objects and constrained primitive types.

The ``Annotated`` primitives (``NonEmptyString``, ``PositiveNumber``, ...)
are schema fragments for model fields.  The ``*Value`` classes wrap one
such scalar as a value object with operations.
"""

from domainkit.value_objects.base import PrimitiveValue, ValueObject
from domainkit.value_objects.identifiers import (
    IdentifierValue,
    NumericIdentifier,
    PatternIdentifier,
    UUIDIdentifier,
)
from domainkit.value_objects.numbers import (
    IntegerNumberValue,
    NonNegativeNumberValue,
    NumberValue,
    PercentageNumberValue,
    PositiveNumberValue,
)
from domainkit.value_objects.primitives import (
    Identifier,
    IntegerNumber,
    NonEmptyString,
    NonNegativeNumber,
    PercentageNumber,
    PositiveNumber,
    TrimmedString,
)
from domainkit.value_objects.strings import NonEmptyStringValue, StringValue

__all__ = [
    "Identifier",
    "IdentifierValue",
    "IntegerNumber",
    "IntegerNumberValue",
    "NonEmptyString",
    "NonEmptyStringValue",
    "NonNegativeNumber",
    "NonNegativeNumberValue",
    "NumberValue",
    "NumericIdentifier",
    "PatternIdentifier",
    "PercentageNumber",
    "PercentageNumberValue",
    "PositiveNumber",
    "PositiveNumberValue",
    "PrimitiveValue",
    "StringValue",
    "TrimmedString",
    "UUIDIdentifier",
    "ValueObject",
]
