"""Reusable constrained field types for schemas and value objects.

    class Product(BaseModel):
        sku: Identifier
        title: NonEmptyString
        price: PositiveNumber
        discount: PercentageNumber = 0.0
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field, StringConstraints

# Strings
TrimmedString = Annotated[str, StringConstraints(strip_whitespace=True)]
NonEmptyString = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Identifier = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)
]

# Numbers (finite only)
PositiveNumber = Annotated[float, Field(gt=0, allow_inf_nan=False)]
NonNegativeNumber = Annotated[float, Field(ge=0, allow_inf_nan=False)]
IntegerNumber = Annotated[int, Field()]
PercentageNumber = Annotated[float, Field(ge=0, le=1, allow_inf_nan=False)]  # fraction, 0.25 == 25%
