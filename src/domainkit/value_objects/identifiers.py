"""Identifier value objects.

``IdentifierValue`` wraps a free-form, non-empty identifier.  Its class
methods build narrower identifier kinds:

    OrderNo = IdentifierValue.pattern(r"^ORD-\\d{6}$", name="OrderNo")
    Seq = IdentifierValue.numeric(min_value=1000)
    Seq.create(1000).next()                  # NumericIdentifier(value=1001)
    IdentifierValue.uuid().create(IdentifierValue.generate_uuid()).version()   # 4
"""

from __future__ import annotations

import re
from typing import Annotated, Any

from pydantic import AfterValidator, Field, StringConstraints

from domainkit.core.errors import DomainError
from domainkit.core.ids import new_id
from domainkit.value_objects.base import PrimitiveValue
from domainkit.value_objects.primitives import Identifier

UUID_PATTERN = r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"


def matching(pattern: str | re.Pattern[str]) -> AfterValidator:
    """Validator requiring ``pattern`` to be found in the value."""
    compiled = re.compile(pattern)

    def check(value: str) -> str:
        if compiled.search(value) is None:
            raise ValueError(f"must match pattern {compiled.pattern!r}")
        return value

    return AfterValidator(check)


class UUIDIdentifier(PrimitiveValue):
    """Identifier holding a UUID in its canonical hyphenated form."""

    value: Annotated[str, StringConstraints(strip_whitespace=True), matching(UUID_PATTERN)]

    def version(self) -> int:
        return int(self.value[14], 16)

    def compact(self) -> str:
        return self.value.replace("-", "")

    def segment(self, index: int) -> str:
        """One of the five hyphen-separated groups, ``0`` to ``4``."""
        segments = self.value.split("-")
        if not 0 <= index < len(segments):
            raise DomainError(
                f"Segment index out of range (0-{len(segments) - 1}): {index}",
                context={"object_type": type(self).__name__},
            )
        return segments[index]


class NumericIdentifier(PrimitiveValue):
    """Sequential integer identifier, ``1`` or more by default."""

    value: Annotated[int, Field(ge=1)]

    def next(self) -> Any:
        return self._derive(self.value + 1)

    def padded(self, width: int) -> str:
        """Zero-padded to ``width`` digits."""
        return str(self.value).zfill(width)


class PatternIdentifier(PrimitiveValue):
    """Identifier constrained by a regular expression."""

    value: str

    def extract(self, pattern: str | re.Pattern[str]) -> list[str]:
        """Capture groups of ``pattern`` in the value, or ``[]``."""
        match = re.search(pattern, self.value)
        return list(match.groups()) if match else []


class IdentifierValue(PrimitiveValue):
    """Non-empty, trimmed identifier of at most 255 characters."""

    value: Identifier

    def matches(self, pattern: str | re.Pattern[str]) -> bool:
        return re.search(pattern, self.value) is not None

    def format(self, template: str) -> str:
        """``template`` with ``{id}`` replaced by the value."""
        return template.replace("{id}", self.value)

    def with_prefix(self, prefix: str) -> Any:
        return self._derive(f"{prefix}{self.value}")

    def with_suffix(self, suffix: str) -> Any:
        return self._derive(f"{self.value}{suffix}")

    @staticmethod
    def generate_uuid() -> str:
        return new_id()

    @staticmethod
    def uuid() -> type[UUIDIdentifier]:
        return UUIDIdentifier

    @staticmethod
    def numeric(min_value: int = 1) -> type[NumericIdentifier]:
        if min_value == 1:
            return NumericIdentifier
        return NumericIdentifier.extend(  # type: ignore[return-value]
            "NumericIdentifier", value=Annotated[int, Field(ge=min_value)]
        )

    @staticmethod
    def pattern(
        regex: str | re.Pattern[str], name: str = "PatternIdentifier"
    ) -> type[PatternIdentifier]:
        return PatternIdentifier.extend(  # type: ignore[return-value]
            name, value=Annotated[str, matching(regex)]
        )
