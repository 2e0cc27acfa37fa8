"""String value objects.

    title = NonEmptyStringValue.create("  desk lamp ")
    title.capitalize()           # NonEmptyStringValue(value="Desk lamp")
    str(title.truncate(6))       # "des..."
"""

from __future__ import annotations

import re
from typing import Any

from domainkit.value_objects.base import PrimitiveValue
from domainkit.value_objects.primitives import NonEmptyString


def _fill(width: int, fill: str) -> str:
    if not fill:
        raise ValueError("fill must be a non-empty string")
    return (fill * width)[:width]


class StringValue(PrimitiveValue):
    """Immutable string with text operations."""

    value: str

    def __len__(self) -> int:
        return len(self.value)

    # --- queries ---
    def contains(self, substring: str) -> bool:
        return substring in self.value

    def startswith(self, prefix: str) -> bool:
        return self.value.startswith(prefix)

    def endswith(self, suffix: str) -> bool:
        return self.value.endswith(suffix)

    def matches(self, pattern: str | re.Pattern[str]) -> bool:
        """True when ``pattern`` is found anywhere in the value."""
        return re.search(pattern, self.value) is not None

    def is_empty(self) -> bool:
        return not self.value

    def split(self, sep: str | None = None) -> list[str]:
        return self.value.split(sep)

    # --- transformations ---
    def truncate(self, max_length: int, suffix: str = "...") -> Any:
        """Cut to ``max_length`` characters, ``suffix`` included."""
        if len(self.value) <= max_length:
            return self
        keep = max(max_length - len(suffix), 0)
        return self._derive(self.value[:keep] + suffix)

    def lower(self) -> Any:
        return self._derive(self.value.lower())

    def upper(self) -> Any:
        return self._derive(self.value.upper())

    def capitalize(self) -> Any:
        """Upper-case the first character, leave the rest untouched."""
        return self._derive(self.value[:1].upper() + self.value[1:])

    def strip(self) -> Any:
        return self._derive(self.value.strip())

    def replace_text(self, old: str, new: str, count: int = -1) -> Any:
        return self._derive(self.value.replace(old, new, count))

    def substring(self, start: int, end: int | None = None) -> Any:
        return self._derive(self.value[start:end])

    def pad(self, width: int, fill: str = " ") -> Any:
        """Centre the value in ``width`` characters; the extra one goes right."""
        missing = width - len(self.value)
        if missing <= 0:
            return self
        left = missing // 2
        return self._derive(_fill(left, fill) + self.value + _fill(missing - left, fill))

    def pad_start(self, width: int, fill: str = " ") -> Any:
        missing = width - len(self.value)
        if missing <= 0:
            return self
        return self._derive(_fill(missing, fill) + self.value)

    def pad_end(self, width: int, fill: str = " ") -> Any:
        missing = width - len(self.value)
        if missing <= 0:
            return self
        return self._derive(self.value + _fill(missing, fill))


class NonEmptyStringValue(StringValue):
    """String that is non-empty after trimming."""

    value: NonEmptyString
