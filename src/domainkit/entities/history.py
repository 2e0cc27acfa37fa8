"""Field-level change history for historized entities."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from datetime import datetime
from typing import Any

_MISSING: Any = object()


@dataclass(frozen=True)
class FieldChange:
    """One field transition recorded by ``update``."""

    field: str
    old_value: Any
    new_value: Any
    timestamp: datetime


@dataclass(frozen=True)
class HistoryEntry:
    """All changes applied by a single ``update`` call."""

    timestamp: datetime
    changes: tuple[FieldChange, ...]

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(c.field for c in self.changes)


def diff_fields(
    old: dict[str, Any], new: dict[str, Any], timestamp: datetime
) -> tuple[FieldChange, ...]:
    """Compare two validated raw dicts field by field.

    Values are compared with ``==`` on the dumped (plain) data, so nested
    models, lists and dicts are compared structurally.  Fields absent on
    one side are reported with ``None`` for the missing value.
    """
    changes: list[FieldChange] = []
    for key in (*new, *(k for k in old if k not in new)):
        before = old.get(key, _MISSING)
        after = new.get(key, _MISSING)
        if before is not _MISSING and after is not _MISSING and before == after:
            continue
        changes.append(
            FieldChange(
                field=key,
                old_value=None if before is _MISSING else copy.deepcopy(before),
                new_value=None if after is _MISSING else copy.deepcopy(after),
                timestamp=timestamp,
            )
        )
    return tuple(changes)
