"""Entity engine: identity-compared, immutable domain records."""

from domainkit.entities.base import Entity, EntityFactory, RESERVED_NAMES, entity
from domainkit.entities.history import FieldChange, HistoryEntry, diff_fields

__all__ = [
    "Entity",
    "EntityFactory",
    "FieldChange",
    "HistoryEntry",
    "RESERVED_NAMES",
    "diff_fields",
    "entity",
]
