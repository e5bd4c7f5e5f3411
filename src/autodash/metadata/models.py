"""Immutable snapshots of table and field metadata."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class FieldMetadata:
    """A column as seen by the heuristics.

    ``link`` is not stored metadata: it is the id of the foreign-key field on
    the root table through which this field was reached, and is only set on
    fields matched in a linked table.
    """

    id: int
    table_id: int
    name: str
    base_type: str
    special_type: str | None = None
    fk_target_field_id: int | None = None
    display_name: str | None = None
    link: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TableMetadata:
    """A table and its domain classification."""

    id: int
    name: str
    db_id: int
    entity_type: str | None = None
    display_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class LinkedTable:
    """A table reachable from the root table through one foreign key."""

    table: TableMetadata
    via_fk_field_id: int
