"""Metadata store interface and an in-memory implementation."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from autodash.errors import MetadataUnavailable
from autodash.metadata.models import FieldMetadata, LinkedTable, TableMetadata


class MetadataStore(Protocol):
    """Read-only access to committed table and field metadata."""

    def get_table(self, table_id: int) -> TableMetadata: ...

    def get_fields(self, table_id: int) -> list[FieldMetadata]: ...

    def get_field(self, field_id: int) -> FieldMetadata: ...

    def list_tables(self) -> list[TableMetadata]: ...


class InMemoryMetadataStore:
    """Metadata store backed by plain lists, used for tests and previews."""

    def __init__(self, tables: Iterable[TableMetadata], fields: Iterable[FieldMetadata]):
        self._tables = {t.id: t for t in tables}
        self._fields = {f.id: f for f in fields}

    def get_table(self, table_id: int) -> TableMetadata:
        try:
            return self._tables[table_id]
        except KeyError:
            raise MetadataUnavailable(f"Unknown table id {table_id}", {"table_id": table_id}) from None

    def get_fields(self, table_id: int) -> list[FieldMetadata]:
        if table_id not in self._tables:
            raise MetadataUnavailable(f"Unknown table id {table_id}", {"table_id": table_id})
        return [f for f in self._fields.values() if f.table_id == table_id]

    def get_field(self, field_id: int) -> FieldMetadata:
        try:
            return self._fields[field_id]
        except KeyError:
            raise MetadataUnavailable(f"Unknown field id {field_id}", {"field_id": field_id}) from None

    def list_tables(self) -> list[TableMetadata]:
        return list(self._tables.values())

    def find_table(self, name: str) -> TableMetadata:
        """Look a table up by name (case-insensitive)."""
        return find_table(self, name)


def find_table(store: MetadataStore, name: str) -> TableMetadata:
    wanted = name.lower()
    for table in store.list_tables():
        if table.name.lower() == wanted:
            return table
    raise MetadataUnavailable(f"Table not found: {name}", {"table": name})


def linked_tables(store: MetadataStore, table: TableMetadata) -> list[LinkedTable]:
    """All tables reachable from ``table`` by one foreign-key hop.

    Returned in the order of the root table's foreign-key fields.
    """
    links = []
    for fk_field in store.get_fields(table.id):
        if fk_field.fk_target_field_id is None:
            continue
        target = store.get_field(fk_field.fk_target_field_id)
        links.append(LinkedTable(table=store.get_table(target.table_id), via_fk_field_id=fk_field.id))
    return links
