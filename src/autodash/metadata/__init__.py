"""Table and field metadata consumed by the heuristics."""

from autodash.metadata.models import FieldMetadata, LinkedTable, TableMetadata
from autodash.metadata.store import (
    InMemoryMetadataStore,
    MetadataStore,
    find_table,
    linked_tables,
)

__all__ = [
    "FieldMetadata",
    "InMemoryMetadataStore",
    "LinkedTable",
    "MetadataStore",
    "TableMetadata",
    "find_table",
    "linked_tables",
]
