"""The per-table context rules are applied in.

A context is built in three dependent stages: dimensions first, then
metrics and filters, whose overload resolution reads the dimension
bindings. Every stage returns a new context; none is modified in place.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from autodash.heuristics.binding import Binding, bind_dimensions, resolve_overloads
from autodash.metadata.models import FieldMetadata, LinkedTable, TableMetadata
from autodash.metadata.store import MetadataStore, linked_tables
from autodash.rules.schemas import DimensionSpec, OverloadedDefinition, Rule
from autodash.taxonomy import TypeTaxonomy, default_taxonomy


@dataclass(frozen=True)
class Context:
    """Root table, what it links to, and everything bound so far."""

    root_table: TableMetadata
    linked_tables: tuple[LinkedTable, ...]
    database_id: int
    taxonomy: TypeTaxonomy
    fields: Mapping[int, tuple[FieldMetadata, ...]] = field(default_factory=dict)
    rule_table_type: str | None = None
    dimensions: Mapping[str, Binding] = field(default_factory=dict)
    metrics: Mapping[str, OverloadedDefinition] = field(default_factory=dict)
    filters: Mapping[str, OverloadedDefinition] = field(default_factory=dict)

    def fields_of(self, table_id: int) -> tuple[FieldMetadata, ...]:
        return self.fields.get(table_id, ())

    def summary(self) -> dict[str, Any]:
        return {
            "root_table": self.root_table.name,
            "rule": self.rule_table_type,
            "linked_tables": [lt.table.name for lt in self.linked_tables],
            "dimensions": {k: v.to_dict() for k, v in self.dimensions.items()},
            "metrics": {k: v.form for k, v in self.metrics.items()},
            "filters": {k: v.form for k, v in self.filters.items()},
        }


def with_dimensions(context: Context, specs: Iterable[DimensionSpec]) -> Context:
    return replace(context, dimensions=bind_dimensions(context, specs))


def with_metrics(context: Context, definitions: Iterable[OverloadedDefinition]) -> Context:
    return replace(context, metrics=resolve_overloads(context, definitions))


def with_filters(context: Context, definitions: Iterable[OverloadedDefinition]) -> Context:
    return replace(context, filters=resolve_overloads(context, definitions))


def base_context(
    root_table: TableMetadata,
    *,
    store: MetadataStore,
    taxonomy: TypeTaxonomy | None = None,
    database_id: int | None = None,
) -> Context:
    """Snapshot the root table, its one-hop neighbours and their fields."""
    links = tuple(linked_tables(store, root_table))
    fields = {root_table.id: tuple(store.get_fields(root_table.id))}
    for linked in links:
        if linked.table.id not in fields:
            fields[linked.table.id] = tuple(store.get_fields(linked.table.id))

    return Context(
        root_table=root_table,
        linked_tables=links,
        database_id=root_table.db_id if database_id is None else database_id,
        taxonomy=taxonomy or default_taxonomy(),
        fields=fields,
    )


def build_context(
    root_table: TableMetadata,
    rule: Rule,
    *,
    store: MetadataStore,
    taxonomy: TypeTaxonomy | None = None,
    database_id: int | None = None,
) -> Context:
    context = base_context(root_table, store=store, taxonomy=taxonomy, database_id=database_id)
    context = replace(context, rule_table_type=rule.table_type)
    context = with_dimensions(context, rule.dimensions)
    context = with_metrics(context, rule.metrics)
    return with_filters(context, rule.filters)
