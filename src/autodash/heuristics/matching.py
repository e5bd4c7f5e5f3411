"""Find fields matching a rule's field type."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from typing import TYPE_CHECKING

from autodash.metadata.models import FieldMetadata, LinkedTable
from autodash.taxonomy import TypeTaxonomy, is_special_name

if TYPE_CHECKING:
    from autodash.heuristics.context import Context


def match_fields(field_type: str, fields: Iterable[FieldMetadata], taxonomy: TypeTaxonomy) -> list[FieldMetadata]:
    """All ``fields`` of type ``field_type``.

    A special dimension name matches by exact field name; any other type
    matches fields whose base type or special type is a subtype of it.
    """
    if is_special_name(field_type):
        return [f for f in fields if f.name == field_type]
    return [
        f
        for f in fields
        if taxonomy.is_subtype(f.base_type, field_type) or taxonomy.is_subtype(f.special_type, field_type)
    ]


def find_linked_tables(table_type: str, context: "Context") -> list[LinkedTable]:
    """Linked tables whose entity type is a subtype of ``table_type``, in traversal order."""
    return [
        lt for lt in context.linked_tables if context.taxonomy.is_subtype(lt.table.entity_type, table_type)
    ]


def match_fields_across(table_type: str, field_type: str, context: "Context") -> list[FieldMetadata]:
    """Matching fields on the first linked table of ``table_type``.

    Each returned field carries ``link``: the foreign key on the root table
    used to reach it. When several linked tables qualify only the first one
    is searched.
    """
    candidates = find_linked_tables(table_type, context)
    if not candidates:
        return []
    linked = candidates[0]
    return [
        replace(f, link=linked.via_fk_field_id)
        for f in match_fields(field_type, context.fields_of(linked.table.id), context.taxonomy)
    ]


def field_candidates(context: "Context", field_type: str, table_type: str | None = None) -> list[FieldMetadata]:
    if table_type is None:
        return match_fields(field_type, context.fields_of(context.root_table.id), context.taxonomy)
    return match_fields_across(table_type, field_type, context)
