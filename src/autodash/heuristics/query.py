"""Assemble queries from card templates and gate them on permissions."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import BaseModel

from autodash.heuristics.references import QUERY, to_reference
from autodash.metadata.models import FieldMetadata, LinkedTable
from autodash.rules.forms import collect_dimensions, is_dimension_form, postwalk
from autodash.rules.schemas import OverloadedDefinition
from autodash.safety.permissions import PermissionSet, check_query_permissions

logger = logging.getLogger(__name__)


class QuerySpec(BaseModel):
    """A structured query against one source table."""

    database: int
    source_table: int
    filter: Any = None
    breakout: list[Any] | None = None
    aggregation: list[Any] | None = None
    order_by: Any = None
    limit: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


def field_tables(
    fields: Iterable[FieldMetadata], linked_tables: Sequence[LinkedTable] = ()
) -> dict[int, int]:
    """Field id -> table id for ``fields`` and the targets of their foreign keys."""
    via_fk = {lt.via_fk_field_id: lt.table.id for lt in linked_tables}
    mapping: dict[int, int] = {}
    for f in fields:
        mapping[f.id] = f.table_id
        if f.fk_target_field_id is not None and f.id in via_fk:
            mapping[f.fk_target_field_id] = via_fk[f.id]
    return mapping


def build_query(
    bindings: Mapping[str, FieldMetadata],
    database_id: int,
    table_id: int,
    filters: Sequence[OverloadedDefinition],
    metrics: Sequence[OverloadedDefinition],
    dimensions: Sequence[Any],
    limit: int | None = None,
    order_by: Any = None,
    *,
    permissions: PermissionSet,
    linked_tables: Sequence[LinkedTable] = (),
) -> QuerySpec | None:
    """Instantiate a query with one field per dimension identifier.

    Every ``["dimension", Id]`` node is replaced by the query reference of
    ``bindings[Id]``. Returns None when a referenced dimension has no field,
    or when ``permissions`` do not grant write access to every table the
    query touches.
    """
    filter_forms = [f.form for f in filters]
    metric_forms = [m.form for m in metrics]

    missing = [d for d in collect_dimensions([filter_forms, metric_forms, dimensions, order_by]) if d not in bindings]
    if missing:
        logger.debug("Cannot build query on table %s: unbound dimensions %s", table_id, missing)
        return None

    body: dict[str, Any] = {"database": database_id, "source_table": table_id}
    if filter_forms:
        body["filter"] = filter_forms[0] if len(filter_forms) == 1 else ["and", *filter_forms]
    if dimensions:
        body["breakout"] = list(dimensions)
    if metric_forms:
        body["aggregation"] = metric_forms
    if order_by:
        body["order_by"] = order_by
    if limit:
        body["limit"] = limit

    resolved = postwalk(
        body,
        lambda form: to_reference(QUERY, bindings[form[1]]) if is_dimension_form(form) else form,
    )
    query = QuerySpec(**resolved)

    verdict = check_query_permissions(
        permissions, query, "write", field_tables(bindings.values(), linked_tables)
    )
    if not verdict.allowed:
        logger.debug("Dropping query on table %s: missing permissions %s", table_id, verdict.missing)
        return None
    return query
