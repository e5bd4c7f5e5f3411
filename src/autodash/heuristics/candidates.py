"""Expand card templates into concrete, scored card candidates.

A template referencing dimensions with several matching fields yields one
candidate per combination of fields. The combinations are streamed from
``itertools.product`` so callers can stop early or cap the count; the full
product is never held in memory.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterable, Iterator
from typing import Any

from pydantic import BaseModel, Field

from autodash.heuristics.context import Context
from autodash.heuristics.query import QuerySpec, build_query
from autodash.rules.forms import MAX_SCORE, collect_dimensions, dimension_form
from autodash.rules.schemas import CardTemplate
from autodash.safety.permissions import PermissionSet

logger = logging.getLogger(__name__)


class CardCandidate(BaseModel):
    """A card template instantiated with concrete fields."""

    identifier: str
    title: str | None = None
    description: str | None = None
    visualization: Any = None
    metrics: list[str] = Field(default_factory=list)
    filters: list[str] = Field(default_factory=list)
    dimensions: list[str] = Field(default_factory=list)
    limit: int | None = None
    order_by: Any = None
    score: float
    query: QuerySpec


def card_score(template_score: float, components: Iterable[Any]) -> float:
    """Template score scaled by how well its components scored on average.

    ``template_score * sum(scores) / (MAX_SCORE * count)``. Components
    without a score count towards the average as zero; a template with no
    components scores 0.
    """
    components = list(components)
    if not components:
        return 0.0
    total = sum(c.score for c in components if getattr(c, "score", None) is not None)
    return template_score * total / (MAX_SCORE * len(components))


def generate_candidates(
    context: Context,
    template: CardTemplate,
    *,
    permissions: PermissionSet,
    max_candidates: int | None = None,
) -> Iterator[CardCandidate]:
    """Yield one candidate per combination of fields bound to the template's dimensions.

    Templates referencing a metric, filter or dimension the context could not
    resolve yield nothing. Combinations whose query cannot be built or is
    not permitted are skipped. At most ``max_candidates`` are yielded when it
    is a positive number; None, zero or a negative cap means unbounded.
    """
    if max_candidates is not None and max_candidates <= 0:
        max_candidates = None

    metrics = [context.metrics.get(m) for m in template.metrics]
    filters = [context.filters.get(f) for f in template.filters]
    dimension_bindings = [context.dimensions.get(d) for d in template.dimensions]

    unresolved = [
        ref
        for ref, value in zip(
            [*template.metrics, *template.filters, *template.dimensions],
            [*metrics, *filters, *dimension_bindings],
        )
        if value is None
    ]
    if unresolved:
        logger.debug("Card %s skipped: unresolved references %s", template.identifier, unresolved)
        return

    score = card_score(template.score, [*filters, *metrics, *dimension_bindings])
    dimensions = [dimension_form(d) for d in template.dimensions]
    used_dimensions = collect_dimensions(
        [dimensions, [m.form for m in metrics], [f.form for f in filters], template.order_by]
    )
    if any(d not in context.dimensions for d in used_dimensions):
        logger.debug("Card %s skipped: order_by references an unbound dimension", template.identifier)
        return

    card_fields = template.model_dump(exclude={"score"})
    combinations = itertools.product(*(context.dimensions[d].matches for d in used_dimensions))

    emitted = 0
    for instantiation in combinations:
        if max_candidates is not None and emitted >= max_candidates:
            logger.debug("Card %s capped at %d candidates", template.identifier, max_candidates)
            return
        query = build_query(
            dict(zip(used_dimensions, instantiation)),
            context.database_id,
            context.root_table.id,
            filters,
            metrics,
            dimensions,
            template.limit,
            template.order_by,
            permissions=permissions,
            linked_tables=context.linked_tables,
        )
        if query is None:
            continue
        emitted += 1
        yield CardCandidate(**card_fields, score=score, query=query)
