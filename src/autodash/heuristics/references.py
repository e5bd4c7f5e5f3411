"""Turn bound entities into references for a target template dialect.

Resolvers are looked up by ``(template_type, entity kind)``. Anything
without a registered resolver is passed through unchanged, so new
dialects or entity kinds are added by registering a function rather than
editing existing cases.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from autodash.metadata.models import FieldMetadata

QUERY = "query"

Resolver = Callable[[Any], Any]

_RESOLVERS: dict[tuple[str, type], Resolver] = {}


def register_reference(template_type: str, kind: type) -> Callable[[Resolver], Resolver]:
    """Register the resolver for ``kind`` entities in ``template_type`` templates."""

    def decorator(fn: Resolver) -> Resolver:
        _RESOLVERS[(template_type, kind)] = fn
        return fn

    return decorator


def to_reference(template_type: str, entity: Any) -> Any:
    resolver = _RESOLVERS.get((template_type, type(entity)))
    if resolver is None:
        return entity
    return resolver(entity)


@register_reference(QUERY, FieldMetadata)
def field_reference(field: FieldMetadata) -> list:
    """``["fk->", link, id]`` for fields reached through a linked table,
    ``["fk->", id, target]`` for foreign keys, ``["field-id", id]`` otherwise."""
    if field.link is not None:
        return ["fk->", field.link, field.id]
    if field.fk_target_field_id is not None:
        return ["fk->", field.id, field.fk_target_field_id]
    return ["field-id", field.id]
