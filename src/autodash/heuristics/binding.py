"""Bind rule dimensions to fields and resolve overloaded metrics/filters."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from autodash.heuristics.matching import field_candidates
from autodash.metadata.models import FieldMetadata
from autodash.rules.forms import collect_dimensions
from autodash.rules.schemas import DimensionSpec, OverloadedDefinition

if TYPE_CHECKING:
    from autodash.heuristics.context import Context


@dataclass(frozen=True)
class Binding:
    """Fields matched by one dimension declaration, with its score."""

    matches: tuple[FieldMetadata, ...]
    field_type: str
    score: float
    table_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "matches": [f.name for f in self.matches],
            "field_type": self.field_type,
            "table_type": self.table_type,
            "score": self.score,
        }


def make_binding(context: "Context", spec: DimensionSpec) -> Binding:
    return Binding(
        matches=tuple(field_candidates(context, spec.field_type, spec.table_type)),
        field_type=spec.field_type,
        score=spec.score,
        table_type=spec.table_type,
    )


def bind_dimensions(context: "Context", specs: Iterable[DimensionSpec]) -> dict[str, Binding]:
    """Resolve each dimension declaration to its matching fields.

    Declarations that match nothing are dropped. When an identifier is
    declared more than once, the non-empty binding with the highest score
    wins; on equal scores the first declaration is kept.
    """
    bindings: dict[str, Binding] = {}
    for spec in specs:
        binding = make_binding(context, spec)
        if not binding.matches:
            continue
        current = bindings.get(spec.identifier)
        if current is None or binding.score > current.score:
            bindings[spec.identifier] = binding
    return bindings


def is_eligible(definition: OverloadedDefinition, dimensions: Mapping[str, Binding]) -> bool:
    """Whether every dimension ``definition`` references is bound to at least one field."""
    return all(
        identifier in dimensions and dimensions[identifier].matches
        for identifier in collect_dimensions(definition.form)
    )


def resolve_overloads(
    context: "Context", definitions: Iterable[OverloadedDefinition]
) -> dict[str, OverloadedDefinition]:
    """Pick, per identifier, the highest-scoring definition whose dimensions are all bound.

    Identifiers without any eligible definition are left out. Ties keep the
    definition declared first.
    """
    resolved: dict[str, OverloadedDefinition] = {}
    for definition in definitions:
        if not is_eligible(definition, context.dimensions):
            continue
        current = resolved.get(definition.identifier)
        if current is None or definition.score > current.score:
            resolved[definition.identifier] = definition
    return resolved
