"""The heuristic pipeline: rule selection, binding and card generation."""

from autodash.heuristics.binding import Binding, bind_dimensions, resolve_overloads
from autodash.heuristics.candidates import CardCandidate, card_score, generate_candidates
from autodash.heuristics.context import Context, build_context
from autodash.heuristics.matching import match_fields, match_fields_across
from autodash.heuristics.query import QuerySpec, build_query
from autodash.heuristics.references import register_reference, to_reference
from autodash.heuristics.selection import select_rule

__all__ = [
    "Binding",
    "CardCandidate",
    "Context",
    "QuerySpec",
    "bind_dimensions",
    "build_context",
    "build_query",
    "card_score",
    "generate_candidates",
    "match_fields",
    "match_fields_across",
    "register_reference",
    "resolve_overloads",
    "select_rule",
    "to_reference",
]
