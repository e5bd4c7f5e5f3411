"""Rule library: schemas, form helpers and YAML loading."""

from autodash.rules.forms import MAX_SCORE, collect_dimensions, is_dimension_form
from autodash.rules.loader import load_rules, parse_rule
from autodash.rules.schemas import CardTemplate, DimensionSpec, OverloadedDefinition, Rule

__all__ = [
    "MAX_SCORE",
    "CardTemplate",
    "DimensionSpec",
    "OverloadedDefinition",
    "Rule",
    "collect_dimensions",
    "is_dimension_form",
    "load_rules",
    "parse_rule",
]
