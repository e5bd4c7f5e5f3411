"""Load rule definitions from YAML files.

Each ``*.yaml`` (or ``*.yml``) file in a rules directory holds one rule. Dimensions,
metrics, filters and cards are written as lists of single-key mappings so
that an identifier may be declared more than once (overloads)::

    table_type: TransactionTable
    title: Transactions overview
    dimensions:
      - Timestamp:
          field_type: CreationTimestamp
          score: 100
    metrics:
      - Count:
          metric: [count]
          score: 100
    cards:
      - ByMonth:
          title: Transactions per month
          metrics: [Count]
          dimensions: [Timestamp]
          score: 90
"""

from __future__ import annotations

from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from autodash.errors import InvalidRuleDefinition
from autodash.rules.schemas import CardTemplate, DimensionSpec, OverloadedDefinition, Rule

BUILTIN_LIBRARY = "library"
RULE_SUFFIXES = (".yaml", ".yml")


def _entries(value: Any, section: str, source: str | None) -> list[tuple[str, dict[str, Any]]]:
    """Flatten ``[{Id: body}, ...]`` (or ``{Id: body}``) into ``(Id, body)`` pairs."""
    if value is None:
        return []
    items = value if isinstance(value, list) else [value]
    pairs: list[tuple[str, dict[str, Any]]] = []
    for item in items:
        if not isinstance(item, dict):
            raise InvalidRuleDefinition(
                f"'{section}' entries must be mappings of identifier to definition", source
            )
        for identifier, body in item.items():
            if body is None:
                body = {}
            if not isinstance(body, dict):
                raise InvalidRuleDefinition(
                    f"'{section}.{identifier}' must be a mapping", source
                )
            pairs.append((str(identifier), body))
    return pairs


def _overloads(value: Any, section: str, form_key: str, source: str | None) -> list[dict[str, Any]]:
    definitions = []
    for identifier, body in _entries(value, section, source):
        if form_key not in body:
            raise InvalidRuleDefinition(f"'{section}.{identifier}' is missing '{form_key}'", source)
        definitions.append(
            {"identifier": identifier, "form": body[form_key], **{k: v for k, v in body.items() if k != form_key}}
        )
    return definitions


def parse_rule(data: Any, source: str | None = None) -> Rule:
    """Build a Rule from a parsed YAML mapping.

    Raises:
        InvalidRuleDefinition: if the mapping does not describe a valid rule
    """
    if not isinstance(data, dict):
        raise InvalidRuleDefinition("Rule must be a mapping", source)

    try:
        return Rule(
            table_type=data.get("table_type", "GenericTable"),
            title=data.get("title", ""),
            description=data.get("description"),
            dimensions=[
                DimensionSpec(identifier=identifier, **body)
                for identifier, body in _entries(data.get("dimensions"), "dimensions", source)
            ],
            metrics=[
                OverloadedDefinition(**d)
                for d in _overloads(data.get("metrics"), "metrics", "metric", source)
            ],
            filters=[
                OverloadedDefinition(**d)
                for d in _overloads(data.get("filters"), "filters", "filter", source)
            ],
            cards=[
                CardTemplate(identifier=identifier, **body)
                for identifier, body in _entries(data.get("cards"), "cards", source)
            ],
            source=source,
        )
    except (ValidationError, TypeError) as e:
        raise InvalidRuleDefinition(f"Invalid rule in {source or '<memory>'}: {e}", source) from e


def load_rule_file(path: Path) -> Rule:
    """Load one rule from a YAML file."""
    try:
        parsed = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise InvalidRuleDefinition(f"Malformed YAML in {path}: {e}", str(path)) from e
    return parse_rule(parsed, str(path))


def load_rules(path: str | Path | None = None) -> list[Rule]:
    """Load every rule in a directory; the built-in library when ``path`` is None.

    A missing directory yields no rules. Both ``.yaml`` and ``.yml`` files are
    read, in name order, which is also the order rule-selection ties fall
    back on.
    """
    if path is None:
        library = resources.files("autodash.rules").joinpath(BUILTIN_LIBRARY)
        with resources.as_file(library) as library_dir:
            return load_rules(library_dir)

    target = Path(path)
    if not target.exists():
        return []
    if target.is_file():
        return [load_rule_file(target)]

    files = sorted(p for p in target.iterdir() if p.is_file() and p.suffix in RULE_SUFFIXES)
    return [load_rule_file(p) for p in files]
