"""Pick the rule that applies to a table."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from autodash.metadata.models import TableMetadata
from autodash.rules.schemas import Rule
from autodash.taxonomy import GENERIC_TABLE, TypeTaxonomy

logger = logging.getLogger(__name__)


def applicable_rules(rules: Sequence[Rule], table: TableMetadata, taxonomy: TypeTaxonomy) -> list[Rule]:
    """Rules whose table type is the table's entity type or one of its ancestors."""
    entity_type = table.entity_type or GENERIC_TABLE
    return [r for r in rules if taxonomy.is_subtype(entity_type, r.table_type)]


def select_rule(rules: Sequence[Rule], table: TableMetadata, taxonomy: TypeTaxonomy) -> Rule | None:
    """The most specific applicable rule, or None when no rule applies.

    Most specific means the rule's table type has the longest ancestor
    chain. Ties have no defined winner: the first tied rule in library
    order is returned and the tie is logged.
    """
    candidates = applicable_rules(rules, table, taxonomy)
    if not candidates:
        return None

    best = max(candidates, key=lambda r: taxonomy.ancestor_chain_length(r.table_type))
    best_length = taxonomy.ancestor_chain_length(best.table_type)
    tied = [r for r in candidates if taxonomy.ancestor_chain_length(r.table_type) == best_length]
    if len(tied) > 1:
        logger.warning(
            "Rules %s are equally specific for table %s; using %s",
            [r.title for r in tied],
            table.name,
            best.title,
        )
    return best
